# src/parser/core.py
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

S = TypeVar("S")
T = TypeVar("T")

# A rule inspects the subject and returns an outcome, or None when it does not apply.
Rule = Callable[[S], Optional[T]]


def cascade_rule(name: str):
    """
    Decorator naming a cascade rule, so traces and tests can refer to a rule
    by its name rather than its position.
    """
    def decorator(func):
        func.rule_name = name
        return func
    return decorator


class Cascade(Generic[S, T]):
    """
    An ordered list of rules evaluated first-match-wins.

    The order of `rules` is the precedence: an earlier rule that produces an
    outcome hides every later one.
    """

    def __init__(self, rules: Sequence[Rule]):
        self.rules: List[Rule] = list(rules)

    @property
    def names(self) -> List[str]:
        return [getattr(rule, "rule_name", rule.__name__) for rule in self.rules]

    def evaluate(self, subject: S) -> Optional[T]:
        outcome, _ = self.trace(subject)
        return outcome

    def trace(self, subject: S) -> Tuple[Optional[T], Optional[str]]:
        """Returns the first outcome together with the name of the rule that produced it."""
        for rule in self.rules:
            outcome = rule(subject)
            if outcome is not None:
                return outcome, getattr(rule, "rule_name", rule.__name__)
        return None, None
