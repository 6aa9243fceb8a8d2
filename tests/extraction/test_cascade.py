# tests/extraction/test_cascade.py
from parser.core import Cascade, cascade_rule


@cascade_rule("even")
def even_rule(n):
    return "even" if n % 2 == 0 else None


@cascade_rule("large")
def large_rule(n):
    return "large" if n > 100 else None


def unnamed_rule(n):
    return "fallback"


def test_first_match_wins():
    cascade = Cascade([even_rule, large_rule, unnamed_rule])

    assert cascade.evaluate(200) == "even"
    assert cascade.evaluate(201) == "large"
    assert cascade.evaluate(3) == "fallback"


def test_trace_and_names():
    cascade = Cascade([even_rule, large_rule, unnamed_rule])

    assert cascade.trace(201) == ("large", "large")
    assert cascade.trace(3) == ("fallback", "unnamed_rule")
    assert cascade.names == ["even", "large", "unnamed_rule"]
    assert Cascade([even_rule]).trace(1) == (None, None)
