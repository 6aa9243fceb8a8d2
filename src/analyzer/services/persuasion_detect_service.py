# src/analyzer/services/persuasion_detect_service.py
import logging
import re
from typing import Dict, List, Literal, Pattern, Set, Tuple

from bs4 import BeautifulSoup, Tag

from analyzer.model import PersuasionElement, PersuasionType, Strength
from parser.utils.selector_utils import class_string, element_selector

logger = logging.getLogger(__name__)

MatchSource = Literal['text', 'class']


def _rx(*expressions: str, flags: int = re.I) -> Tuple[Pattern, ...]:
    return tuple(re.compile(e, flags) for e in expressions)


# (text patterns, class patterns) per technique, checked in this order.
PERSUASION_PATTERNS: Dict[PersuasionType, Tuple[Tuple[Pattern, ...], Tuple[Pattern, ...]]] = {
    'urgency': (
        _rx(r"limited\s+time", r"act\s+(now|fast|quickly)", r"don'?t\s+(miss|wait)", r"hurry",
            r"ends?\s+(soon|today|tonight)", r"last\s+chance", r"before\s+it'?s?\s+too\s+late",
            r"only\s+\d+\s+(hours?|days?|minutes?)\s+left", r"expires?\s+(soon|today)"),
        _rx(r"urgent", r"hurry", r"limited"),
    ),
    'scarcity': (
        _rx(r"only\s+\d+\s+(left|remaining|available|spots?)", r"\d+\s+(people\s+)?(viewing|watching)",
            r"selling\s+fast", r"almost\s+(sold\s+out|gone)",
            r"limited\s+(spots?|seats?|availability|stock)", r"few\s+(left|remaining)",
            r"low\s+stock", r"high\s+demand"),
        _rx(r"scarcity", r"stock", r"inventory"),
    ),
    'social-proof': (
        _rx(r"\d+[,.]?\d*\+?\s*(customers?|users?|clients?|people|members?|subscribers?)",
            r"join\s+\d+[,.]?\d*", r"trusted\s+by", r"used\s+by", r"loved\s+by",
            r"\d+\s*\+?\s*(reviews?|ratings?|testimonials?)",
            r"\d+(\.\d+)?\s*(out\s+of\s+\d+\s+)?stars?", r"★+", r"⭐+"),
        _rx(r"testimonial", r"review", r"social-proof", r"customer", r"rating"),
    ),
    'authority': (
        _rx(r"as\s+(seen|featured)\s+(on|in)", r"featured\s+in", r"trusted\s+by\s+(leading|top|major)",
            r"award[- ]?winning", r"certified", r"official", r"expert", r"years?\s+of\s+experience",
            r"industry\s+leader"),
        _rx(r"authority", r"press", r"media", r"featured", r"logo-bar", r"partner"),
    ),
    'trust-badge': (
        _rx(r"secure\s+(checkout|payment|transaction)", r"ssl\s+(secured?|encrypted)", r"100%\s+secure",
            r"money[- ]?back", r"verified", r"certified", r"protected", r"safe\s+&?\s*secure"),
        _rx(r"trust", r"badge", r"secure", r"ssl", r"payment-icon", r"security"),
    ),
    'guarantee': (
        _rx(r"money[- ]?back\s+guarantee", r"\d+[- ]?day\s+(money[- ]?back\s+)?guarantee",
            r"satisfaction\s+guarantee", r"risk[- ]?free", r"no\s+risk", r"full\s+refund",
            r"100%\s+guarantee", r"no\s+questions?\s+asked"),
        _rx(r"guarantee", r"refund", r"risk-free"),
    ),
    'fomo': (
        _rx(r"\d+\s+people\s+(are\s+)?(viewing|watching|looking)", r"in\s+your\s+area",
            r"others?\s+(bought|purchased|ordered)", r"popular\s+choice", r"trending",
            r"best[- ]?seller", r"most\s+popular", r"don'?t\s+be\s+left\s+(out|behind)"),
        _rx(r"fomo", r"notification", r"popup", r"viewer"),
    ),
    'countdown': (
        _rx(r"\d+:\d+:\d+", r"\d+\s*:\s*\d+", r"timer", r"countdown", r"time\s+remaining"),
        _rx(r"countdown", r"timer", r"clock", r"flipclock"),
    ),
    'discount': (
        _rx(r"\d+%\s*off", r"save\s+\$?\d+", r"was\s+\$?\d+.*now\s+\$?\d+", r"special\s+(offer|price|deal)",
            r"discount", r"sale\s+price", r"reduced", r"original\s+price.*\$?\d+"),
        _rx(r"discount", r"sale", r"offer", r"price-drop", r"savings"),
    ),
    'free-offer': (
        _rx(r"free\s+(trial|shipping|bonus|gift|download|access)", r"try\s+(it\s+)?free",
            r"get\s+(it\s+)?free", r"no\s+(credit\s+card|payment)\s+required", r"\$0",
            r"at\s+no\s+cost", r"complimentary", r"bonus\s*:"),
        _rx(r"free", r"bonus", r"trial", r"gift"),
    ),
}

SCANNED_TAGS = ["p", "span", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "a", "button", "label"]
COUNTDOWN_SELECTOR = (
    '[class*="countdown"], [class*="timer"], [id*="countdown"], [id*="timer"], [data-countdown]'
)
TRUST_KEYWORDS = (
    'trust', 'secure', 'ssl', 'verified', 'badge', 'guarantee', 'mcafee', 'norton',
    'stripe', 'paypal', 'visa', 'mastercard',
)
LARGE_NUMBER = re.compile(r"\d{3,}")
PERCENTAGE = re.compile(r"\d+%")
STAR_OR_BIG_COUNT = re.compile(r"★|⭐|\d{4,}")


def determine_strength(technique: PersuasionType, content: str, matched_by: MatchSource) -> Strength:
    """Class matches and concrete numbers read as deliberate, so they score strong."""
    if matched_by == 'class':
        return 'strong'
    if LARGE_NUMBER.search(content) or PERCENTAGE.search(content):
        return 'strong'
    if technique in ('countdown', 'guarantee'):
        return 'strong'
    if technique in ('scarcity', 'urgency'):
        return 'strong' if len(content) > 30 else 'medium'
    if technique == 'social-proof':
        return 'strong' if STAR_OR_BIG_COUNT.search(content) else 'medium'
    return 'medium'


class PersuasionDetectService:
    """
    Matches element text and class names against the technique tables, then
    runs two dedicated scans for countdown timers and trust-badge images.
    """

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup
        self._elements: List[PersuasionElement] = []

    def detect_persuasion_elements(self) -> List[PersuasionElement]:
        self._elements = []
        seen: Set[str] = set()

        for el in self.soup.find_all(SCANNED_TAGS):
            if el.find_parent(["script", "style", "noscript"]) is not None:
                continue
            text = el.get_text().strip()
            classes = class_string(el)
            if not text and not classes:
                continue

            for technique, (text_patterns, class_patterns) in PERSUASION_PATTERNS.items():
                if any(p.search(text) for p in text_patterns):
                    key = f"{technique}-{text[:50]}"
                    if key not in seen:
                        seen.add(key)
                        self._add(el, technique, text, 'text')

                if any(p.search(classes) for p in class_patterns):
                    key = f"{technique}-class-{classes[:50]}"
                    if key not in seen:
                        seen.add(key)
                        self._add(el, technique, text or classes, 'class')

        self._detect_countdown_timers()
        self._detect_trust_badge_images()

        logger.debug("Detected %d persuasion element(s).", len(self._elements))
        return list(self._elements)

    def _add(self, el: Tag, technique: PersuasionType, content: str, matched_by: MatchSource) -> None:
        self._append(el, technique, content[:200], determine_strength(technique, content, matched_by))

    def _append(self, el: Tag, technique: PersuasionType, content: str, strength: Strength) -> None:
        self._elements.append(PersuasionElement(
            id=f"persuasion-{len(self._elements) + 1}",
            type=technique,
            selector=element_selector(el),
            content=content,
            strength=strength,
        ))

    def _detect_countdown_timers(self) -> None:
        for el in self.soup.select(COUNTDOWN_SELECTOR):
            text = el.get_text().strip()
            self._append(el, 'countdown', text[:200] or 'Countdown timer', 'strong')

    def _detect_trust_badge_images(self) -> None:
        for el in self.soup.find_all("img"):
            src = (el.get("src") or "").lower()
            alt = (el.get("alt") or "").lower()
            classes = class_string(el).lower()
            if any(kw in src or kw in alt or kw in classes for kw in TRUST_KEYWORDS):
                self._append(el, 'trust-badge', alt or 'Trust badge image', 'strong')
