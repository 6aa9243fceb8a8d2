# src/analyzer/services/section_detect_service.py
import logging
import re
from typing import Dict, List, Optional, Pattern, Tuple

from bs4 import BeautifulSoup, Tag

from analyzer.model import PageSection, SectionType
from parser.core import Cascade, cascade_rule
from parser.utils.selector_utils import class_list, class_string, element_index, element_selector

logger = logging.getLogger(__name__)


def _patterns(*expressions: str) -> Tuple[Pattern, ...]:
    return tuple(re.compile(e, re.I) for e in expressions)


# Class/id signatures per section type. Order matters: the first type with a hit wins.
SECTION_PATTERNS: Dict[SectionType, Tuple[Pattern, ...]] = {
    'header': _patterns(r"header", r"nav", r"navbar", r"top-bar"),
    'hero': _patterns(r"hero", r"banner", r"jumbotron", r"masthead", r"splash", r"above-fold"),
    'features': _patterns(r"feature", r"benefit", r"service", r"what-we", r"why-choose"),
    'benefits': _patterns(r"benefit", r"advantage", r"why-us", r"value"),
    'testimonials': _patterns(r"testimonial", r"review", r"feedback", r"customer-say", r"success-stor"),
    'social-proof': _patterns(r"social-proof", r"trust", r"client", r"partner", r"logo", r"brand"),
    'pricing': _patterns(r"pricing", r"price", r"plan", r"package", r"cost"),
    'faq': _patterns(r"faq", r"question", r"accordion", r"ask"),
    'cta': _patterns(r"cta", r"call-to-action", r"signup", r"register", r"get-started", r"join"),
    'footer': _patterns(r"footer", r"bottom", r"copyright"),
    'form': _patterns(r"form", r"contact", r"subscribe", r"newsletter", r"signup-form"),
    'gallery': _patterns(r"gallery", r"portfolio", r"showcase", r"work"),
    'video': _patterns(r"video", r"demo", r"watch", r"player"),
}

# Text signatures, checked against the first 500 characters of the section text.
CONTENT_PATTERNS: Dict[SectionType, Tuple[Pattern, ...]] = {
    'testimonials': (re.compile(r'"[^"]{20,}"'), re.compile(r"said\s", re.I),
                     re.compile(r"\d+\s*stars?", re.I), re.compile("★")),
    'faq': (re.compile(r"\?\s*$"), re.compile(r"frequently\s+asked", re.I)),
    'pricing': (re.compile(r"\$\d+"), re.compile(r"€\d+"), re.compile(r"£\d+"),
                re.compile(r"per\s+month", re.I), re.compile(r"/mo", re.I),
                re.compile(r"free\s+trial", re.I)),
    'cta': _patterns(r"sign\s*up", r"get\s+started", r"join\s+now", r"register", r"subscribe"),
}

SECTION_LIKE = re.compile(r"section|container|wrapper|block|area|zone|row|module", re.I)


@cascade_rule("class-id-signature")
def class_id_rule(el: Tag) -> Optional[SectionType]:
    classes = class_string(el).lower()
    el_id = (el.get("id") or "").lower()
    for section_type, patterns in SECTION_PATTERNS.items():
        if any(p.search(classes) or p.search(el_id) for p in patterns):
            return section_type
    return None


@cascade_rule("content-signature")
def content_rule(el: Tag) -> Optional[SectionType]:
    text = el.get_text().lower()[:500]
    for section_type, patterns in CONTENT_PATTERNS.items():
        if any(p.search(text) for p in patterns):
            return section_type
    return None


@cascade_rule("form-presence")
def form_rule(el: Tag) -> Optional[SectionType]:
    return 'form' if el.find("form") else None


@cascade_rule("video-presence")
def video_rule(el: Tag) -> Optional[SectionType]:
    if el.find("video"):
        return 'video'
    for iframe in el.find_all("iframe", src=True):
        if "youtube" in iframe["src"] or "vimeo" in iframe["src"]:
            return 'video'
    return None


@cascade_rule("image-gallery")
def gallery_rule(el: Tag) -> Optional[SectionType]:
    return 'gallery' if len(el.find_all("img")) > 3 else None


@cascade_rule("leading-h1")
def hero_rule(el: Tag) -> Optional[SectionType]:
    return 'hero' if el.find("h1") and element_index(el) < 3 else None


SECTION_TYPE_CASCADE: Cascade[Tag, SectionType] = Cascade([
    class_id_rule,
    content_rule,
    form_rule,
    video_rule,
    gallery_rule,
    hero_rule,
])


def detect_section_type(el: Tag) -> SectionType:
    return SECTION_TYPE_CASCADE.evaluate(el) or 'unknown'


def looks_like_section(el: Tag) -> bool:
    combined = f"{class_string(el)} {el.get('id') or ''}"
    if SECTION_LIKE.search(combined):
        return True
    text = el.get_text().strip()
    return len(text) > 100 and el.find(["h1", "h2", "h3", "p", "img", "form"]) is not None


class SectionDetectService:
    """
    Segments a page into ordered semantic sections.

    Strategy cascade:
      1. semantic tags (header, nav, sections) and section-looking container divs;
      2. if that yields fewer than `min_sections`, any top-level div/main/article
         with at least 100 characters of markup;
      3. if that yields nothing, the whole body as one `unknown` section.

    Sections may overlap or nest; containment is not deduplicated.
    """

    def __init__(self, soup: BeautifulSoup, min_sections: int = 3):
        self.soup = soup
        self.min_sections = min_sections
        self.root: Tag = soup.body or soup

    def detect_sections(self) -> List[PageSection]:
        sections: List[PageSection] = []

        def add(el: Tag, section_type: SectionType) -> None:
            sections.append(self._create_section(el, section_type, len(sections)))

        for el in self.soup.find_all("header"):
            add(el, 'header')

        for el in self.soup.find_all("nav"):
            if el.find_parent("header") is None:
                add(el, 'header')

        for el in self.soup.find_all("section"):
            if self._is_content_section(el):
                add(el, detect_section_type(el))

        for el in self.soup.find_all("div"):
            if not self._is_major_div(el):
                continue
            if len(el.find_all(True, recursive=False)) < 2:
                continue
            if looks_like_section(el):
                add(el, detect_section_type(el))

        for el in self.soup.find_all("footer"):
            add(el, 'footer')

        if len(sections) < self.min_sections:
            logger.debug("Only %d section(s) found, using fallback detection.", len(sections))
            return self._detect_sections_fallback()

        return sorted(sections, key=lambda s: s.order)

    def _detect_sections_fallback(self) -> List[PageSection]:
        sections: List[PageSection] = []
        for el in self.root.find_all(["div", "main", "article"], recursive=False):
            if len(el.decode_contents()) < 100:
                continue
            sections.append(self._create_section(el, detect_section_type(el), len(sections)))

        if not sections:
            sections.append(PageSection(
                id="section-1",
                type='unknown',
                selector='body',
                order=0,
                html=self.root.decode_contents(),
            ))
        return sections

    def _is_content_section(self, el: Tag) -> bool:
        parent = el.parent
        if el.find_parent("main") is not None or parent is self.root:
            return True
        return parent is not None and parent.name == "div" and parent.parent is self.root

    def _is_major_div(self, el: Tag) -> bool:
        parent = el.parent
        if parent is self.root:
            return True
        return parent is not None and (parent.name == "main" or "container" in class_list(parent))

    @staticmethod
    def _create_section(el: Tag, section_type: SectionType, order: int) -> PageSection:
        return PageSection(
            id=f"section-{order + 1}",
            type=section_type,
            selector=element_selector(el),
            order=order,
            html=str(el),
        )
