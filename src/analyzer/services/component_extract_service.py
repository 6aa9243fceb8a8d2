# src/analyzer/services/component_extract_service.py
import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from analyzer.model import (
    AnalyzerFormField,
    ButtonComponent,
    ButtonType,
    ComponentMap,
    Dimensions,
    FormComponent,
    HeadlineComponent,
    ImageComponent,
    ListComponent,
    ListType,
    PageSection,
    TextComponent,
    VideoComponent,
)
from parser.utils.selector_utils import class_string, closest, element_index, element_selector

logger = logging.getLogger(__name__)

URGENCY_WORDS = (
    'now', 'today', 'limited', 'hurry', 'fast', 'instant', 'immediately',
    "don't miss", 'last chance', 'ending soon', 'act fast', 'urgent',
)

SUBHEADLINE_SELECTOR = (
    'h1 + p, h2 + p, h1 + .subheadline, h2 + .subheadline, '
    '[class*="subhead"], [class*="tagline"], [class*="subtitle"]'
)
BUTTON_SELECTOR = (
    'button, a.btn, a.button, a[class*="btn"], a[class*="cta"], '
    'input[type="submit"], [role="button"]'
)
HERO_CONTAINER = '[class*="hero"], [class*="banner"], header, .jumbotron'

CTA_TEXT = re.compile(r"sign\s*up|register|get\s+started|buy|order|subscribe|join|download|start", re.I)
CTA_CLASS = re.compile(r"cta|primary|main|action", re.I)
ICON_SRC = re.compile(r"icon|logo|badge|sprite", re.I)
ICON_CLASS = re.compile(r"icon|logo", re.I)
CHECK_LIST_CLASS = re.compile(r"check|tick|done", re.I)
LEADING_INT = re.compile(r"^\s*(\d+)")


def _to_int(value: Optional[str]) -> int:
    match = LEADING_INT.match(value or "")
    return int(match.group(1)) if match else 0


def _word_count(text: str) -> int:
    return len(text.split())


def determine_button_type(el: Tag, text: str) -> ButtonType:
    if CTA_TEXT.search(text.lower()):
        return 'cta'
    if el.name in ('input', 'button') and (el.get('type') or '').lower() == 'submit':
        return 'submit'
    if el.find_parent(['nav', 'header', 'footer']) is not None:
        return 'navigation'
    if CTA_CLASS.search(class_string(el)):
        return 'cta'
    return 'secondary'


class ComponentExtractService:
    """
    Extracts typed components (headlines, subheadlines, paragraphs, buttons,
    images, forms, lists, videos). Each component carries the id of the first
    detected section whose selector contains it.
    """

    def __init__(self, soup: BeautifulSoup, sections: List[PageSection]):
        self.soup = soup
        self.sections = sections

    def extract_components(self) -> ComponentMap:
        components = ComponentMap(
            headlines=self.extract_headlines(),
            subheadlines=self.extract_subheadlines(),
            paragraphs=self.extract_paragraphs(),
            buttons=self.extract_buttons(),
            images=self.extract_images(),
            forms=self.extract_forms(),
            lists=self.extract_lists(),
            videos=self.extract_videos(),
        )
        logger.debug(
            "Components: %d headline(s), %d button(s), %d image(s), %d list(s).",
            len(components.headlines), len(components.buttons),
            len(components.images), len(components.lists),
        )
        return components

    def find_parent_section(self, el: Tag) -> Optional[str]:
        for section in self.sections:
            if closest(el, section.selector) is not None:
                return section.id
        return None

    def extract_headlines(self) -> List[HeadlineComponent]:
        headlines: List[HeadlineComponent] = []
        found_main = False
        for el in self.soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
            text = el.get_text().strip()
            if len(text) < 2:
                continue
            level = int(el.name[1])
            is_main = level == 1 and not found_main
            found_main = found_main or is_main
            headlines.append(HeadlineComponent(
                id=f"headline-{len(headlines) + 1}",
                selector=element_selector(el),
                section_id=self.find_parent_section(el),
                text=text,
                level=level,
                is_main_headline=is_main,
            ))
        return headlines

    def extract_subheadlines(self) -> List[TextComponent]:
        subheadlines: List[TextComponent] = []
        for el in self.soup.select(SUBHEADLINE_SELECTOR):
            text = el.get_text().strip()
            if len(text) < 10 or len(text) > 300:
                continue
            subheadlines.append(TextComponent(
                id=f"subheadline-{len(subheadlines) + 1}",
                selector=element_selector(el),
                section_id=self.find_parent_section(el),
                text=text,
                word_count=_word_count(text),
            ))
        return subheadlines

    def extract_paragraphs(self) -> List[TextComponent]:
        paragraphs: List[TextComponent] = []
        for el in self.soup.find_all("p"):
            text = el.get_text().strip()
            if len(text) < 20:
                continue
            if el.find_parent(["form", "button", "a"]) is not None:
                continue
            paragraphs.append(TextComponent(
                id=f"paragraph-{len(paragraphs) + 1}",
                selector=element_selector(el),
                section_id=self.find_parent_section(el),
                text=text,
                word_count=_word_count(text),
            ))
        return paragraphs

    def extract_buttons(self) -> List[ButtonComponent]:
        buttons: List[ButtonComponent] = []
        seen = set()
        for el in self.soup.select(BUTTON_SELECTOR):
            text = el.get_text().strip() or (el.get("value") or "").strip()
            if len(text) < 2:
                continue
            key = text.lower()
            if key in seen:
                continue
            seen.add(key)
            buttons.append(ButtonComponent(
                id=f"button-{len(buttons) + 1}",
                selector=element_selector(el),
                section_id=self.find_parent_section(el),
                text=text,
                href=el.get("href"),
                type=determine_button_type(el, text),
                has_urgency=any(word in key for word in URGENCY_WORDS),
            ))
        return buttons

    def extract_images(self) -> List[ImageComponent]:
        images: List[ImageComponent] = []
        for el in self.soup.find_all("img"):
            src = el.get("src") or el.get("data-src") or ""
            if not src or src.startswith("data:image/svg") or "pixel" in src or "spacer" in src:
                continue

            width = _to_int(el.get("width"))
            height = _to_int(el.get("height"))
            is_hero = closest(el, HERO_CONTAINER) is not None or (width > 600 and element_index(el) < 3)
            is_icon = (0 < width < 64) or bool(ICON_SRC.search(src)) or bool(ICON_CLASS.search(class_string(el)))

            images.append(ImageComponent(
                id=f"image-{len(images) + 1}",
                selector=element_selector(el),
                section_id=self.find_parent_section(el),
                src=src,
                alt=el.get("alt"),
                is_hero=is_hero,
                is_icon=is_icon,
                dimensions=Dimensions(width=width, height=height) if width and height else None,
            ))
        return images

    def extract_forms(self) -> List[FormComponent]:
        forms: List[FormComponent] = []
        for form in self.soup.find_all("form"):
            fields: List[AnalyzerFormField] = []
            for field in form.find_all(["input", "select", "textarea"]):
                field_type = field.get("type") or field.name
                if field_type in ("hidden", "submit"):
                    continue
                label = ""
                field_id = field.get("id")
                if field_id:
                    label_el = self.soup.find("label", attrs={"for": field_id})
                    label = label_el.get_text().strip() if label_el else ""
                if not label:
                    label = field.get("placeholder") or ""
                fields.append(AnalyzerFormField(
                    name=field.get("name") or "",
                    type=field_type,
                    label=label or None,
                    required=field.has_attr("required"),
                ))

            submit = form.select_one('button[type="submit"], input[type="submit"]')
            submit_text = ""
            if submit is not None:
                submit_text = submit.get_text().strip() or submit.get("value") or ""

            forms.append(FormComponent(
                id=f"form-{len(forms) + 1}",
                selector=element_selector(form),
                section_id=self.find_parent_section(form),
                action=form.get("action"),
                method=form.get("method") or "GET",
                fields=fields,
                submit_button=submit_text or None,
            ))
        return forms

    def extract_lists(self) -> List[ListComponent]:
        lists: List[ListComponent] = []
        for el in self.soup.find_all(["ul", "ol"]):
            if el.find_parent(["nav", "header", "footer"]) is not None:
                continue
            list_items = el.find_all("li", recursive=False)
            items = [t for t in (li.get_text().strip() for li in list_items) if t]
            if len(items) < 2:
                continue

            list_type: ListType = 'numbered' if el.name == 'ol' else 'bullet'
            first_li = list_items[0] if list_items else None
            has_icon = first_li is not None and first_li.select_one("svg, i, .icon") is not None
            if CHECK_LIST_CLASS.search(class_string(el)) or has_icon:
                list_type = 'check'

            lists.append(ListComponent(
                id=f"list-{len(lists) + 1}",
                selector=element_selector(el),
                section_id=self.find_parent_section(el),
                items=items,
                type=list_type,
            ))
        return lists

    def extract_videos(self) -> List[VideoComponent]:
        videos: List[VideoComponent] = []

        def add(el: Tag, src: str, video_type, thumbnail: Optional[str] = None) -> None:
            videos.append(VideoComponent(
                id=f"video-{len(videos) + 1}",
                selector=element_selector(el),
                section_id=self.find_parent_section(el),
                src=src,
                type=video_type,
                thumbnail=thumbnail,
            ))

        for el in self.soup.find_all("video"):
            source = el.find("source")
            src = el.get("src") or (source.get("src") if source else None) or ""
            add(el, src, 'html5', el.get("poster"))

        for el in self.soup.find_all("iframe"):
            src = el.get("src") or ""
            if "youtube" in src or "youtu.be" in src:
                add(el, src, 'youtube')
            elif "vimeo" in src:
                add(el, src, 'vimeo')
            elif "video" in src or "player" in src:
                add(el, src, 'embed')

        return videos
