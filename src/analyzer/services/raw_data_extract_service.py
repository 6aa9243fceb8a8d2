# src/analyzer/services/raw_data_extract_service.py
import logging
import re
from typing import List, NamedTuple, Optional

from bs4 import BeautifulSoup

from analyzer.model import DetectedImage, RawFormData, RawPageData
from analyzer.services.quiz_script_service import QuizScriptService
from analyzer.utils.script_utils import script_text
from parser.core import Cascade, cascade_rule
from parser.utils.selector_utils import class_string

logger = logging.getLogger(__name__)

BUTTON_SELECTOR = 'button, a.btn, a.button, [class*="btn"], [class*="cta"], input[type="submit"]'
CSS_URL = re.compile(r"url\(['\"]?([^'\")\s]+)['\"]?\)")
MULTI_STEP_SCRIPT = re.compile(r"step|question|quiz|slide|activeIndex|currentStep|showStep|nextStep", re.I)
SCRIPT_EXCERPT_CHARS = 2000

REDIRECT_ASSIGNMENT = re.compile(
    r"(?:window\.location\.href|location\.href|redirect(?:Url|URL)?|REDIRECT_URL)\s*=\s*[\"']([^\"']+)[\"']"
)
TRACKING_ANCHOR_SELECTORS = (
    'a[href*="click"]', 'a[href*="track"]', 'a[href*="go."]', 'a[href*="redirect"]',
    'a[href*="?sub"]', 'a[href*="?ref"]', 'a[href*="?aff"]',
)
CTA_ANCHOR_TEXT = re.compile(r"continue|next|submit|start|sign.?up|register|join|yes|find", re.I)

HERO_IMAGE = re.compile(r"model|woman|girl|man|person|profile|avatar|photo", re.I)
BADGE_IMAGE = re.compile(r"icon|badge|check|star|verified|trust|secure", re.I)
DECORATIVE_IMAGE = re.compile(r"leaf|snow|pattern|bg|background|decor", re.I)
LOGO_IMAGE = re.compile(r"logo", re.I)


class TrackingUrlSubject(NamedTuple):
    soup: BeautifulSoup
    html: str


def _absolute(href: Optional[str]) -> Optional[str]:
    return href if href and href != '#' and href.startswith('http') else None


@cascade_rule("redirect-assignment")
def redirect_assignment_rule(subject: TrackingUrlSubject) -> Optional[str]:
    match = REDIRECT_ASSIGNMENT.search(subject.html)
    if match and match.group(1) != '#':
        return match.group(1)
    return None


@cascade_rule("tracking-anchor")
def tracking_anchor_rule(subject: TrackingUrlSubject) -> Optional[str]:
    for selector in TRACKING_ANCHOR_SELECTORS:
        anchor = subject.soup.select_one(selector)
        href = _absolute(anchor.get("href")) if anchor is not None else None
        if href:
            return href
    return None


@cascade_rule("cta-text-anchor")
def cta_text_anchor_rule(subject: TrackingUrlSubject) -> Optional[str]:
    for anchor in subject.soup.find_all("a"):
        if CTA_ANCHOR_TEXT.search(anchor.get_text()):
            href = _absolute(anchor.get("href"))
            if href:
                return href
    return None


@cascade_rule("form-action")
def form_action_rule(subject: TrackingUrlSubject) -> Optional[str]:
    form = subject.soup.find("form", action=True)
    return _absolute(form["action"]) if form is not None else None


TRACKING_URL_CASCADE: Cascade[TrackingUrlSubject, str] = Cascade([
    redirect_assignment_rule,
    tracking_anchor_rule,
    cta_text_anchor_rule,
    form_action_rule,
])


def categorize_images(images: List[str], background_images: List[str]) -> List[DetectedImage]:
    """Background images first, then <img> sources classified by URL keywords."""
    result = [
        DetectedImage(url=url, type='background', description='Background/decorative image',
                      position='background', is_required=False)
        for url in background_images
    ]

    for index, url in enumerate(images):
        if HERO_IMAGE.search(url):
            image = DetectedImage(url=url, type='hero', description='Hero/model image',
                                  position='hook', is_required=True)
        elif BADGE_IMAGE.search(url):
            image = DetectedImage(url=url, type='badge', description='Trust badge or icon',
                                  position='cta', is_required=False)
        elif DECORATIVE_IMAGE.search(url):
            image = DetectedImage(url=url, type='decorative', description='Decorative element',
                                  position='background', is_required=False)
        elif LOGO_IMAGE.search(url):
            image = DetectedImage(url=url, type='icon', description='Logo',
                                  position='hook', is_required=False)
        elif index == 0:
            image = DetectedImage(url=url, type='hero', description='Primary image (likely hero)',
                                  position='hook', is_required=True)
        else:
            image = DetectedImage(url=url, type='decorative', description='Supporting image',
                                  position='floating', is_required=False)
        result.append(image)
    return result


class RawDataExtractService:
    """Flat copy inventory of a page: the input to component analysis."""

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup

    def extract_raw_data(self) -> RawPageData:
        js_content = script_text(self.soup)
        images, background_images = self._images()
        return RawPageData(
            headlines=self._headlines(),
            buttons=self._buttons(),
            images=images,
            background_images=background_images,
            forms=self._forms(),
            paragraphs=self._paragraphs(),
            lists=self._lists(),
            has_multi_step=MULTI_STEP_SCRIPT.search(js_content) is not None,
            script_excerpt=js_content[:SCRIPT_EXCERPT_CHARS],
            quiz_data=QuizScriptService(js_content).extract_quiz_data(),
        )

    def detect_tracking_url(self) -> str:
        url, rule = TRACKING_URL_CASCADE.trace(TrackingUrlSubject(self.soup, str(self.soup)))
        if url:
            logger.debug("Tracking URL found by '%s': %s", rule, url)
        return url or ""

    def _headlines(self) -> List[str]:
        headlines = []
        for el in self.soup.find_all(["h1", "h2", "h3", "h4"]):
            text = el.get_text().strip()
            if len(text) > 2:
                headlines.append(text)
        return headlines

    def _buttons(self) -> List[str]:
        buttons: List[str] = []
        for el in self.soup.select(BUTTON_SELECTOR):
            text = el.get_text().strip() or el.get("value") or ""
            if len(text) > 1:
                buttons.append(text)

        for el in self.soup.find_all("a"):
            classes = class_string(el)
            text = el.get_text().strip()
            if text and any(marker in classes for marker in ('btn', 'button', 'cta')) and text not in buttons:
                buttons.append(text)
        return buttons

    def _images(self):
        images: List[str] = []
        for el in self.soup.find_all("img"):
            src = el.get("src") or el.get("data-src")
            if src and 'data:image' not in src and 'pixel' not in src and 'tracking' not in src:
                images.append(src)

        background_images: List[str] = []
        for el in self.soup.select('[style*="background"]'):
            match = CSS_URL.search(el.get("style") or "")
            if match:
                background_images.append(match.group(1))
        for style in self.soup.find_all("style"):
            for url in CSS_URL.findall(style.get_text()):
                if 'data:image' not in url:
                    background_images.append(url)
        return images, background_images

    def _forms(self) -> List[RawFormData]:
        forms = []
        for form in self.soup.find_all("form"):
            fields = []
            for field in form.find_all(["input", "select", "textarea"]):
                name = field.get("name") or field.get("placeholder") or ""
                if name:
                    fields.append(name)
            forms.append(RawFormData(action=form.get("action") or "", fields=fields))
        return forms

    def _paragraphs(self) -> List[str]:
        return [
            text[:200] for text in (p.get_text().strip() for p in self.soup.find_all("p"))
            if len(text) > 20
        ]

    def _lists(self) -> List[str]:
        lists = []
        for el in self.soup.find_all(["ul", "ol"]):
            items = [text[:100] for text in (li.get_text().strip() for li in el.find_all("li")) if text]
            if items:
                lists.append(" | ".join(items))
        return lists
