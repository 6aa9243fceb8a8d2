from __future__ import annotations

import logging
import re
from typing import List, NamedTuple, Optional, Set
from urllib.parse import parse_qsl, urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from parser.core import Cascade, cascade_rule
from parser.model import DetectedLink, LinkType
from parser.utils.selector_utils import class_string, closest, form_selector, link_selector

logger = logging.getLogger(__name__)

# Known affiliate network domains
AFFILIATE_DOMAINS = (
    'clickbank.net', 'shareasale.com', 'cj.com', 'awin.com', 'rakutenmarketing.com',
    'impact.com', 'partnerize.com', 'pepperjam.com', 'flexoffers.com', 'linkconnector.com',
    'tradedoubler.com', 'avangate.com', 'jvzoo.com', 'warriorplus.com', 'clickfunnels.com',
    'digistore24.com',
)

AFFILIATE_PARAMS = frozenset({'ref', 'aff', 'affid', 'aid', 'affiliate', 'hop', 'vendor'})

TRACKING_PARAMS = (
    'ref', 'aff', 'aid', 'affid', 'affiliate',
    'utm_source', 'utm_medium', 'utm_campaign', 'utm_term', 'utm_content',
    'gclid', 'fbclid', 'msclkid', 'ttclid',
    'click_id', 'clickid', 'subid', 'sub_id',
    'source', 'src', 'campaign', 'cid',
    'hop', 'vendor', 'aff_id',
)

# URL shorteners and redirect-style host prefixes
REDIRECT_DOMAINS = (
    'bit.ly', 'tinyurl.com', 't.co', 'goo.gl', 'ow.ly',
    'buff.ly', 'is.gd', 'v.gd', 'shorturl.at',
    'rebrandly.com', 'bl.ink', 'short.io',
    'go.', 'link.', 'click.', 'redirect.',
)

CTA_CLASS = re.compile(r"btn|button|cta|action|submit|signup|register|buy|order|get-started|download", re.I)
CTA_PARENT_CLASS = re.compile(r"btn|button|cta", re.I)
CTA_TEXT = re.compile(r"^(buy|order|get|start|sign up|register|download|subscribe|join|try)", re.I)
NAV_CLASS = re.compile(r"nav|menu|header|footer", re.I)
NAV_CONTAINER = 'nav, header, footer, [class*="nav"], [class*="menu"]'

AFFILIATE_PATH = re.compile(r"/(aff|affiliate|partner|ref)/")
REDIRECT_PATH = re.compile(r"/(redirect|go|out|click|track)/")
ONCLICK_URL = re.compile(
    r"""(?:window\.location|location\.href|window\.open)\s*[=(]\s*['"]([^'"]+)['"]""", re.I
)
SCRIPT_URL = re.compile(r"""['"](https?://[^'"]+)['"]""")
SCRIPT_URL_HINTS = ('track', 'click', 'pixel', 'api', 'redirect', 'go.')
IGNORED_SCHEMES = ('javascript:', 'mailto:', 'tel:', '#')


class LinkVerdict(NamedTuple):
    type: LinkType
    confidence: float
    reason: str


class LinkSubject(NamedTuple):
    href: str
    element: Tag
    base_url: str


def _query_keys(href: str) -> List[str]:
    candidate = href if href.startswith("http") else f"https://example.com{href}"
    try:
        query = urlparse(candidate).query
    except ValueError:
        return []
    return [key for key, _ in parse_qsl(query, keep_blank_values=True)]


@cascade_rule("cta-styling")
def cta_styling_rule(subject: LinkSubject) -> Optional[LinkVerdict]:
    el = subject.element
    if CTA_CLASS.search(class_string(el).lower()):
        return LinkVerdict('cta', 0.9, 'CTA styling or button classes detected')
    parent = el.parent
    if isinstance(parent, Tag) and CTA_PARENT_CLASS.search(class_string(parent).lower()):
        return LinkVerdict('cta', 0.9, 'CTA styling or button classes detected')
    if CTA_TEXT.search(el.get_text().strip().lower()):
        return LinkVerdict('cta', 0.9, 'CTA styling or button classes detected')
    return None


@cascade_rule("affiliate")
def affiliate_rule(subject: LinkSubject) -> Optional[LinkVerdict]:
    href_lower = subject.href.lower()
    for domain in AFFILIATE_DOMAINS:
        if domain in href_lower:
            return LinkVerdict('affiliate', 0.95, f'Known affiliate network: {domain}')

    for key in _query_keys(subject.href):
        if key.lower() in AFFILIATE_PARAMS:
            return LinkVerdict('affiliate', 0.85, f'Affiliate parameter: {key}')

    if AFFILIATE_PATH.search(href_lower):
        return LinkVerdict('affiliate', 0.75, 'Affiliate URL path pattern')
    return None


@cascade_rule("redirect")
def redirect_rule(subject: LinkSubject) -> Optional[LinkVerdict]:
    href_lower = subject.href.lower()
    for domain in REDIRECT_DOMAINS:
        if domain in href_lower:
            return LinkVerdict('redirect', 0.9, f'URL shortener/redirect service: {domain}')
    if REDIRECT_PATH.search(href_lower):
        return LinkVerdict('redirect', 0.7, 'Redirect pattern in URL path')
    return None


@cascade_rule("tracking-params")
def tracking_rule(subject: LinkSubject) -> Optional[LinkVerdict]:
    found = [k for k in _query_keys(subject.href) if any(p in k.lower() for p in TRACKING_PARAMS)]
    if not found:
        return None
    return LinkVerdict(
        'tracking',
        min(0.9, 0.5 + len(found) * 0.15),
        f"Tracking parameters: {', '.join(found)}",
    )


@cascade_rule("locality")
def locality_rule(subject: LinkSubject) -> LinkVerdict:
    href, el, base_url = subject
    base_host = urlparse(base_url).hostname if base_url else None
    if base_host:
        try:
            link_host = urlparse(urljoin(base_url, href)).hostname
        except ValueError:
            link_host = None
        if link_host == base_host:
            if closest(el, NAV_CONTAINER) is not None or NAV_CLASS.search(class_string(el)):
                return LinkVerdict('navigation', 0.8, 'Navigation element detected')
            return LinkVerdict('internal', 0.9, 'Same domain link')
        if link_host:
            return LinkVerdict('external', 0.9, 'Different domain link')

    if href.startswith(('/', '#')):
        return LinkVerdict('internal', 0.8, 'Relative path')
    return LinkVerdict('external', 0.5, 'Unknown URL format')


# Order is precedence: CTA intent outranks affiliate/redirect/tracking signals.
LINK_CASCADE: Cascade[LinkSubject, LinkVerdict] = Cascade([
    cta_styling_rule,
    affiliate_rule,
    redirect_rule,
    tracking_rule,
    locality_rule,
])


class LinkDetectService:
    """
    Finds every outbound URL on a page and classifies its intent.
    Sources: anchors, onclick handlers, data-* URL attributes, formaction,
    form actions, iframes and tracking-looking URLs inside inline scripts.
    URLs are deduplicated across all sources.
    """

    def __init__(self, soup: BeautifulSoup, base_url: str = ""):
        self.soup = soup
        self.base_url = base_url
        self._seen: Set[str] = set()
        self._links: List[DetectedLink] = []

    @staticmethod
    def classify(href: str, element: Tag, base_url: str = "") -> LinkVerdict:
        return LINK_CASCADE.evaluate(LinkSubject(href, element, base_url))

    def detect_links(self) -> List[DetectedLink]:
        self._seen = set()
        self._links = []

        for el in self.soup.find_all("a", href=True):
            self._add(el.get("href", ""), el, "")

        for el in self.soup.find_all(onclick=True):
            for url in ONCLICK_URL.findall(el.get("onclick", "")):
                self._add(url, el, "onclick handler")

        for el in self.soup.select("[data-href], [data-url], [data-link], [data-target]"):
            data_href = (el.get("data-href") or el.get("data-url")
                         or el.get("data-link") or el.get("data-target") or "")
            if data_href.startswith(("http", "/")):
                self._add(data_href, el, "data attribute")

        for el in self.soup.select("button[formaction], input[formaction]"):
            self._add(el.get("formaction", ""), el, "form action button")

        for el in self.soup.find_all("form", action=True):
            action = el.get("action", "")
            if action and action not in self._seen:
                self._seen.add(action)
                self._append(DetectedLink(
                    id=self._next_id(),
                    type='cta',
                    original_url=action,
                    selector=form_selector(el),
                    confidence=0.9,
                    detection_reason='Form action URL',
                ))

        for el in self.soup.find_all("iframe", src=True):
            src = el.get("src", "")
            if src and not src.startswith("data:"):
                self._add(src, el, "iframe source")

        for el in self.soup.find_all("script"):
            if el.get("src"):
                continue
            for url in SCRIPT_URL.findall(el.get_text()):
                if any(hint in url for hint in SCRIPT_URL_HINTS) and url not in self._seen:
                    self._seen.add(url)
                    self._append(DetectedLink(
                        id=self._next_id(),
                        type='tracking',
                        original_url=url,
                        selector='script',
                        confidence=0.7,
                        detection_reason='URL in script',
                    ))

        logger.debug("Detected %d link(s).", len(self._links))
        return list(self._links)

    def _add(self, url: str, el: Tag, reason: str) -> None:
        if not url or url in self._seen or url.startswith(IGNORED_SCHEMES):
            return
        self._seen.add(url)
        verdict = self.classify(url, el, self.base_url)
        anchor_text = el.get_text().strip()
        self._append(DetectedLink(
            id=self._next_id(),
            type=verdict.type,
            original_url=url,
            anchor_text=anchor_text or None,
            selector=link_selector(el),
            confidence=verdict.confidence,
            detection_reason=reason or verdict.reason,
        ))

    def _append(self, link: DetectedLink) -> None:
        self._links.append(link)

    def _next_id(self) -> str:
        return f"link-{len(self._links) + 1}"
