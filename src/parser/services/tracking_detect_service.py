from __future__ import annotations

import logging
import re
from typing import List, Optional, Pattern, Set, Tuple

from bs4 import BeautifulSoup

from parser.model import ParserSettings, TrackingCode, TrackingType
from scraper.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

# Per vendor, in detection order. Only the first matching pattern of a vendor counts per script.
TRACKING_PATTERNS: Tuple[Tuple[TrackingType, Tuple[Pattern, ...]], ...] = (
    ('facebook-pixel', (
        re.compile(r"""fbq\s*\(\s*['"]init['"]""", re.I),
        re.compile(r"connect\.facebook\.net.*fbevents\.js", re.I),
        re.compile(r"facebook\.com/tr\?", re.I),
        re.compile(r"fbq\s*\(", re.I),
    )),
    ('google-analytics', (
        re.compile(r"""gtag\s*\(\s*['"]config['"]\s*,\s*['"]G-""", re.I),
        re.compile(r"""gtag\s*\(\s*['"]config['"]\s*,\s*['"]UA-""", re.I),
        re.compile(r"google-analytics\.com/analytics\.js", re.I),
        re.compile(r"googletagmanager\.com/gtag/js", re.I),
        re.compile(r"""ga\s*\(\s*['"]create['"]""", re.I),
        re.compile(r"_gaq\.push", re.I),
    )),
    ('google-tag-manager', (
        re.compile(r"googletagmanager\.com/gtm\.js", re.I),
        re.compile(r"GTM-[A-Z0-9]+", re.I),
        re.compile(r"gtm\.start", re.I),
    )),
    ('tiktok-pixel', (
        re.compile(r"ttq\.load", re.I),
        re.compile(r"analytics\.tiktok\.com", re.I),
        re.compile(r"ttq\s*\(", re.I),
    )),
    ('custom', tuple(re.compile(p, re.I) for p in (
        r"hotjar\.com", r"clarity\.ms", r"mixpanel\.com", r"segment\.com", r"heap\.io",
        r"amplitude\.com", r"intercom\.io", r"crisp\.chat", r"drift\.com", r"livechat\.com",
        r"zendesk\.com", r"hubspot\.com", r"mailchimp\.com", r"convertkit\.com", r"klaviyo\.com",
    ))),
)

TRACKER_IDENTIFIERS = {
    'facebook-pixel': re.compile(r"""fbq\s*\(\s*['"]init['"]\s*,\s*['"](\d+)['"]"""),
    'google-analytics': re.compile(r"""['"]([UG]A?-[A-Z0-9-]+)['"]"""),
    'google-tag-manager': re.compile(r"(GTM-[A-Z0-9]+)"),
    'tiktok-pixel': re.compile(r"""ttq\.load\s*\(\s*['"]([^'"]+)['"]"""),
}

FB_NOSCRIPT = re.compile(r"facebook\.com/tr\?")
GENERIC_NOSCRIPT = re.compile(r"\?id=|pixel|track|analytics", re.I)
PIXEL_SRC = re.compile(r"pixel|track|beacon", re.I)

VERIFICATION_META = {
    'facebook-domain-verification': 'facebook-pixel',
    'google-site-verification': 'google-analytics',
}


def _domain_of(url: str) -> str:
    host = UrlUtils.get_hostname(url)
    if host:
        return host
    match = re.search(r"//([^/]+)", url)
    return match.group(1) if match else url[:30]


def _identifier(code: str, tracker: TrackingType) -> str:
    pattern = TRACKER_IDENTIFIERS.get(tracker)
    if pattern:
        match = pattern.search(code)
        if match:
            return match.group(1)
    return re.sub(r"\s+", " ", code)[:30]


class TrackingDetectService:
    """
    Purely textual detection of analytics and ad pixels in scripts, noscript
    fallbacks, pixel-shaped images and verification meta tags. Script content
    is never evaluated.
    """

    def __init__(self, soup: BeautifulSoup, settings: Optional[ParserSettings] = None):
        self.soup = soup
        self.settings = settings or ParserSettings()

    def detect_tracking_codes(self) -> List[TrackingCode]:
        codes: List[TrackingCode] = []
        seen: Set[str] = set()
        snippet = self.settings.tracking_snippet_chars

        def add(tracker: TrackingType, code: str, selector: Optional[str]) -> None:
            codes.append(TrackingCode(
                id=f"tracking-{len(codes) + 1}",
                type=tracker,
                code=code,
                selector=selector,
            ))

        for script in self.soup.find_all("script"):
            src = script.get("src") or ""
            inline_code = script.get_text()
            full_code = f"{src} {inline_code}"

            for tracker, patterns in TRACKING_PATTERNS:
                if not any(p.search(full_code) for p in patterns):
                    continue
                code_hash = f"{tracker}-{full_code[:100]}"
                if code_hash in seen:
                    continue
                seen.add(code_hash)
                selector = (
                    f'script[src*="{_domain_of(src)}"]' if src
                    else f'script:contains("{_identifier(inline_code, tracker)}")'
                )
                add(tracker, src or inline_code[:snippet], selector)

        recorded_noscripts: Set[int] = set()
        for noscript in self.soup.find_all("noscript"):
            content = noscript.decode_contents()
            if FB_NOSCRIPT.search(content) or GENERIC_NOSCRIPT.search(content):
                recorded_noscripts.add(id(noscript))
            if FB_NOSCRIPT.search(content) and "facebook-pixel-noscript" not in seen:
                seen.add("facebook-pixel-noscript")
                add('facebook-pixel', content[:snippet], 'noscript:contains("facebook.com/tr")')
            if GENERIC_NOSCRIPT.search(content):
                code_hash = f"other-noscript-{content[:50]}"
                if code_hash not in seen:
                    seen.add(code_hash)
                    add('other', content[:snippet], 'noscript')

        for img in self.soup.find_all("img"):
            # Already reported through its noscript fallback.
            wrapper = img.find_parent("noscript")
            if wrapper is not None and id(wrapper) in recorded_noscripts:
                continue
            src = img.get("src") or ""
            width, height = img.get("width"), img.get("height")
            is_pixel = (
                (width == "1" and height == "1")
                or (width == "0" and height == "0")
                or bool(PIXEL_SRC.search(src))
                or bool(FB_NOSCRIPT.search(src))
            )
            if is_pixel and src not in seen:
                seen.add(src)
                add('other', src, f'img[src*="{_domain_of(src)}"]')

        for meta in self.soup.find_all("meta"):
            name = meta.get("name") or ""
            tracker = VERIFICATION_META.get(name)
            if tracker:
                content = meta.get("content") or ""
                add(tracker, f'<meta name="{name}" content="{content}">', f'meta[name="{name}"]')

        logger.debug("Detected %d tracking code(s).", len(codes))
        return codes
