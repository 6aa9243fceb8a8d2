# src/analyzer/services/style_extract_service.py
import logging
import re
from collections import Counter
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from analyzer.model import AnalyzerSettings, ColorInfo, ColumnLayout, LayoutInfo, StyleInfo, TypographyInfo

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"#[0-9a-fA-F]{3,8}\b")
RGB_COLOR = re.compile(r"rgba?\([^)]+\)", re.I)
HSL_COLOR = re.compile(r"hsla?\([^)]+\)", re.I)
RGB_PARTS = re.compile(r"rgba?\((\d+),\s*(\d+),\s*(\d+)")
HEX6 = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.I)
HEX3 = re.compile(r"^#?([a-f\d])([a-f\d])([a-f\d])$", re.I)
BACKGROUND_DECL = re.compile(r"background(?:-color)?:\s*([^;]+)", re.I)
FONT_FAMILY = re.compile(r"font-family:\s*([^;}]+)", re.I)
FONT_SIZE = re.compile(r"font-size:\s*([^;}]+)", re.I)
CSS_RULE = re.compile(r"([^{}]+)\{([^{}]*)\}")
HEADING_SELECTOR = re.compile(r"(^|[\s,>+~])h[1-6]\b", re.I)
MAX_WIDTH = re.compile(r"max-width:\s*([^;]+)", re.I)

NON_COLORS = frozenset({'transparent', 'inherit', 'initial', 'currentcolor', 'none'})
CTA_SELECTOR = '[class*="btn"], [class*="cta"], button, a.button'
HEADER_LIKE = 'header, nav, [class*="header"], [class*="nav"]'


def normalize_color(color: str) -> Optional[str]:
    """Lower-cases, converts rgb()/rgba() to hex and drops keywords that are not colours."""
    color = color.strip().lower()
    if color in NON_COLORS:
        return None
    if color.startswith('#'):
        return color
    match = RGB_PARTS.match(color)
    if match:
        r, g, b = (min(int(v), 255) for v in match.groups())
        return f"#{r:02x}{g:02x}{b:02x}"
    return color


def hex_to_rgb(value: str) -> Optional[Tuple[int, int, int]]:
    match = HEX6.match(value)
    if match:
        return tuple(int(c, 16) for c in match.groups())
    match = HEX3.match(value)
    if match:
        return tuple(int(c * 2, 16) for c in match.groups())
    return None


def brightness(value: str) -> Optional[float]:
    """Perceived luma (ITU-R BT.601 weights) on a 0-255 scale."""
    rgb = hex_to_rgb(value)
    if rgb is None:
        return None
    r, g, b = rgb
    return (r * 299 + g * 587 + b * 114) / 1000


def _first_font(declaration: str) -> str:
    return declaration.strip().replace('"', '').replace("'", '').split(',')[0].strip()


def _append_unique(bucket: List[str], value: str) -> None:
    if value and value not in bucket:
        bucket.append(value)


class StyleExtractService:
    """Recovers colour palette, typography and layout hints from inline and embedded CSS."""

    def __init__(self, soup: BeautifulSoup, settings: Optional[AnalyzerSettings] = None):
        self.soup = soup
        self.settings = settings or AnalyzerSettings()

    def extract_style_info(self) -> StyleInfo:
        return StyleInfo(
            colors=self.extract_colors(),
            typography=self.extract_typography(),
            layout=self.extract_layout(),
        )

    def _style_blocks(self) -> List[str]:
        return [style.get_text() for style in self.soup.find_all("style")]

    # ---------------------------------------------------------------- colours

    def extract_colors(self) -> ColorInfo:
        frequency: Counter = Counter()
        for css in self._style_blocks():
            self._count_colors(css, frequency)
        for el in self.soup.find_all(style=True):
            self._count_colors(el.get("style") or "", frequency)

        cta: List[str] = []
        for el in self.soup.select(CTA_SELECTOR):
            match = BACKGROUND_DECL.search(el.get("style") or "")
            if match:
                color = normalize_color(match.group(1))
                if color:
                    _append_unique(cta, color)

        cap = self.settings.max_colors_per_bucket
        buckets: Dict[str, List[str]] = {"background": [], "text": [], "primary": [], "secondary": []}
        # most_common keeps first-seen order among equal counts
        for color, _ in frequency.most_common(self.settings.top_colors):
            normalized = normalize_color(color)
            if not normalized or normalized in cta:
                continue
            if any(normalized in bucket for bucket in buckets.values()):
                continue

            luma = brightness(normalized)
            if luma is not None and luma > 200:
                if len(buckets["background"]) < cap:
                    buckets["background"].append(normalized)
            elif luma is not None and luma < 100:
                if len(buckets["text"]) < cap:
                    buckets["text"].append(normalized)
            elif len(buckets["primary"]) < cap:
                buckets["primary"].append(normalized)
            elif len(buckets["secondary"]) < cap:
                buckets["secondary"].append(normalized)

        return ColorInfo(cta=cta, **buckets)

    @staticmethod
    def _count_colors(css: str, frequency: Counter) -> None:
        for pattern in (HEX_COLOR, RGB_COLOR, HSL_COLOR):
            for match in pattern.findall(css):
                frequency[match.lower()] += 1

    # ------------------------------------------------------------- typography

    def extract_typography(self) -> TypographyInfo:
        heading_fonts: List[str] = []
        body_fonts: List[str] = []
        font_sizes: List[str] = []

        for css in self._style_blocks():
            for selector, body in CSS_RULE.findall(css):
                target = heading_fonts if HEADING_SELECTOR.search(selector.strip()) else body_fonts
                for declaration in FONT_FAMILY.findall(body):
                    _append_unique(target, _first_font(declaration))
            for size in FONT_SIZE.findall(css):
                _append_unique(font_sizes, size.strip())

        for el in self.soup.find_all(["h1", "h2", "h3"], style=True):
            match = FONT_FAMILY.search(el["style"])
            if match:
                _append_unique(heading_fonts, _first_font(match.group(1)))

        for el in self.soup.find_all(["body", "p"], style=True):
            match = FONT_FAMILY.search(el["style"])
            if match:
                _append_unique(body_fonts, _first_font(match.group(1)))

        return TypographyInfo(
            heading_fonts=heading_fonts[: self.settings.max_fonts],
            body_fonts=body_fonts[: self.settings.max_fonts],
            font_sizes=font_sizes[: self.settings.max_font_sizes],
        )

    # ----------------------------------------------------------------- layout

    def extract_layout(self) -> LayoutInfo:
        has_fixed_header = False
        has_sticky = False
        max_width: Optional[str] = None

        for el in self.soup.select('[style*="position"]'):
            style = el.get("style") or ""
            if re.search(r"position:\s*fixed", style, re.I) and el.css.match(HEADER_LIKE):
                has_fixed_header = True
            if re.search(r"position:\s*sticky", style, re.I):
                has_sticky = True

        for el in self.soup.select('[class*="fixed"], [class*="sticky"]'):
            if el.css.match(HEADER_LIKE):
                has_fixed_header = True
            else:
                has_sticky = True

        for el in self.soup.select('[class*="container"], [class*="wrapper"], main'):
            match = MAX_WIDTH.search(el.get("style") or "")
            if match:
                max_width = match.group(1).strip()

        return LayoutInfo(
            max_width=max_width,
            has_fixed_header=has_fixed_header,
            has_sticky_elements=has_sticky,
            column_layout=self._column_layout(),
        )

    def _column_layout(self) -> ColumnLayout:
        has_grid = self.soup.select_one('[class*="grid"], [style*="grid"]') is not None
        has_flex = self.soup.select_one('[class*="flex"], [style*="flex"]') is not None
        has_cols = self.soup.select_one('[class*="col-"], [class*="column"]') is not None

        if has_grid or has_cols:
            if self.soup.select_one('[class*="col-6"], [class*="col-md-6"], [class*="w-1/2"]') is not None:
                return 'two-column'
            if len(self.soup.select('[class*="col-"], [class*="grid-cols"]')) > 2:
                return 'multi-column'
            return 'mixed'
        if has_flex:
            return 'mixed'
        return 'single'
