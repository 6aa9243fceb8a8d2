from __future__ import annotations

import re
from typing import List, Optional, Set

from bs4 import BeautifulSoup, NavigableString, Tag

from parser.model import ParserSettings, TextBlock, TextBlockType
from parser.utils.selector_utils import class_string, direct_text, text_block_selector

CTA_CLASS = re.compile(r"btn|button|cta|action", re.I)


class TextExtractService:
    """
    Collects the editable text of a page as typed TextBlocks.
    Each distinct text is emitted once per run, by the first pass that sees it.
    Passes run in order: headings, paragraphs, buttons, links, list items,
    then leaf spans/divs.
    """

    def __init__(self, soup: BeautifulSoup, settings: Optional[ParserSettings] = None):
        self.soup = soup
        self.settings = settings or ParserSettings()
        self._seen: Set[str] = set()
        self._blocks: List[TextBlock] = []

    def extract_text_blocks(self) -> List[TextBlock]:
        self._seen = set()
        self._blocks = []

        for el in self.soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
            self._add(el, "heading", direct_text(el))

        for el in self.soup.find_all("p"):
            if len(el.get_text().strip()) > self.settings.min_paragraph_chars:
                self._add(el, "paragraph", direct_text(el))

        for el in self._button_candidates():
            text = (el.get("value") if el.name == "input" else None) or el.get_text().strip()
            if text and len(text) > 1:
                self._add(el, "button", text.strip())

        for el in self.soup.find_all("a"):
            text = el.get_text().strip()
            is_cta = bool(CTA_CLASS.search(class_string(el)))
            if is_cta or len(text) > 3:
                self._add(el, "button" if is_cta else "link", text, tag_name="a")

        for el in self.soup.find_all("li"):
            text = _text_without_nested_lists(el)
            if len(text) > 5:
                self._add(el, "list-item", text, tag_name="li")

        max_chars = self.settings.max_leaf_text_chars
        for el in self.soup.find_all(["span", "div"]):
            if len(el.find_all(True, recursive=False)) > 2:
                continue
            text = direct_text(el)
            if 10 < len(text) < max_chars:
                self._add(el, "other", text)

        return list(self._blocks)

    def _button_candidates(self) -> List[Tag]:
        return self.soup.select(
            'button, .btn, [class*="button"], input[type="submit"], input[type="button"]'
        )

    def _add(self, el: Tag, block_type: TextBlockType, text: str, tag_name: Optional[str] = None) -> None:
        if not text or len(text) < 2 or text in self._seen:
            return
        self._seen.add(text)
        self._blocks.append(TextBlock(
            id=f"text-{len(self._blocks) + 1}",
            selector=text_block_selector(el),
            tag_name=tag_name or (el.name or "unknown").lower(),
            type=block_type,
            original_text=text,
        ))


def _text_without_nested_lists(el: Tag) -> str:
    parts = []
    for child in el.children:
        if isinstance(child, Tag):
            if child.name in ("ul", "ol"):
                continue
            parts.append(child.get_text())
        elif type(child) is NavigableString:
            parts.append(str(child))
    return "".join(parts).strip()
