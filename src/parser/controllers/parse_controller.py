from __future__ import annotations

import hashlib
import logging
from typing import Optional

from bs4 import BeautifulSoup

from pagescope.core.managers.config_manager import config_manager
from parser.model import ParsedLandingPage, ParserSettings
from parser.services.form_extract_service import FormExtractService
from parser.services.link_detect_service import LinkDetectService
from parser.services.text_extract_service import TextExtractService
from parser.services.tracking_detect_service import TrackingDetectService
from scraper.model import ParsedDocument
from scraper.services.archive_parse_service import merge_assets
from scraper.services.asset_reference_service import extract_asset_references

logger = logging.getLogger(__name__)


def parser_settings_from_config() -> ParserSettings:
    section = config_manager.section("parser")
    defaults = ParserSettings()
    return ParserSettings(
        min_paragraph_chars=section.get("min_paragraph_chars", defaults.min_paragraph_chars),
        max_leaf_text_chars=section.get("max_leaf_text_chars", defaults.max_leaf_text_chars),
        tracking_snippet_chars=section.get("tracking_snippet_chars", defaults.tracking_snippet_chars),
    )


class ParseController:
    """
    Runs the independent extractors (text, links, tracking, forms, asset
    references) over one loaded document and assembles a ParsedLandingPage.
    The extractors only read the tree they are given.
    """

    def __init__(self, settings: Optional[ParserSettings] = None) -> None:
        self.settings = settings or parser_settings_from_config()

    @staticmethod
    def page_id(html: str) -> str:
        return "page-" + hashlib.sha1(html.encode("utf-8")).hexdigest()[:12]

    def parse(self, document: ParsedDocument, soup: Optional[BeautifulSoup] = None) -> ParsedLandingPage:
        soup = soup if soup is not None else document.make_soup()

        text_blocks = TextExtractService(soup, self.settings).extract_text_blocks()
        links = LinkDetectService(soup, document.base_url).detect_links()
        tracking_codes = TrackingDetectService(soup, self.settings).detect_tracking_codes()
        forms = FormExtractService(soup).extract_forms()

        assets = extract_asset_references(soup, document.base_url)
        if document.bundled_assets:
            assets = merge_assets(assets, document.bundled_assets)

        logger.info(
            "Parsed %s: %d text block(s), %d link(s), %d tracking code(s), %d form(s), %d asset(s).",
            document.source_url or document.source_file_name or "document",
            len(text_blocks), len(links), len(tracking_codes), len(forms), len(assets),
        )

        return ParsedLandingPage(
            id=self.page_id(document.html),
            source_url=document.source_url,
            resolved_url=document.resolved_url,
            source_file_name=document.source_file_name,
            html=document.html,
            title=document.title,
            description=document.description,
            text_content=text_blocks,
            assets=assets,
            links=links,
            tracking_codes=tracking_codes,
            forms=forms,
            original_size=document.original_size,
        )
