from __future__ import annotations

import hashlib
import logging
from typing import Optional

from bs4 import BeautifulSoup

from analyzer.model import AnalyzerSettings, ComponentAnalysis, PageAnalysis, RawPageSummary
from analyzer.services.component_analysis_service import ComponentAnalysisService, Enricher
from analyzer.services.component_extract_service import ComponentExtractService
from analyzer.services.flow_detect_service import FlowDetectService
from analyzer.services.persuasion_detect_service import PersuasionDetectService
from analyzer.services.raw_data_extract_service import RawDataExtractService, categorize_images
from analyzer.services.section_detect_service import SectionDetectService
from analyzer.services.style_extract_service import StyleExtractService
from pagescope.core.managers.config_manager import config_manager
from scraper.model import ParsedDocument

logger = logging.getLogger(__name__)


def analyzer_settings_from_config() -> AnalyzerSettings:
    section = config_manager.section("analyzer")
    defaults = AnalyzerSettings()
    return AnalyzerSettings(
        max_colors_per_bucket=section.get("max_colors_per_bucket", defaults.max_colors_per_bucket),
        top_colors=section.get("top_colors", defaults.top_colors),
        max_fonts=section.get("max_fonts", defaults.max_fonts),
        max_font_sizes=section.get("max_font_sizes", defaults.max_font_sizes),
        min_sections=section.get("min_sections", defaults.min_sections),
    )


class AnalysisController:
    """
    Produces the two analysis artifacts of a loaded document:

    * PageAnalysis: sections, components, persuasion, style and flow;
    * ComponentAnalysis: role-tagged components, funnel sections, tracking
      URL and categorised images for downstream prompt builders.

    Both are pure functions of the markup apart from `analyzed_at`.
    """

    def __init__(self, settings: Optional[AnalyzerSettings] = None, enrich: Optional[Enricher] = None) -> None:
        self.settings = settings or analyzer_settings_from_config()
        self.enrich = enrich

    @staticmethod
    def analysis_id(html: str) -> str:
        return "analysis-" + hashlib.sha1(html.encode("utf-8")).hexdigest()[:12]

    def analyze_page(self, document: ParsedDocument, soup: Optional[BeautifulSoup] = None) -> PageAnalysis:
        soup = soup if soup is not None else document.make_soup()

        sections = SectionDetectService(soup, self.settings.min_sections).detect_sections()
        components = ComponentExtractService(soup, sections).extract_components()
        persuasion_elements = PersuasionDetectService(soup).detect_persuasion_elements()
        style_info = StyleExtractService(soup, self.settings).extract_style_info()
        lp_flow = FlowDetectService(soup, sections, components, persuasion_elements).detect_lp_flow()

        logger.info(
            "Analyzed %s: %d section(s), %d persuasion element(s), flow '%s' (%s).",
            document.source_url or document.source_file_name or "document",
            len(sections), len(persuasion_elements), lp_flow.type, lp_flow.framework,
        )

        return PageAnalysis(
            id=self.analysis_id(document.html),
            source_url=document.source_url,
            sections=sections,
            components=components,
            persuasion_elements=persuasion_elements,
            style_info=style_info,
            lp_flow=lp_flow,
            html=document.html,
        )

    def analyze_components(self, document: ParsedDocument, soup: Optional[BeautifulSoup] = None) -> ComponentAnalysis:
        soup = soup if soup is not None else document.make_soup()

        extractor = RawDataExtractService(soup)
        raw_data = extractor.extract_raw_data()
        tracking_url = extractor.detect_tracking_url()
        parts = ComponentAnalysisService(raw_data, self.enrich).analyze()

        logger.info(
            "Component analysis of %s: %d component(s), %s flow with %d step(s), vertical '%s'.",
            document.source_url or document.source_file_name or "document",
            len(parts.components), parts.flow.type, parts.flow.total_steps, parts.vertical,
        )

        return ComponentAnalysis(
            id=self.analysis_id(document.html),
            source_url=document.source_url,
            components=parts.components,
            sections=parts.sections,
            flow=parts.flow,
            vertical=parts.vertical,
            tone=parts.tone,
            tracking_url=tracking_url,
            images=categorize_images(raw_data.images, raw_data.background_images),
            original_images=raw_data.images,
            strategy_summary=parts.strategy_summary,
            raw_page_data=RawPageSummary(
                headlines=raw_data.headlines,
                buttons=raw_data.buttons,
                images=raw_data.images,
                forms=len(raw_data.forms),
            ),
        )
