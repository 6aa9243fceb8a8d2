# src/pagescope/core/pipeline.py
import logging
from typing import Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict
from tqdm import tqdm

from analyzer.controllers.analysis_controller import AnalysisController
from analyzer.model import ComponentAnalysis, PageAnalysis
from analyzer.services.component_analysis_service import Enricher
from parser.controllers.parse_controller import ParseController
from parser.model import ParsedLandingPage
from scraper.controllers.load_controller import LoadController
from scraper.model import ParsedDocument
from scraper.services.http_fetch_service import HttpFetchService

logger = logging.getLogger(__name__)

HTML_SUFFIXES = ('.html', '.htm')


class PipelineResult(BaseModel):
    """Everything one analysis run produced for a single input."""
    model_config = ConfigDict(frozen=True)

    document: ParsedDocument
    page: ParsedLandingPage
    analysis: PageAnalysis
    component_analysis: ComponentAnalysis


class AnalysisPipeline:
    """
    Load, then parse and analyse from a single parsed tree.

    The loader is the only stage that may raise (FetchError,
    NoDocumentFoundError); everything after it degrades to empty or default
    results on odd markup.
    """

    def __init__(
            self,
            loader: Optional[LoadController] = None,
            parser: Optional[ParseController] = None,
            analyzer: Optional[AnalysisController] = None,
            enrich: Optional[Enricher] = None,
    ):
        self.loader = loader or LoadController()
        self.parser = parser or ParseController()
        self.analyzer = analyzer or AnalysisController(enrich=enrich)

    def run(self, document: ParsedDocument) -> PipelineResult:
        soup = document.make_soup()
        return PipelineResult(
            document=document,
            page=self.parser.parse(document, soup),
            analysis=self.analyzer.analyze_page(document, soup),
            component_analysis=self.analyzer.analyze_components(document, soup),
        )

    async def analyze_url(self, url: str, embed_images: bool = False) -> PipelineResult:
        document = await self.loader.load_url(url, embed_images=embed_images)
        return self.run(document)

    def analyze_html(self, html: str, source_file_name: Optional[str] = None,
                     source_url: Optional[str] = None) -> PipelineResult:
        return self.run(self.loader.load_html(html, source_file_name=source_file_name, source_url=source_url))

    def analyze_zip(self, data: bytes, archive_name: str) -> PipelineResult:
        return self.run(self.loader.load_zip(data, archive_name))

    def analyze_files(self, files: Iterable[Tuple[str, Union[bytes, str]]]) -> List[PipelineResult]:
        """
        Batch entry point for uploads: `.zip` entries go through the archive
        path, `.html`/`.htm` through the file path, anything else is skipped.
        """
        files = list(files)
        results: List[PipelineResult] = []
        for name, content in tqdm(files, desc="Analyzing", unit="file"):
            lowered = name.lower()
            if lowered.endswith('.zip'):
                data = content.encode("utf-8") if isinstance(content, str) else content
                results.append(self.analyze_zip(data, name))
            elif lowered.endswith(HTML_SUFFIXES):
                html = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content
                results.append(self.analyze_html(html, source_file_name=name))
            else:
                logger.warning("Skipping '%s': not an HTML file or zip archive.", name)
        return results


async def analyze_url(url: str, embed_images: bool = False,
                      session=None, enrich: Optional[Enricher] = None) -> PipelineResult:
    """One-shot URL analysis; `session` lets callers reuse an aiohttp ClientSession."""
    fetcher = HttpFetchService(session=session) if session is not None else None
    pipeline = AnalysisPipeline(loader=LoadController(fetcher=fetcher), enrich=enrich)
    try:
        return await pipeline.analyze_url(url, embed_images=embed_images)
    finally:
        if fetcher is not None:
            await fetcher.close()


def analyze_html(html: str, source_file_name: Optional[str] = None,
                 enrich: Optional[Enricher] = None) -> PipelineResult:
    return AnalysisPipeline(enrich=enrich).analyze_html(html, source_file_name=source_file_name)


def analyze_zip(data: bytes, archive_name: str, enrich: Optional[Enricher] = None) -> PipelineResult:
    return AnalysisPipeline(enrich=enrich).analyze_zip(data, archive_name)


def analyze_files(files: Iterable[Tuple[str, Union[bytes, str]]],
                  enrich: Optional[Enricher] = None) -> List[PipelineResult]:
    return AnalysisPipeline(enrich=enrich).analyze_files(files)
