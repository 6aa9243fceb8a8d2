# src/scraper/controllers/load_controller.py
import logging
from typing import List, Optional

from bs4 import BeautifulSoup

from pagescope.core.managers.config_manager import config_manager
from scraper.model import Asset, ParsedDocument, ScrapeSettings
from scraper.services.archive_parse_service import ArchiveParseService
from scraper.services.asset_inline_service import AssetInlineService
from scraper.services.http_fetch_service import HttpFetchService
from scraper.services.image_embed_service import ImageEmbedService
from scraper.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


def scrape_settings_from_config() -> ScrapeSettings:
    """Builds the loader settings from the 'scraper' section of settings.json."""
    section = config_manager.section("scraper")
    defaults = ScrapeSettings()
    return ScrapeSettings(
        page_timeout=section.get("page_timeout", defaults.page_timeout),
        asset_timeout=section.get("asset_timeout", defaults.asset_timeout),
        image_timeout=section.get("image_timeout", defaults.image_timeout),
        max_image_bytes=section.get("max_image_bytes", defaults.max_image_bytes),
    )


class LoadController:
    """
    Orchestrates turning one input (URL, HTML file or zip archive) into a
    ParsedDocument. Only the URL path touches the network.
    """

    def __init__(self, fetcher: Optional[HttpFetchService] = None, settings: Optional[ScrapeSettings] = None):
        self.settings = settings or scrape_settings_from_config()
        self.fetcher = fetcher
        self.archive_service = ArchiveParseService()

    async def load_url(self, url: str, embed_images: bool = False) -> ParsedDocument:
        """
        Fetches a page, inlines its stylesheets and scripts and makes image
        URLs absolute against the directory of the final (post-redirect) URL.

        Raises:
            FetchError: If the page itself cannot be fetched.
        """
        fetcher = self.fetcher or HttpFetchService(config=self.settings)
        try:
            html, resolved_url = await fetcher.fetch_page(url)
            base_url = UrlUtils.compute_base_url(resolved_url)
            logger.info("Fetched %s (%d chars), base URL %s", resolved_url, len(html), base_url)

            soup = BeautifulSoup(html, "html.parser")
            await AssetInlineService(fetcher).inline_all(soup, base_url)
            document_html = str(soup)

            if embed_images:
                document_html = await ImageEmbedService(fetcher).embed_external_images(document_html)
        finally:
            if self.fetcher is None:
                await fetcher.close()

        return self._build_document(
            document_html,
            original_size=len(html),
            source_url=url,
            resolved_url=resolved_url,
            base_url=base_url,
        )

    def load_html(self, html: str, source_file_name: Optional[str] = None,
                  source_url: Optional[str] = None, base_url: str = "") -> ParsedDocument:
        """Wraps raw HTML (an uploaded file or a string) without any network access."""
        return self._build_document(
            html,
            original_size=len(html),
            source_url=source_url,
            base_url=base_url,
            source_file_name=source_file_name,
        )

    def load_zip(self, data: bytes, archive_name: str) -> ParsedDocument:
        """
        Raises:
            NoDocumentFoundError: If the archive has no HTML entry.
        """
        _, html, bundled = self.archive_service.read_archive(data, archive_name)
        return self._build_document(
            html,
            original_size=len(html),
            source_file_name=archive_name,
            bundled_assets=bundled,
        )

    @staticmethod
    def _build_document(html: str, *, original_size: int, source_url: Optional[str] = None,
                        resolved_url: Optional[str] = None, base_url: str = "",
                        source_file_name: Optional[str] = None,
                        bundled_assets: Optional[List[Asset]] = None) -> ParsedDocument:
        soup = BeautifulSoup(html, "html.parser")
        title = soup.title.get_text().strip() if soup.title else ""
        meta = soup.find("meta", attrs={"name": "description"})
        description = meta.get("content", "") if meta else ""

        return ParsedDocument(
            html=html,
            title=title or "Untitled",
            description=description or "",
            original_size=original_size,
            source_url=source_url,
            resolved_url=resolved_url,
            base_url=base_url,
            source_file_name=source_file_name,
            bundled_assets=bundled_assets or [],
        )
