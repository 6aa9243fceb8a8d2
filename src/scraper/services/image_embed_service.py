# src/scraper/services/image_embed_service.py
import asyncio
import base64
import logging
import re
from typing import Dict, Optional

from bs4 import BeautifulSoup

from scraper.services.asset_inline_service import rewrite_srcset
from scraper.services.http_fetch_service import HttpFetchService
from scraper.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

EXTERNAL_CSS_URL = re.compile(r"""url\(['"]?(https?://[^'")\s]+)['"]?\)""")


class ImageEmbedService:
    """
    Downloads external images referenced by a document and embeds them as
    base64 data URIs. Images that time out, fail or exceed the size cap keep
    their original URL.
    """

    def __init__(self, fetcher: HttpFetchService):
        self.fetcher = fetcher

    async def embed_external_images(self, html: str) -> str:
        soup = BeautifulSoup(html, "html.parser")
        urls = self.collect_image_urls(soup)
        if not urls:
            return html

        logger.info("Image embedder: found %d external image URL(s) to embed", len(urls))
        data_uris = await self._download_all(urls)
        logger.info("Image embedder: embedded %d/%d image(s)", len(data_uris), len(urls))
        if not data_uris:
            return html

        self._replace_references(soup, data_uris)
        return str(soup)

    @staticmethod
    def collect_image_urls(soup: BeautifulSoup) -> list:
        """Unique external image URLs in first-seen order."""
        found: Dict[str, None] = {}

        for img in soup.find_all("img", src=True):
            if UrlUtils.is_external_url(img["src"]):
                found[img["src"]] = None

        for el in soup.find_all(["img", "source"], srcset=True):
            for candidate in el["srcset"].split(","):
                pieces = candidate.strip().split()
                if pieces and UrlUtils.is_external_url(pieces[0]):
                    found[pieces[0]] = None

        for el in soup.find_all(style=True):
            for url in EXTERNAL_CSS_URL.findall(el["style"]):
                found[url] = None

        for style in soup.find_all("style"):
            for url in EXTERNAL_CSS_URL.findall(style.get_text()):
                found[url] = None

        return list(found)

    async def _download_all(self, urls: list) -> Dict[str, str]:
        results = await asyncio.gather(
            *(self.download_as_data_uri(url) for url in urls), return_exceptions=True
        )
        embedded: Dict[str, str] = {}
        for url, result in zip(urls, results):
            if isinstance(result, BaseException):
                logger.warning("Image embedder: error fetching %s: %s", url, result)
            elif result:
                embedded[url] = result
        return embedded

    async def download_as_data_uri(self, url: str) -> Optional[str]:
        downloaded = await self.fetcher.fetch_image(url)
        if downloaded is None:
            return None
        data, content_type = downloaded
        mime_type = content_type or UrlUtils.guess_mime_type(url, default="image/png")
        encoded = base64.b64encode(data).decode("ascii")
        return f"data:{mime_type};base64,{encoded}"

    @staticmethod
    def _replace_references(soup: BeautifulSoup, data_uris: Dict[str, str]) -> None:
        def _css_replace(match: re.Match) -> str:
            uri = data_uris.get(match.group(1))
            return f"url('{uri}')" if uri else match.group(0)

        for img in soup.find_all("img", src=True):
            if img["src"] in data_uris:
                img["src"] = data_uris[img["src"]]

        for el in soup.find_all(["img", "source"], srcset=True):
            el["srcset"] = rewrite_srcset(el["srcset"], data_uris.get)

        for el in soup.find_all(style=True):
            el["style"] = EXTERNAL_CSS_URL.sub(_css_replace, el["style"])

        for style in soup.find_all("style"):
            css = style.get_text()
            fixed = EXTERNAL_CSS_URL.sub(_css_replace, css)
            if fixed != css:
                style.string = fixed
