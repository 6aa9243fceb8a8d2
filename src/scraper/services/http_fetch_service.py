# src/scraper/services/http_fetch_service.py
import asyncio
import logging
from typing import Optional, Tuple

import aiohttp

from scraper.exceptions import FetchError
from scraper.model import ScrapeSettings
from scraper.services.generate_default_user_agent_service import (
    default_accept_header,
    generate_default_user_agent,
)

logger = logging.getLogger(__name__)


class HttpFetchService:
    """
    Central service for executing the HTTP GETs a landing page load needs:
    the page itself, its stylesheets/scripts and its images.
    Manages the aiohttp session; an externally owned session can be injected.
    """

    def __init__(
            self,
            config: Optional[ScrapeSettings] = None,
            user_agent: Optional[str] = None,
            session: Optional[aiohttp.ClientSession] = None,
    ):
        self.config = config or ScrapeSettings()
        self.user_agent = user_agent or generate_default_user_agent()
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def initialize(self):
        if not self.session or self.session.closed:
            default_headers = {
                'User-Agent': self.user_agent,
                'Accept': default_accept_header(),
            }
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.page_timeout),
                headers=default_headers,
            )
            self._owns_session = True
            logger.debug("HttpFetchService: Session initialized.")

    async def close(self):
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            logger.debug("HttpFetchService: Session closed.")

    async def fetch_page(self, url: str) -> Tuple[str, str]:
        """
        Fetches the landing page, following redirects.

        Returns:
            Tuple[str, str]: The HTML body and the final URL after redirects.

        Raises:
            FetchError: On a non-2xx status or a transport failure.
        """
        if not self.session or self.session.closed:
            await self.initialize()

        try:
            async with self.session.get(
                    url,
                    allow_redirects=True,
                    timeout=aiohttp.ClientTimeout(total=self.config.page_timeout),
            ) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(url, status=response.status, reason=response.reason)
                html = await self._read_text(response, url)
                return html, str(response.url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(url, reason=str(e) or type(e).__name__) from e

    async def fetch_text(self, url: str) -> Optional[str]:
        """Fetches a stylesheet or script. Any failure yields None."""
        if not self.session or self.session.closed:
            await self.initialize()

        try:
            async with self.session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self.config.asset_timeout)
            ) as response:
                if not 200 <= response.status < 300:
                    logger.warning("Failed to fetch asset %s: HTTP %s", url, response.status)
                    return None
                return await self._read_text(response, url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Failed to fetch asset %s: %s", url, e)
            return None

    async def fetch_image(self, url: str) -> Optional[Tuple[bytes, Optional[str]]]:
        """
        Downloads an image within the per-image time budget.
        Images reported (or found) to be larger than `max_image_bytes` are skipped.

        Returns:
            The raw bytes and the Content-Type header, or None.
        """
        if not self.session or self.session.closed:
            await self.initialize()

        max_bytes = self.config.max_image_bytes
        try:
            async with self.session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self.config.image_timeout)
            ) as response:
                if not 200 <= response.status < 300:
                    logger.debug("Image %s returned HTTP %s", url, response.status)
                    return None

                declared = response.headers.get('content-length')
                if declared and declared.isdigit() and int(declared) > max_bytes:
                    logger.debug("Skipping image %s: declared size %s exceeds limit", url, declared)
                    return None

                data = await response.read()
                if len(data) > max_bytes:
                    logger.debug("Skipping image %s: %d bytes exceeds limit", url, len(data))
                    return None
                return data, response.headers.get('content-type')
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug("Failed to embed image %s: %s", url, e)
            return None

    @staticmethod
    async def _read_text(response, url: str) -> str:
        try:
            return await response.text()
        except UnicodeDecodeError:
            # Fallback decoding
            logger.debug("Non-UTF8 body for %s, decoding with replacement.", url)
            content_bytes = await response.read()
            return content_bytes.decode('utf-8', errors='replace')
