# src/scraper/utils/url_utils.py
import logging
import os
import re
from typing import Optional
from urllib.parse import urljoin, urlparse

logger = logging.getLogger(__name__)

CSS_URL_PATTERN = re.compile(r"""url\(['"]?([^'")\s]+)['"]?\)""")

MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "ico": "image/x-icon",
    "avif": "image/avif",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "woff": "font/woff",
    "woff2": "font/woff2",
    "ttf": "font/ttf",
    "eot": "application/vnd.ms-fontobject",
    "otf": "font/otf",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mp3": "audio/mpeg",
}


class UrlUtils:
    """A collection of static methods for URL resolution on landing pages."""

    @staticmethod
    def is_external_url(url: str) -> bool:
        return url.startswith(("http://", "https://"))

    @staticmethod
    def compute_base_url(resolved_url: str) -> str:
        """
        Returns origin + directory of the final URL (last path segment dropped),
        which is what relative asset paths on the page are relative to.
        """
        parsed = urlparse(resolved_url)
        directory = parsed.path.rsplit("/", 1)[0] if "/" in parsed.path else ""
        return f"{parsed.scheme}://{parsed.netloc}{directory}"

    @staticmethod
    def resolve_url(url: str, base_url: str) -> str:
        """
        Creates an absolute URL for an asset reference found on the page.
        Without a base URL relative references are returned unchanged.
        """
        if not url:
            return ""
        if url.startswith("data:"):
            return url
        if url.startswith("//"):
            return f"https:{url}"
        if UrlUtils.is_external_url(url):
            return url
        if not base_url:
            return url
        base = base_url if base_url.endswith("/") else base_url + "/"
        return urljoin(base, url)

    @staticmethod
    def css_base_url(css_url: str) -> str:
        """Directory of a stylesheet URL, including the trailing slash."""
        return css_url[: css_url.rfind("/") + 1]

    @staticmethod
    def fix_css_urls(css: str, css_base: str) -> str:
        """Rewrites relative url(...) references inside fetched CSS to absolute form."""

        def _replace(match: re.Match) -> str:
            ref = match.group(1)
            if ref.startswith(("data:", "http", "//")):
                return match.group(0)
            return f"url('{UrlUtils.resolve_url(ref, css_base)}')"

        return CSS_URL_PATTERN.sub(_replace, css)

    @staticmethod
    def get_file_name(url: str) -> str:
        """Last path segment of a URL, or 'unknown'."""
        try:
            path = urlparse(url).path
        except ValueError:
            logger.debug("Could not parse URL for file name: %s", url)
            return "unknown"
        name = path.rstrip("/").rsplit("/", 1)[-1] if path else ""
        return name or "unknown"

    @staticmethod
    def get_extension(url: str) -> str:
        try:
            path = urlparse(url).path
        except ValueError:
            path = url
        _, ext = os.path.splitext(path)
        return ext.lstrip(".").lower()

    @staticmethod
    def guess_mime_type(url: str, default: str = "application/octet-stream") -> str:
        return MIME_TYPES.get(UrlUtils.get_extension(url), default)

    @staticmethod
    def get_hostname(url: str) -> Optional[str]:
        try:
            candidate = f"https:{url}" if url.startswith("//") else url
            host = urlparse(candidate).hostname
        except ValueError:
            return None
        return host or None
