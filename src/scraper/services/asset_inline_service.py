# src/scraper/services/asset_inline_service.py
import asyncio
import logging
import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from scraper.services.http_fetch_service import HttpFetchService
from scraper.utils.url_utils import CSS_URL_PATTERN, UrlUtils

logger = logging.getLogger(__name__)


class AssetInlineService:
    """
    Makes a fetched page self-contained: external stylesheets and scripts are
    downloaded in parallel and inlined, image references are made absolute.
    A failed download leaves the original tag untouched.
    """

    def __init__(self, fetcher: HttpFetchService):
        self.fetcher = fetcher

    async def inline_all(self, soup: BeautifulSoup, base_url: str) -> None:
        await self.inline_external_css(soup, base_url)
        await self.inline_external_js(soup, base_url)
        self.make_image_urls_absolute(soup, base_url)

    async def inline_external_css(self, soup: BeautifulSoup, base_url: str) -> int:
        """Replaces every <link rel=stylesheet> with a <style> carrying the fetched CSS."""
        targets: List[Tuple[Tag, str]] = []
        for link in soup.find_all("link", rel=lambda v: v and "stylesheet" in _rel_values(v)):
            href = link.get("href")
            if href and not href.startswith("data:"):
                targets.append((link, UrlUtils.resolve_url(href, base_url)))

        bodies = await self._fetch_all([href for _, href in targets])

        inlined = 0
        for (link, href), css in zip(targets, bodies):
            if not css:
                continue
            fixed_css = UrlUtils.fix_css_urls(css, UrlUtils.css_base_url(href))
            style = soup.new_tag("style")
            style.string = f"/* Source: {href} */\n{fixed_css}"
            link.replace_with(style)
            inlined += 1

        logger.debug("Inlined %d/%d stylesheet(s).", inlined, len(targets))
        return inlined

    async def inline_external_js(self, soup: BeautifulSoup, base_url: str) -> int:
        """Moves the body of every external <script src> into the tag itself."""
        targets: List[Tuple[Tag, str]] = []
        for script in soup.find_all("script", src=True):
            src = script.get("src")
            if src and not src.startswith("data:"):
                targets.append((script, UrlUtils.resolve_url(src, base_url)))

        bodies = await self._fetch_all([src for _, src in targets])

        inlined = 0
        for (script, src), js in zip(targets, bodies):
            if not js:
                continue
            del script["src"]
            script.string = f"/* Source: {src} */\n{js}"
            inlined += 1

        logger.debug("Inlined %d/%d script(s).", inlined, len(targets))
        return inlined

    @staticmethod
    def make_image_urls_absolute(soup: BeautifulSoup, base_url: str) -> None:
        for img in soup.find_all("img", src=True):
            src = img["src"]
            if src and not src.startswith(("data:", "http")):
                img["src"] = UrlUtils.resolve_url(src, base_url)

        for el in soup.find_all(["img", "source"], srcset=True):
            img_srcset = el["srcset"]
            if img_srcset:
                el["srcset"] = rewrite_srcset(
                    img_srcset,
                    lambda u: UrlUtils.resolve_url(u, base_url)
                    if not u.startswith(("data:", "http")) else None,
                )

        for el in soup.find_all(style=re.compile(r"url\(")):
            el["style"] = _absolutize_style(el["style"], base_url)

    async def _fetch_all(self, urls: List[str]) -> List[Optional[str]]:
        if not urls:
            return []
        results = await asyncio.gather(
            *(self.fetcher.fetch_text(url) for url in urls), return_exceptions=True
        )
        bodies: List[Optional[str]] = []
        for url, result in zip(urls, results):
            if isinstance(result, BaseException):
                logger.warning("Failed to fetch %s: %s", url, result)
                bodies.append(None)
            else:
                bodies.append(result)
        return bodies


def _rel_values(value) -> List[str]:
    if isinstance(value, str):
        return value.lower().split()
    return [v.lower() for v in value]


def _absolutize_style(style: str, base_url: str) -> str:
    def _replace(match: re.Match) -> str:
        ref = match.group(1)
        if ref.startswith(("data:", "http")):
            return match.group(0)
        return f"url('{UrlUtils.resolve_url(ref, base_url)}')"

    return CSS_URL_PATTERN.sub(_replace, style)


def rewrite_srcset(srcset: str, mapper) -> str:
    """
    Applies `mapper` to the URL of each srcset candidate. A mapper returning
    None leaves that candidate as it was.
    """
    parts = []
    for candidate in srcset.split(","):
        pieces = candidate.strip().split()
        if not pieces:
            parts.append(candidate)
            continue
        replacement = mapper(pieces[0])
        if replacement is None:
            parts.append(candidate.strip())
        else:
            parts.append(" ".join([replacement] + pieces[1:]))
    return ", ".join(parts)
