# src/scraper/services/asset_reference_service.py
from typing import List

from bs4 import BeautifulSoup

from scraper.model import Asset
from scraper.utils.url_utils import UrlUtils


def extract_asset_references(soup: BeautifulSoup, base_url: str) -> List[Asset]:
    """
    Lists the images a document references, deduplicated by resolved URL.
    These are references only; nothing is downloaded.
    """
    assets: List[Asset] = []
    seen = set()
    for img in soup.find_all("img", src=True):
        src = img.get("src")
        if not src:
            continue
        absolute_url = UrlUtils.resolve_url(src, base_url)
        if absolute_url in seen:
            continue
        seen.add(absolute_url)
        assets.append(Asset(
            id=f"asset-{len(assets) + 1}",
            type="image",
            original_url=absolute_url,
            file_name=UrlUtils.get_file_name(absolute_url),
            mime_type=UrlUtils.guess_mime_type(absolute_url),
        ))
    return assets
