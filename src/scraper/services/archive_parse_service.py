# src/scraper/services/archive_parse_service.py
import base64
import io
import logging
import zipfile
from typing import Dict, Iterable, List, Optional, Tuple

from scraper.exceptions import NoDocumentFoundError
from scraper.model import Asset
from scraper.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

ASSET_TYPES: Dict[str, str] = {
    "jpg": "image",
    "jpeg": "image",
    "png": "image",
    "gif": "image",
    "svg": "image",
    "webp": "image",
    "ico": "image",
    "css": "css",
    "js": "js",
    "woff": "font",
    "woff2": "font",
    "ttf": "font",
    "eot": "font",
    "otf": "font",
    "mp4": "video",
    "webm": "video",
    "mp3": "other",
    "json": "other",
}


class ArchiveParseService:
    """Reads an uploaded landing page zip: picks the main document and classifies siblings."""

    def read_archive(self, data: bytes, archive_name: str) -> Tuple[str, str, List[Asset]]:
        """
        Returns:
            Tuple of (main document path, decoded HTML, bundled assets).

        Raises:
            NoDocumentFoundError: If the bytes are not a zip or hold no HTML entry.
        """
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except zipfile.BadZipFile as e:
            raise NoDocumentFoundError(archive_name, reason=f"Invalid ZIP archive ({e})") from e

        with archive:
            names = [info.filename for info in archive.infolist() if not info.is_dir()]
            main_path = self.find_main_document(names)
            if main_path is None:
                raise NoDocumentFoundError(archive_name)

            html = archive.read(main_path).decode("utf-8", errors="replace")
            assets = self.extract_assets(archive, names, main_path)

        logger.info("Archive %s: main document %s, %d bundled asset(s).", archive_name, main_path, len(assets))
        return main_path, html, assets

    @staticmethod
    def find_main_document(names: Iterable[str]) -> Optional[str]:
        """index.html first, then a root-level HTML file, then any HTML file."""
        html_files = [n for n in names if n.lower().endswith((".html", ".htm"))]
        for name in html_files:
            if name.lower() == "index.html":
                return name
        for name in html_files:
            if "/" not in name:
                return name
        return html_files[0] if html_files else None

    @staticmethod
    def asset_type(path: str) -> Optional[str]:
        return ASSET_TYPES.get(UrlUtils.get_extension(path))

    def extract_assets(self, archive: zipfile.ZipFile, names: List[str], main_path: str) -> List[Asset]:
        base_path = main_path[: main_path.rfind("/") + 1] if "/" in main_path else ""
        assets: List[Asset] = []

        for path in names:
            if path == main_path:
                continue
            kind = self.asset_type(path)
            if kind is None:
                continue

            content = archive.read(path)
            assets.append(Asset(
                id=f"zip-asset-{len(assets) + 1}",
                type=kind,
                original_url=path[len(base_path):] if path.startswith(base_path) else path,
                local_path=path,
                base64_data=base64.b64encode(content).decode("ascii"),
                file_name=path.rsplit("/", 1)[-1] or path,
                mime_type=UrlUtils.guess_mime_type(path),
                size=len(content),
            ))
        return assets


def merge_assets(html_assets: List[Asset], zip_assets: List[Asset]) -> List[Asset]:
    """Merges by file name; entries from the archive win over URL-only references."""
    merged: Dict[str, Asset] = {}
    for asset in zip_assets:
        merged[asset.file_name] = asset
    for asset in html_assets:
        merged.setdefault(asset.file_name, asset)
    return list(merged.values())
