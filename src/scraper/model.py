# src/scraper/model.py (Loader Layer)
from datetime import datetime, timezone
from typing import List, Literal, Optional

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict, Field

AssetType = Literal['image', 'css', 'js', 'font', 'video', 'other']


class Asset(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: AssetType
    original_url: str
    file_name: str
    local_path: Optional[str] = None
    base64_data: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None


class ParsedDocument(BaseModel):
    """
    A loaded HTML document with external CSS/JS inlined and image URLs made
    absolute, plus the metadata of how it was obtained.

    The model stores markup, not a tree: call `make_soup()` once per analysis
    run and hand the tree to the extractors.
    """
    model_config = ConfigDict(frozen=True)

    html: str
    title: str = "Untitled"
    description: str = ""
    original_size: int = 0
    source_url: Optional[str] = None
    resolved_url: Optional[str] = None
    base_url: str = ""
    source_file_name: Optional[str] = None
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    # Binary assets shipped alongside the document (zip uploads only).
    bundled_assets: List[Asset] = Field(default_factory=list)

    def make_soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "html.parser")


class ScrapeSettings(BaseModel):
    page_timeout: float = Field(default=30.0)
    asset_timeout: float = Field(default=15.0)
    image_timeout: float = Field(default=2.0, description="Per-image download budget in seconds.")
    max_image_bytes: int = Field(default=2 * 1024 * 1024, description="Images above this size are never embedded.")
