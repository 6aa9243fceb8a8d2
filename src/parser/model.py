# ============================================
# file: src/parser/model.py
# ============================================
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from scraper.model import Asset

TextBlockType = Literal['heading', 'paragraph', 'button', 'link', 'list-item', 'other']
LinkType = Literal['affiliate', 'tracking', 'redirect', 'cta', 'navigation', 'external', 'internal']
TrackingType = Literal[
    'facebook-pixel', 'google-analytics', 'google-tag-manager', 'tiktok-pixel', 'custom', 'other'
]


class TextBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    selector: str
    tag_name: str
    type: TextBlockType
    original_text: str


class DetectedLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: LinkType
    original_url: str
    anchor_text: Optional[str] = None
    selector: str
    confidence: float = Field(ge=0.0, le=1.0)
    detection_reason: str


class TrackingCode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: TrackingType
    code: str
    selector: Optional[str] = None
    should_remove: bool = False
    should_replace: bool = False


class FormField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    placeholder: Optional[str] = None
    required: bool = False


class FormElement(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    action: str
    method: str
    fields: List[FormField] = Field(default_factory=list)
    selector: str


class ParsedLandingPage(BaseModel):
    """Everything the extractors recover from one loaded document."""
    model_config = ConfigDict(frozen=True)

    id: str
    source_url: Optional[str] = None
    resolved_url: Optional[str] = None
    source_file_name: Optional[str] = None
    html: str
    title: str
    description: str = ""
    text_content: List[TextBlock] = Field(default_factory=list)
    assets: List[Asset] = Field(default_factory=list)
    links: List[DetectedLink] = Field(default_factory=list)
    tracking_codes: List[TrackingCode] = Field(default_factory=list)
    forms: List[FormElement] = Field(default_factory=list)
    parsed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    original_size: int = 0


class ParserSettings(BaseModel):
    min_paragraph_chars: int = 10
    max_leaf_text_chars: int = 500
    tracking_snippet_chars: int = 500
