# src/analyzer/model.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SectionType = Literal[
    'header', 'hero', 'features', 'benefits', 'testimonials', 'social-proof', 'pricing',
    'faq', 'cta', 'footer', 'form', 'gallery', 'video', 'unknown',
]
ButtonType = Literal['cta', 'secondary', 'navigation', 'submit']
ListType = Literal['bullet', 'numbered', 'check', 'icon']
VideoType = Literal['youtube', 'vimeo', 'html5', 'embed']
PersuasionType = Literal[
    'urgency', 'scarcity', 'social-proof', 'authority', 'trust-badge', 'guarantee',
    'fomo', 'countdown', 'discount', 'free-offer',
]
Strength = Literal['weak', 'medium', 'strong']
ColumnLayout = Literal['single', 'two-column', 'multi-column', 'mixed']
FlowType = Literal['single-page', 'multi-step', 'long-form', 'video-sales']
FlowPurpose = Literal['attention', 'interest', 'desire', 'action', 'trust', 'objection-handling']
Framework = Literal['AIDA', 'PAS', 'BAB', 'custom']
CtaFrequency = Literal['single', 'repeated', 'progressive']


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Sections & components
# ---------------------------------------------------------------------------

class PageSection(_Frozen):
    id: str
    type: SectionType
    selector: str
    order: int
    html: str


class HeadlineComponent(_Frozen):
    id: str
    selector: str
    section_id: Optional[str] = None
    text: str
    level: int = Field(ge=1, le=6)
    is_main_headline: bool = False


class TextComponent(_Frozen):
    id: str
    selector: str
    section_id: Optional[str] = None
    text: str
    word_count: int


class ButtonComponent(_Frozen):
    id: str
    selector: str
    section_id: Optional[str] = None
    text: str
    href: Optional[str] = None
    type: ButtonType
    has_urgency: bool = False


class Dimensions(_Frozen):
    width: int
    height: int


class ImageComponent(_Frozen):
    id: str
    selector: str
    section_id: Optional[str] = None
    src: str
    alt: Optional[str] = None
    is_hero: bool = False
    is_icon: bool = False
    dimensions: Optional[Dimensions] = None


class AnalyzerFormField(_Frozen):
    name: str
    type: str
    label: Optional[str] = None
    required: bool = False


class FormComponent(_Frozen):
    id: str
    selector: str
    section_id: Optional[str] = None
    action: Optional[str] = None
    method: str
    fields: List[AnalyzerFormField] = Field(default_factory=list)
    submit_button: Optional[str] = None


class ListComponent(_Frozen):
    id: str
    selector: str
    section_id: Optional[str] = None
    items: List[str] = Field(default_factory=list)
    type: ListType


class VideoComponent(_Frozen):
    id: str
    selector: str
    section_id: Optional[str] = None
    src: str
    type: VideoType
    thumbnail: Optional[str] = None


class ComponentMap(_Frozen):
    headlines: List[HeadlineComponent] = Field(default_factory=list)
    subheadlines: List[TextComponent] = Field(default_factory=list)
    paragraphs: List[TextComponent] = Field(default_factory=list)
    buttons: List[ButtonComponent] = Field(default_factory=list)
    images: List[ImageComponent] = Field(default_factory=list)
    forms: List[FormComponent] = Field(default_factory=list)
    lists: List[ListComponent] = Field(default_factory=list)
    videos: List[VideoComponent] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Persuasion & style
# ---------------------------------------------------------------------------

class PersuasionElement(_Frozen):
    id: str
    type: PersuasionType
    selector: str
    content: str
    strength: Strength


class ColorInfo(_Frozen):
    primary: List[str] = Field(default_factory=list)
    secondary: List[str] = Field(default_factory=list)
    background: List[str] = Field(default_factory=list)
    text: List[str] = Field(default_factory=list)
    cta: List[str] = Field(default_factory=list)


class TypographyInfo(_Frozen):
    heading_fonts: List[str] = Field(default_factory=list)
    body_fonts: List[str] = Field(default_factory=list)
    font_sizes: List[str] = Field(default_factory=list)


class LayoutInfo(_Frozen):
    max_width: Optional[str] = None
    has_fixed_header: bool = False
    has_sticky_elements: bool = False
    column_layout: ColumnLayout = 'single'


class StyleInfo(_Frozen):
    colors: ColorInfo = Field(default_factory=ColorInfo)
    typography: TypographyInfo = Field(default_factory=TypographyInfo)
    layout: LayoutInfo = Field(default_factory=LayoutInfo)


# ---------------------------------------------------------------------------
# Flow
# ---------------------------------------------------------------------------

class FlowStage(_Frozen):
    order: int
    section_id: str
    section_type: SectionType
    purpose: FlowPurpose
    has_cta_button: bool = False
    key_message: Optional[str] = None


class CtaStrategy(_Frozen):
    primary_cta: str
    primary_cta_url: Optional[str] = None
    cta_frequency: CtaFrequency = 'single'
    cta_positions: List[str] = Field(default_factory=list)


class MessagingFlow(_Frozen):
    hook: Optional[str] = None
    problem: Optional[str] = None
    agitation: Optional[str] = None
    solution: Optional[str] = None
    benefits: Optional[List[str]] = None
    proof: Optional[str] = None
    offer: Optional[str] = None
    urgency: Optional[str] = None
    guarantee: Optional[str] = None


class LPFlow(_Frozen):
    type: FlowType
    stages: List[FlowStage] = Field(default_factory=list)
    framework: Framework = 'custom'
    cta_strategy: CtaStrategy
    messaging_flow: MessagingFlow = Field(default_factory=MessagingFlow)


class PageAnalysis(_Frozen):
    """Sections, components, persuasion, style and flow of one page."""
    id: str
    source_url: Optional[str] = None
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sections: List[PageSection] = Field(default_factory=list)
    components: ComponentMap = Field(default_factory=ComponentMap)
    persuasion_elements: List[PersuasionElement] = Field(default_factory=list)
    style_info: StyleInfo = Field(default_factory=StyleInfo)
    lp_flow: LPFlow
    html: str


class AnalyzerSettings(BaseModel):
    max_colors_per_bucket: int = 3
    top_colors: int = 15
    max_fonts: int = 3
    max_font_sizes: int = 10
    min_sections: int = 3


# ---------------------------------------------------------------------------
# Component analysis (the boundary artifact)
# ---------------------------------------------------------------------------

LPSectionType = Literal['hook', 'quiz', 'cta', 'testimonial', 'benefits', 'unknown']
ImageType = Literal['hero', 'background', 'decorative', 'icon', 'badge', 'profile', 'unknown']
ImagePosition = Literal['hook', 'quiz', 'cta', 'background', 'floating']
ComponentImportance = Literal['critical', 'important', 'optional']
ComponentRole = Literal[
    'attention-grabber', 'qualifier', 'engagement', 'trust-builder', 'desire-creator',
    'objection-handler', 'action-driver', 'urgency-creator', 'value-demonstrator',
    'brand-element', 'visual-support', 'navigation', 'redirect', 'unknown',
]
PersuasionTechnique = Literal[
    'curiosity', 'urgency', 'scarcity', 'social-proof', 'authority', 'reciprocity',
    'commitment-consistency', 'liking', 'fear-of-missing-out', 'exclusivity',
    'personalization', 'locality', 'transformation', 'pain-agitation', 'benefit-stacking',
    'risk-reversal', 'none',
]
ComponentType = Literal[
    'headline', 'subheadline', 'body-text', 'image', 'video', 'button', 'form',
    'quiz-question', 'testimonial', 'badge', 'countdown', 'list', 'icon',
    'progress-indicator', 'logo', 'footer', 'divider', 'container',
]
Vertical = Literal['adult', 'casual', 'mainstream']
Tone = Literal[
    'playful-seductive', 'urgent-exciting', 'professional-trustworthy', 'friendly-approachable',
    'bold-confident', 'intimate-personal', 'fun-lighthearted',
]
AnalysisFlowType = Literal['multi-step', 'single-page', 'long-form']


class AnalyzedComponent(_Frozen):
    id: str
    type: ComponentType
    content: str
    role: ComponentRole
    importance: ComponentImportance
    persuasion_techniques: List[PersuasionTechnique] = Field(default_factory=list)
    position: int
    notes: str = ""
    original_html: Optional[str] = None
    original_selector: Optional[str] = None


class DetectedSection(_Frozen):
    type: LPSectionType
    step_numbers: List[int] = Field(default_factory=list)
    description: str = ""
    components: List[str] = Field(default_factory=list)


class DetectedImage(_Frozen):
    url: str
    type: ImageType
    description: str
    position: ImagePosition
    is_required: bool = False


class AnalysisFlow(_Frozen):
    type: AnalysisFlowType
    total_steps: int
    has_progress_indicator: bool = False


class StrategySummary(_Frozen):
    main_hook: str
    value_proposition: str
    conversion_mechanism: str
    key_persuasion_tactics: List[PersuasionTechnique] = Field(default_factory=list)


class RawPageSummary(_Frozen):
    headlines: List[str] = Field(default_factory=list)
    buttons: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    forms: int = 0


class ComponentAnalysis(_Frozen):
    """
    The self-describing result handed to downstream prompt builders.
    Nothing in it refers back to the DOM it came from.
    """
    id: str
    source_url: Optional[str] = None
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    components: List[AnalyzedComponent] = Field(default_factory=list)
    sections: List[DetectedSection] = Field(default_factory=list)
    flow: AnalysisFlow
    vertical: Vertical = 'casual'
    tone: Tone = 'playful-seductive'
    tracking_url: str = ""
    images: List[DetectedImage] = Field(default_factory=list)
    original_images: List[str] = Field(default_factory=list)
    strategy_summary: StrategySummary
    raw_page_data: RawPageSummary = Field(default_factory=RawPageSummary)


# Raw page data the component analysis is built from.
class QuizQuestion(_Frozen):
    question: str
    answers: List[str] = Field(default_factory=list)


class QuizData(_Frozen):
    questions: List[QuizQuestion] = Field(default_factory=list)
    titles: List[str] = Field(default_factory=list)
    hook_texts: List[str] = Field(default_factory=list)


class RawFormData(_Frozen):
    action: str = ""
    fields: List[str] = Field(default_factory=list)


class RawPageData(_Frozen):
    headlines: List[str] = Field(default_factory=list)
    buttons: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    background_images: List[str] = Field(default_factory=list)
    forms: List[RawFormData] = Field(default_factory=list)
    paragraphs: List[str] = Field(default_factory=list)
    lists: List[str] = Field(default_factory=list)
    has_multi_step: bool = False
    script_excerpt: str = ""
    quiz_data: QuizData = Field(default_factory=QuizData)

    def as_payload(self) -> Dict[str, Any]:
        return self.model_dump()
