# src/analyzer/services/component_analysis_service.py
import logging
import re
from typing import Any, Callable, List, Mapping, NamedTuple, Optional, get_args

from analyzer.model import (
    AnalysisFlow,
    AnalysisFlowType,
    AnalyzedComponent,
    ComponentImportance,
    ComponentRole,
    ComponentType,
    DetectedSection,
    LPSectionType,
    PersuasionTechnique,
    RawPageData,
    StrategySummary,
    Tone,
    Vertical,
)

logger = logging.getLogger(__name__)

# Receives the raw page inventory and returns an externally produced analysis.
Enricher = Callable[[RawPageData], Mapping[str, Any]]

COMPONENT_TYPES = get_args(ComponentType)
ROLES = get_args(ComponentRole)
IMPORTANCES = get_args(ComponentImportance)
TECHNIQUES = get_args(PersuasionTechnique)
VERTICALS = get_args(Vertical)
TONES = get_args(Tone)
SECTION_TYPES = get_args(LPSectionType)
FLOW_TYPES = get_args(AnalysisFlowType)

ADULT_LANGUAGE = re.compile(r"hookup|nsa|affair|milf|cougar|sex|fuck|horny|nude|discreet", re.I)
MAINSTREAM_LANGUAGE = re.compile(r"love|relationship|soulmate|marriage|serious|meaningful", re.I)


class AnalysisParts(NamedTuple):
    components: List[AnalyzedComponent]
    sections: List[DetectedSection]
    flow: AnalysisFlow
    vertical: Vertical
    tone: Tone
    strategy_summary: StrategySummary


def _one_of(value: Any, allowed, default):
    return value if value in allowed else default


def validate_techniques(techniques: Any) -> List[PersuasionTechnique]:
    if not isinstance(techniques, list):
        return ['none']
    return [t for t in techniques if t in TECHNIQUES]


def validate_vertical(vertical: Any) -> Vertical:
    return _one_of(vertical, VERTICALS, 'casual')


def validate_tone(tone: Any) -> Tone:
    return _one_of(tone, TONES, 'playful-seductive')


def validate_components(components: Any) -> List[AnalyzedComponent]:
    if not isinstance(components, list):
        return []

    validated = []
    for index, component in enumerate(components):
        component = component if isinstance(component, Mapping) else {}
        try:
            position = int(component.get("position") or 0)
        except (TypeError, ValueError):
            position = 0
        validated.append(AnalyzedComponent(
            id=str(component.get("id") or f"component-{index + 1}"),
            type=_one_of(component.get("type"), COMPONENT_TYPES, 'container'),
            content=str(component.get("content") or ""),
            role=_one_of(component.get("role"), ROLES, 'unknown'),
            importance=_one_of(component.get("importance"), IMPORTANCES, 'optional'),
            persuasion_techniques=validate_techniques(component.get("persuasion_techniques")),
            position=position or index + 1,
            notes=str(component.get("notes") or ""),
        ))
    return validated


def default_sections(total_steps: int, is_multi_step: bool) -> List[DetectedSection]:
    """Hook, quiz steps 2..N-1 and a final CTA; a single hook section for static pages."""
    if not is_multi_step:
        return [DetectedSection(type='hook', step_numbers=[1], description='Single page with hook and CTA')]

    quiz_steps = list(range(2, 2 + max(total_steps - 2, 1)))
    return [
        DetectedSection(type='hook', step_numbers=[1], description='Initial hook with headline'),
        DetectedSection(type='quiz', step_numbers=quiz_steps, description='Quiz questions'),
        DetectedSection(type='cta', step_numbers=[total_steps], description='Final CTA'),
    ]


def validate_sections(sections: Any, total_steps: int, is_multi_step: bool) -> List[DetectedSection]:
    if not isinstance(sections, list) or not sections:
        return default_sections(total_steps, is_multi_step)

    validated = []
    for section in sections:
        section = section if isinstance(section, Mapping) else {}
        step_numbers = section.get("step_numbers")
        components = section.get("components")
        validated.append(DetectedSection(
            type=_one_of(section.get("type"), SECTION_TYPES, 'unknown'),
            step_numbers=step_numbers if isinstance(step_numbers, list) else [1],
            description=str(section.get("description") or ""),
            components=[str(c) for c in components] if isinstance(components, list) else [],
        ))
    return validated


class ComponentAnalysisService:
    """
    Turns the raw page inventory into role-tagged components, funnel sections,
    flow, vertical, tone and a strategy summary.

    When an `enrich` callable is supplied its output is validated field by
    field; if it raises, the deterministic analysis is used instead.
    """

    def __init__(self, raw_data: RawPageData, enrich: Optional[Enricher] = None):
        self.raw_data = raw_data
        self.enrich = enrich

    def analyze(self) -> AnalysisParts:
        if self.enrich is None:
            return self.deterministic_analysis()
        try:
            return self.validate_enrichment(self.enrich(self.raw_data))
        except Exception as e:
            logger.warning("Enrichment failed, using deterministic analysis: %s", e)
            return self.deterministic_analysis()

    def validate_enrichment(self, enriched: Mapping[str, Any]) -> AnalysisParts:
        raw = self.raw_data
        flow = enriched.get("flow") or {}
        summary = enriched.get("strategy_summary") or {}

        total_steps = flow.get("total_steps") or len(raw.headlines) or 5
        default_flow_type = 'multi-step' if raw.has_multi_step else 'single-page'
        has_progress = flow.get("has_progress_indicator")

        return AnalysisParts(
            components=validate_components(enriched.get("components") or []),
            sections=validate_sections(enriched.get("sections"), total_steps, raw.has_multi_step),
            flow=AnalysisFlow(
                type=_one_of(flow.get("type"), FLOW_TYPES, default_flow_type),
                total_steps=total_steps,
                has_progress_indicator=raw.has_multi_step if has_progress is None else bool(has_progress),
            ),
            vertical=validate_vertical(enriched.get("vertical")),
            tone=validate_tone(enriched.get("tone")),
            strategy_summary=StrategySummary(
                main_hook=summary.get("main_hook") or (raw.headlines[0] if raw.headlines else 'Unknown'),
                value_proposition=summary.get("value_proposition") or 'Find matches',
                conversion_mechanism=summary.get("conversion_mechanism") or 'Quiz funnel',
                key_persuasion_tactics=validate_techniques(summary.get("key_persuasion_tactics") or ['curiosity']),
            ),
        )

    def deterministic_analysis(self) -> AnalysisParts:
        raw = self.raw_data
        quiz = raw.quiz_data
        components: List[AnalyzedComponent] = []

        def add(**fields) -> None:
            components.append(AnalyzedComponent(position=len(components) + 1, **fields))

        for i, headline in enumerate(raw.headlines or quiz.titles):
            add(
                id=f"headline-{i + 1}",
                type='headline' if i == 0 else 'subheadline',
                content=headline,
                role='attention-grabber' if i == 0 else 'engagement',
                importance='critical' if i == 0 else 'important',
                persuasion_techniques=['curiosity'],
                notes='Main headline to grab attention' if i == 0 else 'Supporting headline',
            )

        for i, question in enumerate(quiz.questions):
            add(
                id=f"quiz-question-{i + 1}",
                type='quiz-question',
                content=question.question,
                role='engagement',
                importance='important',
                persuasion_techniques=['commitment-consistency', 'curiosity'],
                notes=(f"Quiz question with answers: {', '.join(question.answers)}"
                       if question.answers else 'Quiz question for user engagement'),
            )

        for i, hook in enumerate(quiz.hook_texts):
            add(
                id=f"hook-text-{i + 1}",
                type='body-text',
                content=hook,
                role='attention-grabber' if i == 0 else 'desire-creator',
                importance='critical' if i == 0 else 'important',
                persuasion_techniques=['curiosity', 'personalization'],
                notes='Hook/intro text to engage visitors',
            )

        for i, button in enumerate(raw.buttons):
            add(
                id=f"button-{i + 1}",
                type='button',
                content=button,
                role='action-driver',
                importance='critical',
                persuasion_techniques=['urgency'],
                notes='CTA button to drive action',
            )

        total_steps = max(len(quiz.questions) + 2, len(raw.headlines), 3) if raw.has_multi_step else 1
        main_hook = (
            (raw.headlines[0] if raw.headlines else None)
            or (quiz.titles[0] if quiz.titles else None)
            or (quiz.hook_texts[0][:50] if quiz.hook_texts else None)
            or 'Find matches'
        )

        return AnalysisParts(
            components=components,
            sections=default_sections(total_steps, raw.has_multi_step),
            flow=AnalysisFlow(
                type='multi-step' if raw.has_multi_step else 'single-page',
                total_steps=total_steps,
                has_progress_indicator=raw.has_multi_step,
            ),
            vertical=self.detect_vertical(),
            tone='playful-seductive',
            strategy_summary=StrategySummary(
                main_hook=main_hook,
                value_proposition=quiz.hook_texts[0][:100] if quiz.hook_texts else 'Connect with local singles',
                conversion_mechanism='Quiz funnel' if raw.has_multi_step else 'Direct CTA',
                key_persuasion_tactics=['curiosity', 'locality'],
            ),
        )

    def detect_vertical(self) -> Vertical:
        raw = self.raw_data
        text = " ".join([
            *raw.headlines,
            *raw.buttons,
            *raw.paragraphs,
            " ".join(q.question for q in raw.quiz_data.questions),
            " ".join(raw.quiz_data.hook_texts),
        ])
        if ADULT_LANGUAGE.search(text):
            return 'adult'
        if MAINSTREAM_LANGUAGE.search(text):
            return 'mainstream'
        return 'casual'
