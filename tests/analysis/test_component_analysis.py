# tests/analysis/test_component_analysis.py
import pytest

from analyzer.model import QuizData, QuizQuestion, RawPageData
from analyzer.services.component_analysis_service import (
    ComponentAnalysisService,
    validate_sections,
    validate_techniques,
)


@pytest.fixture
def quiz_raw():
    return RawPageData(
        headlines=["Meet singles", "Chat tonight"],
        buttons=["Start"],
        has_multi_step=True,
        quiz_data=QuizData(
            questions=[QuizQuestion(question="Are you over 18 years?", answers=["Yes", "No"])],
            hook_texts=["Hundreds of local members are online right now"],
        ),
    )


def test_deterministic_quiz_analysis(quiz_raw):
    parts = ComponentAnalysisService(quiz_raw).analyze()

    assert [(c.id, c.type, c.position) for c in parts.components] == [
        ("headline-1", "headline", 1),
        ("headline-2", "subheadline", 2),
        ("quiz-question-1", "quiz-question", 3),
        ("hook-text-1", "body-text", 4),
        ("button-1", "button", 5),
    ]
    assert parts.components[2].notes == "Quiz question with answers: Yes, No"
    assert parts.flow.type == "multi-step"
    assert parts.flow.total_steps == 3
    assert parts.flow.has_progress_indicator is True
    assert [(s.type, s.step_numbers) for s in parts.sections] == [("hook", [1]), ("quiz", [2]), ("cta", [3])]
    assert parts.strategy_summary.main_hook == "Meet singles"
    assert parts.strategy_summary.conversion_mechanism == "Quiz funnel"
    assert parts.vertical == "casual"


def test_deterministic_single_page():
    parts = ComponentAnalysisService(RawPageData(buttons=["Go"])).analyze()

    assert parts.flow.type == "single-page"
    assert parts.flow.total_steps == 1
    assert [(s.type, s.step_numbers) for s in parts.sections] == [("hook", [1])]
    assert parts.strategy_summary.main_hook == "Find matches"
    assert parts.strategy_summary.conversion_mechanism == "Direct CTA"


def test_vertical_detection():
    mainstream = RawPageData(paragraphs=["Find your soulmate and build something meaningful"])
    adult = RawPageData(headlines=["A discreet affair"], paragraphs=["Find love"])

    assert ComponentAnalysisService(mainstream).detect_vertical() == "mainstream"
    assert ComponentAnalysisService(adult).detect_vertical() == "adult"


def test_enrichment_is_validated(quiz_raw):
    """Unknown enum values fall back to defaults; missing sections are synthesised."""
    enriched = {
        "components": [
            {"id": "c1", "type": "banner", "content": "Hi", "role": "attention-grabber",
             "importance": "critical", "persuasion_techniques": ["curiosity", "mind-control"], "position": "2"},
            "not a component",
        ],
        "sections": [],
        "flow": {"type": "weird", "total_steps": 4},
        "vertical": "kids",
        "tone": "urgent-exciting",
        "strategy_summary": {"key_persuasion_tactics": "urgency"},
    }

    parts = ComponentAnalysisService(quiz_raw, enrich=lambda raw: enriched).analyze()

    first, second = parts.components
    assert (first.type, first.role, first.persuasion_techniques, first.position) == (
        "container", "attention-grabber", ["curiosity"], 2)
    assert (second.id, second.role, second.importance, second.persuasion_techniques) == (
        "component-2", "unknown", "optional", ["none"])
    assert [(s.type, s.step_numbers) for s in parts.sections] == [("hook", [1]), ("quiz", [2, 3]), ("cta", [4])]
    assert (parts.flow.type, parts.flow.total_steps, parts.flow.has_progress_indicator) == ("multi-step", 4, True)
    assert parts.vertical == "casual"
    assert parts.tone == "urgent-exciting"
    assert parts.strategy_summary.main_hook == "Meet singles"
    assert parts.strategy_summary.key_persuasion_tactics == ["none"]


def test_enrichment_failure_falls_back(quiz_raw):
    def broken(raw):
        raise RuntimeError("model unavailable")

    service = ComponentAnalysisService(quiz_raw, enrich=broken)

    assert service.analyze() == service.deterministic_analysis()


def test_enrichment_total_steps_defaults_to_headline_count(quiz_raw):
    parts = ComponentAnalysisService(quiz_raw, enrich=lambda raw: {}).analyze()
    assert parts.flow.total_steps == 2

    no_headlines = RawPageData(has_multi_step=False)
    parts = ComponentAnalysisService(no_headlines, enrich=lambda raw: {}).analyze()
    assert parts.flow.total_steps == 5
    assert parts.flow.type == "single-page"


def test_validators():
    assert validate_techniques(None) == ["none"]
    assert validate_techniques(["urgency", "bogus"]) == ["urgency"]

    sections = validate_sections(
        [{"type": "quiz", "step_numbers": [2, 3], "components": ["c1", 2]}, "junk"], 5, True
    )
    assert [(s.type, s.step_numbers, s.components) for s in sections] == [
        ("quiz", [2, 3], ["c1", "2"]),
        ("unknown", [1], []),
    ]
