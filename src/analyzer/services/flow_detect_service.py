# src/analyzer/services/flow_detect_service.py
import logging
import re
from typing import List, NamedTuple, Optional

from bs4 import BeautifulSoup

from analyzer.model import (
    ButtonComponent,
    ComponentMap,
    CtaFrequency,
    CtaStrategy,
    FlowPurpose,
    FlowStage,
    FlowType,
    Framework,
    LPFlow,
    MessagingFlow,
    PageSection,
    PersuasionElement,
    SectionType,
)
from analyzer.utils.script_utils import script_text
from parser.core import Cascade, cascade_rule

logger = logging.getLogger(__name__)

QUESTION_ARRAY = re.compile(r"(?:questionList|questions|steps|formSteps|quizSteps)\s*=\s*\[([^\]]+)\]")
QUESTION_OBJECT = re.compile(r"\{[^}]*(?:question|title|englishQuestion)[^}]*\}")
STEP_INDICATOR = re.compile(r"(?:step|question)\s*(?:\d+|\s*/\s*\d+)", re.I)
STATE_VARIABLE = re.compile(r"activeIndex|currentStep|stepIndex|questionIndex")
STEP_HANDLER = re.compile(r"yesNoHandler|nextStep|prevStep|goToStep|handleNext")
QUESTION_TEXT = re.compile(r"(?:question|englishQuestion)\s*:\s*[\"']([^\"']+)[\"']")
STEP_OF_TOTAL = re.compile(r"(\d+)\s*/\s*(\d+)")
NUMBER = re.compile(r"(\d+)")

JS_REDIRECT = re.compile(
    r"(?:window\.location\.href|location\.href|redirect(?:Url|URL)?)\s*=\s*[\"']([^\"']+)[\"']"
)
TRACKING_ANCHORS = (
    'a[href*="click"], a[href*="track"], a[href*="go."], a[href*="redirect"], '
    'a[href*="?sub"], a[href*="?ref"], a[href*="?aff"]'
)
CONTINUE_MARKED = '[id*="continue"], [class*="continue"], [onclick*="continue"]'
CONTINUE_TEXT = re.compile(r"continue|next|submit|yes", re.I)
CTA_ANCHOR_TEXT = re.compile(r"continue|next|submit|start|sign.?up|register|join", re.I)

PROGRESS_MARKUP = '[class*="step"], [class*="progress"], [class*="wizard"]'
PROBLEM_WORDS = ('problem', 'struggling', 'tired of')
PROBLEM_LANGUAGE = re.compile(r"problem|struggle|tired|frustrat|pain|difficult|challenge", re.I)
SOLUTION_LANGUAGE = re.compile(r"solution|introducing|discover|finally|answer|secret", re.I)

SECTION_PURPOSE = {
    'hero': 'attention',
    'features': 'interest',
    'benefits': 'interest',
    'testimonials': 'trust',
    'social-proof': 'trust',
    'pricing': 'action',
    'cta': 'action',
    'faq': 'objection-handling',
}


class ScriptSignals(NamedTuple):
    """Evidence that a single document hides a JS-driven step machine."""
    has_question_array: bool
    object_count: int
    step_indicators: List[str]
    has_state_variables: bool
    has_step_handlers: bool
    question_texts: List[str]

    @property
    def estimated_steps(self) -> int:
        # object count, then question text count, then the largest step number shown
        if self.object_count:
            return self.object_count
        if self.question_texts:
            return len(self.question_texts)
        highest = 0
        for indicator in self.step_indicators:
            match = STEP_OF_TOTAL.search(indicator)
            if match:
                highest = max(highest, int(match.group(2)))
                continue
            match = NUMBER.search(indicator)
            if match:
                highest = max(highest, int(match.group(1)))
        return highest

    @property
    def is_multi_step(self) -> bool:
        return self.estimated_steps >= 2 or (self.has_state_variables and self.has_step_handlers)

    @property
    def unique_questions(self) -> List[str]:
        return list(dict.fromkeys(self.question_texts))


def scan_script_signals(js_content: str, html: str) -> ScriptSignals:
    return ScriptSignals(
        has_question_array=QUESTION_ARRAY.search(js_content) is not None,
        object_count=len(QUESTION_OBJECT.findall(js_content)),
        step_indicators=STEP_INDICATOR.findall(html),
        has_state_variables=STATE_VARIABLE.search(js_content) is not None,
        has_step_handlers=STEP_HANDLER.search(js_content) is not None,
        question_texts=QUESTION_TEXT.findall(js_content),
    )


class CtaUrlSubject(NamedTuple):
    soup: BeautifulSoup
    js_content: str


@cascade_rule("js-redirect")
def js_redirect_rule(subject: CtaUrlSubject) -> Optional[str]:
    match = JS_REDIRECT.search(subject.js_content)
    if match and match.group(1) != '#':
        return match.group(1)
    return None


@cascade_rule("tracking-anchor")
def tracking_anchor_rule(subject: CtaUrlSubject) -> Optional[str]:
    anchor = subject.soup.select_one(TRACKING_ANCHORS)
    href = anchor.get("href") if anchor is not None else None
    return href if href and href != '#' else None


@cascade_rule("cta-text-anchor")
def cta_text_anchor_rule(subject: CtaUrlSubject) -> Optional[str]:
    for anchor in subject.soup.find_all("a"):
        href = anchor.get("href") or ""
        if href and href != '#' and CTA_ANCHOR_TEXT.search(anchor.get_text()):
            return href
    return None


@cascade_rule("any-anchor")
def any_anchor_rule(subject: CtaUrlSubject) -> Optional[str]:
    for anchor in subject.soup.find_all("a", href=True):
        href = anchor["href"]
        if href != '#' and not href.startswith('javascript:') and len(href) > 1:
            return href
    return None


@cascade_rule("form-action")
def form_action_rule(subject: CtaUrlSubject) -> Optional[str]:
    form = subject.soup.find("form", action=True)
    if form is not None and form["action"] != '#':
        return form["action"]
    return None


CTA_URL_CASCADE: Cascade[CtaUrlSubject, str] = Cascade([
    js_redirect_rule,
    tracking_anchor_rule,
    cta_text_anchor_rule,
    any_anchor_rule,
    form_action_rule,
])


def map_section_to_purpose(section_type: SectionType, index: int, total: int) -> FlowPurpose:
    purpose = SECTION_PURPOSE.get(section_type)
    if purpose:
        return purpose
    if section_type in ('gallery', 'video'):
        return 'interest' if index < total / 2 else 'desire'

    if index == 0:
        return 'attention'
    if index < total * 0.3:
        return 'interest'
    if index < total * 0.7:
        return 'desire'
    return 'action'


def _is_cta(button: ButtonComponent) -> bool:
    return button.type in ('cta', 'submit')


class FlowDetectService:
    """
    Infers the persuasion journey of a page.

    A JS-driven step machine wins outright when its signals are present;
    otherwise the flow type, stages, framework, CTA strategy and messaging
    are read from the detected sections and components.
    """

    def __init__(
            self,
            soup: BeautifulSoup,
            sections: List[PageSection],
            components: ComponentMap,
            persuasion_elements: List[PersuasionElement],
    ):
        self.soup = soup
        self.sections = sections
        self.components = components
        self.persuasion_elements = persuasion_elements

    def detect_lp_flow(self) -> LPFlow:
        js_flow = self.detect_js_multi_step_flow()
        if js_flow is not None:
            return js_flow

        stages = self.build_flow_stages()
        flow = LPFlow(
            type=self.detect_flow_type(),
            stages=stages,
            framework=self.detect_framework(stages),
            cta_strategy=self.analyze_cta_strategy(),
            messaging_flow=self.extract_messaging_flow(),
        )
        logger.debug("Flow '%s' with %d stage(s), framework %s.", flow.type, len(stages), flow.framework)
        return flow

    # -------------------------------------------------------------- JS flows

    def detect_js_multi_step_flow(self) -> Optional[LPFlow]:
        js_content = script_text(self.soup)
        signals = scan_script_signals(js_content, str(self.soup))
        if not signals.is_multi_step:
            return None

        questions = signals.unique_questions
        steps = max(len(questions) or signals.estimated_steps, 2)
        logger.debug("JS-driven step flow detected with %d step(s).", steps)

        stages = [FlowStage(
            order=1,
            section_id='step-intro',
            section_type='hero',
            purpose='attention',
            has_cta_button=True,
            key_message=questions[0] if questions else 'Introduction',
        )]
        for i in range(1, steps):
            is_last = i == steps - 1
            stages.append(FlowStage(
                order=i + 1,
                section_id=f"step-{i + 1}",
                section_type='cta' if is_last else 'form',
                purpose='action' if is_last else 'interest',
                has_cta_button=True,
                key_message=questions[i] if i < len(questions) else f"Step {i + 1}",
            ))

        cta_url = CTA_URL_CASCADE.evaluate(CtaUrlSubject(self.soup, js_content))
        return LPFlow(
            type='multi-step',
            stages=stages,
            framework='custom',
            cta_strategy=CtaStrategy(
                primary_cta=self._continue_text() or 'Continue',
                primary_cta_url=cta_url,
                cta_frequency='repeated',
                cta_positions=[stage.section_type for stage in stages if stage.has_cta_button],
            ),
            messaging_flow=MessagingFlow(
                hook=questions[0] if questions else None,
                benefits=questions[1:4],
            ),
        )

    def _continue_text(self) -> str:
        marked = self.soup.select_one(CONTINUE_MARKED)
        if marked is not None and marked.get_text().strip():
            return marked.get_text().strip()
        for el in self.soup.find_all(["a", "button"]):
            text = el.get_text().strip()
            if CONTINUE_TEXT.search(text):
                return text
        return ""

    # ------------------------------------------------------- structural flows

    def detect_flow_type(self) -> FlowType:
        total = len(self.sections)
        has_video = any(
            '<video' in s.html or 'youtube' in s.html or 'vimeo' in s.html
            for s in self.sections[:5]
        )
        if has_video and total <= 5:
            return 'video-sales'

        if (self.soup.select_one(PROGRESS_MARKUP) is not None
                or len(self.soup.find_all("form")) > 1
                or self.soup.select_one("[data-step]") is not None):
            return 'multi-step'

        if total > 8:
            return 'long-form'
        return 'single-page'

    def build_flow_stages(self) -> List[FlowStage]:
        stages: List[FlowStage] = []
        total = len(self.sections)
        for index, section in enumerate(self.sections):
            has_cta = any(
                b.section_id == section.id and _is_cta(b) for b in self.components.buttons
            )
            headline = next((h for h in self.components.headlines if h.section_id == section.id), None)
            stages.append(FlowStage(
                order=index + 1,
                section_id=section.id,
                section_type=section.type,
                purpose=map_section_to_purpose(section.type, index, total),
                has_cta_button=has_cta,
                key_message=headline.text if headline else None,
            ))
        return stages

    def detect_framework(self, stages: List[FlowStage]) -> Framework:
        has_problem = any(
            any(word in (stage.key_message or "").lower() for word in PROBLEM_WORDS)
            for stage in stages
        )
        has_pressure = any(p.type in ('urgency', 'scarcity') for p in self.persuasion_elements)
        if has_problem and has_pressure:
            return 'PAS'

        purposes = {stage.purpose for stage in stages}
        if {'attention', 'interest', 'desire', 'action'} <= purposes:
            return 'AIDA'
        return 'custom'

    def analyze_cta_strategy(self) -> CtaStrategy:
        ctas = [b for b in self.components.buttons if _is_cta(b)]
        unique_texts = {b.text.lower() for b in ctas}

        frequency: CtaFrequency = 'single'
        if len(ctas) > 3:
            frequency = 'progressive' if len(unique_texts) > 2 else 'repeated'
        elif len(ctas) > 1:
            frequency = 'repeated'

        positions = [s.type for s in self.sections if any(b.section_id == s.id for b in ctas)]

        primary = ctas[0] if ctas else None
        return CtaStrategy(
            primary_cta=primary.text if primary else 'Get Started',
            primary_cta_url=primary.href if primary else None,
            cta_frequency=frequency,
            cta_positions=positions,
        )

    def extract_messaging_flow(self) -> MessagingFlow:
        headlines = self.components.headlines
        main = next((h for h in headlines if h.is_main_headline), headlines[0] if headlines else None)
        problem = next((h.text for h in headlines if PROBLEM_LANGUAGE.search(h.text)), None)
        solution = next((h.text for h in headlines if SOLUTION_LANGUAGE.search(h.text)), None)

        benefit_list = next((l for l in self.components.lists if l.type in ('check', 'bullet')), None)

        return MessagingFlow(
            hook=main.text if main else None,
            problem=problem,
            solution=solution,
            benefits=benefit_list.items[:5] if benefit_list else None,
            proof=self._first_persuasion('social-proof'),
            urgency=self._first_persuasion('urgency', 'scarcity'),
            guarantee=self._first_persuasion('guarantee'),
        )

    def _first_persuasion(self, *techniques: str) -> Optional[str]:
        return next((p.content for p in self.persuasion_elements if p.type in techniques), None)
