# src/analyzer/services/quiz_script_service.py
import logging
import re
from typing import List

from analyzer.model import QuizData, QuizQuestion
from analyzer.utils.script_utils import strip_markup

logger = logging.getLogger(__name__)

QUESTION_OBJECT = re.compile(r"\{[^{}]*(?:question|Question)\s*:\s*[\"'`]([^\"'`]+)[\"'`][^{}]*\}")
ANSWER_LISTS = (
    re.compile(r"answerList\s*:\s*\[([\s\S]*?)\]"),
    re.compile(r"options\s*:\s*\[([\s\S]*?)\]"),
    re.compile(r"choices\s*:\s*\[([\s\S]*?)\]"),
    re.compile(r"answers\s*:\s*\[([\s\S]*?)\]"),
)
ANSWER_NAME = re.compile(r"(?:name|text|label|LangName)\s*:\s*[\"'`]([^\"'`]+)[\"'`]")
QUESTION_STRING_ARRAY = re.compile(r"(?:questions?|quizQuestions?)\s*=\s*\[([^\]]+)\]", re.I)
QUOTED = re.compile(r"[\"'`]([^\"'`]+\??)[\"'`]")
TITLES = (
    re.compile(r"(?:title|headline|mainTitle|pageTitle)\s*[=:]\s*[\"'`]([^\"'`]+)[\"'`]", re.I),
    re.compile(r"landingPageContent\w*\s*=\s*[\"'`]([^\"'`]+)[\"'`]", re.I),
)
HOOK_TEXT = re.compile(r"(?:description|intro|hookText|message)\s*[=:]\s*[\"'`]([^\"'`]{30,})[\"'`]", re.I)
QUESTION_INNER_HTML = re.compile(
    r"getElementById\s*\(\s*[\"'`](?:actualQuestion|question|questionText)[\"'`]\s*\)[^=]*=\s*[\"'`]([^\"'`]+)[\"'`]",
    re.I,
)
QUESTION_LIST_VARIABLE = re.compile(r"(?:var|let|const)\s+\w*(?:question|quiz|step)\w*\s*=\s*\[([\s\S]*?)\];", re.I)
LISTED_QUESTION = re.compile(r"(?:englishQuestion|question|Question|text)\s*:\s*[\"'`]([^\"'`]+)[\"'`]")

MIN_QUESTION_CHARS = 10


class QuizScriptService:
    """
    Recovers quiz questions, answer options, titles and hook copy from inline
    JavaScript. Quiz funnels often ship their whole copy as JS literals, so
    the static markup alone says little about what the visitor reads.
    """

    def __init__(self, js_content: str):
        self.js_content = js_content
        self._questions: List[QuizQuestion] = []

    def extract_quiz_data(self) -> QuizData:
        self._questions = []
        self._questions_from_objects()
        self._questions_from_string_arrays()
        titles = self._titles()
        hook_texts = self._hook_texts()
        self._questions_from_list_variables()

        logger.debug(
            "Script copy: %d question(s), %d title(s), %d hook text(s).",
            len(self._questions), len(titles), len(hook_texts),
        )
        return QuizData(questions=list(self._questions), titles=titles, hook_texts=hook_texts)

    def _has_question(self, text: str) -> bool:
        return any(q.question == text for q in self._questions)

    def _questions_from_objects(self) -> None:
        for match in QUESTION_OBJECT.finditer(self.js_content):
            text = match.group(1).strip()
            if len(text) <= MIN_QUESTION_CHARS or self._has_question(text):
                continue
            self._questions.append(QuizQuestion(question=text, answers=self._answers(match.group(0))))

    @staticmethod
    def _answers(question_object: str) -> List[str]:
        answers: List[str] = []
        for pattern in ANSWER_LISTS:
            match = pattern.search(question_object)
            if match is None:
                continue
            for name in ANSWER_NAME.findall(match.group(1)):
                if name not in answers:
                    answers.append(name)
            break
        return answers

    def _questions_from_string_arrays(self) -> None:
        for array in QUESTION_STRING_ARRAY.findall(self.js_content):
            for candidate in QUOTED.findall(array):
                text = candidate.strip()
                if len(text) > MIN_QUESTION_CHARS and '?' in text and not self._has_question(text):
                    self._questions.append(QuizQuestion(question=text))

    def _questions_from_list_variables(self) -> None:
        for listing in QUESTION_LIST_VARIABLE.findall(self.js_content):
            for candidate in LISTED_QUESTION.findall(listing):
                text = candidate.strip()
                if len(text) > MIN_QUESTION_CHARS and not self._has_question(text):
                    self._questions.append(QuizQuestion(question=text))

    def _titles(self) -> List[str]:
        titles: List[str] = []
        for pattern in TITLES:
            for candidate in pattern.findall(self.js_content):
                text = candidate.strip()
                if 3 < len(text) < 200 and text not in titles:
                    titles.append(text)
        return titles

    def _hook_texts(self) -> List[str]:
        hooks: List[str] = []
        for candidate in HOOK_TEXT.findall(self.js_content):
            text = strip_markup(candidate)
            if len(text) > 30 and text not in hooks:
                hooks.append(text)
        for candidate in QUESTION_INNER_HTML.findall(self.js_content):
            text = strip_markup(candidate)
            if len(text) > MIN_QUESTION_CHARS and text not in hooks:
                hooks.append(text)
        return hooks
