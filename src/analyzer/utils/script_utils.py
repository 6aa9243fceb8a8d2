# src/analyzer/utils/script_utils.py
import re

from bs4 import BeautifulSoup

TAG = re.compile(r"<[^>]+>")
WHITESPACE = re.compile(r"\s+")


def script_text(soup: BeautifulSoup) -> str:
    """All inline <script> bodies concatenated in document order."""
    return "\n".join(script.get_text() for script in soup.find_all("script"))


def strip_markup(text: str) -> str:
    """Turns an HTML fragment embedded in a JS string into flat text."""
    return WHITESPACE.sub(" ", TAG.sub(" ", text)).strip()
