# src/scraper/exceptions.py
from typing import Optional


class LoaderError(Exception):
    """Base class for conditions where there is no document to analyze."""


class FetchError(LoaderError):
    """The initial page request failed or returned a non-2xx status."""

    def __init__(self, url: str, status: Optional[int] = None, reason: Optional[str] = None):
        self.url = url
        self.status = status
        self.reason = reason or ""
        if status is not None:
            message = f"Failed to fetch URL: {url} ({status} {self.reason})".rstrip()
        else:
            message = f"Failed to fetch URL: {url} ({self.reason})"
        super().__init__(message)


class NoDocumentFoundError(LoaderError):
    """An uploaded archive contains no .html/.htm entry."""

    def __init__(self, archive_name: str, reason: str = "No HTML file found in ZIP archive"):
        self.archive_name = archive_name
        self.reason = reason
        super().__init__(f"{reason}: {archive_name}")
