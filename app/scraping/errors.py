"""
Exception taxonomy for the scrape-extract-persist pipeline.
"""

from __future__ import annotations


class ScrapingError(Exception):
    """Base exception for scraping pipeline failures."""


class FetchError(ScrapingError):
    """Raised when a target page could not be obtained."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class NavigationError(FetchError):
    """Raised when the page fails to load within the navigation timeout."""


class ContentTimeoutError(FetchError):
    """Raised when the content-ready selector never appears."""


class PersistenceError(ScrapingError):
    """Raised when writing a record to the document store fails."""


class BrowserUnavailableError(ScrapingError):
    """Raised when the headless browser cannot be started for a run."""
