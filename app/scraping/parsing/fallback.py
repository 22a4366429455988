"""
Free-text keyword scan used when a page yields no structured rows.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from app.scraping.config.models import FallbackProfile
from app.scraping.parsing.html_parsers import HTMLParsingLayer

SKIPPED_TAGS = {"script", "style", "noscript", "template"}
DESCRIPTION_MIN_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 1000
SCORE_REGEX = re.compile(r"(\d+(?:\.\d+)?)\s*(?:stars?|points?|rating)", flags=re.IGNORECASE)


@dataclass
class FallbackResult:
    description: str | None = None
    features: list[str] = field(default_factory=list)
    url: str | None = None
    score: float | None = None
    heuristic_fields: list[str] = field(default_factory=list)


class KeywordFallbackScanner:
    """
    Scan page elements mentioning the target keywords for a description,
    feature tags, a link and a rating.
    """

    def scan(
        self,
        *,
        soup: BeautifulSoup,
        profile: FallbackProfile,
        base_url: str,
    ) -> FallbackResult:
        result = FallbackResult()
        keywords = [keyword.lower() for keyword in profile.keywords if keyword]
        if not keywords:
            return result

        found_features: list[str] = []
        for element in self._iter_elements(soup):
            text = HTMLParsingLayer.clean_text(element.get_text(" ", strip=True))
            if not text:
                continue
            lowered = text.lower()
            if not any(keyword in lowered for keyword in keywords):
                continue

            if result.description is None and self._is_description(text):
                result.description = text

            for keyword in profile.feature_keywords:
                if keyword.lower() in lowered and keyword not in found_features:
                    found_features.append(keyword)

            if result.url is None:
                href = self._first_href(element)
                if href:
                    result.url = urljoin(base_url, href)

            if result.score is None:
                result.score = self._find_score(text)

        result.features = found_features
        result.heuristic_fields = [
            name
            for name, value in (
                ("description", result.description),
                ("features", found_features or None),
                ("url", result.url),
                ("score", result.score),
            )
            if value is not None
        ]
        return result

    @staticmethod
    def _iter_elements(soup: BeautifulSoup) -> list[Tag]:
        """
        Text-bearing elements in document order. Pure wrappers (html, body,
        layout divs) are skipped so a description is never a whole page.
        """

        # Mutates the tree: non-visible nodes must not leak text into ancestors.
        for node in soup.find_all(sorted(SKIPPED_TAGS)):
            node.decompose()
        return [element for element in soup.find_all(True) if _has_own_text(element)]

    @staticmethod
    def _is_description(text: str) -> bool:
        if not DESCRIPTION_MIN_LENGTH <= len(text) <= DESCRIPTION_MAX_LENGTH:
            return False
        return "{" not in text and "}" not in text

    @staticmethod
    def _first_href(element: Tag) -> str | None:
        if element.name == "a" and element.get("href"):
            return str(element["href"]).strip() or None
        anchor = element.find("a", href=True)
        if anchor is None:
            return None
        return str(anchor["href"]).strip() or None

    @staticmethod
    def _find_score(text: str) -> float | None:
        match = SCORE_REGEX.search(text)
        if match is None:
            return None
        score = float(match.group(1))
        if 0 <= score <= 10:
            return score
        return None


def _has_own_text(element: Tag) -> bool:
    for child in element.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString) and child.strip():
            return True
    return False
