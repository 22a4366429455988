"""
Maps a rendered page to an ExtractedRecord. No I/O and no clock reads.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from app.scraping.config.models import FallbackProfile, ScrapeTarget, TableSection
from app.scraping.parsing.fallback import KeywordFallbackScanner
from app.scraping.parsing.filters import get_row_filter
from app.scraping.parsing.html_parsers import HTMLParsingLayer
from app.scraping.types import NO_DATA_FOUND, ExtractedRecord, RawPage


class PageExtractor:
    """
    Structured table extraction with a free-text keyword fallback.
    """

    def __init__(self, fallback_scanner: KeywordFallbackScanner | None = None) -> None:
        self.fallback_scanner = fallback_scanner or KeywordFallbackScanner()

    def extract(self, raw_page: RawPage) -> ExtractedRecord:
        target = raw_page.target
        profile = target.profile
        soup = HTMLParsingLayer.load(raw_page.html)

        stats = {
            section.name: self.extract_section(soup=soup, section=section, base_url=raw_page.url)
            for section in profile.sections
        }
        has_data = any(stats.values())
        fallback = profile.fallback

        if has_data:
            return ExtractedRecord(
                name=target.name,
                category=target.category,
                stats=stats,
                features=_dedupe(list(fallback.default_features)),
                source_url=fallback.default_url or raw_page.url,
                has_data=True,
                description=fallback.default_description or None,
            )

        scanned = self.fallback_scanner.scan(
            soup=soup,
            profile=fallback,
            base_url=raw_page.url,
        )
        return ExtractedRecord(
            name=target.name,
            category=target.category,
            stats=stats,
            features=_dedupe(list(fallback.default_features) + scanned.features),
            source_url=scanned.url or _default_url(target, fallback),
            has_data=False,
            error=NO_DATA_FOUND,
            description=scanned.description or fallback.default_description or None,
            score=scanned.score,
            heuristic_fields=scanned.heuristic_fields,
        )

    @staticmethod
    def extract_section(
        *,
        soup: BeautifulSoup,
        section: TableSection,
        base_url: str | None = None,
    ) -> list[dict[str, str]]:
        rows = HTMLParsingLayer.read_section(soup=soup, section=section, base_url=base_url)
        if section.row_filter:
            predicate = get_row_filter(section.row_filter)
            rows = [row for row in rows if predicate(row)]
        if section.limit is not None:
            rows = rows[: section.limit]
        return rows


def _default_url(target: ScrapeTarget, fallback: FallbackProfile) -> str:
    if fallback.default_url:
        return fallback.default_url
    slug = re.sub(r"[^a-z0-9]+", "-", target.name.lower()).strip("-")
    if not slug or target.url.rstrip("/").lower().endswith(slug):
        return target.url
    return urljoin(target.url if target.url.endswith("/") else target.url + "/", slug)


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        key = value.lower()
        if key in seen:
            continue
        seen.add(key)
        ordered.append(value)
    return ordered
