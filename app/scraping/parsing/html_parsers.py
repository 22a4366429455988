"""
BeautifulSoup-based parsing layer for casino statistics pages.
"""

from __future__ import annotations

import re
from functools import lru_cache
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from app.scraping.config.models import NOT_AVAILABLE, FieldSpec, TableSection

FINISHED_FIELD = "finished"

# "12 Mar202514:05" -> "12 Mar 2025 14:05"
COLLAPSED_DATE_REGEX = re.compile(r"^(\d{1,2}\s+[A-Za-z]{3,4})(\d{4})(\d{2}:\d{2})$")
BACKGROUND_IMAGE_REGEX = re.compile(r"background-image:\s*url\(['\"]?([^'\")]+)['\"]?\)")


class HTMLParsingLayer:
    """
    Deterministic parser utilities for rendered HTML documents.
    """

    @staticmethod
    def load(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    @classmethod
    def read_section(
        cls,
        *,
        soup: BeautifulSoup,
        section: TableSection,
        base_url: str | None = None,
    ) -> list[dict[str, str]]:
        """
        Read every row matched by the section selector into a field mapping.

        Missing or blank values take the field fallback, and a row where no
        field was found at all is dropped. Row filtering and the top-N cap
        are applied by the caller. Image URLs are resolved against
        `base_url` when given.
        """

        rows: list[dict[str, str]] = []
        for row in soup.select(section.row_selector):
            cells = row.select(section.cell_selector) if section.cell_selector else [row]
            values = {
                spec.name: cls.read_field(row=row, cells=cells, spec=spec, base_url=base_url)
                for spec in section.fields
            }
            if any(values[spec.name] != spec.fallback for spec in section.fields):
                rows.append(values)
        return rows

    @classmethod
    def read_field(
        cls,
        *,
        row: Tag,
        cells: list[Tag],
        spec: FieldSpec,
        base_url: str | None = None,
    ) -> str:
        candidates = row.select(spec.selector) if spec.selector else cells
        if not -len(candidates) <= spec.position < len(candidates):
            return spec.fallback
        element = candidates[spec.position]

        if spec.image:
            value = cls.image_url(element)
            if value and base_url:
                value = urljoin(base_url, value)
        elif spec.attribute:
            raw = element.get(spec.attribute)
            if isinstance(raw, list):
                raw = " ".join(raw)
            value = cls.clean_text(raw or "")
        else:
            value = cls.clean_text(element.get_text(" ", strip=True))

        if value and spec.pattern:
            match = _compiled(spec.pattern).search(value)
            if match is None:
                value = ""
            else:
                value = (match.group(1) if match.groups() else match.group(0)) or ""

        if not value:
            return spec.fallback
        if spec.name == FINISHED_FIELD:
            return cls.normalize_finished_date(value)
        return value

    @staticmethod
    def image_url(element: Tag) -> str:
        """
        First image source inside `element`: <img> src, data-src or srcset,
        then an inline background-image.
        """

        image = element if element.name == "img" else element.find("img")
        if isinstance(image, Tag):
            srcset = (image.get("srcset") or "").strip()
            source = image.get("src") or image.get("data-src") or (srcset.split(" ")[0] if srcset else "")
            if source:
                return str(source).strip()

        for styled in [element, *element.select('[style*="background-image"]')]:
            match = BACKGROUND_IMAGE_REGEX.search(str(styled.get("style") or ""))
            if match:
                return match.group(1).strip()
        return ""

    @staticmethod
    def clean_text(value: str) -> str:
        return re.sub(r"\s+", " ", value).strip()

    @staticmethod
    def normalize_finished_date(value: str) -> str:
        if not value or value == NOT_AVAILABLE:
            return value
        match = COLLAPSED_DATE_REGEX.match(value)
        if match is None:
            return value
        return f"{match.group(1)} {match.group(2)} {match.group(3)}"


@lru_cache(maxsize=128)
def _compiled(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)
