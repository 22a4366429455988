"""
Scraping configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class FieldSpec:
    """
    One named value read from a row.

    The value comes from the `position`-th element matched by `selector`
    inside the row, or from the `position`-th cell when no selector is set.
    Negative positions count from the end. `image` reads an image URL instead
    of text; `pattern` keeps only its first capture group (or whole match).
    """

    name: str
    position: int = 0
    selector: str | None = None
    attribute: str | None = None
    image: bool = False
    pattern: str | None = None
    fallback: str = NOT_AVAILABLE


@dataclass(frozen=True)
class TableSection:
    """
    A structured collection read row by row from a designated table.

    With `cell_selector=None` the row element itself is the only cell, for
    card-like blocks that are not tables.
    """

    name: str
    row_selector: str
    fields: tuple[FieldSpec, ...]
    cell_selector: str | None = "td"
    limit: int | None = None
    row_filter: str | None = None


@dataclass(frozen=True)
class FallbackProfile:
    """
    Keyword-scan settings used when no structured section yields rows.
    """

    keywords: tuple[str, ...] = ()
    feature_keywords: tuple[str, ...] = ()
    default_description: str = ""
    default_features: tuple[str, ...] = ()
    default_url: str | None = None


@dataclass(frozen=True)
class ExtractionProfile:
    sections: tuple[TableSection, ...] = ()
    fallback: FallbackProfile = field(default_factory=FallbackProfile)


@dataclass(frozen=True)
class ScrapeTarget:
    """
    One configured source page. Immutable, never persisted.
    """

    name: str
    url: str
    category: str = "unknown"
    label: str | None = None
    ready_selector: str | None = None
    profile: ExtractionProfile = field(default_factory=ExtractionProfile)

    @property
    def display_name(self) -> str:
        return self.label or self.name


@dataclass(frozen=True)
class ScrapingSettings:
    """
    Runtime settings for scheduled scraping.
    """

    schedule: str
    fetch_timeout_ms: int
    content_ready_timeout_ms: int
    headless: bool
    targets_config_path: str
    target_urls: tuple[str, ...]
    user_agent: str
    default_ready_selector: str
    scheduler_enabled: bool = True
    viewport_width: int = 1920
    viewport_height: int = 1080
    locale: str = "en-US"
    extra_headers: dict[str, str] = field(default_factory=dict)
