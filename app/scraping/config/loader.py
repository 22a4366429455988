"""
Environment + JSON config loader for scheduled casino scraping.
"""

from __future__ import annotations

import json
import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from urllib.parse import urlparse

from apscheduler.triggers.cron import CronTrigger

from db.config import load_env_files

from app.scraping.config.defaults import (
    DEFAULT_EXTRA_HEADERS,
    DEFAULT_FEATURE_KEYWORDS,
    DEFAULT_FEATURES,
    DEFAULT_READY_SELECTOR,
    DEFAULT_SECTIONS,
    DEFAULT_USER_AGENT,
    SECTION_PRESETS,
    default_profile,
)
from app.scraping.config.models import (
    NOT_AVAILABLE,
    ExtractionProfile,
    FallbackProfile,
    FieldSpec,
    ScrapeTarget,
    ScrapingSettings,
    TableSection,
)

logger = logging.getLogger(__name__)

DEFAULT_SCHEDULE = "* * * * *"


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _get_list_env(name: str) -> tuple[str, ...]:
    raw = os.getenv(name, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _resolve_config_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


def _validate_schedule(expression: str) -> str:
    try:
        CronTrigger.from_crontab(expression, timezone="UTC")
    except ValueError as exc:
        logger.warning(
            "SCRAPE_SCHEDULE %r is not a valid cron expression (%s); using %r",
            expression,
            exc,
            DEFAULT_SCHEDULE,
        )
        return DEFAULT_SCHEDULE
    return expression


@lru_cache(maxsize=1)
def get_scraping_settings() -> ScrapingSettings:
    """
    Return cached scraper settings from environment variables.
    """

    load_env_files()
    config_path = _get_str_env(
        "SCRAPE_TARGETS_CONFIG_PATH",
        "app/scraping/config/targets.json",
    )
    return ScrapingSettings(
        schedule=_validate_schedule(_get_str_env("SCRAPE_SCHEDULE", DEFAULT_SCHEDULE)),
        fetch_timeout_ms=max(1000, _get_int_env("SCRAPE_FETCH_TIMEOUT_MS", 30000)),
        content_ready_timeout_ms=max(
            500,
            _get_int_env("SCRAPE_CONTENT_READY_TIMEOUT_MS", 15000),
        ),
        headless=_get_bool_env("SCRAPE_HEADLESS", True),
        targets_config_path=str(_resolve_config_path(config_path)),
        target_urls=_get_list_env("SCRAPE_TARGET_URLS"),
        user_agent=_get_str_env("SCRAPE_USER_AGENT", DEFAULT_USER_AGENT),
        default_ready_selector=_get_str_env("SCRAPE_READY_SELECTOR", DEFAULT_READY_SELECTOR),
        scheduler_enabled=_get_bool_env("SCRAPE_SCHEDULER_ENABLED", True),
        extra_headers=dict(DEFAULT_EXTRA_HEADERS),
    )


def load_targets(settings: ScrapingSettings) -> list[ScrapeTarget]:
    """
    Resolve the ordered target list.

    The JSON file provides full target definitions. When SCRAPE_TARGET_URLS is
    set it decides which URLs run and in which order; URLs missing from the
    file fall back to the built-in profile.
    """

    path = _resolve_config_path(settings.targets_config_path)
    configured: list[ScrapeTarget] = []
    if path.exists():
        configured = load_target_configs(config_path=str(path), settings=settings)
    elif not settings.target_urls:
        raise FileNotFoundError(f"Scrape target config file not found: {path}")

    if not settings.target_urls:
        return configured

    by_url = {_url_key(target.url): target for target in configured}
    ordered: list[ScrapeTarget] = []
    for url in settings.target_urls:
        match = by_url.get(_url_key(url))
        if match is None:
            match = target_from_url(url, settings=settings)
        ordered.append(match)
    return ordered


def load_target_configs(*, config_path: str, settings: ScrapingSettings) -> list[ScrapeTarget]:
    """
    Load enabled scrape targets from a JSON file, preserving file order.
    """

    path = _resolve_config_path(config_path)
    raw_data = json.loads(path.read_text(encoding="utf-8"))
    entries = raw_data.get("targets", [])
    if not isinstance(entries, list):
        raise ValueError("Invalid target config: 'targets' must be a list.")

    parsed: list[ScrapeTarget] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue

        name = str(entry.get("name", "")).strip()
        url = str(entry.get("url", "")).strip()
        if not name or not url:
            continue
        if not _optional_bool(entry.get("enabled"), True):
            continue

        parsed.append(
            ScrapeTarget(
                name=name,
                url=url,
                category=_optional_str(entry.get("category")) or "unknown",
                label=_optional_str(entry.get("label")),
                ready_selector=_optional_str(entry.get("ready_selector"))
                or settings.default_ready_selector,
                profile=_parse_profile(entry),
            )
        )

    return parsed


def target_from_url(url: str, *, settings: ScrapingSettings) -> ScrapeTarget:
    """
    Build a target for a bare URL using the built-in extraction profile.
    """

    name = _name_from_url(url)
    return ScrapeTarget(
        name=name,
        url=url,
        category="unknown",
        ready_selector=settings.default_ready_selector,
        profile=default_profile(keywords=(name.lower(),)),
    )


def _parse_profile(entry: dict) -> ExtractionProfile:
    raw_sections = entry.get("sections")
    if isinstance(raw_sections, list):
        sections = tuple(
            section
            for section in (_parse_section(item) for item in raw_sections)
            if section is not None
        )
    elif isinstance(raw_sections, str):
        sections = SECTION_PRESETS.get(raw_sections.strip())
        if sections is None:
            logger.warning(
                "Unknown section preset %r for target %r; using the default sections",
                raw_sections,
                entry.get("name"),
            )
            sections = DEFAULT_SECTIONS
    else:
        sections = DEFAULT_SECTIONS

    name = str(entry.get("name", "")).strip()
    keywords = _normalize_str_list(entry.get("keywords")) or (name.lower(),)
    feature_keywords = _normalize_str_list(entry.get("feature_keywords")) or DEFAULT_FEATURE_KEYWORDS
    default_features = _normalize_str_list(entry.get("default_features")) or DEFAULT_FEATURES

    return ExtractionProfile(
        sections=sections,
        fallback=FallbackProfile(
            keywords=tuple(keyword.lower() for keyword in keywords),
            feature_keywords=feature_keywords,
            default_description=_optional_str(entry.get("description")) or "",
            default_features=default_features,
            default_url=_optional_str(entry.get("default_url")),
        ),
    )


def _parse_section(raw: object) -> TableSection | None:
    # Imported here: the parsing package imports the config package.
    from app.scraping.parsing.filters import get_row_filter, list_row_filters

    if not isinstance(raw, dict):
        return None

    name = _optional_str(raw.get("name"))
    row_selector = _optional_str(raw.get("row_selector"))
    if not name or not row_selector:
        return None

    row_filter = _optional_str(raw.get("row_filter"))
    if row_filter is not None:
        try:
            get_row_filter(row_filter)
        except KeyError:
            logger.warning(
                "Section %r names unknown row_filter %r; skipping it (known: %s)",
                name,
                row_filter,
                ", ".join(list_row_filters()),
            )
            return None

    fields = tuple(
        spec for spec in (_parse_field(item) for item in raw.get("fields", []) or []) if spec is not None
    )
    if not fields:
        return None

    # An explicit null means the row element itself is the only cell.
    if "cell_selector" in raw and raw["cell_selector"] is None:
        cell_selector = None
    else:
        cell_selector = _optional_str(raw.get("cell_selector")) or "td"

    limit = _optional_int(raw.get("limit"))
    return TableSection(
        name=name,
        row_selector=row_selector,
        cell_selector=cell_selector,
        fields=fields,
        limit=limit if limit is not None and limit > 0 else None,
        row_filter=row_filter,
    )


def _parse_field(item: object) -> FieldSpec | None:
    if not isinstance(item, dict):
        return None
    field_name = _optional_str(item.get("name"))
    if not field_name:
        return None

    position = 0
    if item.get("position") is not None:
        parsed_position = _optional_int(item.get("position"))
        if parsed_position is None:
            return None
        position = parsed_position

    pattern = _optional_str(item.get("pattern"))
    if pattern is not None:
        try:
            re.compile(pattern)
        except re.error as exc:
            logger.warning("Field %r has an invalid pattern %r (%s); skipping it", field_name, pattern, exc)
            return None

    return FieldSpec(
        name=field_name,
        position=position,
        selector=_optional_str(item.get("selector")),
        attribute=_optional_str(item.get("attribute")),
        image=_optional_bool(item.get("image"), False),
        pattern=pattern,
        fallback=_optional_str(item.get("fallback")) or NOT_AVAILABLE,
    )


def _name_from_url(url: str) -> str:
    parsed = urlparse(url)
    segments = [segment for segment in parsed.path.split("/") if segment]
    if segments:
        return segments[-1].replace("-", " ").replace("_", " ").title()
    return parsed.netloc or url


def _url_key(url: str) -> str:
    return url.strip().rstrip("/").lower()


def _normalize_str_list(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value.strip(),) if value.strip() else ()
    if not isinstance(value, list):
        return ()
    return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _optional_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default
