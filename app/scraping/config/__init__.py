"""
Config helpers for scheduled casino scraping.
"""

from app.scraping.config.loader import get_scraping_settings, load_target_configs, load_targets
from app.scraping.config.models import (
    NOT_AVAILABLE,
    ExtractionProfile,
    FallbackProfile,
    FieldSpec,
    ScrapeTarget,
    ScrapingSettings,
    TableSection,
)

__all__ = [
    "NOT_AVAILABLE",
    "ExtractionProfile",
    "FallbackProfile",
    "FieldSpec",
    "ScrapeTarget",
    "ScrapingSettings",
    "TableSection",
    "get_scraping_settings",
    "load_target_configs",
    "load_targets",
]
