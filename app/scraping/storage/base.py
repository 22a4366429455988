"""
Storage layer interfaces for scraped casino records.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from app.scraping.config.models import ScrapeTarget
from app.scraping.types import ExtractedRecord, PersistedRecord


class RecordStorage(ABC):
    """
    Storage abstraction for upserting one record per natural key.
    """

    @abstractmethod
    def upsert(self, record: ExtractedRecord, scraped_at: datetime) -> PersistedRecord:
        """
        Insert or fully replace the record keyed by `record.name`.
        """

    @abstractmethod
    def upsert_error(
        self,
        target: ScrapeTarget,
        message: str,
        scraped_at: datetime,
    ) -> PersistedRecord:
        """
        Store a synthetic error record for a target that could not be fetched.
        """
