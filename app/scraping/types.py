"""
Shared scraping runtime data models.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.scraping.config.models import ScrapeTarget

NO_DATA_FOUND = "No data found"

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"
STATUS_EMPTY = "empty"


@dataclass(frozen=True)
class RawPage:
    """
    Rendered document for one target. Lives only for one run.
    """

    target: ScrapeTarget
    url: str
    html: str
    fetched_at: datetime


@dataclass
class ExtractedRecord:
    """
    Result of mapping one rendered page to a record.
    """

    name: str
    category: str
    stats: dict[str, list[dict[str, str]]]
    features: list[str]
    source_url: str
    has_data: bool
    error: str | None = None
    description: str | None = None
    score: float | None = None
    heuristic_fields: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        return STATUS_SUCCESS if self.has_data else STATUS_ERROR

    @property
    def row_count(self) -> int:
        return sum(len(rows) for rows in self.stats.values())


@dataclass(frozen=True)
class PersistedRecord:
    """
    Stored view of one upserted document.
    """

    id: uuid.UUID
    name: str
    type: str
    description: str | None
    stats: dict[str, Any]
    features: list[str]
    url: str
    score: float | None
    status: str
    error_message: str | None
    heuristic_fields: list[str]
    scraped_at: datetime
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "stats": self.stats,
            "features": list(self.features),
            "url": self.url,
            "score": self.score,
            "status": self.status,
            "error_message": self.error_message,
            "heuristic_fields": list(self.heuristic_fields),
            "scraped_at": self.scraped_at.isoformat(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class TargetOutcome:
    """
    What happened to one target during a run.
    """

    target: ScrapeTarget
    record: ExtractedRecord | None = None
    persisted: PersistedRecord | None = None
    error_message: str | None = None
    error_type: str | None = None

    @property
    def status(self) -> str:
        if self.error_message is not None:
            return STATUS_ERROR
        if self.record is None or not self.record.has_data:
            return STATUS_EMPTY
        return STATUS_SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target.name,
            "url": self.target.url,
            "status": self.status,
            "rows": self.record.row_count if self.record is not None else 0,
            "record_id": str(self.persisted.id) if self.persisted is not None else None,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }


@dataclass
class RunReport:
    """
    Summary of one pass over all targets.
    """

    run_id: str
    started_at: datetime
    finished_at: datetime | None = None
    outcomes: list[TargetOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == STATUS_SUCCESS)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == STATUS_ERROR)

    @property
    def empty(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == STATUS_EMPTY)

    @property
    def duration_ms(self) -> int | None:
        if self.finished_at is None:
            return None
        return int((self.finished_at - self.started_at).total_seconds() * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_ms": self.duration_ms,
            "targets_total": len(self.outcomes),
            "succeeded": self.succeeded,
            "failed": self.failed,
            "empty": self.empty,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }
