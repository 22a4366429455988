"""
app/schemas/casino_scraping.py

Response schemas for casino scraping operations.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.scraping.types import PersistedRecord, RunReport, TargetOutcome


class TargetOutcomeResponse(BaseModel):
    """
    API response model for one target within a run.
    """

    target: str
    url: str
    status: str
    rows: int = Field(..., ge=0)
    record_id: str | None = None
    error_type: str | None = None
    error_message: str | None = None

    @classmethod
    def from_outcome(cls, outcome: TargetOutcome) -> "TargetOutcomeResponse":
        return cls(**outcome.to_dict())


class RunReportResponse(BaseModel):
    run_id: str
    started_at: datetime
    finished_at: datetime | None = None
    duration_ms: int | None = None
    targets_total: int = Field(..., ge=0)
    succeeded: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    empty: int = Field(..., ge=0)
    outcomes: list[TargetOutcomeResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: RunReport) -> "RunReportResponse":
        return cls(
            run_id=report.run_id,
            started_at=report.started_at,
            finished_at=report.finished_at,
            duration_ms=report.duration_ms,
            targets_total=len(report.outcomes),
            succeeded=report.succeeded,
            failed=report.failed,
            empty=report.empty,
            outcomes=[TargetOutcomeResponse.from_outcome(item) for item in report.outcomes],
        )


class RunStatsResponse(BaseModel):
    total_runs: int = Field(..., ge=0)
    successful_runs: int = Field(..., ge=0)
    failed_runs: int = Field(..., ge=0)
    last_run_at: datetime | None = None
    last_success_at: datetime | None = None
    last_error: str | None = None
    average_duration_ms: float = Field(..., ge=0)


class SchedulerStatusResponse(BaseModel):
    is_running: bool
    schedule: str
    next_run_estimate: datetime | None = None
    stats: RunStatsResponse


class CasinoRecordResponse(BaseModel):
    """
    API response model for one stored casino record.
    """

    id: str
    name: str
    type: str
    description: str | None = None
    stats: dict[str, Any] = Field(default_factory=dict)
    features: list[str] = Field(default_factory=list)
    url: str
    score: float | None = None
    status: str
    error_message: str | None = None
    heuristic_fields: list[str] = Field(default_factory=list)
    scraped_at: datetime
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: PersistedRecord) -> "CasinoRecordResponse":
        return cls(**record.to_dict())
