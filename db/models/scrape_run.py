"""
db/models/scrape_run.py

History of job runner passes (one row per scheduled or manual run).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONDocument, TimestampMixin


class ScrapeRunTrigger:
    SCHEDULED = "scheduled"
    MANUAL = "manual"


class ScrapeRunStatus:
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILED = "failed"


class ScrapeRun(Base, TimestampMixin):
    __tablename__ = "scrape_runs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    run_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    trigger: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="scheduled, manual",
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="success, partial_success, failed",
    )
    targets_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    targets_succeeded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    targets_failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSONDocument, nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_scrape_runs_status", "status"),
        Index("ix_scrape_runs_started_at", "started_at"),
    )
