"""
app/repositories/scrape_run_repository.py

DB persistence for job runner history.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.scraping.types import RunReport
from db.models.scrape_run import ScrapeRun, ScrapeRunStatus


def resolve_run_status(report: RunReport | None, error_message: str | None) -> str:
    if report is None or not report.outcomes:
        return ScrapeRunStatus.FAILED
    if error_message is None and report.succeeded == len(report.outcomes):
        return ScrapeRunStatus.SUCCESS
    if report.succeeded == 0:
        return ScrapeRunStatus.FAILED
    return ScrapeRunStatus.PARTIAL_SUCCESS


class ScrapeRunRepository:
    """
    Repository for one-row-per-run scrape history.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def record_run(
        self,
        *,
        run_id: str,
        trigger: str,
        report: RunReport | None,
        started_at: datetime,
        finished_at: datetime,
        error_message: str | None = None,
    ) -> ScrapeRun:
        """
        Insert the history row for a finished run. Flushes without committing.

        `report` is None when the run aborted before producing one (for
        example the browser could not be started).
        """

        duration_ms = int((finished_at - started_at).total_seconds() * 1000)
        row = ScrapeRun(
            run_id=run_id,
            trigger=trigger,
            status=resolve_run_status(report, error_message),
            targets_total=len(report.outcomes) if report is not None else 0,
            targets_succeeded=report.succeeded if report is not None else 0,
            targets_failed=(report.failed + report.empty) if report is not None else 0,
            duration_ms=max(0, duration_ms),
            error_message=error_message,
            details=report.to_dict() if report is not None else None,
            started_at=started_at,
            finished_at=finished_at,
        )
        self._session.add(row)
        self._session.flush()
        return row

    def list_recent(self, *, limit: int = 20) -> list[ScrapeRun]:
        stmt = select(ScrapeRun).order_by(ScrapeRun.started_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())
