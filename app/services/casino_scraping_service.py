"""
app/services/casino_scraping_service.py

Service orchestration for scheduled casino statistics scraping.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.repositories.casino_record_repository import CasinoRecordRepository
from app.repositories.scrape_run_repository import ScrapeRunRepository
from app.scraping.browser import open_browser
from app.scraping.config import get_scraping_settings, load_targets
from app.scraping.config.models import ScrapingSettings
from app.scraping.engine import BrowserFactory, ScrapeJobRunner, select_targets
from app.scraping.logging_utils import log_event
from app.scraping.storage import SQLAlchemyRecordStorage, to_persisted_record
from app.scraping.types import PersistedRecord, RunReport
from db.models.scrape_run import ScrapeRunTrigger
from db.session import session_scope

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AbstractContextManager[Session]]


class CasinoScrapingService:
    """
    Runs the scrape pipeline against configured targets and records history.
    """

    def __init__(
        self,
        *,
        settings: ScrapingSettings | None = None,
        session_factory: SessionScope = session_scope,
        browser_factory: BrowserFactory = open_browser,
    ) -> None:
        self._settings = settings or get_scraping_settings()
        self._session_factory = session_factory
        self._browser_factory = browser_factory

    @property
    def settings(self) -> ScrapingSettings:
        return self._settings

    def run(
        self,
        *,
        trigger: str = ScrapeRunTrigger.MANUAL,
        target_names: Sequence[str] | None = None,
    ) -> RunReport:
        targets = select_targets(load_targets(self._settings), target_names)
        if target_names and not targets:
            raise ValueError(f"No configured targets matched: {', '.join(target_names)}")

        run_id = uuid.uuid4().hex
        started_at = datetime.now(timezone.utc)
        with self._session_factory() as session:
            runner = ScrapeJobRunner(
                settings=self._settings,
                storage=SQLAlchemyRecordStorage(session=session),
                browser_factory=self._browser_factory,
            )
            try:
                report = runner.run_once(targets, run_id=run_id)
            except Exception as exc:
                self._record_run(
                    session,
                    run_id=run_id,
                    trigger=trigger,
                    report=None,
                    started_at=started_at,
                    error_message=str(exc) or type(exc).__name__,
                )
                raise

            self._record_run(
                session,
                run_id=run_id,
                trigger=trigger,
                report=report,
                started_at=started_at,
                error_message=None,
            )
        return report

    def list_recent_records(self, *, limit: int = 20) -> list[PersistedRecord]:
        with self._session_factory() as session:
            rows = CasinoRecordRepository(session).list_recent(limit=limit)
            return [to_persisted_record(row) for row in rows]

    @staticmethod
    def _record_run(
        session: Session,
        *,
        run_id: str,
        trigger: str,
        report: RunReport | None,
        started_at: datetime,
        error_message: str | None,
    ) -> None:
        finished_at = datetime.now(timezone.utc)
        if report is not None and report.finished_at is not None:
            finished_at = report.finished_at
        try:
            ScrapeRunRepository(session).record_run(
                run_id=run_id,
                trigger=trigger,
                report=report,
                started_at=started_at,
                finished_at=finished_at,
                error_message=error_message,
            )
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            log_event(
                logger,
                logging.WARNING,
                "scrape_run_history_failed",
                run_id=run_id,
                error=str(exc),
            )


@lru_cache(maxsize=1)
def get_casino_scraping_service() -> CasinoScrapingService:
    """
    Build and cache casino scraping service.
    """

    return CasinoScrapingService()
