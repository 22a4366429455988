"""
Casino scraping job runner.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from datetime import datetime, timezone

from playwright.sync_api import Error as PlaywrightError

from app.scraping.browser import BrowserSession, open_browser
from app.scraping.config.models import ScrapeTarget, ScrapingSettings
from app.scraping.errors import FetchError
from app.scraping.logging_utils import StepTimer, log_event
from app.scraping.parsing.extractor import PageExtractor
from app.scraping.storage import RecordStorage
from app.scraping.types import RunReport, TargetOutcome

logger = logging.getLogger(__name__)

BrowserFactory = Callable[[ScrapingSettings], AbstractContextManager[BrowserSession]]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ScrapeJobRunner:
    """
    Runs one sequential pass over the configured targets.

    Per-target failures become outcomes in the report; only a browser that
    cannot be started aborts the run.
    """

    def __init__(
        self,
        *,
        settings: ScrapingSettings,
        storage: RecordStorage,
        browser_factory: BrowserFactory = open_browser,
        extractor: PageExtractor | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._settings = settings
        self._storage = storage
        self._browser_factory = browser_factory
        self._extractor = extractor or PageExtractor()
        self._clock = clock

    def run_once(
        self,
        targets: Sequence[ScrapeTarget],
        *,
        run_id: str | None = None,
    ) -> RunReport:
        report = RunReport(run_id=run_id or uuid.uuid4().hex, started_at=self._clock())
        log_event(
            logger,
            logging.INFO,
            "scrape_run_started",
            run_id=report.run_id,
            targets=[target.name for target in targets],
        )

        if targets:
            with self._browser_factory(self._settings) as browser:
                for target in targets:
                    report.outcomes.append(
                        self._run_target(browser, target=target, run_id=report.run_id)
                    )

        report.finished_at = self._clock()
        log_event(
            logger,
            logging.INFO,
            "scrape_run_completed",
            run_id=report.run_id,
            targets_total=len(report.outcomes),
            succeeded=report.succeeded,
            failed=report.failed,
            empty=report.empty,
            duration_ms=report.duration_ms,
        )
        return report

    def _run_target(
        self,
        browser: BrowserSession,
        *,
        target: ScrapeTarget,
        run_id: str,
    ) -> TargetOutcome:
        outcome = TargetOutcome(target=target)
        timer = StepTimer()
        try:
            try:
                raw_page = browser.fetch(target, self._settings.fetch_timeout_ms)
            except (FetchError, PlaywrightError) as exc:
                outcome.error_type = type(exc).__name__
                outcome.error_message = str(exc)
                log_event(
                    logger,
                    logging.WARNING,
                    "target_fetch_failed",
                    run_id=run_id,
                    target=target.name,
                    url=target.url,
                    error_type=outcome.error_type,
                    error=outcome.error_message,
                )
                outcome.persisted = self._storage.upsert_error(
                    target,
                    outcome.error_message,
                    self._clock(),
                )
                return outcome

            record = self._extractor.extract(raw_page)
            outcome.record = record
            log_event(
                logger,
                logging.INFO,
                "target_extracted",
                run_id=run_id,
                target=target.name,
                has_data=record.has_data,
                rows=record.row_count,
                heuristic_fields=record.heuristic_fields,
            )

            outcome.persisted = self._storage.upsert(record, self._clock())
            log_event(
                logger,
                logging.INFO,
                "target_persisted",
                run_id=run_id,
                target=target.name,
                status=outcome.status,
                record_status=record.status,
                latency_ms=timer.elapsed_ms(),
            )
        except Exception as exc:
            if outcome.error_message is None:
                outcome.error_type = type(exc).__name__
                outcome.error_message = str(exc) or type(exc).__name__
            log_event(
                logger,
                logging.ERROR,
                "target_failed",
                run_id=run_id,
                target=target.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
        return outcome


def select_targets(
    targets: Sequence[ScrapeTarget],
    names: Sequence[str] | None,
) -> list[ScrapeTarget]:
    """
    Narrow targets to the requested names (case-insensitive), keeping order.
    """

    if not names:
        return list(targets)
    normalized = {name.strip().lower() for name in names if name.strip()}
    if not normalized:
        return list(targets)
    return [target for target in targets if target.name.lower() in normalized]
