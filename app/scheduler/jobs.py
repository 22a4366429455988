"""
app/scheduler/jobs.py

APScheduler-based single-flight scheduler for the casino scrape job.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``ScrapeScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.

Overlap
--------
At most one run is in flight. A cron tick or manual trigger that arrives
while a run is active is dropped (logged as ``scheduler_tick_skipped``),
never queued.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Sequence

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from app.scraping.config import get_scraping_settings
from app.scraping.logging_utils import StepTimer, log_event
from app.scraping.types import RunReport
from app.services.casino_scraping_service import CasinoScrapingService
from db.models.scrape_run import ScrapeRunTrigger

logger = logging.getLogger(__name__)

JOB_ID = "casino_scrape"

# (trigger, target names or None for every configured target)
RunJob = Callable[[str, Sequence[str] | None], RunReport]


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class RunStats:
    total_runs: int = 0
    successful_runs: int = 0
    failed_runs: int = 0
    last_run_at: datetime | None = None
    last_success_at: datetime | None = None
    last_error: str | None = None
    average_duration_ms: float = 0.0

    def record(self, *, finished_at: datetime, duration_ms: int, error: str | None) -> None:
        self.total_runs += 1
        self.last_run_at = finished_at
        if error is None:
            self.successful_runs += 1
            self.last_success_at = finished_at
        else:
            self.failed_runs += 1
            self.last_error = error
        # Running mean over every completed run.
        self.average_duration_ms += (duration_ms - self.average_duration_ms) / self.total_runs

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        for key in ("last_run_at", "last_success_at"):
            value = payload[key]
            payload[key] = value.isoformat() if value is not None else None
        payload["average_duration_ms"] = round(self.average_duration_ms, 1)
        return payload


@dataclass(frozen=True)
class SchedulerStatus:
    is_running: bool
    schedule: str
    next_run_estimate: datetime | None
    stats: dict[str, Any]


class ScrapeScheduler:
    """
    Cron-driven wrapper around one scrape job with an Idle/Running guard.
    """

    def __init__(
        self,
        *,
        run_job: RunJob,
        schedule: str,
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        self._run_job = run_job
        self._schedule = schedule
        self._trigger = CronTrigger.from_crontab(schedule, timezone="UTC")
        self._scheduler = scheduler or BackgroundScheduler(timezone="UTC")
        self._lock = threading.Lock()
        self._state = SchedulerState.IDLE
        self._stats = RunStats()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SchedulerState.RUNNING

    @property
    def stats(self) -> RunStats:
        return self._stats

    def start(self) -> None:
        self._scheduler.add_job(
            self.tick,
            trigger=self._trigger,
            id=JOB_ID,
            name="Casino statistics scrape",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=30,
        )
        self._scheduler.start()
        log_event(
            logger,
            logging.INFO,
            "scheduler_started",
            schedule=self._schedule,
            next_run=self._next_run_estimate(),
        )

    def shutdown(self, wait: bool = True) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            log_event(logger, logging.INFO, "scheduler_stopped")

    def tick(self) -> RunReport | None:
        """
        Scheduled entry point. Errors are logged and recorded, never raised.
        """

        try:
            return self._execute(trigger=ScrapeRunTrigger.SCHEDULED, target_names=None)
        except Exception:  # noqa: BLE001
            return None

    def trigger_now(self, target_names: Sequence[str] | None = None) -> RunReport | None:
        """
        Manual entry point, optionally limited to the named targets.
        Returns None when a run is already in flight; re-raises a runner
        failure after returning to Idle.
        """

        return self._execute(trigger=ScrapeRunTrigger.MANUAL, target_names=target_names)

    def status(self) -> SchedulerStatus:
        return SchedulerStatus(
            is_running=self.is_running,
            schedule=self._schedule,
            next_run_estimate=self._next_run_estimate(),
            stats=self._stats.to_dict(),
        )

    def _execute(
        self,
        *,
        trigger: str,
        target_names: Sequence[str] | None,
    ) -> RunReport | None:
        if not self._lock.acquire(blocking=False):
            log_event(logger, logging.INFO, "scheduler_tick_skipped", trigger=trigger)
            return None

        self._state = SchedulerState.RUNNING
        timer = StepTimer()
        error: str | None = None
        log_event(logger, logging.INFO, "scheduler_run_started", trigger=trigger)
        try:
            report = self._run_job(trigger, target_names)
            log_event(
                logger,
                logging.INFO,
                "scheduler_run_completed",
                trigger=trigger,
                run_id=report.run_id,
                succeeded=report.succeeded,
                failed=report.failed,
                empty=report.empty,
            )
            return report
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            log_event(
                logger,
                logging.ERROR,
                "scheduler_run_failed",
                trigger=trigger,
                error_type=type(exc).__name__,
                error=error,
            )
            raise
        finally:
            self._stats.record(
                finished_at=datetime.now(timezone.utc),
                duration_ms=timer.elapsed_ms(),
                error=error,
            )
            self._state = SchedulerState.IDLE
            self._lock.release()

    def _next_run_estimate(self) -> datetime | None:
        if self._scheduler.running:
            job = self._scheduler.get_job(JOB_ID)
            if job is not None:
                return job.next_run_time
        return self._trigger.get_next_fire_time(None, datetime.now(timezone.utc))


def run_casino_scrape(trigger: str, target_names: Sequence[str] | None = None) -> RunReport:
    """
    Job body: one pass over all configured targets with run history.
    """

    return CasinoScrapingService().run(trigger=trigger, target_names=target_names)


def build_scheduler(run_job: RunJob = run_casino_scrape) -> ScrapeScheduler:
    """
    Build the scrape scheduler from settings.

    Returns a configured but *not yet started* ``ScrapeScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """

    settings = get_scraping_settings()
    return ScrapeScheduler(run_job=run_job, schedule=settings.schedule)
