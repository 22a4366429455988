"""
tests/test_scrape_scheduler.py

Single-flight behaviour, status and run statistics for ScrapeScheduler.
The APScheduler instance is never started except in the lifecycle test.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest

from app.scheduler.jobs import JOB_ID, SchedulerState, ScrapeScheduler
from app.scraping.types import RunReport


def _report(run_id: str = "run") -> RunReport:
    now = datetime.now(timezone.utc)
    return RunReport(run_id=run_id, started_at=now, finished_at=now)


class BlockingJob:
    """Run job that blocks until released, to hold the scheduler in Running."""

    def __init__(self) -> None:
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls: list[str] = []

    def __call__(self, trigger: str, target_names=None) -> RunReport:
        self.calls.append(trigger)
        self.started.set()
        assert self.release.wait(timeout=5)
        return _report(f"run-{len(self.calls)}")


# ---------------------------------------------------------------------------
# Single flight
# ---------------------------------------------------------------------------


class TestSingleFlight:
    def test_trigger_while_running_is_noop(self) -> None:
        job = BlockingJob()
        scheduler = ScrapeScheduler(run_job=job, schedule="* * * * *")
        results: list[RunReport | None] = []

        worker = threading.Thread(target=lambda: results.append(scheduler.tick()))
        worker.start()
        assert job.started.wait(timeout=5)

        assert scheduler.is_running is True
        assert scheduler.trigger_now() is None
        assert scheduler.tick() is None

        job.release.set()
        worker.join(timeout=5)

        assert job.calls == ["scheduled"]
        assert results[0] is not None
        assert results[0].run_id == "run-1"
        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.stats.total_runs == 1

    def test_runs_again_after_completion(self) -> None:
        calls: list[str] = []

        def job(trigger: str, target_names=None) -> RunReport:
            calls.append(trigger)
            return _report()

        scheduler = ScrapeScheduler(run_job=job, schedule="* * * * *")

        assert scheduler.trigger_now() is not None
        assert scheduler.tick() is not None
        assert calls == ["manual", "scheduled"]


# ---------------------------------------------------------------------------
# Failure handling
# ---------------------------------------------------------------------------


class TestFailures:
    def _failing(self, trigger: str, target_names=None) -> RunReport:
        raise RuntimeError("browser crashed")

    def test_tick_swallows_and_returns_to_idle(self) -> None:
        scheduler = ScrapeScheduler(run_job=self._failing, schedule="* * * * *")

        assert scheduler.tick() is None
        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.stats.failed_runs == 1
        assert scheduler.stats.last_error == "browser crashed"

    def test_trigger_now_reraises_and_returns_to_idle(self) -> None:
        scheduler = ScrapeScheduler(run_job=self._failing, schedule="* * * * *")

        with pytest.raises(RuntimeError, match="browser crashed"):
            scheduler.trigger_now()

        assert scheduler.is_running is False
        with pytest.raises(RuntimeError):
            scheduler.trigger_now()
        assert scheduler.stats.total_runs == 2


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


class TestStatus:
    def test_idle_status_has_cron_estimate(self) -> None:
        scheduler = ScrapeScheduler(run_job=lambda trigger, target_names: _report(), schedule="*/5 * * * *")

        status = scheduler.status()

        assert status.is_running is False
        assert status.schedule == "*/5 * * * *"
        assert status.next_run_estimate is not None
        assert status.next_run_estimate.minute % 5 == 0
        assert status.next_run_estimate > datetime.now(timezone.utc)

    def test_stats_accumulate(self) -> None:
        outcomes = iter([None, RuntimeError("boom"), None])

        def job(trigger: str, target_names=None) -> RunReport:
            error = next(outcomes)
            if error is not None:
                raise error
            return _report()

        scheduler = ScrapeScheduler(run_job=job, schedule="* * * * *")
        scheduler.tick()
        scheduler.tick()
        scheduler.tick()

        stats = scheduler.status().stats
        assert stats["total_runs"] == 3
        assert stats["successful_runs"] == 2
        assert stats["failed_runs"] == 1
        assert stats["last_error"] == "boom"
        assert stats["last_success_at"] is not None
        assert stats["average_duration_ms"] >= 0

    def test_invalid_schedule_rejected(self) -> None:
        with pytest.raises(ValueError):
            ScrapeScheduler(run_job=lambda trigger, target_names: _report(), schedule="every minute")


def test_start_registers_single_instance_job() -> None:
    scheduler = ScrapeScheduler(run_job=lambda trigger, target_names: _report(), schedule="0 * * * *")
    scheduler.start()
    try:
        job = scheduler._scheduler.get_job(JOB_ID)
        assert job is not None
        assert job.max_instances == 1
        assert job.coalesce is True
        assert scheduler.status().next_run_estimate == job.next_run_time
    finally:
        scheduler.shutdown(wait=False)
