"""
tests/test_casino_scraping_service.py

CasinoScrapingService wiring: targets from config, SQLite storage, run history.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import replace

import pytest
from sqlalchemy import select

from app.scraping.errors import BrowserUnavailableError, NavigationError
from app.services.casino_scraping_service import CasinoScrapingService
from db.models.scrape_run import ScrapeRun
from conftest import ScriptedBrowser, page_html, round_results_html

URL_A = "https://casinoscores.com/crazy-time"
URL_B = "https://casinoscores.com/monopoly-live"


@pytest.fixture()
def configured(tmp_path, settings):
    path = tmp_path / "targets.json"
    path.write_text(
        json.dumps(
            {
                "targets": [
                    {"name": "Crazy Time", "url": URL_A, "category": "game show"},
                    {"name": "Monopoly Live", "url": URL_B, "category": "game show"},
                ]
            }
        ),
        encoding="utf-8",
    )
    return replace(settings, targets_config_path=str(path))


def _rows() -> str:
    return page_html(round_results_html([("12 Mar202514:05", "2", "€4", "2x")]))


def test_run_records_history(configured, session_scope_factory, session_factory) -> None:
    browser = ScriptedBrowser({URL_A: _rows(), URL_B: NavigationError("timed out", url=URL_B)})
    service = CasinoScrapingService(
        settings=configured,
        session_factory=session_scope_factory,
        browser_factory=browser.factory,
    )

    report = service.run(trigger="scheduled")

    assert [outcome.status for outcome in report.outcomes] == ["success", "error"]
    with session_factory() as fresh:
        (run,) = fresh.scalars(select(ScrapeRun)).all()
    assert run.run_id == report.run_id
    assert run.trigger == "scheduled"
    assert run.status == "partial_success"
    assert (run.targets_total, run.targets_succeeded, run.targets_failed) == (2, 1, 1)
    assert run.details["succeeded"] == 1


def test_run_single_target(configured, session_scope_factory) -> None:
    browser = ScriptedBrowser({URL_A: _rows(), URL_B: _rows()})
    service = CasinoScrapingService(
        settings=configured,
        session_factory=session_scope_factory,
        browser_factory=browser.factory,
    )

    report = service.run(target_names=["monopoly live"])

    assert [outcome.target.name for outcome in report.outcomes] == ["Monopoly Live"]
    assert browser.fetched == [URL_B]


def test_unknown_target_name_rejected(configured, session_scope_factory) -> None:
    service = CasinoScrapingService(
        settings=configured,
        session_factory=session_scope_factory,
        browser_factory=ScriptedBrowser({}).factory,
    )

    with pytest.raises(ValueError, match="Baccarat"):
        service.run(target_names=["Baccarat"])


def test_browser_failure_recorded_and_reraised(
    configured, session_scope_factory, session_factory
) -> None:
    @contextmanager
    def _unavailable(_settings):
        raise BrowserUnavailableError("Chromium failed to launch")
        yield  # pragma: no cover

    service = CasinoScrapingService(
        settings=configured,
        session_factory=session_scope_factory,
        browser_factory=_unavailable,
    )

    with pytest.raises(BrowserUnavailableError):
        service.run()

    with session_factory() as fresh:
        (run,) = fresh.scalars(select(ScrapeRun)).all()
    assert run.status == "failed"
    assert run.error_message == "Chromium failed to launch"
    assert run.details is None


def test_list_recent_records(configured, session_scope_factory) -> None:
    browser = ScriptedBrowser({URL_A: _rows(), URL_B: _rows()})
    service = CasinoScrapingService(
        settings=configured,
        session_factory=session_scope_factory,
        browser_factory=browser.factory,
    )
    service.run()

    records = service.list_recent_records(limit=1)

    assert len(records) == 1
    assert records[0].status == "success"
