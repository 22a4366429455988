"""
tests/conftest.py

Shared fixtures: in-memory SQLite store, synthetic casinoscores-style HTML,
settings, targets and a scripted stand-in for the headless browser.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401 registers all ORM models on Base.metadata
from app.scraping.config.defaults import DEFAULT_READY_SELECTOR, DEFAULT_SECTIONS, default_profile
from app.scraping.config.models import ScrapeTarget, ScrapingSettings
from app.scraping.types import RawPage
from db.base import Base

FETCHED_AT = datetime(2025, 3, 12, 14, 5, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------------


def round_results_html(rows: list[tuple[str, str, str, str]]) -> str:
    """rows: (finished, slot_result, payout, multiplier)"""
    body = "".join(
        '<tr data-slot="table-row">'
        f'<td data-slot="table-cell">{finished}</td>'
        '<td data-slot="table-cell"><img src="/slot.png"></td>'
        f'<td data-slot="table-cell">{slot}</td>'
        f'<td data-slot="table-cell">{payout}</td>'
        f'<td data-slot="table-cell">{multiplier}</td>'
        "</tr>"
        for finished, slot, payout, multiplier in rows
    )
    return f'<table><tbody data-slot="table-body">{body}</tbody></table>'


def top_multipliers_html(rows: list[tuple[str, str]]) -> str:
    """rows: (finished, multiplier)"""
    body = "".join(
        f"<tr><td>{finished}</td><td><img src='/outcome.png'></td><td>{multiplier}</td></tr>"
        for finished, multiplier in rows
    )
    return f'<div data-testid="latest-top-multipliers"><table><tbody>{body}</tbody></table></div>'


def individual_wins_html(rows: list[tuple[str, str, str, str]]) -> str:
    """rows: (finished, player, amount, multiplier)"""
    body = "".join(
        f"<tr><td>{finished}</td><td><img src='/avatar.png'></td>"
        f"<td>{player}</td><td>{amount}</td><td>{multiplier}</td></tr>"
        for finished, player, amount, multiplier in rows
    )
    return f'<div data-testid="best-individual-wins"><table><tbody>{body}</tbody></table></div>'


def page_html(*fragments: str) -> str:
    return "<html><head><title>Stats</title></head><body>" + "".join(fragments) + "</body></html>"


# ---------------------------------------------------------------------------
# Settings and targets
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings() -> ScrapingSettings:
    return ScrapingSettings(
        schedule="* * * * *",
        fetch_timeout_ms=30000,
        content_ready_timeout_ms=15000,
        headless=True,
        targets_config_path="unused-targets.json",
        target_urls=(),
        user_agent="test-agent",
        default_ready_selector=DEFAULT_READY_SELECTOR,
        extra_headers={"Accept-Language": "en-US,en;q=0.9"},
    )


def make_target(name: str, url: str, **kwargs) -> ScrapeTarget:
    return ScrapeTarget(
        name=name,
        url=url,
        category=kwargs.pop("category", "game show"),
        ready_selector=DEFAULT_READY_SELECTOR,
        profile=default_profile(
            keywords=kwargs.pop("keywords", (name.lower(),)),
            description=kwargs.pop("description", f"{name} default description."),
            default_url=kwargs.pop("default_url", None),
            sections=kwargs.pop("sections", DEFAULT_SECTIONS),
        ),
    )


@pytest.fixture()
def crazy_time() -> ScrapeTarget:
    return make_target("Crazy Time", "https://casinoscores.com/crazy-time")


def raw_page(target: ScrapeTarget, html: str) -> RawPage:
    return RawPage(target=target, url=target.url, html=html, fetched_at=FETCHED_AT)


# ---------------------------------------------------------------------------
# Browser stand-in
# ---------------------------------------------------------------------------


class ScriptedBrowser:
    """
    Returns canned HTML (or raises a canned exception) per target URL.
    """

    def __init__(self, pages: dict[str, str | Exception]) -> None:
        self.pages = pages
        self.fetched: list[str] = []
        self.opened = 0
        self.closed = 0

    def fetch(self, target: ScrapeTarget, timeout_ms: int | None = None) -> RawPage:
        self.fetched.append(target.url)
        result = self.pages[target.url]
        if isinstance(result, Exception):
            raise result
        return raw_page(target, result)

    def factory(self, settings: ScrapingSettings):
        @contextmanager
        def _open() -> Iterator["ScriptedBrowser"]:
            self.opened += 1
            try:
                yield self
            finally:
                self.closed += 1

        return _open()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def session_scope_factory(session_factory: sessionmaker):
    @contextmanager
    def _scope() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    return _scope
