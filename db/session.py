"""
db/session.py

Engine and session factory for the record store. Both are built lazily so
importing this module never touches the database.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url

# env var -> (create_engine keyword, default)
_POOL_OPTIONS: dict[str, tuple[str, int]] = {
    "DB_POOL_SIZE": ("pool_size", 5),
    "DB_MAX_OVERFLOW": ("max_overflow", 10),
    "DB_POOL_RECYCLE": ("pool_recycle", 1800),
}

_engine: Engine | None = None
_factory: sessionmaker | None = None


def _engine_options() -> dict[str, Any]:
    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "echo": os.getenv("SQL_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
    }
    for env_name, (keyword, default) in _POOL_OPTIONS.items():
        raw = os.getenv(env_name, "").strip()
        options[keyword] = int(raw) if raw.isdigit() else default
    return options


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        url = resolve_database_url()
        if not url.startswith("postgresql"):
            raise RuntimeError(f"Unsupported database URL scheme: {url.split(':', 1)[0]}")
        _engine = create_engine(url, **_engine_options())
    return _engine


def SessionLocal() -> Session:
    global _factory
    if _factory is None:
        _factory = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)
    return _factory()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Yield a session that is always closed; committing is the caller's job."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
