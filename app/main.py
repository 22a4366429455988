from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

logger = logging.getLogger(__name__)


def _validate_env() -> None:
    """
    Fail fast on configuration the service cannot start with.

    Every problem is collected first so a single restart fixes all of them.
    """

    from db.config import DATABASE_URL_ALIASES, load_env_files

    load_env_files()
    problems: list[str] = []

    if not any(os.getenv(key, "").strip() for key in DATABASE_URL_ALIASES):
        problems.append(f"no database URL set (one of {', '.join(DATABASE_URL_ALIASES)})")

    schedule = os.getenv("SCRAPE_SCHEDULE")
    if schedule is not None and len(schedule.split()) != 5:
        problems.append(f"SCRAPE_SCHEDULE={schedule!r} is not a 5-field cron expression")

    if problems:
        raise RuntimeError("Invalid startup configuration: " + "; ".join(problems))


def _configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _verify_database() -> None:
    """
    Ping the database and make sure every mapped table exists.

    Migrations are never applied here; a missing table aborts startup with
    a pointer to `alembic upgrade head`.
    """

    from sqlalchemy import inspect, text

    import db.models  # noqa: F401 registers mapped tables
    from db.base import Base
    from db.session import get_engine

    engine = get_engine()
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc

    missing = sorted(set(Base.metadata.tables) - set(inspect(engine).get_table_names()))
    if missing:
        logger.critical("Tables missing from database: %s", ", ".join(missing))
        raise RuntimeError(
            f"Tables missing from database ({', '.join(missing)}). "
            "Run 'alembic upgrade head' and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    _verify_database()
    logger.info("Database reachable and schema present")

    from app.scheduler.jobs import build_scheduler
    from app.scraping.config import get_scraping_settings

    # Built even when the cron is off so POST /scrape/run keeps working.
    scheduler = build_scheduler()
    application.state.scrape_scheduler = scheduler
    if get_scraping_settings().scheduler_enabled:
        scheduler.start()
    else:
        logger.info("Cron disabled by SCRAPE_SCHEDULER_ENABLED; manual trigger only")
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)


def create_app() -> FastAPI:
    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Casino Stats Scraper API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import casino_scraping_router

    application.include_router(casino_scraping_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
