"""
app/api/dependencies.py

Shared FastAPI dependencies.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from app.scheduler.jobs import ScrapeScheduler


def get_scrape_scheduler(request: Request) -> ScrapeScheduler:
    """
    Return the scheduler created by the application lifespan.
    """

    scheduler = getattr(request.app.state, "scrape_scheduler", None)
    if scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scrape scheduler is not initialised.",
        )
    return scheduler
