"""
app/api/routers/casino_scraping.py

Manual trigger, scheduler status and record read endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_scrape_scheduler
from app.scheduler.jobs import ScrapeScheduler
from app.schemas.casino_scraping import (
    CasinoRecordResponse,
    RunReportResponse,
    RunStatsResponse,
    SchedulerStatusResponse,
)
from app.scraping.errors import ScrapingError
from app.services.casino_scraping_service import (
    CasinoScrapingService,
    get_casino_scraping_service,
)

router = APIRouter(tags=["casino-scraping"])


@router.post("/scrape/run", response_model=RunReportResponse)
def run_scrape(
    target: list[str] | None = Query(
        default=None,
        description="Limit the run to these target names (repeatable); all targets when omitted",
    ),
    scheduler: ScrapeScheduler = Depends(get_scrape_scheduler),
) -> RunReportResponse:
    """
    Run one scrape pass now. Rejected with 409 while another run is in flight
    and with 400 when no configured target matches `target`.
    """

    try:
        report = scheduler.trigger_now(target)
    except ScrapingError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    except (ValueError, FileNotFoundError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    if report is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A scrape run is already in progress.",
        )
    return RunReportResponse.from_report(report)


@router.get("/scrape/status", response_model=SchedulerStatusResponse)
def scrape_status(
    scheduler: ScrapeScheduler = Depends(get_scrape_scheduler),
) -> SchedulerStatusResponse:
    current = scheduler.status()
    return SchedulerStatusResponse(
        is_running=current.is_running,
        schedule=current.schedule,
        next_run_estimate=current.next_run_estimate,
        stats=RunStatsResponse(**current.stats),
    )


@router.get("/records/recent", response_model=list[CasinoRecordResponse])
def recent_records(
    limit: int = Query(default=20, ge=1, le=200, description="Maximum records to return"),
    scraping_service: CasinoScrapingService = Depends(get_casino_scraping_service),
) -> list[CasinoRecordResponse]:
    """
    Most recently scraped records, newest first.
    """

    records = scraping_service.list_recent_records(limit=limit)
    return [CasinoRecordResponse.from_record(record) for record in records]
