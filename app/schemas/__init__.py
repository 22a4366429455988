"""
app/schemas package marker.
"""

from app.schemas.casino_scraping import (
    CasinoRecordResponse,
    RunReportResponse,
    RunStatsResponse,
    SchedulerStatusResponse,
    TargetOutcomeResponse,
)

__all__ = [
    "CasinoRecordResponse",
    "RunReportResponse",
    "RunStatsResponse",
    "SchedulerStatusResponse",
    "TargetOutcomeResponse",
]
