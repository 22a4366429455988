"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.casino_record import CasinoRecord, CasinoRecordStatus
from db.models.scrape_run import ScrapeRun, ScrapeRunStatus, ScrapeRunTrigger

__all__ = [
    "CasinoRecord",
    "CasinoRecordStatus",
    "ScrapeRun",
    "ScrapeRunStatus",
    "ScrapeRunTrigger",
]
