"""
app/repositories package marker.
"""

from app.repositories.casino_record_repository import CasinoRecordRepository
from app.repositories.scrape_run_repository import ScrapeRunRepository

__all__ = [
    "CasinoRecordRepository",
    "ScrapeRunRepository",
]
