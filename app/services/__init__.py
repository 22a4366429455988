"""
app/services package marker.
"""

from app.services.casino_scraping_service import (
    CasinoScrapingService,
    get_casino_scraping_service,
)

__all__ = ["CasinoScrapingService", "get_casino_scraping_service"]
