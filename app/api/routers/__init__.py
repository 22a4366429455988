"""
app/api/routers package marker.
"""

from app.api.routers.casino_scraping import router as casino_scraping_router

__all__ = ["casino_scraping_router"]
