"""
Parsing modules for casino statistics pages.
"""

from app.scraping.parsing.extractor import PageExtractor
from app.scraping.parsing.fallback import FallbackResult, KeywordFallbackScanner
from app.scraping.parsing.filters import get_row_filter, is_valid_individual_win, register_row_filter
from app.scraping.parsing.html_parsers import HTMLParsingLayer

__all__ = [
    "FallbackResult",
    "HTMLParsingLayer",
    "KeywordFallbackScanner",
    "PageExtractor",
    "get_row_filter",
    "is_valid_individual_win",
    "register_row_filter",
]
