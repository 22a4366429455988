"""
Run one casino scrape pass from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os

from app.scraping.errors import BrowserUnavailableError
from app.services.casino_scraping_service import CasinoScrapingService
from db.models.scrape_run import ScrapeRunTrigger


def main() -> int:
    parser = argparse.ArgumentParser(description="Run one casino statistics scrape pass.")
    parser.add_argument(
        "--target",
        dest="targets",
        action="append",
        default=None,
        help="Target name from config file. Repeat to select several.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    service = CasinoScrapingService()
    try:
        report = service.run(trigger=ScrapeRunTrigger.MANUAL, target_names=args.targets)
    except BrowserUnavailableError as exc:
        print(json.dumps({"error": str(exc)}, indent=2))
        return 2

    print(json.dumps(report.to_dict(), indent=2))
    return 0 if report.failed == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
