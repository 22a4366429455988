"""
Headless Chromium fetcher built on the Playwright sync API.

One browser per run, one context + tab per fetch. Everything opened here is
closed on every exit path.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, TypeVar

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from app.scraping.config.models import ScrapeTarget, ScrapingSettings
from app.scraping.errors import BrowserUnavailableError, ContentTimeoutError, NavigationError
from app.scraping.logging_utils import StepTimer, log_event
from app.scraping.types import RawPage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BrowserSession:
    """
    Wraps a launched browser and loads one target per call.
    """

    def __init__(self, browser: Any, settings: ScrapingSettings) -> None:
        self.browser = browser
        self.settings = settings

    def fetch(self, target: ScrapeTarget, timeout_ms: int | None = None) -> RawPage:
        navigation_timeout = timeout_ms or self.settings.fetch_timeout_ms
        timer = StepTimer()
        context = self._browser_call(
            target,
            "open browser context",
            lambda: self.browser.new_context(
                user_agent=self.settings.user_agent,
                viewport={
                    "width": self.settings.viewport_width,
                    "height": self.settings.viewport_height,
                },
                locale=self.settings.locale,
                extra_http_headers=dict(self.settings.extra_headers),
            ),
        )
        try:
            page = self._browser_call(target, "open tab", context.new_page)
            try:
                final_url = self._navigate(page, target=target, timeout_ms=navigation_timeout)
                self._wait_for_content(page, target=target)
                html = self._browser_call(target, "read page content", page.content)
            finally:
                _close_quietly(page, what="page", url=target.url)
        finally:
            _close_quietly(context, what="context", url=target.url)

        log_event(
            logger,
            logging.INFO,
            "fetch_completed",
            target=target.name,
            url=final_url,
            bytes=len(html.encode("utf-8")),
            latency_ms=timer.elapsed_ms(),
        )
        return RawPage(
            target=target,
            url=final_url,
            html=html,
            fetched_at=datetime.now(timezone.utc),
        )

    @staticmethod
    def _browser_call(target: ScrapeTarget, action: str, call: Callable[[], T]) -> T:
        # A crashed or closed browser surfaces here; report it like a failed navigation.
        try:
            return call()
        except PlaywrightError as exc:
            raise NavigationError(
                f"Could not {action} for {target.url}: {exc.message}",
                url=target.url,
            ) from exc

    @staticmethod
    def _navigate(page: Any, *, target: ScrapeTarget, timeout_ms: int) -> str:
        try:
            response = page.goto(target.url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise NavigationError(
                f"Navigation to {target.url} timed out after {timeout_ms} ms",
                url=target.url,
            ) from exc
        except PlaywrightError as exc:
            raise NavigationError(
                f"Navigation to {target.url} failed: {exc.message}",
                url=target.url,
            ) from exc

        if response is not None and response.status >= 400:
            raise NavigationError(
                f"Navigation to {target.url} returned HTTP {response.status}",
                url=target.url,
            )
        return page.url or target.url

    def _wait_for_content(self, page: Any, *, target: ScrapeTarget) -> None:
        selector = target.ready_selector or self.settings.default_ready_selector
        if not selector:
            return
        timeout_ms = self.settings.content_ready_timeout_ms
        try:
            page.wait_for_selector(selector, state="attached", timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise ContentTimeoutError(
                f"Selector {selector!r} did not appear on {target.url} within {timeout_ms} ms",
                url=target.url,
            ) from exc
        except PlaywrightError as exc:
            raise ContentTimeoutError(
                f"Waiting for {selector!r} on {target.url} failed: {exc.message}",
                url=target.url,
            ) from exc


@contextmanager
def open_browser(settings: ScrapingSettings) -> Iterator[BrowserSession]:
    """
    Start Playwright and Chromium for the duration of one run.
    """

    try:
        playwright = sync_playwright().start()
    except PlaywrightError as exc:
        raise BrowserUnavailableError(f"Playwright failed to start: {exc.message}") from exc

    try:
        browser = playwright.chromium.launch(headless=settings.headless)
    except PlaywrightError as exc:
        playwright.stop()
        raise BrowserUnavailableError(f"Chromium failed to launch: {exc.message}") from exc

    log_event(logger, logging.INFO, "browser_started", headless=settings.headless)
    try:
        yield BrowserSession(browser, settings)
    finally:
        _close_quietly(browser, what="browser", url=None)
        playwright.stop()
        log_event(logger, logging.INFO, "browser_closed")


def _close_quietly(resource: Any, *, what: str, url: str | None) -> None:
    try:
        resource.close()
    except PlaywrightError as exc:
        logger.warning("Failed to close %s (url=%s): %s", what, url, exc)
