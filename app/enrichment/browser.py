"""
Headless browser session built on Playwright's sync API.

One session and one page are shared across every product group in a run;
navigation is strictly sequential.
"""

from __future__ import annotations

import logging
from typing import Any

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright

from app.enrichment.config.models import EnrichmentSettings
from app.enrichment.errors import BrowserLaunchError
from app.enrichment.logging_utils import log_event

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]


class PageHandle:
    """
    Thin wrapper over a Playwright page exposing what locators and extractors need.
    """

    def __init__(self, page: Page, *, default_timeout_ms: int = 30000) -> None:
        self._page = page
        self._default_timeout_ms = default_timeout_ms

    @property
    def url(self) -> str:
        return self._page.url

    def navigate(
        self,
        url: str,
        *,
        wait_policy: str = "networkidle",
        timeout_ms: int | None = None,
    ) -> int | None:
        """
        Load `url` and return the main response's HTTP status, if any.
        """

        response = self._page.goto(
            url,
            wait_until=wait_policy,
            timeout=timeout_ms or self._default_timeout_ms,
        )
        return response.status if response is not None else None

    def fetch_json(self, url: str, *, timeout_ms: int | None = None) -> Any:
        response = self._page.goto(
            url,
            wait_until="networkidle",
            timeout=timeout_ms or self._default_timeout_ms,
        )
        if response is None:
            raise ValueError(f"No response received for {url}")
        return response.json()

    def content(self) -> str:
        return self._page.content()


class BrowserSession:
    """
    Owns the Playwright driver, browser and context for one run.
    """

    def __init__(
        self,
        *,
        playwright: Playwright,
        browser: Browser,
        settings: EnrichmentSettings,
    ) -> None:
        self._playwright = playwright
        self._browser = browser
        self._settings = settings
        self._contexts: list[BrowserContext] = []
        self._closed = False

    def __enter__(self) -> "BrowserSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def new_page(self, *, user_agent: str | None = None) -> PageHandle:
        context = self._browser.new_context(
            user_agent=user_agent or self._settings.user_agent,
            viewport={
                "width": self._settings.viewport_width,
                "height": self._settings.viewport_height,
            },
        )
        self._contexts.append(context)
        page = context.new_page()
        page.set_default_timeout(self._settings.page_timeout_ms)
        return PageHandle(page, default_timeout_ms=self._settings.page_timeout_ms)

    def close(self) -> None:
        """
        Release the browser. Never raises.
        """

        if self._closed:
            return
        self._closed = True
        for step, closer in (
            ("browser", self._browser.close),
            ("driver", self._playwright.stop),
        ):
            try:
                closer()
            except Exception as exc:  # noqa: BLE001
                log_event(logger, logging.DEBUG, "browser_close_failed", step=step, error=str(exc))


def launch_browser(settings: EnrichmentSettings) -> BrowserSession:
    """
    Start headless Chromium. Failures are setup-fatal for the run.
    """

    try:
        playwright = sync_playwright().start()
    except Exception as exc:
        raise BrowserLaunchError(f"Unable to start Playwright: {exc}") from exc

    try:
        browser = playwright.chromium.launch(headless=settings.headless, args=LAUNCH_ARGS)
    except Exception as exc:
        try:
            playwright.stop()
        except Exception:  # noqa: BLE001
            pass
        raise BrowserLaunchError(f"Unable to launch Chromium: {exc}") from exc

    log_event(logger, logging.INFO, "browser_launched", headless=settings.headless)
    return BrowserSession(playwright=playwright, browser=browser, settings=settings)
