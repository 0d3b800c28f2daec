"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for the form probes.

Features:
    - One browser per manager, one isolated context per session
    - Browser type / headless / viewport from configuration
    - Unconditional teardown (contexts, browser, Playwright)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
)

from formprobe_tools.common import get_config


SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


class BrowserManager:
    """
    Manages the browser instance and sessions for UI testing.

    Usage:
        async with BrowserManager() as manager:
            page = await manager.open_session("https://example.com/form")
            ...
        # Browser is closed here even if the block raised
    """

    # Default browser launch options
    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
        "args": [
            "--ignore-certificate-errors",
        ],
    }

    def __init__(
        self,
        headless: Optional[bool] = None,
        browser_type: Optional[str] = None,
    ):
        """
        Initialize browser manager.

        Args:
            headless: Run browser in headless mode (config `browser.headless`)
            browser_type: 'chromium', 'firefox' or 'webkit' (config `browser.type`)
        """
        self.headless = bool(get_config("browser.headless", True) if headless is None else headless)
        self.browser_type = (browser_type or get_config("browser.type", "chromium")).lower()
        if self.browser_type not in SUPPORTED_BROWSERS:
            raise ValueError(
                f"Unsupported browser type: {self.browser_type}. "
                f"Expected one of {SUPPORTED_BROWSERS}"
            )

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        """Async context manager entry - start browser."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - close browser."""
        await self.close()

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = await async_playwright().start()
        browser_launcher = getattr(self._playwright, self.browser_type)

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
        }

        try:
            self._browser = await browser_launcher.launch(**launch_options)
        except PlaywrightError:
            await self.close()
            raise
        logger.debug(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless})"
        )

    async def close(self) -> None:
        """Close all contexts, the browser and Playwright. Safe to call twice."""
        for context in self._contexts:
            try:
                await context.close()
            except PlaywrightError as e:
                logger.warning(f"Failed to close browser context: {e}")
        self._contexts.clear()

        try:
            if self._browser:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright:
                try:
                    await self._playwright.stop()
                finally:
                    self._playwright = None

        logger.debug("Browser closed")

    async def new_context(self, **options: Any) -> BrowserContext:
        """
        Create new isolated browser context.

        Args:
            **options: Overrides for the default context options
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options = {
            "viewport": {
                "width": int(get_config("browser.viewport.width", 1920)),
                "height": int(get_config("browser.viewport.height", 1080)),
            },
            "ignore_https_errors": True,
            **options,
        }

        context = await self._browser.new_context(**context_options)
        context.set_default_timeout(int(get_config("timeouts.locate_ms", 5000)))
        self._contexts.append(context)
        return context

    async def open_session(self, url: str, wait_until: str = "domcontentloaded") -> Page:
        """
        Open a fresh page in a new context and navigate it to `url`.

        Args:
            url: Target page
            wait_until: Playwright load state to wait for

        Returns:
            The navigated Page
        """
        context = await self.new_context()
        page = await context.new_page()
        await page.goto(
            url,
            wait_until=wait_until,
            timeout=int(get_config("timeouts.navigation_ms", 30000)),
        )
        logger.debug(f"Session opened: {url}")
        return page

    @property
    def browser(self) -> Optional[Browser]:
        """Get browser instance."""
        return self._browser


__all__ = [
    "BrowserManager",
    "SUPPORTED_BROWSERS",
]
