"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation to the configured page URL
    - Smart field location and probing
    - Screenshot and failure capture for Allure

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

import allure
from loguru import logger
from playwright.async_api import Page

from formprobe_tools.common import get_config
from formprobe_tools.report_tools.allure_utils import attach_png, attach_text

from .field_probe import FormFieldProbe
from .smart_locator import SmartLocator


# Default output directory for screenshots
SCREENSHOT_DIR = Path(__file__).parent.parent / "screenshots"


class BasePage:
    """
    Base class for all page objects.

    Usage:
        class PracticeFormPage(BasePage):
            URL_CONFIG_KEY = "form.url"
    """

    # Override in subclasses
    URL_CONFIG_KEY: str = "form.url"
    PAGE_TITLE: str = ""

    def __init__(self, page: Page, url: Optional[str] = None):
        """
        Initialize page object.

        Args:
            page: Playwright Page object
            url: Page URL; read from configuration when omitted
        """
        self.page = page
        self.url = url or get_config(self.URL_CONFIG_KEY)
        if not self.url:
            raise ValueError(f"No URL configured for {type(self).__name__} ({self.URL_CONFIG_KEY})")
        self.smart = SmartLocator(page)
        self.prober = FormFieldProbe(page, smart=self.smart)

    async def navigate(self, wait_for: str = "domcontentloaded") -> None:
        """
        Navigate to this page.

        Args:
            wait_for: Wait condition - 'load', 'domcontentloaded', 'networkidle'
        """
        with allure.step(f"Navigate to {self.url}"):
            await self.page.goto(self.url, wait_until=wait_for)
            logger.debug(f"Navigated to: {self.url}")

    async def wait_for_page_load(
        self,
        state: str = "domcontentloaded",
        timeout: int = 15000,
    ) -> None:
        """Wait for the page to reach a stable load state."""
        await self.page.wait_for_load_state(state, timeout=timeout)

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def screenshot(
        self,
        name: str,
        full_page: bool = False,
        attach_to_allure: bool = True,
    ) -> Path:
        """
        Take screenshot and optionally attach to Allure.

        Args:
            name: Screenshot name (without extension)
            full_page: Capture full scrollable page
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot
        """
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = SCREENSHOT_DIR / f"{name}_{timestamp}.png"

        png = await self.page.screenshot(path=str(filepath), full_page=full_page)
        if attach_to_allure:
            attach_png(png, name=name)

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    async def capture_failure(self, test_name: str) -> None:
        """
        Capture debugging information on test failure.

        Saves a full-page screenshot, the current URL and the locator
        health report.
        """
        with allure.step("Capture failure details"):
            await self.screenshot(f"failure_{test_name}", full_page=True)
            attach_text(self.page.url, name="Current URL")
            attach_text(self.get_locator_health_report(), name="Locator Health")

    def get_locator_health_report(self) -> str:
        """Get smart locator health report."""
        return self.smart.get_health_report()


__all__ = [
    "BasePage",
]
