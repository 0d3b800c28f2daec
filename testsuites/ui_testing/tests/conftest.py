"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures for the live-form probes.

Key Features:
- One browser session per test, released unconditionally on teardown
- Page Object fixture for the practice form
- Screenshot + locator health capture on failure
- Live-site tests gated behind `e2e.enabled` (E2E_ENABLED=true)

================================================================================
"""

import re
from typing import AsyncGenerator

import pytest
from loguru import logger
from playwright.async_api import Error as PlaywrightError

from formprobe_tools.common import get_config
from testsuites.ui_testing.framework.browser_manager import BrowserManager
from testsuites.ui_testing.pages.automation_practice_page import AutomationPracticePage


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report on the item (item.rep_setup / rep_call)."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


@pytest.fixture(autouse=True)
def _require_live_form():
    """Skip live-site tests unless explicitly enabled."""
    if not get_config("e2e.enabled", False):
        pytest.skip(
            "Live form tests disabled; set E2E_ENABLED=true "
            "or run `python run_tests.py --suite ui`"
        )


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture
async def browser_manager() -> AsyncGenerator[BrowserManager, None]:
    """
    Function-scoped browser manager.

    The `async with` block closes the browser even when the test fails.
    """
    async with BrowserManager() as manager:
        yield manager


@pytest.fixture
async def practice_page(
    browser_manager: BrowserManager,
    request: pytest.FixtureRequest,
) -> AsyncGenerator[AutomationPracticePage, None]:
    """Provides the practice form, freshly navigated for this test."""
    url = get_config("form.url")
    page = await browser_manager.open_session(url)
    practice = AutomationPracticePage(page, url=url)

    yield practice

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed:
        try:
            await practice.capture_failure(re.sub(r"[^\w.-]+", "_", request.node.name))
        except PlaywrightError as e:
            logger.warning(f"Failed to capture failure details: {e}")
