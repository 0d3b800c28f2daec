from unittest.mock import AsyncMock

import pytest
from playwright.async_api import Error as PlaywrightError

from testsuites.ui_testing.framework.browser_manager import BrowserManager
from testsuites.ui_testing.framework.field_probe import FieldKind
from testsuites.ui_testing.framework.smart_locator import ResolutionStatus, SmartLocator
from testsuites.ui_testing.pages.automation_practice_page import (
    FIELD_TABLE,
    AutomationPracticePage,
    form_scope,
)
from testsuites.unit.fake_dom import FakeElement, FakePage


def replica_dom():
    """Fake DOM keyed by the robust selectors of FIELD_TABLE."""
    dom = {}
    for field in FIELD_TABLE:
        primary = SmartLocator.order_candidates(field.candidates)[0]
        if primary.control:
            radio = FakeElement()
            dom[primary.selector] = [FakeElement(relations={primary.control: [radio]})]
        else:
            dom[primary.selector] = [FakeElement()]
    return dom


def test_field_table_covers_probed_fields():
    assert [field.name for field in FIELD_TABLE] == ["First Name", "Email", "Gender"]
    assert AutomationPracticePage.field("Email").expected_value == "robust.test@example.com"


@pytest.mark.parametrize("field", FIELD_TABLE, ids=lambda field: field.name)
def test_every_field_leads_with_a_robust_candidate(field):
    ordered = SmartLocator.order_candidates(field.candidates)
    assert ordered[0].robust
    assert list(field.candidates[: len([c for c in field.candidates if c.robust])]) == [
        c for c in ordered if c.robust
    ]
    assert any(not c.robust for c in field.candidates), "a brittle diagnostic candidate is expected"


@pytest.mark.parametrize("field", FIELD_TABLE, ids=lambda field: field.name)
def test_text_fields_have_values_and_selectables_reach_a_control(field):
    if field.kind is FieldKind.TEXT:
        assert field.expected_value
    else:
        markers = [c for c in field.candidates if c.robust]
        assert all(c.control for c in markers)


def test_label_locators_are_scoped_to_the_form():
    first_name = AutomationPracticePage.field("First Name").candidates[0]
    assert first_name.selector.startswith(f"xpath={form_scope()}//label")


def test_field_table_follows_form_id_override(monkeypatch):
    monkeypatch.setenv("FORM_ID", "stagingform")

    for field in AutomationPracticePage.fields():
        for candidate in field.candidates:
            if candidate.robust:
                assert candidate.selector.startswith("xpath=//form[@id='stagingform']//")


def test_unknown_field_lists_known_fields():
    with pytest.raises(KeyError, match="First Name"):
        AutomationPracticePage.field("Phone")


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["First Name", "Email", "Gender"])
async def test_probe_field_against_replica(name):
    page = AutomationPracticePage(FakePage(replica_dom()), url="http://replica.local/form")

    result = await page.probe_field(name)

    assert result.passed, result.describe()
    assert page.get_locator_health_report().startswith("✅")


def test_page_requires_a_url(monkeypatch):
    monkeypatch.setattr(AutomationPracticePage, "URL_CONFIG_KEY", "form.missing_url")
    with pytest.raises(ValueError, match="No URL configured"):
        AutomationPracticePage(FakePage())


def test_browser_manager_rejects_unknown_browser():
    with pytest.raises(ValueError, match="Unsupported browser type"):
        BrowserManager(browser_type="netscape")


@pytest.mark.asyncio
async def test_browser_manager_close_is_safe_before_start():
    manager = BrowserManager(headless=True, browser_type="chromium")
    await manager.close()
    await manager.close()
    assert manager.browser is None


@pytest.mark.asyncio
async def test_browser_manager_requires_start_for_contexts():
    with pytest.raises(RuntimeError, match="Browser not started"):
        await BrowserManager(browser_type="firefox").new_context()


def _started_with_fakes(manager, contexts):
    playwright = AsyncMock()
    browser = AsyncMock()

    async def start():
        manager._playwright = playwright
        manager._browser = browser
        manager._contexts.extend(contexts)

    manager.start = start
    return playwright, browser


@pytest.mark.asyncio
async def test_browser_manager_tears_down_after_a_failed_test():
    contexts = [AsyncMock(), AsyncMock()]
    contexts[0].close.side_effect = PlaywrightError("Target page, context or browser has been closed")
    manager = BrowserManager(headless=True, browser_type="chromium")
    playwright, browser = _started_with_fakes(manager, contexts)

    with pytest.raises(AssertionError, match="midway"):
        async with manager:
            raise AssertionError("read-back assertion failed midway")

    for context in contexts:
        context.close.assert_awaited_once()
    browser.close.assert_awaited_once()
    playwright.stop.assert_awaited_once()
    assert manager._contexts == []
    assert manager._browser is None and manager._playwright is None


@pytest.mark.asyncio
async def test_browser_manager_stops_playwright_when_browser_close_fails():
    manager = BrowserManager(headless=True, browser_type="chromium")
    playwright, browser = _started_with_fakes(manager, [])
    browser.close.side_effect = PlaywrightError("Browser has been closed")

    with pytest.raises(PlaywrightError):
        async with manager:
            pass

    playwright.stop.assert_awaited_once()
    assert manager._playwright is None


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["First Name", "Email", "Gender"])
async def test_missing_field_waits_within_one_locate_timeout(name):
    page = FakePage()
    smart = SmartLocator(page, timeout=5000, diagnostic_timeout=1000)

    resolution = await smart.resolve(name, AutomationPracticePage.field(name).candidates)

    assert resolution.status is ResolutionStatus.ELEMENT_NOT_FOUND
    assert sum(timeout for _, timeout in page.wait_log) <= 5000


@pytest.mark.asyncio
async def test_gender_marker_without_radio_waits_within_one_locate_timeout():
    marker = AutomationPracticePage.field("Gender").candidates[0]
    page = FakePage({marker.selector: [FakeElement()]})
    smart = SmartLocator(page, timeout=5000, diagnostic_timeout=1000)

    resolution = await smart.resolve("Gender", AutomationPracticePage.field("Gender").candidates)

    assert not resolution.found
    assert sum(timeout for _, timeout in page.wait_log) <= 5000
