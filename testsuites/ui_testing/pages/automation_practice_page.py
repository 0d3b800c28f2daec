"""
================================================================================
Automation Practice Form Page Object (Async / Playwright)
================================================================================

Page Object for the CloudQA "Automation Practice Form".

Each probed field is one row of FIELD_TABLE:
  {name, kind, ordered locator candidates, expected value}

Locator precedence per field:
  1. Visible label / text marker inside the main form (robust)
  2. id / placeholder / value attributes (brittle, diagnostic only)

================================================================================
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

import allure

from formprobe_tools.common import get_config
from testsuites.ui_testing.framework.field_probe import (
    FieldKind,
    FieldProbeResult,
    FieldSpec,
)
from testsuites.ui_testing.framework.page_base import BasePage
from testsuites.ui_testing.framework.smart_locator import LocatorCandidate


def form_scope(form_id: Optional[str] = None) -> str:
    """XPath of the practice form; defaults to the configured `form.id`."""
    return f"//form[@id='{form_id or get_config('form.id', 'automationtestform')}']"


def label_input(scope: str, label: str) -> LocatorCandidate:
    """First input following a form label with the given visible text."""
    return LocatorCandidate(
        name="label_text",
        selector=f"xpath={scope}//label[normalize-space()='{label}']/following::input[1]",
    )


def build_field_table(form_id: Optional[str] = None) -> Tuple[FieldSpec, ...]:
    """Field table with every robust locator anchored inside the form."""
    scope = form_scope(form_id)
    return (
        FieldSpec(
            name="First Name",
            kind=FieldKind.TEXT,
            expected_value="Jane Doe",
            candidates=(
                label_input(scope, "First Name"),
                LocatorCandidate("placeholder", "xpath=//input[@placeholder='Name']", robust=False),
                LocatorCandidate("id", "css=#fname", robust=False),
            ),
        ),
        FieldSpec(
            name="Email",
            kind=FieldKind.TEXT,
            expected_value="robust.test@example.com",
            candidates=(
                label_input(scope, "Email"),
                LocatorCandidate("placeholder", "xpath=//input[@placeholder='Email']", robust=False),
                LocatorCandidate("id", "css=#email", robust=False),
            ),
        ),
        FieldSpec(
            name="Gender",
            kind=FieldKind.SELECTABLE,
            expected_value="Female",
            candidates=(
                LocatorCandidate(
                    name="span_text",
                    selector=f"xpath={scope}//span[normalize-space()='Female']",
                    control="xpath=preceding-sibling::input[1]",
                ),
                LocatorCandidate(
                    name="label_text",
                    selector=f"xpath={scope}//label[normalize-space(text())='Female']",
                    control="xpath=input[@type='radio']",
                ),
                LocatorCandidate(
                    "value",
                    "xpath=//input[@type='radio' and @value='Female']",
                    robust=False,
                ),
            ),
        ),
    )


# Built from the configuration at import; AutomationPracticePage.fields()
# rebuilds it so a later FORM_ID override is honoured.
FIELD_TABLE: Tuple[FieldSpec, ...] = build_field_table()


class AutomationPracticePage(BasePage):
    """Automation practice form page object (async)."""

    URL_CONFIG_KEY = "form.url"
    PAGE_TITLE = "Automation Practice Form"

    @allure.step("Open automation practice form")
    async def open(self) -> "AutomationPracticePage":
        """Navigate to the form."""
        await self.navigate()
        await self.wait_for_page_load()
        return self

    @staticmethod
    def fields() -> Tuple[FieldSpec, ...]:
        """Field table for the currently configured form."""
        return build_field_table()

    @classmethod
    def field(cls, name: str) -> FieldSpec:
        """Look up a field table row by name."""
        fields_by_name: Dict[str, FieldSpec] = {field.name: field for field in cls.fields()}
        try:
            return fields_by_name[name]
        except KeyError:
            raise KeyError(
                f"Unknown field '{name}'. Known fields: {sorted(fields_by_name)}"
            ) from None

    async def probe_field(self, name: str, value: Optional[str] = None) -> FieldProbeResult:
        """Probe a field of the configured form by name."""
        return await self.prober.probe(self.field(name), value)
