"""
================================================================================
Form Field Probe
================================================================================

Runs one linear check against a form field:

    resolve -> act -> wait/assert -> (optional) restore

Text fields:       type value, read back, clear, read back empty
Selectable fields: check unselected, click, wait until selected, re-read

Probes never raise for page-level failures. They return a FieldProbeResult
whose `raise_for_failure()` turns the failure kind into a typed exception at
the test boundary.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from formprobe_tools.report_tools.allure_utils import attach_probe_result, attach_resolution

from .smart_locator import (
    AmbiguousLocatorError,
    ElementNotFoundError,
    LocatorCandidate,
    LocatorResolution,
    ProbeError,
    ResolutionStatus,
    RobustLocatorUnavailableError,
    SmartLocator,
    first_line,
)
from .wait_helpers import WaitConfig, WaitTimeoutError, get_wait_config, wait_until


class AssertionMismatchError(ProbeError):
    """Raised when the observed field state differs from the expected one."""
    pass


class AssertionTimeoutError(ProbeError):
    """Raised when a state-convergence wait runs out of time."""
    pass


class ActionFailedError(ProbeError):
    """Raised when the browser rejects an interaction with the field."""
    pass


class FieldKind(str, Enum):
    TEXT = "text"
    SELECTABLE = "selectable"


class FailureKind(str, Enum):
    ELEMENT_NOT_FOUND = "ElementNotFound"
    ROBUST_LOCATOR_UNAVAILABLE = "RobustLocatorUnavailable"
    AMBIGUOUS_LOCATOR = "AmbiguousLocator"
    ASSERTION_MISMATCH = "AssertionMismatch"
    ASSERTION_TIMEOUT = "AssertionTimeout"
    ACTION_FAILED = "ActionFailed"


FAILURE_ERRORS: Dict[FailureKind, Type[ProbeError]] = {
    FailureKind.ELEMENT_NOT_FOUND: ElementNotFoundError,
    FailureKind.ROBUST_LOCATOR_UNAVAILABLE: RobustLocatorUnavailableError,
    FailureKind.AMBIGUOUS_LOCATOR: AmbiguousLocatorError,
    FailureKind.ASSERTION_MISMATCH: AssertionMismatchError,
    FailureKind.ASSERTION_TIMEOUT: AssertionTimeoutError,
    FailureKind.ACTION_FAILED: ActionFailedError,
}

RESOLUTION_FAILURES: Dict[ResolutionStatus, FailureKind] = {
    ResolutionStatus.ELEMENT_NOT_FOUND: FailureKind.ELEMENT_NOT_FOUND,
    ResolutionStatus.ROBUST_LOCATOR_UNAVAILABLE: FailureKind.ROBUST_LOCATOR_UNAVAILABLE,
    ResolutionStatus.AMBIGUOUS: FailureKind.AMBIGUOUS_LOCATOR,
}


@dataclass(frozen=True)
class FieldSpec:
    """
    One row of a field table.

    Attributes:
        name: Logical field name shown in diagnostics ("First Name")
        kind: TEXT or SELECTABLE
        candidates: Ordered locator candidates
        expected_value: Text to type (TEXT) or option label (SELECTABLE)
    """
    name: str
    kind: FieldKind
    candidates: Tuple[LocatorCandidate, ...]
    expected_value: Optional[str] = None


@dataclass
class FieldProbeResult:
    """Outcome of one probe."""
    field_name: str
    kind: FieldKind
    passed: bool
    failure_kind: Optional[FailureKind] = None
    expected: Any = None
    actual: Any = None
    initial_state: Any = None
    reason: str = ""
    resolution: Optional[LocatorResolution] = None

    def describe(self) -> str:
        if self.passed:
            return f"{self.field_name}: passed"
        return f"[{self.failure_kind.value}] {self.reason}"

    def raise_for_failure(self) -> None:
        """Raise the typed ProbeError for this failure; no-op when passed."""
        if self.passed:
            return
        raise FAILURE_ERRORS[self.failure_kind](self.describe())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field_name,
            "kind": self.kind.value,
            "passed": self.passed,
            "failure_kind": self.failure_kind.value if self.failure_kind else None,
            "expected": self.expected,
            "actual": self.actual,
            "initial_state": self.initial_state,
            "reason": self.reason,
            "resolution": self.resolution.to_dict() if self.resolution else None,
        }


class FormFieldProbe:
    """
    Probes form fields on a live page.

    Usage:
        probe = FormFieldProbe(page)
        result = await probe.probe(first_name_spec)
        result.raise_for_failure()
    """

    def __init__(
        self,
        page: Page,
        smart: Optional[SmartLocator] = None,
        selection_wait: Optional[WaitConfig] = None,
    ):
        """
        Args:
            page: Playwright Page object (the live session)
            smart: SmartLocator to resolve fields with; built from config if None
            selection_wait: Wait used for selected-state convergence
        """
        self.page = page
        self.smart = smart or SmartLocator(page)
        self.selection_wait = selection_wait or get_wait_config("selection")

    async def probe(self, field: FieldSpec, value: Optional[str] = None) -> FieldProbeResult:
        """Run the probe matching the field's kind."""
        if field.kind is FieldKind.TEXT:
            return await self.probe_text_field(field, value)
        return await self.probe_selectable(field)

    async def probe_text_field(
        self,
        field: FieldSpec,
        value: Optional[str] = None,
    ) -> FieldProbeResult:
        """
        Type into a text field, verify the value, clear it, verify it is empty.

        Args:
            field: Field to probe
            value: Text to type; defaults to field.expected_value

        Raises:
            ValueError: When the value to type is empty
        """
        value = field.expected_value if value is None else value
        if not value:
            raise ValueError(f"A non-empty value is required to probe '{field.name}'")

        with allure.step(f"Probe text field: {field.name}"):
            resolution = await self.smart.resolve(field.name, field.candidates)
            if not resolution.found:
                return self._resolution_failure(field, resolution, expected=value)
            element = resolution.locator

            with allure.step(f"Type {value!r}"):
                try:
                    await element.press_sequentially(value)
                    typed = await element.input_value()
                except PlaywrightError as e:
                    await self._restore_text(field, element)
                    return self._action_failure(field, resolution, "type into", e, expected=value)

            if typed != value:
                await self._restore_text(field, element)
                return self._finish(FieldProbeResult(
                    field_name=field.name,
                    kind=field.kind,
                    passed=False,
                    failure_kind=FailureKind.ASSERTION_MISMATCH,
                    expected=value,
                    actual=typed,
                    reason=f"'{field.name}' value after typing: expected {value!r}, got {typed!r}",
                    resolution=resolution,
                ))

            with allure.step("Clear field"):
                try:
                    await element.clear()
                    cleared = await element.input_value()
                except PlaywrightError as e:
                    return self._action_failure(field, resolution, "clear", e, expected="")

            if cleared != "":
                return self._finish(FieldProbeResult(
                    field_name=field.name,
                    kind=field.kind,
                    passed=False,
                    failure_kind=FailureKind.ASSERTION_MISMATCH,
                    expected="",
                    actual=cleared,
                    reason=f"'{field.name}' value after clearing: expected empty, got {cleared!r}",
                    resolution=resolution,
                ))

            return self._finish(FieldProbeResult(
                field_name=field.name,
                kind=field.kind,
                passed=True,
                expected=value,
                actual=typed,
                resolution=resolution,
            ))

    async def probe_selectable(self, field: FieldSpec) -> FieldProbeResult:
        """
        Click a radio/checkbox and wait for it to report selected.

        The control is left selected afterwards.
        """
        with allure.step(f"Probe selectable field: {field.name}"):
            resolution = await self.smart.resolve(field.name, field.candidates)
            if not resolution.found:
                return self._resolution_failure(field, resolution, expected=True)
            control = resolution.locator

            try:
                initial = await control.is_checked()
            except PlaywrightError as e:
                return self._action_failure(field, resolution, "read selected-state of", e, expected=True)

            if initial:
                return self._finish(FieldProbeResult(
                    field_name=field.name,
                    kind=field.kind,
                    passed=False,
                    failure_kind=FailureKind.ASSERTION_MISMATCH,
                    expected=False,
                    actual=True,
                    initial_state=True,
                    reason=f"'{field.name}' was already selected before interaction",
                    resolution=resolution,
                ))

            with allure.step(f"Click {field.expected_value or field.name}"):
                try:
                    await control.click()
                except PlaywrightError as e:
                    return self._action_failure(field, resolution, "click", e, expected=True)

            async def check_selected() -> Tuple[bool, bool]:
                selected = await control.is_checked()
                return selected, selected

            try:
                await wait_until(
                    check_selected,
                    scenario="selection",
                    description=f"'{field.name}' selected",
                    config=self.selection_wait,
                )
            except WaitTimeoutError as e:
                return self._finish(FieldProbeResult(
                    field_name=field.name,
                    kind=field.kind,
                    passed=False,
                    failure_kind=FailureKind.ASSERTION_TIMEOUT,
                    expected=True,
                    actual=e.last_result,
                    initial_state=initial,
                    reason=(
                        f"'{field.name}' was not selected within "
                        f"{self.selection_wait.timeout:g}s"
                    ),
                    resolution=resolution,
                ))

            try:
                reread = await control.is_checked()
            except PlaywrightError as e:
                return self._action_failure(field, resolution, "re-read selected-state of", e, expected=True)

            if not reread:
                return self._finish(FieldProbeResult(
                    field_name=field.name,
                    kind=field.kind,
                    passed=False,
                    failure_kind=FailureKind.ASSERTION_MISMATCH,
                    expected=True,
                    actual=reread,
                    initial_state=initial,
                    reason=f"'{field.name}' lost its selection on re-read",
                    resolution=resolution,
                ))

            return self._finish(FieldProbeResult(
                field_name=field.name,
                kind=field.kind,
                passed=True,
                expected=True,
                actual=reread,
                initial_state=initial,
                resolution=resolution,
            ))

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _restore_text(self, field: FieldSpec, element: Locator) -> None:
        try:
            await element.clear()
        except PlaywrightError as e:
            logger.warning(f"Could not restore '{field.name}' to empty: {e}")

    def _resolution_failure(
        self,
        field: FieldSpec,
        resolution: LocatorResolution,
        expected: Any,
    ) -> FieldProbeResult:
        attach_resolution(resolution)
        return self._finish(FieldProbeResult(
            field_name=field.name,
            kind=field.kind,
            passed=False,
            failure_kind=RESOLUTION_FAILURES[resolution.status],
            expected=expected,
            reason=resolution.reason(),
            resolution=resolution,
        ))

    def _action_failure(
        self,
        field: FieldSpec,
        resolution: LocatorResolution,
        action: str,
        error: Exception,
        expected: Any,
    ) -> FieldProbeResult:
        return self._finish(FieldProbeResult(
            field_name=field.name,
            kind=field.kind,
            passed=False,
            failure_kind=FailureKind.ACTION_FAILED,
            expected=expected,
            reason=f"Could not {action} '{field.name}': {first_line(error)}",
            resolution=resolution,
        ))

    def _finish(self, result: FieldProbeResult) -> FieldProbeResult:
        if result.passed:
            logger.info(f"✅ Probe passed: {result.field_name}")
        else:
            logger.error(f"❌ Probe failed: {result.describe()}")
        attach_probe_result(result)
        return result


__all__ = [
    "FormFieldProbe",
    "FieldSpec",
    "FieldKind",
    "FieldProbeResult",
    "FailureKind",
    "FAILURE_ERRORS",
    "AssertionMismatchError",
    "AssertionTimeoutError",
    "ActionFailedError",
]
