"""
================================================================================
Smart Locator with Ordered Fallback Candidates
================================================================================

Resolves a logical form field to exactly one DOM element by trying an ordered
list of locator candidates:
    - Robust candidates (visible label text, text markers) are tried first
    - Brittle candidates (id / name / placeholder / value attributes) are only
      diagnostic unless brittle fallback is explicitly allowed
    - Every attempt is recorded and returned as a typed LocatorResolution
    - Fallback usage feeds a locator health report

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from formprobe_tools.common import get_config


def first_line(error: BaseException) -> str:
    """First line of an error message (Playwright errors carry a call log)."""
    lines = str(error).strip().splitlines()
    return lines[0] if lines else type(error).__name__


class ProbeError(Exception):
    """Base class for all field probe failures."""
    pass


class ElementNotFoundError(ProbeError):
    """Raised when no locator candidate matches the field."""
    pass


class RobustLocatorUnavailableError(ProbeError):
    """Raised when only brittle candidates still match the field."""
    pass


class AmbiguousLocatorError(ProbeError):
    """Raised when candidates match more than one element."""
    pass


class ResolutionStatus(str, Enum):
    """Outcome of resolving a field's locator candidates."""
    FOUND = "found"
    ELEMENT_NOT_FOUND = "element_not_found"
    ROBUST_LOCATOR_UNAVAILABLE = "robust_locator_unavailable"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class LocatorCandidate:
    """
    One way of finding a field on the page.

    Attributes:
        name: Short strategy name used in logs and reports (e.g. "label_text")
        selector: Playwright selector, usually prefixed with "xpath=" or "css="
        robust: True when anchored on visible text / label association
        control: Optional selector evaluated relative to the matched marker
            to reach the real input (e.g. "xpath=preceding-sibling::input[1]")
    """
    name: str
    selector: str
    robust: bool = True
    control: Optional[str] = None

    def describe(self) -> str:
        if self.control:
            return f"{self.selector} -> {self.control}"
        return self.selector


@dataclass
class LocatorAttempt:
    """Result of trying a single candidate."""
    candidate: LocatorCandidate
    match_count: int
    error: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.match_count == 1 and self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.candidate.name,
            "selector": self.candidate.describe(),
            "robust": self.candidate.robust,
            "match_count": self.match_count,
            "error": self.error,
        }


@dataclass
class LocatorResolution:
    """
    Typed outcome of SmartLocator.resolve().

    `locator` is set only when `status` is FOUND. For
    ROBUST_LOCATOR_UNAVAILABLE, `candidate` is the brittle candidate that
    still matches.
    """
    field_name: str
    status: ResolutionStatus
    locator: Optional[Locator] = None
    candidate: Optional[LocatorCandidate] = None
    attempts: List[LocatorAttempt] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def found(self) -> bool:
        return self.status is ResolutionStatus.FOUND

    def reason(self) -> str:
        """Human-readable explanation naming the field."""
        tried = ", ".join(a.candidate.name for a in self.attempts) or "none"

        if self.status is ResolutionStatus.FOUND:
            return f"'{self.field_name}' resolved via {self.candidate.name}"
        if self.status is ResolutionStatus.ROBUST_LOCATOR_UNAVAILABLE:
            return (
                f"No robust locator for '{self.field_name}' matched; "
                f"brittle locator '{self.candidate.name}' "
                f"({self.candidate.describe()}) still matches"
            )
        if self.status is ResolutionStatus.AMBIGUOUS:
            counts = ", ".join(
                f"{a.candidate.name}={a.match_count}"
                for a in self.attempts if a.match_count > 1
            )
            return f"Locators for '{self.field_name}' matched more than one element ({counts})"
        return f"The '{self.field_name}' field could not be found (tried: {tried})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field_name,
            "status": self.status.value,
            "strategy": self.candidate.name if self.candidate else None,
            "used_fallback": self.used_fallback,
            "attempts": [a.to_dict() for a in self.attempts],
        }


@dataclass
class LocatorHealth:
    """
    A field that resolved through a fallback candidate.

    Attributes:
        element_name: Human-readable element name
        primary_selector: The preferred selector
        used_fallback: Always True for recorded fallbacks
        fallback_name: Name of fallback used (if any)
        fallback_selector: The fallback selector used (if any)
    """
    element_name: str
    primary_selector: str
    used_fallback: bool = False
    fallback_name: Optional[str] = None
    fallback_selector: Optional[str] = None


class _WaitBudget:
    """
    Wait time shared by every lookup of one resolution.

    Spent time is the larger of the wall clock and the waits that expired,
    so a lookup never gets more than what is left of the total.
    """

    def __init__(self, total_ms: int):
        self.total_ms = total_ms
        self._expired_ms = 0
        self._started = time.monotonic()

    def remaining_ms(self) -> int:
        elapsed_ms = (time.monotonic() - self._started) * 1000
        return max(0, int(self.total_ms - max(elapsed_ms, self._expired_ms)))

    def charge(self, waited_ms: int) -> None:
        self._expired_ms += waited_ms


class SmartLocator:
    """
    Field locator with ordered fallback candidates.

    Candidate Priority Order:
        1. Robust candidates, in declared order (label text, text markers)
        2. Brittle candidates, in declared order (id, name, placeholder, value)

    A brittle match is reported as ROBUST_LOCATOR_UNAVAILABLE rather than
    used, unless `allow_brittle_fallback` is set.

    All lookups of one resolve() call, control relations included, share a
    single wait budget (`timeouts.locate_ms`); a brittle candidate waits at
    most `diagnostic_timeout` of what is left.

    Usage:
        >>> smart = SmartLocator(page)
        >>> resolution = await smart.resolve("First Name", candidates)
        >>> if resolution.found:
        ...     await resolution.locator.press_sequentially("Jane Doe")
    """

    def __init__(
        self,
        page: Page,
        timeout: Optional[int] = None,
        diagnostic_timeout: Optional[int] = None,
        allow_brittle_fallback: Optional[bool] = None,
    ):
        """
        Initialize SmartLocator with Playwright page.

        Args:
            page: Playwright Page object
            timeout: Total wait for one resolution, shared by all lookups (ms)
            diagnostic_timeout: Cap on the wait for each brittle candidate (ms)
            allow_brittle_fallback: Use a brittle match instead of failing
        """
        self.page = page
        self.timeout = int(timeout if timeout is not None else get_config("timeouts.locate_ms", 5000))
        self.diagnostic_timeout = int(
            diagnostic_timeout if diagnostic_timeout is not None
            else get_config("timeouts.diagnostic_ms", 1000)
        )
        if allow_brittle_fallback is None:
            allow_brittle_fallback = get_config("locators.allow_brittle_fallback", False)
        self.allow_brittle_fallback = bool(allow_brittle_fallback)

        self._fallback_used: Dict[str, LocatorHealth] = {}

    @staticmethod
    def order_candidates(candidates: Sequence[LocatorCandidate]) -> List[LocatorCandidate]:
        """Robust candidates first, each group keeping its declared order."""
        robust = [c for c in candidates if c.robust]
        brittle = [c for c in candidates if not c.robust]
        return robust + brittle

    async def resolve(
        self,
        field_name: str,
        candidates: Sequence[LocatorCandidate],
        timeout: Optional[int] = None,
    ) -> LocatorResolution:
        """
        Resolve a field to exactly one element.

        Args:
            field_name: Logical field name used in diagnostics
            candidates: Locator candidates for the field
            timeout: Override for the total resolution wait (ms)

        Returns:
            LocatorResolution; never raises for a missing element

        Raises:
            ValueError: When no candidates are given
        """
        ordered = self.order_candidates(candidates)
        if not ordered:
            raise ValueError(f"No locator candidates defined for field: {field_name}")

        budget = _WaitBudget(self.timeout if timeout is None else timeout)
        primary = ordered[0]
        attempts: List[LocatorAttempt] = []

        for candidate in ordered:
            cap = None if candidate.robust else self.diagnostic_timeout
            attempt, locator = await self._try_candidate(candidate, budget, cap)
            attempts.append(attempt)

            if locator is None:
                continue

            if not candidate.robust and not self.allow_brittle_fallback:
                resolution = LocatorResolution(
                    field_name=field_name,
                    status=ResolutionStatus.ROBUST_LOCATOR_UNAVAILABLE,
                    candidate=candidate,
                    attempts=attempts,
                )
                logger.error(f"❌ {resolution.reason()}")
                return resolution

            used_fallback = candidate is not primary
            if used_fallback:
                self._record_fallback(field_name, primary, candidate)
                logger.warning(
                    f"⚠️ Element '{field_name}' used fallback: "
                    f"{candidate.name} -> {candidate.describe()}"
                )
            else:
                logger.debug(f"✅ Element '{field_name}' found: {candidate.describe()}")

            return LocatorResolution(
                field_name=field_name,
                status=ResolutionStatus.FOUND,
                locator=locator,
                candidate=candidate,
                attempts=attempts,
                used_fallback=used_fallback,
            )

        status = (
            ResolutionStatus.AMBIGUOUS
            if any(a.match_count > 1 for a in attempts)
            else ResolutionStatus.ELEMENT_NOT_FOUND
        )
        resolution = LocatorResolution(field_name=field_name, status=status, attempts=attempts)
        logger.error(
            f"❌ {resolution.reason()}:\n"
            + "\n".join(
                f"  - {a.candidate.name}: {a.candidate.describe()} -> "
                f"{a.error or f'{a.match_count} matches'}"
                for a in attempts
            )
        )
        return resolution

    async def _try_candidate(
        self,
        candidate: LocatorCandidate,
        budget: _WaitBudget,
        cap: Optional[int] = None,
    ) -> Tuple[LocatorAttempt, Optional[Locator]]:
        locator = self.page.locator(candidate.selector)
        count, error = await self._count_matches(locator, budget, cap)
        if count != 1 or error:
            if count > 1:
                error = f"matched {count} elements"
            return LocatorAttempt(candidate, count, error), None

        if candidate.control:
            control = locator.locator(candidate.control)
            count, error = await self._count_matches(control, budget, cap)
            if count != 1 or error:
                if count > 1:
                    error = f"control relation matched {count} elements"
                else:
                    error = f"control relation did not match: {error}"
                return LocatorAttempt(candidate, count, error), None
            locator = control

        return LocatorAttempt(candidate, 1), locator

    async def _count_matches(
        self,
        locator: Locator,
        budget: _WaitBudget,
        cap: Optional[int] = None,
    ) -> Tuple[int, Optional[str]]:
        """Count matches now; wait only while nothing is attached and time is left."""
        try:
            count = await locator.count()
            if count:
                return count, None

            timeout = budget.remaining_ms()
            if cap is not None:
                timeout = min(timeout, cap)
            # timeout=0 would disable Playwright's timeout
            if timeout <= 0:
                return 0, "no match before the wait budget ran out"

            # "attached" rather than "visible": styled radios often hide the input.
            try:
                await locator.first.wait_for(state="attached", timeout=timeout)
            except PlaywrightTimeoutError:
                budget.charge(timeout)
                return 0, f"no match within {timeout}ms"
            return await locator.count(), None
        except PlaywrightError as e:
            return 0, first_line(e)[:120]

    def _record_fallback(
        self,
        field_name: str,
        primary: LocatorCandidate,
        used: LocatorCandidate,
    ) -> None:
        self._fallback_used[field_name] = LocatorHealth(
            element_name=field_name,
            primary_selector=primary.describe(),
            used_fallback=True,
            fallback_name=used.name,
            fallback_selector=used.describe(),
        )

    def get_health_report(self) -> str:
        """
        Generate locator health report.

        Lists fields that needed a fallback candidate (maintenance candidates).
        """
        if not self._fallback_used:
            return "✅ All elements used primary locators. No maintenance needed."

        report_lines = [
            "⚠️ Locator Health Report - Fallbacks Used:",
            "",
            "The following elements used fallback locators.",
            "Consider updating the primary selectors:",
            "",
        ]

        for element_name, health in self._fallback_used.items():
            report_lines.extend([
                f"  [{element_name}]",
                f"    Failed primary: {health.primary_selector}",
                f"    Used: {health.fallback_name} -> {health.fallback_selector}",
                "",
            ])

        return "\n".join(report_lines)


__all__ = [
    "SmartLocator",
    "LocatorCandidate",
    "LocatorAttempt",
    "LocatorResolution",
    "ResolutionStatus",
    "LocatorHealth",
    "ProbeError",
    "ElementNotFoundError",
    "RobustLocatorUnavailableError",
    "AmbiguousLocatorError",
]
