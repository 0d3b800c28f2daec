"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based form probing framework.

Components:
    - smart_locator: Ordered robust/brittle locator candidates with typed results
    - field_probe: Text and selectable field probes plus the failure taxonomy
    - wait_helpers: Bounded polling waits
    - page_base: Base page object
    - browser_manager: Browser lifecycle management

Author: Automation Team
License: MIT
================================================================================
"""

from .smart_locator import (
    ElementNotFoundError,
    LocatorCandidate,
    LocatorResolution,
    ProbeError,
    ResolutionStatus,
    RobustLocatorUnavailableError,
    SmartLocator,
)
from .field_probe import (
    AssertionMismatchError,
    AssertionTimeoutError,
    FailureKind,
    FieldKind,
    FieldProbeResult,
    FieldSpec,
    FormFieldProbe,
)
from .page_base import BasePage
from .browser_manager import BrowserManager

__all__ = [
    "SmartLocator",
    "LocatorCandidate",
    "LocatorResolution",
    "ResolutionStatus",
    "ProbeError",
    "ElementNotFoundError",
    "RobustLocatorUnavailableError",
    "AssertionMismatchError",
    "AssertionTimeoutError",
    "FormFieldProbe",
    "FieldSpec",
    "FieldKind",
    "FieldProbeResult",
    "FailureKind",
    "BasePage",
    "BrowserManager",
]
