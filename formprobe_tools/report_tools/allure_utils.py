"""
================================================================================
Allure Report Utilities
================================================================================

Helpers for attaching probe outcomes to Allure reports.

Features:
- JSON / text / PNG attachment helpers
- Probe result and locator resolution attachments

================================================================================
"""

import json
from typing import Any

import allure
from loguru import logger


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    """
    Attach text content to Allure report.

    Args:
        text: Text to attach
        name: Attachment name
    """
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


def attach_png(png: bytes, name: str = "Screenshot"):
    """Attach raw PNG bytes (e.g. a page screenshot)."""
    allure.attach(
        png,
        name=name,
        attachment_type=allure.attachment_type.PNG
    )


# ================================================================================
# Probe Attachments
# ================================================================================

def attach_resolution(resolution: Any, name: str = "Locator Resolution"):
    """
    Attach the per-candidate trail of a locator resolution.

    Args:
        resolution: LocatorResolution returned by SmartLocator.resolve()
        name: Attachment name
    """
    attach_json(resolution.to_dict(), name=f"🔍 {name}: {resolution.field_name}")


def attach_probe_result(result: Any):
    """
    Attach a FieldProbeResult and, on failure, its reason.

    Args:
        result: FieldProbeResult returned by FormFieldProbe
    """
    status_emoji = "✅" if result.passed else "❌"
    attach_json(result.to_dict(), name=f"{status_emoji} Probe Result: {result.field_name}")
    if not result.passed:
        attach_text(result.describe(), name="❌ Failure Reason")
    logger.debug(f"Attached probe result for '{result.field_name}' to report")


__all__ = [
    "attach_json",
    "attach_text",
    "attach_png",
    "attach_resolution",
    "attach_probe_result",
]
