"""
================================================================================
Root Pytest Configuration
================================================================================

Registers project-wide markers and tags tests by directory.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests against the live form"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )
    config.addinivalue_line(
        "markers", "unit: Offline tests against a fake page"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "form: Tests related to the automation practice form"
    )


def pytest_collection_modifyitems(config, items):
    """Add domain markers based on the test's directory."""
    for item in items:
        parts = item.path.parts

        if "ui_testing" in parts:
            item.add_marker(pytest.mark.ui)

        if "unit" in parts:
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "CloudQA Form Probe Test Suite",
        "=" * 60,
        "",
    ]
