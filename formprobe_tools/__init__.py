"""
================================================================================
Form Probe Tools
================================================================================

Infrastructure utilities shared by the form probe test suites.

Modules:
    - common: Configuration loading and logging setup
    - report_tools: Allure attachment helpers

Example:
    from formprobe_tools.common import get_config, init_logger

    init_logger()
    url = get_config("form.url")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
