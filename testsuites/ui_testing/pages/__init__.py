"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for the probed form.

Each page class encapsulates:
    - The field table (locator candidates per field)
    - Navigation
    - Field probing

Author: Automation Team
License: MIT
================================================================================
"""

from .automation_practice_page import AutomationPracticePage, FIELD_TABLE

__all__ = [
    "AutomationPracticePage",
    "FIELD_TABLE",
]
