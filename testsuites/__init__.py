"""
Test suites package.

Holds the offline unit tests (`testsuites/unit`) and the live-form UI
probes (`testsuites/ui_testing`). Kept importable so `run_tests.py` and
the unit tests can reach the UI framework and page objects directly.
"""
