"""
Repository-level pytest configuration.

  - Initializes loguru once per test session from `config/config.yaml`
  - Exposes the repository root to tests
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from formprobe_tools.common import init_logger


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _init_logging() -> Generator[None, None, None]:
    """Configure the logger before any test runs."""
    init_logger()
    yield
