"""
Repository-level pytest configuration.

Provides safe defaults so the suites run from a fresh clone:
  - Test account placeholders (no secrets embedded)
  - Logger initialization shared by all suites

Real credentials (BrowserStack, test accounts, app URLs) come from the
environment in CI/CD.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from autotest_tools.common import init_logger


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _safe_env_defaults() -> Generator[None, None, None]:
    """
    Set placeholder environment defaults if not already provided by the user/CI.

    BrowserStack credentials are deliberately left unset so live tests skip.
    """
    defaults = {
        "TEST_EMAIL": "customer@mealmommy.com",
        "TEST_PASSWORD": "password123",
        "MOBILE_PLATFORM": "android",
        "MOBILE_DEVICE_INDEX": "0",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    init_logger()

    yield
