"""Shared fixtures: isolated settings and loguru sinks per test."""

from __future__ import annotations

import os

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def clean_env():
    """Clean ledgerlens environment variables and cached settings around each test."""
    original_env = os.environ.copy()

    for var in [k for k in os.environ if k.startswith("LEDGERLENS_")]:
        del os.environ[var]

    import ledgerlens.config.settings as settings_module

    settings_module._settings = None

    yield

    settings_module._settings = None
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def reset_loguru():
    """Remove sinks added during a test (they may point at captured streams)."""
    yield
    logger.remove()
