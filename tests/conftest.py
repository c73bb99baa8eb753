# tests/conftest.py

"""Shared pytest fixtures for the price_alert test suite."""

from collections.abc import Generator
from unittest.mock import patch

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def no_delays() -> Generator[None, None, None]:
    """Zero every configured wait so retries and throttles run instantly."""
    with patch.multiple(
        Settings,
        REQUEST_DELAY=0.0,
        RETRY_BASE_DELAY=0.0,
        SETTLE_DELAY=0.0,
    ):
        yield
