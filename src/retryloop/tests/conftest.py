"""Shared fixtures for retry loop tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from retryloop.foundation.config import clear_settings_cache
from retryloop.runtime.observability import configure_logging
from retryloop.tests.fakes import RecordingSleeper, SignallingSleeper


@pytest.fixture(autouse=True)
def quiet_logging() -> Iterator[None]:
    """Silence log output and reset cached settings around each test."""
    configure_logging("none")
    clear_settings_cache()
    yield
    clear_settings_cache()
    configure_logging("none")


@pytest.fixture
def sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture
def signalling_sleeper() -> SignallingSleeper:
    return SignallingSleeper()
