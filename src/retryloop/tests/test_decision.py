"""Tests for retry decisions, built-in policies and their settings."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from retryloop.foundation.config import clear_settings_cache, get_settings
from retryloop.runtime.retry import STOP_RETRYING, RetryDecision, default_backoff, retry_on


def test_stop_retrying_constant() -> None:
    assert STOP_RETRYING.should_retry is False
    assert RetryDecision.stop() is STOP_RETRYING


def test_retry_after_accepts_seconds() -> None:
    decision = RetryDecision(should_retry=True, retry_after=0.25)
    assert decision.retry_after == timedelta(milliseconds=250)


def test_retry_after_accepts_timedelta() -> None:
    decision = RetryDecision(retry_after=timedelta(seconds=3))
    assert decision.should_retry is True
    assert decision.retry_after == timedelta(seconds=3)


def test_decision_is_immutable() -> None:
    decision = RetryDecision.after(1.0)
    with pytest.raises(ValidationError):
        decision.should_retry = False  # type: ignore[misc]


def test_unknown_fields_rejected() -> None:
    with pytest.raises(ValidationError):
        RetryDecision(should_retry=True, retry_after=1.0, attempts=3)  # type: ignore[call-arg]


def test_zero_and_negative_delays_are_accepted() -> None:
    assert RetryDecision(retry_after=0).retry_after == timedelta(0)
    assert RetryDecision(retry_after=-1).retry_after == timedelta(seconds=-1)


def test_after_caps_at_max_delay() -> None:
    assert RetryDecision.after(60).retry_after == timedelta(seconds=10)
    assert RetryDecision.after(timedelta(minutes=5)).retry_after == timedelta(seconds=10)
    assert RetryDecision.after(2).retry_after == timedelta(seconds=2)


def test_default_backoff_retries_until_max() -> None:
    error = ConnectionError("reset")
    first = default_backoff(error, 0)
    assert first.should_retry
    assert first.retry_after == timedelta(milliseconds=50)
    assert default_backoff(error, 9).should_retry
    assert default_backoff(error, 10) is STOP_RETRYING


def test_default_backoff_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRYLOOP_RETRY_MAX_RETRIES", "2")
    monkeypatch.setenv("RETRYLOOP_RETRY_DEFAULT_DELAY", "0.5")
    clear_settings_cache()

    assert get_settings().retry.max_retries == 2
    assert default_backoff(ValueError(), 1).retry_after == timedelta(milliseconds=500)
    assert default_backoff(ValueError(), 2) is STOP_RETRYING


def test_max_delay_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRYLOOP_RETRY_MAX_DELAY", "1.5")
    clear_settings_cache()
    assert RetryDecision.after(30).retry_after == timedelta(seconds=1.5)


def test_invalid_settings_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRYLOOP_RETRY_MAX_RETRIES", "-1")
    clear_settings_cache()
    with pytest.raises(ValidationError):
        get_settings()


@pytest.mark.parametrize("var", ["RETRYLOOP_RETRY_MAX_DELAY", "RETRYLOOP_RETRY_DEFAULT_DELAY"])
def test_delay_beyond_timedelta_range_rejected(monkeypatch: pytest.MonkeyPatch, var: str) -> None:
    monkeypatch.setenv(var, "1e15")
    clear_settings_cache()
    with pytest.raises(ValidationError):
        get_settings()


def test_largest_delay_setting_is_usable(monkeypatch: pytest.MonkeyPatch) -> None:
    limit = timedelta.max // timedelta(seconds=1)
    monkeypatch.setenv("RETRYLOOP_RETRY_MAX_DELAY", str(limit))
    clear_settings_cache()
    assert get_settings().retry.max_delay_td == timedelta(seconds=limit)
    assert RetryDecision.after(timedelta.max).retry_after == timedelta(seconds=limit)


def test_logging_settings_normalized(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRYLOOP_LOG_LEVEL", "debug")
    monkeypatch.setenv("RETRYLOOP_LOG_FORMAT", "JSON")
    clear_settings_cache()
    settings = get_settings().logging
    assert settings.level == "DEBUG"
    assert settings.format == "json"


class TestRetryOn:
    def test_retries_matching_types(self) -> None:
        decide = retry_on(ConnectionError, TimeoutError, max_retries=3, delay=0.1)
        assert decide(ConnectionError(), 0).retry_after == timedelta(milliseconds=100)
        assert decide(TimeoutError(), 2).should_retry

    def test_stops_on_other_types(self) -> None:
        decide = retry_on(ConnectionError, max_retries=3, delay=0.1)
        assert decide(ValueError("bad input"), 0) is STOP_RETRYING

    def test_stops_at_max_retries(self) -> None:
        decide = retry_on(ConnectionError, max_retries=2, delay=0.1)
        assert decide(ConnectionError(), 2) is STOP_RETRYING

    def test_no_types_means_any_exception(self) -> None:
        decide = retry_on(max_retries=1, delay=0)
        assert decide(KeyError("x"), 0).should_retry
