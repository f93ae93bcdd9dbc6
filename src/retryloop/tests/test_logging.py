"""Tests for structured logging and the runner's log events."""

from __future__ import annotations

import io
from datetime import timedelta

import orjson
import pytest

from retryloop import STOP_RETRYING, RetryDecision, RetryError, RetryRunner
from retryloop.foundation.config import LoggingSettings
from retryloop.runtime.observability import (
    BoundLogger,
    ConsoleRenderer,
    JsonRenderer,
    NoOpRenderer,
    configure_from_settings,
    configure_logging,
    get_logger,
    log_context,
)
from retryloop.tests.fakes import Flaky, RecordingSleeper


def _lines(buf: io.StringIO) -> list[dict[str, object]]:
    return [orjson.loads(line) for line in buf.getvalue().splitlines()]


def test_json_renderer_includes_bound_context() -> None:
    buf = io.StringIO()
    configure_logging("json", "DEBUG", output=buf)

    get_logger("svc", region="eu").bind(run="r1").info("hello", count=2)

    (entry,) = _lines(buf)
    assert entry["event"] == "hello"
    assert entry["level"] == "info"
    assert entry["logger"] == "svc"
    assert entry["region"] == "eu"
    assert entry["run"] == "r1"
    assert entry["count"] == 2
    assert "timestamp" in entry


def test_level_filtering() -> None:
    buf = io.StringIO()
    configure_logging("json", "WARNING", output=buf)
    log = get_logger()
    log.info("dropped")
    log.warning("kept")
    assert [e["event"] for e in _lines(buf)] == ["kept"]


def test_unbind_and_scope() -> None:
    buf = io.StringIO()
    log = BoundLogger(context={"a": 1, "b": 2}, _renderer=JsonRenderer(output=buf))
    with log_context(request="abc"):
        log.unbind("b").info("inside")
    log.info("outside")

    inside, outside = _lines(buf)
    assert inside["a"] == 1
    assert inside["request"] == "abc"
    assert "b" not in inside
    assert "request" not in outside


def test_console_renderer_plain_output() -> None:
    buf = io.StringIO()
    log = BoundLogger(_renderer=ConsoleRenderer(output=buf, colors=False, show_timestamp=False))
    log.warning("attempt failed", delay=0.11, error="IOError()")
    assert buf.getvalue().strip() == "[warning] attempt failed delay=0.110 error=IOError()"


def test_noop_renderer_is_silent(capsys: pytest.CaptureFixture[str]) -> None:
    BoundLogger(_renderer=NoOpRenderer()).error("quiet")
    assert capsys.readouterr() == ("", "")


def test_unknown_format_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown format"):
        configure_logging("xml")


def test_configure_from_settings() -> None:
    renderer = configure_from_settings(LoggingSettings(format="none", level="ERROR"))
    assert isinstance(renderer, NoOpRenderer)


@pytest.mark.asyncio
async def test_runner_logs_retry_lifecycle(sleeper: RecordingSleeper) -> None:
    buf = io.StringIO()
    configure_logging("json", "DEBUG", output=buf)

    decisions = iter([RetryDecision(retry_after=timedelta(milliseconds=100)), STOP_RETRYING])
    with pytest.raises(RetryError):
        await RetryRunner(sleeper=sleeper).run(Flaky(IOError("a"), IOError("b")), lambda e, i: next(decisions), name="sync-job")

    entries = _lines(buf)
    assert {e["run"] for e in entries} == {"sync-job"}
    assert [e["event"] for e in entries] == [
        "attempt started",
        "attempt failed, retrying",
        "attempt started",
        "retries exhausted",
    ]
    assert entries[1]["delay"] == pytest.approx(0.1)
    assert entries[3]["attempts"] == 2


def test_console_renderer_prints_traceback() -> None:
    buf = io.StringIO()
    log = BoundLogger(_renderer=ConsoleRenderer(output=buf, colors=False, show_timestamp=False))
    try:
        raise LookupError("policy bug")
    except LookupError:
        log.exception("decision policy raised", attempt=0)

    header, *trace = buf.getvalue().strip().splitlines()
    assert header == "[error] decision policy raised attempt=0"
    assert trace[0] == "Traceback (most recent call last):"
    assert trace[-1] == "LookupError: policy bug"


@pytest.mark.asyncio
async def test_runner_logs_policy_fault_with_traceback(sleeper: RecordingSleeper) -> None:
    buf = io.StringIO()
    configure_logging("json", "DEBUG", output=buf)

    def broken(error: Exception, attempt: int) -> RetryDecision:
        raise LookupError("policy bug")

    with pytest.raises(LookupError):
        await RetryRunner(sleeper=sleeper).run(Flaky(IOError("a")), broken, name="sync-job")

    entries = _lines(buf)
    assert [e["event"] for e in entries] == ["attempt started", "decision policy raised"]
    fault = entries[-1]
    assert fault["level"] == "error"
    assert fault["error"] == "OSError('a')"
    assert "Traceback (most recent call last):" in fault["exc_info"]
    assert "LookupError: policy bug" in fault["exc_info"]
