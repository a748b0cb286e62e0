"""Tests for core logging and the log bus."""

from __future__ import annotations

import pytest

from e2estate.core.log_bus import LogRecord, get_log_bus
from e2estate.core.logging import (
    VerbosityLevel,
    get_logger,
    get_verbosity,
    set_colors,
    set_verbosity,
)


class TestVerbosityLevel:
    """Test VerbosityLevel enum."""

    def test_verbosity_ordering(self):
        assert VerbosityLevel.QUIET < VerbosityLevel.NORMAL
        assert VerbosityLevel.NORMAL < VerbosityLevel.VERBOSE
        assert VerbosityLevel.VERBOSE < VerbosityLevel.DEBUG

    def test_set_by_name(self):
        set_verbosity("Debug")
        assert get_verbosity() == VerbosityLevel.DEBUG

        set_verbosity(0)
        assert get_verbosity() == VerbosityLevel.QUIET

    def test_unknown_name_rejected(self):
        with pytest.raises(ValueError):
            set_verbosity("chatty")


def test_log_bus_no_subscribers_no_crash() -> None:
    get_logger("logbus_test").info("hello")


def test_log_bus_receives_plain_record() -> None:
    collected: list[LogRecord] = []
    get_log_bus().subscribe(collected.append)

    get_logger("logbus_test").info("hello")

    assert collected == [
        LogRecord(level_name="INFO", plain="[info] hello", logger_name="logbus_test")
    ]


def test_records_below_verbosity_are_not_published() -> None:
    set_verbosity(VerbosityLevel.QUIET)
    with get_log_bus().capture() as records:
        log = get_logger("filter_test")
        log.info("hidden")
        log.verbose("hidden")
        log.warning("shown")
        log.error("shown too")

    assert [r.level_name for r in records] == ["WARNING", "ERROR"]


def test_capture_filters_by_level() -> None:
    set_verbosity(VerbosityLevel.DEBUG)
    with get_log_bus().capture("WARNING") as records:
        log = get_logger("capture_test")
        log.debug("d")
        log.warning("w")

    assert [r.plain for r in records] == ["[warning] w"]


def test_failing_subscriber_is_suppressed(capsys) -> None:
    def _boom(rec: LogRecord) -> None:
        raise RuntimeError("subscriber failure")

    get_log_bus().subscribe(_boom)
    get_logger("boom_test").warning("still logged")

    err = capsys.readouterr().err
    assert "LogBus subscriber raised; suppressed." in err
    assert "[warning] still logged" in err


def test_logs_go_to_stderr_not_stdout(capsys) -> None:
    set_colors(False)
    get_logger("stream_test").info("to stderr")
    set_colors(True)

    out = capsys.readouterr()
    assert out.out == ""
    assert "[info] to stderr" in out.err
