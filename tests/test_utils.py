"""Unit tests for utility modules."""

import json
import sys

from utils.timestamp import format_timestamp, now_millis
from utils import crash


class TestTimestamp:
    """Tests for timestamp utilities."""

    def test_format_timestamp_iso_format(self):
        """Timestamp is ISO 8601 format."""
        ts = format_timestamp()
        assert "T" in ts
        assert ts.endswith("Z")

    def test_format_timestamp_has_milliseconds(self):
        """Timestamp includes exactly three fractional digits."""
        ts = format_timestamp(1_600_000_000_123)
        assert ts == "2020-09-13T12:26:40.123Z"

    def test_format_timestamp_pads_milliseconds(self):
        """Small millisecond values are zero padded."""
        assert format_timestamp(1_600_000_000_005).endswith(".005Z")

    def test_now_millis_returns_int(self):
        """now_millis returns integer."""
        assert isinstance(now_millis(), int)

    def test_now_millis_reasonable_value(self):
        """now_millis returns reasonable timestamp."""
        # after 2020-01-01 in milliseconds
        assert now_millis() > 1577836800000


class TestCrashHandler:
    """Tests for crash handling utilities."""

    def test_configure_sets_path(self):
        """configure() sets crash log path."""
        original = crash._crash_log
        crash.configure("/tmp/test_crash.log")
        assert crash._crash_log == "/tmp/test_crash.log"
        crash.configure(original)

    def test_install_crash_handler(self, monkeypatch):
        """install_crash_handler sets sys.excepthook."""
        monkeypatch.setattr(sys, "excepthook", sys.excepthook)
        crash.install_crash_handler()
        assert sys.excepthook == crash.log_crash

    def test_log_crash_writes_record(self, tmp_path, capsys):
        """log_crash appends a JSON record to the crash file."""
        original = crash._crash_log
        crash.configure(str(tmp_path / "logs" / "crash.log"))
        try:
            try:
                raise RuntimeError("boom")
            except RuntimeError as exc:
                crash.log_crash(type(exc), exc, exc.__traceback__)
        finally:
            crash.configure(original)

        record = json.loads((tmp_path / "logs" / "crash.log").read_text().splitlines()[0])
        assert record["type"] == "RuntimeError"
        assert record["msg"] == "boom"
        assert "Traceback" in record["traceback"]
        assert "CRASH" in capsys.readouterr().err

    def test_log_crash_reuses_error_id(self, tmp_path):
        """Tracked errors keep their id in the crash record."""
        from core.errors import ClockRegressionError

        original = crash._crash_log
        crash.configure(str(tmp_path / "crash.log"))
        exc = ClockRegressionError("clock moved backwards", regression_ms=3)
        try:
            crash.log_crash(type(exc), exc, None)
        finally:
            crash.configure(original)

        record = json.loads((tmp_path / "crash.log").read_text())
        assert record["id"] == exc.error_id
        assert record["context"] == {"regression_ms": 3}

    def test_async_handler_records_loop_error(self, tmp_path):
        """The event loop handler writes a crash record and logs it."""
        import io
        from internal.logging import LogLevel, StructuredLogger

        stream = io.StringIO()
        logger = StructuredLogger(LogLevel.DEBUG, stream)
        original = crash._crash_log
        crash.configure(str(tmp_path / "crash.log"))
        try:
            handler = crash.create_async_handler(logger)
            handler(None, {"message": "Task exception was never retrieved",
                           "exception": ValueError("lost")})
            handler(None, {"message": "Unclosed transport"})
        finally:
            crash.configure(original)

        lines = (tmp_path / "crash.log").read_text().splitlines()
        assert [json.loads(line)["type"] for line in lines] == ["ValueError", "RuntimeError"]
        assert json.loads(lines[1])["msg"] == "Unclosed transport"
        assert json.loads(stream.getvalue().splitlines()[0])["err"] == "lost"
