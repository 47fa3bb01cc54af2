"""Crash records for exceptions nothing else handled.

Each record is one JSON line in the crash file. Tracked errors keep their
``error_id`` as the crash id, so the crash file lines up with the API's error
bodies and the structured log.
"""

import json
import os
import sys
import traceback
import uuid

from utils.timestamp import format_timestamp

# Overridden by configure() from LoggingConfig.crash_file
_crash_log = "logs/crash.log"


def configure(crash_file):
    """Set crash log file path from config."""
    global _crash_log
    _crash_log = crash_file


def _crash_record(exc, tb=None):
    return {
        "id": getattr(exc, "error_id", None) or uuid.uuid4().hex,
        "timestamp": format_timestamp(),
        "type": type(exc).__name__,
        "msg": str(exc),
        "traceback": "".join(traceback.format_exception(type(exc), exc, tb)),
        "context": getattr(exc, "context", None) or None,
    }


def _append(record):
    """Append one JSON crash record. Never raises."""
    try:
        log_dir = os.path.dirname(_crash_log)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        with open(_crash_log, "a") as f:
            f.write(json.dumps({k: v for k, v in record.items() if v is not None}, default=str) + "\n")
    except Exception:
        pass


def log_crash(exc_type, exc_value, exc_tb):
    """sys.excepthook: banner on stderr plus a crash record."""
    record = _crash_record(exc_value, exc_tb)
    rule = "=" * 60
    sys.stderr.write(f"\n{rule}\nCRASH [{record['id']}] {record['timestamp']}\n{rule}\n")
    sys.stderr.write(f"{record['type']}: {record['msg']}\n{'-' * 60}\n{record['traceback']}{rule}\n\n")
    _append(record)


def create_async_handler(logger=None):
    """Event loop exception handler writing crash records."""
    def handler(loop, context):
        exc = context.get("exception")
        if exc is None:
            # loop reported a problem without an exception object
            exc = RuntimeError(context.get("message", "event loop error"))
        record = _crash_record(exc, exc.__traceback__)
        if logger:
            logger.error("Async exception", error=exc, crash_id=record["id"])
        _append(record)
    return handler


def install_crash_handler():
    """Install global sync exception handler."""
    sys.excepthook = log_crash
