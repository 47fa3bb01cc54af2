"""Health reporting for the ID service.

A report is the worst status over all registered checks, except that a
failing non-critical check only degrades it. Reports are cached for ``ttl``
seconds so frequent polling does not re-run every check.
"""

import asyncio
import time
from enum import Enum

from core.errors import HealthCheckError
from utils.timestamp import format_timestamp

class Status(Enum):
    OK = "healthy"
    DEGRADED = "degraded"
    FAIL = "unhealthy"

class CheckResult:
    __slots__ = ("name", "status", "msg")

    def __init__(self, name, status, msg=""):
        self.name, self.status, self.msg = name, status, msg

    def to_dict(self):
        return {"name": self.name, "status": self.status.value, "msg": self.msg}

class HealthReport:
    __slots__ = ("status", "checks", "uptime", "timestamp")

    def __init__(self, status, checks, uptime=0):
        self.status = status
        self.checks = checks
        self.uptime = uptime
        self.timestamp = format_timestamp()

    def to_dict(self):
        return {"status": self.status.value, "timestamp": self.timestamp, "uptime": round(self.uptime, 1),
                "checks": [check.to_dict() for check in self.checks]}


def _overall(results):
    status = Status.OK
    for result, critical in results:
        if result.status == Status.OK:
            continue
        if result.status == Status.FAIL and critical:
            return Status.FAIL
        status = Status.DEGRADED
    return status


class HealthChecker:
    def __init__(self, ttl=1.0, timeout=5.0):
        self._checks = {}
        self._ttl = ttl
        self._timeout = timeout
        self._started = time.monotonic()
        self._cached = None
        self._cached_at = 0.0

    def register(self, name, check_fn, critical=True):
        if name in self._checks:
            raise HealthCheckError(f"check {name!r} already registered", component=name)
        self._checks[name] = (check_fn, critical)

    async def _run(self, name, check_fn):
        try:
            return await asyncio.wait_for(check_fn(), timeout=self._timeout)
        except asyncio.TimeoutError:
            return CheckResult(name, Status.FAIL, "timeout")
        except Exception as exc:
            return CheckResult(name, Status.FAIL, str(exc))

    async def check(self):
        now = time.monotonic()
        if self._cached and now - self._cached_at < self._ttl:
            return self._cached

        results = [(await self._run(name, check_fn), critical)
                   for name, (check_fn, critical) in self._checks.items()]
        self._cached = HealthReport(_overall(results), [result for result, _ in results], now - self._started)
        self._cached_at = now
        return self._cached


# Checks
async def check_event_loop():
    await asyncio.sleep(0)
    return CheckResult("loop", Status.OK)

def create_clock_check(generator, clock=None):
    """Fails while the wall clock reads behind the generator's last timestamp."""
    clock = clock or generator.now

    async def check():
        behind = generator.stats()["last_timestamp"] - clock()
        if behind > 0:
            return CheckResult("clock", Status.FAIL, f"behind {behind}ms")
        return CheckResult("clock", Status.OK)
    return check

def create_generator_check(generator, headroom_ms=365 * 24 * 3600 * 1000):
    """Degrades when the timestamp field is within ``headroom_ms`` of running out."""
    async def check():
        remaining = generator.layout.max_timestamp - (generator.now() - generator.epoch)
        if remaining < 0:
            return CheckResult("generator", Status.FAIL, "timestamp space exhausted")
        if remaining < headroom_ms:
            return CheckResult("generator", Status.DEGRADED, f"{remaining}ms left")
        return CheckResult("generator", Status.OK, f"dc{generator.datacenter_id}/w{generator.worker_id}")
    return check
