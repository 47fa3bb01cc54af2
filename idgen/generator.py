"""Snowflake identifier generator for a single node."""

import threading

from core.errors import ClockRegressionError, InvalidConfigurationError, TimestampOverflowError
from idgen.layout import BitLayout
from internal.logging import get_logger
from utils.timestamp import now_millis

# 2020-03-23T03:10:40Z. Fixed per deployment, never change it once IDs are out.
DEFAULT_EPOCH = 1584933040000


class IdGenerator:
    """Issues unique, roughly time-ordered 64-bit IDs for one node identity.

    Build one instance per ``(datacenter_id, worker_id)`` and share it; two
    instances with the same identity in one fleet can issue duplicates.
    """

    def __init__(self, datacenter_id, worker_id, epoch=DEFAULT_EPOCH, layout=None, clock=None):
        self.layout = layout or BitLayout()
        self.datacenter_id = self._check_id("datacenter_id", datacenter_id, self.layout.max_datacenter_id)
        self.worker_id = self._check_id("worker_id", worker_id, self.layout.max_worker_id)
        if not isinstance(epoch, int) or isinstance(epoch, bool) or epoch < 0:
            raise InvalidConfigurationError(f"epoch must be a non-negative integer, got {epoch!r}",
                                            field="epoch", bound=0)
        self.epoch = epoch
        self._clock = clock or now_millis
        self._lock = threading.Lock()
        self._log = get_logger()
        self.sequence = 0
        self.last_timestamp = -1
        self.issued = 0
        self._log.info("id generator ready", datacenter_id=datacenter_id, worker_id=worker_id,
                       epoch=epoch, **self.layout.to_dict(), **self.layout.capacity())

    @staticmethod
    def _check_id(field, value, bound):
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= bound:
            raise InvalidConfigurationError(
                f"{field} can't be greater than {bound} or less than 0, got {value!r}",
                field=field, bound=bound)
        return value

    def next_id(self):
        """Return a new identifier.

        Raises:
            ClockRegressionError: the clock reads earlier than the last issued ID.
            TimestampOverflowError: the clock is before the epoch or past the
                last millisecond the timestamp field can hold.
        """
        with self._lock:
            return self._next_id()

    def next_ids(self, count):
        """Return ``count`` identifiers issued back to back under one lock hold."""
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")
        with self._lock:
            return [self._next_id() for _ in range(count)]

    def _next_id(self):
        timestamp = self.now()

        if timestamp < self.last_timestamp:
            regression = self.last_timestamp - timestamp
            self._log.error("clock moved backwards", regression_ms=regression,
                            last_timestamp=self.last_timestamp)
            raise ClockRegressionError(
                f"Clock moved backwards. Refusing to generate id for {regression} milliseconds",
                regression_ms=regression)

        if timestamp == self.last_timestamp:
            sequence = (self.sequence + 1) & self.layout.max_sequence
            if sequence == 0:
                timestamp = self._til_next_millis(self.last_timestamp)
        else:
            sequence = 0

        elapsed = timestamp - self.epoch
        if elapsed < 0 or elapsed > self.layout.max_timestamp:
            raise TimestampOverflowError(
                f"timestamp {timestamp} does not fit {self.layout.timestamp_bits} bits after epoch {self.epoch}",
                elapsed_ms=elapsed)

        self.sequence = sequence
        self.last_timestamp = timestamp
        self.issued += 1
        return self.layout.compose(elapsed, self.datacenter_id, self.worker_id, sequence)

    def _til_next_millis(self, last_timestamp):
        self._log.debug("sequence exhausted, waiting for next millisecond", last_timestamp=last_timestamp)
        timestamp = self.now()
        while timestamp <= last_timestamp:
            timestamp = self.now()
        return timestamp

    def now(self):
        """Current reading of the generator's clock, in milliseconds."""
        return int(self._clock())

    def decode(self, identifier):
        return self.layout.decode(identifier, self.epoch)

    def stats(self):
        with self._lock:
            return {
                "datacenter_id": self.datacenter_id,
                "worker_id": self.worker_id,
                "epoch": self.epoch,
                "last_timestamp": self.last_timestamp,
                "sequence": self.sequence,
                "issued": self.issued,
            }
