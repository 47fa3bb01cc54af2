"""Bit layout of a 64-bit Snowflake identifier.

From most to least significant bit::

    | 1 sign (always 0) | timestamp | datacenter | worker | sequence |

The canonical layout is 41 + 5 + 5 + 12 = 63 bits: 4096 identifiers per
millisecond per node, 1024 nodes, and roughly 69 years of timestamps.
"""

from core.errors import InvalidConfigurationError
from utils.timestamp import format_timestamp

MAX_PAYLOAD_BITS = 63
MAX_ID = (1 << MAX_PAYLOAD_BITS) - 1


def max_for_bits(bits):
    """Largest value that fits in ``bits`` bits."""
    return -1 ^ (-1 << bits)


class DecodedId:
    __slots__ = ("timestamp", "datacenter_id", "worker_id", "sequence")

    def __init__(self, timestamp, datacenter_id, worker_id, sequence):
        self.timestamp = timestamp
        self.datacenter_id = datacenter_id
        self.worker_id = worker_id
        self.sequence = sequence

    def __eq__(self, other):
        if not isinstance(other, DecodedId):
            return NotImplemented
        return (self.timestamp, self.datacenter_id, self.worker_id, self.sequence) == (
            other.timestamp, other.datacenter_id, other.worker_id, other.sequence)

    def __repr__(self):
        return (f"DecodedId(timestamp={self.timestamp}, datacenter_id={self.datacenter_id}, "
                f"worker_id={self.worker_id}, sequence={self.sequence})")

    def to_dict(self):
        return {
            "timestamp": self.timestamp,
            "issued_at": format_timestamp(self.timestamp),
            "datacenter_id": self.datacenter_id,
            "worker_id": self.worker_id,
            "sequence": self.sequence,
        }


class BitLayout:
    """Field widths plus the shifts and masks derived from them."""

    __slots__ = ("timestamp_bits", "datacenter_bits", "worker_bits", "sequence_bits",
                 "worker_shift", "datacenter_shift", "timestamp_shift",
                 "max_timestamp", "max_datacenter_id", "max_worker_id", "max_sequence")

    def __init__(self, timestamp_bits=41, datacenter_bits=5, worker_bits=5, sequence_bits=12):
        for field, bits in (("timestamp_bits", timestamp_bits), ("datacenter_bits", datacenter_bits),
                            ("worker_bits", worker_bits), ("sequence_bits", sequence_bits)):
            if not isinstance(bits, int) or isinstance(bits, bool) or bits < 1:
                raise InvalidConfigurationError(
                    f"{field} must be a positive integer, got {bits!r}", field=field, bound=1)

        total = timestamp_bits + datacenter_bits + worker_bits + sequence_bits
        if total > MAX_PAYLOAD_BITS:
            raise InvalidConfigurationError(
                f"bit layout uses {total} bits, at most {MAX_PAYLOAD_BITS} are available",
                field="layout", bound=MAX_PAYLOAD_BITS)

        self.timestamp_bits = timestamp_bits
        self.datacenter_bits = datacenter_bits
        self.worker_bits = worker_bits
        self.sequence_bits = sequence_bits

        self.worker_shift = sequence_bits
        self.datacenter_shift = sequence_bits + worker_bits
        self.timestamp_shift = sequence_bits + worker_bits + datacenter_bits

        self.max_timestamp = max_for_bits(timestamp_bits)
        self.max_datacenter_id = max_for_bits(datacenter_bits)
        self.max_worker_id = max_for_bits(worker_bits)
        self.max_sequence = max_for_bits(sequence_bits)

    @property
    def total_bits(self):
        return self.timestamp_shift + self.timestamp_bits

    @property
    def ids_per_millisecond(self):
        return self.max_sequence + 1

    @property
    def node_capacity(self):
        return (self.max_datacenter_id + 1) * (self.max_worker_id + 1)

    def capacity(self):
        """Throughput and node ceiling this layout allows."""
        return {
            "total_bits": self.total_bits,
            "ids_per_millisecond": self.ids_per_millisecond,
            "node_capacity": self.node_capacity,
        }

    def compose(self, elapsed, datacenter_id, worker_id, sequence):
        """Pack fields into one identifier. Callers guarantee each field is in range."""
        return ((elapsed << self.timestamp_shift)
                | (datacenter_id << self.datacenter_shift)
                | (worker_id << self.worker_shift)
                | sequence)

    def decode(self, identifier, epoch=0):
        """Split an identifier back into its fields.

        Args:
            identifier (int): An identifier built with this layout.
            epoch (int): Epoch in milliseconds the identifier was built against.

        Returns:
            DecodedId: absolute timestamp in milliseconds plus node and sequence.

        Raises:
            ValueError: if the identifier is not a non-negative 63-bit integer.
        """
        if not isinstance(identifier, int) or isinstance(identifier, bool):
            raise ValueError(f"identifier must be an integer, got {type(identifier).__name__}")
        if identifier < 0 or identifier > MAX_ID:
            raise ValueError(f"identifier {identifier} is outside [0, {MAX_ID}]")

        return DecodedId(
            timestamp=((identifier >> self.timestamp_shift) & self.max_timestamp) + epoch,
            datacenter_id=(identifier >> self.datacenter_shift) & self.max_datacenter_id,
            worker_id=(identifier >> self.worker_shift) & self.max_worker_id,
            sequence=identifier & self.max_sequence,
        )

    def to_dict(self):
        return {
            "timestamp_bits": self.timestamp_bits,
            "datacenter_bits": self.datacenter_bits,
            "worker_bits": self.worker_bits,
            "sequence_bits": self.sequence_bits,
        }
