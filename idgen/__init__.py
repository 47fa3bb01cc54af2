"""Snowflake-style unique ID generation."""

from idgen.generator import DEFAULT_EPOCH, IdGenerator
from idgen.layout import BitLayout, DecodedId, MAX_ID, max_for_bits

__all__ = [
    "DEFAULT_EPOCH",
    "IdGenerator",
    "BitLayout",
    "DecodedId",
    "MAX_ID",
    "max_for_bits",
]
