from internal.logging import get_logger, LogLevel, StructuredLogger
from core.errors import (
    IdGeneratorError,
    InvalidConfigurationError,
    ClockRegressionError,
    TimestampOverflowError,
)

__all__ = [
    "get_logger",
    "LogLevel",
    "StructuredLogger",
    "IdGeneratorError",
    "InvalidConfigurationError",
    "ClockRegressionError",
    "TimestampOverflowError",
]
