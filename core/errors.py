"""Custom errors with tracking IDs."""

import uuid

from utils.timestamp import format_timestamp


class IdGeneratorError(Exception):
    """Base error with unique ID and timestamp for tracking."""

    def __init__(self, message, context=None, cause=None):
        super().__init__(message)
        self.error_id = uuid.uuid4().hex
        self.timestamp = format_timestamp()
        self.context = context or {}
        self.cause = cause

    def __str__(self):
        return f"[{self.error_id}] {super().__str__()}"

    def to_dict(self):
        return {
            "error_id": self.error_id,
            "type": type(self).__name__,
            "msg": self.args[0] if self.args else "",
            "timestamp": self.timestamp,
            "context": self.context,
        }


class InvalidConfigurationError(IdGeneratorError):
    """Node identity or bit layout outside its allowed range."""

    def __init__(self, message, field=None, bound=None, **kwargs):
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        if bound is not None:
            context["bound"] = bound
        super().__init__(message, context=context, **kwargs)
        self.field = field
        self.bound = bound


class ClockRegressionError(IdGeneratorError):
    """The clock moved behind the last issued timestamp."""

    def __init__(self, message, regression_ms=None, **kwargs):
        context = kwargs.pop("context", {})
        if regression_ms is not None:
            context["regression_ms"] = regression_ms
        super().__init__(message, context=context, **kwargs)
        self.regression_ms = regression_ms


class TimestampOverflowError(IdGeneratorError):
    """Time since epoch does not fit the timestamp field."""

    def __init__(self, message, elapsed_ms=None, **kwargs):
        context = kwargs.pop("context", {})
        if elapsed_ms is not None:
            context["elapsed_ms"] = elapsed_ms
        super().__init__(message, context=context, **kwargs)
        self.elapsed_ms = elapsed_ms


class HealthCheckError(IdGeneratorError):
    """Health check failures."""

    def __init__(self, message, component=None, **kwargs):
        context = kwargs.pop("context", {})
        if component:
            context["component"] = component
        super().__init__(message, context=context, **kwargs)
