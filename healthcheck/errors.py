"""Error taxonomy for the health check package."""

from __future__ import annotations


class HealthCheckError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(HealthCheckError):
    """Raised at construction time when check options are invalid."""


class LifecycleError(HealthCheckError):
    """Raised when a check is started or stopped in the wrong state."""


class SchemaError(HealthCheckError):
    """Raised when a health check record does not match the output schema."""


class ProbeFailure(HealthCheckError):
    """Raised inside a probe when the thing being checked is unhealthy.

    Never escapes ``Check.run``: it is folded into the check status.
    """


class MalformedResponse(ProbeFailure):
    """The probe reached its target but could not make sense of the reply."""
