"""Health check aggregator — scheduled probes with FT-style JSON/boolean output."""

from .check import Check, CheckStatus, ProbeResult, Schedule
from .errors import (
    ConfigurationError,
    HealthCheckError,
    LifecycleError,
    MalformedResponse,
    ProbeFailure,
    SchemaError,
)
from .health_check import (
    CHECK_TYPES,
    HealthCheck,
    register_check_type,
    validate_check_config,
)
from .validate import validate_health_check
