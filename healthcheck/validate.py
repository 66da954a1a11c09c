"""Validator for health check output records.

This is the authoritative output schema: it applies to snapshots produced by
``Check.to_snapshot`` and to any externally supplied check record.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from .check import ID_PATTERN, is_non_empty_string
from .errors import SchemaError

ISO_8601_PATTERN = re.compile(
    r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(\.[0-9]{3})?(Z|[+-][0-9]{2}:[0-9]{2})",
    re.IGNORECASE,
)

ALLOWED_PROPERTIES = frozenset({
    "id",
    "name",
    "ok",
    "severity",
    "businessImpact",
    "technicalSummary",
    "panicGuide",
    "checkOutput",
    "lastUpdated",
})

REQUIRED_PROPERTIES = (
    "id",
    "name",
    "severity",
    "businessImpact",
    "technicalSummary",
    "panicGuide",
)


def _is_valid_id(value: Any) -> bool:
    return is_non_empty_string(value) and bool(ID_PATTERN.fullmatch(value))


def _is_valid_severity(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value in (1, 2, 3)


def _is_valid_iso_date(value: Any) -> bool:
    return is_non_empty_string(value) and bool(ISO_8601_PATTERN.fullmatch(value))


# property -> (predicate, error message), in output order
PROPERTY_VALIDATORS: dict[str, tuple[Callable[[Any], bool], str]] = {
    "id": (_is_valid_id, "Health check id must be lowercase and alphanumeric with hyphens"),
    "name": (is_non_empty_string, "Health check name must be a non-empty string"),
    "ok": (lambda v: isinstance(v, bool), "Health check ok must be a boolean"),
    "severity": (_is_valid_severity, "Health check severity must be a number between 1 and 3"),
    "businessImpact": (is_non_empty_string, "Health check businessImpact must be a non-empty string"),
    "technicalSummary": (is_non_empty_string, "Health check technicalSummary must be a non-empty string"),
    "panicGuide": (is_non_empty_string, "Health check panicGuide must be a non-empty string"),
    "checkOutput": (lambda v: isinstance(v, str), "Health check checkOutput must be a string"),
    "lastUpdated": (_is_valid_iso_date, "Health check lastUpdated must be a valid ISO 8601 date and time"),
}


def validate_health_check(check: Any) -> None:
    """Assert that a health check record is valid. Raises SchemaError."""
    if not isinstance(check, dict):
        raise SchemaError("Health check must be an object")
    for prop in REQUIRED_PROPERTIES:
        if check.get(prop) is None:
            raise SchemaError(f"Missing required health check property: {prop}")
    for prop in check:
        if prop not in ALLOWED_PROPERTIES:
            raise SchemaError(f'Health checks cannot have a "{prop}" property')
    for prop, (is_valid, message) in PROPERTY_VALIDATORS.items():
        if prop in check and not is_valid(check[prop]):
            raise SchemaError(message)


def is_valid_health_check(check: Any) -> bool:
    try:
        validate_health_check(check)
    except SchemaError:
        return False
    return True
