"""Check file loader — reads check configurations from YAML.

Expected layout::

    checks:
      - type: ping-url
        id: example-home
        name: Example home page
        url: https://www.example.com/
        ...

String values may reference environment variables as ``${NAME}``, which is
how secrets such as ``graphiteKey`` are kept out of the file.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def expand_env(value: Any) -> Any:
    """Recursively replace ``${NAME}`` references with environment values."""
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, list):
        return [expand_env(v) for v in value]
    if isinstance(value, dict):
        return {k: expand_env(v) for k, v in value.items()}
    return value


def parse_checks(raw: Any, source: str = "<data>") -> list[dict[str, Any]]:
    """Pull the list of check configurations out of parsed YAML."""
    if not isinstance(raw, dict) or not isinstance(raw.get("checks"), list):
        raise ConfigurationError(f"{source}: expected a top-level 'checks' list")

    checks: list[dict[str, Any]] = []
    for index, entry in enumerate(raw["checks"]):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"{source}: check #{index + 1} must be a mapping")
        checks.append(expand_env(entry))
    return checks


def load_check_file(path: Path | str) -> list[dict[str, Any]]:
    """Read a YAML check file and return its check configurations."""
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read check file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}") from e

    checks = parse_checks(raw, source=str(path))
    logger.info("Loaded %d check definitions from %s", len(checks), path)
    return checks
