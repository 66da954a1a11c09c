"""Health check set — builds checks from configuration and aggregates their output.

Check configurations are resolved to a concrete class through ``CHECK_TYPES``,
a static table keyed by the ``type`` discriminator. New probe types are added
with ``register_check_type``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from .check import DEFAULT_LOG, Check
from .checks import (
    CpuCheck,
    DiskSpaceCheck,
    GraphiteThresholdCheck,
    MemoryCheck,
    PingUrlCheck,
    TcpIpCheck,
)
from .errors import ConfigurationError, SchemaError
from .validate import validate_health_check

logger = logging.getLogger(__name__)

# Called as factory(options, log=sink) and must return a started Check.
CheckFactory = Callable[..., Check]

CHECK_TYPES: dict[str, CheckFactory] = {
    "cpu": CpuCheck,
    "disk-space": DiskSpaceCheck,
    "graphite-threshold": GraphiteThresholdCheck,
    "memory": MemoryCheck,
    "ping-url": PingUrlCheck,
    "tcp-ip": TcpIpCheck,
}


def register_check_type(name: str, factory: CheckFactory, replace: bool = False) -> None:
    """Map a ``type`` discriminator to a check class or factory."""
    if name in CHECK_TYPES and not replace:
        raise ConfigurationError(f"Check type already registered: {name}")
    CHECK_TYPES[name] = factory


def resolve_check_type(config: Mapping[str, Any]) -> CheckFactory:
    """Look up the factory for a configuration's ``type``."""
    if not isinstance(config, Mapping):
        raise ConfigurationError("Check configuration must be an object")
    check_type = config.get("type")
    factory = CHECK_TYPES.get(check_type) if isinstance(check_type, str) else None
    if factory is None:
        raise ConfigurationError(f"Invalid check type: {check_type}")
    return factory


def validate_check_config(config: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a configuration without constructing (and so starting) a check.

    Returns the options merged with their defaults. Factories that are not
    ``Check`` subclasses can only be validated by calling them, so their
    configuration is returned unchecked.
    """
    factory = resolve_check_type(config)
    if isinstance(factory, type) and issubclass(factory, Check):
        return factory.resolve_options(config)
    return dict(config)


class HealthCheck:
    """An ordered set of running health checks.

    ``checks`` may mix plain configuration mappings (resolved by their
    ``type``) and already-constructed ``Check`` instances, which are adopted
    as-is apart from having their log sink replaced by the shared one.
    Output order always matches input order.
    """

    def __init__(self, checks: Iterable[Check | Mapping[str, Any]] = (), log: Any | None = None) -> None:
        self.log = log or DEFAULT_LOG
        self.check_objects: list[Check] = []
        try:
            for entry in checks:
                self.check_objects.append(self._build(entry))
        except Exception:
            # checks built so far are already scheduled
            self.stop()
            raise
        logger.info("Health check set started with %d checks", len(self.check_objects))

    def _build(self, entry: Check | Mapping[str, Any]) -> Check:
        if isinstance(entry, Check):
            entry.log = self.log
            try:
                validate_health_check(entry.to_snapshot())
            except SchemaError:
                # not yet in check_objects, so stop() would miss it
                if entry.is_scheduled():
                    entry.stop()
                raise
            return entry
        factory = resolve_check_type(entry)
        return factory(entry, log=self.log)

    @classmethod
    def from_file(cls, path: Path | str, log: Any | None = None) -> HealthCheck:
        """Build a health check set from a YAML check file."""
        from .loader import load_check_file

        return cls(checks=load_check_file(path), log=log)

    # -- lifecycle -----------------------------------------------------------

    def stop(self) -> None:
        """Stop every check that is still scheduled."""
        for check in self.check_objects:
            if check.is_scheduled():
                check.stop()

    async def wait_idle(self) -> None:
        """Wait for the in-flight runs of every check to commit."""
        await asyncio.gather(*(check.wait_idle() for check in self.check_objects))

    # -- queries -------------------------------------------------------------

    def get(self, check_id: str) -> Check | None:
        return next((c for c in self.check_objects if c.id == check_id), None)

    def to_json(self) -> list[dict[str, Any]]:
        """Snapshots of every check, in configuration order."""
        return [check.to_snapshot() for check in self.check_objects]

    def is_ok(self) -> bool:
        """True when every severity 1 check is passing."""
        return all(
            snapshot["ok"] for snapshot in self.to_json() if snapshot["severity"] == 1
        )

    def checks(self) -> Callable[[], Awaitable[list[dict[str, Any]]]]:
        """A zero-argument coroutine function resolving to the check snapshots."""

        async def _checks() -> list[dict[str, Any]]:
            return self.to_json()

        return _checks

    def gtg(self) -> Callable[[], Awaitable[bool]]:
        """A zero-argument coroutine function resolving to the good-to-go flag.

        Only severity 1 checks count: failing severity 2 and 3 checks never
        stop the system from being good to go.
        """

        async def _gtg() -> bool:
            return self.is_ok()

        return _gtg

    good_to_go = gtg

    def describe(self) -> str:
        lines = [f"{type(self).__name__} {{"]
        lines.extend(f"  {check.describe()}" for check in self.check_objects)
        lines.append("}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return self.describe()

    def __iter__(self) -> Iterator[Check]:
        return iter(self.check_objects)

    def __len__(self) -> int:
        return len(self.check_objects)
