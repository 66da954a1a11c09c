"""Single health check — configuration, status, and self-rescheduling run loop.

A ``Check`` holds the latest result of one probe. Concrete probes subclass
``Check`` and implement ``probe()``; the shared run contract (never raise,
commit the status once, log failures) lives in ``Check.run``. Timing is
delegated to a composed ``Schedule``.
"""

from __future__ import annotations

import asyncio
import logging
import math
import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from .errors import ConfigurationError, LifecycleError

logger = logging.getLogger(__name__)

DEFAULT_LOG = logging.getLogger("healthcheck")

DEFAULT_OPTIONS: dict[str, Any] = {
    "interval": 30_000,
    "severity": 1,
}

REQUIRED_OPTIONS = (
    "businessImpact",
    "id",
    "interval",
    "name",
    "panicGuide",
    "severity",
    "technicalSummary",
)

ID_PATTERN = re.compile(r"[a-z0-9-]+")


# ── Helpers ──────────────────────────────────────────────────────────────────


def isoformat(value: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with millisecond precision and a ``Z``."""
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_check_options(options: Any) -> None:
    """Validate the options every check shares. Raises ConfigurationError."""
    if not isinstance(options, Mapping):
        raise ConfigurationError("Options must be an object")
    for option in REQUIRED_OPTIONS:
        if options.get(option) is None:
            raise ConfigurationError(f"Missing required option: {option}")
    if not is_non_empty_string(options["businessImpact"]):
        raise ConfigurationError("Invalid option: businessImpact must be a non-empty string")
    if not isinstance(options["id"], str) or not ID_PATTERN.fullmatch(options["id"]):
        raise ConfigurationError("Invalid option: id must be lowercase and alphanumeric with hyphens")
    if not is_non_empty_string(options["name"]):
        raise ConfigurationError("Invalid option: name must be a non-empty string")
    if not is_non_empty_string(options["panicGuide"]):
        raise ConfigurationError("Invalid option: panicGuide must be a non-empty string")
    severity = options["severity"]
    if not isinstance(severity, int) or isinstance(severity, bool) or severity not in (1, 2, 3):
        raise ConfigurationError("Invalid option: severity must be 1, 2, or 3")
    if not is_non_empty_string(options["technicalSummary"]):
        raise ConfigurationError("Invalid option: technicalSummary must be a non-empty string")
    interval = options["interval"]
    if not is_number(interval) or not math.isfinite(interval) or interval <= 0:
        raise ConfigurationError("Invalid option: interval must be a positive number of milliseconds")


# ── Models ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CheckStatus:
    """Latest result of a check. Replaced as a whole, never mutated."""

    ok: bool
    check_output: str
    last_updated: datetime


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single probe attempt."""

    ok: bool
    output: str = ""


# ── Scheduling ───────────────────────────────────────────────────────────────


class Schedule:
    """Fires a coroutine function immediately and then every ``interval_ms``.

    Each run is spawned as its own task, so a slow probe never delays the
    timer and stopping the timer leaves in-flight runs to finish. Runs from
    overlapping intervals are allowed; whichever commits last wins.
    """

    def __init__(
        self,
        job: Callable[[], Awaitable[None]],
        interval_ms: float,
        name: str = "check",
    ) -> None:
        self._job = job
        self.interval_ms = interval_ms
        self.name = name
        self._timer: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()

    @property
    def active(self) -> bool:
        return self._timer is not None

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def start(self) -> None:
        if self._timer is not None:
            raise LifecycleError("The check has already been started")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise LifecycleError(
                "Checks can only be started from inside a running event loop"
            ) from None
        self.fire()
        self._timer = loop.create_task(self._tick(), name=f"healthcheck-timer-{self.name}")
        logger.debug("Scheduled %s every %sms", self.name, self.interval_ms)

    def stop(self) -> None:
        if self._timer is None:
            raise LifecycleError("The check has not been started")
        self._timer.cancel()
        self._timer = None
        logger.debug("Unscheduled %s (%d runs still in flight)", self.name, self.in_flight)

    def fire(self) -> asyncio.Task[None]:
        """Spawn one run now, independent of the timer."""
        task = asyncio.get_running_loop().create_task(
            self._job(), name=f"healthcheck-run-{self.name}",
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait until every run currently in flight has committed."""
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight))

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.interval_ms / 1000)
            self.fire()


# ── Check ────────────────────────────────────────────────────────────────────


class Check:
    """One independently scheduled health check.

    Options use the field names of the health check standard (``id``,
    ``name``, ``severity``, ``businessImpact``, ``technicalSummary``,
    ``panicGuide``) plus ``interval`` in milliseconds and any type-specific
    keys. They are validated, merged with defaults and frozen on construction,
    and the check starts running straight away.

    Subclasses implement ``probe()`` and may extend ``validate()`` and
    ``default_options``.
    """

    check_type: str = "custom"
    default_options: dict[str, Any] = {}

    def __init__(self, options: Mapping[str, Any], log: Any | None = None) -> None:
        self.options: Mapping[str, Any] = MappingProxyType(self.resolve_options(options))
        self.log = log or options.get("log") or DEFAULT_LOG
        self._status = CheckStatus(
            ok=True, check_output="", last_updated=datetime.now(timezone.utc),
        )
        self._schedule = Schedule(self.run, self.interval, name=self.id)

        self.start()

    @classmethod
    def resolve_options(cls, options: Mapping[str, Any]) -> dict[str, Any]:
        """Merge ``options`` over the defaults and validate the result.

        Does not start anything, so it can be used to check a configuration
        ahead of time. Raises ConfigurationError.
        """
        if not isinstance(options, Mapping):
            raise ConfigurationError("Options must be an object")
        merged: dict[str, Any] = {**DEFAULT_OPTIONS, **cls.default_options}
        merged.update(
            {key: value for key, value in options.items() if value is not None and key != "log"}
        )
        validate_check_options(merged)
        cls.validate(merged)
        return merged

    @classmethod
    def validate(cls, options: Mapping[str, Any]) -> None:
        """Validate type-specific options. Raise ConfigurationError if invalid."""

    # -- configuration -------------------------------------------------------

    @property
    def id(self) -> str:
        return self.options["id"]

    @property
    def name(self) -> str:
        return self.options["name"]

    @property
    def severity(self) -> int:
        return self.options["severity"]

    @property
    def business_impact(self) -> str:
        return self.options["businessImpact"]

    @property
    def technical_summary(self) -> str:
        return self.options["technicalSummary"]

    @property
    def panic_guide(self) -> str:
        return self.options["panicGuide"]

    @property
    def interval(self) -> float:
        return self.options["interval"]

    @property
    def timeout(self) -> float:
        """Per-attempt timeout in seconds: probes are bounded by the interval."""
        return self.interval / 1000

    # -- status --------------------------------------------------------------

    @property
    def status(self) -> CheckStatus:
        return self._status

    @property
    def ok(self) -> bool:
        return self._status.ok

    @property
    def check_output(self) -> str:
        return self._status.check_output

    @property
    def last_updated(self) -> datetime:
        return self._status.last_updated

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Run immediately, then every ``interval`` milliseconds."""
        self._schedule.start()

    def stop(self) -> None:
        """Stop scheduling further runs. In-flight runs still commit."""
        self._schedule.stop()

    def is_scheduled(self) -> bool:
        return self._schedule.active

    async def wait_idle(self) -> None:
        """Wait for every run currently in flight to commit its result."""
        await self._schedule.wait_idle()

    # -- running -------------------------------------------------------------

    async def probe(self) -> ProbeResult:
        """Perform the actual check. Raise to report a failure."""
        raise NotImplementedError("The Check class must be extended rather than used directly")

    async def run(self) -> None:
        """Probe once and commit the result. Never raises."""
        try:
            result = await self.probe()
        except Exception as e:
            result = ProbeResult(ok=False, output=str(e) or type(e).__name__)

        self._commit(result)
        if not result.ok:
            self.log.error(f'Health check "{self.name}" failed: {result.output}')

    def _commit(self, result: ProbeResult) -> None:
        now = datetime.now(timezone.utc)
        self._status = CheckStatus(
            ok=result.ok,
            check_output=result.output,
            last_updated=max(now, self._status.last_updated),
        )

    # -- output --------------------------------------------------------------

    def to_snapshot(self) -> dict[str, Any]:
        """The check as a record of the health check output schema."""
        status = self._status
        return {
            "id": self.id,
            "name": self.name,
            "ok": status.ok,
            "severity": self.severity,
            "businessImpact": self.business_impact,
            "technicalSummary": self.technical_summary,
            "panicGuide": self.panic_guide,
            "checkOutput": status.check_output,
            "lastUpdated": isoformat(status.last_updated),
        }

    def describe(self) -> str:
        status = self._status
        state = "OK" if status.ok else "NOT OK"
        return f"{type(self).__name__} [{state}] {self.name} (updated {isoformat(status.last_updated)})"

    def __repr__(self) -> str:
        return self.describe()
