"""Shared base for checks that sample a usage percentage against a threshold."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from ..check import Check, ProbeResult, is_number
from ..errors import ConfigurationError

# Process CPU can exceed 100% on multi-core hosts, but thresholds are capped
# at 100 for every resource check.
MAX_THRESHOLD = 100


class ResourceCheck(Check):
    """Fails when the sampled usage percentage is above ``threshold``."""

    default_options: dict[str, Any] = {"threshold": 75}

    @classmethod
    def validate(cls, options: Mapping[str, Any]) -> None:
        threshold = options.get("threshold")
        if not is_number(threshold) or threshold < 1 or threshold > MAX_THRESHOLD:
            raise ConfigurationError(
                f"Invalid option: threshold must be a number between 1 and {MAX_THRESHOLD}"
            )

    @property
    def threshold(self) -> float:
        return self.options["threshold"]

    def sample(self) -> float:
        """Return the current usage as a percentage. Blocking; runs in a thread."""
        raise NotImplementedError

    async def measure(self) -> float:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.sample)

    async def probe(self) -> ProbeResult:
        usage = await self.measure()
        return ProbeResult(ok=usage <= self.threshold, output=format_usage(usage))


def format_usage(usage: float) -> str:
    return f"{round(usage, 2)}% used"
