"""CPU usage check for the current process."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import psutil

from ..check import ProbeResult
from .resource import ResourceCheck, format_usage


class CpuCheck(ResourceCheck):
    """Polls the CPU usage of this process.

    The first sample always passes: CPU spikes while a process starts up, and
    psutil has no baseline to compare against until it has sampled once. The
    measured value is still reported.
    """

    check_type = "cpu"
    default_options: dict[str, Any] = {"threshold": 50}

    def __init__(self, options: Mapping[str, Any], log: Any | None = None) -> None:
        self._process = psutil.Process()
        self._has_run = False
        super().__init__(options, log=log)

    def sample(self) -> float:
        return self._process.cpu_percent(interval=None)

    async def probe(self) -> ProbeResult:
        first_run = not self._has_run
        try:
            usage = await self.measure()
        finally:
            self._has_run = True
        return ProbeResult(ok=first_run or usage <= self.threshold, output=format_usage(usage))
