"""Memory usage check for the current process."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import psutil

from .resource import ResourceCheck


class MemoryCheck(ResourceCheck):
    """Polls resident memory of this process as a share of total system memory."""

    check_type = "memory"

    def __init__(self, options: Mapping[str, Any], log: Any | None = None) -> None:
        self._process = psutil.Process()
        super().__init__(options, log=log)

    def sample(self) -> float:
        rss = self._process.memory_info().rss
        return rss / psutil.virtual_memory().total * 100
