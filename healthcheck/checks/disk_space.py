"""Disk space usage check."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import psutil

from ..check import is_non_empty_string
from ..errors import ConfigurationError
from .resource import ResourceCheck


class DiskSpaceCheck(ResourceCheck):
    """Polls how full the filesystem holding ``path`` (default ``/``) is."""

    check_type = "disk-space"
    default_options: dict[str, Any] = {"threshold": 75, "path": "/"}

    @classmethod
    def validate(cls, options: Mapping[str, Any]) -> None:
        super().validate(options)
        if not is_non_empty_string(options.get("path")):
            raise ConfigurationError("Invalid option: path must be a non-empty string")

    def sample(self) -> float:
        return psutil.disk_usage(self.options["path"]).percent
