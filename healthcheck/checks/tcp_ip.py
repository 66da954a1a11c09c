"""TCP/IP check — passes when a connection to host:port can be opened."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from ..check import Check, ProbeResult, is_non_empty_string
from ..errors import ConfigurationError, ProbeFailure

logger = logging.getLogger(__name__)


class TcpIpCheck(Check):
    """Opens a TCP connection to ``host``:``port`` (default 80), then closes it.

    The connection attempt is bounded by ``interval`` milliseconds.
    """

    check_type = "tcp-ip"
    default_options: dict[str, Any] = {"port": 80}

    @classmethod
    def validate(cls, options: Mapping[str, Any]) -> None:
        if not is_non_empty_string(options.get("host")):
            raise ConfigurationError("Invalid option: host must be a non-empty string")
        port = options.get("port")
        if not isinstance(port, int) or isinstance(port, bool) or not 1 <= port <= 65535:
            raise ConfigurationError("Invalid option: port must be a number between 1 and 65535")

    async def probe(self) -> ProbeResult:
        host, port = self.options["host"], self.options["port"]
        try:
            _reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise ProbeFailure("timed out") from None
        except OSError as e:
            raise ProbeFailure(str(e) or f"Could not connect to {host}:{port}") from e

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            # the connect already succeeded; a reset on close does not fail the check
            logger.debug("Error closing connection to %s:%s: %s", host, port, e)
        return ProbeResult(ok=True)
