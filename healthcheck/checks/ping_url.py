"""HTTP ping check — passes when the URL answers with a 2xx status."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from ..check import Check, ProbeResult, is_non_empty_string
from ..errors import ConfigurationError, ProbeFailure


class PingUrlCheck(Check):
    """Pings ``url`` with ``method`` (default HEAD) and optional ``headers``.

    ``url`` may be a string or a zero-argument callable returning one, which
    is resolved on every run. Redirects are followed. The request times out
    after ``interval`` milliseconds.
    """

    check_type = "ping-url"
    default_options: dict[str, Any] = {"method": "HEAD"}

    @classmethod
    def validate(cls, options: Mapping[str, Any]) -> None:
        url = options.get("url")
        if not callable(url) and not is_non_empty_string(url):
            raise ConfigurationError("Invalid option: url must be a non-empty string or a function")
        headers = options.get("headers")
        if headers is not None and not isinstance(headers, Mapping):
            raise ConfigurationError("Invalid option: headers must be an object")
        if not is_non_empty_string(options.get("method")):
            raise ConfigurationError("Invalid option: method must be a non-empty string")

    @property
    def url(self) -> str:
        url = self.options["url"]
        return url() if callable(url) else url

    async def probe(self) -> ProbeResult:
        url = self.url
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                resp = await client.request(
                    self.options["method"].upper(),
                    url,
                    headers=dict(self.options.get("headers") or {}),
                )
        except httpx.TimeoutException:
            raise ProbeFailure(f"Request to {url} timed out ({self.interval}ms)") from None
        except httpx.HTTPError as e:
            raise ProbeFailure(f"Request to {url} failed: {type(e).__name__}: {e}") from e

        if not resp.is_success:
            raise ProbeFailure(f"Expected a 2xx response from {url}, got {resp.status_code}")
        return ProbeResult(ok=True)
