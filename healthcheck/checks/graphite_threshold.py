"""Graphite threshold check — compares the latest datapoint of a metric to a threshold."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from ..check import Check, ProbeResult, is_non_empty_string, is_number
from ..errors import ConfigurationError, MalformedResponse, ProbeFailure

DIRECTIONS = ("above", "below")

MALFORMED_MESSAGE = (
    "Please check that the URL is in the correct format, as it is not "
    "returning properly formatted JSON for this healthcheck."
)


class GraphiteThresholdCheck(Check):
    """Fetches ``url`` from the Graphite render API and reads one datapoint.

    With ``direction="above"`` the check fails when the reading is above
    ``threshold``; with ``direction="below"`` it fails when the reading is
    below it. The API key is sent in the ``key`` header.
    """

    check_type = "graphite-threshold"
    default_options: dict[str, Any] = {"method": "GET"}

    @classmethod
    def validate(cls, options: Mapping[str, Any]) -> None:
        url = options.get("url")
        if not callable(url) and not is_non_empty_string(url):
            raise ConfigurationError("Invalid option: url must be a non-empty string")
        if not is_number(options.get("threshold")):
            raise ConfigurationError("You must set a numerical threshold")
        if not is_non_empty_string(options.get("graphiteKey")):
            raise ConfigurationError(
                "You must set up your Graphite key in your environment variables."
            )
        if options.get("direction") not in DIRECTIONS:
            raise ConfigurationError(
                'You must set whether you want to check "above" or "below" a threshold.'
            )
        if not is_non_empty_string(options.get("method")):
            raise ConfigurationError("Invalid option: method must be a non-empty string")

    @property
    def threshold(self) -> float:
        return self.options["threshold"]

    @property
    def direction(self) -> str:
        return self.options["direction"]

    @property
    def url(self) -> str:
        url = self.options["url"]
        return url() if callable(url) else url

    def is_ok(self, reading: float) -> bool:
        if self.direction == "below":
            return reading >= self.threshold
        return reading <= self.threshold

    async def probe(self) -> ProbeResult:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.request(
                    self.options["method"].upper(),
                    self.url,
                    headers={"key": self.options["graphiteKey"]},
                )
        except httpx.TimeoutException:
            raise ProbeFailure(f"Graphite request timed out ({self.interval}ms)") from None
        except httpx.HTTPError as e:
            raise ProbeFailure(f"Graphite request failed: {type(e).__name__}: {e}") from e

        if not resp.is_success:
            raise ProbeFailure(f"Expected a 2xx response from Graphite, got {resp.status_code}")

        reading = read_datapoint(resp)
        if self.is_ok(reading):
            return ProbeResult(ok=True, output=f"Current reading: {reading}")
        return ProbeResult(
            ok=False,
            output=f"Current reading {reading} is {self.direction} the threshold of {self.threshold}",
        )


def read_datapoint(resp: httpx.Response) -> float:
    """Pull the first value out of a ``[{"datapoints": [[value, ts], ...]}]`` body."""
    try:
        reading = resp.json()[0]["datapoints"][0][0]
    except (ValueError, LookupError, TypeError):
        raise MalformedResponse(MALFORMED_MESSAGE) from None
    if not is_number(reading):
        raise MalformedResponse(MALFORMED_MESSAGE)
    return reading
