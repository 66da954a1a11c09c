"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator, Mapping
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from healthcheck.check import Check, ProbeResult
from healthcheck.health_check import CHECK_TYPES


class StaticCheck(Check):
    """Check whose next result is set by the test.

    ``passing`` and ``output`` options seed the result; ``gate`` (an
    asyncio.Event) holds a run open until it is set.
    """

    check_type = "static"

    def __init__(self, options: Mapping[str, Any], log: Any | None = None) -> None:
        self.next_result: ProbeResult | Exception = ProbeResult(
            ok=options.get("passing", True), output=options.get("output", ""),
        )
        self.gate: asyncio.Event | None = None
        self.runs = 0
        super().__init__(options, log=log)

    async def probe(self) -> ProbeResult:
        self.runs += 1
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.next_result, Exception):
            raise self.next_result
        return self.next_result


@pytest.fixture
def log() -> MagicMock:
    """A log sink that records calls to ``error``."""
    return MagicMock(spec=["error", "warning", "info"])


@pytest.fixture
def check_options() -> dict[str, Any]:
    """Valid options for any check type. Long interval: the timer never fires."""
    return {
        "businessImpact": "mock business impact",
        "id": "mock-id",
        "interval": 60_000,
        "name": "mock name",
        "panicGuide": "mock panic guide",
        "severity": 2,
        "technicalSummary": "mock technical summary",
    }


@pytest.fixture
def static_type(monkeypatch: pytest.MonkeyPatch) -> type[StaticCheck]:
    """Register StaticCheck as the ``static`` check type for one test."""
    monkeypatch.setitem(CHECK_TYPES, "static", StaticCheck)
    return StaticCheck


class MockHttp:
    """Routes every httpx.AsyncClient request to ``handler``."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(200)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


@pytest.fixture
def mock_http(monkeypatch: pytest.MonkeyPatch) -> Iterator[MockHttp]:
    """Patch httpx.AsyncClient to use an in-memory transport."""
    mock = MockHttp()
    real_client = httpx.AsyncClient

    def client_factory(*args: Any, **kwargs: Any) -> httpx.AsyncClient:
        kwargs["transport"] = httpx.MockTransport(mock._handle)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)
    yield mock
