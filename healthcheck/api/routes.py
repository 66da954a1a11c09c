"""Health endpoints backed by a running HealthCheck.

Endpoints:
  GET /__health  — full check output plus the aggregate ``ok`` flag
  GET /__gtg     — plain-text good-to-go, 200 or 503
  GET /__about   — system identity
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from healthcheck.api.models import About, HealthResponse

logger = logging.getLogger(__name__)

health_router = APIRouter()

HEALTH_SCHEMA_VERSION = 1

NO_CACHE = {"Cache-Control": "no-cache, no-store, must-revalidate"}


@health_router.get("/__health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """All check snapshots in configuration order."""
    health_check = request.app.state.health_check
    checks = await health_check.checks()()
    ok = await health_check.gtg()()
    return HealthResponse(
        schemaVersion=HEALTH_SCHEMA_VERSION,
        checks=checks,
        ok=ok,
        **request.app.state.about.model_dump(),
    )


@health_router.get("/__gtg", response_class=PlainTextResponse)
async def good_to_go(request: Request) -> PlainTextResponse:
    """200 when every severity 1 check passes, 503 otherwise."""
    ok = await request.app.state.health_check.gtg()()
    if not ok:
        logger.warning("Good-to-go failing")
        return PlainTextResponse("Service Unavailable", status_code=503, headers=NO_CACHE)
    return PlainTextResponse("OK", headers=NO_CACHE)


@health_router.get("/__about", response_model=About)
def about(request: Request) -> About:
    return request.app.state.about
