"""FastAPI application hosting a HealthCheck."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI

from healthcheck.api.models import About
from healthcheck.api.routes import health_router
from healthcheck.config import settings
from healthcheck.health_check import HealthCheck
from healthcheck.loader import load_check_file

logger = logging.getLogger(__name__)


def create_app(
    checks: Iterable[Mapping[str, Any]] | None = None,
    checks_file: Path | str | None = None,
    wait_for_first_run: bool = False,
) -> FastAPI:
    """Create the health check application.

    Checks are built inside the lifespan, on the server's event loop. When
    ``checks`` is not given they are loaded from ``checks_file`` (default:
    ``settings.checks_file``). With ``wait_for_first_run`` startup blocks
    until every check has reported once.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if checks is not None:
            configs = list(checks)
        else:
            configs = load_check_file(checks_file or settings.checks_file)

        health_check = HealthCheck(checks=configs, log=logging.getLogger("healthcheck.checks"))
        app.state.health_check = health_check
        if wait_for_first_run:
            await health_check.wait_idle()
        logger.info("Serving %d health checks", len(health_check))

        try:
            yield
        finally:
            health_check.stop()
            logger.info("Health checks stopped")

    app = FastAPI(
        title=settings.system_name,
        description=settings.system_description,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.about = About(
        systemCode=settings.system_code,
        name=settings.system_name,
        description=settings.system_description,
    )
    app.include_router(health_router)
    return app
