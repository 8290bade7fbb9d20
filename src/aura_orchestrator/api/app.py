"""
aura_orchestrator.api.app

FastAPI app factory for the AURA orchestrator service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Create and dispose shared infrastructure (HTTP client, capability clients, service).
- Render orchestration aborts as a single public error descriptor.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_502_BAD_GATEWAY

from aura_orchestrator import __version__
from aura_orchestrator.api.routers.dev_auth import router as dev_auth_router
from aura_orchestrator.api.routers.health import router as health_router
from aura_orchestrator.api.routers.orchestrator import router as orchestrator_router
from aura_orchestrator.capabilities.clients import (
    CapabilityClients,
    build_clients,
    create_http_client,
)
from aura_orchestrator.observability.logging import configure_logging, get_logger
from aura_orchestrator.observability.middleware import RequestContextMiddleware
from aura_orchestrator.orchestrator.errors import InvalidRequestError, OrchestrationError
from aura_orchestrator.services.orchestration_service import OrchestrationService
from aura_orchestrator.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, clients: CapabilityClients | None = None) -> FastAPI:
    """
    `clients` lets tests inject fakes; by default real provider clients are built on
    startup around one shared `httpx.AsyncClient`.
    """

    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.env != "dev",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        http = None
        active_clients = clients
        if active_clients is None:
            http = create_http_client(settings)
            active_clients = build_clients(settings=settings, http=http)
        app.state.orchestrator = OrchestrationService(settings=settings, clients=active_clients)
        try:
            yield
        finally:
            if http is not None:
                await http.aclose()
            log.info("shutdown")

    app = FastAPI(
        title="AURA Orchestrator",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(orchestrator_router)

    @app.exception_handler(OrchestrationError)
    async def _orchestration_error(_: Request, exc: OrchestrationError) -> JSONResponse:
        status = (
            HTTP_400_BAD_REQUEST if isinstance(exc, InvalidRequestError) else HTTP_502_BAD_GATEWAY
        )
        return JSONResponse(status_code=status, content=exc.to_descriptor())

    return app


# --- Module Notes -----------------------------------------------------------
# This file stays small: app composition lives here; orchestration logic lives in the
# service and orchestrator layers.
