"""
aura_orchestrator.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`): the orchestration service has been built.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", response_model=None)
async def readyz(request: Request) -> dict[str, str] | JSONResponse:
    # Ready once startup has wired clients and compiled the graphs.
    if getattr(request.app.state, "orchestrator", None) is None:
        return JSONResponse(status_code=HTTP_503_SERVICE_UNAVAILABLE, content={"status": "starting"})
    return {"status": "ready"}
