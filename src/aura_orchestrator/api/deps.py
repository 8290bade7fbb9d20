"""
aura_orchestrator.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and the orchestration service.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from fastapi import Request

from aura_orchestrator.services.orchestration_service import OrchestrationService
from aura_orchestrator.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Settings are attached in `create_app`, so tests can inject their own instance.
    return request.app.state.settings  # type: ignore[attr-defined]


def orchestration_service(request: Request) -> OrchestrationService:
    # Built once at startup (see `aura_orchestrator.api.app.create_app`).
    return request.app.state.orchestrator  # type: ignore[attr-defined]


# --- Module Notes -----------------------------------------------------------
# The service is process-wide and stateless per request, so one instance serves all
# concurrent orchestration passes.
