"""
aura_orchestrator.services.orchestration_service

Orchestration lifecycle service (the public entrypoint of the core).

Responsibilities:
- Build the orchestration graphs once from injected capability clients.
- Run one pass per request, streaming node updates to track stage transitions.
- Map aborts to `OrchestrationError` and successes to `OrchestrationOutcome`.
- Expose capability and status introspection.
"""

from __future__ import annotations

import time
from typing import Any

import structlog
from pydantic import ValidationError

from aura_orchestrator.capabilities.clients import CapabilityClients
from aura_orchestrator.observability.logging import get_logger
from aura_orchestrator.orchestrator.actions import ActionRegistry, build_default_registry
from aura_orchestrator.orchestrator.catalog import Capabilities, get_capabilities
from aura_orchestrator.orchestrator.errors import InvalidRequestError, OrchestrationError
from aura_orchestrator.orchestrator.executor import ActionExecutor
from aura_orchestrator.orchestrator.graph import build_graph, build_multimodal_graph
from aura_orchestrator.orchestrator.intent import IntentClassifier
from aura_orchestrator.orchestrator.models import (
    OrchestrationOutcome,
    OrchestrationRequest,
    OrchestrationStage,
)
from aura_orchestrator.orchestrator.nodes import ANALYSIS_ORDER, OrchestratorDeps
from aura_orchestrator.orchestrator.reducers import apply_update
from aura_orchestrator.orchestrator.state import OrchestrationState
from aura_orchestrator.orchestrator.synthesizer import ResponseSynthesizer
from aura_orchestrator.settings import Settings

log = get_logger(__name__)


class OrchestrationService:
    def __init__(
        self,
        *,
        settings: Settings,
        clients: CapabilityClients,
        registry: ActionRegistry | None = None,
    ) -> None:
        self._settings = settings
        self._clients = clients
        self._registry = registry or build_default_registry()
        self._started = time.monotonic()

        deps = OrchestratorDeps(
            clients=clients,
            classifier=IntentClassifier(client=clients.fast, action_ids=self._registry.ids()),
            executor=ActionExecutor(
                registry=self._registry,
                concurrency=settings.action_concurrency,
                timeout_s=settings.action_timeout_s,
            ),
            synthesizer=ResponseSynthesizer(client=clients.general),
            analysis_timeout_s=settings.action_timeout_s,
        )
        # Compiled graphs are stateless and shared by all concurrent passes.
        self._graph = build_graph(deps=deps)
        self._multimodal_graph = build_multimodal_graph(deps=deps)

    async def process_request(
        self,
        message: str,
        user_id: str,
        context: dict[str, Any] | None = None,
    ) -> OrchestrationOutcome:
        request = _request(user_id=user_id, text=message, context=dict(context or {}))

        initial_state: OrchestrationState = {
            "flow": "single",
            "user_id": request.user_id,
            "message": request.text or "",
            "context": dict(request.context),
            "results": {},
            "skipped": {},
            "stage": OrchestrationStage.received,
            "audit_log": [],
        }
        final_state = await self._execute(self._graph, initial_state)

        return OrchestrationOutcome(
            intent=final_state["intent"],
            results=final_state.get("results", {}),
            skipped=final_state.get("skipped", {}),
            final_response=final_state["final_response"],
            stage=OrchestrationStage.completed,
        )

    async def process_multimodal(
        self,
        *,
        user_id: str,
        text: str | None = None,
        image: bytes | None = None,
        audio: bytes | None = None,
        image_mime: str | None = None,
        audio_mime: str | None = None,
    ) -> OrchestrationOutcome:
        request = _request(
            user_id=user_id,
            text=text,
            image=image,
            audio=audio,
            image_mime=image_mime,
            audio_mime=audio_mime,
        )

        initial_state: OrchestrationState = {
            "flow": "multimodal",
            "user_id": request.user_id,
            "text": request.text,
            "image": request.image,
            "image_mime": request.image_mime,
            "audio": request.audio,
            "audio_mime": request.audio_mime,
            "results": {},
            "skipped": {},
            "stage": OrchestrationStage.received,
            "audit_log": [],
        }
        final_state = await self._execute(self._multimodal_graph, initial_state)

        results = final_state.get("results", {})
        skipped = final_state.get("skipped", {})
        return OrchestrationOutcome(
            intent=None,
            results={k: results[k] for k in ANALYSIS_ORDER if k in results},
            skipped={k: skipped[k] for k in ANALYSIS_ORDER if k in skipped},
            final_response=final_state["final_response"],
            stage=OrchestrationStage.completed,
        )

    def get_capabilities(self) -> Capabilities:
        return get_capabilities(settings=self._settings, registry=self._registry)

    def status(self) -> dict[str, Any]:
        configured = self._clients.configured()
        return {
            "service": self._settings.service_name,
            "version": self._settings.service_version,
            "environment": self._settings.env,
            "status": "operational",
            "uptime_s": round(time.monotonic() - self._started, 1),
            "providers": {
                name: "configured" if ok else "missing_credentials"
                for name, ok in configured.items()
            },
        }

    async def _execute(self, graph: Any, state: OrchestrationState) -> dict[str, Any]:
        """
        Stream node updates (LangGraph stream_mode='updates') and fold them into a local
        snapshot, so stage transitions are logged and a failure knows where it happened.
        """

        snapshot: dict[str, Any] = dict(state)
        with structlog.contextvars.bound_contextvars(
            user_id=state["user_id"], flow=state["flow"]
        ):
            log.info("stage_entered", stage=str(OrchestrationStage.received))
            try:
                async for update in graph.astream(state, stream_mode="updates"):
                    if not isinstance(update, dict):
                        continue
                    for node_name, node_update in update.items():
                        if not isinstance(node_update, dict):
                            continue
                        previous = snapshot.get("stage")
                        apply_update(snapshot, node_update)
                        if snapshot.get("stage") != previous:
                            log.info("stage_entered", stage=str(snapshot["stage"]), node=node_name)
            except OrchestrationError as e:
                log.warning(
                    "orchestration_failed",
                    stage=str(OrchestrationStage.failed),
                    failed_in=str(snapshot.get("stage")),
                    code=e.code,
                    detail=e.detail,
                )
                raise

        return snapshot


def _request(**fields: Any) -> OrchestrationRequest:
    try:
        return OrchestrationRequest(**fields)
    except ValidationError as e:
        raise InvalidRequestError(
            "Invalid orchestration request", detail=f"{e.error_count()} validation error(s)"
        ) from e


# --- Module Notes -----------------------------------------------------------
# Nothing here is persisted: the outcome is returned to the caller, which owns any
# storage decision. Audit entries stay in the graph state for logging only.
