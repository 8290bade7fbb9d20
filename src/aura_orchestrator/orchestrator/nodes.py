from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any

from aura_orchestrator.capabilities.base import Err, Ok, Result
from aura_orchestrator.capabilities.clients import CapabilityClients
from aura_orchestrator.capabilities.gemini import DESCRIBE_IMAGE_PROMPT
from aura_orchestrator.observability.logging import get_logger
from aura_orchestrator.orchestrator.actions import ActionId, ActionResult, SkipReason
from aura_orchestrator.orchestrator.errors import InvalidRequestError
from aura_orchestrator.orchestrator.executor import ActionExecutor
from aura_orchestrator.orchestrator.intent import IntentClassifier
from aura_orchestrator.orchestrator.models import OrchestrationStage
from aura_orchestrator.orchestrator.state import OrchestrationState
from aura_orchestrator.orchestrator.synthesizer import ResponseSynthesizer

log = get_logger(__name__)

# Fixed result order for the multi-modal synthesis input.
ANALYSIS_ORDER: tuple[str, ...] = (
    ActionId.quick_response,
    ActionId.analyze_image,
    ActionId.transcribe_audio,
)

_AUDIO_FILENAMES = {
    "audio/mpeg": "audio.mp3",
    "audio/mp3": "audio.mp3",
    "audio/ogg": "audio.ogg",
    "audio/wav": "audio.wav",
}


@dataclass(frozen=True, slots=True)
class OrchestratorDeps:
    clients: CapabilityClients
    classifier: IntentClassifier
    executor: ActionExecutor
    synthesizer: ResponseSynthesizer
    analysis_timeout_s: float


def _audit(event: str, **details: Any) -> list[dict[str, Any]]:
    return [{"event": event, "details": details}]


# --- Single-modal path ---------------------------------------------------------


async def entry_node(state: OrchestrationState) -> dict[str, Any]:
    """
    Validate input and move RECEIVED -> CLASSIFYING.
    """

    message = state.get("message")
    if not isinstance(message, str) or not message.strip():
        raise InvalidRequestError("Message is required")
    if not isinstance(state.get("context", {}), dict):
        raise InvalidRequestError("context must be an object")

    return {
        "stage": OrchestrationStage.classifying,
        "audit_log": _audit("ENTRY", flow="single"),
    }


async def classify_node(state: OrchestrationState, *, deps: OrchestratorDeps) -> dict[str, Any]:
    conversation = state.get("context", {}).get("conversation")
    intent = await deps.classifier.classify(
        state["message"],
        context=conversation if isinstance(conversation, str) else None,
    )
    return {
        "intent": intent,
        "stage": OrchestrationStage.executing,
        "audit_log": _audit(
            "CLASSIFY",
            intent=str(intent.primary_intent),
            actions=list(intent.actions),
            confidence=intent.confidence,
        ),
    }


async def execute_node(state: OrchestrationState, *, deps: OrchestratorDeps) -> dict[str, Any]:
    # Never raises: every action failure is absorbed into the report.
    report = await deps.executor.execute(
        state["intent"],
        message=state["message"],
        user_id=state["user_id"],
        context=state.get("context", {}),
        clients=deps.clients,
    )
    return {
        "results": report.results,
        "skipped": report.skipped,
        "stage": OrchestrationStage.synthesizing,
        "audit_log": _audit(
            "EXECUTE",
            succeeded=[k for k, r in report.results.items() if r.success],
            failed=[k for k, r in report.results.items() if not r.success],
            skipped={k: str(v) for k, v in report.skipped.items()},
        ),
    }


async def synthesize_node(state: OrchestrationState, *, deps: OrchestratorDeps) -> dict[str, Any]:
    final = await deps.synthesizer.synthesize(
        message=state["message"],
        intent=state["intent"],
        results=state.get("results", {}),
        skipped=state.get("skipped", {}),
    )
    return {
        "final_response": final,
        "stage": OrchestrationStage.completed,
        "audit_log": _audit("SYNTHESIZE", chars=len(final)),
    }


# --- Multi-modal path ----------------------------------------------------------


async def multimodal_entry_node(state: OrchestrationState) -> dict[str, Any]:
    text = state.get("text")
    if not (text and text.strip()) and not state.get("image") and not state.get("audio"):
        raise InvalidRequestError("Text message or files are required")

    return {
        "stage": OrchestrationStage.analyzing,
        "audit_log": _audit(
            "ENTRY",
            flow="multimodal",
            text=bool(text),
            image=bool(state.get("image")),
            audio=bool(state.get("audio")),
        ),
    }


async def _isolated(
    action_id: str,
    call: Awaitable[Result[Any]],
    *,
    timeout_s: float,
) -> ActionResult:
    # Same isolation contract as the action executor, for one analysis.
    try:
        result = await asyncio.wait_for(call, timeout=timeout_s)
    except TimeoutError:
        log.warning("analysis_timed_out", action=action_id, timeout_s=timeout_s)
        return ActionResult.failed(action_id, f"timed out after {timeout_s:g}s")
    except Exception:  # noqa: BLE001 - normalize all analysis failures.
        log.exception("analysis_crashed", action=action_id)
        return ActionResult.failed(action_id, f"Failed to execute {action_id}")

    match result:
        case Ok(value):
            return ActionResult.succeeded(action_id, value)
        case Err(error):
            log.warning("analysis_failed", action=action_id, error=str(error))
            return ActionResult.failed(action_id, str(error))


def _analysis_update(action_id: str, result: ActionResult) -> dict[str, Any]:
    return {
        "results": {action_id: result},
        "audit_log": _audit("ANALYZE", action=action_id, success=result.success),
    }


def _skip_update(action_id: str) -> dict[str, Any]:
    return {
        "skipped": {action_id: SkipReason.precondition_unmet},
        "audit_log": _audit("ANALYZE_SKIPPED", action=action_id),
    }


async def analyze_text_node(state: OrchestrationState, *, deps: OrchestratorDeps) -> dict[str, Any]:
    text = state.get("text")
    if not text or not text.strip():
        return _skip_update(ActionId.quick_response)
    result = await _isolated(
        ActionId.quick_response,
        deps.clients.fast.quick_response(text),
        timeout_s=deps.analysis_timeout_s,
    )
    return _analysis_update(ActionId.quick_response, result)


async def analyze_image_node(state: OrchestrationState, *, deps: OrchestratorDeps) -> dict[str, Any]:
    image = state.get("image")
    if not image:
        return _skip_update(ActionId.analyze_image)
    result = await _isolated(
        ActionId.analyze_image,
        deps.clients.vision.analyze_image(
            image,
            DESCRIBE_IMAGE_PROMPT,
            mime_type=state.get("image_mime") or "image/jpeg",
        ),
        timeout_s=deps.analysis_timeout_s,
    )
    return _analysis_update(ActionId.analyze_image, result)


async def analyze_audio_node(state: OrchestrationState, *, deps: OrchestratorDeps) -> dict[str, Any]:
    audio = state.get("audio")
    if not audio:
        return _skip_update(ActionId.transcribe_audio)
    mime = state.get("audio_mime") or "audio/wav"
    result = await _isolated(
        ActionId.transcribe_audio,
        deps.clients.speech.transcribe_audio(
            audio,
            filename=_AUDIO_FILENAMES.get(mime, "audio.wav"),
            content_type=mime,
        ),
        timeout_s=deps.analysis_timeout_s,
    )
    return _analysis_update(ActionId.transcribe_audio, result)


async def join_node(state: OrchestrationState) -> dict[str, Any]:
    """
    Barrier after the fan-out: runs once all analysis nodes have reported.
    """

    results = state.get("results", {})
    return {
        "stage": OrchestrationStage.synthesizing,
        "audit_log": _audit(
            "JOIN",
            succeeded=[k for k in ANALYSIS_ORDER if k in results and results[k].success],
            failed=[k for k in ANALYSIS_ORDER if k in results and not results[k].success],
        ),
    }


async def synthesize_multimodal_node(
    state: OrchestrationState, *, deps: OrchestratorDeps
) -> dict[str, Any]:
    results = state.get("results", {})
    ordered = {k: results[k] for k in ANALYSIS_ORDER if k in results}
    final = await deps.synthesizer.synthesize_multimodal(text=state.get("text"), results=ordered)
    return {
        "final_response": final,
        "stage": OrchestrationStage.completed,
        "audit_log": _audit("SYNTHESIZE", chars=len(final)),
    }
