"""
aura_orchestrator.orchestrator.state

Typed state schema used by the LangGraph orchestration engine.

Responsibilities:
- Define the contract between nodes (inputs/outputs).
- Attach reducers to keys that parallel nodes update together.
"""

from __future__ import annotations

from typing import Annotated, Any, TypedDict

from aura_orchestrator.orchestrator.actions import ActionResult, SkipReason
from aura_orchestrator.orchestrator.intent import Intent
from aura_orchestrator.orchestrator.models import OrchestrationStage
from aura_orchestrator.orchestrator.reducers import append_audit, merge_dicts


class OrchestrationState(TypedDict, total=False):
    # Identifiers
    user_id: str
    flow: str

    # Single-modal inputs
    message: str
    context: dict[str, Any]

    # Multi-modal inputs
    text: str | None
    image: bytes | None
    image_mime: str | None
    audio: bytes | None
    audio_mime: str | None

    # Classification
    intent: Intent

    # Partial results (one key per attempted action / analysis)
    results: Annotated[dict[str, ActionResult], merge_dicts]
    skipped: Annotated[dict[str, SkipReason], merge_dicts]

    # Synthesis
    final_response: str

    # Only sequential nodes write the stage; parallel analysis nodes leave it alone.
    stage: OrchestrationStage

    # Audit
    audit_log: Annotated[list[dict[str, Any]], append_audit]


# --- Module Notes -----------------------------------------------------------
# This TypedDict is permissive (total=False): each node returns only the keys it
# changes and LangGraph folds them in through the reducers above.
