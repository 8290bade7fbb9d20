"""
aura_orchestrator.orchestrator.models

Request/outcome contracts of one orchestration pass.

Responsibilities:
- Immutable inbound request (`OrchestrationRequest`).
- Terminal artifact returned to callers (`OrchestrationOutcome`).
- Named stages of the orchestration state machine.
"""

from __future__ import annotations

import enum
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from aura_orchestrator.orchestrator.actions import ActionResult, SkipReason
from aura_orchestrator.orchestrator.intent import Intent


class OrchestrationStage(enum.StrEnum):
    received = "RECEIVED"
    classifying = "CLASSIFYING"
    executing = "EXECUTING"
    # Multi-modal fan-out (text/image/audio analyses) replaces classify + execute.
    analyzing = "ANALYZING"
    synthesizing = "SYNTHESIZING"
    completed = "COMPLETED"
    failed = "FAILED"


class OrchestrationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(min_length=1)
    text: str | None = None
    image: bytes | None = None
    image_mime: str | None = None
    audio: bytes | None = None
    audio_mime: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)


class OrchestrationOutcome(BaseModel):
    intent: Intent | None = None
    results: dict[str, ActionResult] = Field(default_factory=dict)
    skipped: dict[str, SkipReason] = Field(default_factory=dict)
    final_response: str | None = None
    stage: OrchestrationStage = OrchestrationStage.completed
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


# --- Module Notes -----------------------------------------------------------
# The outcome is not persisted by the core; storing it is the caller's decision.
