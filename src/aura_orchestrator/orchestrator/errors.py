"""
aura_orchestrator.orchestrator.errors

Domain-specific exceptions used by the orchestration graph.

Responsibilities:
- Name each abort reason (classification, malformed intent, synthesis, bad input).
- Provide the single public error descriptor returned to callers.
- Name the per-action failure that the executor absorbs.
"""

from __future__ import annotations

from typing import Any


class OrchestrationError(Exception):
    """
    Aborts one orchestration pass. `message` is safe to show to end users.
    """

    code = "orchestration_failed"

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        # Internal detail (provider kind/message) is logged, never exposed.
        self.detail = detail

    def to_descriptor(self) -> dict[str, str]:
        return {"status": "error", "code": self.code, "message": self.message}


class InvalidRequestError(OrchestrationError):
    code = "invalid_request"


class ClassificationError(OrchestrationError):
    code = "classification_failed"


class MalformedIntentError(ClassificationError):
    code = "malformed_intent"


class SynthesisError(OrchestrationError):
    """
    Raised after actions already ran; the partial results stay available for
    degraded-mode callers.
    """

    code = "synthesis_failed"

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        results: dict[str, Any] | None = None,
        skipped: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, detail=detail)
        self.results = dict(results or {})
        self.skipped = dict(skipped or {})


class ActionError(Exception):
    """
    Failure of a single action. Never aborts sibling actions or the pass.
    """

    def __init__(self, action_id: str, message: str) -> None:
        super().__init__(f"{action_id}: {message}")
        self.action_id = action_id
        self.message = message


# --- Module Notes -----------------------------------------------------------
# The service layer catches `OrchestrationError` and marks the pass FAILED; the HTTP
# layer renders `to_descriptor()` with one exception handler.
