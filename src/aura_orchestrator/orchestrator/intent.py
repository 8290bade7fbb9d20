"""
aura_orchestrator.orchestrator.intent

Intent classification: one fast-model call plus strict validation of its output.

Responsibilities:
- Define the `Intent` contract consumed by action execution and synthesis.
- Build the fixed classification prompt.
- Treat model output as untrusted input (JSON + schema validation).
"""

from __future__ import annotations

import enum
import json
import re
from collections.abc import Sequence
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from aura_orchestrator.capabilities.base import Err, InvokeOptions, Ok, Result
from aura_orchestrator.observability.logging import get_logger
from aura_orchestrator.orchestrator.errors import ClassificationError, MalformedIntentError

log = get_logger(__name__)


class PrimaryIntent(enum.StrEnum):
    health = "health"
    finance = "finance"
    notes = "notes"
    translate = "translate"
    chat = "chat"
    image = "image"
    orchestrator = "orchestrator"


class Intent(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary_intent: PrimaryIntent
    # Execution hint only; ids the registry does not know are skipped, not rejected.
    actions: tuple[str, ...] = ()
    confidence: float = Field(ge=0.0, le=1.0)
    entities: dict[str, Any] = Field(default_factory=dict)


class _IntentPayload(BaseModel):
    """
    Wire shape requested from the model: {intent, actions, confidence, entities}.
    """

    intent: PrimaryIntent
    actions: list[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    entities: dict[str, Any] = Field(default_factory=dict)

    @field_validator("intent", mode="before")
    @classmethod
    def _normalize_intent(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("actions", mode="before")
    @classmethod
    def _normalize_actions(cls, v: Any) -> Any:
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("actions must be a list")
        out: list[str] = []
        for item in v:
            # A stray non-string entry is dropped; the remaining actions still run.
            if not isinstance(item, str) or not item.strip():
                log.warning("intent_action_dropped", action=repr(item))
                continue
            action_id = item.strip().lower()
            if action_id not in out:
                out.append(action_id)
        return out

    @field_validator("entities", mode="before")
    @classmethod
    def _normalize_entities(cls, v: Any) -> Any:
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("entities must be an object")
        out: dict[str, Any] = {}
        for k, val in v.items():
            key = to_snake_case(str(k))
            # Spellings that collide (toLanguage / to_language): an empty value never wins.
            if key in out and _is_empty(val):
                continue
            out[key] = val
        return out


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == b""


INTENT_SYSTEM_PROMPT = "You are an intent analysis AI. Always return valid JSON."

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name.strip()).replace("-", "_").replace(" ", "_").lower()


def build_intent_prompt(message: str, action_ids: Sequence[str]) -> str:
    intents = ", ".join(i.value for i in PrimaryIntent)
    actions = ", ".join(action_ids)
    return (
        "Analyze the following user message and determine the intent and required actions:\n"
        f'Message: "{message}"\n\n'
        "Return only a JSON object with:\n"
        f"- intent: primary intent (one of: {intents})\n"
        f"- actions: array of required actions (choose from: {actions})\n"
        "- confidence: confidence score (0-1)\n"
        "- entities: extracted entities from the message, using these keys when relevant: "
        "from_text, from_language, to_language, image_prompt, image_style, language, "
        "note_title\n\n"
        "Example:\n"
        '{"intent": "health", "actions": ["analyze_food_image", "provide_nutrition_advice"], '
        '"confidence": 0.9, "entities": {"food_type": "pizza", "image_present": true}}'
    )


def parse_intent(text: str) -> Intent:
    """
    Strict parse of the model reply. A single surrounding Markdown code fence is
    tolerated; anything else that is not a JSON object matching the schema raises
    `MalformedIntentError`.
    """

    raw = text.strip()
    fenced = _FENCE.match(raw)
    if fenced:
        raw = fenced.group(1)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedIntentError(
            "Failed to parse intent analysis result", detail=f"invalid JSON: {e.msg}"
        ) from e
    if not isinstance(data, dict):
        raise MalformedIntentError(
            "Failed to parse intent analysis result", detail="top-level value is not an object"
        )

    try:
        payload = _IntentPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedIntentError(
            "Failed to parse intent analysis result",
            detail=f"{e.error_count()} schema error(s)",
        ) from e

    return Intent(
        primary_intent=payload.intent,
        actions=tuple(payload.actions),
        confidence=payload.confidence,
        entities=payload.entities,
    )


class TextGenerator(Protocol):
    async def generate_text(
        self, prompt: str, options: InvokeOptions | None = None
    ) -> Result[str]: ...


class IntentClassifier:
    def __init__(self, *, client: TextGenerator, action_ids: Sequence[str]) -> None:
        self._client = client
        self._action_ids = tuple(action_ids)

    async def classify(self, message: str, *, context: str | None = None) -> Intent:
        system_prompt = INTENT_SYSTEM_PROMPT
        if context:
            # Conversational context frames the task ahead of the fixed instruction.
            system_prompt = f"{context.strip()}\n\n{INTENT_SYSTEM_PROMPT}"

        result = await self._client.generate_text(
            build_intent_prompt(message, self._action_ids),
            InvokeOptions(system_prompt=system_prompt, temperature=0.0),
        )

        match result:
            case Err(error):
                raise ClassificationError("Failed to analyze user intent", detail=str(error))
            case Ok(text):
                intent = parse_intent(text)

        log.info(
            "intent_classified",
            intent=str(intent.primary_intent),
            actions=list(intent.actions),
            confidence=intent.confidence,
        )
        return intent
