"""
aura_orchestrator.orchestrator.actions

Action registry: maps action ids to handlers and their declared required inputs.

Responsibilities:
- Define `ActionResult` and the per-call input bundle (`ActionCall`).
- Make each action's required inputs explicit and enumerable (`ActionSpec`).
- Provide the default handlers backed by the capability clients.
"""

from __future__ import annotations

import base64
import binascii
import enum
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

from aura_orchestrator.capabilities.base import InvokeOptions, Ok
from aura_orchestrator.capabilities.clients import CapabilityClients
from aura_orchestrator.orchestrator.errors import ActionError


class ActionId(enum.StrEnum):
    analyze_food_image = "analyze_food_image"
    provide_nutrition_advice = "provide_nutrition_advice"
    analyze_finance = "analyze_finance"
    translate_text = "translate_text"
    generate_image = "generate_image"
    transcribe_audio = "transcribe_audio"
    create_note = "create_note"
    quick_response = "quick_response"
    # Multi-modal fan-out only (not offered to the intent model).
    analyze_image = "analyze_image"


class SkipReason(enum.StrEnum):
    unsupported = "unsupported"
    precondition_unmet = "precondition_unmet"


class ActionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    action_id: str
    success: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def succeeded(cls, action_id: str, data: Any) -> ActionResult:
        return cls(action_id=action_id, success=True, data=data)

    @classmethod
    def failed(cls, action_id: str, error: str) -> ActionResult:
        return cls(action_id=action_id, success=False, error=error)


@dataclass(frozen=True, slots=True)
class ActionCall:
    message: str
    user_id: str
    clients: CapabilityClients
    entities: dict[str, Any] = field(default_factory=dict)
    context: dict[str, Any] = field(default_factory=dict)


ActionHandler = Callable[[ActionCall], Awaitable[Any]]


def _present(value: Any) -> bool:
    return value is not None and value != "" and value != b""


@dataclass(frozen=True, slots=True)
class ActionSpec:
    action_id: str
    handler: ActionHandler
    requires_context: frozenset[str] = frozenset()
    requires_entities: frozenset[str] = frozenset()
    description: str = ""
    # Extra shape check on top of presence; an exception here is recorded as a failure.
    check: Callable[[ActionCall], bool] | None = None

    @property
    def required_inputs(self) -> dict[str, list[str]]:
        return {
            "context": sorted(self.requires_context),
            "entities": sorted(self.requires_entities),
        }

    def missing_inputs(self, call: ActionCall) -> list[str]:
        missing = [
            f"context.{k}"
            for k in sorted(self.requires_context)
            if not _present(call.context.get(k))
        ]
        missing += [
            f"entities.{k}"
            for k in sorted(self.requires_entities)
            if not _present(call.entities.get(k))
        ]
        return missing

    def precondition(self, call: ActionCall) -> bool:
        if self.missing_inputs(call):
            return False
        return self.check(call) if self.check is not None else True


class ActionRegistry:
    """Stores and resolves action specs by id (registration order is preserved)."""

    def __init__(self, specs: Iterable[ActionSpec] = ()) -> None:
        self._specs: dict[str, ActionSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: ActionSpec) -> None:
        key = str(spec.action_id)
        if key in self._specs:
            raise ValueError(f"action already registered: {key}")
        self._specs[key] = spec

    def resolve(self, action_id: str) -> ActionSpec | None:
        return self._specs.get(action_id)

    def ids(self) -> list[str]:
        return list(self._specs)

    def describe(self) -> dict[str, dict[str, list[str]]]:
        return {k: s.required_inputs for k, s in self._specs.items()}

    def descriptions(self) -> dict[str, str]:
        return {k: s.description for k, s in self._specs.items()}


# --- Default handlers --------------------------------------------------------

NUTRITIONIST_PROMPT = (
    "You are a nutritionist. Provide detailed health insights based on food analysis."
)


def _as_bytes(action_id: str, value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ActionError(action_id, "media payload is not valid base64") from e
    raise ActionError(action_id, f"unsupported media payload type {type(value).__name__}")


def _is_media(key: str) -> Callable[[ActionCall], bool]:
    def _check(call: ActionCall) -> bool:
        return isinstance(call.context.get(key), (bytes, str))

    return _check


async def analyze_food_image(call: ActionCall) -> dict[str, Any]:
    image = call.context["image"]
    analysis = (await call.clients.vision.analyze_food_image(image)).unwrap()

    insights = await call.clients.general.generate_text(
        f"Based on this food analysis: {analysis}\n\n"
        "Provide additional health insights and recommendations.",
        InvokeOptions(system_prompt=NUTRITIONIST_PROMPT),
    )
    return {
        "analysis": analysis,
        "insights": insights.value if isinstance(insights, Ok) else None,
    }


async def provide_nutrition_advice(call: ActionCall) -> str:
    health_data = call.context["health_data"]
    if not isinstance(health_data, dict):
        raise ActionError(ActionId.provide_nutrition_advice, "health_data must be an object")
    return (await call.clients.general.generate_health_advice(health_data)).unwrap()


async def analyze_finance(call: ActionCall) -> str:
    result = await call.clients.general.generate_finance_insight(call.context["finance_data"])
    return result.unwrap()


async def translate_text(call: ActionCall) -> dict[str, Any]:
    result = await call.clients.translation.translate(
        str(call.entities["from_text"]),
        str(call.entities.get("from_language") or "auto"),
        str(call.entities["to_language"]),
    )
    return result.unwrap()


async def generate_image(call: ActionCall) -> dict[str, Any]:
    result = await call.clients.image.synthesize_image(
        str(call.entities["image_prompt"]),
        style=str(call.entities.get("image_style") or "photographic"),
    )
    return result.unwrap()


async def transcribe_audio(call: ActionCall) -> dict[str, Any]:
    audio = _as_bytes(ActionId.transcribe_audio, call.context["audio"])
    result = await call.clients.speech.transcribe_audio(
        audio, language=str(call.entities.get("language") or "en")
    )
    return result.unwrap()


async def create_note(call: ActionCall) -> dict[str, Any]:
    # Persisting the note is the caller's concern; this only shapes the record.
    return {
        "title": str(call.entities.get("note_title") or "New Note"),
        "content": call.message,
    }


async def quick_response(call: ActionCall) -> str:
    return (await call.clients.fast.quick_response(call.message)).unwrap()


def build_default_registry() -> ActionRegistry:
    return ActionRegistry(
        [
            ActionSpec(
                ActionId.analyze_food_image,
                analyze_food_image,
                requires_context=frozenset({"image"}),
                description="Vision analysis of a food photo plus nutrition insights",
                check=_is_media("image"),
            ),
            ActionSpec(
                ActionId.provide_nutrition_advice,
                provide_nutrition_advice,
                requires_context=frozenset({"health_data"}),
                description="Personalized advice from the user's health data",
            ),
            ActionSpec(
                ActionId.analyze_finance,
                analyze_finance,
                requires_context=frozenset({"finance_data"}),
                description="Spending patterns and recommendations from finance records",
            ),
            ActionSpec(
                ActionId.translate_text,
                translate_text,
                requires_entities=frozenset({"to_language", "from_text"}),
                description="Translate text into the requested language",
            ),
            ActionSpec(
                ActionId.generate_image,
                generate_image,
                requires_entities=frozenset({"image_prompt"}),
                description="Synthesize an image from a text prompt",
            ),
            ActionSpec(
                ActionId.transcribe_audio,
                transcribe_audio,
                requires_context=frozenset({"audio"}),
                description="Transcribe an audio clip to text",
                check=_is_media("audio"),
            ),
            ActionSpec(
                ActionId.create_note,
                create_note,
                description="Shape the message into a note record",
            ),
            ActionSpec(
                ActionId.quick_response,
                quick_response,
                description="Short conversational reply from the fast model",
            ),
        ]
    )


# --- Module Notes -----------------------------------------------------------
# Handlers never read another action's result; the executor relies on that to run
# them concurrently.
