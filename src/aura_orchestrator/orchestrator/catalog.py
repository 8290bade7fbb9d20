"""
aura_orchestrator.orchestrator.catalog

Static capability description (pure data, no side effects).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from aura_orchestrator.orchestrator.actions import ActionId, ActionRegistry
from aura_orchestrator.orchestrator.intent import PrimaryIntent
from aura_orchestrator.settings import Settings

SUPPORTED_MIME_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/webp",
    "audio/mpeg",
    "audio/wav",
    "audio/mp3",
    "audio/ogg",
)

SUPPORTED_LANGUAGES: tuple[str, ...] = (
    "en", "es", "fr", "de", "it", "pt", "ru", "ja", "ko", "zh", "ar", "hi",
)


class Capabilities(BaseModel):
    model_config = ConfigDict(frozen=True)

    supported_intents: list[str]
    supported_actions: list[str]
    action_inputs: dict[str, dict[str, list[str]]]
    action_descriptions: dict[str, str]
    multimodal_analyses: list[str]
    supported_file_types: list[str]
    max_file_size: int
    max_files: int
    supported_languages: list[str]


def get_capabilities(*, settings: Settings, registry: ActionRegistry) -> Capabilities:
    return Capabilities(
        supported_intents=[i.value for i in PrimaryIntent],
        supported_actions=registry.ids(),
        action_inputs=registry.describe(),
        action_descriptions=registry.descriptions(),
        multimodal_analyses=[
            ActionId.quick_response.value,
            ActionId.analyze_image.value,
            ActionId.transcribe_audio.value,
        ],
        supported_file_types=list(SUPPORTED_MIME_TYPES),
        max_file_size=settings.max_file_size,
        max_files=settings.max_files,
        supported_languages=list(SUPPORTED_LANGUAGES),
    )
