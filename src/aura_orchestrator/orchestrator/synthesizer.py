"""
aura_orchestrator.orchestrator.synthesizer

Final response synthesis (exactly one general-model call per pass).
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from aura_orchestrator.capabilities.base import Err, InvokeOptions, Ok
from aura_orchestrator.observability.logging import get_logger
from aura_orchestrator.orchestrator.actions import ActionId, ActionResult, SkipReason
from aura_orchestrator.orchestrator.errors import SynthesisError
from aura_orchestrator.orchestrator.intent import Intent, TextGenerator

log = get_logger(__name__)

SYNTHESIS_SYSTEM_PROMPT = (
    "You are AURA, an AI Universal Real-life Assistant. "
    "Provide helpful, comprehensive responses based on the analysis results."
)
MULTIMODAL_SYSTEM_PROMPT = (
    "You are AURA, an AI assistant that can process text, images, and audio. "
    "Provide integrated, helpful responses."
)
SYNTHESIS_MAX_OUTPUT = 1500

# Base64 media and similar blobs are replaced by a marker in prompts.
_MAX_PROMPT_VALUE_CHARS = 2000


def _elide(value: Any) -> Any:
    if isinstance(value, str) and len(value) > _MAX_PROMPT_VALUE_CHARS:
        return f"<{len(value)} characters omitted>"
    if isinstance(value, bytes):
        return f"<{len(value)} bytes omitted>"
    if isinstance(value, Mapping):
        return {k: _elide(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_elide(v) for v in value]
    return value


def build_synthesis_prompt(
    *,
    message: str,
    intent: Intent,
    results: Mapping[str, ActionResult],
    skipped: Mapping[str, SkipReason],
) -> str:
    rendered = {k: _elide(r.model_dump()) for k, r in results.items()}
    lines = [
        "Based on the user's request and the following results, provide a comprehensive response:",
        "",
        f'Original message: "{message}"',
        f"Intent: {intent.primary_intent}",
        f"Actions performed: {', '.join(intent.actions) or 'none'}",
        "",
        "Results:",
        json.dumps(rendered, indent=2, default=str),
    ]
    if skipped:
        lines += ["", "Skipped actions (missing inputs or unsupported):"]
        lines += [f"- {action_id}: {reason}" for action_id, reason in skipped.items()]
    lines += [
        "",
        "Please provide a helpful, comprehensive response that addresses the user's needs. "
        "If some actions failed, acknowledge what could not be completed.",
    ]
    return "\n".join(lines)


def build_multimodal_prompt(*, text: str | None, results: Mapping[str, ActionResult]) -> str:
    def _section(action_id: str, missing: str) -> str:
        r = results.get(action_id)
        if r is None:
            return missing
        if not r.success:
            return f"Failed ({r.error})"
        if isinstance(r.data, Mapping) and "text" in r.data:
            return str(r.data["text"])
        return str(_elide(r.data))

    return "\n".join(
        [
            "Based on the following multi-modal analysis, provide a comprehensive response:",
            "",
            f'Original text: "{text or "No text provided"}"',
            "",
            f"Text analysis: {_section(ActionId.quick_response, 'No text analysis')}",
            f"Image analysis: {_section(ActionId.analyze_image, 'No image analysis')}",
            f"Audio transcription: {_section(ActionId.transcribe_audio, 'No audio transcription')}",
            "",
            "Provide a helpful, integrated response that combines all available information.",
        ]
    )


class ResponseSynthesizer:
    def __init__(self, *, client: TextGenerator) -> None:
        self._client = client

    async def synthesize(
        self,
        *,
        message: str,
        intent: Intent,
        results: Mapping[str, ActionResult],
        skipped: Mapping[str, SkipReason],
    ) -> str:
        prompt = build_synthesis_prompt(
            message=message, intent=intent, results=results, skipped=skipped
        )
        return await self._generate(prompt, SYNTHESIS_SYSTEM_PROMPT, results, skipped)

    async def synthesize_multimodal(
        self, *, text: str | None, results: Mapping[str, ActionResult]
    ) -> str:
        prompt = build_multimodal_prompt(text=text, results=results)
        return await self._generate(prompt, MULTIMODAL_SYSTEM_PROMPT, results, {})

    async def _generate(
        self,
        prompt: str,
        system_prompt: str,
        results: Mapping[str, ActionResult],
        skipped: Mapping[str, SkipReason],
    ) -> str:
        result = await self._client.generate_text(
            prompt,
            InvokeOptions(system_prompt=system_prompt, max_output_units=SYNTHESIS_MAX_OUTPUT),
        )
        match result:
            case Ok(text) if text.strip():
                return text
            case Ok(_):
                detail = "empty completion"
            case Err(error):
                detail = str(error)

        log.warning("synthesis_failed", error=detail)
        raise SynthesisError(
            "Failed to generate final response",
            detail=detail,
            results=dict(results),
            skipped=dict(skipped),
        )
