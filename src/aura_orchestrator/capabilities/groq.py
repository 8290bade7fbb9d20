"""
aura_orchestrator.capabilities.groq

Fast-intent model client (Groq, OpenAI-compatible API).

Responsibilities:
- Low-latency text generation used for intent classification.
- Short conversational replies for the multi-modal text branch.
"""

from __future__ import annotations

from aura_orchestrator.capabilities.base import InvokeOptions, Result
from aura_orchestrator.capabilities.chat import ChatCompletionsClient


class GroqClient(ChatCompletionsClient):
    provider = "groq"

    @property
    def base_url(self) -> str:
        return self._settings.groq_base_url.rstrip("/")

    @property
    def api_key(self) -> str | None:
        return self._settings.groq_api_key

    @property
    def default_model(self) -> str:
        return self._settings.groq_model

    async def quick_response(self, message: str) -> Result[str]:
        return await self.generate_text(
            message, InvokeOptions(max_output_units=500, temperature=0.7)
        )
