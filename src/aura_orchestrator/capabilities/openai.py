"""
aura_orchestrator.capabilities.openai

General-purpose generation client (OpenAI chat completions).

Responsibilities:
- Default text generation (final response synthesis, follow-up insights).
- Vision analysis via the vision-capable chat model.
- Domain prompts for health advice and finance insight.
"""

from __future__ import annotations

import json
from typing import Any

from aura_orchestrator.capabilities.base import InvokeOptions, Result
from aura_orchestrator.capabilities.chat import ChatCompletionsClient

HEALTH_ADVISOR_PROMPT = (
    "You are a professional health advisor. "
    "Provide evidence-based, personalized health advice."
)
FINANCE_ADVISOR_PROMPT = (
    "You are a financial advisor. Provide practical financial insights and recommendations."
)


class OpenAIClient(ChatCompletionsClient):
    provider = "openai"

    @property
    def base_url(self) -> str:
        return self._settings.openai_base_url.rstrip("/")

    @property
    def api_key(self) -> str | None:
        return self._settings.openai_api_key

    @property
    def default_model(self) -> str:
        return self._settings.openai_model

    async def analyze_image(self, image_url: str, prompt: str) -> Result[str]:
        """
        `image_url` may be a public URL or a `data:` URL carrying base64 content.
        """

        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            }
        ]
        return await self._chat(
            messages, InvokeOptions(model=self._settings.openai_vision_model)
        )

    async def generate_health_advice(self, health_data: dict[str, Any]) -> Result[str]:
        prompt = (
            "Based on the following health data, provide personalized advice:\n"
            f"Weight: {_or_missing(health_data.get('weight'))} kg\n"
            f"Height: {_or_missing(health_data.get('height'))} cm\n"
            f"Calories: {_or_missing(health_data.get('calories'))}\n"
            f"Sleep: {_or_missing(health_data.get('sleep'))} hours\n"
            f"Exercise: {_or_missing(health_data.get('exercise'))}\n\n"
            "Please provide specific, actionable health advice."
        )
        return await self.generate_text(prompt, InvokeOptions(system_prompt=HEALTH_ADVISOR_PROMPT))

    async def generate_finance_insight(self, finance_data: Any) -> Result[str]:
        prompt = (
            "Analyze the following financial data and provide insights:\n"
            f"{json.dumps(finance_data, indent=2, default=str)}\n\n"
            "Please provide spending patterns, recommendations, and financial insights."
        )
        return await self.generate_text(prompt, InvokeOptions(system_prompt=FINANCE_ADVISOR_PROMPT))


def _or_missing(value: Any) -> str:
    if value is None or value == "":
        return "Not provided"
    return str(value)
