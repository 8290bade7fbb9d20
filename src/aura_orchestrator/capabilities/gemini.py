"""
aura_orchestrator.capabilities.gemini

Vision-capable model client (Google Gemini `generateContent`).

Responsibilities:
- Image analysis from inline base64 content (generic and food-specific prompts).
- Plain text generation and prompted translation.
"""

from __future__ import annotations

import base64
from typing import Any

from aura_orchestrator.capabilities.base import CapabilityClient, InvokeOptions, Result

DESCRIBE_IMAGE_PROMPT = "Analyze this image and describe what you see."

FOOD_ANALYSIS_PROMPT = (
    "Analyze this food image and provide:\n"
    "1. Food items identified\n"
    "2. Estimated calories\n"
    "3. Nutritional information (protein, carbs, fat)\n"
    "4. Health rating (1-10)\n"
    "5. Recommendations for improvement\n\n"
    "Be specific and detailed in your analysis."
)


class GeminiClient(CapabilityClient):
    provider = "gemini"

    @property
    def base_url(self) -> str:
        return self._settings.gemini_base_url.rstrip("/")

    @property
    def api_key(self) -> str | None:
        return self._settings.gemini_api_key

    @property
    def default_model(self) -> str:
        return self._settings.gemini_model

    def _headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.api_key or ""}

    async def invoke(self, payload: Any, options: InvokeOptions | None = None) -> Result[Any]:
        if isinstance(payload, bytes):
            return await self.analyze_image(payload, DESCRIBE_IMAGE_PROMPT)
        return await super().invoke(payload, options)

    async def generate_text(self, prompt: str, options: InvokeOptions | None = None) -> Result[str]:
        opts = options or InvokeOptions()
        parts: list[dict[str, Any]] = [{"text": prompt}]
        if opts.system_prompt:
            parts.insert(0, {"text": opts.system_prompt})
        return await self._generate(opts.model or self.default_model, parts, opts)

    async def analyze_image(
        self,
        image: bytes | str,
        prompt: str,
        *,
        mime_type: str = "image/jpeg",
    ) -> Result[str]:
        parts = [
            {"text": prompt},
            {"inline_data": {"mime_type": mime_type, "data": as_base64(image)}},
        ]
        return await self._generate(self._settings.gemini_vision_model, parts, InvokeOptions())

    async def analyze_food_image(self, image: bytes | str) -> Result[str]:
        return await self.analyze_image(image, FOOD_ANALYSIS_PROMPT)

    async def translate(self, text: str, from_lang: str, to_lang: str) -> Result[str]:
        prompt = (
            f"Translate the following text from {from_lang} to {to_lang}:\n"
            f'"{text}"\n\n'
            "Return only the translated text without any additional formatting or explanation."
        )
        return await self.generate_text(prompt)

    async def _generate(
        self, model: str, parts: list[dict[str, Any]], opts: InvokeOptions
    ) -> Result[str]:
        payload = {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "maxOutputTokens": opts.max_output_units or 1000,
                "temperature": 0.7 if opts.temperature is None else opts.temperature,
            },
        }
        return await self._send(
            "POST",
            f"{self.base_url}/models/{model}:generateContent",
            json=payload,
            parse=_candidate_text,
        )


def as_base64(image: bytes | str) -> str:
    # Strings are assumed to already be base64 (optionally as a data URL).
    if isinstance(image, bytes):
        return base64.b64encode(image).decode("ascii")
    if image.startswith("data:") and "," in image:
        return image.split(",", 1)[1]
    return image


def _candidate_text(body: dict[str, Any]) -> str:
    text = body["candidates"][0]["content"]["parts"][0]["text"]
    if not isinstance(text, str):
        raise TypeError("candidate text is not a string")
    return text.strip()
