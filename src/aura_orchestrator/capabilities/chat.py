"""
aura_orchestrator.capabilities.chat

OpenAI-compatible chat-completions transport shared by the Groq and OpenAI clients.
"""

from __future__ import annotations

from typing import Any

from aura_orchestrator.capabilities.base import CapabilityClient, InvokeOptions, Result

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."
DEFAULT_MAX_TOKENS = 1000
DEFAULT_TEMPERATURE = 0.7


class ChatCompletionsClient(CapabilityClient):
    async def generate_text(self, prompt: str, options: InvokeOptions | None = None) -> Result[str]:
        opts = options or InvokeOptions()
        messages = [
            {"role": "system", "content": opts.system_prompt or DEFAULT_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        return await self._chat(messages, opts)

    async def _chat(self, messages: list[dict[str, Any]], opts: InvokeOptions) -> Result[str]:
        payload = {
            "model": opts.model or self.default_model,
            "messages": messages,
            "max_tokens": opts.max_output_units or DEFAULT_MAX_TOKENS,
            "temperature": DEFAULT_TEMPERATURE if opts.temperature is None else opts.temperature,
        }
        return await self._send(
            "POST",
            f"{self.base_url}/chat/completions",
            json=payload,
            parse=_message_content,
        )


def _message_content(body: dict[str, Any]) -> str:
    content = body["choices"][0]["message"]["content"]
    if not isinstance(content, str):
        raise TypeError("message content is not text")
    return content.strip()
