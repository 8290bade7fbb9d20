"""
aura_orchestrator.capabilities.whisper

Speech-to-text client (OpenAI Whisper transcriptions, multipart upload).
"""

from __future__ import annotations

from typing import Any

from aura_orchestrator.capabilities.base import CapabilityClient, InvokeOptions, Result


class WhisperClient(CapabilityClient):
    provider = "whisper"

    @property
    def base_url(self) -> str:
        return self._settings.openai_base_url.rstrip("/")

    @property
    def api_key(self) -> str | None:
        return self._settings.openai_api_key

    @property
    def default_model(self) -> str:
        return self._settings.whisper_model

    async def invoke(self, payload: Any, options: InvokeOptions | None = None) -> Result[Any]:
        if isinstance(payload, bytes):
            return await self.transcribe_audio(payload, model=options.model if options else None)
        return self._unsupported("invoke with non-audio payload")

    async def transcribe_audio(
        self,
        audio: bytes,
        *,
        language: str = "en",
        model: str | None = None,
        filename: str = "audio.wav",
        content_type: str = "audio/wav",
    ) -> Result[dict[str, Any]]:
        return await self._send(
            "POST",
            f"{self.base_url}/audio/transcriptions",
            files={"file": (filename, audio, content_type)},
            data={
                "model": model or self.default_model,
                "language": language,
                "response_format": "json",
            },
            parse=_transcription,
        )


def _transcription(body: dict[str, Any]) -> dict[str, Any]:
    text = body["text"]
    if not isinstance(text, str):
        raise TypeError("transcription text is not a string")
    return {"text": text, "language": body.get("language")}
