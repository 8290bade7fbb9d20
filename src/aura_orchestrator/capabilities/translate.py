"""
aura_orchestrator.capabilities.translate

Translation client (LibreTranslate).

Responsibilities:
- Translate text between ISO 639-1 language codes (or `auto` source).
- Detect the language of a text and translate with detection.
- List the languages offered by the configured instance.
"""

from __future__ import annotations

from typing import Any

from aura_orchestrator.capabilities.base import CapabilityClient, InvokeOptions, Ok, Result

# English names the intent model tends to emit instead of codes.
LANGUAGE_NAMES: dict[str, str] = {
    "english": "en",
    "spanish": "es",
    "french": "fr",
    "german": "de",
    "italian": "it",
    "portuguese": "pt",
    "russian": "ru",
    "japanese": "ja",
    "korean": "ko",
    "chinese": "zh",
    "arabic": "ar",
    "hindi": "hi",
}


def normalize_language(value: str) -> str:
    cleaned = value.strip().lower()
    return LANGUAGE_NAMES.get(cleaned, cleaned)


class LibreTranslateClient(CapabilityClient):
    provider = "libretranslate"
    requires_api_key = False

    @property
    def base_url(self) -> str:
        return self._settings.translate_base_url.rstrip("/")

    @property
    def api_key(self) -> str | None:
        return self._settings.translate_api_key

    @property
    def default_model(self) -> str:
        return "libretranslate"

    def _headers(self) -> dict[str, str]:
        # LibreTranslate authenticates through the `api_key` body field.
        return {}

    def _body(self, **fields: Any) -> dict[str, Any]:
        if self.api_key:
            fields["api_key"] = self.api_key
        return fields

    async def invoke(self, payload: Any, options: InvokeOptions | None = None) -> Result[Any]:
        if isinstance(payload, dict) and "text" in payload and "to" in payload:
            return await self.translate(
                str(payload["text"]), str(payload.get("from", "auto")), str(payload["to"])
            )
        return self._unsupported("invoke without text/to fields")

    async def translate(self, text: str, from_lang: str, to_lang: str) -> Result[dict[str, Any]]:
        source = normalize_language(from_lang or "auto")
        target = normalize_language(to_lang)

        def _parse(body: dict[str, Any]) -> dict[str, Any]:
            translated = body["translatedText"]
            if not isinstance(translated, str):
                raise TypeError("translatedText is not a string")
            detected = body.get("detectedLanguage")
            return {
                "translated_text": translated,
                "detected_language": (
                    detected.get("language") if isinstance(detected, dict) else source
                ),
                "from_lang": source,
                "to_lang": target,
            }

        return await self._send(
            "POST",
            f"{self.base_url}/translate",
            json=self._body(q=text, source=source, target=target, format="text"),
            parse=_parse,
        )

    async def detect_language(self, text: str) -> Result[dict[str, Any]]:
        def _parse(body: list[dict[str, Any]]) -> dict[str, Any]:
            best = body[0]
            return {"language": str(best["language"]), "confidence": best.get("confidence")}

        return await self._send(
            "POST",
            f"{self.base_url}/detect",
            json=self._body(q=text),
            parse=_parse,
        )

    async def translate_with_detection(self, text: str, to_lang: str) -> Result[dict[str, Any]]:
        detected = await self.detect_language(text)
        if not detected.ok:
            return detected

        from_lang = detected.value["language"]
        target = normalize_language(to_lang)
        if from_lang == target:
            return Ok(
                {
                    "translated_text": text,
                    "detected_language": from_lang,
                    "from_lang": from_lang,
                    "to_lang": target,
                }
            )
        return await self.translate(text, from_lang, target)

    async def supported_languages(self) -> Result[list[dict[str, Any]]]:
        def _parse(body: list[dict[str, Any]]) -> list[dict[str, Any]]:
            return [{"code": str(x["code"]), "name": str(x["name"])} for x in body]

        return await self._send("GET", f"{self.base_url}/languages", parse=_parse)
