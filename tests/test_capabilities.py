"""
tests.test_capabilities

Provider clients against `httpx.MockTransport`: request shapes and error classification.
"""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from aura_orchestrator.capabilities.base import (
    ConfigurationError,
    Err,
    InvokeOptions,
    Ok,
    ProviderError,
    ProviderErrorKind,
    ProviderFailure,
)
from aura_orchestrator.capabilities.clients import build_clients
from aura_orchestrator.capabilities.gemini import GeminiClient
from aura_orchestrator.capabilities.groq import GroqClient
from aura_orchestrator.capabilities.openai import OpenAIClient
from aura_orchestrator.capabilities.stability import StabilityClient
from aura_orchestrator.capabilities.translate import LibreTranslateClient, normalize_language
from aura_orchestrator.capabilities.whisper import WhisperClient
from aura_orchestrator.settings import Settings


def _settings(**overrides) -> Settings:
    values = {
        "env": "test",
        "groq_api_key": "groq-key",
        "openai_api_key": "openai-key",
        "gemini_api_key": "gemini-key",
        "stability_api_key": "stability-key",
    }
    values.update(overrides)
    return Settings(**values)


def _chat_reply(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


@pytest.mark.asyncio
async def test_groq_generate_text_sends_chat_completion() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_chat_reply("  hello there \n"))

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = GroqClient(settings=_settings(), http=http)
        result = await client.generate_text("hi", InvokeOptions(temperature=0.0))

    assert result == Ok("hello there")
    req = seen[0]
    assert str(req.url) == "https://api.groq.com/openai/v1/chat/completions"
    assert req.headers["authorization"] == "Bearer groq-key"
    body = json.loads(req.content)
    assert body["model"] == "llama3-8b-8192"
    assert body["temperature"] == 0.0
    assert body["max_tokens"] == 1000
    assert body["messages"][0] == {"role": "system", "content": "You are a helpful AI assistant."}
    assert body["messages"][1] == {"role": "user", "content": "hi"}


@pytest.mark.asyncio
async def test_quick_response_uses_short_completion() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json=_chat_reply("sure"))

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        result = await GroqClient(settings=_settings(), http=http).quick_response("hey")

    assert result.unwrap() == "sure"
    assert seen[0]["max_tokens"] == 500


@pytest.mark.asyncio
async def test_missing_credential_is_auth_error_without_request() -> None:
    async with httpx.AsyncClient(transport=httpx.MockTransport(_unreachable)) as http:
        client = OpenAIClient(settings=_settings(openai_api_key=None), http=http)
        result = await client.generate_text("hi")

    assert isinstance(result, Err)
    assert result.error.kind == ProviderErrorKind.auth
    assert result.error.provider == "openai"
    assert not client.configured


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "kind"),
    [
        (401, ProviderErrorKind.auth),
        (403, ProviderErrorKind.auth),
        (429, ProviderErrorKind.quota),
        (504, ProviderErrorKind.timeout),
        (500, ProviderErrorKind.upstream),
    ],
)
async def test_http_status_is_classified(status: int, kind: ProviderErrorKind) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"error": {"message": "provider said no"}})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        result = await OpenAIClient(settings=_settings(), http=http).generate_text("hi")

    assert isinstance(result, Err)
    assert result.error.kind == kind
    assert result.error.status_code == status
    assert result.error.message == "provider said no"


@pytest.mark.asyncio
async def test_non_json_and_unexpected_shape_are_malformed() -> None:
    replies = iter(
        [
            httpx.Response(200, text="<html>gateway</html>"),
            httpx.Response(200, json={"choices": []}),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return next(replies)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = GroqClient(settings=_settings(), http=http)
        first = await client.generate_text("hi")
        second = await client.generate_text("hi")

    assert isinstance(first, Err) and first.error.kind == ProviderErrorKind.malformed
    assert isinstance(second, Err) and second.error.kind == ProviderErrorKind.malformed


@pytest.mark.asyncio
async def test_transport_failures_are_timeout_and_network() -> None:
    errors = iter([httpx.ReadTimeout, httpx.ConnectError])

    def handler(request: httpx.Request) -> httpx.Response:
        raise next(errors)("transport failure", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = GroqClient(settings=_settings(), http=http)
        timed_out = await client.generate_text("hi")
        unreachable = await client.generate_text("hi")

    assert isinstance(timed_out, Err) and timed_out.error.kind == ProviderErrorKind.timeout
    assert isinstance(unreachable, Err) and unreachable.error.kind == ProviderErrorKind.network
    assert unreachable.error.message == "ConnectError"


@pytest.mark.asyncio
async def test_gemini_image_analysis_sends_inline_base64() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": "a bowl of salad"}]}}]}
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = GeminiClient(settings=_settings(), http=http)
        result = await client.analyze_image(b"\x89PNG", "describe", mime_type="image/png")

    assert result.unwrap() == "a bowl of salad"
    req = seen[0]
    assert req.url.path.endswith("/models/gemini-pro-vision:generateContent")
    assert req.headers["x-goog-api-key"] == "gemini-key"
    assert "authorization" not in req.headers
    parts = json.loads(req.content)["contents"][0]["parts"]
    assert parts[0] == {"text": "describe"}
    assert parts[1]["inline_data"] == {
        "mime_type": "image/png",
        "data": base64.b64encode(b"\x89PNG").decode("ascii"),
    }


@pytest.mark.asyncio
async def test_gemini_translate_prompts_text_model() -> None:
    seen: list[httpx.Request] = []
    replies = iter(
        [
            httpx.Response(
                200, json={"candidates": [{"content": {"parts": [{"text": " bonjour \n"}]}}]}
            ),
            httpx.Response(200, json={"candidates": []}),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return next(replies)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = GeminiClient(settings=_settings(), http=http)
        result = await client.translate("hello", "en", "fr")
        malformed = await client.translate("hello", "en", "fr")

    assert result.unwrap() == "bonjour"
    assert seen[0].url.path.endswith("/models/gemini-pro:generateContent")
    parts = json.loads(seen[0].content)["contents"][0]["parts"]
    assert len(parts) == 1
    assert parts[0]["text"].startswith('Translate the following text from en to fr:\n"hello"')
    assert "Return only the translated text" in parts[0]["text"]
    assert isinstance(malformed, Err) and malformed.error.kind == ProviderErrorKind.malformed


@pytest.mark.asyncio
async def test_openai_image_analysis_uses_vision_model() -> None:
    seen: list[dict] = []
    replies = iter(
        [
            httpx.Response(200, json=_chat_reply("A receipt from a grocery store.")),
            httpx.Response(200, json={"choices": [{"message": {"content": None}}]}),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        seen.append(json.loads(request.content))
        return next(replies)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = OpenAIClient(settings=_settings(), http=http)
        result = await client.analyze_image("https://img.example/receipt.jpg", "What is this?")
        malformed = await client.analyze_image("data:image/png;base64,AAAA", "What is this?")

    assert result.unwrap() == "A receipt from a grocery store."
    body = seen[0]
    assert body["model"] == "gpt-4-vision-preview"
    assert body["messages"] == [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": "What is this?"},
                {"type": "image_url", "image_url": {"url": "https://img.example/receipt.jpg"}},
            ],
        }
    ]
    assert seen[1]["messages"][0]["content"][1]["image_url"]["url"].startswith("data:image/png")
    assert isinstance(malformed, Err) and malformed.error.kind == ProviderErrorKind.malformed


@pytest.mark.asyncio
async def test_libretranslate_lists_supported_languages() -> None:
    seen: list[httpx.Request] = []
    replies = iter(
        [
            httpx.Response(
                200,
                json=[
                    {"code": "en", "name": "English", "targets": ["es", "fr"]},
                    {"code": "es", "name": "Spanish", "targets": ["en"]},
                ],
            ),
            httpx.Response(200, json={"languages": "unavailable"}),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return next(replies)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = LibreTranslateClient(settings=_settings(), http=http)
        result = await client.supported_languages()
        malformed = await client.supported_languages()

    assert seen[0].method == "GET"
    assert str(seen[0].url) == "https://libretranslate.com/languages"
    assert result.unwrap() == [
        {"code": "en", "name": "English"},
        {"code": "es", "name": "Spanish"},
    ]
    assert isinstance(malformed, Err) and malformed.error.kind == ProviderErrorKind.malformed


@pytest.mark.asyncio
async def test_whisper_uploads_multipart_audio() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"text": "good morning", "language": "english"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = WhisperClient(settings=_settings(), http=http)
        result = await client.transcribe_audio(
            b"RIFFdata", language="fr", filename="clip.ogg", content_type="audio/ogg"
        )

    assert result.unwrap() == {"text": "good morning", "language": "english"}
    req = seen[0]
    assert str(req.url) == "https://api.openai.com/v1/audio/transcriptions"
    assert req.headers["content-type"].startswith("multipart/form-data")
    assert b'filename="clip.ogg"' in req.content
    assert b"RIFFdata" in req.content
    assert b"whisper-1" in req.content


@pytest.mark.asyncio
async def test_stability_returns_artifacts() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["text_prompts"] == [{"text": "a red fox", "weight": 1}]
        assert body["style_preset"] == "anime"
        return httpx.Response(
            200, json={"artifacts": [{"base64": "Zm94", "seed": 7, "finishReason": "SUCCESS"}]}
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = StabilityClient(settings=_settings(), http=http)
        result = await client.synthesize_image("a red fox", style="anime")

    assert result.unwrap() == {
        "images": [{"base64": "Zm94", "seed": 7, "finish_reason": "SUCCESS"}]
    }


@pytest.mark.asyncio
async def test_libretranslate_works_without_key_and_normalizes_languages() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append(body)
        return httpx.Response(
            200,
            json={"translatedText": "hola", "detectedLanguage": {"language": "en"}},
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = LibreTranslateClient(settings=_settings(), http=http)
        result = await client.translate("hello", "auto", "Spanish")

    assert client.configured
    assert result.unwrap() == {
        "translated_text": "hola",
        "detected_language": "en",
        "from_lang": "auto",
        "to_lang": "es",
    }
    assert seen[0] == {"q": "hello", "source": "auto", "target": "es", "format": "text"}


@pytest.mark.asyncio
async def test_translate_with_detection_short_circuits_same_language() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json=[{"language": "es", "confidence": 97.0}])

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = LibreTranslateClient(settings=_settings(translate_api_key="lt"), http=http)
        result = await client.translate_with_detection("hola", "es")

    assert paths == ["/detect"]
    assert result.unwrap()["translated_text"] == "hola"


def test_normalize_language_maps_names_to_codes() -> None:
    assert normalize_language(" French ") == "fr"
    assert normalize_language("pt") == "pt"


@pytest.mark.asyncio
async def test_media_clients_reject_unsupported_payloads() -> None:
    async with httpx.AsyncClient(transport=httpx.MockTransport(_unreachable)) as http:
        stability = StabilityClient(settings=_settings(), http=http)
        groq = GroqClient(settings=_settings(), http=http)
        from_stability = await stability.invoke(b"bytes")
        from_groq = await groq.invoke(b"bytes")

    assert isinstance(from_stability, Err)
    assert from_stability.error.kind == ProviderErrorKind.unsupported
    assert isinstance(from_groq, Err)
    assert from_groq.error.kind == ProviderErrorKind.unsupported


@pytest.mark.asyncio
async def test_missing_base_url_is_configuration_error() -> None:
    async with httpx.AsyncClient(transport=httpx.MockTransport(_unreachable)) as http:
        with pytest.raises(ConfigurationError):
            GroqClient(settings=_settings(groq_base_url=""), http=http)


@pytest.mark.asyncio
async def test_build_clients_reports_configured_providers() -> None:
    async with httpx.AsyncClient(transport=httpx.MockTransport(_unreachable)) as http:
        clients = build_clients(settings=_settings(stability_api_key=None), http=http)

    assert clients.configured() == {
        "groq": True,
        "openai": True,
        "gemini": True,
        "stability": False,
        "whisper": True,
        "libretranslate": True,
    }


def test_err_unwrap_raises_provider_failure() -> None:
    error = ProviderError(kind=ProviderErrorKind.quota, message="slow down", provider="openai")
    with pytest.raises(ProviderFailure) as excinfo:
        Err(error).unwrap()
    assert excinfo.value.error is error
    assert str(excinfo.value) == "openai quota: slow down"


def test_invoke_options_reject_out_of_range_temperature() -> None:
    with pytest.raises(ValueError):
        InvokeOptions(temperature=1.5)
