"""
tests.test_orchestration_service

End-to-end orchestration passes over in-memory capability clients.

Responsibilities:
- Cover the single-modal and multi-modal flows, including degraded outcomes.
- Check that aborts surface as typed `OrchestrationError`s.
"""

from __future__ import annotations

import asyncio

import pytest

from aura_orchestrator.capabilities.base import Ok, ProviderErrorKind
from aura_orchestrator.orchestrator.actions import SkipReason
from aura_orchestrator.orchestrator.errors import (
    ClassificationError,
    InvalidRequestError,
    MalformedIntentError,
    SynthesisError,
)
from aura_orchestrator.orchestrator.intent import INTENT_SYSTEM_PROMPT, PrimaryIntent
from aura_orchestrator.orchestrator.models import OrchestrationStage
from aura_orchestrator.services.orchestration_service import OrchestrationService
from aura_orchestrator.settings import Settings
from fakes import FakeModel, classifier_model, intent_json, make_clients, provider_err

TRANSLATE_INTENT = intent_json(
    "translate",
    ["translate_text"],
    confidence=0.92,
    entities={"fromText": "hello", "toLanguage": "Spanish"},
)


def _service(settings: Settings, **clients: FakeModel) -> OrchestrationService:
    return OrchestrationService(settings=settings, clients=make_clients(**clients))


@pytest.mark.asyncio
async def test_translate_request_completes(settings: Settings) -> None:
    translation = FakeModel("libretranslate")
    svc = _service(settings, fast=classifier_model(TRANSLATE_INTENT), translation=translation)

    outcome = await svc.process_request("Translate 'hello' to Spanish", "u1")

    assert outcome.intent is not None
    assert outcome.intent.primary_intent == PrimaryIntent.translate
    assert outcome.intent.actions == ("translate_text",)
    assert outcome.intent.confidence > 0.5
    assert list(outcome.results) == ["translate_text"]
    assert outcome.results["translate_text"].success
    assert outcome.results["translate_text"].data["translated_text"] == "hola"
    assert translation.calls[0][1] == ("hello", "auto", "Spanish")
    assert outcome.final_response == "openai:generate_text"
    assert outcome.stage == OrchestrationStage.completed


@pytest.mark.asyncio
async def test_missing_image_is_skipped_and_advice_still_runs(settings: Settings) -> None:
    fast = classifier_model(
        intent_json("health", ["analyze_food_image", "provide_nutrition_advice"])
    )
    vision = FakeModel("gemini")
    general = FakeModel("openai")
    svc = _service(settings, fast=fast, vision=vision, general=general)

    outcome = await svc.process_request(
        "Is my diet OK?",
        "u1",
        {"health_data": {"weight": 70, "sleep": 7}},
    )

    assert outcome.skipped == {"analyze_food_image": SkipReason.precondition_unmet}
    assert "analyze_food_image" not in outcome.results
    assert outcome.results["provide_nutrition_advice"].success
    assert vision.calls == []
    assert general.methods() == ["generate_health_advice", "generate_text"]
    synthesis_prompt = general.calls[-1][1][0]
    assert "analyze_food_image: precondition_unmet" in synthesis_prompt
    assert outcome.final_response


@pytest.mark.asyncio
async def test_synthesis_failure_exposes_partial_results(settings: Settings) -> None:
    general = FakeModel("openai", lambda method, _: provider_err("openai", ProviderErrorKind.auth))
    svc = _service(settings, fast=classifier_model(TRANSLATE_INTENT), general=general)

    with pytest.raises(SynthesisError) as excinfo:
        await svc.process_request("Translate 'hello' to Spanish", "u1")

    assert excinfo.value.results["translate_text"].success
    assert excinfo.value.skipped == {}
    # Provider detail is kept for logs but not in the public descriptor.
    assert "auth" in (excinfo.value.detail or "")
    assert "auth" not in excinfo.value.to_descriptor()["message"]


@pytest.mark.asyncio
async def test_identical_requests_yield_identical_intent_and_results(settings: Settings) -> None:
    fast = classifier_model(
        intent_json("notes", ["create_note", "quick_response"], entities={"noteTitle": "Groceries"})
    )
    svc = _service(settings, fast=fast)

    first = await svc.process_request("Remember: eggs and milk", "u1", {"source": "app"})
    second = await svc.process_request("Remember: eggs and milk", "u1", {"source": "app"})

    assert first.intent == second.intent
    assert first.results == second.results
    assert first.skipped == second.skipped
    assert first.results["create_note"].data == {
        "title": "Groceries",
        "content": "Remember: eggs and milk",
    }


@pytest.mark.asyncio
async def test_conversation_context_frames_classification(settings: Settings) -> None:
    fast = classifier_model(intent_json("chat", ["quick_response"]))
    svc = _service(settings, fast=fast)

    await svc.process_request("and tomorrow?", "u1", {"conversation": "We discussed the weather."})

    options = fast.calls[0][2]["options"]
    assert options.system_prompt == f"We discussed the weather.\n\n{INTENT_SYSTEM_PROMPT}"


@pytest.mark.asyncio
async def test_classifier_provider_error_aborts(settings: Settings) -> None:
    general = FakeModel("openai")
    svc = _service(
        settings,
        fast=classifier_model(provider_err("groq", ProviderErrorKind.network)),
        general=general,
    )

    with pytest.raises(ClassificationError) as excinfo:
        await svc.process_request("hello", "u1")

    assert excinfo.value.code == "classification_failed"
    assert general.calls == []


@pytest.mark.asyncio
async def test_unparseable_classification_aborts(settings: Settings) -> None:
    svc = _service(settings, fast=classifier_model("I think this is about health."))

    with pytest.raises(MalformedIntentError):
        await svc.process_request("hello", "u1")


@pytest.mark.asyncio
@pytest.mark.parametrize(("message", "user_id"), [("   ", "u1"), ("hello", "")])
async def test_invalid_single_modal_request(settings: Settings, message: str, user_id: str) -> None:
    fast = classifier_model(intent_json("chat", ["quick_response"]))
    svc = _service(settings, fast=fast)

    with pytest.raises(InvalidRequestError):
        await svc.process_request(message, user_id)

    assert fast.calls == []


@pytest.mark.asyncio
async def test_multimodal_analyses_are_isolated(settings: Settings) -> None:
    speech = FakeModel(
        "whisper", lambda method, _: provider_err("whisper", ProviderErrorKind.timeout)
    )
    general = FakeModel("openai", lambda method, _: Ok("Combined answer."))
    vision = FakeModel("gemini")
    svc = _service(settings, speech=speech, general=general, vision=vision)

    outcome = await svc.process_multimodal(
        user_id="u1",
        text="What is in this picture?",
        image=b"png-bytes",
        image_mime="image/png",
        audio=b"ogg-bytes",
        audio_mime="audio/ogg",
    )

    assert outcome.intent is None
    assert list(outcome.results) == ["quick_response", "analyze_image", "transcribe_audio"]
    assert outcome.results["quick_response"].success
    assert outcome.results["analyze_image"].success
    assert not outcome.results["transcribe_audio"].success
    assert outcome.final_response == "Combined answer."

    assert vision.calls[0][2] == {"mime_type": "image/png"}
    assert speech.calls[0][2] == {"filename": "audio.ogg", "content_type": "audio/ogg"}
    synthesis_prompt = general.calls[0][1][0]
    assert "Text analysis: groq:quick_response" in synthesis_prompt
    assert "Image analysis: gemini:analyze_image" in synthesis_prompt
    assert "Audio transcription: Failed (whisper timeout: boom)" in synthesis_prompt


@pytest.mark.asyncio
async def test_slow_analysis_times_out_while_siblings_complete(settings: Settings) -> None:
    speech = FakeModel("whisper", lambda method, _: asyncio.sleep(2))
    general = FakeModel("openai", lambda method, _: Ok("Partial answer."))
    svc = _service(
        settings.model_copy(update={"action_timeout_s": 0.2}), speech=speech, general=general
    )

    outcome = await svc.process_multimodal(
        user_id="u1", text="Listen to this", image=b"png-bytes", audio=b"wav-bytes"
    )

    assert outcome.results["quick_response"].success
    assert outcome.results["analyze_image"].success
    transcription = outcome.results["transcribe_audio"]
    assert not transcription.success
    assert transcription.error == "timed out after 0.2s"
    assert outcome.final_response == "Partial answer."
    assert outcome.stage == OrchestrationStage.completed
    assert "Audio transcription: Failed (timed out after 0.2s)" in general.calls[0][1][0]


@pytest.mark.asyncio
async def test_colliding_entity_spellings_keep_translation_runnable(settings: Settings) -> None:
    fast = classifier_model(
        '{"intent": "translate", "actions": ["translate_text"], "confidence": 0.9, '
        '"entities": {"toLanguage": "es", "to_language": null, "fromText": "hello"}}'
    )
    translation = FakeModel("libretranslate")
    svc = _service(settings, fast=fast, translation=translation)

    outcome = await svc.process_request("Translate 'hello' to Spanish", "u1")

    assert outcome.skipped == {}
    assert outcome.results["translate_text"].success
    assert translation.calls[0][1] == ("hello", "auto", "es")


@pytest.mark.asyncio
async def test_multimodal_text_only_skips_media_analyses(settings: Settings) -> None:
    svc = _service(settings)

    outcome = await svc.process_multimodal(user_id="u1", text="hi")

    assert list(outcome.results) == ["quick_response"]
    assert outcome.skipped == {
        "analyze_image": SkipReason.precondition_unmet,
        "transcribe_audio": SkipReason.precondition_unmet,
    }


@pytest.mark.asyncio
async def test_multimodal_requires_some_input(settings: Settings) -> None:
    with pytest.raises(InvalidRequestError):
        await _service(settings).process_multimodal(user_id="u1", text="  ")


def test_capabilities_and_status(settings: Settings) -> None:
    svc = _service(settings, image=FakeModel("stability", configured=False))

    caps = svc.get_capabilities()
    status = svc.status()

    assert "translate" in caps.supported_intents
    assert caps.supported_actions[0] == "analyze_food_image"
    assert caps.action_inputs["generate_image"]["entities"] == ["image_prompt"]
    assert caps.action_descriptions["generate_image"] == "Synthesize an image from a text prompt"
    assert set(caps.action_descriptions) == set(caps.supported_actions)
    assert caps.max_files == 3
    assert caps.max_file_size == 10 * 1024 * 1024
    assert "audio/ogg" in caps.supported_file_types
    assert status["status"] == "operational"
    assert status["environment"] == "test"
    assert status["providers"]["stability"] == "missing_credentials"
    assert status["providers"]["groq"] == "configured"
