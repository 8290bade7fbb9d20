"""
aura_orchestrator.capabilities.clients

Composition of the provider clients injected into the orchestrator.

Responsibilities:
- Group one client per provider family behind stable role names.
- Build the default set from Settings and a shared `httpx.AsyncClient`.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from aura_orchestrator.capabilities.gemini import GeminiClient
from aura_orchestrator.capabilities.groq import GroqClient
from aura_orchestrator.capabilities.openai import OpenAIClient
from aura_orchestrator.capabilities.stability import StabilityClient
from aura_orchestrator.capabilities.translate import LibreTranslateClient
from aura_orchestrator.capabilities.whisper import WhisperClient
from aura_orchestrator.settings import Settings


@dataclass(frozen=True, slots=True)
class CapabilityClients:
    """
    Role-named client set. Tests substitute fakes with the same method surface.
    """

    fast: GroqClient
    general: OpenAIClient
    vision: GeminiClient
    image: StabilityClient
    speech: WhisperClient
    translation: LibreTranslateClient

    def configured(self) -> dict[str, bool]:
        return {
            c.provider: c.configured
            for c in (self.fast, self.general, self.vision, self.image, self.speech, self.translation)
        }


def build_clients(*, settings: Settings, http: httpx.AsyncClient) -> CapabilityClients:
    return CapabilityClients(
        fast=GroqClient(settings=settings, http=http),
        general=OpenAIClient(settings=settings, http=http),
        vision=GeminiClient(settings=settings, http=http),
        image=StabilityClient(settings=settings, http=http),
        speech=WhisperClient(settings=settings, http=http),
        translation=LibreTranslateClient(settings=settings, http=http),
    )


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    # One pooled client per process; closed by the app shutdown hook.
    return httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout_s))


# --- Module Notes -----------------------------------------------------------
# Clients hold only read-only configuration, so a single instance set is safely
# shared across concurrent orchestration passes.
