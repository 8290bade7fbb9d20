"""
aura_orchestrator.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide provider credentials from repr/logging.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process-wide configuration:
    - Read once at startup, never mutated afterwards
    - Defaults safe for local dev (no credentials, public endpoints)
    - Single settings object injected into clients, services, and routers
    """

    model_config = SettingsConfigDict(env_prefix="AURA_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "aura-orchestrator"
    service_version: str = "0.1.0"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "aura-orchestrator"
    jwt_audience: str = "aura-api"
    jwt_secret: str = Field(default="dev-secret-change-me-at-least-32-bytes", repr=False)

    # Fast intent model (OpenAI-compatible chat completions)
    groq_api_key: str | None = Field(default=None, repr=False)
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_model: str = "llama3-8b-8192"

    # General-purpose generation + speech-to-text share the OpenAI credential.
    openai_api_key: str | None = Field(default=None, repr=False)
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4"
    openai_vision_model: str = "gpt-4-vision-preview"
    whisper_model: str = "whisper-1"

    # Vision
    gemini_api_key: str | None = Field(default=None, repr=False)
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-pro"
    gemini_vision_model: str = "gemini-pro-vision"

    # Image synthesis
    stability_api_key: str | None = Field(default=None, repr=False)
    stability_base_url: str = "https://api.stability.ai/v1"
    stability_engine: str = "stable-diffusion-xl-1024-v1-0"

    # Translation (LibreTranslate accepts anonymous calls on self-hosted instances)
    translate_api_key: str | None = Field(default=None, repr=False)
    translate_base_url: str = "https://libretranslate.com"

    # Outbound HTTP
    http_timeout_s: float = 120.0

    # Orchestrator
    action_concurrency: int = Field(default=4, ge=1)
    action_timeout_s: float = Field(default=90.0, gt=0)

    # Uploads accepted by the multi-modal endpoint
    max_file_size: int = 10 * 1024 * 1024
    max_files: int = 3


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Provider credentials are optional: a missing key surfaces as an `auth`
# ProviderError on the affected action, startup never requires one.
