from __future__ import annotations

import pytest

from aura_orchestrator.settings import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test", action_timeout_s=5.0)
