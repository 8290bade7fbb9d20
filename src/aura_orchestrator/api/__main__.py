"""
aura_orchestrator.api.__main__

Entrypoint: `python -m aura_orchestrator.api` (or the `aura-orchestrator` script).

Responsibilities:
- Load settings from the `AURA_*` environment.
- Create the app and serve it with uvicorn.
"""

from __future__ import annotations

import uvicorn

from aura_orchestrator.api.app import create_app
from aura_orchestrator.settings import get_settings


def main() -> None:
    settings = get_settings()

    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        log_config=None,  # structlog
        # RequestContextMiddleware already emits one `request_completed` line per request.
        access_log=False,
    )


if __name__ == "__main__":
    main()
