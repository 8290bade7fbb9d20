"""
aura_orchestrator.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Resolve an optional bearer token into a typed `Principal`.
- Fall back to the anonymous principal when no token is sent.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED

from aura_orchestrator.api.deps import settings_dep
from aura_orchestrator.auth.jwt import JwtConfig, JwtValidationError, decode_principal
from aura_orchestrator.auth.models import ANONYMOUS, Principal
from aura_orchestrator.observability.logging import get_logger
from aura_orchestrator.settings import Settings

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def optional_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Principal:
    # No token: anonymous caller. A token that is present must still be valid.
    if creds is None or not creds.credentials:
        return ANONYMOUS

    try:
        return decode_principal(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        log.info("bearer_rejected", reason=str(e))
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token") from e
