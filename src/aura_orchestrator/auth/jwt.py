"""
aura_orchestrator.auth.jwt

JWT issuing and validation helpers.

Responsibilities:
- Issue short-lived HS256 tokens for local/dev callers.
- Validate bearer tokens (iss/aud/exp/iat/sub required) and map claims to a `Principal`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from aura_orchestrator.auth.models import Principal
from aura_orchestrator.settings import Settings

REQUIRED_CLAIMS = ("exp", "iat", "iss", "aud", "sub")


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
        )


class JwtValidationError(Exception):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    roles: list[str] | None = None,
    ttl: timedelta = timedelta(hours=1),
) -> str:
    issued_at = datetime.now(tz=UTC)
    claims: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "roles": sorted(set(roles or [])),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
    }
    return jwt.encode(claims, cfg.secret, algorithm=cfg.alg)


def decode_principal(*, cfg: JwtConfig, token: str) -> Principal:
    """
    The subject becomes the orchestration `user_id`, so it must be a non-empty string.
    """

    try:
        claims = jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={"require": list(REQUIRED_CLAIMS)},
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise JwtValidationError("token subject is empty")
    roles = claims.get("roles", [])
    if not isinstance(roles, list):
        raise JwtValidationError("token roles must be a list")

    return Principal(subject=subject, roles=frozenset(str(r) for r in roles))
