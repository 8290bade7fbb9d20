"""
aura_orchestrator.auth.models

Auth domain models.

Responsibilities:
- Define the caller identity (`Principal`) whose subject becomes the orchestration user id.
"""

from __future__ import annotations

from dataclasses import dataclass

ANONYMOUS_SUBJECT = "anonymous"


@dataclass(frozen=True, slots=True)
class Principal:
    subject: str
    roles: frozenset[str] = frozenset()

    @property
    def is_anonymous(self) -> bool:
        return self.subject == ANONYMOUS_SUBJECT


ANONYMOUS = Principal(subject=ANONYMOUS_SUBJECT)
