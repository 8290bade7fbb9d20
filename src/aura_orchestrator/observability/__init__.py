"""
aura_orchestrator.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Request context propagation for consistent log enrichment.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Orchestration code logs through `get_logger(__name__)` only; renderer choice stays here.
