"""
aura_orchestrator.auth

Authentication package.

Responsibilities:
- JWT helpers and validation.
- FastAPI dependency resolving the (optional) caller identity.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# User and session management live outside this service; only token validation happens here.
