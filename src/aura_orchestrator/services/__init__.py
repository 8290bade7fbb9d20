"""
aura_orchestrator.services

Service-layer package.

Responsibilities:
- Own the orchestration pass lifecycle (graph execution, stage tracking, error mapping).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services should be pure Python and easily testable with fake capability clients.
