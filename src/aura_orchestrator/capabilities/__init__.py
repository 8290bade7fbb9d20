"""
aura_orchestrator.capabilities

Capability client package (one adapter per external provider family).

Responsibilities:
- Uniform `Ok` / `Err` request/response contract.
- Provider-specific transport, auth, and payload shapes.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Orchestration code should depend on `clients.CapabilityClients`, never on a
# provider module directly.
