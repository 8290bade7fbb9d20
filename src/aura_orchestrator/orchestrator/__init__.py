"""
aura_orchestrator.orchestrator

Orchestration package (intent classification, action execution, synthesis, and the
LangGraph state machines that sequence them).

Responsibilities:
- Typed state schema, nodes, reducers, and graph compilation.
- Action registry/executor and response synthesizer.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Public surface area should remain small and stable; call sites should use the service layer.
