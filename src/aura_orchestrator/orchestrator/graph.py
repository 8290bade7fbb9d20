from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from langgraph.graph import END, StateGraph

from aura_orchestrator.orchestrator.nodes import (
    OrchestratorDeps,
    analyze_audio_node,
    analyze_image_node,
    analyze_text_node,
    classify_node,
    entry_node,
    execute_node,
    join_node,
    multimodal_entry_node,
    synthesize_multimodal_node,
    synthesize_node,
)
from aura_orchestrator.orchestrator.state import OrchestrationState

ANALYSIS_NODES: tuple[str, ...] = ("analyze_text", "analyze_image", "analyze_audio")


def build_graph(*, deps: OrchestratorDeps):
    """
    Single-modal pass: entry -> classify -> execute -> synthesize.

    Returns a compiled LangGraph runnable.
    """

    graph = StateGraph(OrchestrationState)

    graph.add_node("entry", entry_node)
    graph.add_node("classify", _bind_deps(classify_node, deps))
    graph.add_node("execute", _bind_deps(execute_node, deps))
    graph.add_node("synthesize", _bind_deps(synthesize_node, deps))

    graph.set_entry_point("entry")

    graph.add_edge("entry", "classify")
    graph.add_edge("classify", "execute")
    graph.add_edge("execute", "synthesize")
    graph.add_edge("synthesize", END)

    return graph.compile()


def build_multimodal_graph(*, deps: OrchestratorDeps):
    """
    Multi-modal pass: entry fans out to the three analyses, which join before synthesis.

    Returns a compiled LangGraph runnable.
    """

    graph = StateGraph(OrchestrationState)

    graph.add_node("entry", multimodal_entry_node)
    graph.add_node("analyze_text", _bind_deps(analyze_text_node, deps))
    graph.add_node("analyze_image", _bind_deps(analyze_image_node, deps))
    graph.add_node("analyze_audio", _bind_deps(analyze_audio_node, deps))
    graph.add_node("join", join_node)
    graph.add_node("synthesize_multimodal", _bind_deps(synthesize_multimodal_node, deps))

    graph.set_entry_point("entry")

    for node in ANALYSIS_NODES:
        graph.add_edge("entry", node)
    # A list source waits for every analysis before `join` runs.
    graph.add_edge(list(ANALYSIS_NODES), "join")
    graph.add_edge("join", "synthesize_multimodal")
    graph.add_edge("synthesize_multimodal", END)

    return graph.compile()


def _bind_deps(
    fn: Callable[..., Awaitable[dict[str, Any]]],
    deps: OrchestratorDeps,
) -> Callable[[OrchestrationState], Awaitable[dict[str, Any]]]:
    async def _wrapped(state: OrchestrationState) -> dict[str, Any]:
        return await fn(state, deps=deps)

    return _wrapped
