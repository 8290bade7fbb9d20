"""
aura_orchestrator.orchestrator.reducers

Reducers define how LangGraph merges concurrent/partial state updates.

Why reducers:
- The multi-modal graph runs a true fan-out/fan-in; the three analysis nodes all
  update `results`, `skipped`, and `audit_log` in the same step.
- Reducers provide deterministic merge behavior (append, dict-merge).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


def append_audit(
    left: list[dict[str, Any]] | None, right: list[dict[str, Any]] | None
) -> list[dict[str, Any]]:
    """
    Append-only reducer for audit log entries.

    Nodes should return `{"audit_log": [event]}` and this reducer will concatenate safely.
    """

    if not left:
        return list(right or [])
    if not right:
        return list(left)
    return [*left, *right]


def merge_dicts(
    left: dict[str, Any] | None, right: dict[str, Any] | None
) -> dict[str, Any]:
    """
    Shallow dict merge reducer (right wins on key collision).

    Used for `results` / `skipped`, where each action or analysis contributes its own key.
    """

    if not left:
        return dict(right or {})
    if not right:
        return dict(left)
    return {**left, **right}


STATE_REDUCERS: dict[str, Callable[[Any, Any], Any]] = {
    "results": merge_dicts,
    "skipped": merge_dicts,
    "audit_log": append_audit,
}


def apply_update(snapshot: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """
    Fold one node update (LangGraph stream_mode="updates") into a local snapshot
    using the same reducers the graph applies.
    """

    for key, value in update.items():
        reducer = STATE_REDUCERS.get(key)
        snapshot[key] = reducer(snapshot.get(key), value) if reducer else value
    return snapshot
