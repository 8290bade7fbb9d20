"""
aura_orchestrator.orchestrator.executor

Concurrent action executor with per-action failure isolation.

Responsibilities:
- Resolve the intent's actions against the registry and check preconditions.
- Run all runnable actions concurrently (bounded by a semaphore) and join them
  under a deadline.
- Turn every handler failure (provider error, bad input, timeout) into an
  `ActionResult(success=False)` instead of propagating it.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

from aura_orchestrator.capabilities.base import ProviderFailure
from aura_orchestrator.capabilities.clients import CapabilityClients
from aura_orchestrator.observability.logging import get_logger
from aura_orchestrator.orchestrator.actions import (
    ActionCall,
    ActionRegistry,
    ActionResult,
    ActionSpec,
    SkipReason,
)
from aura_orchestrator.orchestrator.errors import ActionError
from aura_orchestrator.orchestrator.intent import Intent

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ExecutionReport:
    # Both maps follow the intent's action order.
    results: dict[str, ActionResult] = field(default_factory=dict)
    skipped: dict[str, SkipReason] = field(default_factory=dict)


class ActionExecutor:
    """Executes an intent's actions concurrently using the action registry."""

    def __init__(self, *, registry: ActionRegistry, concurrency: int, timeout_s: float) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.registry = registry
        self._concurrency = concurrency
        self._timeout_s = timeout_s

    async def execute(
        self,
        intent: Intent,
        *,
        message: str,
        user_id: str,
        context: dict[str, Any],
        clients: CapabilityClients,
    ) -> ExecutionReport:
        call = ActionCall(
            message=message,
            user_id=user_id,
            clients=clients,
            entities=dict(intent.entities),
            context=dict(context),
        )

        recorded: dict[str, ActionResult] = {}
        skipped: dict[str, SkipReason] = {}
        planned: list[tuple[str, ActionSpec]] = []

        for action_id in intent.actions:
            spec = self.registry.resolve(action_id)
            if spec is None:
                log.warning("action_unsupported", action=action_id)
                skipped[action_id] = SkipReason.unsupported
                continue
            try:
                ready = spec.precondition(call)
            except Exception as exc:  # noqa: BLE001 - a broken check is a recorded failure.
                log.warning("action_precondition_failed", action=action_id, error=str(exc))
                recorded[action_id] = ActionResult.failed(
                    action_id, f"precondition check failed: {exc}"
                )
                continue
            if not ready:
                log.info(
                    "action_skipped",
                    action=action_id,
                    missing=spec.missing_inputs(call),
                )
                skipped[action_id] = SkipReason.precondition_unmet
                continue
            planned.append((action_id, spec))

        semaphore = asyncio.Semaphore(self._concurrency)
        tasks = {
            action_id: asyncio.create_task(self._run(action_id, spec, call, semaphore))
            for action_id, spec in planned
        }
        if tasks:
            _, pending = await asyncio.wait(tasks.values(), timeout=self._timeout_s)
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        results: dict[str, ActionResult] = {}
        for action_id in intent.actions:
            if action_id in recorded:
                results[action_id] = recorded[action_id]
            elif action_id in tasks:
                task = tasks[action_id]
                if task.cancelled():
                    log.warning("action_timed_out", action=action_id, timeout_s=self._timeout_s)
                    results[action_id] = ActionResult.failed(
                        action_id, f"timed out after {self._timeout_s:g}s"
                    )
                else:
                    results[action_id] = task.result()

        ordered_skips = {a: skipped[a] for a in intent.actions if a in skipped}
        return ExecutionReport(results=results, skipped=ordered_skips)

    async def _run(
        self,
        action_id: str,
        spec: ActionSpec,
        call: ActionCall,
        semaphore: asyncio.Semaphore,
    ) -> ActionResult:
        async with semaphore:
            started = time.perf_counter()
            log.info("action_started", action=action_id)
            try:
                data = await spec.handler(call)
            except (ActionError, ProviderFailure) as exc:
                log.warning("action_failed", action=action_id, error=str(exc))
                return ActionResult.failed(action_id, str(exc))
            except Exception:  # noqa: BLE001 - normalize all handler failures.
                log.exception("action_crashed", action=action_id)
                return ActionResult.failed(action_id, f"Failed to execute {action_id}")

            log.info(
                "action_finished",
                action=action_id,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            return ActionResult.succeeded(action_id, data)


# --- Module Notes -----------------------------------------------------------
# Cancelled (timed-out) handlers never write shared state: each one only returns
# its own ActionResult, so abandoning it cannot corrupt the result set.
