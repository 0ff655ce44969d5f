"""Flow walker: turns a flow and an answer bag into the ordered path of visited steps."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

from .branches import branch_decision, resolve_answer
from .decision import Decision, DecisionKind, step
from .errors import DanglingReferenceError, EmptyFlowError
from .model import END, SKIP, Flow
from .rules import first_match

# Hard cap on visited steps; cyclic rule sets stop here instead of looping forever.
MAX_PATH_STEPS = 10

# Event callback: (event_kind, data) -> None
EventCallback = Callable[[str, dict[str, Any]], None]


class StopReason(str, Enum):
    TERMINAL = "terminal"
    OUTCOME = "outcome"
    EXTERNAL = "external"
    DANGLING = "dangling"
    LOOP_BOUND = "loop_bound"


@dataclass(frozen=True)
class WalkResult:
    path: tuple[str, ...]
    decision: Decision
    reason: StopReason

    @property
    def hit_loop_bound(self) -> bool:
        return self.reason == StopReason.LOOP_BOUND

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": list(self.path),
            "decision": self.decision.to_dict(),
            "reason": self.reason.value,
        }


def _target_decision(flow: Flow, target: str, source_id: str) -> Decision:
    if target == END:
        return Decision(DecisionKind.END, source_id=source_id, reason="rule")
    if target == SKIP:
        return Decision(DecisionKind.SKIP, source_id=source_id, reason="rule")
    if flow.has_step(target):
        return step(target, source_id=source_id, reason="rule")
    if target in flow.outcome_keys:
        return Decision(DecisionKind.OUTCOME, outcome_key=target, source_id=source_id, reason="rule")
    return Decision(DecisionKind.HALT, step_id=target, source_id=source_id, reason="dangling")


def next_step(flow: Flow, current_step: str, inputs: Mapping[str, Any]) -> Decision:
    """Decide where to go after current_step.

    Precedence: the response branch for the selected option, then the first
    matching rule in authoring order, then the next step in default order.
    """
    branch = resolve_answer(flow.branches.get(current_step, ()), inputs.get(current_step), inputs)
    if branch is not None:
        return branch_decision(branch, flow, current_step)

    rule = first_match(flow.rules, inputs, current_step, flow.step_ids)
    if rule is not None:
        return _target_decision(flow, rule.target_step_id, rule.id)

    if not flow.has_step(current_step):
        return Decision(DecisionKind.HALT, step_id=current_step, reason="dangling")
    nxt = flow.step_after(current_step)
    if nxt == END:
        return Decision(DecisionKind.END, reason="default")
    return step(nxt, reason="default")


class FlowWalker:
    """Bounded walk over a flow, with event emission for previews and logs."""

    def __init__(
        self,
        max_steps: int = MAX_PATH_STEPS,
        on_event: EventCallback | None = None,
    ) -> None:
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        self.max_steps = max_steps
        self._on_event = on_event or (lambda k, d: None)

    def walk(
        self,
        flow: Flow,
        inputs: Mapping[str, Any],
        start_step: str | None = None,
    ) -> WalkResult:
        if not flow.step_ids:
            raise EmptyFlowError(f"Flow '{flow.id}' has no steps")
        current = start_step or flow.step_ids[0]
        if not flow.has_step(current):
            raise DanglingReferenceError(current, flow.id)

        self._on_event("WalkStarted", {"flow_id": flow.id, "start_step": current})
        path: list[str] = []
        decision = step(current)
        while len(path) < self.max_steps:
            path.append(current)
            self._on_event("StepVisited", {"flow_id": flow.id, "step_id": current, "index": len(path) - 1})
            try:
                decision = next_step(flow, current, inputs)
            except DanglingReferenceError as e:
                decision = Decision(DecisionKind.HALT, step_id=e.target, source_id=e.source_id, reason="dangling")

            if decision.kind == DecisionKind.STEP:
                current = decision.step_id
                continue
            return self._finish(flow, path, decision)

        result = WalkResult(path=tuple(path), decision=decision, reason=StopReason.LOOP_BOUND)
        self._on_event("WalkCompleted", {"flow_id": flow.id, **result.to_dict()})
        return result

    def _finish(self, flow: Flow, path: list[str], decision: Decision) -> WalkResult:
        if decision.kind == DecisionKind.OUTCOME:
            reason = StopReason.OUTCOME
            if decision.outcome_key and len(path) < self.max_steps:
                path.append(decision.outcome_key)
        elif decision.kind == DecisionKind.EXTERNAL:
            reason = StopReason.EXTERNAL
        elif decision.kind == DecisionKind.HALT:
            reason = StopReason.DANGLING
        else:
            reason = StopReason.TERMINAL
        result = WalkResult(path=tuple(path), decision=decision, reason=reason)
        self._on_event("WalkCompleted", {"flow_id": flow.id, **result.to_dict()})
        return result


def walk(
    flow: Flow,
    inputs: Mapping[str, Any],
    max_steps: int = MAX_PATH_STEPS,
    start_step: str | None = None,
) -> WalkResult:
    return FlowWalker(max_steps=max_steps).walk(flow, inputs, start_step=start_step)


def simulate(flow: Flow, inputs: Mapping[str, Any], max_steps: int = MAX_PATH_STEPS) -> list[str]:
    """Ordered step ids visited from the first step until a terminal marker or the step cap."""
    return list(walk(flow, inputs, max_steps=max_steps).path)
