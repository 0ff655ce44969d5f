"""Per-option response branching (funnels)."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .conditions import evaluate
from .decision import Decision, DecisionKind, step
from .errors import DanglingReferenceError
from .model import END, BranchAction, Flow, Question, QuestionOption, ResponseBranch


def _qualifies(branch: ResponseBranch, inputs: Mapping[str, Any]) -> bool:
    # The option match is implied by the caller's filter; only extra conditions are checked.
    return all(evaluate(c, inputs) for c in branch.conditions)


def resolve_branch(
    branches: Iterable[ResponseBranch],
    selected_option_id: str,
    inputs: Mapping[str, Any],
) -> ResponseBranch | None:
    """First branch authored for selected_option_id whose extra conditions hold, else None."""
    for branch in branches:
        if branch.response_value != selected_option_id:
            continue
        if _qualifies(branch, inputs):
            return branch
    return None


def resolve_answer(
    branches: Iterable[ResponseBranch],
    answer: Any,
    inputs: Mapping[str, Any],
) -> ResponseBranch | None:
    """Resolve a raw answer; multi-select answers try each selected option in order."""
    branches = tuple(branches)
    if not branches or answer is None:
        return None
    selected = answer if isinstance(answer, (list, tuple)) else (answer,)
    for option_id in selected:
        if not isinstance(option_id, str):
            continue
        branch = resolve_branch(branches, option_id, inputs)
        if branch is not None:
            return branch
    return None


def branch_decision(branch: ResponseBranch, flow: Flow, current_step: str) -> Decision:
    """Translate a resolved branch into a routing decision within flow.

    Raises DanglingReferenceError when a specific_step branch targets a step the
    flow does not contain; that is an authoring error, not a respondent one.
    """
    action = branch.action_type
    if action == BranchAction.NEXT_STEP:
        if not flow.has_step(current_step):
            raise DanglingReferenceError(current_step, branch.id)
        nxt = flow.step_after(current_step)
        if nxt == END:
            return Decision(DecisionKind.END, source_id=branch.id, reason="branch")
        return step(nxt, source_id=branch.id, reason="branch")
    if action == BranchAction.SPECIFIC_STEP:
        target = branch.target_step_id or ""
        if not flow.has_step(target):
            raise DanglingReferenceError(target, branch.id)
        return step(target, source_id=branch.id, reason="branch")
    if action == BranchAction.EXTERNAL_URL:
        return Decision(DecisionKind.EXTERNAL, url=branch.target_url, source_id=branch.id, reason="branch")
    return Decision(DecisionKind.OUTCOME, outcome_key=branch.outcome_key, source_id=branch.id, reason="branch")


def unbranched_options(question: Question, branches: Iterable[ResponseBranch]) -> list[QuestionOption]:
    """Options of question that have no branch authored for them."""
    branched = {b.response_value for b in branches}
    return [opt for opt in question.options if opt.id not in branched]
