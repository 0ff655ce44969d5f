"""Authoring-time checks. The walker halts quietly on bad references; this reports them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .model import TERMINAL_SENTINELS, BranchAction, Flow


@dataclass(frozen=True)
class ValidationIssue:
    severity: str  # "error" | "warning"
    code: str
    message: str
    rule_id: str | None = None
    branch_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "rule_id": self.rule_id,
            "branch_id": self.branch_id,
        }


def _known_target(flow: Flow, target: str) -> bool:
    return target in TERMINAL_SENTINELS or flow.has_step(target) or target in flow.outcome_keys


def validate_flow(flow: Flow) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    seen: set[str] = set()
    for sid in flow.step_ids:
        if sid in seen:
            issues.append(ValidationIssue("error", "duplicate_step", f"Step '{sid}' appears more than once"))
        seen.add(sid)

    for rule in flow.rules:
        if not rule.conditions:
            issues.append(
                ValidationIssue("warning", "empty_rule", f"Rule '{rule.id}' has no conditions and never fires", rule_id=rule.id)
            )
        if not _known_target(flow, rule.target_step_id):
            issues.append(
                ValidationIssue(
                    "error",
                    "dangling_target",
                    f"Rule '{rule.id}' targets unknown step '{rule.target_step_id}'",
                    rule_id=rule.id,
                )
            )
        if rule.from_step_id is not None and rule.from_step_id == rule.target_step_id:
            issues.append(
                ValidationIssue("warning", "self_target", f"Rule '{rule.id}' targets its own step", rule_id=rule.id)
            )

    for step_id, branches in flow.branches.items():
        if not flow.has_step(step_id):
            for b in branches:
                issues.append(
                    ValidationIssue(
                        "error",
                        "dangling_branch",
                        f"Branch '{b.id}' is attached to unknown step '{step_id}'",
                        branch_id=b.id,
                    )
                )
            continue
        for b in branches:
            if b.action_type == BranchAction.SPECIFIC_STEP and not flow.has_step(b.target_step_id or ""):
                issues.append(
                    ValidationIssue(
                        "error",
                        "dangling_branch",
                        f"Branch '{b.id}' targets unknown step '{b.target_step_id or ''}'",
                        branch_id=b.id,
                    )
                )
            elif b.action_type == BranchAction.EXTERNAL_URL and not b.target_url:
                issues.append(
                    ValidationIssue("error", "missing_url", f"Branch '{b.id}' has no target URL", branch_id=b.id)
                )
            elif b.action_type == BranchAction.OUTCOME and not b.outcome_key:
                issues.append(
                    ValidationIssue("error", "missing_outcome", f"Branch '{b.id}' has no outcome key", branch_id=b.id)
                )
            elif (
                b.action_type == BranchAction.OUTCOME
                and flow.outcome_keys
                and b.outcome_key not in flow.outcome_keys
            ):
                issues.append(
                    ValidationIssue(
                        "warning",
                        "missing_outcome",
                        f"Branch '{b.id}' routes to undefined outcome '{b.outcome_key}'",
                        branch_id=b.id,
                    )
                )
    return issues
