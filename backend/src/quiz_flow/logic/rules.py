"""Rule matching. Among several rules the first match in authoring order wins."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from .conditions import evaluate
from .model import Combinator, Rule


def match_rule(rule: Rule, inputs: Mapping[str, Any]) -> str | None:
    """Return rule.target_step_id when the rule matches inputs, else None."""
    if not rule.conditions:
        return None
    results = (evaluate(c, inputs) for c in rule.conditions)
    if rule.combinator == Combinator.OR:
        matched = any(results)
    else:
        matched = all(results)
    return rule.target_step_id if matched else None


def rule_scope(rule: Rule, step_ids: Sequence[str] = ()) -> str | None:
    """Step a rule fires from.

    An explicit from_step_id wins. Otherwise a rule reading step answers fires
    from the last of those steps in flow order; a rule reading no step answers
    (scores, external fields) is unscoped.
    """
    if rule.from_step_id is not None:
        return rule.from_step_id
    read = {c.field for c in rule.conditions}
    scope = None
    for sid in step_ids:
        if sid in read:
            scope = sid
    return scope


def is_eligible(rule: Rule, current_step: str | None, step_ids: Sequence[str] = ()) -> bool:
    """A rule applies at current_step unless scoped elsewhere or pointing back at it."""
    if current_step is None:
        return True
    scope = rule_scope(rule, step_ids)
    if scope is not None and scope != current_step:
        return False
    return rule.target_step_id != current_step


def first_match(
    rules: Iterable[Rule],
    inputs: Mapping[str, Any],
    current_step: str | None = None,
    step_ids: Sequence[str] = (),
) -> Rule | None:
    for rule in rules:
        if not is_eligible(rule, current_step, step_ids):
            continue
        if match_rule(rule, inputs) is not None:
            return rule
    return None
