"""Mapping between rules and the per-question showIf/skipIf shape stored on quiz documents.

Decoding tags each rule with an explicit kind (show/skip) and owning question,
and encoding classifies by that kind alone, so renaming a rule's label no
longer loses it on save. The mapping is still lossy:

- custom rules have no legacy representation and are dropped;
- a rule with several conditions is flattened into one entry per condition,
  which decodes back as several single-condition AND rules;
- ``between`` conditions cannot be stored in the legacy shape and are dropped.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .model import (
    SKIP,
    Combinator,
    Condition,
    ConditionKind,
    LegacyCondition,
    Operator,
    QuestionLogic,
    QuizDocument,
    Rule,
    RuleKind,
)

SHOW_PREFIX = "Mostrar"
SKIP_PREFIX = "Pular"

LEGACY_OPERATORS = frozenset(
    {Operator.EQUALS, Operator.NOT_EQUALS, Operator.CONTAINS, Operator.GREATER_THAN, Operator.LESS_THAN}
)


def _rule_from_entry(question_id: str, title: str, kind: RuleKind, index: int, entry: LegacyCondition) -> Rule:
    condition = Condition(
        id=f"condition_{index}",
        kind=ConditionKind.RESPONSE,
        field=entry.question_id,
        operator=entry.operator,
        value=entry.value,
    )
    if kind == RuleKind.SHOW:
        return Rule(
            id=f"{question_id}_show_{index}",
            conditions=(condition,),
            combinator=Combinator.AND,
            target_step_id=question_id,
            label=f"{SHOW_PREFIX} {title}",
            kind=RuleKind.SHOW,
            question_id=question_id,
        )
    return Rule(
        id=f"{question_id}_skip_{index}",
        conditions=(condition,),
        combinator=Combinator.AND,
        target_step_id=SKIP,
        label=f"{SKIP_PREFIX} {title}",
        kind=RuleKind.SKIP,
        question_id=question_id,
    )


def decode_legacy_logic(document: QuizDocument) -> list[Rule]:
    """One rule per showIf/skipIf entry, in question order then show before skip."""
    rules: list[Rule] = []
    for question in document.questions:
        logic = question.logic
        for i, entry in enumerate(logic.show_if):
            rules.append(_rule_from_entry(question.id, question.title, RuleKind.SHOW, i, entry))
        for i, entry in enumerate(logic.skip_if):
            rules.append(_rule_from_entry(question.id, question.title, RuleKind.SKIP, i, entry))
    return rules


def _owner(rule: Rule) -> str | None:
    if rule.question_id:
        return rule.question_id
    # Show rules point at their own question.
    if rule.kind == RuleKind.SHOW:
        return rule.target_step_id
    return None


def _entries(rule: Rule) -> list[LegacyCondition]:
    return [
        LegacyCondition(question_id=c.field, operator=c.operator, value=c.value)
        for c in rule.conditions
        if c.operator in LEGACY_OPERATORS
    ]


def encode_legacy_logic(rules: Iterable[Rule]) -> dict[str, QuestionLogic]:
    """Group show/skip rules by owning question. Custom and ownerless rules are dropped."""
    show: dict[str, list[LegacyCondition]] = {}
    skip: dict[str, list[LegacyCondition]] = {}
    order: list[str] = []
    for rule in rules:
        if rule.kind == RuleKind.CUSTOM:
            continue
        owner = _owner(rule)
        if not owner:
            continue
        entries = _entries(rule)
        if not entries:
            continue
        if owner not in order:
            order.append(owner)
        bucket = show if rule.kind == RuleKind.SHOW else skip
        bucket.setdefault(owner, []).extend(entries)
    return {
        qid: QuestionLogic(show_if=tuple(show.get(qid, ())), skip_if=tuple(skip.get(qid, ())))
        for qid in order
    }


def apply_legacy_logic(document: QuizDocument, encoded: dict[str, QuestionLogic]) -> QuizDocument:
    """New document whose question logic is replaced by encoded; absent questions get none."""
    questions = tuple(
        replace(q, logic=encoded.get(q.id, QuestionLogic())) for q in document.questions
    )
    return replace(document, questions=questions)
