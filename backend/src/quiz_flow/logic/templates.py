"""Built-in logic templates and rule construction from a template."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .model import Combinator, Condition, ConditionKind, Rule, RuleKind


@dataclass(frozen=True)
class TemplateAction:
    type: str
    target: str
    value: str | int | float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "target": self.target, "value": self.value}


@dataclass(frozen=True)
class LogicTemplate:
    id: str
    name: str
    description: str
    category: str
    conditions: tuple[Condition, ...]
    actions: tuple[TemplateAction, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(self, "actions", tuple(self.actions))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "conditions": [c.to_dict() for c in self.conditions],
            "actions": [a.to_dict() for a in self.actions],
        }


DEFAULT_TEMPLATES: tuple[LogicTemplate, ...] = (
    LogicTemplate(
        id="score_based_branching",
        name="Score based branching",
        description="Route respondents by their current score",
        category="scoring",
        conditions=(
            Condition(id="score_high", kind=ConditionKind.SCORE, field="current_score", operator="greater_than", value=80),
        ),
        actions=(TemplateAction(type="jump_to_question", target="advanced_questions", value="high_score_path"),),
    ),
    LogicTemplate(
        id="answer_based_filtering",
        name="Answer based filtering",
        description="Show or hide questions based on a specific answer",
        category="filtering",
        conditions=(Condition(id="answer_yes", field="question_1", operator="equals", value="yes"),),
        actions=(TemplateAction(type="show_question", target="follow_up_question"),),
    ),
    LogicTemplate(
        id="demographic_personalization",
        name="Demographic personalization",
        description="Personalize the experience from demographic answers",
        category="personalization",
        conditions=(Condition(id="age_young", field="age_range", operator="equals", value="18-25"),),
        actions=(TemplateAction(type="add_tag", target="young_audience", value="millennial"),),
    ),
    LogicTemplate(
        id="interest_based_routing",
        name="Interest based routing",
        description="Route the flow by declared interests",
        category="branching",
        conditions=(Condition(id="interest_tech", field="interests", operator="contains", value="technology"),),
        actions=(TemplateAction(type="jump_to_question", target="tech_questions"),),
    ),
)

BUILTIN_TEMPLATE_IDS = frozenset(t.id for t in DEFAULT_TEMPLATES)


def get_template(template_id: str, templates: tuple[LogicTemplate, ...] = DEFAULT_TEMPLATES) -> LogicTemplate | None:
    for t in templates:
        if t.id == template_id:
            return t
    return None


def rule_from_template(template: LogicTemplate, rule_id: str, target_step_id: str) -> Rule:
    """AND rule named after the template; condition ids are prefixed with rule_id."""
    conditions = tuple(
        Condition(
            id=f"{rule_id}_{c.id}",
            kind=c.kind,
            field=c.field,
            operator=c.operator,
            value=c.value,
        )
        for c in template.conditions
    )
    return Rule(
        id=rule_id,
        conditions=conditions,
        combinator=Combinator.AND,
        target_step_id=target_step_id,
        label=template.name,
        kind=RuleKind.CUSTOM,
    )
