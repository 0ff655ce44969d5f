"""Pydantic models for API request/response and the logic export document.

Wire names follow the editor's camelCase JSON; unknown operator, combinator
and actionType values are rejected rather than coerced.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .logic import (
    Condition,
    Flow,
    InvalidConditionError,
    LegacyCondition,
    LogicTemplate,
    Question,
    QuestionLogic,
    QuestionOption,
    QuizDocument,
    ResponseBranch,
    Rule,
    Scenario,
)
from .logic.templates import TemplateAction

OperatorName = Literal["equals", "not_equals", "contains", "greater_than", "less_than", "between"]
LegacyOperatorName = Literal["equals", "not_equals", "contains", "greater_than", "less_than"]
ActionTypeName = Literal["next_step", "specific_step", "external_url", "outcome"]
DOCUMENT_ID_PATTERN = r"^[A-Za-z0-9_-]+$"


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ConditionIn(WireModel):
    id: str = ""
    type: Literal["response", "score"] = "response"
    field: str
    operator: OperatorName
    value: Any = None

    @model_validator(mode="after")
    def check_shape(self) -> ConditionIn:
        try:
            self.to_engine()
        except InvalidConditionError as e:
            raise ValueError(str(e)) from e
        return self

    def to_engine(self) -> Condition:
        return Condition(id=self.id, kind=self.type, field=self.field, operator=self.operator, value=self.value)


class RuleIn(WireModel):
    id: str
    conditions: list[ConditionIn] = Field(default_factory=list)
    operator: Literal["AND", "OR"] = "AND"
    next_step_id: str = Field(alias="nextStepId")
    label: str = ""
    kind: Literal["show", "skip", "custom"] = "custom"
    question_id: str | None = Field(default=None, alias="questionId")
    from_step_id: str | None = Field(default=None, alias="fromStepId")

    def to_engine(self) -> Rule:
        return Rule(
            id=self.id,
            conditions=tuple(c.to_engine() for c in self.conditions),
            combinator=self.operator,
            target_step_id=self.next_step_id,
            label=self.label,
            kind=self.kind,
            question_id=self.question_id,
            from_step_id=self.from_step_id,
        )


class BranchIn(WireModel):
    id: str
    response_value: str = Field(alias="responseValue")
    action_type: ActionTypeName = Field(default="next_step", alias="actionType")
    target_step_id: str | None = Field(default=None, alias="targetStepId")
    target_url: str | None = Field(default=None, alias="targetUrl")
    outcome_key: str | None = Field(default=None, alias="outcomeKey")
    conditions: list[ConditionIn] = Field(default_factory=list)

    def to_engine(self) -> ResponseBranch:
        return ResponseBranch(
            id=self.id,
            response_value=self.response_value,
            action_type=self.action_type,
            target_step_id=self.target_step_id,
            target_url=self.target_url,
            outcome_key=self.outcome_key,
            conditions=tuple(c.to_engine() for c in self.conditions),
        )


class FlowIn(WireModel):
    id: str
    name: str = ""
    description: str = ""
    enabled: bool = True
    step_ids: list[str] = Field(alias="questions")
    rules: list[RuleIn] = Field(default_factory=list)
    branches: dict[str, list[BranchIn]] = Field(default_factory=dict)
    outcome_keys: list[str] = Field(default_factory=list, alias="outcomeKeys")

    def to_engine(self) -> Flow:
        # Test results are session-only; an imported flow starts without them.
        return Flow(
            id=self.id,
            step_ids=tuple(self.step_ids),
            rules=tuple(r.to_engine() for r in self.rules),
            name=self.name,
            description=self.description,
            enabled=self.enabled,
            branches={k: tuple(b.to_engine() for b in v) for k, v in self.branches.items()},
            outcome_keys=tuple(self.outcome_keys),
        )


class ScenarioIn(WireModel):
    name: str = Field(alias="scenario")
    inputs: dict[str, Any] = Field(default_factory=dict)
    expected_path: list[str] = Field(default_factory=list, alias="expectedPath")

    def to_engine(self) -> Scenario:
        return Scenario(name=self.name, inputs=self.inputs, expected_path=tuple(self.expected_path))


class LegacyConditionIn(WireModel):
    question_id: str = Field(alias="questionId")
    operator: LegacyOperatorName
    value: str | int | float | bool

    @model_validator(mode="after")
    def check_shape(self) -> LegacyConditionIn:
        try:
            self.to_engine()
        except InvalidConditionError as e:
            raise ValueError(str(e)) from e
        return self

    def to_engine(self) -> LegacyCondition:
        return LegacyCondition(question_id=self.question_id, operator=self.operator, value=self.value)


class QuestionLogicIn(WireModel):
    show_if: list[LegacyConditionIn] = Field(default_factory=list, alias="showIf")
    skip_if: list[LegacyConditionIn] = Field(default_factory=list, alias="skipIf")

    def to_engine(self) -> QuestionLogic:
        return QuestionLogic(
            show_if=tuple(c.to_engine() for c in self.show_if),
            skip_if=tuple(c.to_engine() for c in self.skip_if),
        )


class OptionIn(WireModel):
    id: str
    label: str
    value: str | None = None


class QuestionIn(WireModel):
    id: str
    title: str
    options: list[OptionIn] = Field(default_factory=list)
    logic: QuestionLogicIn | None = None

    def to_engine(self) -> Question:
        return Question(
            id=self.id,
            title=self.title,
            options=tuple(QuestionOption(id=o.id, label=o.label, value=o.value) for o in self.options),
            logic=self.logic.to_engine() if self.logic else QuestionLogic(),
        )


class QuizDocumentIn(WireModel):
    id: str = Field(pattern=DOCUMENT_ID_PATTERN)
    title: str = ""
    questions: list[QuestionIn] = Field(default_factory=list)
    step_ids: list[str] = Field(default_factory=list, alias="stepIds")
    outcomes: dict[str, dict[str, Any]] = Field(default_factory=dict)
    branches: dict[str, list[BranchIn]] = Field(default_factory=dict)

    def to_engine(self) -> QuizDocument:
        return QuizDocument(
            id=self.id,
            title=self.title,
            questions=tuple(q.to_engine() for q in self.questions),
            step_ids=tuple(self.step_ids),
            outcomes=self.outcomes,
            branches={k: tuple(b.to_engine() for b in v) for k, v in self.branches.items()},
        )


class TemplateActionIn(WireModel):
    type: Literal["show_question", "hide_question", "jump_to_question", "set_outcome", "add_tag", "calculate_score"]
    target: str
    value: str | int | float | None = None


class TemplateIn(WireModel):
    id: str
    name: str
    description: str = ""
    category: Literal["scoring", "branching", "filtering", "personalization"]
    conditions: list[ConditionIn] = Field(default_factory=list)
    actions: list[TemplateActionIn] = Field(default_factory=list)

    def to_engine(self) -> LogicTemplate:
        return LogicTemplate(
            id=self.id,
            name=self.name,
            description=self.description,
            category=self.category,
            conditions=tuple(c.to_engine() for c in self.conditions),
            actions=tuple(TemplateAction(type=a.type, target=a.target, value=a.value) for a in self.actions),
        )


class LogicConfig(WireModel):
    """Export document: {version, rules, flows, templates}."""

    version: Literal[1] = 1
    rules: list[RuleIn] = Field(default_factory=list)
    flows: list[FlowIn] = Field(default_factory=list)
    templates: list[TemplateIn] = Field(default_factory=list)


# --- API request/response ---


class EvaluateRequest(BaseModel):
    condition: ConditionIn
    inputs: dict[str, Any] = Field(default_factory=dict)


class EvaluateResponse(BaseModel):
    result: bool


class SimulateRequest(BaseModel):
    flow: FlowIn
    inputs: dict[str, Any] = Field(default_factory=dict)
    max_steps: int | None = Field(default=None, ge=1, le=1000)


class SimulateResponse(BaseModel):
    path: list[str]
    decision: dict[str, Any]
    reason: str


class NextStepRequest(BaseModel):
    flow: FlowIn
    current_step: str
    inputs: dict[str, Any] = Field(default_factory=dict)


class DecisionResponse(BaseModel):
    kind: str
    step_id: str | None = None
    url: str | None = None
    outcome_key: str | None = None
    source_id: str | None = None
    reason: str = ""


class ScenarioRunRequest(BaseModel):
    flow: FlowIn
    scenarios: list[ScenarioIn] | None = None


class ScenarioRunResponse(BaseModel):
    results: list[dict[str, Any]]
    passed: int
    total: int


class ValidateRequest(BaseModel):
    flow: FlowIn


class ValidateResponse(BaseModel):
    valid: bool
    issues: list[dict[str, Any]]


class LegacyDecodeRequest(BaseModel):
    document: QuizDocumentIn


class RulesResponse(BaseModel):
    rules: list[dict[str, Any]]


class LegacyEncodeRequest(BaseModel):
    rules: list[RuleIn]


class LegacyEncodeResponse(BaseModel):
    logic: dict[str, dict[str, Any]]


class FlowSaveResponse(BaseModel):
    flow_id: str


class FlowListItem(BaseModel):
    flow_id: str
    name: str
    enabled: bool
    steps: int
    rules: int
    last_passed: int | None = None
    last_total: int | None = None


class FlowListResponse(BaseModel):
    flows: list[FlowListItem]
    total: int


class FlowTestRequest(BaseModel):
    scenarios: list[ScenarioIn] | None = None


class DocumentSaveResponse(BaseModel):
    document_id: str
    rules: int


class DocumentRulesRequest(BaseModel):
    rules: list[RuleIn]


class DocumentResponse(BaseModel):
    document_id: str
    document: dict[str, Any]
