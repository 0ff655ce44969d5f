"""Flow model: conditions, rules, response branches, flows and quiz documents."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from .errors import InvalidConditionError

END = "end"
SKIP = "skip"
TERMINAL_SENTINELS = frozenset({END, SKIP})


class ConditionKind(str, Enum):
    RESPONSE = "response"
    SCORE = "score"


class Operator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    BETWEEN = "between"


class Combinator(str, Enum):
    AND = "AND"
    OR = "OR"


class RuleKind(str, Enum):
    SHOW = "show"
    SKIP = "skip"
    CUSTOM = "custom"


class BranchAction(str, Enum):
    NEXT_STEP = "next_step"
    SPECIFIC_STEP = "specific_step"
    EXTERNAL_URL = "external_url"
    OUTCOME = "outcome"


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _numeric(v: Any) -> float | None:
    """Number or numeric string as float; None when not numeric."""
    if _is_number(v):
        return float(v)
    if isinstance(v, str) and v.strip():
        try:
            n = float(v)
        except ValueError:
            return None
        return None if math.isnan(n) else n
    return None


def _check_value(operator: str, value: Any) -> Any:
    """Validate the value against the operator's shape; return the stored form."""
    if operator in (Operator.EQUALS, Operator.NOT_EQUALS):
        if isinstance(value, (str, int, float, bool)):
            return value
        if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            return tuple(value)
        raise InvalidConditionError(f"{_enum_value(operator)} expects a scalar or a list of strings, got {value!r}")
    if operator in (Operator.GREATER_THAN, Operator.LESS_THAN):
        if _numeric(value) is None:
            raise InvalidConditionError(f"{_enum_value(operator)} expects a number, got {value!r}")
        return value
    if operator == Operator.CONTAINS:
        if isinstance(value, str) or _is_number(value):
            return value
        raise InvalidConditionError(f"contains expects a string or number, got {value!r}")
    if operator == Operator.BETWEEN:
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise InvalidConditionError(f"between expects a [low, high] pair, got {value!r}")
        low, high = _numeric(value[0]), _numeric(value[1])
        if low is None or high is None or low > high:
            raise InvalidConditionError(f"between expects low <= high, got {value!r}")
        return tuple(value)
    # Unknown operators are kept as-is; the evaluator fails closed on them.
    return value


def _enum_value(v: Any) -> Any:
    return v.value if isinstance(v, Enum) else v


@dataclass(frozen=True)
class Condition:
    """Atomic predicate over one field of the answer bag."""

    id: str
    field: str
    operator: str
    value: Any = None
    kind: ConditionKind = ConditionKind.RESPONSE

    def __post_init__(self) -> None:
        try:
            op = Operator(self.operator)
        except ValueError:
            op = self.operator
        object.__setattr__(self, "operator", op)
        object.__setattr__(self, "kind", ConditionKind(self.kind))
        object.__setattr__(self, "value", _check_value(op, self.value))

    def to_dict(self) -> dict[str, Any]:
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {
            "id": self.id,
            "type": self.kind.value,
            "field": self.field,
            "operator": _enum_value(self.operator),
            "value": value,
        }


@dataclass(frozen=True)
class Rule:
    """Conditions joined by one combinator, mapped to a target step, outcome or sentinel."""

    id: str
    conditions: tuple[Condition, ...]
    target_step_id: str
    combinator: Combinator = Combinator.AND
    label: str = ""
    kind: RuleKind = RuleKind.CUSTOM
    question_id: str | None = None
    from_step_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(self, "combinator", Combinator(self.combinator))
        object.__setattr__(self, "kind", RuleKind(self.kind))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "conditions": [c.to_dict() for c in self.conditions],
            "operator": self.combinator.value,
            "nextStepId": self.target_step_id,
            "label": self.label,
            "kind": self.kind.value,
            "questionId": self.question_id,
            "fromStepId": self.from_step_id,
        }


@dataclass(frozen=True)
class ResponseBranch:
    """Routing attached to one option of a multiple-choice question."""

    id: str
    response_value: str
    action_type: BranchAction = BranchAction.NEXT_STEP
    target_step_id: str | None = None
    target_url: str | None = None
    outcome_key: str | None = None
    conditions: tuple[Condition, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "action_type", BranchAction(self.action_type))
        object.__setattr__(self, "conditions", tuple(self.conditions))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "responseValue": self.response_value,
            "actionType": self.action_type.value,
            "targetStepId": self.target_step_id,
            "targetUrl": self.target_url,
            "outcomeKey": self.outcome_key,
            "conditions": [c.to_dict() for c in self.conditions],
        }


@dataclass(frozen=True)
class Scenario:
    """Named answer set with the path it is expected to produce."""

    name: str
    inputs: Mapping[str, Any]
    expected_path: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", dict(self.inputs))
        object.__setattr__(self, "expected_path", tuple(self.expected_path))


@dataclass(frozen=True)
class TestResult:
    """Outcome of running one scenario against a flow."""

    __test__ = False  # not a pytest class

    scenario: str
    inputs: Mapping[str, Any]
    expected_path: tuple[str, ...]
    actual_path: tuple[str, ...]
    passed: bool
    errors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "scenario": self.scenario,
            "inputs": dict(self.inputs),
            "expectedPath": list(self.expected_path),
            "actualPath": list(self.actual_path),
            "passed": self.passed,
            "errors": list(self.errors),
        }


@dataclass(frozen=True)
class Flow:
    """Ordered steps plus the rules and branches governing transitions between them."""

    id: str
    step_ids: tuple[str, ...]
    rules: tuple[Rule, ...] = ()
    name: str = ""
    description: str = ""
    enabled: bool = True
    branches: Mapping[str, tuple[ResponseBranch, ...]] = field(default_factory=dict)
    outcome_keys: tuple[str, ...] = ()
    last_test_results: tuple[TestResult, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "step_ids", tuple(self.step_ids))
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(self, "branches", {k: tuple(v) for k, v in self.branches.items()})
        object.__setattr__(self, "outcome_keys", tuple(self.outcome_keys))
        object.__setattr__(self, "last_test_results", tuple(self.last_test_results))

    def has_step(self, step_id: str) -> bool:
        return step_id in self.step_ids

    def step_after(self, step_id: str) -> str:
        """Step following step_id in default order, or END when it is the last one."""
        idx = self.step_ids.index(step_id)
        if idx + 1 < len(self.step_ids):
            return self.step_ids[idx + 1]
        return END

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "enabled": self.enabled,
            "questions": list(self.step_ids),
            "rules": [r.to_dict() for r in self.rules],
            "branches": {k: [b.to_dict() for b in v] for k, v in self.branches.items()},
            "outcomeKeys": list(self.outcome_keys),
            "testResults": [t.to_dict() for t in self.last_test_results],
        }


@dataclass(frozen=True)
class LegacyCondition:
    """One showIf/skipIf entry as persisted on a question."""

    question_id: str
    operator: Operator
    value: Any

    def __post_init__(self) -> None:
        op = Operator(self.operator)
        if op == Operator.BETWEEN:
            raise InvalidConditionError("between cannot be stored in showIf/skipIf")
        object.__setattr__(self, "operator", op)
        object.__setattr__(self, "value", _check_value(op, self.value))

    def to_dict(self) -> dict[str, Any]:
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {"questionId": self.question_id, "operator": self.operator.value, "value": value}


@dataclass(frozen=True)
class QuestionLogic:
    show_if: tuple[LegacyCondition, ...] = ()
    skip_if: tuple[LegacyCondition, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "show_if", tuple(self.show_if))
        object.__setattr__(self, "skip_if", tuple(self.skip_if))

    def is_empty(self) -> bool:
        return not self.show_if and not self.skip_if

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.show_if:
            out["showIf"] = [c.to_dict() for c in self.show_if]
        if self.skip_if:
            out["skipIf"] = [c.to_dict() for c in self.skip_if]
        return out


@dataclass(frozen=True)
class QuestionOption:
    id: str
    label: str
    value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "value": self.value}


@dataclass(frozen=True)
class Question:
    id: str
    title: str
    options: tuple[QuestionOption, ...] = ()
    logic: QuestionLogic = field(default_factory=QuestionLogic)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", tuple(self.options))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "options": [o.to_dict() for o in self.options],
        }
        if not self.logic.is_empty():
            out["logic"] = self.logic.to_dict()
        return out


@dataclass(frozen=True)
class QuizDocument:
    """The slice of a quiz document the engine reads."""

    id: str
    questions: tuple[Question, ...]
    title: str = ""
    step_ids: tuple[str, ...] = ()
    outcomes: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    branches: Mapping[str, tuple[ResponseBranch, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "questions", tuple(self.questions))
        object.__setattr__(self, "step_ids", tuple(self.step_ids))
        object.__setattr__(self, "outcomes", dict(self.outcomes))
        object.__setattr__(self, "branches", {k: tuple(v) for k, v in self.branches.items()})

    def get_question(self, question_id: str) -> Question | None:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "questions": [q.to_dict() for q in self.questions],
            "stepIds": list(self.step_ids),
            "outcomes": {k: dict(v) for k, v in self.outcomes.items()},
            "branches": {k: [b.to_dict() for b in v] for k, v in self.branches.items()},
        }

    def to_flow(self, flow_id: str = "main_flow") -> Flow:
        """Default flow over the document: steps in order, legacy logic as rules."""
        from .legacy import decode_legacy_logic

        steps = self.step_ids or tuple(q.id for q in self.questions)
        return Flow(
            id=flow_id,
            step_ids=steps,
            rules=tuple(decode_legacy_logic(self)),
            name="Main flow",
            branches=self.branches,
            outcome_keys=tuple(self.outcomes),
        )
