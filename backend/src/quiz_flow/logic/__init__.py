"""Conditional flow decision engine: evaluator, rule matcher, branch resolver, walker."""

from .model import (
    END,
    SKIP,
    BranchAction,
    Combinator,
    Condition,
    ConditionKind,
    Flow,
    LegacyCondition,
    Operator,
    Question,
    QuestionLogic,
    QuestionOption,
    QuizDocument,
    ResponseBranch,
    Rule,
    RuleKind,
    Scenario,
    TestResult,
)
from .decision import Decision, DecisionKind
from .errors import DanglingReferenceError, EmptyFlowError, FlowError, InvalidConditionError
from .conditions import evaluate
from .rules import match_rule, first_match
from .branches import resolve_branch, resolve_answer, branch_decision, unbranched_options
from .walker import MAX_PATH_STEPS, FlowWalker, StopReason, WalkResult, next_step, simulate, walk
from .legacy import decode_legacy_logic, encode_legacy_logic, apply_legacy_logic
from .scenarios import DEFAULT_SCENARIOS, run_scenarios, with_test_results
from .templates import DEFAULT_TEMPLATES, LogicTemplate, rule_from_template
from .validation import ValidationIssue, validate_flow

__all__ = [
    "END",
    "SKIP",
    "BranchAction",
    "Combinator",
    "Condition",
    "ConditionKind",
    "Flow",
    "LegacyCondition",
    "Operator",
    "Question",
    "QuestionLogic",
    "QuestionOption",
    "QuizDocument",
    "ResponseBranch",
    "Rule",
    "RuleKind",
    "Scenario",
    "TestResult",
    "Decision",
    "DecisionKind",
    "DanglingReferenceError",
    "EmptyFlowError",
    "FlowError",
    "InvalidConditionError",
    "evaluate",
    "match_rule",
    "first_match",
    "resolve_branch",
    "resolve_answer",
    "branch_decision",
    "unbranched_options",
    "MAX_PATH_STEPS",
    "FlowWalker",
    "StopReason",
    "WalkResult",
    "next_step",
    "simulate",
    "walk",
    "decode_legacy_logic",
    "encode_legacy_logic",
    "apply_legacy_logic",
    "DEFAULT_SCENARIOS",
    "run_scenarios",
    "with_test_results",
    "DEFAULT_TEMPLATES",
    "LogicTemplate",
    "rule_from_template",
    "ValidationIssue",
    "validate_flow",
]
