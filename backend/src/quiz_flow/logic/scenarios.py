"""Scenario tester: run named answer sets through the walker and diff the paths."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .model import Flow, Scenario, TestResult
from .walker import MAX_PATH_STEPS, walk

ARROW = " → "

# Scenarios the flow tester offers when the author has not written any.
DEFAULT_SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        name="High score respondent",
        inputs={"score": 90, "question_1": "yes", "age_range": "25-35"},
        expected_path=("question_1", "question_3", "outcome_high"),
    ),
    Scenario(
        name="Low score respondent",
        inputs={"score": 30, "question_1": "no", "age_range": "18-25"},
        expected_path=("question_1", "question_2", "outcome_low"),
    ),
    Scenario(
        name="Technology interest",
        inputs={"interests": ["technology", "innovation"], "question_1": "yes"},
        expected_path=("question_1", "tech_questions", "outcome_tech"),
    ),
)


def _diff(expected: tuple[str, ...], actual: tuple[str, ...], hit_bound: bool, max_steps: int) -> list[str]:
    errors = [
        f"Expected path: {ARROW.join(expected)}",
        f"Actual path: {ARROW.join(actual)}",
    ]
    for i, (e, a) in enumerate(zip(expected, actual)):
        if e != a:
            errors.append(f"First difference at step {i + 1}: expected '{e}', got '{a}'")
            break
    else:
        if len(expected) != len(actual):
            errors.append(f"Path length differs: expected {len(expected)}, got {len(actual)}")
    if hit_bound:
        errors.append(f"Walk stopped at the {max_steps}-step limit; the rules probably form a cycle")
    return errors


def run_scenario(flow: Flow, scenario: Scenario, max_steps: int = MAX_PATH_STEPS) -> TestResult:
    result = walk(flow, scenario.inputs, max_steps=max_steps)
    actual = result.path
    passed = actual == scenario.expected_path
    errors = () if passed else tuple(_diff(scenario.expected_path, actual, result.hit_loop_bound, max_steps))
    return TestResult(
        scenario=scenario.name,
        inputs=dict(scenario.inputs),
        expected_path=scenario.expected_path,
        actual_path=actual,
        passed=passed,
        errors=errors,
    )


def run_scenarios(
    flow: Flow,
    scenarios: Iterable[Scenario],
    max_steps: int = MAX_PATH_STEPS,
) -> list[TestResult]:
    """Run each scenario against flow. Does not touch flow; reruns give identical results."""
    return [run_scenario(flow, s, max_steps=max_steps) for s in scenarios]


def with_test_results(flow: Flow, results: Iterable[TestResult]) -> Flow:
    return replace(flow, last_test_results=tuple(results))
