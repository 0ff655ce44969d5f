from quiz_flow.logic import (
    DEFAULT_SCENARIOS,
    Condition,
    Flow,
    Rule,
    Scenario,
    run_scenarios,
    with_test_results,
)


def jump_flow():
    return Flow(
        id="f1",
        step_ids=("q1", "q2", "q3"),
        rules=(
            Rule(
                id="r1",
                conditions=(Condition(id="c1", field="q1", operator="equals", value="yes"),),
                target_step_id="q3",
            ),
        ),
    )


def test_passing_scenario_has_no_errors():
    [result] = run_scenarios(jump_flow(), [Scenario("yes jumps", {"q1": "yes"}, ("q1", "q3"))])
    assert result.passed
    assert result.errors == ()
    assert result.actual_path == ("q1", "q3")


def test_failing_scenario_reports_the_first_difference():
    [result] = run_scenarios(jump_flow(), [Scenario("no jumps", {"q1": "no"}, ("q1", "q3"))])
    assert not result.passed
    assert result.errors[0] == "Expected path: q1 → q3"
    assert result.errors[1] == "Actual path: q1 → q2 → q3"
    assert result.errors[2] == "First difference at step 2: expected 'q3', got 'q2'"


def test_prefix_mismatch_reports_length():
    [result] = run_scenarios(jump_flow(), [Scenario("short", {"q1": "no"}, ("q1", "q2"))])
    assert "Path length differs: expected 2, got 3" in result.errors


def test_cycle_is_reported():
    flow = Flow(
        id="loop",
        step_ids=("q1", "q2"),
        rules=(
            Rule(id="a", conditions=(Condition(id="c", field="x", operator="equals", value=1),), target_step_id="q2"),
            Rule(id="b", conditions=(Condition(id="c", field="x", operator="equals", value=1),), target_step_id="q1"),
        ),
    )
    [result] = run_scenarios(flow, [Scenario("loop", {"x": 1}, ("q1", "q2"))])
    assert len(result.actual_path) == 10
    assert any("10-step limit" in e for e in result.errors)


def test_rerun_is_identical_and_flow_untouched():
    flow = jump_flow()
    scenarios = [Scenario("a", {"q1": "yes"}, ("q1", "q3")), Scenario("b", {}, ("q1",))]
    first = run_scenarios(flow, scenarios)
    assert run_scenarios(flow, scenarios) == first
    assert flow == jump_flow()
    assert flow.last_test_results == ()


def test_with_test_results_returns_new_flow():
    flow = jump_flow()
    results = run_scenarios(flow, DEFAULT_SCENARIOS)
    updated = with_test_results(flow, results)
    assert updated.last_test_results == tuple(results)
    assert flow.last_test_results == ()
    assert updated.to_dict()["testResults"][0]["scenario"] == "High score respondent"


def test_default_scenarios_shape():
    assert [s.name for s in DEFAULT_SCENARIOS] == [
        "High score respondent",
        "Low score respondent",
        "Technology interest",
    ]
    assert DEFAULT_SCENARIOS[2].inputs["interests"] == ["technology", "innovation"]
