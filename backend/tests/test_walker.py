import pytest

from quiz_flow.logic import (
    END,
    Condition,
    DanglingReferenceError,
    DecisionKind,
    EmptyFlowError,
    Flow,
    FlowWalker,
    ResponseBranch,
    Rule,
    StopReason,
    next_step,
    simulate,
    walk,
)


def rule(rule_id, field, value, target, **kw):
    return Rule(
        id=rule_id,
        conditions=(Condition(id=f"{rule_id}_c", field=field, operator="equals", value=value),),
        target_step_id=target,
        **kw,
    )


def test_no_rules_follows_default_order(three_steps):
    assert simulate(three_steps, {}) == ["q1", "q2", "q3"]


def test_matching_rule_jumps_ahead():
    flow = Flow(id="f1", step_ids=("q1", "q2", "q3"), rules=(rule("r1", "q1", "yes", "q3"),))
    assert simulate(flow, {"q1": "yes"}) == ["q1", "q3"]


def test_non_matching_rule_keeps_default_order():
    flow = Flow(id="f1", step_ids=("q1", "q2", "q3"), rules=(rule("r1", "q1", "yes", "q3"),))
    assert simulate(flow, {"q1": "no"}) == ["q1", "q2", "q3"]


def test_skip_target_ends_the_path():
    flow = Flow(id="f1", step_ids=("q1", "q2", "q3"), rules=(rule("r1", "q1", "yes", "skip"),))
    result = walk(flow, {"q1": "yes"})
    assert result.path == ("q1",)
    assert result.decision.kind == DecisionKind.SKIP
    assert result.reason == StopReason.TERMINAL


def test_end_target_ends_the_path():
    flow = Flow(id="f1", step_ids=("q1", "q2", "q3"), rules=(rule("r1", "q1", "yes", END),))
    assert simulate(flow, {"q1": "yes"}) == ["q1"]


def test_two_rule_cycle_stops_at_bound():
    flow = Flow(
        id="loop",
        step_ids=("q1", "q2", "q3"),
        rules=(rule("r1", "x", "1", "q2"), rule("r2", "x", "1", "q1")),
    )
    result = walk(flow, {"x": "1"})
    assert len(result.path) == 10
    assert list(result.path[:4]) == ["q1", "q2", "q1", "q2"]
    assert result.hit_loop_bound


def test_custom_bound():
    flow = Flow(
        id="loop",
        step_ids=("q1", "q2"),
        rules=(rule("r1", "x", "1", "q2"), rule("r2", "x", "1", "q1")),
    )
    assert len(simulate(flow, {"x": "1"}, max_steps=3)) == 3
    with pytest.raises(ValueError):
        FlowWalker(max_steps=0)


def test_walk_is_deterministic():
    flow = Flow(
        id="f1",
        step_ids=("q1", "q2", "q3", "q4"),
        rules=(rule("r1", "q1", "yes", "q3"), rule("r2", "q3", "a", "q1")),
    )
    inputs = {"q1": "yes", "q3": "a"}
    assert walk(flow, inputs) == walk(flow, inputs)


def test_empty_flow_raises():
    with pytest.raises(EmptyFlowError):
        simulate(Flow(id="empty", step_ids=()), {})


def test_unknown_start_step_raises(three_steps):
    with pytest.raises(DanglingReferenceError):
        walk(three_steps, {}, start_step="nope")


def test_outcome_target_is_appended_and_stops():
    flow = Flow(
        id="f1",
        step_ids=("q1", "q2"),
        rules=(rule("r1", "q1", "yes", "result_a"),),
        outcome_keys=("result_a",),
    )
    result = walk(flow, {"q1": "yes"})
    assert result.path == ("q1", "result_a")
    assert result.reason == StopReason.OUTCOME
    assert result.decision.outcome_key == "result_a"


def test_unknown_rule_target_halts_without_raising():
    flow = Flow(id="f1", step_ids=("q1", "q2"), rules=(rule("r1", "q1", "yes", "ghost"),))
    result = walk(flow, {"q1": "yes"})
    assert result.path == ("q1",)
    assert result.decision.kind == DecisionKind.HALT
    assert result.reason == StopReason.DANGLING


def test_rule_scoped_with_from_step():
    flow = Flow(
        id="f1",
        step_ids=("q1", "q2", "q3", "q4"),
        rules=(rule("r1", "q1", "yes", "q4", from_step_id="q2"),),
    )
    assert simulate(flow, {"q1": "yes"}) == ["q1", "q2", "q4"]


def test_branch_takes_precedence_over_rules():
    flow = Flow(
        id="f1",
        step_ids=("q1", "q2", "q3"),
        rules=(rule("r1", "q1", "opt_a", "q2", from_step_id="q1"),),
        branches={"q1": (ResponseBranch(id="b1", response_value="opt_a", action_type="specific_step", target_step_id="q3"),)},
    )
    decision = next_step(flow, "q1", {"q1": "opt_a"})
    assert decision.step_id == "q3"
    assert decision.source_id == "b1"
    assert simulate(flow, {"q1": "opt_a"}) == ["q1", "q3"]


def test_external_branch_is_terminal_with_url():
    flow = Flow(
        id="f1",
        step_ids=("q1", "q2"),
        branches={
            "q1": (
                ResponseBranch(
                    id="b1",
                    response_value="budget_high",
                    action_type="external_url",
                    target_url="https://example.com/premium",
                ),
            )
        },
    )
    result = walk(flow, {"q1": "budget_high"})
    assert result.path == ("q1",)
    assert result.reason == StopReason.EXTERNAL
    assert result.decision.url == "https://example.com/premium"


def test_dangling_branch_raises_from_next_step_but_halts_walk():
    flow = Flow(
        id="f1",
        step_ids=("q1", "q2"),
        branches={"q1": (ResponseBranch(id="b1", response_value="a", action_type="specific_step", target_step_id="gone"),)},
    )
    with pytest.raises(DanglingReferenceError) as exc:
        next_step(flow, "q1", {"q1": "a"})
    assert exc.value.target == "gone"
    assert exc.value.source_id == "b1"

    result = walk(flow, {"q1": "a"})
    assert result.path == ("q1",)
    assert result.reason == StopReason.DANGLING


def test_last_step_default_is_end(three_steps):
    assert next_step(three_steps, "q3", {}).kind == DecisionKind.END
    assert next_step(three_steps, "q1", {}).step_id == "q2"


def test_walker_emits_events(three_steps):
    events = []
    FlowWalker(on_event=lambda kind, data: events.append((kind, data))).walk(three_steps, {})
    kinds = [k for k, _ in events]
    assert kinds[0] == "WalkStarted"
    assert kinds.count("StepVisited") == 3
    assert kinds[-1] == "WalkCompleted"
    assert events[-1][1]["path"] == ["q1", "q2", "q3"]


def test_forward_jump_does_not_refire_after_target():
    flow = Flow(id="f1", step_ids=("q1", "q2", "q3", "q4"), rules=(rule("r1", "q1", "yes", "q3"),))
    result = walk(flow, {"q1": "yes"})
    assert result.path == ("q1", "q3", "q4")
    assert result.reason == StopReason.TERMINAL


def test_legacy_show_rules_fire_from_the_step_they_read():
    flow = Flow(
        id="f1",
        step_ids=("q1", "q2", "q3", "q4", "q5"),
        rules=(rule("q4_show_0", "q2", "b", "q4"),),
    )
    assert simulate(flow, {"q2": "b"}) == ["q1", "q2", "q4", "q5"]


def test_first_matching_rule_wins_during_walk():
    jump_q3 = rule("to_q3", "q1", "yes", "q3")
    jump_q4 = rule("to_q4", "q1", "yes", "q4")
    flow = Flow(id="f1", step_ids=("q1", "q2", "q3", "q4"), rules=(jump_q3, jump_q4))
    assert simulate(flow, {"q1": "yes"}) == ["q1", "q3", "q4"]

    reordered = Flow(id="f1", step_ids=("q1", "q2", "q3", "q4"), rules=(jump_q4, jump_q3))
    assert simulate(reordered, {"q1": "yes"}) == ["q1", "q4"]
