"""Editor session store for flows: save, list, and run scenario tests with event history."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Any, Callable, Iterable, Iterator

from ..config import MAX_PATH_STEPS
from ..logic import DEFAULT_SCENARIOS, DEFAULT_TEMPLATES, Flow, LogicTemplate, Rule, Scenario, TestResult, with_test_results
from ..logic.scenarios import run_scenario

logger = logging.getLogger(__name__)

# Event callback: (event_kind, data) -> None
EventCallback = Callable[[str, dict[str, Any]], None]

# In-memory flow store; test results live here for the session only
_flow_store: dict[str, dict[str, Any]] = {}


def save_flow(flow: Flow) -> str:
    """Store flow under its id (a fresh id when empty). Previous test results are dropped."""
    flow_id = flow.id or uuid.uuid4().hex
    if flow.id != flow_id:
        flow = replace(flow, id=flow_id)
    _flow_store[flow_id] = {"flow": flow, "events": []}
    logger.info("Saved flow %s (%d steps, %d rules)", flow_id, len(flow.step_ids), len(flow.rules))
    return flow_id


def get_flow(flow_id: str) -> Flow | None:
    rec = _flow_store.get(flow_id)
    return rec["flow"] if rec else None


def get_events(flow_id: str) -> list[dict[str, Any]]:
    rec = _flow_store.get(flow_id)
    return list(rec["events"]) if rec else []


def iter_flow_tests(
    flow_id: str,
    scenarios: Iterable[Scenario] | None = None,
    max_steps: int = MAX_PATH_STEPS,
    on_event: EventCallback | None = None,
) -> Iterator[TestResult]:
    """Yield one result per scenario; stores the full run on the flow once exhausted."""
    rec = _flow_store.get(flow_id)
    if rec is None:
        raise KeyError(flow_id)
    flow: Flow = rec["flow"]
    scenarios = tuple(scenarios) if scenarios is not None else DEFAULT_SCENARIOS
    events: list[dict[str, Any]] = []

    def emit(kind: str, data: dict[str, Any]) -> None:
        events.append({"kind": kind, "data": data})
        rec["events"] = list(events)
        if on_event:
            on_event(kind, data)

    emit("TestRunStarted", {"flow_id": flow_id, "scenarios": len(scenarios)})
    results: list[TestResult] = []
    for scenario in scenarios:
        result = run_scenario(flow, scenario, max_steps=max_steps)
        results.append(result)
        emit("ScenarioCompleted", {"flow_id": flow_id, "scenario": result.scenario, "passed": result.passed})
        if not result.passed:
            logger.info("Scenario %r failed on flow %s: %s", result.scenario, flow_id, "; ".join(result.errors))
        yield result

    passed = sum(1 for r in results if r.passed)
    rec["flow"] = with_test_results(flow, results)
    emit("TestRunCompleted", {"flow_id": flow_id, "passed": passed, "total": len(results)})


def run_flow_tests(
    flow_id: str,
    scenarios: Iterable[Scenario] | None = None,
    max_steps: int = MAX_PATH_STEPS,
) -> list[TestResult]:
    return list(iter_flow_tests(flow_id, scenarios, max_steps=max_steps))


def list_flows(page: int = 1, size: int = 20) -> dict[str, Any]:
    items = list(_flow_store.items())
    items.reverse()
    total = len(items)
    start = (page - 1) * size
    end = start + size
    flows = []
    for fid, data in items[start:end]:
        flow: Flow = data["flow"]
        row: dict[str, Any] = {
            "flow_id": fid,
            "name": flow.name,
            "enabled": flow.enabled,
            "steps": len(flow.step_ids),
            "rules": len(flow.rules),
        }
        if flow.last_test_results:
            row["last_passed"] = sum(1 for r in flow.last_test_results if r.passed)
            row["last_total"] = len(flow.last_test_results)
        flows.append(row)
    return {"flows": flows, "total": total}


def all_flows() -> list[Flow]:
    return [rec["flow"] for rec in _flow_store.values()]


def clear_flows() -> None:
    _flow_store.clear()


# Editor rule list and custom templates, as held by the logic manager
_rule_store: list[Rule] = []
_template_store: list[LogicTemplate] = []


def set_rules(rules: Iterable[Rule]) -> None:
    _rule_store[:] = list(rules)


def get_rules() -> list[Rule]:
    return list(_rule_store)


def set_templates(templates: Iterable[LogicTemplate]) -> None:
    _template_store[:] = list(templates)


def get_templates() -> list[LogicTemplate]:
    return list(DEFAULT_TEMPLATES) + list(_template_store)


def clear() -> None:
    _flow_store.clear()
    _rule_store.clear()
    _template_store.clear()
