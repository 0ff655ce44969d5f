"""Run flow scenarios from an exported logic config.

Reads a config exported from the editor ({version, rules, flows, templates})
and a scenarios file, runs every scenario against every enabled flow and
prints the results.

Usage:
  python -m quiz_flow.scripts.run_scenarios quiz-logic.json [scenarios.json]

The scenarios file is a JSON list of {scenario, inputs, expectedPath}; the
built-in scenarios are used when it is omitted. Exit status is 1 when any
scenario fails.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from ..config import MAX_PATH_STEPS, configure_logging
from ..logic import DEFAULT_SCENARIOS, Scenario, run_scenarios
from ..models import ScenarioIn
from ..services.logic_config import LogicConfigError, load_logic_config


def _load_scenarios(path: str | None) -> tuple[Scenario, ...]:
    if not path:
        return DEFAULT_SCENARIOS
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return tuple(ScenarioIn.model_validate(item).to_engine() for item in raw)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run quiz flow scenarios")
    parser.add_argument("config", help="exported logic config (JSON)")
    parser.add_argument("scenarios", nargs="?", help="scenarios file (JSON list)")
    parser.add_argument("--max-steps", type=int, default=MAX_PATH_STEPS)
    args = parser.parse_args(argv)

    configure_logging()
    try:
        imported = load_logic_config(args.config)
    except LogicConfigError as e:
        for err in e.errors:
            print("invalid:", ".".join(str(p) for p in err["loc"]), "-", err["msg"])
        raise SystemExit(f"Invalid config: {args.config}")
    scenarios = _load_scenarios(args.scenarios)

    failed = 0
    for flow in imported.flows:
        if not flow.enabled:
            print(f"flow {flow.id}: disabled, skipped")
            continue
        print(f"flow {flow.id} ({flow.name or 'unnamed'})")
        for result in run_scenarios(flow, scenarios, max_steps=args.max_steps):
            print(f"  [{'PASS' if result.passed else 'FAIL'}] {result.scenario}")
            for err in result.errors:
                print(f"      {err}")
            failed += int(not result.passed)
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
