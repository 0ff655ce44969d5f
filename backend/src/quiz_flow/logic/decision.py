"""Routing decision returned by the walker and the branch resolver."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DecisionKind(str, Enum):
    STEP = "step"
    END = "end"
    SKIP = "skip"
    OUTCOME = "outcome"
    EXTERNAL = "external"
    HALT = "halt"


@dataclass(frozen=True)
class Decision:
    """Where to go after a step. Everything but STEP ends the in-engine path."""

    kind: DecisionKind
    step_id: str | None = None
    url: str | None = None
    outcome_key: str | None = None
    source_id: str | None = None
    reason: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.kind != DecisionKind.STEP

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "step_id": self.step_id,
            "url": self.url,
            "outcome_key": self.outcome_key,
            "source_id": self.source_id,
            "reason": self.reason,
        }


def step(step_id: str, source_id: str | None = None, reason: str = "") -> Decision:
    return Decision(DecisionKind.STEP, step_id=step_id, source_id=source_id, reason=reason)
