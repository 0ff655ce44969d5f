"""Engine exceptions. Raised only for invalid calls and invalid construction."""

from __future__ import annotations


class FlowError(Exception):
    """Base class for quiz flow engine errors."""


class InvalidConditionError(FlowError, ValueError):
    """Condition value does not fit its operator."""


class EmptyFlowError(FlowError, ValueError):
    """Flow has no steps to walk."""


class DanglingReferenceError(FlowError, ValueError):
    """Branch or rule points at a step that is not part of the flow."""

    def __init__(self, target: str, source_id: str = "") -> None:
        self.target = target
        self.source_id = source_id
        where = f" (from {source_id})" if source_id else ""
        super().__init__(f"Unknown step '{target}'{where}")
