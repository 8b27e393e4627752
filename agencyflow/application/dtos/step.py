"""Step handler contract: the context a handler receives and the result it returns."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Key carried in trigger payloads to bound chains of workflows triggering workflows.
WORKFLOW_DEPTH_KEY = "__workflow_depth"


@dataclass
class StepContext:
    """Mutable state threaded through the steps of one run.

    data starts as a copy of the trigger payload; each successful step's
    output is merged into it, so later steps see earlier results.
    step_outputs keeps each step's output separately, keyed by step_order.
    """

    tenant_id: str
    user_id: str
    workflow_id: str
    run_id: str
    depth: int = 0
    data: dict[str, Any] = field(default_factory=dict)
    step_outputs: dict[int, dict[str, Any]] = field(default_factory=dict)

    def merge_output(self, step_order: int, output: dict[str, Any] | None) -> None:
        if not output:
            return
        self.step_outputs[step_order] = dict(output)
        self.data.update(output)


@dataclass(frozen=True)
class StepResult:
    """What a step handler reports back to the executor.

    halt=True on a successful result stops the run early without failing it
    (used by condition steps whose condition was not met).
    """

    success: bool
    output: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    halt: bool = False

    @classmethod
    def ok(cls, output: dict[str, Any] | None = None, *, halt: bool = False) -> StepResult:
        return cls(success=True, output=output or {}, halt=halt)

    @classmethod
    def failed(cls, error: str, output: dict[str, Any] | None = None) -> StepResult:
        return cls(success=False, output=output or {}, error=error)


def trigger_depth(data: dict[str, Any]) -> int:
    """Return how many workflow hops produced this payload (0 for business events)."""
    try:
        return max(int(data.get(WORKFLOW_DEPTH_KEY, 0)), 0)
    except (TypeError, ValueError):
        return 0
