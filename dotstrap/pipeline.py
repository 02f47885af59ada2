from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .state_store import mark_step_completed

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single idempotent step."""

    step_id: str

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    not_run_steps: List[str]


def run_pipeline(
    *,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order, optionally restricted to a start/stop range."""

    ids = [s.step_id for s in steps]
    for bound in (start_at, stop_after):
        if bound is not None and bound not in ids:
            raise ValueError(f"Unknown step id {bound!r} (known: {', '.join(ids)})")

    ran: List[str] = []
    not_run: List[str] = []

    started = start_at is None
    stopped = False

    for step in steps:
        if not started and step.step_id == start_at:
            started = True
        if not started or stopped:
            not_run.append(step.step_id)
            continue

        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.debug("Running step %s", step.step_id)
        state = step.run(state)
        mark_step_completed(state, step.step_id)
        ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            stopped = True

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, not_run_steps=not_run)
