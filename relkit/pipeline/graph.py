"""Step graph construction.

`build_graph` validates a step list and computes its execution order. Plan and
run both go through it, so a previewed plan has exactly the step sequence that
will execute.

Ordering is a stable topological sort: among the steps whose prerequisites
are already placed, the one that appears first in the input goes next. A fixed
step list therefore always yields the same sequence.
"""

from __future__ import annotations

import heapq
from collections.abc import Sequence
from dataclasses import dataclass

from relkit.core.result import Err, Ok, Result

from .errors import PipelineError
from .model import PipelineStep

__all__ = ["StepGraph", "build_graph"]


@dataclass(frozen=True, slots=True)
class StepGraph:
    """A validated, acyclic step graph.

    Attributes:
        order: Steps in execution order
        dependents: For each step id, the ids of steps that need it (input order)
    """

    order: tuple[PipelineStep, ...]
    dependents: dict[str, tuple[str, ...]]

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(step.id for step in self.order)


def build_graph(steps: Sequence[PipelineStep]) -> Result[StepGraph, PipelineError]:
    """Validate ``steps`` and order them.

    Returns Err for duplicate ids, ``needs`` entries naming unknown steps, and
    dependency cycles (the error names the cycle).
    """
    position: dict[str, int] = {}
    for index, step in enumerate(steps):
        if step.id in position:
            return Err(
                PipelineError(
                    kind="duplicate_id",
                    message=f"Duplicate step id '{step.id}'",
                    steps=(step.id,),
                    hint="Step ids must be unique within a pipeline.",
                )
            )
        position[step.id] = index

    for step in steps:
        for dep in step.needs:
            if dep not in position:
                return Err(
                    PipelineError(
                        kind="unknown_need",
                        message=f"Step '{step.id}' needs unknown step '{dep}'",
                        steps=(step.id, dep),
                    )
                )

    prereqs: dict[str, set[str]] = {step.id: set(step.needs) for step in steps}
    dependents: dict[str, list[str]] = {step.id: [] for step in steps}
    for step in steps:
        for dep in sorted(prereqs[step.id], key=position.__getitem__):
            dependents[dep].append(step.id)

    remaining = {step_id: len(deps) for step_id, deps in prereqs.items()}
    ready = [position[step_id] for step_id, count in remaining.items() if count == 0]
    heapq.heapify(ready)

    order: list[PipelineStep] = []
    while ready:
        step = steps[heapq.heappop(ready)]
        order.append(step)
        for dependent in dependents[step.id]:
            remaining[dependent] -= 1
            if remaining[dependent] == 0:
                heapq.heappush(ready, position[dependent])

    if len(order) < len(steps):
        placed = {step.id for step in order}
        cycle = _find_cycle(steps, prereqs, placed)
        return Err(
            PipelineError(
                kind="cycle",
                message=f"Dependency cycle: {' -> '.join(cycle)}",
                steps=tuple(cycle),
            )
        )

    return Ok(
        StepGraph(
            order=tuple(order),
            dependents={k: tuple(v) for k, v in dependents.items()},
        )
    )


def _find_cycle(
    steps: Sequence[PipelineStep],
    prereqs: dict[str, set[str]],
    placed: set[str],
) -> list[str]:
    # Every unplaced step has at least one unplaced prerequisite, so following
    # prerequisites from any unplaced step must revisit a step.
    unplaced = [step.id for step in steps if step.id not in placed]
    order_of = {step_id: i for i, step_id in enumerate(unplaced)}

    path: list[str] = []
    seen_at: dict[str, int] = {}
    current = unplaced[0]
    while current not in seen_at:
        seen_at[current] = len(path)
        path.append(current)
        candidates = [dep for dep in prereqs[current] if dep not in placed]
        current = min(candidates, key=order_of.__getitem__)

    cycle = path[seen_at[current] :]
    cycle.append(current)
    return cycle
