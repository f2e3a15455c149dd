"""Pipeline engine: plan and run a step graph.

`plan` is side-effect free: it validates the graph and classifies each step
as ready, missing (the resolver cannot satisfy its type) or disabled (a
prerequisite is unavailable, or the whole pipeline is turned off).

`run` computes the same plan, then executes ready steps in order. A step whose
prerequisite did not succeed is blocked without being executed; failures never
stop independent branches.
"""

from __future__ import annotations

from collections.abc import Sequence

from relkit.core.result import Err, Ok, Result

from .errors import PipelineError
from .graph import StepGraph, build_graph
from .model import (
    CapabilityResolver,
    PipelineStep,
    PlanStatus,
    PlanStep,
    RunResult,
    RunStatus,
    StepExecutor,
    StepResult,
)

__all__ = ["plan", "run"]

PIPELINE_DISABLED = "pipeline disabled"


def plan(
    steps: Sequence[PipelineStep],
    resolver: CapabilityResolver,
    *,
    enabled: bool = True,
) -> Result[list[PlanStep], PipelineError]:
    """Validate ``steps`` and annotate each with its feasibility, in execution order."""
    graph = build_graph(steps)
    if isinstance(graph, Err):
        return graph
    return Ok(_classify(graph.value, resolver, enabled=enabled))


def run(
    steps: Sequence[PipelineStep],
    resolver: CapabilityResolver,
    executor: StepExecutor,
    *,
    enabled: bool = True,
) -> Result[RunResult, PipelineError]:
    """Execute ``steps``; structural errors are returned before anything runs."""
    planned = plan(steps, resolver, enabled=enabled)
    if isinstance(planned, Err):
        return planned

    results: dict[str, StepResult] = {}
    ordered: list[StepResult] = []
    for plan_step in planned.value:
        step = plan_step.step
        if plan_step.status != PlanStatus.READY:
            result = StepResult(
                id=step.id,
                type=step.type,
                status=RunStatus.SKIPPED,
                missing=plan_step.missing,
            )
        elif any(not results[dep].succeeded for dep in step.needs):
            result = StepResult(id=step.id, type=step.type, status=RunStatus.BLOCKED)
        else:
            result = executor.execute_step(step)

        results[step.id] = result
        ordered.append(result)

    return Ok(RunResult(steps=tuple(ordered)))


def _classify(graph: StepGraph, resolver: CapabilityResolver, *, enabled: bool) -> list[PlanStep]:
    if not enabled:
        return [
            PlanStep(step=step, status=PlanStatus.DISABLED, missing=(PIPELINE_DISABLED,))
            for step in graph.order
        ]

    status_of: dict[str, PlanStatus] = {}
    planned: list[PlanStep] = []
    for step in graph.order:
        unavailable = [dep for dep in step.needs if status_of[dep] != PlanStatus.READY]
        supported = resolver.is_supported(step.type)
        reasons = [] if supported else list(resolver.missing(step.type))

        if unavailable:
            status = PlanStatus.DISABLED
            reasons = [f"needs '{dep}' ({status_of[dep]})" for dep in unavailable] + reasons
        elif not supported:
            status = PlanStatus.MISSING
        else:
            status = PlanStatus.READY

        status_of[step.id] = status
        planned.append(PlanStep(step=step, status=status, missing=tuple(reasons)))

    return planned
