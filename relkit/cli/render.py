"""Human-readable rendering of release plans and runs."""

from __future__ import annotations

from relkit.output.console import ConsoleProtocol, Style
from relkit.pipeline import RunStatus
from relkit.release.model import ReleasePlan, ReleaseRun

_STATUS_STYLE = {
    RunStatus.SUCCESS: Style.SUCCESS,
    RunStatus.FAILED: Style.ERROR,
    RunStatus.BLOCKED: Style.WARNING,
    RunStatus.SKIPPED: Style.DIM,
}


def render_plan(console: ConsoleProtocol, plan: ReleasePlan) -> None:
    rows = [
        [
            step.id,
            step.type,
            step.step.label or "",
            ", ".join(step.step.needs),
            str(step.status),
            "; ".join(step.missing),
        ]
        for step in plan.steps
    ]
    console.table(
        f"Release plan: {plan.component_id}",
        ["Step", "Type", "Label", "Needs", "Status", "Missing"],
        rows,
    )
    if not plan.enabled:
        console.warning("Release is disabled for this component")
    for warning in plan.warnings:
        console.warning(warning)
    for hint in plan.hints:
        console.print(f"hint: {hint}", Style.DIM)


def render_run(console: ConsoleProtocol, run: ReleaseRun) -> None:
    console.header(f"Release run: {run.component_id}")
    for step in run.result.steps:
        line = f"{step.id} ({step.type}): {step.status}"
        if step.error:
            line += f" - {step.error}"
        console.print(line, _STATUS_STYLE[step.status])
        for reason in step.missing:
            console.print(f"  missing: {reason}", Style.DIM)
        for hint in step.hints:
            console.print(f"  hint: {hint}", Style.DIM)

    overall = run.result.overall
    summary = (
        f"{overall.succeeded} succeeded, {overall.failed} failed, "
        f"{overall.blocked} blocked, {overall.skipped} skipped"
    )
    if overall.failed:
        console.error(summary)
    else:
        console.success(summary)
