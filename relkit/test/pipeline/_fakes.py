"""Fake resolver and executor for engine tests."""

from __future__ import annotations

from collections.abc import Iterable

from relkit.pipeline import PipelineStep, RunStatus, StepResult


class FakeResolver:
    def __init__(self, unsupported: Iterable[str] = ()) -> None:
        self.unsupported = set(unsupported)

    def is_supported(self, step_type: str) -> bool:
        return step_type not in self.unsupported

    def missing(self, step_type: str) -> list[str]:
        if step_type in self.unsupported:
            return [f"Missing action 'release.{step_type}'"]
        return []


class RecordingExecutor:
    """Succeeds every step except the ids listed in ``fail``."""

    def __init__(self, fail: Iterable[str] = ()) -> None:
        self.fail = set(fail)
        self.calls: list[str] = []

    def execute_step(self, step: PipelineStep) -> StepResult:
        self.calls.append(step.id)
        if step.id in self.fail:
            return StepResult(
                id=step.id,
                type=step.type,
                status=RunStatus.FAILED,
                error=f"{step.id} broke",
                hints=("try again",),
            )
        return StepResult(
            id=step.id, type=step.type, status=RunStatus.SUCCESS, data={"ran": step.id}
        )


def step(step_id: str, *needs: str, type: str = "noop") -> PipelineStep:
    return PipelineStep(id=step_id, type=type, needs=tuple(needs))
