"""Pipeline data model.

A pipeline is a list of `PipelineStep` records linked by `needs`. Planning
annotates each step with a `PlanStatus`; running produces one `StepResult`
per step, collected in a `RunResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

__all__ = [
    "CapabilityResolver",
    "PipelineStep",
    "PlanStatus",
    "PlanStep",
    "RunResult",
    "RunStatus",
    "RunSummary",
    "StepExecutor",
    "StepResult",
]


class PlanStatus(StrEnum):
    """Feasibility of a step before execution."""

    READY = "ready"
    MISSING = "missing"
    DISABLED = "disabled"


class RunStatus(StrEnum):
    """Outcome of a step after execution."""

    SUCCESS = "success"
    FAILED = "failed"
    BLOCKED = "blocked"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class PipelineStep:
    """One unit of work.

    Attributes:
        id: Unique id within the pipeline
        type: Step type name, interpreted by the resolver and executor
        label: Optional human-readable description
        needs: Ids of prerequisite steps
        config: Step-specific settings (JSON-compatible values)
    """

    id: str
    type: str
    label: str | None = None
    needs: tuple[str, ...] = ()
    config: dict[str, object] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {"id": self.id, "type": self.type}
        if self.label is not None:
            out["label"] = self.label
        if self.needs:
            out["needs"] = list(self.needs)
        if self.config:
            out["config"] = dict(self.config)
        return out


@dataclass(frozen=True, slots=True)
class PlanStep:
    """A step annotated with its feasibility."""

    step: PipelineStep
    status: PlanStatus
    missing: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return self.step.id

    @property
    def type(self) -> str:
        return self.step.type

    def to_dict(self) -> dict[str, object]:
        out = self.step.to_dict()
        out["status"] = str(self.status)
        if self.missing:
            out["missing"] = list(self.missing)
        return out


@dataclass(frozen=True, slots=True)
class StepResult:
    id: str
    type: str
    status: RunStatus
    data: object | None = None
    error: str | None = None
    hints: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.SUCCESS

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {"id": self.id, "type": self.type, "status": str(self.status)}
        if self.data is not None:
            out["data"] = self.data
        if self.error is not None:
            out["error"] = self.error
        if self.hints:
            out["hints"] = list(self.hints)
        if self.missing:
            out["missing"] = list(self.missing)
        if self.warnings:
            out["warnings"] = list(self.warnings)
        return out


@dataclass(frozen=True, slots=True)
class RunSummary:
    succeeded: int = 0
    failed: int = 0
    blocked: int = 0
    skipped: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "blocked": self.blocked,
            "skipped": self.skipped,
        }


@dataclass(frozen=True, slots=True)
class RunResult:
    """Per-step results in execution order."""

    steps: tuple[StepResult, ...]

    @property
    def overall(self) -> RunSummary:
        def count(status: RunStatus) -> int:
            return sum(1 for s in self.steps if s.status == status)

        return RunSummary(
            succeeded=count(RunStatus.SUCCESS),
            failed=count(RunStatus.FAILED),
            blocked=count(RunStatus.BLOCKED),
            skipped=count(RunStatus.SKIPPED),
        )

    @property
    def has_failures(self) -> bool:
        return self.overall.failed > 0

    def get(self, step_id: str) -> StepResult | None:
        for result in self.steps:
            if result.id == step_id:
                return result
        return None

    def to_dict(self) -> dict[str, object]:
        return {
            "steps": [s.to_dict() for s in self.steps],
            "overall": self.overall.to_dict(),
        }


class CapabilityResolver(Protocol):
    """Decides whether a step type can run in the current environment."""

    def is_supported(self, step_type: str) -> bool: ...

    def missing(self, step_type: str) -> list[str]:
        """Human-readable reasons a type is unsupported (empty if supported)."""
        ...


class StepExecutor(Protocol):
    """Performs the effect of a step.

    Implementations report collaborator failures as a FAILED `StepResult`
    rather than raising.
    """

    def execute_step(self, step: PipelineStep) -> StepResult: ...
