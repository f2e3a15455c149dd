from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from relkit.pipeline import PlanStep, RunResult

ReleaseBump = Literal["major", "minor", "patch"]
RELEASE_BUMPS: tuple[ReleaseBump, ...] = ("patch", "minor", "major")


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    bump_type: ReleaseBump = "patch"
    dry_run: bool = False
    no_tag: bool = False
    no_push: bool = False
    no_commit: bool = False
    commit_message: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseArtifact:
    path: str
    artifact_type: str | None = None
    platform: str | None = None

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {"path": self.path}
        if self.artifact_type is not None:
            out["artifact_type"] = self.artifact_type
        if self.platform is not None:
            out["platform"] = self.platform
        return out


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    component_id: str
    enabled: bool
    steps: tuple[PlanStep, ...]
    warnings: tuple[str, ...] = ()
    hints: tuple[str, ...] = ()

    @property
    def step_ids(self) -> tuple[str, ...]:
        return tuple(s.id for s in self.steps)

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {
            "component_id": self.component_id,
            "enabled": self.enabled,
            "steps": [s.to_dict() for s in self.steps],
        }
        if self.warnings:
            out["warnings"] = list(self.warnings)
        if self.hints:
            out["hints"] = list(self.hints)
        return out


@dataclass(frozen=True, slots=True)
class ReleaseRun:
    component_id: str
    enabled: bool
    result: RunResult

    def to_dict(self) -> dict[str, object]:
        return {
            "component_id": self.component_id,
            "enabled": self.enabled,
            "result": self.result.to_dict(),
        }


def parse_bump(value: str) -> ReleaseBump | None:
    match value.strip().lower():
        case "patch":
            return "patch"
        case "minor":
            return "minor"
        case "major":
            return "major"
        case _:
            return None
