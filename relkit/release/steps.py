"""Classification of release step types.

A step type is either one of the built-in kinds handled by the executor
itself, ``module.run`` (a module runtime), or the name of a module-provided
action advertised as ``release.<type>``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias

from relkit.core.structured import get_str

__all__ = [
    "MODULE_RUN",
    "BuiltIn",
    "CoreStep",
    "PluginAction",
    "PluginRuntime",
    "StepKind",
    "action_id_for",
    "classify_step",
]

MODULE_RUN = "module.run"
ACTION_PREFIX = "release."


class CoreStep(StrEnum):
    BUILD = "build"
    CHANGELOG = "changelog"
    VERSION = "version"
    GIT_COMMIT = "git.commit"
    GIT_TAG = "git.tag"
    GIT_PUSH = "git.push"
    CHANGES = "changes"


@dataclass(frozen=True, slots=True)
class BuiltIn:
    kind: CoreStep


@dataclass(frozen=True, slots=True)
class PluginAction:
    action_id: str


@dataclass(frozen=True, slots=True)
class PluginRuntime:
    module_id: str | None


StepKind: TypeAlias = BuiltIn | PluginAction | PluginRuntime


def action_id_for(step_type: str) -> str:
    return f"{ACTION_PREFIX}{step_type}"


def classify_step(step_type: str, config: Mapping[str, object] | None = None) -> StepKind:
    if step_type == MODULE_RUN:
        return PluginRuntime(module_id=get_str(config or {}, "module"))
    try:
        return BuiltIn(CoreStep(step_type))
    except ValueError:
        return PluginAction(action_id_for(step_type))
