"""Workspace detection and paths.

A relkit workspace is the root directory of a multi-component project. It is
identified by a `.relkit/` directory holding configuration:

    .relkit/
        config.toml            optional workspace defaults
        components/<id>.toml   one file per component
        projects/<id>.toml     optional project groupings
        modules/<id>/module.json
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "Workspace",
    "WorkspaceError",
    "detect_workspace",
    "find_workspace_upward",
    "is_workspace_root",
]

WORKSPACE_ENV_VAR = "RELKIT_ROOT"


@dataclass(frozen=True, slots=True)
class WorkspaceError:
    """Error when workspace cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Workspace:
    """A detected relkit workspace."""

    root: Path

    @property
    def state_dir(self) -> Path:
        """Path to the `.relkit/` directory."""
        return self.root / ".relkit"

    @property
    def config_path(self) -> Path:
        return self.state_dir / "config.toml"

    @property
    def components_dir(self) -> Path:
        return self.state_dir / "components"

    @property
    def projects_dir(self) -> Path:
        return self.state_dir / "projects"

    @property
    def modules_dir(self) -> Path:
        return self.state_dir / "modules"

    def __str__(self) -> str:
        return str(self.root)


def is_workspace_root(path: Path) -> bool:
    return (path / ".relkit").is_dir()


def find_workspace_upward(start: Path) -> Path | None:
    """Search upward from start for a directory containing `.relkit/`."""
    for parent in (start, *start.parents):
        if is_workspace_root(parent):
            return parent
    return None


def detect_workspace(
    *,
    start_dir: Path | None = None,
    env_var: str = WORKSPACE_ENV_VAR,
) -> Result[Workspace, WorkspaceError]:
    """Detect the workspace root.

    Detection order:
    1. $RELKIT_ROOT (if set, it must point at a valid workspace)
    2. Search upward from start_dir (or cwd)
    """
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir() and is_workspace_root(env_path):
            return Ok(Workspace(root=env_path))
        return Err(
            WorkspaceError(
                message=f"${env_var} is set to '{env_value}' but it is not a valid workspace",
                searched_from=env_path if env_path.is_dir() else None,
            )
        )

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_workspace_upward(search_start)
    if found is None:
        return Err(
            WorkspaceError(
                message="Could not find workspace (.relkit/ not found)",
                searched_from=search_start,
            )
        )
    return Ok(Workspace(root=found))
