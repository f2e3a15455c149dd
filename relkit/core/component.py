"""Component and project records.

A component is one releasable unit of the workspace, described by
`.relkit/components/<id>.toml`:

    local_path = "services/api"
    build_command = ["make", "dist"]
    version_file = "pyproject.toml"
    changelog_file = "CHANGELOG.md"
    modules = ["github"]

    [changelog]
    next_section_aliases = ["Unreleased"]

    [release]
    enabled = true

    [[release.steps]]
    id = "publish"
    type = "publish"

Projects (`.relkit/projects/<id>.toml`) group components and may carry a
shared `[release]` table that components overlay.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .config import ConfigError, parse_toml
from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_list,
    get_str,
    get_str_list,
    get_table,
)
from .workspace import Workspace

__all__ = [
    "Component",
    "Project",
    "ReleaseConfig",
    "ReleaseStepConfig",
    "list_components",
    "load_component",
    "load_project",
    "parse_release_config",
    "projects_using",
]

DEFAULT_VERSION_FILE = "VERSION"
DEFAULT_CHANGELOG_FILE = "CHANGELOG.md"


@dataclass(frozen=True, slots=True)
class ReleaseStepConfig:
    """A step declared in a `[release]` table."""

    id: str
    type: str
    label: str | None = None
    needs: tuple[str, ...] = ()
    config: StrDict = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    enabled: bool | None = None
    steps: tuple[ReleaseStepConfig, ...] = ()
    settings: StrDict = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Component:
    id: str
    local_path: Path
    build_command: tuple[str, ...] | None = None
    version_file: str = DEFAULT_VERSION_FILE
    changelog_file: str = DEFAULT_CHANGELOG_FILE
    modules: tuple[str, ...] = ()
    changelog_aliases: tuple[str, ...] | None = None
    release: ReleaseConfig | None = None

    @property
    def version_path(self) -> Path:
        return self.local_path / self.version_file

    @property
    def changelog_path(self) -> Path:
        return self.local_path / self.changelog_file


@dataclass(frozen=True, slots=True)
class Project:
    id: str
    components: tuple[str, ...] = ()
    release: ReleaseConfig | None = None


def parse_release_config(
    data: Mapping[str, object], *, source: Path | None = None
) -> Result[ReleaseConfig, ConfigError]:
    """Parse a `[release]` table (TOML or JSON shaped)."""
    steps: list[ReleaseStepConfig] = []
    for index, raw in enumerate(get_list(data, "steps") or []):
        step = as_str_dict(raw)
        if step is None:
            return Err(ConfigError(f"release.steps[{index}] must be a table", path=source))
        step_id = get_str(step, "id")
        step_type = get_str(step, "type")
        if step_id is None or step_type is None:
            return Err(
                ConfigError(f"release.steps[{index}] requires 'id' and 'type'", path=source)
            )
        needs = get_str_list(step, "needs")
        if needs is None and "needs" in step:
            return Err(
                ConfigError(f"release.steps[{index}].needs must be a list of ids", path=source)
            )
        steps.append(
            ReleaseStepConfig(
                id=step_id,
                type=step_type,
                label=get_str(step, "label"),
                needs=tuple(needs or ()),
                config=dict(get_table(step, "config") or {}),
            )
        )

    return Ok(
        ReleaseConfig(
            enabled=get_bool(data, "enabled"),
            steps=tuple(steps),
            settings=dict(get_table(data, "settings") or {}),
        )
    )


def _optional_release(
    data: Mapping[str, object], path: Path
) -> Result[ReleaseConfig | None, ConfigError]:
    table = get_table(data, "release")
    if table is None:
        return Ok(None)
    return parse_release_config(table, source=path)


def load_component(workspace: Workspace, component_id: str) -> Result[Component, ConfigError]:
    path = workspace.components_dir / f"{component_id}.toml"
    if not path.is_file():
        available = ", ".join(list_components(workspace)) or "none"
        return Err(
            ConfigError(
                f"Unknown component '{component_id}' (available: {available})",
                path=path,
            )
        )

    parsed = parse_toml(path)
    if isinstance(parsed, Err):
        return parsed
    data = parsed.value

    local = get_str(data, "local_path") or "."
    local_path = Path(local).expanduser()
    if not local_path.is_absolute():
        local_path = workspace.root / local_path

    build_command = get_str_list(data, "build_command")
    changelog = get_table(data, "changelog") or {}
    aliases = get_str_list(changelog, "next_section_aliases")

    release = _optional_release(data, path)
    if isinstance(release, Err):
        return release

    return Ok(
        Component(
            id=get_str(data, "id") or component_id,
            local_path=local_path,
            build_command=tuple(build_command) if build_command else None,
            version_file=get_str(data, "version_file") or DEFAULT_VERSION_FILE,
            changelog_file=get_str(data, "changelog_file") or DEFAULT_CHANGELOG_FILE,
            modules=tuple(sorted(get_str_list(data, "modules") or ())),
            changelog_aliases=tuple(aliases) if aliases else None,
            release=release.value,
        )
    )


def list_components(workspace: Workspace) -> list[str]:
    if not workspace.components_dir.is_dir():
        return []
    return sorted(p.stem for p in workspace.components_dir.glob("*.toml"))


def load_project(workspace: Workspace, project_id: str) -> Result[Project, ConfigError]:
    path = workspace.projects_dir / f"{project_id}.toml"
    parsed = parse_toml(path)
    if isinstance(parsed, Err):
        return parsed
    data = parsed.value

    release = _optional_release(data, path)
    if isinstance(release, Err):
        return release

    return Ok(
        Project(
            id=get_str(data, "id") or project_id,
            components=tuple(get_str_list(data, "components") or ()),
            release=release.value,
        )
    )


def projects_using(workspace: Workspace, component_id: str) -> list[str]:
    """Ids of projects listing ``component_id``; unreadable project files are ignored."""
    if not workspace.projects_dir.is_dir():
        return []
    out: list[str] = []
    for path in sorted(workspace.projects_dir.glob("*.toml")):
        project = load_project(workspace, path.stem)
        if isinstance(project, Ok) and component_id in project.value.components:
            out.append(project.value.id)
    return out
