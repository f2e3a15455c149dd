"""Tests for relkit.core.component module."""

from __future__ import annotations

from pathlib import Path

import pytest

from relkit.core.component import (
    list_components,
    load_component,
    load_project,
    parse_release_config,
    projects_using,
)
from relkit.core.result import Err, Ok
from relkit.core.workspace import Workspace


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    ws = Workspace(root=tmp_path)
    ws.components_dir.mkdir(parents=True)
    ws.projects_dir.mkdir(parents=True)
    return ws


def write_component(ws: Workspace, component_id: str, body: str) -> None:
    (ws.components_dir / f"{component_id}.toml").write_text(body, encoding="utf-8")


class TestLoadComponent:
    def test_full_component(self, workspace: Workspace) -> None:
        write_component(
            workspace,
            "api",
            """
local_path = "services/api"
build_command = ["make", "dist"]
version_file = "pyproject.toml"
modules = ["zeta", "github"]

[changelog]
next_section_aliases = ["Unreleased"]

[release]
enabled = true

[[release.steps]]
id = "publish"
type = "publish"
needs = ["package"]

[release.steps.config]
draft = true
""",
        )

        result = load_component(workspace, "api")

        assert isinstance(result, Ok)
        comp = result.value
        assert comp.id == "api"
        assert comp.local_path == workspace.root / "services" / "api"
        assert comp.build_command == ("make", "dist")
        assert comp.version_path == workspace.root / "services" / "api" / "pyproject.toml"
        assert comp.changelog_path.name == "CHANGELOG.md"
        assert comp.modules == ("github", "zeta")
        assert comp.changelog_aliases == ("Unreleased",)
        assert comp.release is not None
        assert comp.release.enabled is True
        step = comp.release.steps[0]
        assert (step.id, step.type, step.needs) == ("publish", "publish", ("package",))
        assert step.config == {"draft": True}

    def test_defaults(self, workspace: Workspace) -> None:
        write_component(workspace, "web", "")

        result = load_component(workspace, "web")

        assert isinstance(result, Ok)
        comp = result.value
        assert comp.local_path == workspace.root
        assert comp.build_command is None
        assert comp.version_file == "VERSION"
        assert comp.release is None

    def test_absolute_local_path(self, workspace: Workspace, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere"
        write_component(workspace, "lib", f'local_path = "{target.as_posix()}"\n')

        result = load_component(workspace, "lib")

        assert isinstance(result, Ok)
        assert result.value.local_path == target

    def test_unknown_component_lists_available(self, workspace: Workspace) -> None:
        write_component(workspace, "api", "")
        write_component(workspace, "web", "")

        result = load_component(workspace, "cli")

        assert isinstance(result, Err)
        assert "Unknown component 'cli'" in result.error.message
        assert "api, web" in result.error.message

    def test_invalid_release_step(self, workspace: Workspace) -> None:
        write_component(workspace, "api", '[[release.steps]]\nid = "x"\n')

        result = load_component(workspace, "api")

        assert isinstance(result, Err)
        assert "requires 'id' and 'type'" in result.error.message

    def test_list_components(self, workspace: Workspace) -> None:
        write_component(workspace, "web", "")
        write_component(workspace, "api", "")
        assert list_components(workspace) == ["api", "web"]


class TestParseReleaseConfig:
    def test_empty(self) -> None:
        result = parse_release_config({})
        assert isinstance(result, Ok)
        assert result.value.enabled is None
        assert result.value.steps == ()
        assert result.value.settings == {}

    def test_step_must_be_table(self) -> None:
        result = parse_release_config({"steps": ["publish"]})
        assert isinstance(result, Err)
        assert "must be a table" in result.error.message

    def test_needs_must_be_strings(self) -> None:
        result = parse_release_config({"steps": [{"id": "a", "type": "b", "needs": [1]}]})
        assert isinstance(result, Err)
        assert "needs" in result.error.message


class TestProjects:
    def test_load_project(self, workspace: Workspace) -> None:
        (workspace.projects_dir / "shop.toml").write_text(
            'components = ["api", "web"]\n[release]\nenabled = false\n', encoding="utf-8"
        )

        result = load_project(workspace, "shop")

        assert isinstance(result, Ok)
        assert result.value.components == ("api", "web")
        assert result.value.release is not None
        assert result.value.release.enabled is False

    def test_projects_using(self, workspace: Workspace) -> None:
        (workspace.projects_dir / "shop.toml").write_text('components = ["api"]\n')
        (workspace.projects_dir / "admin.toml").write_text('components = ["api", "web"]\n')
        (workspace.projects_dir / "broken.toml").write_text("components = [\n")

        assert projects_using(workspace, "api") == ["admin", "shop"]
        assert projects_using(workspace, "web") == ["admin"]
        assert projects_using(workspace, "cli") == []
