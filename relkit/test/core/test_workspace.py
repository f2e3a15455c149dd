"""Tests for relkit.core.workspace module."""

from __future__ import annotations

from pathlib import Path

import pytest

from relkit.core.result import Err, Ok
from relkit.core.workspace import (
    WORKSPACE_ENV_VAR,
    Workspace,
    detect_workspace,
    find_workspace_upward,
    is_workspace_root,
)


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    (tmp_path / ".relkit").mkdir()
    return tmp_path


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(WORKSPACE_ENV_VAR, raising=False)


class TestWorkspace:
    def test_paths(self, workspace_root: Path) -> None:
        ws = Workspace(root=workspace_root)
        assert ws.state_dir == workspace_root / ".relkit"
        assert ws.config_path == workspace_root / ".relkit" / "config.toml"
        assert ws.components_dir == workspace_root / ".relkit" / "components"
        assert ws.projects_dir == workspace_root / ".relkit" / "projects"
        assert ws.modules_dir == workspace_root / ".relkit" / "modules"

    def test_str(self, workspace_root: Path) -> None:
        assert str(Workspace(root=workspace_root)) == str(workspace_root)


class TestDetection:
    def test_is_workspace_root(self, workspace_root: Path, tmp_path: Path) -> None:
        assert is_workspace_root(workspace_root) is True
        assert is_workspace_root(tmp_path / "elsewhere") is False

    def test_find_upward(self, workspace_root: Path) -> None:
        nested = workspace_root / "a" / "b"
        nested.mkdir(parents=True)
        assert find_workspace_upward(nested) == workspace_root

    def test_detect_from_start_dir(self, workspace_root: Path) -> None:
        nested = workspace_root / "services"
        nested.mkdir()

        result = detect_workspace(start_dir=nested)

        assert isinstance(result, Ok)
        assert result.value.root == workspace_root.resolve()

    def test_detect_not_found(self, tmp_path: Path) -> None:
        # tmp_path has no .relkit/ and neither do its parents in a test sandbox
        result = detect_workspace(start_dir=tmp_path)
        if isinstance(result, Ok):
            pytest.skip("an ancestor of tmp_path is a relkit workspace")
        assert "not found" in result.error.message

    def test_env_var_wins(
        self, workspace_root: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(WORKSPACE_ENV_VAR, str(workspace_root))

        result = detect_workspace(start_dir=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.root == workspace_root.resolve()

    def test_env_var_invalid(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(WORKSPACE_ENV_VAR, str(tmp_path / "nope"))

        result = detect_workspace()

        assert isinstance(result, Err)
        assert WORKSPACE_ENV_VAR in result.error.message
