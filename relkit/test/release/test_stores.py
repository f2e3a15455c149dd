"""Tests for release/stores.py."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from relkit.core.result import Err, Ok
from relkit.release.stores import (
    FileChangelogStore,
    FileVersionStore,
    ProcessBuildRunner,
    version_pattern_for,
)

from ._fakes import make_component


class TestFileVersionStore:
    @pytest.mark.parametrize(
        ("filename", "content", "expected"),
        [
            ("pyproject.toml", '[project]\nname = "api"\nversion = "1.2.3"\n', "1.2.3"),
            ("package.json", '{\n  "name": "web",\n  "version": "0.4.1"\n}\n', "0.4.1"),
            ("plugin.php", "<?php\n/*\n * Version: 2.0.0\n */\n", "2.0.0"),
            ("VERSION", "3.1.4\n", "3.1.4"),
        ],
    )
    def test_read(self, tmp_path: Path, filename: str, content: str, expected: str) -> None:
        (tmp_path / filename).write_text(content, encoding="utf-8")
        component = make_component(local_path=tmp_path, version_file=filename)

        result = FileVersionStore().read_version(component)

        assert isinstance(result, Ok)
        assert result.value.version == expected
        assert result.value.path == tmp_path / filename

    def test_write_replaces_first_occurrence_only(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text(
            '[project]\nversion = "1.2.3"\n\n[tool.x]\nversion = "9.9.9"\n', encoding="utf-8"
        )
        component = make_component(local_path=tmp_path, version_file="pyproject.toml")

        result = FileVersionStore().write_version(component, "1.3.0")

        assert isinstance(result, Ok)
        assert path.read_text(encoding="utf-8") == (
            '[project]\nversion = "1.3.0"\n\n[tool.x]\nversion = "9.9.9"\n'
        )

    def test_json_pattern_ignores_dependency_versions(self) -> None:
        pattern = version_pattern_for(Path("package.json"))
        m = pattern.search('{"dependencies": {"x": "1.0.0"}, "version": "2.1.0"}')
        assert m is not None and m.group(1) == "2.1.0"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = FileVersionStore().read_version(make_component(local_path=tmp_path))

        assert isinstance(result, Err)
        assert result.error.kind == "config"
        assert "Version file not found" in result.error.message

    def test_no_version_in_file(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION").write_text("dev\n", encoding="utf-8")

        result = FileVersionStore().read_version(make_component(local_path=tmp_path))

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"


class TestFileChangelogStore:
    def test_round_trip(self, tmp_path: Path) -> None:
        component = make_component(local_path=tmp_path)
        store = FileChangelogStore()

        assert store.write_changelog(component, "## Unreleased\n- a\n") == Ok(None)
        assert store.read_changelog(component) == Ok("## Unreleased\n- a\n")


class TestProcessBuildRunner:
    def test_no_build_command(self, tmp_path: Path) -> None:
        result = ProcessBuildRunner().run_build(make_component(local_path=tmp_path))

        assert isinstance(result, Err)
        assert result.error.kind == "config"
        assert "has no build_command" in result.error.message

    def test_non_zero_exit_is_reported_not_raised(self, tmp_path: Path) -> None:
        command = (sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(4)")
        component = make_component(local_path=tmp_path, build_command=command)

        result = ProcessBuildRunner().run_build(component)

        assert isinstance(result, Ok)
        assert result.value.exit_code == 4
        assert result.value.stderr == "bad"
        assert result.value.success is False

    def test_runs_in_component_directory(self, tmp_path: Path) -> None:
        command = (sys.executable, "-c", "import os; print(os.getcwd())")
        component = make_component(local_path=tmp_path, build_command=command)

        result = ProcessBuildRunner().run_build(component)

        assert isinstance(result, Ok)
        assert Path(result.value.stdout.strip()).resolve() == tmp_path.resolve()
