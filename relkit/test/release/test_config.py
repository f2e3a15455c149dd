"""Tests for release/config.py."""

from __future__ import annotations

from pathlib import Path

from relkit.core.component import Project, ReleaseConfig
from relkit.core.result import Ok
from relkit.core.workspace import Workspace
from relkit.release.config import effective_release_config, merge_release_configs, resolve_project

from ._fakes import make_component, make_manifest, publish_step


class TestMergeReleaseConfigs:
    def test_none_layers(self) -> None:
        config = ReleaseConfig(enabled=True)
        assert merge_release_configs(None, config) is config
        assert merge_release_configs(config, None) is config
        assert merge_release_configs(None, None) is None

    def test_overlay_wins_when_set(self) -> None:
        base = ReleaseConfig(enabled=True, steps=(publish_step(),), settings={"a": 1, "b": 1})
        overlay = ReleaseConfig(enabled=False, settings={"b": 2})

        merged = merge_release_configs(base, overlay)

        assert merged == ReleaseConfig(
            enabled=False, steps=(publish_step(),), settings={"a": 1, "b": 2}
        )

    def test_unset_enabled_keeps_base(self) -> None:
        merged = merge_release_configs(ReleaseConfig(enabled=False), ReleaseConfig())
        assert merged is not None
        assert merged.enabled is False


class TestEffectiveReleaseConfig:
    def test_layers_apply_module_project_component(self) -> None:
        module = make_manifest(
            "github",
            "release.publish",
            release=ReleaseConfig(steps=(publish_step(),), settings={"repo": "mod"}),
        )
        project = Project(
            id="suite", components=("api",), release=ReleaseConfig(settings={"repo": "project"})
        )
        component = make_component(
            modules=("github",), release=ReleaseConfig(enabled=False, settings={"draft": True})
        )

        config = effective_release_config(component, project, [module])

        assert config.enabled is False
        assert config.steps == (publish_step(),)
        assert config.settings == {"repo": "project", "draft": True}

    def test_unlisted_modules_are_ignored(self) -> None:
        module = make_manifest("other", release=ReleaseConfig(enabled=False))

        config = effective_release_config(make_component(), None, [module])

        assert config == ReleaseConfig()


class TestResolveProject:
    def _workspace(self, tmp_path: Path) -> Workspace:
        (tmp_path / ".relkit" / "projects").mkdir(parents=True)
        return Workspace(root=tmp_path)

    def _write(self, ws: Workspace, name: str, body: str) -> None:
        (ws.projects_dir / f"{name}.toml").write_text(body, encoding="utf-8")

    def test_single_owner(self, tmp_path: Path) -> None:
        ws = self._workspace(tmp_path)
        self._write(ws, "suite", 'components = ["api", "web"]\n[release]\nenabled = false\n')

        result = resolve_project(ws, "api")

        assert isinstance(result, Ok)
        assert result.value is not None
        assert result.value.id == "suite"
        assert result.value.release == ReleaseConfig(enabled=False)

    def test_ambiguous_owner(self, tmp_path: Path) -> None:
        ws = self._workspace(tmp_path)
        self._write(ws, "one", 'components = ["api"]\n')
        self._write(ws, "two", 'components = ["api"]\n')

        assert resolve_project(ws, "api") == Ok(None)

    def test_no_owner(self, tmp_path: Path) -> None:
        assert resolve_project(self._workspace(tmp_path), "api") == Ok(None)
