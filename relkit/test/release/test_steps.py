"""Tests for release/steps.py and release/resolver.py."""

from __future__ import annotations

import pytest

from relkit.release.resolver import ReleaseCapabilityResolver, resolve_module_actions
from relkit.release.steps import (
    BuiltIn,
    CoreStep,
    PluginAction,
    PluginRuntime,
    action_id_for,
    classify_step,
)

from ._fakes import make_manifest


class TestClassifyStep:
    @pytest.mark.parametrize("step_type", [s.value for s in CoreStep])
    def test_builtin(self, step_type: str) -> None:
        assert classify_step(step_type) == BuiltIn(CoreStep(step_type))

    def test_module_runtime(self) -> None:
        assert classify_step("module.run", {"module": "deployer"}) == PluginRuntime("deployer")
        assert classify_step("module.run") == PluginRuntime(None)

    def test_anything_else_is_plugin_action(self) -> None:
        assert classify_step("publish") == PluginAction("release.publish")
        assert action_id_for("package") == "release.package"


class TestReleaseCapabilityResolver:
    def test_builtins_and_runtime_always_supported(self) -> None:
        resolver = ReleaseCapabilityResolver([])

        for step_type in ["build", "changelog", "version", "git.commit", "git.tag", "git.push"]:
            assert resolver.is_supported(step_type)
            assert resolver.missing(step_type) == []
        assert resolver.is_supported("changes")
        assert resolver.is_supported("module.run")

    def test_action_advertised_by_module(self) -> None:
        resolver = ReleaseCapabilityResolver([make_manifest("github", "release.publish")])

        assert resolver.is_supported("publish") is True
        assert resolver.missing("publish") == []

    def test_unadvertised_action(self) -> None:
        resolver = ReleaseCapabilityResolver([make_manifest("github", "release.publish")])

        assert resolver.is_supported("package") is False
        assert resolver.missing("package") == ["Missing action 'release.package'"]

    def test_resolve_module_actions_keeps_load_order(self) -> None:
        manifests = [
            make_manifest("b", "release.publish"),
            make_manifest("a", "release.notify"),
            make_manifest("c", "release.publish"),
        ]

        found = resolve_module_actions(manifests, "release.publish")

        assert [m.id for m in found] == ["b", "c"]
