"""Effective release configuration.

Release settings can come from three layers, applied in order: the
component's modules, its project, then the component itself. A later layer
replaces ``enabled`` and ``steps`` when it sets them and overrides
``settings`` key by key.
"""

from __future__ import annotations

from collections.abc import Sequence

from relkit.core.component import Component, Project, ReleaseConfig, load_project, projects_using
from relkit.core.config import ConfigError
from relkit.core.result import Err, Ok, Result
from relkit.core.workspace import Workspace
from relkit.modules.manifest import ModuleManifest

__all__ = ["effective_release_config", "merge_release_configs", "resolve_project"]


def merge_release_configs(
    base: ReleaseConfig | None, overlay: ReleaseConfig | None
) -> ReleaseConfig | None:
    if base is None:
        return overlay
    if overlay is None:
        return base
    return ReleaseConfig(
        enabled=overlay.enabled if overlay.enabled is not None else base.enabled,
        steps=overlay.steps or base.steps,
        settings={**base.settings, **overlay.settings},
    )


def effective_release_config(
    component: Component,
    project: Project | None,
    manifests: Sequence[ModuleManifest],
) -> ReleaseConfig:
    merged: ReleaseConfig | None = None
    for manifest in manifests:
        if manifest.id in component.modules:
            merged = merge_release_configs(merged, manifest.release)
    if project is not None:
        merged = merge_release_configs(merged, project.release)
    merged = merge_release_configs(merged, component.release)
    return merged or ReleaseConfig()


def resolve_project(workspace: Workspace, component_id: str) -> Result[Project | None, ConfigError]:
    """The project owning ``component_id``, when exactly one project lists it."""
    owners = projects_using(workspace, component_id)
    if len(owners) != 1:
        return Ok(None)
    project = load_project(workspace, owners[0])
    if isinstance(project, Err):
        return project
    return Ok(project.value)
