"""Release orchestration for one component.

`plan_release` validates preconditions, derives the step list and previews it
through the pipeline engine. `run_release` recomputes the same plan and
executes it, so what was previewed is what runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from relkit.core.component import Component, ReleaseConfig, load_component
from relkit.core.config import Config
from relkit.core.result import Err, Ok, Result
from relkit.core.workspace import Workspace
from relkit.modules.manifest import ModuleManifest
from relkit.modules.registry import LocalModuleRegistry
from relkit.output.console import ConsoleProtocol, Style
from relkit.pipeline import PipelineError
from relkit.pipeline import plan as plan_pipeline
from relkit.pipeline import run as run_pipeline
from relkit.release.collaborators import ReleaseServices
from relkit.release.config import effective_release_config, resolve_project
from relkit.release.errors import ReleaseError
from relkit.release.executor import ReleaseStepExecutor
from relkit.release.model import ReleaseOptions, ReleasePlan, ReleaseRun
from relkit.release.planner import ReleaseSteps, build_release_steps, check_preconditions
from relkit.release.resolver import ReleaseCapabilityResolver
from relkit.release.stores import default_services

__all__ = [
    "ReleaseEnvironment",
    "load_release_environment",
    "plan_release",
    "run_release",
]


@dataclass(frozen=True, slots=True)
class ReleaseEnvironment:
    """Everything a release of one component needs."""

    component: Component
    services: ReleaseServices
    manifests: tuple[ModuleManifest, ...]
    release: ReleaseConfig
    config: Config

    @property
    def enabled(self) -> bool:
        return self.release.enabled is not False

    @property
    def changelog_aliases(self) -> tuple[str, ...]:
        return self.component.changelog_aliases or self.config.changelog.next_section_aliases


def load_release_environment(
    *,
    workspace: Workspace,
    component_id: str,
    config: Config,
) -> Result[ReleaseEnvironment, ReleaseError]:
    component = load_component(workspace, component_id)
    if isinstance(component, Err):
        e = component.error
        return Err(
            ReleaseError(
                kind="config",
                message=e.message,
                hint=str(e.path) if e.path is not None else None,
            )
        )

    registry = LocalModuleRegistry(workspace.modules_dir)
    manifests: list[ModuleManifest] = []
    for module_id in component.value.modules:
        loaded = registry.load(module_id)
        if isinstance(loaded, Err):
            return Err(
                ReleaseError(
                    kind="module_not_found",
                    message=loaded.error.message,
                    hint=f"Install the module under {workspace.modules_dir}",
                )
            )
        manifests.append(loaded.value)

    project = resolve_project(workspace, component_id)
    if isinstance(project, Err):
        e = project.error
        return Err(ReleaseError(kind="config", message=e.message, hint=str(e.path)))

    return Ok(
        ReleaseEnvironment(
            component=component.value,
            services=default_services(component.value, registry),
            manifests=tuple(manifests),
            release=effective_release_config(component.value, project.value, manifests),
            config=config,
        )
    )


def _graph_error(error: PipelineError) -> ReleaseError:
    return ReleaseError(kind="invalid_graph", message=error.message, hint=error.hint)


def _release_steps(
    env: ReleaseEnvironment, options: ReleaseOptions
) -> Result[ReleaseSteps, ReleaseError]:
    services = env.services
    component = env.component

    changelog = services.changelogs.read_changelog(component)
    if isinstance(changelog, Err):
        return changelog
    current = services.versions.read_version(component)
    if isinstance(current, Err):
        return current

    bump = check_preconditions(
        changelog=changelog.value,
        aliases=env.changelog_aliases,
        current_version=current.value.version,
        bump=options.bump_type,
    )
    if isinstance(bump, Err):
        return bump

    status = services.git.status()
    if isinstance(status, Err):
        return Err(
            ReleaseError(
                kind="io",
                message=f"Failed to read git status: {status.error.message}",
                hint=str(component.local_path),
            )
        )

    return Ok(
        build_release_steps(
            bump=bump.value,
            options=options,
            dirty=not status.value.is_clean,
            declared=env.release.steps,
        )
    )


def plan_release(
    *,
    env: ReleaseEnvironment,
    options: ReleaseOptions,
) -> Result[ReleasePlan, ReleaseError]:
    derived = _release_steps(env, options)
    if isinstance(derived, Err):
        return derived
    resolver = ReleaseCapabilityResolver(env.manifests)
    planned = plan_pipeline(derived.value.steps, resolver, enabled=env.enabled)
    if isinstance(planned, Err):
        return Err(_graph_error(planned.error))

    return Ok(
        ReleasePlan(
            component_id=env.component.id,
            enabled=env.enabled,
            steps=tuple(planned.value),
            warnings=derived.value.warnings,
            hints=derived.value.hints,
        )
    )


def run_release(
    *,
    env: ReleaseEnvironment,
    options: ReleaseOptions,
    console: ConsoleProtocol,
    release_date: str | None = None,
) -> Result[ReleaseRun, ReleaseError]:
    """Plan and execute a release; step failures are reported in the run, not as errors."""
    derived = _release_steps(env, options)
    if isinstance(derived, Err):
        return derived
    steps = derived.value.steps
    for warning in derived.value.warnings:
        console.warning(warning)

    executor = ReleaseStepExecutor(
        env.component,
        env.services,
        env.manifests,
        console,
        commit_prefix=env.config.release.commit_prefix,
        changelog_aliases=env.changelog_aliases,
        release_date=release_date or date.today().isoformat(),
    )
    resolver = ReleaseCapabilityResolver(env.manifests)

    console.print(f"release {env.component.id}: {len(steps)} steps", Style.DIM)
    result = run_pipeline(steps, resolver, executor, enabled=env.enabled)
    if isinstance(result, Err):
        return Err(_graph_error(result.error))

    return Ok(ReleaseRun(component_id=env.component.id, enabled=env.enabled, result=result.value))
