"""Release preconditions and step derivation.

`check_preconditions` validates the changelog and version; `build_release_steps`
turns the options and the declared publish steps into the pipeline step list.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from relkit.core.component import ReleaseStepConfig
from relkit.core.result import Err, Ok, Result
from relkit.pipeline import PipelineStep
from relkit.release.changelog import (
    check_next_section_content,
    has_version_section,
    unreleased_error,
)
from relkit.release.errors import ReleaseError
from relkit.release.model import ReleaseOptions
from relkit.release.semver import increment_version
from relkit.release.steps import PluginAction, PluginRuntime, classify_step

PRE_RELEASE_COMMIT_ID = "pre-release.commit"
DEFAULT_PRE_RELEASE_MESSAGE = "pre-release changes"


@dataclass(frozen=True, slots=True)
class VersionBump:
    old: str
    new: str

    @property
    def tag(self) -> str:
        return f"v{self.new}"


@dataclass(frozen=True, slots=True)
class ReleaseSteps:
    steps: tuple[PipelineStep, ...]
    warnings: tuple[str, ...] = ()
    hints: tuple[str, ...] = ()


def check_preconditions(
    *,
    changelog: str,
    aliases: Sequence[str],
    current_version: str,
    bump: str,
) -> Result[VersionBump, ReleaseError]:
    """Validate the changelog and version before any step is built."""
    error = unreleased_error(check_next_section_content(changelog, aliases), aliases)
    if error is not None:
        return Err(error)

    new_version = increment_version(current_version, bump)
    if isinstance(new_version, Err):
        return new_version

    if has_version_section(changelog, new_version.value):
        return Err(
            ReleaseError(
                kind="version_exists",
                message=f"Changelog already has a section for {new_version.value}",
                hint="Remove the stale section or pick another bump",
            )
        )
    return Ok(VersionBump(old=current_version, new=new_version.value))


def is_publish_step(step: ReleaseStepConfig) -> bool:
    match classify_step(step.type, step.config):
        case PluginAction() | PluginRuntime():
            return True
        case _:
            return False


def build_release_steps(
    *,
    bump: VersionBump,
    options: ReleaseOptions,
    dirty: bool,
    declared: Sequence[ReleaseStepConfig],
) -> ReleaseSteps:
    """Derive the ordered release steps.

    ``pre-release.commit`` (when the tree is dirty) -> ``version`` ->
    ``git.commit`` -> ``git.tag`` -> ``git.push`` -> publish steps. Tag, push
    and publish steps are left out according to the options.
    """
    steps: list[PipelineStep] = []
    warnings: list[str] = []
    hints: list[str] = []

    pre_commit = dirty and not options.no_commit
    if pre_commit:
        message = options.commit_message or DEFAULT_PRE_RELEASE_MESSAGE
        steps.append(
            PipelineStep(
                id=PRE_RELEASE_COMMIT_ID,
                type="git.commit",
                label=f"Commit pre-release changes: {message}",
                config={"message": message},
            )
        )
        hints.append("Will auto-commit uncommitted changes before release")
    elif dirty:
        warnings.append(
            "Working tree has uncommitted changes (--no-commit will cause release to fail)"
        )

    steps.append(
        PipelineStep(
            id="version",
            type="version",
            label=f"Bump version {bump.old} → {bump.new} ({options.bump_type})",
            needs=(PRE_RELEASE_COMMIT_ID,) if pre_commit else (),
            config={"bump": options.bump_type, "from": bump.old, "to": bump.new},
        )
    )
    steps.append(
        PipelineStep(
            id="git.commit",
            type="git.commit",
            label=f"Commit release: {bump.tag}",
            needs=("version",),
        )
    )

    if not options.no_tag:
        steps.append(
            PipelineStep(
                id="git.tag",
                type="git.tag",
                label=f"Tag {bump.tag}",
                needs=("git.commit",),
                config={"name": bump.tag},
            )
        )

    if not options.no_push:
        steps.append(
            PipelineStep(
                id="git.push",
                type="git.push",
                label="Push to remote",
                needs=("git.commit",) if options.no_tag else ("git.tag",),
                config={"tags": not options.no_tag},
            )
        )
        publish = [s for s in declared if is_publish_step(s)]
        publish_ids = {s.id for s in publish}
        for declared_step in publish:
            # Only needs between publish steps survive; git.push covers the rest
            extra = tuple(n for n in declared_step.needs if n in publish_ids)
            steps.append(
                PipelineStep(
                    id=declared_step.id,
                    type=declared_step.type,
                    label=declared_step.label,
                    needs=("git.push", *extra),
                    config=dict(declared_step.config),
                )
            )

    if options.no_push:
        hints.append("Skipping push and publish (--no-push)")
    if options.no_tag:
        hints.append("Skipping tag creation (--no-tag)")
    if options.dry_run:
        hints.append("Dry run: no changes will be made")

    return ReleaseSteps(steps=tuple(steps), warnings=tuple(warnings), hints=tuple(hints))
