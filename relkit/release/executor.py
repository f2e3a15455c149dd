"""Release step executor.

Performs the effect of each release step type against the collaborators of
one component, and threads the new version, tag, notes and artifacts between
steps through an `ExecutionContext`.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass

from relkit.core.component import Component
from relkit.core.config import DEFAULT_COMMIT_PREFIX, DEFAULT_NEXT_SECTION_ALIASES
from relkit.core.result import Err, Ok, Result
from relkit.core.structured import StrDict, as_obj_list, as_str_dict, get_bool, get_list, get_str
from relkit.modules.manifest import ModuleManifest
from relkit.output.console import ConsoleProtocol, Style
from relkit.pipeline import PipelineStep, RunStatus, StepResult
from relkit.release.changelog import extract_latest_notes, finalize_next_section
from relkit.release.collaborators import ReleaseServices
from relkit.release.context import ExecutionContext
from relkit.release.model import ReleaseArtifact
from relkit.release.resolver import resolve_module_actions
from relkit.release.semver import increment_version
from relkit.release.steps import BuiltIn, CoreStep, PluginAction, PluginRuntime, classify_step

__all__ = [
    "PACKAGE_STEP_TYPE",
    "ReleaseStepExecutor",
    "StepFailure",
    "parse_module_args",
    "parse_module_inputs",
    "parse_release_artifacts",
]

PACKAGE_STEP_TYPE = "package"


@dataclass(frozen=True, slots=True)
class StepFailure:
    """Reason a step could not complete."""

    message: str
    hints: tuple[str, ...] = ()
    data: object | None = None


def parse_release_artifacts(value: object) -> Result[list[ReleaseArtifact], StepFailure]:
    """Artifacts from a module response: a list, or a single entry.

    Entries are either a path string or an object with ``path`` and optional
    ``type`` and ``platform``.
    """
    items = as_obj_list(value)
    if items is None:
        items = [value] if as_str_dict(value) is not None else []

    artifacts: list[ReleaseArtifact] = []
    for item in items:
        if isinstance(item, str):
            artifacts.append(ReleaseArtifact(path=item))
            continue
        entry = as_str_dict(item)
        if entry is None:
            return Err(StepFailure("Artifact entry is invalid"))
        path = get_str(entry, "path")
        if path is None:
            return Err(StepFailure("Artifact is missing 'path'"))
        artifacts.append(
            ReleaseArtifact(
                path=path,
                artifact_type=get_str(entry, "type"),
                platform=get_str(entry, "platform"),
            )
        )
    return Ok(artifacts)


def parse_module_inputs(values: Sequence[object]) -> Result[list[tuple[str, str]], StepFailure]:
    """Inputs as ``"key=value"`` strings or ``{"id": ..., "value": ...}`` objects."""
    inputs: list[tuple[str, str]] = []
    for value in values:
        if isinstance(value, str):
            key, sep, rest = value.partition("=")
            if not sep or not key.strip():
                return Err(StepFailure(f"Invalid module input '{value}'", ("Use key=value",)))
            inputs.append((key.strip(), rest))
            continue
        entry = as_str_dict(value)
        key = get_str(entry, "id") if entry is not None else None
        raw = entry.get("value") if entry is not None else None
        if key is None or not isinstance(raw, str):
            return Err(StepFailure("Module input objects require string 'id' and 'value'"))
        inputs.append((key, raw))
    return Ok(inputs)


def parse_module_args(values: Sequence[object]) -> Result[list[str], StepFailure]:
    args: list[str] = []
    for value in values:
        if not isinstance(value, str):
            return Err(StepFailure("Module args must be strings"))
        args.append(value)
    return Ok(args)


def _short(sha: str) -> str:
    return sha[:8]


class ReleaseStepExecutor:
    """Executes release steps for one component."""

    def __init__(
        self,
        component: Component,
        services: ReleaseServices,
        manifests: Sequence[ModuleManifest],
        console: ConsoleProtocol,
        *,
        context: ExecutionContext | None = None,
        commit_prefix: str = DEFAULT_COMMIT_PREFIX,
        changelog_aliases: Sequence[str] = DEFAULT_NEXT_SECTION_ALIASES,
        release_date: str | None = None,
    ) -> None:
        self._component = component
        self._services = services
        self._manifests = tuple(manifests)
        self._console = console
        self.context = context or ExecutionContext()
        self._commit_prefix = commit_prefix
        self._aliases = tuple(changelog_aliases)
        self._release_date = release_date

    def execute_step(self, step: PipelineStep) -> StepResult:
        self._console.print(f"{step.id}: {step.label or step.type}", Style.DIM)
        match classify_step(step.type, step.config):
            case BuiltIn(kind):
                outcome = self._run_builtin(kind, step)
            case PluginRuntime(module_id):
                outcome = self._run_module_runtime(module_id, step)
            case PluginAction(action_id):
                outcome = self._run_module_action(action_id, step)

        if isinstance(outcome, Err):
            failure = outcome.error
            self._console.print(f"{step.id} failed: {failure.message}", Style.WARNING)
            return StepResult(
                id=step.id,
                type=step.type,
                status=RunStatus.FAILED,
                data=failure.data,
                error=failure.message,
                hints=failure.hints,
            )
        return outcome.value

    def _run_builtin(self, kind: CoreStep, step: PipelineStep) -> Result[StepResult, StepFailure]:
        match kind:
            case CoreStep.BUILD:
                return self._run_build(step)
            case CoreStep.CHANGELOG:
                return self._run_changelog(step)
            case CoreStep.VERSION:
                return self._run_version(step)
            case CoreStep.GIT_COMMIT:
                return self._run_git_commit(step)
            case CoreStep.GIT_TAG:
                return self._run_git_tag(step)
            case CoreStep.GIT_PUSH:
                return self._run_git_push(step)
            case CoreStep.CHANGES:
                return self._run_changes(step)

    # -------------------------------------------------------------------------
    # Built-in steps
    # -------------------------------------------------------------------------

    def _run_build(self, step: PipelineStep) -> Result[StepResult, StepFailure]:
        result = self._services.builds.run_build(self._component)
        if isinstance(result, Err):
            return Err(StepFailure(result.error.message, _hints(result.error.hint)))
        out = result.value
        data = {"exitCode": out.exit_code, "stdout": out.stdout, "stderr": out.stderr}
        if not out.success:
            message = out.stderr.strip() or f"build exited {out.exit_code}"
            return Err(StepFailure(message, data=data))
        return Ok(_done(step, data))

    def _run_changes(self, step: PipelineStep) -> Result[StepResult, StepFailure]:
        include_diff = get_bool(step.config, "includeDiff") or False
        result = self._services.git.changes(include_diff=include_diff)
        if isinstance(result, Err):
            return Err(StepFailure(result.error.message))
        return Ok(_done(step, result.value.to_dict()))

    def _run_version(self, step: PipelineStep) -> Result[StepResult, StepFailure]:
        bump = get_str(step.config, "bump") or "patch"
        current = self._services.versions.read_version(self._component)
        if isinstance(current, Err):
            return Err(StepFailure(current.error.message, _hints(current.error.hint)))

        old_version = current.value.version
        new_version = increment_version(old_version, bump)
        if isinstance(new_version, Err):
            return Err(StepFailure(new_version.error.message, _hints(new_version.error.hint)))

        prepared = self._prepare_changelog(new_version.value)
        if isinstance(prepared, Err):
            return prepared
        changelog, changed = prepared.value

        notes = extract_latest_notes(changelog)
        if notes is None:
            return Err(StepFailure("No finalized changelog entries found for release notes"))

        written = self._services.versions.write_version(self._component, new_version.value)
        if isinstance(written, Err):
            return Err(StepFailure(written.error.message))

        if changed:
            saved = self._services.changelogs.write_changelog(self._component, changelog)
            if isinstance(saved, Err):
                return Err(self._rollback_version(old_version, saved.error.message))
        self.context.record_version(new_version.value, notes)

        return Ok(
            _done(
                step,
                {
                    "component_id": self._component.id,
                    "old_version": old_version,
                    "new_version": new_version.value,
                    "bump": bump,
                    "version_file": str(written.value.path),
                },
            )
        )

    def _run_changelog(self, step: PipelineStep) -> Result[StepResult, StepFailure]:
        version = get_str(step.config, "version") or self.context.snapshot().version
        if version is None:
            return Err(
                StepFailure(
                    "Cannot finalize changelog - version context not set",
                    ("Ensure version step runs before changelog step",),
                )
            )
        finalized = self._finalize_changelog(version)
        if isinstance(finalized, Err):
            return finalized
        data = {"version": version, "changelog": str(self._component.changelog_path)}
        return Ok(_done(step, data))

    def _prepare_changelog(self, version: str) -> Result[tuple[str, bool], StepFailure]:
        """Finalize the unreleased section in memory.

        Returns the resulting changelog text and whether it differs from the
        stored one.
        """
        content = self._services.changelogs.read_changelog(self._component)
        if isinstance(content, Err):
            return Err(StepFailure(content.error.message))

        finalized = finalize_next_section(
            content.value, version, self._aliases, date=self._release_date
        )
        if isinstance(finalized, Err):
            e = finalized.error
            if e.kind == "version_exists":
                # Already finalized by an earlier step or an interrupted run
                return Ok((content.value, False))
            return Err(StepFailure(e.message, _hints(e.hint)))
        return Ok((finalized.value, True))

    def _finalize_changelog(self, version: str) -> Result[str, StepFailure]:
        prepared = self._prepare_changelog(version)
        if isinstance(prepared, Err):
            return prepared
        content, changed = prepared.value
        if changed:
            written = self._services.changelogs.write_changelog(self._component, content)
            if isinstance(written, Err):
                return Err(StepFailure(written.error.message))
        return Ok(content)

    def _rollback_version(self, old_version: str, reason: str) -> StepFailure:
        restored = self._services.versions.write_version(self._component, old_version)
        if isinstance(restored, Err):
            return StepFailure(
                reason,
                (
                    f"Version file was left at the new version; restore {old_version} "
                    f"by hand: {restored.error.message}",
                ),
            )
        return StepFailure(reason, (f"Version restored to {old_version}",))

    def _run_git_commit(self, step: PipelineStep) -> Result[StepResult, StepFailure]:
        git = self._services.git
        status = git.status()
        if isinstance(status, Err):
            return Err(StepFailure(status.error.message))
        if status.value.is_clean:
            return Ok(
                _done(step, {"skipped": True, "reason": "working tree is clean, nothing to commit"})
            )

        amend = self._should_amend_release_commit()
        message = get_str(step.config, "message") or self._default_commit_message()
        output = git.commit(message, amend=amend)

        data: StrDict = {"message": message, **output.to_dict()}
        if amend:
            data["amended"] = True
        if not output.success:
            return Err(StepFailure(output.stderr.strip() or "git commit failed", data=data))
        return Ok(_done(step, data))

    def _default_commit_message(self) -> str:
        version = self.context.snapshot().version or "unknown"
        return f"{self._commit_prefix}{version}"

    def _should_amend_release_commit(self) -> bool:
        """Amend when HEAD is an unpushed release commit.

        This is a heuristic: any unpushed commit whose subject starts with the
        release prefix is treated as ours.
        """
        subject = self._services.git.last_commit_subject()
        if isinstance(subject, Err) or not subject.value.startswith(self._commit_prefix):
            return False
        status = self._services.git.status()
        return isinstance(status, Ok) and status.value.is_ahead

    def _run_git_tag(self, step: PipelineStep) -> Result[StepResult, StepFailure]:
        tag = self._release_tag(step)
        if isinstance(tag, Err):
            return tag
        name = tag.value
        git = self._services.git

        if git.tag_exists_locally(name):
            tag_commit = git.tag_commit(name)
            head_commit = git.head_commit()
            if isinstance(tag_commit, Err):
                return Err(StepFailure(tag_commit.error.message))
            if isinstance(head_commit, Err):
                return Err(StepFailure(head_commit.error.message))

            if tag_commit.value == head_commit.value:
                self.context.record_tag(name)
                return Ok(
                    _done(
                        step,
                        {
                            "action": "tag",
                            "component_id": self._component.id,
                            "tag": name,
                            "skipped": True,
                            "reason": "tag already exists and points to HEAD",
                        },
                    )
                )

            on_remote = git.tag_exists_on_remote(name)
            where = "locally and on remote" if on_remote else "locally only"
            hints = [f"Delete stale tag: git tag -d {name}"]
            if on_remote:
                hints.append(f"Delete remote tag: git push origin :refs/tags/{name}")
            hints.append(f"Then retry: relkit release run {self._component.id} --bump <bump>")
            return Err(
                StepFailure(
                    f"Tag '{name}' exists {where} but points to different commit "
                    f"(tag points to {_short(tag_commit.value)}, "
                    f"HEAD is {_short(head_commit.value)})",
                    tuple(hints),
                )
            )

        message = get_str(step.config, "message") or f"Release {name}"
        output = git.tag(name, message)
        data: StrDict = {"tag": name, **output.to_dict()}
        if not output.success:
            hints: tuple[str, ...] = ()
            if "already exists" in output.stderr:
                hints = self._existing_tag_hints(name)
            return Err(StepFailure(output.stderr.strip() or "git tag failed", hints, data))

        self.context.record_tag(name)
        return Ok(_done(step, data))

    def _existing_tag_hints(self, name: str) -> tuple[str, ...]:
        git = self._services.git
        local = git.tag_exists_locally(name)
        remote = git.tag_exists_on_remote(name)
        if local and not remote:
            return (
                f"Tag '{name}' exists locally but not on remote. "
                f"Push it with: git push origin {name}",
            )
        if local and remote:
            return (
                f"Tag '{name}' already exists locally and on remote. "
                f"Delete local tag first: git tag -d {name}",
            )
        return ()

    def _release_tag(self, step: PipelineStep) -> Result[str, StepFailure]:
        explicit = get_str(step.config, "name") or get_str(step.config, "versionTag")
        if explicit is not None:
            return Ok(explicit)

        snapshot = self.context.snapshot()
        if snapshot.tag is not None:
            return Ok(snapshot.tag)
        if snapshot.version is not None:
            return Ok(f"v{snapshot.version}")

        return Err(
            StepFailure(
                "Cannot determine release tag - version context not set",
                (
                    "Ensure version step runs before git.tag step",
                    'Or specify tag explicitly in step config: { "name": "v1.2.3" }',
                ),
            )
        )

    def _run_git_push(self, step: PipelineStep) -> Result[StepResult, StepFailure]:
        tags = get_bool(step.config, "tags") or False
        output = self._services.git.push(tags=tags)
        data: StrDict = {"tags": tags, **output.to_dict()}
        if not output.success:
            return Err(StepFailure(output.stderr.strip() or "git push failed", data=data))
        return Ok(_done(step, data))

    # -------------------------------------------------------------------------
    # Module steps
    # -------------------------------------------------------------------------

    def build_release_payload(self, step: PipelineStep) -> Result[StrDict, StepFailure]:
        snapshot = self.context.snapshot()
        if snapshot.version is None:
            return Err(
                StepFailure(
                    f"Version context not set for release step (step '{step.id}' "
                    "requires version context)",
                    ("Ensure version step runs before this step",),
                )
            )

        payload: StrDict = {
            "release": {
                "version": snapshot.version,
                "tag": snapshot.tag or f"v{snapshot.version}",
                "notes": snapshot.notes or "",
                "component_id": self._component.id,
                "local_path": str(self._component.local_path),
                "artifacts": [a.to_dict() for a in snapshot.artifacts],
            }
        }
        if step.config:
            payload["config"] = dict(step.config)
        return Ok(payload)

    def _run_module_action(
        self, action_id: str, step: PipelineStep
    ) -> Result[StepResult, StepFailure]:
        payload = self.build_release_payload(step)
        if isinstance(payload, Err):
            return payload

        results: list[StrDict] = []
        for manifest in resolve_module_actions(self._manifests, action_id):
            response = self._services.modules.execute_action(
                manifest.id, action_id, payload.value
            )
            if isinstance(response, Err):
                e = response.error
                return Err(
                    StepFailure(
                        e.stderr.strip() or e.message,
                        data={"action": action_id, "module": e.module_id, "results": results},
                    )
                )
            if step.type == PACKAGE_STEP_TYPE:
                updated = self._update_artifacts(response.value)
                if isinstance(updated, Err):
                    return updated
            results.append({"module": manifest.id, "response": response.value})

        return Ok(_done(step, {"action": action_id, "results": results}))

    def _update_artifacts(self, response: StrDict) -> Result[None, StepFailure]:
        value = response.get("artifacts")
        if value is None:
            stdout = response.get("stdout")
            if not isinstance(stdout, str):
                return Ok(None)
            try:
                value = json.loads(stdout)
            except json.JSONDecodeError:
                return Ok(None)
            if isinstance(value, dict):
                value = value.get("artifacts", value)

        artifacts = parse_release_artifacts(value)
        if isinstance(artifacts, Err):
            return artifacts
        if artifacts.value:
            self.context.record_artifacts(artifacts.value)
        return Ok(None)

    def _run_module_runtime(
        self, module_id: str | None, step: PipelineStep
    ) -> Result[StepResult, StepFailure]:
        if module_id is None:
            return Err(StepFailure("module.run requires config.module"))

        inputs = parse_module_inputs(get_list(step.config, "inputs") or [])
        if isinstance(inputs, Err):
            return inputs
        args = parse_module_args(get_list(step.config, "args") or [])
        if isinstance(args, Err):
            return args

        payload = self.build_release_payload(step)
        if isinstance(payload, Err):
            return payload

        outcome = self._services.modules.run_runtime(
            module_id,
            inputs=inputs.value,
            args=args.value,
            payload=payload.value,
            working_dir=self._component.local_path,
        )
        if isinstance(outcome, Err):
            e = outcome.error
            return Err(StepFailure(e.stderr.strip() or e.message))

        out = outcome.value
        data: StrDict = {
            "module": module_id,
            "stdout": out.stdout,
            "stderr": out.stderr,
            "exitCode": out.exit_code,
            "success": out.success,
            "payload": payload.value,
        }
        if not out.success:
            message = out.stderr.strip() or f"{module_id} exited {out.exit_code}"
            return Err(StepFailure(message, data=data))
        return Ok(_done(step, data))


def _done(step: PipelineStep, data: object) -> StepResult:
    return StepResult(id=step.id, type=step.type, status=RunStatus.SUCCESS, data=data)


def _hints(hint: str | None) -> tuple[str, ...]:
    return (hint,) if hint else ()
