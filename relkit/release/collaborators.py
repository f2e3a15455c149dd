"""Interfaces the release executor depends on.

Each collaborator wraps one external concern (build tool, version file,
changelog file, git, modules). Default implementations live in
`relkit.release.stores`, `relkit.git` and `relkit.modules`; tests substitute
in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from relkit.core.component import Component
from relkit.core.result import Result
from relkit.core.structured import StrDict
from relkit.git.repository import ChangesSummary, GitError, GitOutput, GitStatus
from relkit.modules.manifest import ModuleError
from relkit.modules.registry import RuntimeOutput
from relkit.release.errors import ReleaseError

__all__ = [
    "BuildOutput",
    "BuildRunner",
    "ChangelogStore",
    "GitClient",
    "ModuleRegistry",
    "ReleaseServices",
    "VersionInfo",
    "VersionStore",
]


@dataclass(frozen=True, slots=True)
class BuildOutput:
    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True, slots=True)
class VersionInfo:
    version: str
    path: Path


class BuildRunner(Protocol):
    def run_build(self, component: Component) -> Result[BuildOutput, ReleaseError]: ...


class VersionStore(Protocol):
    def read_version(self, component: Component) -> Result[VersionInfo, ReleaseError]: ...

    def write_version(
        self, component: Component, version: str
    ) -> Result[VersionInfo, ReleaseError]: ...


class ChangelogStore(Protocol):
    def read_changelog(self, component: Component) -> Result[str, ReleaseError]: ...

    def write_changelog(self, component: Component, content: str) -> Result[None, ReleaseError]: ...


class GitClient(Protocol):
    """Git operations on the component's working tree."""

    def status(self) -> Result[GitStatus, GitError]: ...

    def last_commit_subject(self) -> Result[str, GitError]: ...

    def head_commit(self) -> Result[str, GitError]: ...

    def tag_commit(self, name: str) -> Result[str, GitError]: ...

    def tag_exists_locally(self, name: str) -> bool: ...

    def tag_exists_on_remote(self, name: str) -> bool: ...

    def changes(self, *, include_diff: bool = False) -> Result[ChangesSummary, GitError]: ...

    def commit(self, message: str, *, amend: bool = False) -> GitOutput: ...

    def tag(self, name: str, message: str | None = None) -> GitOutput: ...

    def push(self, *, tags: bool = False) -> GitOutput: ...


class ModuleRegistry(Protocol):
    def execute_action(
        self, module_id: str, action_id: str, payload: Mapping[str, object]
    ) -> Result[StrDict, ModuleError]: ...

    def run_runtime(
        self,
        module_id: str,
        *,
        inputs: Sequence[tuple[str, str]] = (),
        args: Sequence[str] = (),
        payload: Mapping[str, object] | None = None,
        working_dir: Path | None = None,
    ) -> Result[RuntimeOutput, ModuleError]: ...


@dataclass(frozen=True, slots=True)
class ReleaseServices:
    """Collaborators bound to one component."""

    builds: BuildRunner
    versions: VersionStore
    changelogs: ChangelogStore
    git: GitClient
    modules: ModuleRegistry
