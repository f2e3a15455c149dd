"""File and process backed collaborators."""

from __future__ import annotations

import re
from pathlib import Path

from relkit.core.component import Component
from relkit.core.result import Err, Ok, Result
from relkit.git.repository import Repository
from relkit.modules.registry import LocalModuleRegistry
from relkit.platform.process import capture
from relkit.release.collaborators import BuildOutput, ReleaseServices, VersionInfo
from relkit.release.errors import ReleaseError

__all__ = [
    "FileChangelogStore",
    "FileVersionStore",
    "ProcessBuildRunner",
    "default_services",
    "version_pattern_for",
]

BUILD_TIMEOUT_SECONDS = 30 * 60.0


def version_pattern_for(path: Path) -> re.Pattern[str]:
    """Pattern whose first group is the version, chosen by file extension."""
    match path.suffix:
        case ".toml":
            return re.compile(r'version\s*=\s*"(\d+\.\d+\.\d+)"')
        case ".json":
            return re.compile(r'"version"\s*:\s*"(\d+\.\d+\.\d+)"')
        case ".php":
            return re.compile(r"Version:\s*(\d+\.\d+\.\d+)")
        case _:
            return re.compile(r"(\d+\.\d+\.\d+)")


def _read_text(path: Path, what: str) -> Result[str, ReleaseError]:
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(
            ReleaseError(kind="config", message=f"{what} not found: {path}", hint=str(path.parent))
        )
    except OSError as e:
        return Err(ReleaseError(kind="io", message=f"Failed to read {what.lower()}: {e}"))


def _write_text(path: Path, content: str, what: str) -> Result[None, ReleaseError]:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        return Err(ReleaseError(kind="io", message=f"Failed to write {what.lower()}: {e}"))
    return Ok(None)


class FileVersionStore:
    def read_version(self, component: Component) -> Result[VersionInfo, ReleaseError]:
        path = component.version_path
        text = _read_text(path, "Version file")
        if isinstance(text, Err):
            return text

        m = version_pattern_for(path).search(text.value)
        if m is None:
            return Err(
                ReleaseError(
                    kind="invalid_version",
                    message=f"No MAJOR.MINOR.PATCH version found in {path}",
                    hint="Expected: MAJOR.MINOR.PATCH",
                )
            )
        return Ok(VersionInfo(version=m.group(1), path=path))

    def write_version(
        self, component: Component, version: str
    ) -> Result[VersionInfo, ReleaseError]:
        """Replace the first version occurrence, keeping the rest of the file intact."""
        path = component.version_path
        text = _read_text(path, "Version file")
        if isinstance(text, Err):
            return text

        content = text.value
        m = version_pattern_for(path).search(content)
        if m is None:
            return Err(
                ReleaseError(
                    kind="invalid_version",
                    message=f"No MAJOR.MINOR.PATCH version found in {path}",
                )
            )
        updated = content[: m.start(1)] + version + content[m.end(1) :]
        written = _write_text(path, updated, "Version file")
        if isinstance(written, Err):
            return written
        return Ok(VersionInfo(version=version, path=path))


class FileChangelogStore:
    def read_changelog(self, component: Component) -> Result[str, ReleaseError]:
        return _read_text(component.changelog_path, "Changelog")

    def write_changelog(self, component: Component, content: str) -> Result[None, ReleaseError]:
        return _write_text(component.changelog_path, content, "Changelog")


class ProcessBuildRunner:
    def __init__(self, *, timeout: float | None = BUILD_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    def run_build(self, component: Component) -> Result[BuildOutput, ReleaseError]:
        if not component.build_command:
            return Err(
                ReleaseError(
                    kind="config",
                    message=f"Component '{component.id}' has no build_command",
                    hint=f"Set build_command in .relkit/components/{component.id}.toml",
                )
            )
        result = capture(
            list(component.build_command), cwd=component.local_path, timeout=self._timeout
        )
        if isinstance(result, Err):
            e = result.error
            return Ok(BuildOutput(exit_code=e.returncode, stdout=e.stdout, stderr=e.stderr))
        out = result.value
        return Ok(BuildOutput(exit_code=out.returncode, stdout=out.stdout, stderr=out.stderr))


def default_services(component: Component, modules: LocalModuleRegistry) -> ReleaseServices:
    return ReleaseServices(
        builds=ProcessBuildRunner(),
        versions=FileVersionStore(),
        changelogs=FileChangelogStore(),
        git=Repository(component.local_path),
        modules=modules,
    )
