"""Git repository abstraction.

`Repository` wraps the git CLI for a single working tree. Queries return
Result types; mutating commands (commit, tag, push) return a `GitOutput`
carrying success plus the raw stdout/stderr, so release steps can report
git's own message verbatim.

Usage:
    repo = Repository(Path("/path/to/component"))

    match repo.status():
        case Ok(status):
            print(f"{status.branch}: ahead {status.ahead}")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.platform.process import ProcessError, ProcessOutput, capture

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone", "ls-remote"})

__all__ = [
    "ChangesSummary",
    "GitError",
    "GitOutput",
    "GitStatus",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git query.

    Attributes:
        command: The git subcommand that failed
        message: Error message (git's stderr when available)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class GitOutput:
    """Outcome of a mutating git command."""

    success: bool
    stdout: str
    stderr: str

    def to_dict(self) -> dict[str, object]:
        return {"success": self.success, "stdout": self.stdout, "stderr": self.stderr}


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed `git status --porcelain=v1 -b` output."""

    branch: str
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return len(self.entries) == 0

    @property
    def is_ahead(self) -> bool:
        """True if local commits have not been pushed to the upstream."""
        return self.upstream is not None and self.ahead > 0


@dataclass(frozen=True, slots=True)
class ChangesSummary:
    """Commits and working tree changes since the latest tag."""

    latest_tag: str | None
    commits: tuple[str, ...]
    uncommitted: tuple[StatusEntry, ...]
    diff: str | None = None

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {
            "latest_tag": self.latest_tag,
            "commits": list(self.commits),
            "uncommitted": [{"status": e.xy, "path": e.path} for e in self.uncommitted],
        }
        if self.diff is not None:
            out["diff"] = self.diff
        return out


class Repository:
    """Git operations on one working tree.

    Attributes:
        path: Path to the working tree
        remote: Remote used for tag lookups and pushes
    """

    def __init__(self, path: Path, *, remote: str = "origin") -> None:
        self.path = path
        self.remote = remote

    def exists(self) -> bool:
        return (self.path / ".git").exists()

    def status(self) -> Result[GitStatus, GitError]:
        """Get branch, upstream divergence and working tree entries."""
        result = self._query(["status", "--porcelain=v1", "-b"])
        if isinstance(result, Err):
            return result
        return Ok(self._parse_status(result.value))

    def last_commit_subject(self) -> Result[str, GitError]:
        result = self._query(["log", "-1", "--format=%s"])
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def head_commit(self) -> Result[str, GitError]:
        result = self._query(["rev-parse", "HEAD"])
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def tag_commit(self, name: str) -> Result[str, GitError]:
        """Commit a tag points to (annotated tags are peeled)."""
        result = self._query(["rev-list", "-n", "1", name])
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def tag_exists_locally(self, name: str) -> bool:
        result = self._query(["rev-parse", "-q", "--verify", f"refs/tags/{name}"])
        return isinstance(result, Ok)

    def tag_exists_on_remote(self, name: str) -> bool:
        """False when the tag is absent or the remote cannot be reached."""
        result = self._query(["ls-remote", "--tags", self.remote, f"refs/tags/{name}"])
        return isinstance(result, Ok) and result.value.strip() != ""

    def latest_tag(self) -> str | None:
        result = self._query(["describe", "--tags", "--abbrev=0"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def changes(self, *, include_diff: bool = False) -> Result[ChangesSummary, GitError]:
        """Summarize commits since the latest tag plus uncommitted entries."""
        latest = self.latest_tag()
        log_args = ["log", "--format=%h %s"]
        if latest is not None:
            log_args.append(f"{latest}..HEAD")
        log = self._query(log_args)
        if isinstance(log, Err):
            return log

        status = self.status()
        if isinstance(status, Err):
            return status

        diff: str | None = None
        if include_diff:
            diff_result = self._query(["diff", latest] if latest is not None else ["diff", "HEAD"])
            if isinstance(diff_result, Err):
                return diff_result
            diff = diff_result.value

        commits = tuple(ln for ln in log.value.splitlines() if ln.strip())
        return Ok(
            ChangesSummary(
                latest_tag=latest,
                commits=commits,
                uncommitted=status.value.entries,
                diff=diff,
            )
        )

    def commit(self, message: str, *, amend: bool = False) -> GitOutput:
        """Stage every change and commit (or amend HEAD)."""
        staged = self._execute(["add", "-A"])
        if not staged.success:
            return staged
        args = ["commit", "--amend", "-m", message] if amend else ["commit", "-m", message]
        return self._execute(args)

    def tag(self, name: str, message: str | None = None) -> GitOutput:
        if message is None:
            return self._execute(["tag", name])
        return self._execute(["tag", "-a", name, "-m", message])

    def push(self, *, tags: bool = False) -> GitOutput:
        """Push the current branch, then tags when requested."""
        branch = self._execute(["push", self.remote, "HEAD"])
        if not branch.success or not tags:
            return branch
        pushed_tags = self._execute(["push", self.remote, "--tags"])
        return GitOutput(
            success=pushed_tags.success,
            stdout=branch.stdout + pushed_tags.stdout,
            stderr=branch.stderr + pushed_tags.stderr,
        )

    def _capture(self, args: list[str]) -> Result[ProcessOutput, ProcessError]:
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        return capture(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    def _query(self, args: list[str]) -> Result[str, GitError]:
        result = self._capture(args)
        command = " ".join(args[:2])
        if isinstance(result, Err):
            e = result.error
            return Err(GitError(command=command, message=e.stderr.strip(), returncode=e.returncode))
        out = result.value
        if out.returncode != 0:
            return Err(
                GitError(
                    command=command,
                    message=out.stderr.strip() or f"git {command} failed",
                    returncode=out.returncode,
                )
            )
        return Ok(out.stdout)

    def _execute(self, args: list[str]) -> GitOutput:
        result = self._capture(args)
        if isinstance(result, Err):
            return GitOutput(success=False, stdout=result.error.stdout, stderr=result.error.stderr)
        out = result.value
        return GitOutput(success=out.success, stdout=out.stdout, stderr=out.stderr)

    def _parse_status(self, output: str) -> GitStatus:
        lines = [ln for ln in output.splitlines() if ln.strip()]
        if not lines:
            return GitStatus(branch="")

        # First line is branch info: ## branch...upstream [ahead N, behind M]
        branch, upstream = self._parse_branch_line(lines[0])
        ahead, behind = self._parse_ahead_behind(lines[0])

        entries: list[StatusEntry] = []
        for line in lines[1:]:
            if len(line) < 4:
                continue
            entries.append(StatusEntry(xy=line[:2], path=line[3:]))

        return GitStatus(
            branch=branch,
            upstream=upstream,
            ahead=ahead,
            behind=behind,
            entries=tuple(entries),
        )

    def _parse_branch_line(self, line: str) -> tuple[str, str | None]:
        s = line.strip()
        if s.startswith("##"):
            s = s[2:].lstrip()
        s = s.split(" [", 1)[0].strip()
        if "..." in s:
            left, right = s.split("...", 1)
            return (left.strip(), right.strip())
        return (s, None)

    def _parse_ahead_behind(self, line: str) -> tuple[int, int]:
        match = re.search(r"\[([^\]]+)\]", line)
        if not match:
            return (0, 0)
        inside = match.group(1)
        ahead_match = re.search(r"ahead\s+(\d+)", inside)
        behind_match = re.search(r"behind\s+(\d+)", inside)
        ahead = int(ahead_match.group(1)) if ahead_match else 0
        behind = int(behind_match.group(1)) if behind_match else 0
        return (ahead, behind)
