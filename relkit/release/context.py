"""Release state shared between steps of a single run.

The version step records the new version, tag and notes; a package action
records artifacts; later steps (tag, publish) read them back. Every access
goes through one lock, and readers get an immutable snapshot.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import dataclass, replace

from relkit.release.model import ReleaseArtifact

__all__ = ["ContextSnapshot", "ExecutionContext"]


@dataclass(frozen=True, slots=True)
class ContextSnapshot:
    version: str | None = None
    tag: str | None = None
    notes: str | None = None
    artifacts: tuple[ReleaseArtifact, ...] = ()


class ExecutionContext:
    def __init__(self, initial: ContextSnapshot | None = None) -> None:
        self._lock = threading.Lock()
        self._state = initial or ContextSnapshot()

    def snapshot(self) -> ContextSnapshot:
        with self._lock:
            return self._state

    def record_version(self, version: str, notes: str) -> None:
        """Store the released version; the tag is derived as ``v<version>``."""
        with self._lock:
            self._state = replace(self._state, version=version, tag=f"v{version}", notes=notes)

    def record_tag(self, tag: str) -> None:
        with self._lock:
            self._state = replace(self._state, tag=tag)

    def record_artifacts(self, artifacts: Sequence[ReleaseArtifact]) -> None:
        with self._lock:
            self._state = replace(self._state, artifacts=tuple(artifacts))
