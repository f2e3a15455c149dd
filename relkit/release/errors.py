"""Error type for the release domain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "invalid_input",
    "config",
    "module_not_found",
    "changelog_missing",
    "changelog_empty",
    "changelog_headers_only",
    "invalid_version",
    "version_exists",
    "invalid_graph",
    "io",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """A release precondition or configuration failure.

    Precondition errors abort planning before any step is built or run.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
