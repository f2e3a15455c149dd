"""Changelog parsing and finalization.

Changelogs follow the keep-a-changelog layout: an "unreleased" section at the
top (named by one of the configured aliases) collects entries until release,
when it is renamed to the new version and a fresh empty section is opened
above it.

    ## Unreleased

    ## [1.3.0] - 2026-03-02
    ### Fixed
    - Retry tag push
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Literal

from relkit.core.result import Err, Ok, Result
from relkit.release.errors import ReleaseError

__all__ = [
    "NextSectionStatus",
    "check_next_section_content",
    "extract_latest_notes",
    "extract_version_from_heading",
    "finalize_next_section",
    "has_version_section",
    "unreleased_error",
]

NextSectionStatus = Literal["missing", "empty", "subsection_headers_only", "ok"]

_HEADING_PREFIX = "## "
_VERSION_TOKEN_RE = re.compile(r"\[?(\d+\.\d+\.\d+)\]?")


def _is_section_heading(line: str) -> bool:
    return line.startswith(_HEADING_PREFIX)


def extract_version_from_heading(line: str) -> str | None:
    """Version token of a ``## `` heading, or None for other lines."""
    if not _is_section_heading(line):
        return None
    m = _VERSION_TOKEN_RE.search(line[len(_HEADING_PREFIX) :])
    return m.group(1) if m else None


def extract_latest_notes(content: str) -> str | None:
    """Body of the first versioned section, trimmed; None if absent or empty."""
    lines = content.splitlines()
    start: int | None = None
    for i, line in enumerate(lines):
        if extract_version_from_heading(line.strip()) is not None:
            start = i + 1
            break
    if start is None:
        return None

    body: list[str] = []
    for line in lines[start:]:
        if _is_section_heading(line.strip()):
            break
        body.append(line)

    notes = "\n".join(body).strip()
    return notes or None


def has_version_section(content: str, version: str) -> bool:
    return any(
        extract_version_from_heading(line.strip()) == version for line in content.splitlines()
    )


def _heading_label(line: str) -> str:
    label = line[len(_HEADING_PREFIX) :].strip()
    return label.strip("[]").strip()


def _find_next_section(lines: Sequence[str], aliases: Sequence[str]) -> int | None:
    wanted = {a.strip().lower() for a in aliases}
    for i, line in enumerate(lines):
        stripped = line.strip()
        if _is_section_heading(stripped) and _heading_label(stripped).lower() in wanted:
            return i
    return None


def _section_body(lines: Sequence[str], heading: int) -> list[str]:
    body: list[str] = []
    for line in lines[heading + 1 :]:
        if _is_section_heading(line.strip()):
            break
        body.append(line)
    return body


def check_next_section_content(content: str, aliases: Sequence[str]) -> NextSectionStatus:
    """Classify the unreleased section: absent, empty, only ``###`` headers, or ok."""
    lines = content.splitlines()
    heading = _find_next_section(lines, aliases)
    if heading is None:
        return "missing"

    entries = [ln.strip() for ln in _section_body(lines, heading) if ln.strip()]
    if not entries:
        return "empty"
    if all(entry.startswith("#") for entry in entries):
        return "subsection_headers_only"
    return "ok"


def unreleased_error(status: NextSectionStatus, aliases: Sequence[str]) -> ReleaseError | None:
    """Precondition error for a section status, or None when releasable."""
    section = aliases[0] if aliases else "Unreleased"
    hint = f"Add entries under '## {section}' before releasing"
    match status:
        case "ok":
            return None
        case "missing":
            return ReleaseError(
                kind="changelog_missing",
                message=f"Changelog has no '## {section}' section",
                hint=hint,
            )
        case "empty":
            return ReleaseError(
                kind="changelog_empty", message="Changelog has no unreleased entries", hint=hint
            )
        case "subsection_headers_only":
            return ReleaseError(
                kind="changelog_headers_only",
                message="Changelog has subsection headers but no items",
                hint=hint,
            )


def finalize_next_section(
    content: str,
    version: str,
    aliases: Sequence[str],
    *,
    date: str | None = None,
) -> Result[str, ReleaseError]:
    """Rename the unreleased section to ``version`` and open a new empty one above it."""
    if has_version_section(content, version):
        return Err(
            ReleaseError(
                kind="version_exists",
                message=f"Changelog already has a section for {version}",
                hint="Bump to a different version or remove the duplicate section",
            )
        )

    lines = content.splitlines()
    heading = _find_next_section(lines, aliases)
    error = unreleased_error(check_next_section_content(content, aliases), aliases)
    if heading is None or error is not None:
        return Err(error or ReleaseError(kind="changelog_missing", message="No unreleased section"))

    next_heading = lines[heading].strip()
    version_heading = f"## [{version}] - {date}" if date else f"## [{version}]"
    updated = [*lines[:heading], next_heading, "", version_heading, *lines[heading + 1 :]]
    trailing = "\n" if content.endswith("\n") else ""
    return Ok("\n".join(updated) + trailing)
