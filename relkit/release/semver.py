from __future__ import annotations

import re
from dataclasses import dataclass

from relkit.core.result import Err, Ok, Result
from relkit.release.errors import ReleaseError
from relkit.release.model import RELEASE_BUMPS, ReleaseBump

_VERSION_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, kind: ReleaseBump) -> SemVer:
        match kind:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


def parse_version(version: str) -> SemVer | None:
    m = _VERSION_RE.match(version.strip())
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def increment_version(version: str, bump: str) -> Result[str, ReleaseError]:
    """Bump ``major.minor.patch`` by ``bump``; malformed input is an error."""
    parsed = parse_version(version)
    if parsed is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"Invalid version format: {version}",
                hint="Expected: MAJOR.MINOR.PATCH",
            )
        )
    if bump == "patch" or bump == "minor" or bump == "major":
        return Ok(str(parsed.bump(bump)))
    return Err(
        ReleaseError(
            kind="invalid_input",
            message=f"Invalid bump type: {bump}",
            hint=f"Expected one of: {', '.join(RELEASE_BUMPS)}",
        )
    )
