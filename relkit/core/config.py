"""Typed configuration loading.

Workspace defaults live in `.relkit/config.toml`:

    [release]
    default_bump = "minor"
    commit_prefix = "release: v"

    [changelog]
    next_section_aliases = ["Unreleased", "Next"]
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "ChangelogSettings",
    "Config",
    "ConfigError",
    "DEFAULT_NEXT_SECTION_ALIASES",
    "ReleaseDefaults",
    "load_config",
    "load_config_or_default",
    "parse_toml",
]

DEFAULT_NEXT_SECTION_ALIASES = ("Unreleased", "Next")
DEFAULT_COMMIT_PREFIX = "release: v"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when a config file cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ReleaseDefaults:
    default_bump: str = "patch"
    commit_prefix: str = DEFAULT_COMMIT_PREFIX


@dataclass(frozen=True, slots=True)
class ChangelogSettings:
    next_section_aliases: tuple[str, ...] = DEFAULT_NEXT_SECTION_ALIASES


@dataclass(frozen=True, slots=True)
class Config:
    release: ReleaseDefaults = field(default_factory=ReleaseDefaults)
    changelog: ChangelogSettings = field(default_factory=ChangelogSettings)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        release: StrDict = get_table(data, "release") or {}
        changelog: StrDict = get_table(data, "changelog") or {}
        aliases = get_str_list(changelog, "next_section_aliases")

        return cls(
            release=ReleaseDefaults(
                default_bump=get_str(release, "default_bump") or "patch",
                commit_prefix=get_str(release, "commit_prefix") or DEFAULT_COMMIT_PREFIX,
            ),
            changelog=ChangelogSettings(
                next_section_aliases=tuple(aliases) if aliases else DEFAULT_NEXT_SECTION_ALIASES,
            ),
        )


def parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file into a string-keyed dict."""
    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    result = parse_toml(path)
    if isinstance(result, Err):
        return result
    return Ok(Config.from_dict(result.value))


def load_config_or_default(path: Path) -> Config:
    """Load config from file, or return defaults when it is absent or invalid."""
    result = load_config(path)
    if isinstance(result, Ok):
        return result.value
    return Config()
