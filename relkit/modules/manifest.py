"""Module manifests.

A module is a directory under `.relkit/modules/` with a `module.json`
manifest declaring what it offers to releases:

    {
      "id": "github",
      "name": "GitHub releases",
      "version": "1.0.0",
      "actions": [
        {"id": "release.publish", "label": "Publish", "command": ["./publish.sh"]}
      ],
      "runtime": {"run": ["./run.sh"]},
      "release": {"steps": [{"id": "publish", "type": "publish"}]}
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from relkit.core.component import ReleaseConfig, parse_release_config
from relkit.core.result import Err, Ok, Result
from relkit.core.structured import as_str_dict, get_list, get_str, get_str_list, get_table

__all__ = [
    "MANIFEST_FILENAME",
    "ModuleAction",
    "ModuleError",
    "ModuleManifest",
    "ModuleRuntime",
    "load_manifest",
]

MANIFEST_FILENAME = "module.json"


@dataclass(frozen=True, slots=True)
class ModuleError:
    module_id: str
    message: str
    stderr: str = ""


@dataclass(frozen=True, slots=True)
class ModuleAction:
    id: str
    command: tuple[str, ...]
    label: str | None = None


@dataclass(frozen=True, slots=True)
class ModuleRuntime:
    run: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ModuleManifest:
    id: str
    path: Path
    name: str | None = None
    version: str | None = None
    actions: tuple[ModuleAction, ...] = ()
    runtime: ModuleRuntime | None = None
    release: ReleaseConfig | None = None

    def action(self, action_id: str) -> ModuleAction | None:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None

    def has_action(self, action_id: str) -> bool:
        return self.action(action_id) is not None


def load_manifest(module_dir: Path) -> Result[ModuleManifest, ModuleError]:
    """Load ``module_dir/module.json``."""
    module_id = module_dir.name
    path = module_dir / MANIFEST_FILENAME
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ModuleError(module_id, f"Module manifest not found: {path}"))
    except OSError as e:
        return Err(ModuleError(module_id, f"Failed to read module manifest: {e}"))
    except json.JSONDecodeError as e:
        return Err(ModuleError(module_id, f"Invalid JSON in {path}: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(ModuleError(module_id, f"{path} root must be a JSON object"))
    module_id = get_str(data, "id") or module_id

    actions: list[ModuleAction] = []
    for index, raw in enumerate(get_list(data, "actions") or []):
        entry = as_str_dict(raw)
        action_id = get_str(entry, "id") if entry is not None else None
        command = get_str_list(entry, "command") if entry is not None else None
        if entry is None or action_id is None or not command:
            return Err(
                ModuleError(module_id, f"actions[{index}] requires 'id' and a non-empty 'command'")
            )
        actions.append(
            ModuleAction(id=action_id, command=tuple(command), label=get_str(entry, "label"))
        )

    runtime: ModuleRuntime | None = None
    runtime_table = get_table(data, "runtime")
    if runtime_table is not None:
        run = get_str_list(runtime_table, "run")
        if not run:
            return Err(ModuleError(module_id, "runtime.run must be a non-empty list of strings"))
        runtime = ModuleRuntime(run=tuple(run))

    release: ReleaseConfig | None = None
    release_table = get_table(data, "release")
    if release_table is not None:
        parsed = parse_release_config(release_table, source=path)
        if isinstance(parsed, Err):
            return Err(ModuleError(module_id, parsed.error.message))
        release = parsed.value

    return Ok(
        ModuleManifest(
            id=module_id,
            path=module_dir,
            name=get_str(data, "name"),
            version=get_str(data, "version"),
            actions=tuple(actions),
            runtime=runtime,
            release=release,
        )
    )
