"""Module registry backed by `.relkit/modules/`.

Actions and runtimes run as subprocesses in the module directory (runtimes
may run elsewhere). The release payload is passed as JSON in the
``RELKIT_PAYLOAD`` environment variable; runtime inputs are passed as
``RELKIT_INPUT_<ID>`` variables.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.core.structured import StrDict
from relkit.platform.process import capture

from .manifest import MANIFEST_FILENAME, ModuleError, ModuleManifest, load_manifest

__all__ = [
    "PAYLOAD_ENV_VAR",
    "LocalModuleRegistry",
    "RuntimeOutput",
    "input_env_var",
]

PAYLOAD_ENV_VAR = "RELKIT_PAYLOAD"
ACTION_ENV_VAR = "RELKIT_ACTION"
MODULE_PATH_ENV_VAR = "RELKIT_MODULE_PATH"
MODULE_TIMEOUT_SECONDS = 30 * 60.0


@dataclass(frozen=True, slots=True)
class RuntimeOutput:
    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


def input_env_var(input_id: str) -> str:
    return "RELKIT_INPUT_" + re.sub(r"[^A-Za-z0-9]", "_", input_id).upper()


class LocalModuleRegistry:
    """Modules installed in one workspace."""

    def __init__(self, modules_dir: Path, *, timeout: float | None = MODULE_TIMEOUT_SECONDS):
        self._modules_dir = modules_dir
        self._timeout = timeout
        self._cache: dict[str, ModuleManifest] = {}

    def available_ids(self) -> list[str]:
        if not self._modules_dir.is_dir():
            return []
        return sorted(
            p.name
            for p in self._modules_dir.iterdir()
            if p.is_dir() and (p / MANIFEST_FILENAME).is_file()
        )

    def load(self, module_id: str) -> Result[ModuleManifest, ModuleError]:
        cached = self._cache.get(module_id)
        if cached is not None:
            return Ok(cached)

        module_dir = self._modules_dir / module_id
        if not (module_dir / MANIFEST_FILENAME).is_file():
            available = ", ".join(self.available_ids()) or "none"
            return Err(
                ModuleError(module_id, f"Module '{module_id}' not found (available: {available})")
            )

        result = load_manifest(module_dir)
        if isinstance(result, Ok):
            self._cache[module_id] = result.value
        return result

    def execute_action(
        self, module_id: str, action_id: str, payload: Mapping[str, object]
    ) -> Result[StrDict, ModuleError]:
        """Run an action and return its response.

        The response carries ``exitCode``, ``stdout`` and ``stderr``. A
        non-zero exit is an error.
        """
        loaded = self.load(module_id)
        if isinstance(loaded, Err):
            return loaded
        manifest = loaded.value

        action = manifest.action(action_id)
        if action is None:
            return Err(ModuleError(module_id, f"Module '{module_id}' has no action '{action_id}'"))

        env = {
            PAYLOAD_ENV_VAR: json.dumps(payload),
            ACTION_ENV_VAR: action_id,
            MODULE_PATH_ENV_VAR: str(manifest.path),
        }
        result = capture(list(action.command), cwd=manifest.path, env=env, timeout=self._timeout)
        if isinstance(result, Err):
            e = result.error
            return Err(ModuleError(module_id, f"Action '{action_id}' could not run", e.stderr))

        out = result.value
        if not out.success:
            return Err(
                ModuleError(
                    module_id,
                    f"Action '{action_id}' failed (exit {out.returncode})",
                    out.stderr,
                )
            )
        return Ok({"exitCode": out.returncode, "stdout": out.stdout, "stderr": out.stderr})

    def run_runtime(
        self,
        module_id: str,
        *,
        inputs: Sequence[tuple[str, str]] = (),
        args: Sequence[str] = (),
        payload: Mapping[str, object] | None = None,
        working_dir: Path | None = None,
    ) -> Result[RuntimeOutput, ModuleError]:
        """Run the module's runtime command; a non-zero exit is still ``Ok``."""
        loaded = self.load(module_id)
        if isinstance(loaded, Err):
            return loaded
        manifest = loaded.value
        if manifest.runtime is None:
            return Err(ModuleError(module_id, f"Module '{module_id}' has no runtime"))

        env = {input_env_var(key): value for key, value in inputs}
        env[MODULE_PATH_ENV_VAR] = str(manifest.path)
        if payload is not None:
            env[PAYLOAD_ENV_VAR] = json.dumps(payload)

        cmd = [*manifest.runtime.run, *args]
        result = capture(cmd, cwd=working_dir or manifest.path, env=env, timeout=self._timeout)
        if isinstance(result, Err):
            e = result.error
            return Err(ModuleError(module_id, f"Runtime of '{module_id}' could not run", e.stderr))

        out = result.value
        return Ok(RuntimeOutput(exit_code=out.returncode, stdout=out.stdout, stderr=out.stderr))
