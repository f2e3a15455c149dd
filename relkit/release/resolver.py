from __future__ import annotations

from collections.abc import Sequence

from relkit.modules.manifest import ModuleManifest
from relkit.release.steps import BuiltIn, PluginAction, PluginRuntime, classify_step

__all__ = ["ReleaseCapabilityResolver", "resolve_module_actions"]


def resolve_module_actions(
    manifests: Sequence[ModuleManifest], action_id: str
) -> list[ModuleManifest]:
    """Modules advertising ``action_id``, in load order."""
    return [m for m in manifests if m.has_action(action_id)]


class ReleaseCapabilityResolver:
    """Built-in step kinds plus whatever the loaded modules advertise.

    ``module.run`` is always supported; whether its module exists is checked
    when the step executes.
    """

    def __init__(self, manifests: Sequence[ModuleManifest]) -> None:
        self._manifests = tuple(manifests)

    def is_supported(self, step_type: str) -> bool:
        match classify_step(step_type):
            case BuiltIn() | PluginRuntime():
                return True
            case PluginAction(action_id):
                return bool(resolve_module_actions(self._manifests, action_id))

    def missing(self, step_type: str) -> list[str]:
        match classify_step(step_type):
            case PluginAction(action_id) if not resolve_module_actions(self._manifests, action_id):
                return [f"Missing action '{action_id}'"]
            case _:
                return []
