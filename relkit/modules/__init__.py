"""Workspace modules: manifests and the subprocess-backed registry."""

from .manifest import ModuleAction, ModuleError, ModuleManifest, ModuleRuntime, load_manifest
from .registry import LocalModuleRegistry, RuntimeOutput

__all__ = [
    "LocalModuleRegistry",
    "ModuleAction",
    "ModuleError",
    "ModuleManifest",
    "ModuleRuntime",
    "RuntimeOutput",
    "load_manifest",
]
