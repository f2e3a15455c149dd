"""Core types: results, exit codes, configuration and workspace records."""

from .component import Component, Project, ReleaseConfig, ReleaseStepConfig, load_component
from .config import Config, ConfigError, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok
from .workspace import Workspace, WorkspaceError, detect_workspace

__all__ = [
    # component
    "Component",
    "Project",
    "ReleaseConfig",
    "ReleaseStepConfig",
    "load_component",
    # config
    "Config",
    "ConfigError",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
    # workspace
    "Workspace",
    "WorkspaceError",
    "detect_workspace",
]
