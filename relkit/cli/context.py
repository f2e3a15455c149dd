from __future__ import annotations

from dataclasses import dataclass

import typer

from relkit.core.config import Config, load_config_or_default
from relkit.core.errors import ErrorCode
from relkit.core.result import Err
from relkit.core.workspace import Workspace, detect_workspace
from relkit.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace: Workspace
    config: Config
    console: ConsoleProtocol


def build_context(*, json_output: bool = False) -> CLIContext:
    """Detect the workspace and load its config.

    With ``json_output`` human-readable output goes to stderr so stdout stays
    machine-readable.
    """
    workspace_result = detect_workspace()
    if isinstance(workspace_result, Err):
        typer.echo(f"error: {workspace_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    workspace = workspace_result.value
    return CLIContext(
        workspace=workspace,
        config=load_config_or_default(workspace.config_path),
        console=RichConsole(stderr=json_output),
    )
