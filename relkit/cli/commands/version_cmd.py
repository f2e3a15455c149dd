from __future__ import annotations

import typer

from relkit.cli.commands._helpers import echo_json, load_component_or_exit
from relkit.cli.context import build_context
from relkit.core.errors import ErrorCode
from relkit.core.result import Err, Ok
from relkit.output.console import Style
from relkit.release.stores import FileVersionStore

version_app = typer.Typer(add_completion=False, no_args_is_help=True)


@version_app.command("show")
def show(
    component: str = typer.Argument(..., help="Component id"),
    json_output: bool = typer.Option(False, "--json", help="Print as JSON"),
) -> None:
    """Print the current version of a component."""
    ctx = build_context(json_output=json_output)
    comp = load_component_or_exit(ctx, component)

    match FileVersionStore().read_version(comp):
        case Err(e):
            ctx.console.error(e.message)
            if e.hint:
                ctx.console.print(f"hint: {e.hint}", Style.DIM)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        case Ok(info):
            pass

    if json_output:
        echo_json(
            {"component_id": comp.id, "version": info.version, "version_file": str(info.path)}
        )
    else:
        typer.echo(info.version)
