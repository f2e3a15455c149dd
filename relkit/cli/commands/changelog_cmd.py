from __future__ import annotations

import typer

from relkit.cli.commands._helpers import echo_json, exit_on_error, load_component_or_exit
from relkit.cli.context import CLIContext, build_context
from relkit.core.component import Component
from relkit.core.errors import ErrorCode
from relkit.core.result import Err, Ok
from relkit.release.changelog import (
    check_next_section_content,
    extract_latest_notes,
    unreleased_error,
)
from relkit.release.stores import FileChangelogStore

changelog_app = typer.Typer(add_completion=False, no_args_is_help=True)


def _read(ctx: CLIContext, component: Component) -> str:
    match FileChangelogStore().read_changelog(component):
        case Err(e):
            ctx.console.error(e.message)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
        case Ok(content):
            return content


@changelog_app.command("notes")
def notes(
    component: str = typer.Argument(..., help="Component id"),
    json_output: bool = typer.Option(False, "--json", help="Print as JSON"),
) -> None:
    """Print the notes of the latest released version."""
    ctx = build_context(json_output=json_output)
    comp = load_component_or_exit(ctx, component)

    text = extract_latest_notes(_read(ctx, comp))
    if text is None:
        ctx.console.error("No finalized changelog entries found")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if json_output:
        echo_json({"component_id": comp.id, "notes": text})
    else:
        typer.echo(text)


@changelog_app.command("check")
def check(
    component: str = typer.Argument(..., help="Component id"),
) -> None:
    """Check that the unreleased section has entries."""
    ctx = build_context()
    comp = load_component_or_exit(ctx, component)

    aliases = comp.changelog_aliases or ctx.config.changelog.next_section_aliases
    status = check_next_section_content(_read(ctx, comp), aliases)
    error = unreleased_error(status, aliases)
    if error is not None:
        exit_on_error(Err(error), ctx, ErrorCode.USER_ERROR)
    ctx.console.success(f"{comp.id}: unreleased changes ready")
