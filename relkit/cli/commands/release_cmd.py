from __future__ import annotations

from typing import NoReturn

import typer

from relkit.cli.commands._helpers import echo_json, exit_with_code, release_error_code
from relkit.cli.context import CLIContext, build_context
from relkit.cli.render import render_plan, render_run
from relkit.core.errors import ErrorCode
from relkit.core.result import Err
from relkit.output.console import Style
from relkit.release.errors import ReleaseError
from relkit.release.model import RELEASE_BUMPS, ReleaseOptions, parse_bump
from relkit.release.service import (
    ReleaseEnvironment,
    load_release_environment,
    plan_release,
    run_release,
)

release_app = typer.Typer(add_completion=False, no_args_is_help=True)

_BUMP_HELP = "Version bump: patch, minor or major (default from .relkit/config.toml)"


def _fail(ctx: CLIContext, error: ReleaseError) -> NoReturn:
    ctx.console.error(error.message)
    if error.hint:
        ctx.console.print(f"hint: {error.hint}", Style.DIM)
    exit_with_code(int(release_error_code(error.kind)))


def _options(
    ctx: CLIContext,
    *,
    bump: str | None,
    no_tag: bool,
    no_push: bool,
    no_commit: bool,
    message: str | None,
    dry_run: bool = False,
) -> ReleaseOptions:
    raw = bump or ctx.config.release.default_bump
    bump_type = parse_bump(raw)
    if bump_type is None:
        _fail(
            ctx,
            ReleaseError(
                kind="invalid_input",
                message=f"Invalid bump type: {raw}",
                hint=f"Expected one of: {', '.join(RELEASE_BUMPS)}",
            ),
        )
    return ReleaseOptions(
        bump_type=bump_type,
        dry_run=dry_run,
        no_tag=no_tag,
        no_push=no_push,
        no_commit=no_commit,
        commit_message=message,
    )


def _environment(ctx: CLIContext, component: str) -> ReleaseEnvironment:
    env = load_release_environment(
        workspace=ctx.workspace, component_id=component, config=ctx.config
    )
    if isinstance(env, Err):
        _fail(ctx, env.error)
    return env.value


def _show_plan(
    ctx: CLIContext, env: ReleaseEnvironment, options: ReleaseOptions, *, json_output: bool
) -> None:
    planned = plan_release(env=env, options=options)
    if isinstance(planned, Err):
        _fail(ctx, planned.error)
    if json_output:
        echo_json(planned.value.to_dict())
    else:
        render_plan(ctx.console, planned.value)


@release_app.command("plan")
def plan_cmd(
    component: str = typer.Argument(..., help="Component id"),
    bump: str | None = typer.Option(None, "--bump", "-b", help=_BUMP_HELP),
    no_tag: bool = typer.Option(False, "--no-tag", help="Do not create a tag"),
    no_push: bool = typer.Option(False, "--no-push", help="Do not push or publish"),
    no_commit: bool = typer.Option(
        False, "--no-commit", help="Do not auto-commit uncommitted changes"
    ),
    message: str | None = typer.Option(
        None, "--message", "-m", help="Message for the pre-release commit"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the plan as JSON"),
) -> None:
    """Preview the release steps for a component."""
    ctx = build_context(json_output=json_output)
    options = _options(
        ctx, bump=bump, no_tag=no_tag, no_push=no_push, no_commit=no_commit, message=message
    )
    _show_plan(ctx, _environment(ctx, component), options, json_output=json_output)


@release_app.command("run")
def run_cmd(
    component: str = typer.Argument(..., help="Component id"),
    bump: str | None = typer.Option(None, "--bump", "-b", help=_BUMP_HELP),
    no_tag: bool = typer.Option(False, "--no-tag", help="Do not create a tag"),
    no_push: bool = typer.Option(False, "--no-push", help="Do not push or publish"),
    no_commit: bool = typer.Option(
        False, "--no-commit", help="Do not auto-commit uncommitted changes"
    ),
    message: str | None = typer.Option(
        None, "--message", "-m", help="Message for the pre-release commit"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the plan without running it"),
    json_output: bool = typer.Option(False, "--json", help="Print the run result as JSON"),
) -> None:
    """Release a component: bump, commit, tag, push and publish."""
    ctx = build_context(json_output=json_output)
    options = _options(
        ctx,
        bump=bump,
        no_tag=no_tag,
        no_push=no_push,
        no_commit=no_commit,
        message=message,
        dry_run=dry_run,
    )
    env = _environment(ctx, component)

    if dry_run:
        _show_plan(ctx, env, options, json_output=json_output)
        return

    result = run_release(env=env, options=options, console=ctx.console)
    if isinstance(result, Err):
        _fail(ctx, result.error)

    if json_output:
        echo_json(result.value.to_dict())
    else:
        render_run(ctx.console, result.value)

    if result.value.result.has_failures:
        exit_with_code(int(ErrorCode.STEP_FAILED))
