"""Shared helpers for CLI commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from relkit.core.component import Component, load_component
from relkit.core.errors import ErrorCode
from relkit.core.result import Err, Ok, Result
from relkit.output.console import Style

if TYPE_CHECKING:
    from relkit.cli.context import CLIContext


T = TypeVar("T")
E = TypeVar("E")


def exit_on_error(
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> None:
    """Exit with ``error_code`` if result is Err, otherwise return.

    Expects error objects to have 'message' and optional 'hint' attributes.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(error_code))


def load_component_or_exit(ctx: CLIContext, component_id: str) -> Component:
    match load_component(ctx.workspace, component_id):
        case Err(e):
            ctx.console.error(e.message)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
        case Ok(component):
            return component


def release_error_code(kind: str) -> ErrorCode:
    if kind == "invalid_graph":
        return ErrorCode.GRAPH_ERROR
    if kind in {"config", "module_not_found", "io"}:
        return ErrorCode.ENV_ERROR
    return ErrorCode.USER_ERROR


def echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
