"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from relmeta.core.result import Err, Result
from relmeta.core.sync_errors import SyncError
from relmeta.output.console import Style
from relmeta.output.errors import print_sync_error, sync_error_exit_code
from relmeta.sync.pipeline import RunReport, RunState

if TYPE_CHECKING:
    from relmeta.cli.context import CLIContext


def unwrap_or_exit[T](result: Result[T, SyncError], ctx: CLIContext) -> T:
    """Return the value of an Ok result, or report the error and exit.

    Replaces the repeated pattern:
        match result:
            case Err(e):
                print_sync_error(e, ctx.console)
                raise typer.Exit(code=sync_error_exit_code(e))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        print_sync_error(result.error, ctx.console)
        raise typer.Exit(code=sync_error_exit_code(result.error))
    return result.value


def print_outcome(report: RunReport, ctx: CLIContext) -> None:
    """Report where a run ended (written, skipped, previewed)."""
    match report.state:
        case RunState.PERSISTED:
            ctx.console.success(f"updated {report.path}")
        case RunState.SKIPPED:
            ctx.console.success(f"already up to date: {report.after.release_date}")
        case RunState.TRANSFORMED:
            ctx.console.print(f"dry run: {report.path} not written", Style.DIM)
        case _:
            pass
