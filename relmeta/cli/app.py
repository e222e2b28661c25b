from __future__ import annotations

import os
from pathlib import Path

import typer

from relmeta import __version__
from relmeta.cli.commands.bump import bump
from relmeta.cli.commands.dates import (
    post_commit_hook,
    rewrite_all_dates,
    sync_last_commit,
    sync_today,
)
from relmeta.cli.commands.hook import install_hook
from relmeta.cli.commands.show import show
from relmeta.core.errors import ErrorCode
from relmeta.core.project import ENV_VAR


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(bump)
app.command("sync-today")(sync_today)
app.command("sync-last-commit")(sync_last_commit)
app.command("rewrite-all-dates")(rewrite_all_dates)
app.command("post-commit-hook")(post_commit_hook)
app.command()(show)
app.command("install-hook")(install_hook)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Project root (overrides auto detection)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if root is not None:
        try:
            resolved = root.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --root: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        if not resolved.is_dir():
            typer.echo(f"error: --root '{resolved}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[ENV_VAR] = str(resolved)


def main() -> None:
    app()
