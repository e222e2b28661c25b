"""Bump command - ManualBump."""

from __future__ import annotations

import typer

from relmeta.cli.commands._helpers import print_outcome, unwrap_or_exit
from relmeta.cli.context import build_context
from relmeta.output.console import Style
from relmeta.record.model import BumpLevel


def bump(
    level: BumpLevel = typer.Argument(BumpLevel.patch, help="Version component to bump"),
    build: int | None = typer.Option(
        None,
        "--build",
        min=0,
        help="Use this build number instead of the git commit count",
    ),
    feature: list[str] | None = typer.Option(
        None,
        "--feature",
        "-f",
        help="Feature note for the new milestone (repeatable)",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Compute the update without writing"),
) -> None:
    """Bump the version, sync the build number and record a milestone."""
    ctx = build_context()
    ctx.console.info(f"bumping {level.value} version")

    report = unwrap_or_exit(
        ctx.sync_service().bump(level, build=build, features=feature or (), dry_run=dry_run),
        ctx,
    )
    after = report.after

    ctx.console.print(f"version: {after.version_string}")
    ctx.console.print(f"release date: {after.release_date}")
    ctx.console.print(f"build: {after.build}")
    print_outcome(report, ctx)

    if report.written:
        ctx.console.header("Next steps")
        ctx.console.print(f"1. Review the changes in {report.path.name}", Style.DIM)
        ctx.console.print(
            f'2. Commit with message: "v{after.version}: Auto-generated version update"',
            Style.DIM,
        )
        ctx.console.print("3. Push to the repository", Style.DIM)
