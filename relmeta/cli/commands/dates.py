"""Date commands - DateSync and BulkDateRewrite."""

from __future__ import annotations

import typer

from relmeta.cli.commands._helpers import print_outcome, unwrap_or_exit
from relmeta.cli.context import CLIContext, build_context
from relmeta.sync.pipeline import RunReport, RunState

_DRY_RUN = typer.Option(False, "--dry-run", help="Compute the update without writing")


def sync_today(dry_run: bool = _DRY_RUN) -> None:
    """Set the release date to today (no-op when already today)."""
    ctx = build_context()
    report = unwrap_or_exit(ctx.sync_service().sync_today(dry_run=dry_run), ctx)
    _print_date_change(report, ctx)


def sync_last_commit(dry_run: bool = _DRY_RUN) -> None:
    """Set the release date to the date of the last commit."""
    ctx = build_context()
    report = unwrap_or_exit(ctx.sync_service().sync_last_commit(dry_run=dry_run), ctx)
    _print_date_change(report, ctx)


def post_commit_hook(dry_run: bool = _DRY_RUN) -> None:
    """Run from git's post-commit hook; same as sync-last-commit."""
    sync_last_commit(dry_run=dry_run)


def rewrite_all_dates(dry_run: bool = _DRY_RUN) -> None:
    """Set the release date AND every milestone date to today.

    Historical milestone dates are overwritten.
    """
    ctx = build_context()
    ctx.console.warning("rewriting every milestone date; historical dates will be lost")
    report = unwrap_or_exit(ctx.sync_service().rewrite_all_dates(dry_run=dry_run), ctx)
    changed = sum(
        1 for a, b in zip(report.before.milestones, report.after.milestones) if a.date != b.date
    )
    ctx.console.print(f"all dates set to: {report.after.release_date}")
    ctx.console.print(f"milestones changed: {changed} of {len(report.after.milestones)}")
    print_outcome(report, ctx)


def _print_date_change(report: RunReport, ctx: CLIContext) -> None:
    if report.state != RunState.SKIPPED:
        ctx.console.print(
            f"release date: {report.before.release_date} -> {report.after.release_date}"
        )
    print_outcome(report, ctx)
