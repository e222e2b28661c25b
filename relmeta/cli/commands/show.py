"""Show command - display the current release record."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from relmeta.cli.commands._helpers import unwrap_or_exit
from relmeta.cli.context import build_context
from relmeta.record.model import ReleaseRecord
from relmeta.record.summary import DevelopmentStats, development_stats

_console = Console(legacy_windows=False)


def _render_record(record: ReleaseRecord) -> Text:
    text = Text()
    text.append(record.version_string, style="bold cyan")
    text.append("\n")
    for label, value in (
        ("release date", record.release_date),
        ("build", str(record.build)),
        ("stage", record.stage),
    ):
        text.append(f"{label:<13}", style="dim")
        text.append(value)
        text.append("\n")

    latest = record.latest_milestone
    if latest is None:
        text.append("no milestones yet", style="dim")
        return text

    text.append("\n")
    text.append(f"{latest.version}", style="bold")
    text.append(f"  {latest.date}", style="dim")
    for feature in latest.features:
        text.append(f"\n  - {feature}")
    return text


def _render_stats(stats: DevelopmentStats) -> Text:
    text = Text()
    rows = (
        ("commits", stats.total_commits),
        ("milestones", stats.total_milestones),
        ("features", stats.total_features),
        ("major", stats.major_releases),
        ("minor", stats.minor_features),
        ("patch", stats.bug_fixes),
    )
    for i, (label, value) in enumerate(rows):
        if i > 0:
            text.append("\n")
        text.append(f"{label:<13}", style="dim")
        text.append(str(value), style="green")
    return text


def show() -> None:
    """Show version, build, release date, the latest milestone and statistics."""
    ctx = build_context()
    record = unwrap_or_exit(ctx.sync_service().load(), ctx)

    _console.print(Panel(_render_record(record), title="Release", expand=False))
    _console.print(
        Panel(_render_stats(development_stats(record)), title="Statistics", expand=False)
    )
