"""Calendar date source."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

__all__ = ["Today", "today_iso"]

Today = Callable[[], str]


def today_iso(*, utc: bool = True) -> str:
    """Current calendar date as ``YYYY-MM-DD``."""
    now = datetime.now(UTC) if utc else datetime.now().astimezone()
    return now.date().isoformat()
