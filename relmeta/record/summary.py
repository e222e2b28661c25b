from __future__ import annotations

from dataclasses import dataclass

from .model import ReleaseRecord

__all__ = ["DevelopmentStats", "development_stats"]


@dataclass(frozen=True, slots=True)
class DevelopmentStats:
    total_commits: int
    total_features: int
    total_milestones: int
    major_releases: int
    minor_features: int
    bug_fixes: int


def development_stats(record: ReleaseRecord) -> DevelopmentStats:
    """Counters shown by ``relmeta show``.

    The build number stands in for the commit count, and the version
    components for the number of major, minor and patch releases.
    """
    return DevelopmentStats(
        total_commits=record.build,
        total_features=sum(len(m.features) for m in record.milestones),
        total_milestones=len(record.milestones),
        major_releases=record.version.major,
        minor_features=record.version.minor,
        bug_fixes=record.version.patch,
    )
