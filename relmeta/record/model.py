from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

__all__ = [
    "DEFAULT_STAGE",
    "BumpLevel",
    "Milestone",
    "ReleaseRecord",
    "SemVer",
    "is_iso_date",
    "parse_version",
]

DEFAULT_STAGE = "stable"

_VERSION_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class BumpLevel(str, Enum):
    major = "major"
    minor = "minor"
    patch = "patch"


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def bump(self, level: BumpLevel) -> SemVer:
        match level:
            case BumpLevel.major:
                return SemVer(self.major + 1, 0, 0)
            case BumpLevel.minor:
                return SemVer(self.major, self.minor + 1, 0)
            case BumpLevel.patch:
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump level: {level}")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_version(text: str) -> SemVer | None:
    m = _VERSION_RE.match(text)
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def is_iso_date(text: str) -> bool:
    """True for a real calendar date written as ``YYYY-MM-DD``."""
    if not _DATE_RE.match(text):
        return False
    try:
        date.fromisoformat(text)
    except ValueError:
        return False
    return True


@dataclass(frozen=True, slots=True)
class Milestone:
    """One entry of the release history."""

    version: str
    date: str
    features: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ReleaseRecord:
    """Typed view of the persisted release record.

    Attributes:
        version: Current semantic version
        build: Build number, normally the commit count at the last bump
        release_date: ISO date of the current release
        milestones: History, oldest first; only ever appended to
        stage: Development stage label (alpha, beta, rc, stable)
    """

    version: SemVer
    build: int
    release_date: str
    milestones: tuple[Milestone, ...] = field(default_factory=tuple)
    stage: str = DEFAULT_STAGE

    @property
    def version_string(self) -> str:
        """Full version label, e.g. ``1.8.14-stable+72``."""
        return f"{self.version}-{self.stage}+{self.build}"

    @property
    def latest_milestone(self) -> Milestone | None:
        return self.milestones[-1] if self.milestones else None
