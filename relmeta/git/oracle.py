"""Read-only view of the commit history.

The oracle answers two questions about the repository that encloses the
release record:

    oracle = CommitOracle(Path("/path/to/repo"))

    match oracle.commit_count():
        case Ok(count):
            print(f"build {count}")
        case Err(e):
            print(f"history unavailable: {e.reason}")

Every failure (git missing, not a repository, no commits yet, timeout,
output that does not parse) is reported as ``SourceUnavailable``. Nothing
here raises.
"""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path

from relmeta.core.config import DEFAULT_GIT_TIMEOUT_SECONDS
from relmeta.core.result import Err, Ok, Result
from relmeta.core.sync_errors import SourceUnavailable
from relmeta.platform.process import ProcessError
from relmeta.platform.process import run as run_process

__all__ = ["GIT_ENV", "CommitOracle", "parse_commit_count", "parse_commit_date"]

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

LATEST_COMMIT_DATE = "latest commit date"
COMMIT_COUNT = "commit count"

# Untranslated messages, and never wait on a credential prompt.
GIT_ENV = {"LC_ALL": "C", "GIT_TERMINAL_PROMPT": "0"}


def parse_commit_date(output: str) -> str | None:
    """Validate ``git log --date=short`` output. Returns None if malformed."""
    s = output.strip()
    if not _DATE_RE.match(s):
        return None
    try:
        date.fromisoformat(s)
    except ValueError:
        return None
    return s


def parse_commit_count(output: str) -> int | None:
    """Validate ``git rev-list --count`` output. Returns None if malformed."""
    s = output.strip()
    if not s.isdigit():
        return None
    return int(s)


class CommitOracle:
    """Commit-history queries against one repository.

    Attributes:
        path: Directory inside the repository
        timeout: Seconds before a git query is abandoned
    """

    def __init__(self, path: Path, *, timeout: float = DEFAULT_GIT_TIMEOUT_SECONDS) -> None:
        self.path = path
        self.timeout = timeout

    def latest_commit_date(self) -> Result[str, SourceUnavailable]:
        """Author date of HEAD as ``YYYY-MM-DD``."""
        result = self._run(["log", "-1", "--format=%ad", "--date=short"])
        match result:
            case Err(e):
                return Err(SourceUnavailable(query=LATEST_COMMIT_DATE, reason=e.detail))
            case Ok(stdout):
                parsed = parse_commit_date(stdout)
                if parsed is None:
                    return Err(
                        SourceUnavailable(
                            query=LATEST_COMMIT_DATE,
                            reason=f"unexpected git output: {stdout.strip()!r}",
                        )
                    )
                return Ok(parsed)

    def commit_count(self) -> Result[int, SourceUnavailable]:
        """Number of commits reachable from HEAD."""
        result = self._run(["rev-list", "--count", "HEAD"])
        match result:
            case Err(e):
                return Err(SourceUnavailable(query=COMMIT_COUNT, reason=e.detail))
            case Ok(stdout):
                parsed = parse_commit_count(stdout)
                if parsed is None:
                    return Err(
                        SourceUnavailable(
                            query=COMMIT_COUNT,
                            reason=f"unexpected git output: {stdout.strip()!r}",
                        )
                    )
                return Ok(parsed)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(
            ["git", "-C", str(self.path), *args],
            cwd=self.path,
            timeout=self.timeout,
            env=GIT_ENV,
        )
