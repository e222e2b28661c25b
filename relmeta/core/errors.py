"""Error codes for CLI exit status.

Every command exits with one of these values. They are part of the
command-line contract (cron jobs and git hooks look at them), so the
numbers must remain stable:
- 0: Success, including a date sync that found nothing to change
- 1: Sync error (record field missing or ambiguous, corrupt record,
     invalid transition, commit history unavailable)
- 2: Environment error (no project root, invalid relmeta.toml)
- 5: I/O error (record missing, unreadable, unwritable, lock busy)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    SYNC_ERROR = 1
    ENV_ERROR = 2
    IO_ERROR = 5

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
