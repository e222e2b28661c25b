"""Error presentation utilities.

One place maps every sync error to its message and exit code, so all
commands report failures the same way.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relmeta.core.errors import ErrorCode
from relmeta.core.sync_errors import (
    AmbiguousPattern,
    CorruptRecord,
    InvalidTransition,
    LockTimeout,
    NotFound,
    PatternNotFound,
    ReadError,
    SourceUnavailable,
    SyncError,
    WriteError,
)
from relmeta.output.console import Style

if TYPE_CHECKING:
    from relmeta.output.console import ConsoleProtocol

__all__ = ["describe_sync_error", "print_sync_error", "sync_error_exit_code"]


def describe_sync_error(error: SyncError) -> str:
    """One-line description of a sync error."""
    match error:
        case NotFound(path=path):
            return f"release record not found: {path}"
        case ReadError(path=path, reason=reason):
            return f"cannot read {path}: {reason}"
        case WriteError(path=path, reason=reason):
            return f"cannot write {path}: {reason}"
        case PatternNotFound(field=field):
            return f"field not found in release record: {field}"
        case AmbiguousPattern(field=field, occurrences=n):
            return f"field {field} appears {n} times in release record"
        case CorruptRecord(reason=reason, line=line):
            where = f" (line {line})" if line is not None else ""
            return f"corrupt release record{where}: {reason}"
        case InvalidTransition(reason=reason):
            return f"refusing update: {reason}"
        case SourceUnavailable(query=query, reason=reason):
            return f"commit history unavailable ({query}): {reason}"
        case LockTimeout(lock_path=lock_path, timeout=timeout):
            return f"release record is locked by another run ({lock_path}, waited {timeout:g}s)"


def print_sync_error(error: SyncError, console: ConsoleProtocol) -> None:
    """Print a sync error with a hint where one helps."""
    console.error(describe_sync_error(error))
    match error:
        case PatternNotFound(hint=hint) if hint:
            console.print(f"hint: {hint}", Style.DIM)
        case NotFound():
            console.print(
                "hint: create the record first or set [record] path in relmeta.toml",
                Style.DIM,
            )
        case SourceUnavailable():
            console.print("hint: run inside a git repository with at least one commit", Style.DIM)
        case LockTimeout():
            console.print("hint: re-run once the other relmeta command has finished", Style.DIM)
        case _:
            pass


def sync_error_exit_code(error: SyncError) -> int:
    """Get exit code for a sync error."""
    match error:
        case PatternNotFound() | AmbiguousPattern() | CorruptRecord():
            return int(ErrorCode.SYNC_ERROR)
        case InvalidTransition() | SourceUnavailable():
            return int(ErrorCode.SYNC_ERROR)
        case NotFound() | ReadError() | WriteError() | LockTimeout():
            return int(ErrorCode.IO_ERROR)
