from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class NotFound:
    path: Path


@dataclass(frozen=True, slots=True)
class ReadError:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class WriteError:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class PatternNotFound:
    field: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class AmbiguousPattern:
    field: str
    occurrences: int


@dataclass(frozen=True, slots=True)
class CorruptRecord:
    reason: str
    line: int | None = None


@dataclass(frozen=True, slots=True)
class InvalidTransition:
    reason: str


@dataclass(frozen=True, slots=True)
class SourceUnavailable:
    query: str
    reason: str


@dataclass(frozen=True, slots=True)
class LockTimeout:
    lock_path: Path
    timeout: float


RecordError = PatternNotFound | AmbiguousPattern | CorruptRecord
IOFailure = NotFound | ReadError | WriteError | LockTimeout

SyncError = RecordError | IOFailure | InvalidTransition | SourceUnavailable
