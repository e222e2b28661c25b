"""Filesystem helpers."""

from __future__ import annotations

import contextlib
import fcntl
import os
import tempfile
import time
from collections.abc import Iterator
from pathlib import Path

__all__ = ["LockBusyError", "atomic_write_text", "exclusive_lock"]

_LOCK_POLL_SECONDS = 0.05


class LockBusyError(Exception):
    """Raised when an exclusive lock cannot be acquired in time."""

    def __init__(self, lock_path: Path, timeout: float) -> None:
        super().__init__(f"lock {lock_path} still held after {timeout}s")
        self.lock_path = lock_path
        self.timeout = timeout


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        if path.exists():
            os.chmod(tmp_path, path.stat().st_mode & 0o7777)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


@contextlib.contextmanager
def exclusive_lock(lock_path: Path, *, timeout: float) -> Iterator[None]:
    """Hold an advisory ``flock`` on lock_path for the duration of the block.

    The lock lives in a sidecar file so the guarded file itself can be
    swapped with ``os.replace`` while the lock is held. Acquisition polls
    until ``timeout`` seconds have passed.

    Raises:
        LockBusyError: Another process kept the lock past the timeout.
        OSError: The lock file cannot be created.
    """
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + timeout
    with lock_path.open("a+", encoding="utf-8") as handle:
        while True:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    raise LockBusyError(lock_path, timeout) from None
                time.sleep(_LOCK_POLL_SECONDS)
        try:
            yield
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
