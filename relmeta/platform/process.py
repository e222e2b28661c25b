"""Captured subprocess calls that report failure as a value.

relmeta only ever spawns short, non-interactive queries (``git log``,
``git rev-list``), so ``run`` always captures text output, always takes a
timeout, and folds every way a query can go wrong into one ``ProcessError``.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from relmeta.core.result import Err, Ok, Result

__all__ = ["LAUNCH_FAILED", "ProcessError", "run"]

# Return code used when the process never produced one.
LAUNCH_FAILED = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A query that did not exit cleanly.

    ``returncode`` is ``LAUNCH_FAILED`` when the binary could not be
    started or was killed on timeout; ``stderr`` then describes why.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def timed_out(self) -> bool:
        return self.returncode == LAUNCH_FAILED and self.stderr.startswith("timed out")

    @property
    def detail(self) -> str:
        """First non-empty line of stderr, for one-line messages."""
        first = next((line.strip() for line in self.stderr.splitlines() if line.strip()), "")
        return first or str(self)

    def __str__(self) -> str:
        shown = " ".join(self.command[:3]) + (" ..." if len(self.command) > 3 else "")
        return f"{shown} failed (exit {self.returncode})"


def _environment(overrides: Mapping[str, str] | None) -> dict[str, str] | None:
    if not overrides:
        return None
    return {**os.environ, **overrides}


def run(
    cmd: list[str],
    *,
    cwd: Path,
    timeout: float,
    env: Mapping[str, str] | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` to completion and return its stdout.

    ``env`` holds variables layered over the current environment.
    """
    command = tuple(cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=_environment(env),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return Err(ProcessError(command, LAUNCH_FAILED, partial, f"timed out after {timeout:g}s"))
    except OSError as e:
        return Err(ProcessError(command, LAUNCH_FAILED, "", f"cannot start {cmd[0]}: {e}"))

    if proc.returncode != 0:
        return Err(ProcessError(command, proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)
