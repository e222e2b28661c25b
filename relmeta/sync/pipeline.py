"""Single-pass read-modify-write pipeline shared by every synchronizer.

    START -> LOADED -> TRANSFORMED -> PERSISTED
                   \\-> SKIPPED            (already converged, no write)
    any step      ->  FAILED              (returned as Err)

The whole cycle runs under an exclusive lock on the record's sidecar lock
file, so a post-commit hook and a scheduled sync can never interleave
their read and write. The transformation is computed and verified in
memory before the single write, so a failure never leaves a half-updated
record.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from relmeta.core.result import Err, Ok, Result
from relmeta.core.sync_errors import LockTimeout, SyncError, WriteError
from relmeta.output.console import ConsoleProtocol, Style
from relmeta.platform.files import LockBusyError, exclusive_lock
from relmeta.record import store
from relmeta.record.codec import RecordCodec
from relmeta.record.model import ReleaseRecord

__all__ = [
    "RunReport",
    "RunState",
    "SyncPipeline",
    "Transform",
    "Transformation",
]


class RunState(Enum):
    START = "start"
    LOADED = "loaded"
    TRANSFORMED = "transformed"
    PERSISTED = "persisted"
    SKIPPED = "skipped"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Transformation:
    record: ReleaseRecord
    converged: bool = False


Transform = Callable[[ReleaseRecord], Transformation]


@dataclass(frozen=True, slots=True)
class RunReport:
    """Outcome of one pipeline run.

    ``state`` is PERSISTED, SKIPPED, or TRANSFORMED for a dry run.
    """

    state: RunState
    path: Path
    before: ReleaseRecord
    after: ReleaseRecord
    text: str
    trail: tuple[RunState, ...]

    @property
    def written(self) -> bool:
        return self.state == RunState.PERSISTED


class SyncPipeline:
    """Runs one transformation against the record file.

    Attributes:
        codec: Record codec
        record_path: The record file
        lock_path: Sidecar lock file
        lock_timeout: Seconds to wait for a concurrent run to finish
        console: Where state transitions are reported (dim)
    """

    def __init__(
        self,
        *,
        codec: RecordCodec,
        record_path: Path,
        lock_path: Path,
        lock_timeout: float,
        console: ConsoleProtocol,
    ) -> None:
        self.codec = codec
        self.record_path = record_path
        self.lock_path = lock_path
        self.lock_timeout = lock_timeout
        self.console = console

    def run(self, transform: Transform, *, dry_run: bool = False) -> Result[RunReport, SyncError]:
        trail = [RunState.START]
        try:
            with exclusive_lock(self.lock_path, timeout=self.lock_timeout):
                result = self._cycle(transform, trail, dry_run=dry_run)
        except LockBusyError as e:
            result = Err(LockTimeout(lock_path=e.lock_path, timeout=e.timeout))
        except OSError as e:
            result = Err(WriteError(path=self.lock_path, reason=str(e)))

        if isinstance(result, Err):
            self._enter(trail, RunState.FAILED)
        return result

    def _cycle(
        self,
        transform: Transform,
        trail: list[RunState],
        *,
        dry_run: bool,
    ) -> Result[RunReport, SyncError]:
        loaded = store.load(self.codec, self.record_path)
        if isinstance(loaded, Err):
            return loaded
        self._enter(trail, RunState.LOADED)

        outcome = transform(loaded.value.record)
        if outcome.converged:
            self._enter(trail, RunState.SKIPPED)
            return Ok(self._report(RunState.SKIPPED, loaded.value, outcome.record, trail))

        self._enter(trail, RunState.TRANSFORMED)

        if dry_run:
            preview = store.render_update(self.codec, loaded.value, outcome.record)
            if isinstance(preview, Err):
                return preview
            return Ok(
                self._report(
                    RunState.TRANSFORMED, loaded.value, outcome.record, trail, preview.value
                )
            )

        written = store.persist(self.codec, loaded.value, outcome.record)
        if isinstance(written, Err):
            return written
        self._enter(trail, RunState.PERSISTED)
        return Ok(
            self._report(RunState.PERSISTED, loaded.value, outcome.record, trail, written.value)
        )

    def _enter(self, trail: list[RunState], state: RunState) -> None:
        trail.append(state)
        self.console.print(f"{state}: {self.record_path.name}", Style.DIM)

    def _report(
        self,
        state: RunState,
        loaded: store.LoadedRecord,
        after: ReleaseRecord,
        trail: list[RunState],
        text: str | None = None,
    ) -> RunReport:
        return RunReport(
            state=state,
            path=self.record_path,
            before=loaded.record,
            after=after,
            text=loaded.text if text is None else text,
            trail=tuple(trail),
        )
