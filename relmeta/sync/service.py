"""The synchronizers.

Each method is one independent, short-lived operation on the record:

- ``bump``: ManualBump. Build number follows the commit count.
- ``sync_today``: DateSync to the current calendar date; skips when converged.
- ``sync_last_commit``: DateSync to the date of HEAD; fails when git cannot
  answer (never falls back to today).
- ``rewrite_all_dates``: BulkDateRewrite to today, milestones included.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import partial
from pathlib import Path

from relmeta.core.config import Config
from relmeta.core.project import Project
from relmeta.core.result import Err, Ok, Result
from relmeta.core.sync_errors import IOFailure, RecordError, SyncError
from relmeta.git.oracle import CommitOracle
from relmeta.output.console import ConsoleProtocol
from relmeta.platform.clock import Today, today_iso
from relmeta.record import store
from relmeta.record.codec import RecordCodec
from relmeta.record.model import BumpLevel, ReleaseRecord

from .pipeline import RunReport, SyncPipeline, Transformation

__all__ = ["SyncService"]


class SyncService:
    def __init__(
        self,
        *,
        project: Project,
        config: Config,
        console: ConsoleProtocol,
        oracle: CommitOracle | None = None,
        today: Today | None = None,
    ) -> None:
        self._project = project
        self._config = config
        self._console = console
        self._oracle = oracle or CommitOracle(project.root, timeout=config.git.timeout)
        self._today = today or partial(today_iso, utc=config.dates.utc)
        self._codec = RecordCodec(config.record.variable)

    @property
    def record_path(self) -> Path:
        return self._project.record_path(self._config)

    def load(self) -> Result[ReleaseRecord, IOFailure | RecordError]:
        """Read the record without taking the lock (display only)."""
        return store.load(self._codec, self.record_path).map(lambda loaded: loaded.record)

    def bump(
        self,
        level: BumpLevel,
        *,
        build: int | None = None,
        features: Sequence[str] = (),
        dry_run: bool = False,
    ) -> Result[RunReport, SyncError]:
        checked = store.check_features(features)
        if isinstance(checked, Err):
            return checked
        date = self._today()
        if build is None:
            count = self._oracle.commit_count()
            match count:
                case Ok(value):
                    build = value
                    self._console.info(f"commit count: {value}")
                case Err(e):
                    self._console.warning(
                        f"could not get commit count ({e.reason}); keeping current build number"
                    )

        def transform(record: ReleaseRecord) -> Transformation:
            return Transformation(
                store.apply_bump(record, level, date=date, build=build, features=features)
            )

        return self._pipeline().run(transform, dry_run=dry_run)

    def sync_today(self, *, dry_run: bool = False) -> Result[RunReport, SyncError]:
        return self._sync_to(self._today(), dry_run=dry_run)

    def sync_last_commit(self, *, dry_run: bool = False) -> Result[RunReport, SyncError]:
        date = self._oracle.latest_commit_date()
        if isinstance(date, Err):
            return date
        self._console.info(f"last commit date: {date.value}")
        return self._sync_to(date.value, dry_run=dry_run)

    def rewrite_all_dates(self, *, dry_run: bool = False) -> Result[RunReport, SyncError]:
        date = self._today()

        def transform(record: ReleaseRecord) -> Transformation:
            return Transformation(store.apply_bulk_date_rewrite(record, date))

        return self._pipeline().run(transform, dry_run=dry_run)

    def _sync_to(self, date: str, *, dry_run: bool) -> Result[RunReport, SyncError]:
        def transform(record: ReleaseRecord) -> Transformation:
            outcome = store.apply_date_sync(record, date)
            return Transformation(outcome.record, converged=outcome.converged)

        return self._pipeline().run(transform, dry_run=dry_run)

    def _pipeline(self) -> SyncPipeline:
        return SyncPipeline(
            codec=self._codec,
            record_path=self.record_path,
            lock_path=self._project.lock_path(self._config),
            lock_timeout=self._config.lock.timeout,
            console=self._console,
        )
