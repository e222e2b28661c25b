"""Typed release record: load, transform, validate, persist.

Transformations (``apply_*``) are pure and work on ``ReleaseRecord`` values.
``persist`` turns the difference between the loaded record and the updated
one into span edits against the text that was loaded, checks the result
parses back to exactly the updated record, and writes the file once.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from relmeta.core.result import Err, Ok, Result
from relmeta.core.sync_errors import (
    CorruptRecord,
    InvalidTransition,
    IOFailure,
    RecordError,
    SyncError,
)

from .codec import Edit, RecordCodec, apply_edits
from .model import BumpLevel, Milestone, ReleaseRecord, is_iso_date, parse_version

__all__ = [
    "DateSyncOutcome",
    "LoadedRecord",
    "apply_bulk_date_rewrite",
    "apply_bump",
    "apply_date_sync",
    "check_features",
    "default_features",
    "load",
    "parse_record",
    "persist",
    "plan_edits",
    "render_update",
    "validate_transition",
]


@dataclass(frozen=True, slots=True)
class LoadedRecord:
    """A record together with the exact text it was parsed from."""

    path: Path
    text: str
    record: ReleaseRecord


@dataclass(frozen=True, slots=True)
class DateSyncOutcome:
    record: ReleaseRecord
    converged: bool


def default_features(*, build: int, date: str) -> tuple[str, ...]:
    """Feature notes for a milestone when the caller supplies none."""
    return (
        "Auto-generated version update",
        f"Build number: {build}",
        f"Release date: {date}",
    )


def check_features(features: Sequence[str]) -> Result[tuple[str, ...], InvalidTransition]:
    """Feature notes must be UTF-8 encodable to be written to the record.

    Command-line arguments that were not valid UTF-8 arrive as lone
    surrogates and are rejected here.
    """
    for index, note in enumerate(features):
        try:
            note.encode("utf-8")
        except UnicodeEncodeError as e:
            return Err(
                InvalidTransition(
                    f"feature {index + 1} is not valid UTF-8 text: {note[e.start : e.end]!r}"
                )
            )
    return Ok(tuple(features))


def parse_record(codec: RecordCodec, text: str) -> Result[ReleaseRecord, RecordError]:
    """Run every locator over ``text`` and assemble the typed record."""
    version = codec.find_version_triple(text)
    if isinstance(version, Err):
        return version
    build = codec.find_build(text)
    if isinstance(build, Err):
        return build
    release_date = codec.find_release_date(text)
    if isinstance(release_date, Err):
        return release_date
    stage = codec.find_stage(text)
    if isinstance(stage, Err):
        return stage
    milestones = codec.find_milestones(text)
    if isinstance(milestones, Err):
        return milestones

    for index, site in enumerate(milestones.value):
        if parse_version(site.milestone.version) is None:
            return Err(
                CorruptRecord(
                    reason=(
                        f"milestones[{index}].version is not MAJOR.MINOR.PATCH: "
                        f"{site.milestone.version!r}"
                    )
                )
            )

    return Ok(
        ReleaseRecord(
            version=version.value.version,
            build=build.value.value,
            release_date=release_date.value.value,
            milestones=tuple(site.milestone for site in milestones.value),
            stage=stage.value,
        )
    )


def load(codec: RecordCodec, path: Path) -> Result[LoadedRecord, IOFailure | RecordError]:
    return codec.load(path).and_then(
        lambda text: parse_record(codec, text).map(
            lambda record: LoadedRecord(path=path, text=text, record=record)
        )
    )


def apply_bump(
    record: ReleaseRecord,
    level: BumpLevel,
    *,
    date: str,
    build: int | None = None,
    features: Sequence[str] | None = None,
) -> ReleaseRecord:
    """Bump one version component and append the matching milestone.

    Lower components reset to 0. ``build`` replaces the build number when
    given and is left alone otherwise.

    Raises:
        ValueError: ``date`` is not an ISO date, ``build`` is negative or a
            feature is not UTF-8 encodable.
    """
    if not is_iso_date(date):
        raise ValueError(f"not a YYYY-MM-DD date: {date!r}")
    if build is not None and build < 0:
        raise ValueError(f"negative build number: {build}")
    checked = check_features(features or ())
    if isinstance(checked, Err):
        raise ValueError(checked.error.reason)

    version = record.version.bump(level)
    new_build = record.build if build is None else build
    notes = tuple(features) if features else default_features(build=new_build, date=date)
    milestone = Milestone(version=str(version), date=date, features=notes)

    return replace(
        record,
        version=version,
        build=new_build,
        release_date=date,
        milestones=(*record.milestones, milestone),
    )


def apply_date_sync(record: ReleaseRecord, target: str) -> DateSyncOutcome:
    """Move the top-level release date to ``target``.

    Milestone dates are never touched. An already converged record comes
    back unchanged with ``converged=True`` so the caller can skip the write.
    """
    if not is_iso_date(target):
        raise ValueError(f"not a YYYY-MM-DD date: {target!r}")
    if record.release_date == target:
        return DateSyncOutcome(record=record, converged=True)
    return DateSyncOutcome(record=replace(record, release_date=target), converged=False)


def apply_bulk_date_rewrite(record: ReleaseRecord, target: str) -> ReleaseRecord:
    """Set the release date AND every milestone date to ``target``.

    Destructive: the historical dates of all milestones are lost.
    """
    if not is_iso_date(target):
        raise ValueError(f"not a YYYY-MM-DD date: {target!r}")
    return replace(
        record,
        release_date=target,
        milestones=tuple(replace(m, date=target) for m in record.milestones),
    )


def validate_transition(
    before: ReleaseRecord,
    after: ReleaseRecord,
) -> Result[None, InvalidTransition]:
    """Check the invariants that must hold between two persisted states."""
    if after.version < before.version:
        return Err(
            InvalidTransition(f"version would decrease from {before.version} to {after.version}")
        )
    if after.stage != before.stage:
        return Err(InvalidTransition("stage is edited by hand only"))

    old, new = before.milestones, after.milestones
    if len(new) < len(old):
        return Err(InvalidTransition("milestones can only be appended, never removed"))
    for index, (a, b) in enumerate(zip(old, new)):
        if a.version != b.version or a.features != b.features:
            return Err(InvalidTransition(f"milestones[{index}] would be rewritten"))

    appended = new[len(old) :]
    if after.version == before.version:
        if appended:
            return Err(InvalidTransition("a milestone can only be added by a version bump"))
        return Ok(None)

    if len(appended) != 1:
        return Err(
            InvalidTransition(
                f"a version bump appends exactly one milestone, got {len(appended)}"
            )
        )
    if appended[0].version != str(after.version):
        return Err(
            InvalidTransition(
                f"new milestone {appended[0].version} does not match version {after.version}"
            )
        )
    return Ok(None)


def plan_edits(
    codec: RecordCodec,
    text: str,
    before: ReleaseRecord,
    after: ReleaseRecord,
) -> Result[list[Edit], RecordError]:
    """Span edits turning ``before`` into ``after``.

    Every span is located in the original ``text``; none depends on
    another edit having been applied.
    """
    edits: list[Edit] = []

    if after.version != before.version:
        site = codec.find_version_triple(text)
        if isinstance(site, Err):
            return site
        for located, value in (
            (site.value.major, after.version.major),
            (site.value.minor, after.version.minor),
            (site.value.patch, after.version.patch),
        ):
            if located.value != value:
                edits.append(Edit(located.span, codec.render_int(value)))

    if after.build != before.build:
        build = codec.find_build(text)
        if isinstance(build, Err):
            return build
        edits.append(Edit(build.value.span, codec.render_int(after.build)))

    if after.release_date != before.release_date:
        located = codec.find_release_date(text)
        if isinstance(located, Err):
            return located
        span = located.value.span
        original = text[span.start : span.end]
        edits.append(Edit(span, codec.render_date(original, after.release_date)))

    old_count = len(before.milestones)
    if any(a.date != b.date for a, b in zip(before.milestones, after.milestones)):
        sites = codec.find_milestones(text)
        if isinstance(sites, Err):
            return sites
        for site, updated in zip(sites.value, after.milestones[:old_count]):
            if site.milestone.date != updated.date:
                original = text[site.date_span.start : site.date_span.end]
                edits.append(Edit(site.date_span, codec.render_date(original, updated.date)))

    appended = list(after.milestones[old_count:])
    if appended:
        slot = codec.find_milestone_insertion_point(text)
        if isinstance(slot, Err):
            return slot
        edits.extend(codec.milestone_insertions(text, slot.value, appended))

    return Ok(edits)


def render_update(
    codec: RecordCodec,
    loaded: LoadedRecord,
    updated: ReleaseRecord,
) -> Result[str, InvalidTransition | RecordError]:
    """Compute the file text for ``updated`` without writing anything."""
    allowed = validate_transition(loaded.record, updated)
    if isinstance(allowed, Err):
        return allowed

    edits = plan_edits(codec, loaded.text, loaded.record, updated)
    if isinstance(edits, Err):
        return edits
    if not edits.value:
        return Ok(loaded.text)

    new_text = apply_edits(loaded.text, edits.value)
    reparsed = parse_record(codec, new_text)
    if isinstance(reparsed, Err):
        return Err(CorruptRecord(reason=f"rewritten record does not parse: {reparsed.error}"))
    if reparsed.value != updated:
        return Err(CorruptRecord(reason="rewritten record does not match the computed state"))
    return Ok(new_text)


def persist(
    codec: RecordCodec,
    loaded: LoadedRecord,
    updated: ReleaseRecord,
) -> Result[str, SyncError]:
    """Write ``updated`` over the file ``loaded`` came from.

    Returns the new text. Nothing is written when validation fails, when
    the rewritten text would not parse back to ``updated``, or when the
    text is unchanged.
    """
    new_text = render_update(codec, loaded, updated)
    if isinstance(new_text, Err):
        return new_text
    if new_text.value == loaded.text:
        return new_text

    saved = codec.save(loaded.path, new_text.value)
    if isinstance(saved, Err):
        return saved
    return new_text
