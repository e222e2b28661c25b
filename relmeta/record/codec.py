"""Span-level access to the release record file.

The record is a Python module holding one literal dict:

    RELEASE = {
        "version": {"major": 1, "minor": 8, "patch": 14},
        "stage": "stable",
        "build": 72,
        "release_date": "2025-01-09",
        "milestones": [
            {"version": "1.0.0", "date": "2025-01-09", "features": ["..."]},
        ],
    }

Locators parse the text with ``ast`` and address fields by key path, so a
date inside a feature note can never be mistaken for a release date. Each
locator returns the value together with its character span; writers
replace exactly those spans and leave every other byte (comments, layout,
quote style of untouched values) as it was.
"""

from __future__ import annotations

import ast
import json
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from relmeta.core.config import DEFAULT_RECORD_VARIABLE
from relmeta.core.result import Err, Ok, Result
from relmeta.core.sync_errors import (
    AmbiguousPattern,
    CorruptRecord,
    NotFound,
    PatternNotFound,
    ReadError,
    RecordError,
    WriteError,
)
from relmeta.platform.files import atomic_write_text

from .model import DEFAULT_STAGE, Milestone, SemVer, is_iso_date

__all__ = [
    "Edit",
    "Located",
    "MilestoneSite",
    "MilestoneSlot",
    "RecordCodec",
    "Span",
    "VersionSite",
    "apply_edits",
    "detect_newline",
    "replace_span",
]

_NEWLINE_RE = re.compile(r"\r\n|\r|\n")
_BOM = "\ufeff"
_DEFAULT_STEP = "    "


@dataclass(frozen=True, slots=True, order=True)
class Span:
    """Half-open character range ``[start, end)`` in the record text."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid span: {self.start}..{self.end}")


@dataclass(frozen=True, slots=True)
class Located[T]:
    value: T
    span: Span


@dataclass(frozen=True, slots=True)
class VersionSite:
    major: Located[int]
    minor: Located[int]
    patch: Located[int]
    span: Span

    @property
    def version(self) -> SemVer:
        return SemVer(self.major.value, self.minor.value, self.patch.value)


@dataclass(frozen=True, slots=True)
class MilestoneSite:
    milestone: Milestone
    span: Span
    date_span: Span


@dataclass(frozen=True, slots=True)
class MilestoneSlot:
    """Where a new milestone entry goes.

    Attributes:
        offset: Position right before the closing bracket of the list
            (the start of its line when the bracket stands alone)
        indent: Indentation of an entry's opening brace
        step: One indentation level inside an entry
        own_line: The closing bracket is alone on its line
        closing_indent: Indentation to restore before the bracket
        comma_at: Where a comma must follow the last entry, if missing
    """

    offset: int
    indent: str
    step: str
    own_line: bool
    closing_indent: str
    comma_at: int | None


@dataclass(frozen=True, slots=True)
class Edit:
    span: Span
    text: str


def replace_span(text: str, span: Span, new_text: str) -> str:
    """Substitute ``span`` with ``new_text``; nothing else changes."""
    if span.end > len(text):
        raise ValueError(f"span {span.start}..{span.end} beyond text of length {len(text)}")
    return text[: span.start] + new_text + text[span.end :]


def apply_edits(text: str, edits: list[Edit]) -> str:
    """Apply edits whose spans all refer to the original ``text``.

    Edits are applied from the end of the text backwards so no edit shifts
    the offsets of another. Insertions sharing an offset keep list order.

    Raises:
        ValueError: Two edits overlap.
    """
    ordered = sorted(edits, key=lambda e: (e.span.start, e.span.end))
    for prev, nxt in zip(ordered, ordered[1:]):
        if prev.span.end > nxt.span.start:
            raise ValueError(f"overlapping edits at {prev.span} and {nxt.span}")
    for edit in reversed(ordered):
        text = replace_span(text, edit.span, edit.text)
    return text


class _Offsets:
    """Maps ``ast`` positions (line, UTF-8 byte column) to str offsets.

    A leading byte order mark is not seen by ``ast``; line 1 starts after it.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        starts = [1 if text.startswith(_BOM) else 0]
        for m in _NEWLINE_RE.finditer(text):
            starts.append(m.end())
        self._starts = starts

    def line_start(self, lineno: int) -> int:
        return self._starts[lineno - 1]

    def line_end(self, lineno: int) -> int:
        if lineno < len(self._starts):
            return self._starts[lineno]
        return len(self._text)

    def offset(self, lineno: int, col: int) -> int:
        start = self.line_start(lineno)
        line = self._text[start : self.line_end(lineno)]
        if line.isascii():
            return start + col
        return start + len(line.encode("utf-8")[:col].decode("utf-8"))

    def span(self, node: ast.expr) -> Span:
        assert node.end_lineno is not None and node.end_col_offset is not None
        return Span(
            self.offset(node.lineno, node.col_offset),
            self.offset(node.end_lineno, node.end_col_offset),
        )

    def leading_ws(self, lineno: int, upto: int) -> str | None:
        """Text between line start and ``upto`` if it is all whitespace."""
        prefix = self._text[self.line_start(lineno) : upto]
        return prefix if prefix.strip() == "" else None


@dataclass(frozen=True, slots=True)
class _Tree:
    root: ast.Dict
    offsets: _Offsets


@lru_cache(maxsize=16)
def _parse(text: str, variable: str) -> Result[_Tree, RecordError]:
    try:
        module = ast.parse(text.removeprefix(_BOM))
    except SyntaxError as e:
        return Err(CorruptRecord(reason=f"not valid Python: {e.msg}", line=e.lineno))
    except ValueError as e:
        return Err(CorruptRecord(reason=f"not valid Python: {e}"))

    values: list[ast.expr] = []
    for node in module.body:
        if isinstance(node, ast.Assign):
            if any(isinstance(t, ast.Name) and t.id == variable for t in node.targets):
                values.append(node.value)
        elif isinstance(node, ast.AnnAssign) and node.value is not None:
            if isinstance(node.target, ast.Name) and node.target.id == variable:
                values.append(node.value)

    if not values:
        return Err(
            PatternNotFound(
                field=variable,
                hint=f"expected a top-level `{variable} = {{...}}` assignment",
            )
        )
    if len(values) > 1:
        return Err(AmbiguousPattern(field=variable, occurrences=len(values)))

    root = values[0]
    if not isinstance(root, ast.Dict):
        return Err(CorruptRecord(reason=f"{variable} must be a dict literal", line=root.lineno))
    return Ok(_Tree(root=root, offsets=_Offsets(text)))


def _lookup(node: ast.Dict, key: str, field: str) -> Result[ast.expr, RecordError]:
    found: list[ast.expr] = []
    for k, v in zip(node.keys, node.values):
        if k is None:
            return Err(
                CorruptRecord(reason=f"'**' unpacking is not supported near {field}", line=v.lineno)
            )
        if isinstance(k, ast.Constant) and k.value == key:
            found.append(v)
    if not found:
        return Err(PatternNotFound(field=field))
    if len(found) > 1:
        return Err(AmbiguousPattern(field=field, occurrences=len(found)))
    return Ok(found[0])


def _has_key(node: ast.Dict, key: str) -> bool:
    return any(isinstance(k, ast.Constant) and k.value == key for k in node.keys)


def _as_dict(node: ast.expr, field: str) -> Result[ast.Dict, RecordError]:
    if not isinstance(node, ast.Dict):
        return Err(CorruptRecord(reason=f"{field} must be a dict literal", line=node.lineno))
    return Ok(node)


def _as_int(node: ast.expr, field: str) -> Result[int, RecordError]:
    if (
        isinstance(node, ast.Constant)
        and isinstance(node.value, int)
        and not isinstance(node.value, bool)
        and node.value >= 0
    ):
        return Ok(node.value)
    return Err(CorruptRecord(reason=f"{field} must be a non-negative integer", line=node.lineno))


def _as_str(node: ast.expr, field: str) -> Result[str, RecordError]:
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return Ok(node.value)
    return Err(CorruptRecord(reason=f"{field} must be a string", line=node.lineno))


def _as_date(node: ast.expr, field: str) -> Result[str, RecordError]:
    value = _as_str(node, field)
    if isinstance(value, Err):
        return value
    if not is_iso_date(value.value):
        return Err(
            CorruptRecord(
                reason=f"{field} must be a YYYY-MM-DD date, got {value.value!r}",
                line=node.lineno,
            )
        )
    return value


def _comma_follows(text: str) -> bool:
    """True if ``text`` (whitespace, commas, comments only) holds a comma."""
    return any("," in line.split("#", 1)[0] for line in _NEWLINE_RE.split(text))


def _quote_like(original: str, value: str) -> str:
    """Render a date-like value with the quote character ``original`` used."""
    quote = "'" if original.lstrip("rRuU")[:1] == "'" else '"'
    return f"{quote}{value}{quote}"


class RecordCodec:
    """Reads, locates and rewrites fields of the record file.

    Attributes:
        variable: Name of the module-level variable holding the record
    """

    def __init__(self, variable: str = DEFAULT_RECORD_VARIABLE) -> None:
        self.variable = variable

    # -- file I/O ------------------------------------------------------------

    def load(self, path: Path) -> Result[str, NotFound | ReadError]:
        """Read the whole record file, newlines untranslated."""
        try:
            with path.open("r", encoding="utf-8", newline="") as handle:
                return Ok(handle.read())
        except FileNotFoundError:
            return Err(NotFound(path=path))
        except (OSError, UnicodeDecodeError) as e:
            return Err(ReadError(path=path, reason=str(e)))

    def save(self, path: Path, text: str) -> Result[None, WriteError]:
        """Replace the record file in one atomic write."""
        try:
            atomic_write_text(path, text)
        except (OSError, UnicodeEncodeError) as e:
            return Err(WriteError(path=path, reason=str(e)))
        return Ok(None)

    # -- locators --------------------------------------------------------------

    def find_version_triple(self, text: str) -> Result[VersionSite, RecordError]:
        tree = _parse(text, self.variable)
        if isinstance(tree, Err):
            return tree
        node = _lookup(tree.value.root, "version", "version")
        if isinstance(node, Err):
            return node
        mapping = _as_dict(node.value, "version")
        if isinstance(mapping, Err):
            return mapping

        parts: list[Located[int]] = []
        for key in ("major", "minor", "patch"):
            field = f"version.{key}"
            part = _lookup(mapping.value, key, field)
            if isinstance(part, Err):
                return part
            value = _as_int(part.value, field)
            if isinstance(value, Err):
                return value
            parts.append(Located(value.value, tree.value.offsets.span(part.value)))

        return Ok(
            VersionSite(
                major=parts[0],
                minor=parts[1],
                patch=parts[2],
                span=tree.value.offsets.span(mapping.value),
            )
        )

    def find_build(self, text: str) -> Result[Located[int], RecordError]:
        tree = _parse(text, self.variable)
        if isinstance(tree, Err):
            return tree
        node = _lookup(tree.value.root, "build", "build")
        if isinstance(node, Err):
            return node
        value = _as_int(node.value, "build")
        if isinstance(value, Err):
            return value
        return Ok(Located(value.value, tree.value.offsets.span(node.value)))

    def find_release_date(self, text: str) -> Result[Located[str], RecordError]:
        tree = _parse(text, self.variable)
        if isinstance(tree, Err):
            return tree
        node = _lookup(tree.value.root, "release_date", "release_date")
        if isinstance(node, Err):
            return node
        value = _as_date(node.value, "release_date")
        if isinstance(value, Err):
            return value
        return Ok(Located(value.value, tree.value.offsets.span(node.value)))

    def find_stage(self, text: str) -> Result[str, RecordError]:
        """Development stage; optional, defaults to ``stable``."""
        tree = _parse(text, self.variable)
        if isinstance(tree, Err):
            return tree
        if not _has_key(tree.value.root, "stage"):
            return Ok(DEFAULT_STAGE)
        node = _lookup(tree.value.root, "stage", "stage")
        if isinstance(node, Err):
            return node
        return _as_str(node.value, "stage")

    def find_milestones(self, text: str) -> Result[list[MilestoneSite], RecordError]:
        tree = _parse(text, self.variable)
        if isinstance(tree, Err):
            return tree
        listing = self._milestone_list(tree.value)
        if isinstance(listing, Err):
            return listing

        offsets = tree.value.offsets
        sites: list[MilestoneSite] = []
        for index, element in enumerate(listing.value.elts):
            prefix = f"milestones[{index}]"
            entry = _as_dict(element, prefix)
            if isinstance(entry, Err):
                return entry
            site = self._milestone_site(entry.value, prefix, offsets)
            if isinstance(site, Err):
                return site
            sites.append(site.value)
        return Ok(sites)

    def find_milestone_insertion_point(self, text: str) -> Result[MilestoneSlot, RecordError]:
        tree = _parse(text, self.variable)
        if isinstance(tree, Err):
            return tree
        listing = self._milestone_list(tree.value)
        if isinstance(listing, Err):
            return listing

        node = listing.value
        offsets = tree.value.offsets
        assert node.end_lineno is not None and node.end_col_offset is not None
        close = offsets.offset(node.end_lineno, node.end_col_offset) - 1
        close_line_start = offsets.line_start(node.end_lineno)
        own_line = text[close_line_start:close].strip() == ""

        open_offset = offsets.offset(node.lineno, node.col_offset)
        open_prefix = text[offsets.line_start(node.lineno) : open_offset]
        open_indent = open_prefix[: len(open_prefix) - len(open_prefix.lstrip())]
        closing_indent = text[close_line_start:close] if own_line else open_indent

        if not node.elts:
            return Ok(
                MilestoneSlot(
                    offset=close_line_start if own_line else close,
                    indent=closing_indent + _DEFAULT_STEP,
                    step=_DEFAULT_STEP,
                    own_line=own_line,
                    closing_indent=closing_indent,
                    comma_at=None,
                )
            )

        last = node.elts[-1]
        last_span = offsets.span(last)
        indent = offsets.leading_ws(last.lineno, last_span.start)
        if indent is None:
            indent = closing_indent + _DEFAULT_STEP
        step = _DEFAULT_STEP
        if isinstance(last, ast.Dict) and last.keys and last.keys[0] is not None:
            first_key = last.keys[0]
            if first_key.lineno != last.lineno:
                key_start = offsets.offset(first_key.lineno, first_key.col_offset)
                key_indent = offsets.leading_ws(first_key.lineno, key_start)
                if key_indent and key_indent.startswith(indent) and len(key_indent) > len(indent):
                    step = key_indent[len(indent) :]

        return Ok(
            MilestoneSlot(
                offset=close_line_start if own_line else close,
                indent=indent,
                step=step,
                own_line=own_line,
                closing_indent=closing_indent,
                comma_at=None if _comma_follows(text[last_span.end : close]) else last_span.end,
            )
        )

    # -- writers ---------------------------------------------------------------

    def render_int(self, value: int) -> str:
        if value < 0:
            raise ValueError(f"negative value: {value}")
        return str(value)

    def render_date(self, original: str, value: str) -> str:
        """Render a date literal, keeping the quote style of ``original``."""
        return _quote_like(original, value)

    def render_milestone(self, milestone: Milestone, slot: MilestoneSlot, newline: str) -> str:
        i, s = slot.indent, slot.step
        lines = [
            f"{i}{{",
            f'{i}{s}"version": {json.dumps(milestone.version, ensure_ascii=False)},',
            f'{i}{s}"date": {json.dumps(milestone.date, ensure_ascii=False)},',
        ]
        if milestone.features:
            lines.append(f'{i}{s}"features": [')
            for feature in milestone.features:
                lines.append(f"{i}{s}{s}{json.dumps(feature, ensure_ascii=False)},")
            lines.append(f"{i}{s}],")
        else:
            lines.append(f'{i}{s}"features": [],')
        lines.append(f"{i}}},")
        return newline.join(lines)

    def milestone_insertions(
        self,
        text: str,
        slot: MilestoneSlot,
        milestones: list[Milestone],
    ) -> list[Edit]:
        """Edits appending ``milestones`` at ``slot``, in order."""
        if not milestones:
            return []
        newline = detect_newline(text)
        body = newline.join(self.render_milestone(m, slot, newline) for m in milestones)
        if slot.own_line:
            insert = body + newline
        else:
            insert = newline + body + newline + slot.closing_indent

        edits: list[Edit] = []
        if slot.comma_at is not None:
            if slot.comma_at == slot.offset:
                insert = "," + insert
            else:
                edits.append(Edit(Span(slot.comma_at, slot.comma_at), ","))
        edits.append(Edit(Span(slot.offset, slot.offset), insert))
        return edits

    # -- internals -------------------------------------------------------------

    def _milestone_list(self, tree: _Tree) -> Result[ast.List, RecordError]:
        node = _lookup(tree.root, "milestones", "milestones")
        if isinstance(node, Err):
            return node
        if not isinstance(node.value, ast.List):
            return Err(
                CorruptRecord(reason="milestones must be a list literal", line=node.value.lineno)
            )
        return Ok(node.value)

    def _milestone_site(
        self,
        entry: ast.Dict,
        prefix: str,
        offsets: _Offsets,
    ) -> Result[MilestoneSite, RecordError]:
        version_node = _lookup(entry, "version", f"{prefix}.version")
        if isinstance(version_node, Err):
            return version_node
        version = _as_str(version_node.value, f"{prefix}.version")
        if isinstance(version, Err):
            return version

        date_node = _lookup(entry, "date", f"{prefix}.date")
        if isinstance(date_node, Err):
            return date_node
        date = _as_date(date_node.value, f"{prefix}.date")
        if isinstance(date, Err):
            return date

        features: list[str] = []
        if _has_key(entry, "features"):
            features_node = _lookup(entry, "features", f"{prefix}.features")
            if isinstance(features_node, Err):
                return features_node
            if not isinstance(features_node.value, ast.List | ast.Tuple):
                return Err(
                    CorruptRecord(
                        reason=f"{prefix}.features must be a list of strings",
                        line=features_node.value.lineno,
                    )
                )
            for item in features_node.value.elts:
                feature = _as_str(item, f"{prefix}.features")
                if isinstance(feature, Err):
                    return feature
                features.append(feature.value)

        return Ok(
            MilestoneSite(
                milestone=Milestone(version=version.value, date=date.value, features=tuple(features)),
                span=offsets.span(entry),
                date_span=offsets.span(date_node.value),
            )
        )


def detect_newline(text: str) -> str:
    """Newline convention of ``text`` (first one seen), ``\\n`` by default."""
    m = _NEWLINE_RE.search(text)
    return m.group(0) if m else "\n"
