"""Tests for record/codec.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from relmeta.core.result import Err, Ok
from relmeta.core.sync_errors import (
    AmbiguousPattern,
    CorruptRecord,
    NotFound,
    PatternNotFound,
)
from relmeta.record.codec import (
    Edit,
    RecordCodec,
    Span,
    apply_edits,
    detect_newline,
    replace_span,
)
from relmeta.record.model import Milestone, SemVer

RECORD = '''\
"""Release metadata."""

# Bumped by relmeta.
RELEASE = {
    "version": {"major": 1, "minor": 2, "patch": 3},
    "stage": "beta",
    "build": 40,  # commit count
    "release_date": "2024-05-01",
    "milestones": [
        {
            "version": "1.2.3",
            "date": "2024-05-01",
            "features": [
                "Fixed release_date parsing for 2023-01-01 style notes",
            ],
        },
    ],
}
'''


@pytest.fixture
def codec() -> RecordCodec:
    return RecordCodec()


class TestSpans:
    def test_span_rejects_inverted_range(self) -> None:
        with pytest.raises(ValueError):
            Span(5, 2)

    def test_replace_span(self) -> None:
        assert replace_span("abcdef", Span(2, 4), "XY") == "abXYef"

    def test_replace_span_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            replace_span("abc", Span(2, 9), "x")

    def test_apply_edits_uses_original_offsets(self) -> None:
        text = "a=1 b=22 c=3"
        edits = [Edit(Span(2, 3), "100"), Edit(Span(10, 11), "4"), Edit(Span(6, 8), "5")]
        assert apply_edits(text, edits) == "a=100 b=5 c=4"

    def test_apply_edits_rejects_overlap(self) -> None:
        with pytest.raises(ValueError, match="overlapping"):
            apply_edits("abcdef", [Edit(Span(0, 3), "x"), Edit(Span(2, 4), "y")])

    def test_detect_newline(self) -> None:
        assert detect_newline("a\r\nb\n") == "\r\n"
        assert detect_newline("a\nb") == "\n"
        assert detect_newline("") == "\n"


class TestLocators:
    def test_version_triple(self, codec: RecordCodec) -> None:
        result = codec.find_version_triple(RECORD)

        assert isinstance(result, Ok)
        site = result.value
        assert site.version == SemVer(1, 2, 3)
        assert RECORD[site.minor.span.start : site.minor.span.end] == "2"

    def test_build_span(self, codec: RecordCodec) -> None:
        result = codec.find_build(RECORD)

        assert isinstance(result, Ok)
        assert result.value.value == 40
        assert RECORD[result.value.span.start : result.value.span.end] == "40"

    def test_release_date_ignores_dates_in_features(self, codec: RecordCodec) -> None:
        result = codec.find_release_date(RECORD)

        assert isinstance(result, Ok)
        span = result.value.span
        assert RECORD[span.start : span.end] == '"2024-05-01"'
        assert RECORD.index('"release_date"') < span.start

    def test_stage(self, codec: RecordCodec) -> None:
        assert codec.find_stage(RECORD) == Ok("beta")

    def test_stage_defaults_to_stable(self, codec: RecordCodec) -> None:
        text = RECORD.replace('    "stage": "beta",\n', "")
        assert codec.find_stage(text) == Ok("stable")

    def test_milestones(self, codec: RecordCodec) -> None:
        result = codec.find_milestones(RECORD)

        assert isinstance(result, Ok)
        (site,) = result.value
        assert site.milestone == Milestone(
            version="1.2.3",
            date="2024-05-01",
            features=("Fixed release_date parsing for 2023-01-01 style notes",),
        )
        assert RECORD[site.date_span.start : site.date_span.end] == '"2024-05-01"'

    def test_milestone_features_optional(self, codec: RecordCodec) -> None:
        text = 'RELEASE = {"milestones": [{"version": "1.0.0", "date": "2024-01-01"}]}\n'
        result = codec.find_milestones(text)
        assert isinstance(result, Ok)
        assert result.value[0].milestone.features == ()

    def test_non_ascii_offsets(self, codec: RecordCodec) -> None:
        text = 'RELEASE = {"note": "café ✓", "build": 7, "release_date": "2024-01-02"}\n'

        build = codec.find_build(text)
        date = codec.find_release_date(text)

        assert isinstance(build, Ok) and isinstance(date, Ok)
        assert text[build.value.span.start : build.value.span.end] == "7"
        assert text[date.value.span.start : date.value.span.end] == '"2024-01-02"'


class TestLocatorErrors:
    def test_missing_variable(self, codec: RecordCodec) -> None:
        result = codec.find_build("OTHER = {}\n")

        assert isinstance(result, Err)
        assert isinstance(result.error, PatternNotFound)
        assert result.error.field == "RELEASE"
        assert result.error.hint is not None

    def test_missing_field(self, codec: RecordCodec) -> None:
        result = codec.find_build('RELEASE = {"release_date": "2024-01-01"}\n')
        assert result == Err(PatternNotFound(field="build"))

    def test_duplicate_key_is_ambiguous(self, codec: RecordCodec) -> None:
        result = codec.find_build('RELEASE = {"build": 1, "build": 2}\n')
        assert result == Err(AmbiguousPattern(field="build", occurrences=2))

    def test_duplicate_assignment_is_ambiguous(self, codec: RecordCodec) -> None:
        result = codec.find_build('RELEASE = {"build": 1}\nRELEASE = {"build": 2}\n')
        assert result == Err(AmbiguousPattern(field="RELEASE", occurrences=2))

    def test_syntax_error_is_corrupt(self, codec: RecordCodec) -> None:
        result = codec.find_build('RELEASE = {"build": 1,\n')
        assert isinstance(result, Err)
        assert isinstance(result.error, CorruptRecord)

    def test_lone_surrogate_is_corrupt(self, codec: RecordCodec) -> None:
        result = codec.find_build('RELEASE = {"build": 1, "note": "\udcff"}\n')
        assert isinstance(result, Err)
        assert isinstance(result.error, CorruptRecord)

    def test_negative_build_is_corrupt(self, codec: RecordCodec) -> None:
        result = codec.find_build('RELEASE = {"build": -1}\n')
        assert isinstance(result, Err)
        assert isinstance(result.error, CorruptRecord)

    def test_bool_build_is_corrupt(self, codec: RecordCodec) -> None:
        result = codec.find_build('RELEASE = {"build": True}\n')
        assert isinstance(result, Err)
        assert isinstance(result.error, CorruptRecord)

    def test_invalid_date_is_corrupt(self, codec: RecordCodec) -> None:
        result = codec.find_release_date('RELEASE = {"release_date": "2024-02-30"}\n')
        assert isinstance(result, Err)
        assert isinstance(result.error, CorruptRecord)
        assert result.error.line == 1

    def test_unpacking_rejected(self, codec: RecordCodec) -> None:
        result = codec.find_build('BASE = {}\nRELEASE = {**BASE, "build": 1}\n')
        assert isinstance(result, Err)
        assert isinstance(result.error, CorruptRecord)

    def test_custom_variable(self) -> None:
        codec = RecordCodec("META")
        assert isinstance(codec.find_build('META = {"build": 3}\n'), Ok)


class TestMilestoneInsertion:
    def _insert(self, codec: RecordCodec, text: str, milestone: Milestone) -> str:
        slot = codec.find_milestone_insertion_point(text)
        assert isinstance(slot, Ok)
        return apply_edits(text, codec.milestone_insertions(text, slot.value, [milestone]))

    def test_appends_after_last_entry(self, codec: RecordCodec) -> None:
        milestone = Milestone("1.3.0", "2024-06-01", ("Build number: 41",))

        text = self._insert(codec, RECORD, milestone)

        assert text.endswith(
            "        },\n"
            "        {\n"
            '            "version": "1.3.0",\n'
            '            "date": "2024-06-01",\n'
            '            "features": [\n'
            '                "Build number: 41",\n'
            "            ],\n"
            "        },\n"
            "    ],\n"
            "}\n"
        )
        assert text.startswith(RECORD[: RECORD.index("    ],\n}")])
        assert codec.find_milestones(text).unwrap()[-1].milestone == milestone

    def test_empty_list_on_one_line(self, codec: RecordCodec) -> None:
        text = 'RELEASE = {\n    "milestones": [],\n}\n'

        result = self._insert(codec, text, Milestone("0.1.0", "2024-01-01"))

        assert result == (
            "RELEASE = {\n"
            '    "milestones": [\n'
            "        {\n"
            '            "version": "0.1.0",\n'
            '            "date": "2024-01-01",\n'
            '            "features": [],\n'
            "        },\n"
            "    ],\n"
            "}\n"
        )

    def test_adds_missing_trailing_comma(self, codec: RecordCodec) -> None:
        text = (
            "RELEASE = {\n"
            '  "milestones": [\n'
            '    {"version": "1.0.0", "date": "2024-01-01"}  # first\n'
            "  ],\n"
            "}\n"
        )

        result = self._insert(codec, text, Milestone("1.0.1", "2024-01-02"))

        assert '{"version": "1.0.0", "date": "2024-01-01"},  # first\n' in result
        assert "    {\n" in result
        assert [s.milestone.version for s in codec.find_milestones(result).unwrap()] == [
            "1.0.0",
            "1.0.1",
        ]

    def test_inline_list(self, codec: RecordCodec) -> None:
        text = 'RELEASE = {"milestones": [{"version": "1.0.0", "date": "2024-01-01"}]}\n'

        result = self._insert(codec, text, Milestone("1.1.0", "2024-02-01"))

        sites = codec.find_milestones(result).unwrap()
        assert [s.milestone.version for s in sites] == ["1.0.0", "1.1.0"]

    def test_crlf_preserved(self, codec: RecordCodec) -> None:
        text = RECORD.replace("\n", "\r\n")

        result = self._insert(codec, text, Milestone("1.3.0", "2024-06-01"))

        assert "\n" not in result.replace("\r\n", "")
        assert len(codec.find_milestones(result).unwrap()) == 2

    def test_non_ascii_feature(self, codec: RecordCodec) -> None:
        result = self._insert(codec, RECORD, Milestone("1.3.0", "2024-06-01", ("Ünïcode ✓",)))
        assert '"Ünïcode ✓",' in result


class TestRenderers:
    def test_render_date_keeps_quote_style(self, codec: RecordCodec) -> None:
        assert codec.render_date("'2024-01-01'", "2024-06-01") == "'2024-06-01'"
        assert codec.render_date('"2024-01-01"', "2024-06-01") == '"2024-06-01"'

    def test_render_int_rejects_negative(self, codec: RecordCodec) -> None:
        with pytest.raises(ValueError):
            codec.render_int(-1)


class TestFileIO:
    def test_load_missing(self, codec: RecordCodec, tmp_path: Path) -> None:
        path = tmp_path / "version_info.py"
        assert codec.load(path) == Err(NotFound(path=path))

    def test_load_keeps_newlines(self, codec: RecordCodec, tmp_path: Path) -> None:
        path = tmp_path / "version_info.py"
        path.write_bytes(b"RELEASE = {}\r\n")
        assert codec.load(path) == Ok("RELEASE = {}\r\n")

    def test_byte_order_mark_offsets(self, codec: RecordCodec, tmp_path: Path) -> None:
        path = tmp_path / "version_info.py"
        path.write_bytes(b'\xef\xbb\xbfRELEASE = {"build": 40}\n')
        text = codec.load(path).unwrap()

        build = codec.find_build(text).unwrap()

        assert build.value == 40
        assert text[build.span.start : build.span.end] == "40"

    def test_save_round_trip(self, codec: RecordCodec, tmp_path: Path) -> None:
        path = tmp_path / "version_info.py"
        assert codec.save(path, RECORD) == Ok(None)
        assert codec.load(path) == Ok(RECORD)
