import pytest

from rapflow.core.models import (
    LENGTH_PROFILES,
    PRESETS,
    Length,
    LyricDocument,
    parse_length,
    split_lines,
)


class TestLyricDocument:
    def test_blank_lines_are_dropped(self):
        doc = LyricDocument.from_text("line1\n\nline2\nline3")
        assert doc.lines == ("line1", "line2", "line3")
        assert doc.line_count == 3

    def test_whitespace_only_lines_are_dropped(self):
        assert split_lines("a\n   \n\t\nb") == ("a", "b")

    def test_kept_lines_are_not_trimmed(self):
        assert split_lines("  indented bar\nnext") == ("  indented bar", "next")

    def test_raw_text_is_kept(self):
        raw = "one\n\ntwo"
        assert LyricDocument.from_text(raw).raw_text == raw

    def test_empty(self):
        assert LyricDocument.empty().is_empty()
        assert LyricDocument.from_text("\n\n").is_empty()
        assert LyricDocument.from_text(None).lines == ()

    def test_document_is_immutable(self):
        doc = LyricDocument.from_text("a")
        with pytest.raises(Exception):
            doc.lines = ("b",)


class TestLengthProfiles:
    @pytest.mark.parametrize(
        "length,lines,budget",
        [(Length.SHORT, 8, 200), (Length.MEDIUM, 16, 400), (Length.LONG, 24, 600)],
    )
    def test_fixed_table(self, length, lines, budget):
        profile = LENGTH_PROFILES[length]
        assert profile.display_lines == lines
        assert profile.generation_budget == budget
        assert profile.label == f"{lines} lines"

    def test_parse_length(self):
        assert parse_length("medium") is Length.MEDIUM
        assert parse_length(" LONG ") is Length.LONG
        assert parse_length(Length.SHORT) is Length.SHORT
        assert parse_length("epic") is None
        assert parse_length(None) is None


def test_quick_picks():
    by_label = {p.label: p for p in PRESETS}
    assert by_label["Ocean Vibes"].theme == "Ocean Waves"
    assert by_label["Ocean Vibes"].mood == "Chill"
    assert by_label["Street Life"].mood == "Raw energy"
    assert all(p.length is Length.MEDIUM for p in PRESETS)


def test_crlf_text_splits_cleanly():
    doc = LyricDocument.from_text("line1\r\n\r\nline2\r\nline3")
    assert doc.lines == ("line1", "line2", "line3")
