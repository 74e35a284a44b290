"""Tests for AnsiText -- visible-length slicing and editing of styled text."""

from __future__ import annotations

import re

import pytest

from terminal_layout.ansi_text import AnsiText, OutOfRangeError, strip_ansi


def blue(text: str) -> str:
    return f"\x1b[34m{text}\x1b[0m"


def red(text: str) -> str:
    return f"\x1b[31m{text}\x1b[0m"


def green(text: str) -> str:
    return f"\x1b[32m{text}\x1b[0m"


def yellow(text: str) -> str:
    return f"\x1b[33m{text}\x1b[0m"


# ---------------------------------------------------------------------------
# Construction / projections
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_length_counts_visible_characters(self) -> None:
        assert len(AnsiText(blue("this is blue"))) == 12

    def test_plain_drops_escapes(self) -> None:
        text = AnsiText(blue("abc") + "def" + red("ghi"))
        assert text.plain == "abcdefghi"

    def test_raw_round_trips_well_formed_input(self) -> None:
        raw = "abc" + green("def") + "ghi"
        assert AnsiText(raw).raw == raw
        assert AnsiText(raw) == raw

    def test_adjacent_runs_with_same_escape_merge(self) -> None:
        assert AnsiText(blue("a") + blue("b")) == blue("ab")
        assert len(AnsiText(blue("a") + blue("b")).segments) == 1

    def test_styling_without_text_is_elided(self) -> None:
        assert AnsiText("\x1b[31m\x1b[0mabc") == "abc"

    def test_segments_track_visible_offsets(self) -> None:
        segments = AnsiText("ab" + red("cd")).segments
        assert len(segments) == 2
        assert segments[1].begins_at == 2
        assert segments[1].ends_at == 3
        assert segments[1].start_escape == "\x1b[31m"
        assert segments[1].end_escape == "\x1b[0m"

    def test_none_is_empty(self) -> None:
        assert AnsiText(None) == ""
        assert len(AnsiText()) == 0

    def test_from_ansi_text_copies(self) -> None:
        original = AnsiText(blue("x"))
        copy = AnsiText(original)
        copy.append("y")
        assert original == blue("x")

    def test_display_width(self) -> None:
        assert AnsiText(blue("abc")).display_width() == 3
        assert AnsiText("日本").display_width() == 4

    def test_strip_ansi(self) -> None:
        assert strip_ansi(blue("a") + red("b")) == "ab"


# ---------------------------------------------------------------------------
# Slicing
# ---------------------------------------------------------------------------


class TestSlicing:
    text = AnsiText(blue("this is blue") + "ABC" + yellow("this is yellow"))

    def test_slice_first_segment(self) -> None:
        assert self.text[0:12] == blue("this is blue")

    def test_slice_to_end(self) -> None:
        assert self.text[15:] == yellow("this is yellow")

    def test_slice_inside_segment(self) -> None:
        assert self.text[17:-4] == yellow("is is ye")

    def test_slice_plain_segment(self) -> None:
        assert self.text[12:15] == "ABC"

    def test_negative_start(self) -> None:
        assert self.text[-2:] == yellow("ow")

    def test_partial_prefix(self) -> None:
        assert self.text[0:2] == blue("th")

    def test_full_slice_is_identity(self) -> None:
        raw = "abc" + green("def") + "ghi"
        assert AnsiText(raw)[:] == raw
        assert self.text.slice(0, len(self.text)) == self.text

    def test_slice_at_length_is_empty(self) -> None:
        assert AnsiText("abc").slice(3) == ""

    def test_slice_past_length_raises(self) -> None:
        with pytest.raises(OutOfRangeError):
            AnsiText("abc").slice(4)

    def test_index_returns_single_styled_char(self) -> None:
        text = AnsiText(blue("abc"))
        assert text[1] == blue("b")
        assert text[-1] == blue("c")

    def test_index_out_of_range(self) -> None:
        with pytest.raises(OutOfRangeError):
            AnsiText("abc")[3]

    def test_step_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            AnsiText("abcd")[::2]

    def test_extract_group(self) -> None:
        text = AnsiText(blue("key=value"))
        assert text.extract(re.compile(r"=(\w+)"), 1) == blue("value")
        assert text.extract("nope") is None


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


class TestEditing:
    def test_assign_prefix_keeps_style(self) -> None:
        text = AnsiText(blue("this is blue"))
        text[0:4] = "that"
        assert text == blue("that is blue")

    def test_assign_whole_range_keeps_style(self) -> None:
        text = AnsiText(blue("this is blue"))
        text[0:12] = "foobar"
        assert text == blue("foobar")

    def test_assign_middle_keeps_style(self) -> None:
        text = AnsiText(blue("this is blue"))
        text[5:7] = "ain't"
        assert text == blue("this ain't blue")

    def test_assign_styled_text_at_end_merges(self) -> None:
        text = AnsiText(green("CircleCI pass"))
        text[13:15] = AnsiText(green("ed"))
        assert text == green("CircleCI passed")

    def test_assign_past_end_raises(self) -> None:
        text = AnsiText(green("CircleCI pass"))
        with pytest.raises(OutOfRangeError, match=r"14\.\.16 out of range"):
            text[14:16] = AnsiText(green("ed"))

    def test_plain_insert_at_boundary_joins_following_segment(self) -> None:
        text = AnsiText(blue("abc") + red("def"))
        assert text.replace(3, 3, "X") == blue("abc") + red("Xdef")

    def test_styled_replacement_splits_host(self) -> None:
        text = AnsiText(blue("abcdef"))
        assert text.replace(2, 4, red("XY")) == blue("ab") + red("XY") + blue("ef")

    def test_removing_a_whole_segment_drops_its_escapes(self) -> None:
        text = AnsiText(blue("ab") + red("cd") + "ef")
        assert text.replace(2, 4, "") == blue("ab") + "ef"

    def test_replace_on_empty_text(self) -> None:
        assert AnsiText("").replace(0, 0, red("x")) == red("x")

    def test_replace_returns_new_value(self) -> None:
        text = AnsiText(blue("abc"))
        text.replace(0, 1, "z")
        assert text == blue("abc")

    def test_insert(self) -> None:
        assert AnsiText(blue("ac")).insert(1, "b") == blue("abc")

    def test_append_concatenates_in_place(self) -> None:
        text = AnsiText(blue("ab"))
        assert text.append(blue("cd")) is text
        assert text == blue("abcd")

    def test_assign_replaces_everything(self) -> None:
        text = AnsiText(blue("ab"))
        text.assign(red("z"))
        assert text == red("z")

    def test_add_and_radd(self) -> None:
        assert AnsiText("ab") + red("c") == "ab" + red("c")
        assert "x" + AnsiText(red("y")) == "x" + red("y")


# ---------------------------------------------------------------------------
# Searching
# ---------------------------------------------------------------------------


class TestSearching:
    def test_find(self) -> None:
        text = AnsiText(blue("abcabc"))
        assert text.find("c") == 2
        assert text.find("c", 3) == 5
        assert text.find("z") == -1
        assert text.find(re.compile(r"b+")) == 1

    def test_find_last(self) -> None:
        assert AnsiText(blue("abcabc")).find_last("c") == 5
        assert AnsiText("aaa").find_last(re.compile(r"a+")) == 2
        assert AnsiText("abc").find_last("z") == -1

    def test_sub_literal(self) -> None:
        assert AnsiText(blue("this is blue")).sub(" is ", "") == blue("thisblue")

    def test_sub_trailing_whitespace(self) -> None:
        text = AnsiText(blue("this is blue") + "   ")
        assert text.sub(re.compile(r"\s*\Z"), "") == blue("this is blue")

    def test_sub_with_group_references(self) -> None:
        text = AnsiText(red("hello world"))
        assert text.sub(re.compile(r"(\w+) (\w+)"), r"\2 \1") == red("world hello")

    def test_sub_without_match_is_a_copy(self) -> None:
        text = AnsiText(red("abc"))
        result = text.sub("z", "y")
        assert result == text
        assert result is not text

    def test_scan(self) -> None:
        text = AnsiText(blue("ab12") + red("cd34"))
        assert text.scan(re.compile(r"\d+")) == [blue("12"), red("34")]

    def test_scan_with_groups(self) -> None:
        text = AnsiText(blue("ab12") + red("cd34"))
        assert text.scan(re.compile(r"([a-z])(\d)")) == [
            (blue("b"), blue("1")),
            (red("d"), red("3")),
        ]

    def test_contains(self) -> None:
        assert "is" in AnsiText(blue("this"))
        assert AnsiText(red("hi")) in AnsiText(blue("this"))
        assert "x" not in AnsiText(blue("this"))


# ---------------------------------------------------------------------------
# Splitting / trimming
# ---------------------------------------------------------------------------


class TestSplitting:
    def test_split_lines_across_segments(self) -> None:
        text = AnsiText(blue("abc") + "\n" + red("d\nef") + "hi\n" + yellow("foo"))
        assert text.split_lines() == [blue("abc"), red("d"), red("ef") + "hi", yellow("foo")]

    def test_split_lines_within_segment(self) -> None:
        text = AnsiText(blue("this\nis\nblue"))
        assert text.split_lines() == [blue("this"), blue("is"), blue("blue")]

    def test_split_lines_keeps_blank_lines(self) -> None:
        assert AnsiText("a\n\nb\n").split_lines() == ["a", "", "b"]

    def test_split_on_whitespace(self) -> None:
        text = AnsiText(red("a b") + " " + blue("c"))
        assert text.split() == [red("a"), red("b"), blue("c")]

    def test_split_on_separator(self) -> None:
        assert AnsiText(blue("a,b")).split(",") == [blue("a"), blue("b")]

    def test_strip(self) -> None:
        text = AnsiText("  " + blue("hi") + "  ")
        assert text.strip() == blue("hi")
        assert text.lstrip() == blue("hi") + "  "
        assert text.rstrip() == "  " + blue("hi")

    def test_reverse(self) -> None:
        assert AnsiText(blue("ab") + red("cd")).reverse() == red("dc") + blue("ba")


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


class TestComparison:
    def test_equality_with_str_uses_raw(self) -> None:
        assert AnsiText(blue("a")) == blue("a")
        assert AnsiText(blue("a")) != "a"

    def test_unhashable(self) -> None:
        with pytest.raises(TypeError):
            hash(AnsiText("a"))

    def test_ordering(self) -> None:
        assert sorted([AnsiText("b"), AnsiText("a")]) == ["a", "b"]
