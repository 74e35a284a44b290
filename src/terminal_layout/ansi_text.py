"""ANSI-aware text: length, slicing and editing in visible characters.

An :class:`AnsiText` keeps the raw string (SGR escape sequences included) and
a list of :class:`Segment` runs over the *visible* character index space.
Every mutation rebuilds the segment list from the canonical raw string, so
no partially updated state survives an edit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

import wcwidth

RESET = "\x1b[0m"

# SGR sequences: ESC[ <params> m
_SGR_RE = re.compile(r"\x1b\[[0-9;]*m")
# One optional escape followed by the text up to the next escape (or the end)
_SEGMENT_RE = re.compile(r"(\x1b\[[0-9;]*m)?(.*?)(?=\x1b\[[0-9;]*m|\Z)", re.DOTALL)
# ESC[Xm text ESC[0m ESC[Xm  ->  ESC[Xm text
_REDUNDANT_RESET_RE = re.compile(r"(\x1b\[[0-9;]*m)([^\x1b]+?)\x1b\[0m\1")

TextLike = Union[str, "AnsiText"]
PatternLike = Union[str, "AnsiText", "re.Pattern[str]"]


class OutOfRangeError(IndexError):
    """Raised when a range begins beyond the visible length of the text."""

    def __init__(self, start: int, stop: int | None) -> None:
        super().__init__(f"{start}..{stop} out of range")
        self.start = start
        self.stop = stop


def strip_ansi(text: str) -> str:
    """Return *text* with every SGR escape sequence removed."""
    return _SGR_RE.sub("", text)


# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------


@dataclass
class Segment:
    """A run of visible text sharing one optional start/end escape pair."""

    text: str
    start_escape: str | None = None
    end_escape: str | None = None
    begins_at: int = 0

    @property
    def ends_at(self) -> int:
        """Inclusive index of the last visible character."""
        return max(self.begins_at + len(self.text) - 1, 0)

    @property
    def stop(self) -> int:
        return self.begins_at + len(self.text)

    def wrap(self, text: str) -> str:
        """Surround *text* with this segment's escapes."""
        return f"{self.start_escape or ''}{text}{self.end_escape or ''}"

    def render(self) -> str:
        return self.wrap(self.text)


def _segment(raw: str) -> list[Segment]:
    """Split *raw* into segments, merging and eliding redundant escapes."""
    segments: list[Segment] = []
    visible = 0

    for match in _SEGMENT_RE.finditer(raw):
        escape, text = match.group(1), match.group(2)
        previous = segments[-1] if segments else None

        if previous is not None:
            if escape == RESET:
                escape = None
                if (
                    previous.start_escape is not None
                    and not previous.text
                    and previous.end_escape is None
                ):
                    # styling that never covered any text
                    segments.pop()
                else:
                    previous.end_escape = RESET
            elif escape is not None and escape == previous.start_escape:
                previous.text += text
                visible += len(text)
                continue

        if escape is None:
            if not text:
                continue
            last = segments[-1] if segments else None
            if last is not None and last.start_escape is None and last.end_escape is None:
                last.text += text
                visible += len(text)
                continue

        segments.append(Segment(text=text, start_escape=escape, begins_at=visible))
        visible += len(text)

    return segments


def _raw_of(value: object) -> str:
    if isinstance(value, AnsiText):
        return value.raw
    if value is None:
        return ""
    return str(value)


def _compile(pattern: PatternLike) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    if isinstance(pattern, AnsiText):
        return re.compile(re.escape(pattern.plain))
    return re.compile(re.escape(strip_ansi(pattern)))


# ---------------------------------------------------------------------------
# AnsiText
# ---------------------------------------------------------------------------


class AnsiText:
    """An escape-sequence-aware string measured in visible characters.

    Indexing, slicing and searching all work against the visible projection
    (:attr:`plain`), while the escape sequences wrapping each character are
    carried along into the results.

    Two values compare equal when their normalised raw strings are equal; a
    plain ``str`` compares equal when it matches the raw string exactly.
    """

    def __init__(self, value: TextLike | None = "") -> None:
        self._load(_raw_of(value))

    def _load(self, raw: str) -> None:
        self._segments = _segment(raw)
        self._plain = "".join(segment.text for segment in self._segments)
        self._raw = "".join(segment.render() for segment in self._segments)

    # -- projections --------------------------------------------------------

    @property
    def raw(self) -> str:
        return self._raw

    @property
    def plain(self) -> str:
        """The visible characters only."""
        return self._plain

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    def display_width(self) -> int:
        """Terminal cell width of the visible text.

        Layout measures in characters; this is only used to spot wide
        characters that will not line up with the layout grid.
        """
        return sum(max(wcwidth.wcwidth(char), 0) for char in self._plain)

    # -- range handling -----------------------------------------------------

    def _bounds(self, start: int | None, stop: int | None) -> tuple[int, int]:
        length = len(self._plain)
        requested = (start, stop)

        if start is None:
            start = 0
        elif start < 0:
            start = max(length + start, 0)

        if stop is None:
            stop = length
        elif stop < 0:
            stop = max(length + stop, 0)

        if start > length:
            raise OutOfRangeError(*requested)

        return start, max(min(stop, length), start)

    def _raw_between(self, start: int, stop: int) -> str:
        parts: list[str] = []
        for segment in self._segments:
            if not segment.text:
                # escape-only anchor: keep it when it sits inside the range
                if start <= segment.begins_at <= stop:
                    parts.append(segment.render())
                continue

            lo = max(start, segment.begins_at)
            hi = min(stop, segment.stop)
            if lo < hi:
                parts.append(
                    segment.wrap(segment.text[lo - segment.begins_at : hi - segment.begins_at])
                )
        return "".join(parts)

    def _host_segment(self, start: int) -> Segment | None:
        """Segment whose styling an inserted plain string inherits."""
        for segment in self._segments:
            if segment.text and segment.begins_at <= start < segment.stop:
                return segment
        return self._segments[-1] if self._segments else None

    def _replaced(self, start: int, stop: int, replacement: str) -> str:
        if not self._segments:
            return replacement

        styled = _SGR_RE.search(replacement) is not None
        host = self._host_segment(start)
        parts: list[str] = []

        for segment in self._segments:
            offset = segment.begins_at
            before = segment.text[: max(0, min(start, segment.stop) - offset)]
            after = segment.text[max(0, stop - offset) :]

            if segment is host:
                if not styled:
                    parts.append(segment.wrap(before + replacement + after))
                    continue
                if before:
                    parts.append(segment.wrap(before))
                parts.append(replacement)
                if after:
                    parts.append(segment.wrap(after))
            elif before or after or not segment.text:
                parts.append(segment.wrap(before + after))

        return "".join(parts)

    # -- slicing ------------------------------------------------------------

    def slice(self, start: int | None = None, stop: int | None = None) -> AnsiText:
        """Return the visible characters in ``[start, stop)`` with their escapes.

        A range starting exactly at ``len(self)`` yields an empty result; one
        starting beyond it raises :class:`OutOfRangeError`.
        """
        start, stop = self._bounds(start, stop)
        return AnsiText(self._raw_between(start, stop))

    def __getitem__(self, key: int | slice) -> AnsiText:
        if isinstance(key, slice):
            if key.step not in (None, 1):
                raise ValueError("AnsiText slices do not support a step")
            return self.slice(key.start, key.stop)

        index = key + len(self._plain) if key < 0 else key
        if not 0 <= index < len(self._plain):
            raise OutOfRangeError(key, key + 1)
        return self.slice(index, index + 1)

    def extract(self, pattern: PatternLike, group: int | str = 0) -> AnsiText | None:
        """Return the first match of *pattern* (or one of its groups), or ``None``."""
        match = _compile(pattern).search(self._plain)
        if match is None or match.start(group) < 0:
            return None
        return self.slice(match.start(group), match.end(group))

    # -- editing ------------------------------------------------------------

    def replace(self, start: int | None, stop: int | None, replacement: TextLike) -> AnsiText:
        """Return a copy with the visible range ``[start, stop)`` replaced.

        A plain replacement takes on the styling of the segment it lands in.
        A styled replacement keeps its own escapes and splits the host
        segment around it.
        """
        start, stop = self._bounds(start, stop)
        return AnsiText(self._replaced(start, stop, _raw_of(replacement)))

    def insert(self, index: int, text: TextLike) -> AnsiText:
        return self.replace(index, index, text)

    def __setitem__(self, key: int | slice, replacement: TextLike) -> None:
        if isinstance(key, slice):
            if key.step not in (None, 1):
                raise ValueError("AnsiText slices do not support a step")
            start, stop = self._bounds(key.start, key.stop)
        else:
            index = key + len(self._plain) if key < 0 else key
            start, stop = self._bounds(index, index + 1)
        self._load(self._replaced(start, stop, _raw_of(replacement)))

    def append(self, other: TextLike) -> AnsiText:
        """Concatenate *other* in place and return ``self``."""
        self._load(self._raw + _raw_of(other))
        return self

    def assign(self, value: TextLike) -> AnsiText:
        """Replace the whole content in place and return ``self``."""
        self._load(_raw_of(value))
        return self

    def copy(self) -> AnsiText:
        return AnsiText(self._raw)

    def __add__(self, other: object) -> AnsiText:
        if not isinstance(other, (str, AnsiText)):
            return NotImplemented
        return AnsiText(self._raw + _raw_of(other))

    def __radd__(self, other: object) -> AnsiText:
        if not isinstance(other, str):
            return NotImplemented
        return AnsiText(other + self._raw)

    # -- searching ----------------------------------------------------------

    def find(self, pattern: PatternLike, start: int = 0) -> int:
        """Visible offset of the first match at or after *start*, or ``-1``."""
        match = _compile(pattern).search(self._plain, start)
        return match.start() if match else -1

    def find_last(self, pattern: PatternLike, end: int | None = None) -> int:
        """Visible offset of the last position where *pattern* matches, or ``-1``."""
        regex = _compile(pattern)
        last = len(self._plain) if end is None else min(end, len(self._plain))
        for position in range(last, -1, -1):
            if regex.match(self._plain, position):
                return position
        return -1

    def sub(self, pattern: PatternLike, replacement: TextLike) -> AnsiText:
        """Replace the first match of *pattern* in the visible text."""
        regex = _compile(pattern)
        match = regex.search(self._plain)
        if match is None:
            return self.copy()

        if isinstance(pattern, re.Pattern) and isinstance(replacement, str):
            replacement = match.expand(replacement)

        raw = self._replaced(match.start(), match.end(), _raw_of(replacement))
        return AnsiText(_REDUNDANT_RESET_RE.sub(r"\1\2", raw))

    def scan(self, pattern: PatternLike) -> list[AnsiText | tuple[AnsiText | None, ...]]:
        """All matches of *pattern*; a tuple of groups per match if it has any."""
        regex = _compile(pattern)
        results: list[AnsiText | tuple[AnsiText | None, ...]] = []
        for match in regex.finditer(self._plain):
            if regex.groups:
                results.append(
                    tuple(
                        None if match.start(i) < 0 else self.slice(match.start(i), match.end(i))
                        for i in range(1, regex.groups + 1)
                    )
                )
            else:
                results.append(self.slice(match.start(), match.end()))
        return results

    def __contains__(self, item: object) -> bool:
        if isinstance(item, AnsiText):
            return item.plain in self._plain
        if isinstance(item, str):
            return strip_ansi(item) in self._plain
        return False

    # -- splitting / trimming ----------------------------------------------

    def split_lines(self) -> list[AnsiText]:
        """Split on ``\\n``; each line carries its own complete escapes."""
        lines: list[AnsiText] = []
        current: list[str] = []

        for segment in self._segments:
            if not segment.text:
                current.append(segment.render())
                continue
            for i, piece in enumerate(segment.text.split("\n")):
                if i > 0:
                    lines.append(AnsiText("".join(current)))
                    current = []
                if piece:
                    current.append(segment.wrap(piece))

        if current:
            lines.append(AnsiText("".join(current)))
        return lines

    def split(self, sep: TextLike | None = None) -> list[AnsiText]:
        """Split on *sep* (or runs of whitespace) in the visible text."""
        if sep is None:
            return [self.slice(m.start(), m.end()) for m in re.finditer(r"\S+", self._plain)]

        needle = sep.plain if isinstance(sep, AnsiText) else strip_ansi(sep)
        if not needle:
            raise ValueError("empty separator")

        pieces: list[AnsiText] = []
        position = 0
        while True:
            index = self._plain.find(needle, position)
            if index < 0:
                pieces.append(self.slice(position, len(self._plain)))
                return pieces
            pieces.append(self.slice(position, index))
            position = index + len(needle)

    def lstrip(self) -> AnsiText:
        return self.slice(len(self._plain) - len(self._plain.lstrip()))

    def rstrip(self) -> AnsiText:
        return self.slice(0, len(self._plain.rstrip()))

    def strip(self) -> AnsiText:
        start = len(self._plain) - len(self._plain.lstrip())
        return self.slice(start, start + len(self._plain.strip()))

    def reverse(self) -> AnsiText:
        return AnsiText(
            "".join(segment.wrap(segment.text[::-1]) for segment in reversed(self._segments))
        )

    # -- dunder -------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._plain)

    def __str__(self) -> str:
        return self._raw

    def __repr__(self) -> str:
        return f"AnsiText({self._raw!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AnsiText):
            return self._raw == other._raw
        if isinstance(other, str):
            return self._raw == other
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, (str, AnsiText)):
            return self._raw < _raw_of(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]
