"""Style declarations shared by style nodes and render objects."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Literal, Mapping, NamedTuple

Display = Literal["block", "inline", "float"]
FloatSide = Literal["left", "right"]

DISPLAYS: tuple[str, ...] = ("block", "inline", "float")
FLOAT_SIDES: tuple[str, ...] = ("left", "right")


class StyleError(ValueError):
    """Raised for an unknown style key or an invalid style value."""


class Position(NamedTuple):
    x: int
    y: int


class Dimension(NamedTuple):
    width: int
    height: int


def _check_size(name: str, value: Any, *, allow_negative: bool = False) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise StyleError(f"{name} must be an integer, got {value!r}")
    if value < 0 and not allow_negative:
        raise StyleError(f"{name} must not be negative, got {value}")


@dataclass
class Style:
    """Author-facing style of a node.

    ``width``/``height`` of ``None`` mean "derive from context". ``x``/``y``
    are filled in by layout on resolved render-object styles; authors leave
    them unset. A ``cursor`` of ``"none"`` keeps the terminal cursor hidden
    while an input owning this style is focused.
    """

    display: Display = "block"
    float_side: FloatSide | None = None
    width: int | None = None
    height: int | None = None
    x: int | None = None
    y: int | None = None
    cursor: str | None = None

    def __post_init__(self) -> None:
        if self.display not in DISPLAYS:
            raise StyleError(f"Unknown display: {self.display!r}")
        if self.float_side is not None and self.float_side not in FLOAT_SIDES:
            raise StyleError(f"Unknown float side: {self.float_side!r}")
        if self.display == "float" and self.float_side is None:
            self.float_side = "left"
        _check_size("width", self.width)
        _check_size("height", self.height)
        _check_size("x", self.x, allow_negative=True)
        _check_size("y", self.y, allow_negative=True)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> Style:
        """Build a style from ``{"display": ..., "float": ..., "width": ...}``."""
        values: dict[str, Any] = {}
        for key, value in mapping.items():
            name = "float_side" if key == "float" else key
            if name not in _FIELD_NAMES:
                raise StyleError(f"Unknown style key: {key!r}")
            values[name] = value
        return cls(**values)

    def copy(self, **changes: Any) -> Style:
        return dataclasses.replace(self, **changes)

    @property
    def hides_cursor(self) -> bool:
        return self.cursor == "none"


_FIELD_NAMES = frozenset(field.name for field in dataclasses.fields(Style))


def coerce_style(style: Style | Mapping[str, Any] | None) -> Style:
    if style is None:
        return Style()
    if isinstance(style, Style):
        return style.copy()
    return Style.from_mapping(style)
