"""Terminal control surface used by the renderer.

Provides the ``TerminalControl`` protocol and ``AnsiTerminal``, which drives
a text stream with ANSI escape sequences.
"""

from __future__ import annotations

import os
import sys
from typing import Protocol, TextIO

from terminal_layout.config import RendererConfig

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_LINE = "\x1b[2K"
_CLEAR_TO_END_OF_SCREEN = "\x1b[0J"
_CURSOR_UP_FMT = "\x1b[{}A"
_CURSOR_DOWN_FMT = "\x1b[{}B"
_COLUMN_FMT = "\x1b[{}G"


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class TerminalControl(Protocol):
    """What the renderer needs from a terminal.

    Row movement is relative; a count of zero or less does nothing. Columns
    are zero-based.
    """

    def write(self, data: str) -> None: ...

    def move_cursor_up(self, lines: int) -> None: ...

    def move_cursor_down(self, lines: int) -> None: ...

    def move_to_column(self, column: int) -> None: ...

    def clear_line(self) -> None: ...

    def clear_to_end_of_screen(self) -> None: ...

    def set_cursor_visible(self, visible: bool) -> None: ...

    def terminal_width(self) -> int: ...

    def terminal_height(self) -> int: ...


# ---------------------------------------------------------------------------
# AnsiTerminal
# ---------------------------------------------------------------------------


class AnsiTerminal:
    """``TerminalControl`` backed by a text stream (``sys.stdout`` by default)."""

    def __init__(self, output: TextIO | None = None, config: RendererConfig | None = None) -> None:
        self._output = output
        self.config = config or RendererConfig.from_env()

    @property
    def output(self) -> TextIO:
        return self._output if self._output is not None else sys.stdout

    # -- size ---------------------------------------------------------------

    def terminal_width(self) -> int:
        try:
            return os.get_terminal_size(self.output.fileno()).columns
        except (ValueError, OSError):
            return self.config.columns

    def terminal_height(self) -> int:
        try:
            return os.get_terminal_size(self.output.fileno()).lines
        except (ValueError, OSError):
            return self.config.rows

    # -- write --------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to the output and optionally to the write log."""
        self._raw_write(data)

        if self.config.write_log_path:
            try:
                with open(self.config.write_log_path, "a", encoding="utf-8") as f:
                    f.write(data)
            except OSError:
                pass

    # -- cursor / screen manipulation --------------------------------------

    def move_cursor_up(self, lines: int) -> None:
        if lines > 0:
            self.write(_CURSOR_UP_FMT.format(lines))

    def move_cursor_down(self, lines: int) -> None:
        if lines > 0:
            self.write(_CURSOR_DOWN_FMT.format(lines))

    def move_to_column(self, column: int) -> None:
        # CHA is one-based
        self.write(_COLUMN_FMT.format(max(column, 0) + 1))

    def clear_line(self) -> None:
        self.write(_CLEAR_LINE)

    def clear_to_end_of_screen(self) -> None:
        self.write(_CLEAR_TO_END_OF_SCREEN)

    def set_cursor_visible(self, visible: bool) -> None:
        self.write(_SHOW_CURSOR if visible else _HIDE_CURSOR)

    # -- private: raw write ------------------------------------------------

    def _raw_write(self, data: str) -> None:
        try:
            self.output.write(data)
            self.output.flush()
        except OSError:
            pass
