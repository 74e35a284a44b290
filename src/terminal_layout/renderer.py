"""Differential terminal renderer with cursor placement.

The renderer remembers the lines it drew last time. Each pass it moves the
cursor back to the top of its region, rewrites only the lines that changed,
clears whatever is left below, and finally parks the terminal cursor where
the focused input wants it.
"""

from __future__ import annotations

import logging
import os
import time
from itertools import zip_longest

from terminal_layout.ansi_text import RESET, AnsiText
from terminal_layout.config import RendererConfig
from terminal_layout.layout import RenderObject
from terminal_layout.nodes import InputStyleNode, StyleNode
from terminal_layout.terminal import TerminalControl

logger = logging.getLogger(__name__)

__all__ = ["DiffRenderer"]


class DiffRenderer:
    """Draws render trees onto a :class:`TerminalControl`.

    ``_y``/``_x`` track where the terminal cursor is, relative to the first
    line of the region this renderer owns.
    """

    def __init__(self, terminal: TerminalControl, config: RendererConfig | None = None) -> None:
        self.terminal = terminal
        self.config = config or RendererConfig.from_env()
        self._previous_lines: list[AnsiText] = []
        self._x = 0
        self._y = 0
        self._full_redraw_count = 0
        self.last_rewrite_count = 0

    @property
    def full_redraws(self) -> int:
        return self._full_redraw_count

    @property
    def previous_lines(self) -> list[AnsiText]:
        return list(self._previous_lines)

    @property
    def cursor(self) -> tuple[int, int]:
        """(column, row) of the terminal cursor within the rendered region."""
        return self._x, self._y

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    @staticmethod
    def find_top_of_tree(render_object: RenderObject) -> RenderObject:
        while render_object.parent is not None:
            render_object = render_object.parent
        return render_object

    def render(self, render_object: RenderObject, reset: bool = False) -> None:
        """Draw the tree containing *render_object*.

        With ``reset`` the previous frame is forgotten and every line is
        written from the current cursor row.
        """
        term_width = self.terminal.terminal_width()
        if term_width <= 0:
            logger.debug("Skipping render: terminal width is %d", term_width)
            return

        if reset:
            baseline: list[AnsiText] = []
            self._y = 0
            self._full_redraw_count += 1
        else:
            baseline = self._previous_lines
            self.terminal.move_cursor_up(self._y)
            self.terminal.move_to_column(0)
            self._y = 0
        self._x = 0

        if self.config.hide_cursor_while_drawing:
            self.terminal.set_cursor_visible(False)

        top = self.find_top_of_tree(render_object)
        lines = self._display_lines(top.render().rstrip(), term_width)

        rewrites = 0
        rows = 0
        completed = False
        try:
            for index, (line, previous) in enumerate(zip_longest(lines, baseline)):
                if line is None:
                    break
                if line != previous:
                    self.terminal.move_to_column(0)
                    self.terminal.clear_line()
                    rows += 1
                    self.terminal.write(line.raw + RESET + "\n")
                    self.terminal.move_to_column(0)
                    rewrites += 1
                    self._check_cell_width(line, index)
                else:
                    self.terminal.move_cursor_down(1)
                    rows += 1
            self.terminal.move_to_column(0)
            self.terminal.clear_to_end_of_screen()
            completed = True
        finally:
            if not completed:
                # What is on screen is unknown: redraw every line next pass
                self._y = rows
                self._previous_lines = []
                logger.debug("Render pass aborted after %d lines", rows)

        self._y = len(lines)
        self.last_rewrite_count = rewrites
        logger.debug(
            "Render pass: %d lines, %d rewritten, reset=%s", len(lines), rewrites, reset
        )

        focused = self._find_focused_input(top.box)
        if focused is not None:
            self.render_cursor(focused)
        self._previous_lines = lines

    def render_cursor(self, node: InputStyleNode) -> None:
        """Move the terminal cursor to *node*'s cursor and set its visibility."""
        target = node.resolve_cursor(self.terminal.terminal_width())
        delta = target.y - self._y
        if delta < 0:
            self.terminal.move_cursor_up(-delta)
        elif delta > 0:
            self.terminal.move_cursor_down(delta)
        self.terminal.move_to_column(target.x)
        self._x, self._y = target.x, target.y
        self.terminal.set_cursor_visible(not node.hides_cursor)
        logger.debug("Cursor placed at column %d, row %d", target.x, target.y)

    def clear_screen(self) -> None:
        """Erase the region drawn so far and forget the previous frame."""
        self.terminal.move_cursor_up(self._y)
        self.terminal.move_to_column(0)
        self.terminal.clear_to_end_of_screen()
        self._x = self._y = 0
        self._previous_lines = []

    @staticmethod
    def _display_lines(printable: AnsiText, width: int) -> list[AnsiText]:
        lines: list[AnsiText] = []
        for line in printable.split_lines():
            if not len(line):
                lines.append(line)
                continue
            lines.extend(line.slice(i, i + width) for i in range(0, len(line), width))
        return lines

    @staticmethod
    def _find_focused_input(box: StyleNode) -> InputStyleNode | None:
        if isinstance(box, InputStyleNode) and box.focused:
            return box
        found = box.find_descendant(
            lambda node: isinstance(node, InputStyleNode) and node.focused
        )
        return found if isinstance(found, InputStyleNode) else None

    @staticmethod
    def _check_cell_width(line: AnsiText, index: int) -> None:
        cells = line.display_width()
        if cells != len(line):
            logger.warning(
                "Line %d is %d characters but %d terminal cells wide; "
                "columns after it will be misaligned",
                index,
                len(line),
                cells,
            )

    # ------------------------------------------------------------------
    # Debug dump
    # ------------------------------------------------------------------

    def write_debug_dump(self) -> str | None:
        """Write the current render state to the debug directory.

        Returns the path written, or ``None`` if it could not be written.
        """
        try:
            os.makedirs(self.config.debug_dir, exist_ok=True)
            ts = int(time.time() * 1000)
            dump_path = os.path.join(self.config.debug_dir, f"render-{ts}.txt")
            with open(dump_path, "w", encoding="utf-8") as f:
                f.write(
                    f"terminal: {self.terminal.terminal_width()}x"
                    f"{self.terminal.terminal_height()}\n"
                )
                f.write(f"cursor: column={self._x} row={self._y}\n")
                f.write(f"full_redraws: {self._full_redraw_count}\n")
                f.write(f"last_rewrite_count: {self.last_rewrite_count}\n")
                f.write(f"\nprevious_lines ({len(self._previous_lines)}):\n")
                for i, line in enumerate(self._previous_lines):
                    f.write(f"  [{i:3d}] {line.raw!r}\n")
        except OSError:
            logger.warning("Could not write render debug dump to %s", self.config.debug_dir)
            return None
        return dump_path
