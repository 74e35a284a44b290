"""Tests for AnsiTerminal escape sequences and size fallback."""

from __future__ import annotations

import io
from pathlib import Path

from terminal_layout.config import RendererConfig
from terminal_layout.terminal import AnsiTerminal


def make_terminal(**config: object) -> tuple[AnsiTerminal, io.StringIO]:
    output = io.StringIO()
    return AnsiTerminal(output, RendererConfig(**config)), output  # type: ignore[arg-type]


class TestAnsiTerminalSequences:
    def test_cursor_movement(self) -> None:
        terminal, output = make_terminal()
        terminal.move_cursor_up(3)
        terminal.move_cursor_down(2)
        assert output.getvalue() == "\x1b[3A\x1b[2B"

    def test_zero_movement_writes_nothing(self) -> None:
        terminal, output = make_terminal()
        terminal.move_cursor_up(0)
        terminal.move_cursor_down(-1)
        assert output.getvalue() == ""

    def test_column_is_one_based_on_the_wire(self) -> None:
        terminal, output = make_terminal()
        terminal.move_to_column(0)
        terminal.move_to_column(5)
        assert output.getvalue() == "\x1b[1G\x1b[6G"

    def test_clearing(self) -> None:
        terminal, output = make_terminal()
        terminal.clear_line()
        terminal.clear_to_end_of_screen()
        assert output.getvalue() == "\x1b[2K\x1b[0J"

    def test_cursor_visibility(self) -> None:
        terminal, output = make_terminal()
        terminal.set_cursor_visible(False)
        terminal.set_cursor_visible(True)
        assert output.getvalue() == "\x1b[?25l\x1b[?25h"


class TestAnsiTerminalSize:
    def test_falls_back_to_configured_size(self) -> None:
        terminal, _ = make_terminal(columns=42, rows=7)
        assert terminal.terminal_width() == 42
        assert terminal.terminal_height() == 7


class TestAnsiTerminalWriteLog:
    def test_writes_are_appended_to_log(self, tmp_path: Path) -> None:
        log = tmp_path / "writes.log"
        terminal, output = make_terminal(write_log_path=str(log))

        terminal.write("hello")
        terminal.clear_line()

        assert output.getvalue() == "hello\x1b[2K"
        assert log.read_text(encoding="utf-8") == "hello\x1b[2K"
