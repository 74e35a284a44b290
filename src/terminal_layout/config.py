"""Renderer and terminal settings, overridable through the environment.

* ``TERMINAL_LAYOUT_WRITE_LOG``: append every terminal write to this file.
* ``TERMINAL_LAYOUT_DEBUG_DIR``: where ``write_debug_dump`` puts its files.
* ``TERMINAL_LAYOUT_COLUMNS`` / ``TERMINAL_LAYOUT_ROWS``: size used when the
  output is not a tty.
* ``TERMINAL_LAYOUT_HIDE_CURSOR_WHILE_DRAWING``: ``0`` keeps the cursor
  visible while lines are being rewritten.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

logger = logging.getLogger(__name__)

_ENV_PREFIX = "TERMINAL_LAYOUT_"
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _default_debug_dir() -> str:
    return os.path.join(os.path.expanduser("~"), ".terminal-layout", "debug")


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(_ENV_PREFIX + name, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s%s=%r: not an integer", _ENV_PREFIX, name, raw)
        return default
    if value <= 0:
        logger.warning("Ignoring %s%s=%r: must be positive", _ENV_PREFIX, name, raw)
        return default
    return value


@dataclass
class RendererConfig:
    write_log_path: str = ""
    debug_dir: str = field(default_factory=_default_debug_dir)
    columns: int = 80
    rows: int = 24
    hide_cursor_while_drawing: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RendererConfig:
        """Build a config from ``TERMINAL_LAYOUT_*`` variables (``os.environ`` by default)."""
        env = os.environ if environ is None else environ
        hide = env.get(_ENV_PREFIX + "HIDE_CURSOR_WHILE_DRAWING", "")
        return cls(
            write_log_path=env.get(_ENV_PREFIX + "WRITE_LOG", ""),
            debug_dir=env.get(_ENV_PREFIX + "DEBUG_DIR", "") or _default_debug_dir(),
            columns=_int_env(env, "COLUMNS", 80),
            rows=_int_env(env, "ROWS", 24),
            hide_cursor_while_drawing=hide.strip().lower() not in _FALSE_VALUES,
        )
