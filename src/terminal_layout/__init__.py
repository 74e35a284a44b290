"""terminal-layout: box layout and differential rendering for terminal text."""

# Text
from terminal_layout.ansi_text import RESET, AnsiText, OutOfRangeError, Segment, strip_ansi

# Configuration
from terminal_layout.config import RendererConfig

# Change notification
from terminal_layout.events import CHANGE_KINDS, ChangeEmitter, ChangeKind

# Layout
from terminal_layout.layout import ReentrantMutationError, RenderObject, RenderTree, layout_box

# Style tree
from terminal_layout.nodes import InputStyleNode, StyleNode

# Rendering
from terminal_layout.renderer import DiffRenderer
from terminal_layout.style import Dimension, Position, Style, StyleError

# Terminal
from terminal_layout.terminal import AnsiTerminal, TerminalControl

__all__ = [
    # Text
    "AnsiText",
    "OutOfRangeError",
    "RESET",
    "Segment",
    "strip_ansi",
    # Configuration
    "RendererConfig",
    # Change notification
    "CHANGE_KINDS",
    "ChangeEmitter",
    "ChangeKind",
    # Style tree
    "Dimension",
    "InputStyleNode",
    "Position",
    "Style",
    "StyleError",
    "StyleNode",
    # Layout
    "ReentrantMutationError",
    "RenderObject",
    "RenderTree",
    "layout_box",
    # Rendering
    "DiffRenderer",
    # Terminal
    "AnsiTerminal",
    "TerminalControl",
]
