"""The author-facing tree: styled nodes that notify on change.

A :class:`StyleNode` owns its content, its children and a
:class:`~terminal_layout.events.ChangeEmitter`. Changes anywhere below a node
bubble up to it, so a :class:`~terminal_layout.layout.RenderTree` only has to
watch the root.

Handlers always receive ``(old, new)``. Content and child changes of a child
arrive at the parent as ``child_changed``; ``position_changed`` and
``focus_changed`` keep their kind all the way up.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Mapping

from terminal_layout.ansi_text import AnsiText, TextLike
from terminal_layout.events import ChangeEmitter, ChangeKind
from terminal_layout.style import Position, Style, coerce_style

__all__ = ["StyleNode", "InputStyleNode"]

# child kind -> kind re-emitted on the parent
_BUBBLED: dict[ChangeKind, ChangeKind] = {
    "content_changed": "child_changed",
    "child_changed": "child_changed",
    "position_changed": "position_changed",
    "focus_changed": "focus_changed",
}


class StyleNode:
    """A styled box of text with children."""

    def __init__(
        self,
        content: TextLike | None = "",
        children: Iterable[StyleNode] | None = None,
        style: Style | Mapping[str, Any] | None = None,
    ) -> None:
        self.style = coerce_style(style)
        self.events = ChangeEmitter()
        # Absolute screen offset from the most recent layout pass
        self.computed = Position(0, 0)
        self._content = AnsiText(content)
        self._children: list[StyleNode] = []
        self._child_unsubscribers: list[Callable[[], None]] = []
        self._install_children(list(children or ()))

    # ------------------------------------------------------------------
    # Style accessors
    # ------------------------------------------------------------------

    @property
    def display(self) -> str:
        return self.style.display

    @property
    def float_side(self) -> str | None:
        return self.style.float_side

    @property
    def width(self) -> int | None:
        return self.style.width

    @property
    def height(self) -> int | None:
        return self.style.height

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    @property
    def content(self) -> AnsiText:
        return self._content

    @content.setter
    def content(self, value: TextLike | None) -> None:
        new = AnsiText(value)
        if new == self._content:
            return
        old = self._content
        self._content = new
        self.events.emit("content_changed", old, new)

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    @property
    def children(self) -> tuple[StyleNode, ...]:
        return tuple(self._children)

    @children.setter
    def children(self, value: Iterable[StyleNode]) -> None:
        new = list(value)
        old = list(self._children)
        if new == old:
            return
        self._install_children(new)
        self.events.emit("child_changed", old, new)

    def add_child(self, child: StyleNode) -> None:
        """Append *child* to the children list."""
        self.children = [*self._children, child]

    def remove_child(self, child: StyleNode) -> None:
        """Remove *child* from the children list (no-op if absent)."""
        if child in self._children:
            self.children = [c for c in self._children if c is not child]

    def clear(self) -> None:
        """Remove all children."""
        self.children = []

    def _install_children(self, children: list[StyleNode]) -> None:
        for unsubscribe in self._child_unsubscribers:
            unsubscribe()
        self._child_unsubscribers = []
        self._children = children
        for child in children:
            for kind, relayed in _BUBBLED.items():
                self._child_unsubscribers.append(
                    child.events.subscribe(kind, self._relay(relayed))
                )

    def _relay(self, kind: ChangeKind) -> Callable[..., None]:
        def relay(*args: Any) -> None:
            self.events.emit(kind, *args)

        return relay

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def walk(self) -> Iterator[StyleNode]:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self._children:
            yield from child.walk()

    def find_descendant(self, predicate: Callable[[StyleNode], bool]) -> StyleNode | None:
        """Depth-first search of the descendants (excluding ``self``)."""
        for child in self._children:
            if predicate(child):
                return child
            found = child.find_descendant(predicate)
            if found is not None:
                return found
        return None

    # ------------------------------------------------------------------
    # Layout hooks
    # ------------------------------------------------------------------

    def record_layout(self, position: Position, wrap_width: int) -> None:
        """Store the absolute offset assigned by the latest layout pass."""
        self.computed = position

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} display={self.display} "
            f"dimensions={self.width}x{self.height} content={self._content.plain!r}>"
        )


class InputStyleNode(StyleNode):
    """A style node that owns an editing cursor.

    ``position`` is the cursor offset within the content in visible
    characters. The focused input decides where the terminal cursor ends up
    after each render.
    """

    def __init__(
        self,
        content: TextLike | None = "",
        children: Iterable[StyleNode] | None = None,
        style: Style | Mapping[str, Any] | None = None,
        position: int = 0,
        focused: bool = False,
    ) -> None:
        super().__init__(content=content, children=children, style=style)
        self._position = max(0, min(position, len(self._content)))
        self._focused = focused
        self._wrap_width: int | None = None

    @property
    def position(self) -> int:
        return self._position

    @position.setter
    def position(self, value: int) -> None:
        new = max(0, min(value, len(self._content)))
        if new == self._position:
            return
        old = self._position
        self._position = new
        self.events.emit("position_changed", old, new)

    @property
    def focused(self) -> bool:
        return self._focused

    @focused.setter
    def focused(self, value: bool) -> None:
        new = bool(value)
        if new == self._focused:
            return
        old = self._focused
        self._focused = new
        self.events.emit("focus_changed", old, new)

    @property
    def hides_cursor(self) -> bool:
        return self.style.hides_cursor

    def record_layout(self, position: Position, wrap_width: int) -> None:
        super().record_layout(position, wrap_width)
        self._wrap_width = wrap_width

    def resolve_cursor(self, width: int) -> Position:
        """Screen (column, row) of the cursor when lines wrap at *width*."""
        offset = min(self._position, len(self._content))
        if width <= 0:
            return Position(self.computed.x + offset, self.computed.y)
        row, column = divmod(self.computed.x + self.computed.y * width + offset, width)
        return Position(column, row)

    @property
    def cursor_position(self) -> Position:
        """Cursor location using the width of the last layout pass."""
        return self.resolve_cursor(self._wrap_width or 0)
