"""Flow layout: turn a :class:`StyleNode` tree into positioned render objects.

Each container lays out its children left to right, top to bottom, in its
own coordinate space:

* ``float`` boxes are pinned to the left or right edge of the current row and
  narrow the space available to everything else on the rows they cover.
* ``block`` boxes start on a fresh row and take the full available width
  unless they declare one.
* ``inline`` content is packed into the space left on the current row and
  wraps onto following rows, producing one fragment per row.

A box's own content is laid out as an inline run ahead of its children, and
inline boxes are flattened so their children continue in the same flow.
Boxes that end up with zero width or height are dropped from the tree.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Callable, Iterator, Literal

from terminal_layout.ansi_text import AnsiText
from terminal_layout.events import CHANGE_KINDS
from terminal_layout.nodes import InputStyleNode, StyleNode
from terminal_layout.style import Dimension, Position, Style

if TYPE_CHECKING:
    from terminal_layout.renderer import DiffRenderer

logger = logging.getLogger(__name__)

RenderKind = Literal["block", "inline", "float"]

__all__ = [
    "RenderKind",
    "RenderObject",
    "RenderTree",
    "ReentrantMutationError",
    "layout_box",
]


class ReentrantMutationError(RuntimeError):
    """A style node changed while its render tree was laying out or drawing."""


# ---------------------------------------------------------------------------
# RenderObject
# ---------------------------------------------------------------------------


class RenderObject:
    """A positioned box produced by layout.

    ``x``/``y`` are relative to the parent render object. Inline objects are
    one row high and carry the slice of content they display; several inline
    fragments can share one backing node when its text wraps.
    """

    def __init__(
        self,
        box: StyleNode,
        kind: RenderKind,
        *,
        x: int = 0,
        y: int = 0,
        width: int = 0,
        height: int = 0,
        content: AnsiText | None = None,
        parent: RenderObject | None = None,
        fragment_index: int = 0,
    ) -> None:
        self.box = box
        self.kind: RenderKind = kind
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.content = content if content is not None else AnsiText()
        self.parent = parent
        self.fragment_index = fragment_index
        self.children: list[RenderObject] = []
        # Empty inline boxes: (node, x, y) so their offset still gets stamped
        self.anchors: list[tuple[StyleNode, int, int]] = []

    @property
    def float_side(self) -> str | None:
        return self.box.float_side if self.kind == "float" else None

    @property
    def style(self) -> Style:
        """The resolved style: where layout put this box and how big it is."""
        return Style(
            display=self.kind,
            float_side=self.float_side,
            width=self.width,
            height=self.height,
            x=self.x,
            y=self.y,
            cursor=self.box.style.cursor,
        )

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)

    @property
    def size(self) -> Dimension:
        return Dimension(self.width, self.height)

    def absolute_position(self) -> Position:
        x, y = self.x, self.y
        parent = self.parent
        while parent is not None:
            x += parent.x
            y += parent.y
            parent = parent.parent
        return Position(x, y)

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator[RenderObject]:
        return iter(self.children)

    def __getitem__(self, index: int) -> RenderObject:
        return self.children[index]

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def find(self, predicate: Callable[[RenderObject], bool]) -> RenderObject | None:
        for child in self.children:
            if predicate(child):
                return child
            found = child.find(predicate)
            if found is not None:
                return found
        return None

    def find_all(self, predicate: Callable[[RenderObject], bool]) -> list[RenderObject]:
        matches: list[RenderObject] = []
        for child in self.children:
            if predicate(child):
                matches.append(child)
            matches.extend(child.find_all(predicate))
        return matches

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> AnsiText:
        """Composite this box into a flat ``height * width`` character buffer."""
        match self.kind:
            case "inline":
                rendered = self.content.copy()
                if len(rendered) < self.width:
                    rendered.append(" " * (self.width - len(rendered)))
                return rendered
            case _:
                buffer = AnsiText(" " * (self.width * self.height))
                for child in self.children:
                    self._overlay(buffer, child)
                return buffer

    def _overlay(self, buffer: AnsiText, child: RenderObject) -> None:
        visible = min(child.width, self.width - child.x)
        if visible <= 0 or child.x < 0:
            return
        rendered = child.render()
        for row in range(child.height):
            top = child.y + row
            if top < 0 or top >= self.height:
                continue
            start = top * self.width + child.x
            source = row * child.width
            buffer[start : start + visible] = rendered.slice(source, source + visible)

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} kind={self.kind} position=({self.x},{self.y}) "
            f"dimensions={self.width}x{self.height} content={self.content.plain!r}>"
        )


# ---------------------------------------------------------------------------
# Flow
# ---------------------------------------------------------------------------


class _Flow:
    """Cursor state while laying out one container's children."""

    def __init__(self, container: RenderObject) -> None:
        self.container = container
        self.width = container.width
        self.x = 0
        self.y = 0
        self.floats: list[RenderObject] = []
        self.previous: RenderKind | None = None

    def _floats_on(self, row: int, side: str) -> Iterator[RenderObject]:
        for placed in self.floats:
            if placed.float_side == side and placed.y <= row < placed.y + placed.height:
                yield placed

    def starting_x(self, row: int | None = None) -> int:
        row = self.y if row is None else row
        return max((f.x + f.width for f in self._floats_on(row, "left")), default=0)

    def ending_x(self, row: int | None = None) -> int:
        row = self.y if row is None else row
        return min((f.x for f in self._floats_on(row, "right")), default=self.width)

    def blocked(self, row: int) -> bool:
        return any(f.y <= row < f.y + f.height for f in self.floats)

    def new_line(self) -> None:
        self.y += 1
        self.x = self.starting_x()


def _flow_items(box: StyleNode) -> Iterator[tuple[StyleNode, RenderKind]]:
    """The boxes laid out inside *box*, in order, with the kind to lay them out as."""
    if len(box.content) or isinstance(box, InputStyleNode):
        yield box, "inline"
    yield from _child_items(box)


def _child_items(box: StyleNode) -> Iterator[tuple[StyleNode, RenderKind]]:
    # Inline children are flattened into the same flow
    for child in box.children:
        if child.display == "inline":
            yield child, "inline"
            yield from _child_items(child)
        else:
            yield child, child.display  # type: ignore[misc]


def _extent(children: list[RenderObject]) -> int:
    return max((child.y + child.height for child in children), default=0)


def _derived_height(children: list[RenderObject]) -> int:
    if not children:
        return 0
    if len(children) == 1:
        return children[0].height
    lowest = max(children, key=lambda child: (child.y, child.height))
    return lowest.y + lowest.height


def _collapsed(render_object: RenderObject) -> bool:
    if render_object.height == 0:
        reason = "zero height"
    elif render_object.width == 0:
        reason = "zero width"
    else:
        return False
    logger.debug("Dropping %s box %r: %s", render_object.kind, render_object.box, reason)
    return True


def _keep_anchors(flow: _Flow, dropped: RenderObject, x: int, y: int) -> None:
    """Hand the anchors of a dropped box to its container, offset to (x, y)."""
    for node, anchor_x, anchor_y in dropped.anchors:
        flow.container.anchors.append((node, x + anchor_x, y + anchor_y))


def _place_float(flow: _Flow, node: StyleNode) -> None:
    width = min(node.width or 0, flow.width)
    placed = RenderObject(node, "float", width=width, parent=flow.container)
    layout_box(placed)
    placed.height = node.height if node.height is not None else _extent(placed.children)
    if _collapsed(placed):
        _keep_anchors(flow, placed, max(flow.x, flow.starting_x()), flow.y)
        return

    if node.float_side == "right":
        row = flow.y
        while flow.ending_x(row) - flow.starting_x(row) < width:
            row += 1
        placed.x = flow.ending_x(row) - width
        placed.y = row
    else:
        flow.x = max(flow.x, flow.starting_x())
        while flow.x + width > flow.ending_x():
            flow.new_line()
        placed.x = flow.x
        placed.y = flow.y
        flow.x += width

    flow.floats.append(placed)
    flow.container.children.append(placed)
    flow.previous = "float"


def _place_block(flow: _Flow, node: StyleNode) -> None:
    row = flow.y
    if flow.previous == "inline" and flow.x != 0:
        row += 1

    declared = node.width
    needed = 1 if declared is None else declared
    start, end = flow.starting_x(row), flow.ending_x(row)
    while needed > end - start and flow.blocked(row):
        row += 1
        start, end = flow.starting_x(row), flow.ending_x(row)

    available = end - start
    width = available if declared is None else min(declared, available)

    placed = RenderObject(node, "block", x=start, y=row, width=width, parent=flow.container)
    layout_box(placed)
    placed.height = node.height if node.height is not None else _derived_height(placed.children)
    if _collapsed(placed):
        _keep_anchors(flow, placed, start, row)
        return

    flow.container.children.append(placed)
    flow.y = row + max(placed.height, 1)
    flow.x = 0
    flow.previous = "block"


def _place_inline(flow: _Flow, node: StyleNode) -> None:
    content = node.content
    flow.x = max(flow.x, flow.starting_x())

    if not len(content):
        flow.container.anchors.append((node, flow.x, flow.y))
        return

    index = 0
    fragment = 0
    while index < len(content):
        available = flow.ending_x() - flow.x
        if available <= 0:
            if flow.width <= 0:
                break
            flow.new_line()
            continue

        chunk = content.slice(index, index + available)
        if not len(chunk):
            break

        flow.container.children.append(
            RenderObject(
                node,
                "inline",
                x=flow.x,
                y=flow.y,
                width=len(chunk),
                height=1,
                content=chunk,
                parent=flow.container,
                fragment_index=fragment,
            )
        )
        fragment += 1
        index += len(chunk)

        if len(chunk) >= available:
            flow.new_line()
        else:
            flow.x += len(chunk)

    flow.previous = "inline"


def layout_box(container: RenderObject) -> None:
    """Lay out the children of *container*'s box inside its width."""
    flow = _Flow(container)
    for node, kind in _flow_items(container.box):
        match kind:
            case "float":
                _place_float(flow, node)
            case "inline":
                _place_inline(flow, node)
            case _:
                _place_block(flow, node)


def _record_offsets(render_object: RenderObject, origin: Position, wrap_width: int) -> None:
    for child in render_object.children:
        absolute = Position(origin.x + child.x, origin.y + child.y)
        # A wrapped node keeps the offset of its first fragment
        if child.fragment_index == 0:
            child.box.record_layout(absolute, wrap_width)
        _record_offsets(child, absolute, wrap_width)
    for node, x, y in render_object.anchors:
        node.record_layout(Position(origin.x + x, origin.y + y), wrap_width)


# ---------------------------------------------------------------------------
# RenderTree
# ---------------------------------------------------------------------------


class RenderTree(RenderObject):
    """The root render object: watches a style tree and re-lays it out.

    Changes anywhere in the watched tree mark it dirty; :meth:`flush` brings
    the layout up to date and hands the result to the renderer. With
    ``auto_flush`` every change flushes immediately.

    ``width`` defaults to the root box's declared width, then to the
    renderer's terminal width. ``height`` defaults to the root's declared
    height, then to the height of its content.
    """

    def __init__(
        self,
        box: StyleNode,
        width: int | None = None,
        height: int | None = None,
        renderer: DiffRenderer | None = None,
        auto_flush: bool = False,
    ) -> None:
        super().__init__(box, "block")
        self.renderer = renderer
        self.auto_flush = auto_flush
        self._declared_width = width if width is not None else box.width
        self._declared_height = height if height is not None else box.height
        if self._declared_width is None and renderer is None:
            raise ValueError("RenderTree needs a width or a renderer to take it from")
        self._needs_layout = True
        self._needs_render = True
        self._busy = False
        self._unsubscribers = [
            box.events.subscribe(kind, functools.partial(self._on_change, kind))
            for kind in CHANGE_KINDS
        ]
        self.layout()

    @property
    def dirty(self) -> bool:
        return self._needs_layout or self._needs_render

    def mark_dirty(self, relayout: bool = True) -> None:
        self._needs_render = True
        if relayout:
            self._needs_layout = True

    def _resolve_width(self) -> int:
        if self._declared_width is not None:
            return self._declared_width
        assert self.renderer is not None
        return self.renderer.terminal.terminal_width()

    def layout(self) -> RenderTree:
        self._busy = True
        try:
            self.width = self._resolve_width()
            self.children = []
            self.anchors = []
            layout_box(self)
            if self._declared_height is not None:
                self.height = self._declared_height
            else:
                self.height = _derived_height(self.children)
            self.box.record_layout(Position(0, 0), self.width)
            _record_offsets(self, Position(0, 0), self.width)
        finally:
            self._busy = False
        self._needs_layout = False
        self._needs_render = True
        logger.debug(
            "Layout pass: %dx%d, %d top-level boxes", self.width, self.height, len(self.children)
        )
        return self

    def flush(self, reset: bool = False) -> bool:
        """Lay out and render if anything changed. Returns whether it drew."""
        if not (self.dirty or reset):
            return False
        if self._needs_layout:
            self.layout()
        if self.renderer is not None:
            self._busy = True
            try:
                self.renderer.render(self, reset=reset)
            finally:
                self._busy = False
        self._needs_render = False
        return True

    def detach(self) -> None:
        """Stop watching the style tree."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _on_change(self, kind: str, *args: object) -> None:
        # Cursor moves and focus changes only need a redraw
        self.mark_dirty(relayout=kind in ("content_changed", "child_changed"))
        # The change has already been applied, so the next flush must pick it up
        if self._busy:
            raise ReentrantMutationError(
                f"Style tree changed ({kind}) while it was being laid out or rendered"
            )
        logger.debug("Render tree marked dirty: %s", kind)
        if self.auto_flush:
            self.flush()
