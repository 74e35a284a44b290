"""Synchronous change notification for style nodes."""

from __future__ import annotations

from typing import Any, Callable, Literal, get_args

ChangeKind = Literal["content_changed", "child_changed", "position_changed", "focus_changed"]
CHANGE_KINDS: tuple[str, ...] = get_args(ChangeKind)

Handler = Callable[..., Any]


class ChangeEmitter:
    """Publish/subscribe hub owned by a single node.

    Handlers run synchronously, in subscription order, inside :meth:`emit`.
    Exceptions raised by a handler propagate to the caller of ``emit``.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def subscribe(self, kind: ChangeKind, handler: Handler) -> Callable[[], None]:
        """Register *handler* for *kind*. Returns a function that unsubscribes it."""
        if kind not in CHANGE_KINDS:
            raise ValueError(f"Unknown change kind: {kind!r}")
        self._handlers.setdefault(kind, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(kind)
            if handlers and handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def unsubscribe_all(self) -> None:
        self._handlers.clear()

    def emit(self, kind: ChangeKind, *args: Any) -> None:
        # Copy so handlers may unsubscribe themselves mid-dispatch
        for handler in list(self._handlers.get(kind, ())):
            handler(*args)

    def handler_count(self, kind: ChangeKind | None = None) -> int:
        if kind is None:
            return sum(len(handlers) for handlers in self._handlers.values())
        return len(self._handlers.get(kind, ()))
