"""Push-based event stream with lazy activation and operator chaining.

Emit values or errors, subscribe to them, and compose with map/filter
operators. Each operator returns a new stream that only subscribes
upstream once it has a listener of its own, and lets go of upstream when
its last listener leaves. dispose() tears down the entire chain.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")

Disposer = Callable[[], None]
ErrorHandler = Callable[[BaseException], None]

logger = logging.getLogger("stream_maestro.stream")


def _noop() -> None:
    pass


class _Subscriber(Generic[T]):
    __slots__ = ("on_value", "on_error", "active")

    def __init__(self, on_value: Callable[[T], None], on_error: ErrorHandler | None) -> None:
        self.on_value = on_value
        self.on_error = on_error
        self.active = True


class EventStream(Generic[T]):
    """Push-based event stream with lazy activation and operator chaining.

    on_listen runs when the first listener arrives, on_cancel when the
    last one leaves (or on dispose). With buffered=True, anything emitted
    before the first listener is held and replayed to it.
    """

    def __init__(
        self,
        on_listen: Callable[[], None] | None = None,
        on_cancel: Callable[[], None] | None = None,
        *,
        buffered: bool = False,
    ) -> None:
        self._subscribers: list[_Subscriber[T]] = []
        self._children: list[EventStream] = []  # downstream streams for dispose
        self._disposed = False
        self._listening = False
        self._on_listen = on_listen
        self._on_cancel = on_cancel
        self._buffer: list[tuple[bool, object]] | None = [] if buffered else None
        self._parent_disposer: Disposer | None = None

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def disposed(self) -> bool:
        return self._disposed

    def emit(self, value: T) -> None:
        """Push a value to all subscribers."""
        if self._disposed:
            return
        if not self._subscribers:
            if self._buffer is not None:
                self._buffer.append((False, value))
            return
        for sub in list(self._subscribers):
            if sub.active:
                sub.on_value(value)

    def emit_error(self, error: BaseException) -> None:
        """Push an error to all subscribers.

        Subscribers without an error handler get the error raised back at
        the emitter, after everyone else has seen it.
        """
        if self._disposed:
            return
        if not self._subscribers:
            if self._buffer is not None:
                self._buffer.append((True, error))
            else:
                logger.debug("Dropping error with no listener: %r", error)
            return
        unhandled = False
        for sub in list(self._subscribers):
            if not sub.active:
                continue
            if sub.on_error is None:
                unhandled = True
            else:
                sub.on_error(error)
        if unhandled:
            raise error

    def subscribe(
        self,
        callback: Callable[[T], None],
        on_error: ErrorHandler | None = None,
    ) -> Disposer:
        """Register a callback. Returns a function that removes it."""
        if self._disposed:
            return _noop
        sub = _Subscriber(callback, on_error)
        self._subscribers.append(sub)
        if not self._listening:
            self._listening = True
            if self._on_listen is not None:
                self._on_listen()
            self._flush_buffer(sub)

        def _unsubscribe() -> None:
            if not sub.active:
                return  # already removed
            sub.active = False
            try:
                self._subscribers.remove(sub)
            except ValueError:
                pass
            if not self._subscribers:
                self._cancel()

        return _unsubscribe

    def map(self, fn: Callable[[T], U]) -> EventStream[U]:
        """Transform events through fn."""
        return self._derive(lambda out, v: out.emit(fn(v)))

    def filter(self, fn: Callable[[T], bool]) -> EventStream[T]:
        """Only pass events where fn returns True."""
        return self._derive(lambda out, v: out.emit(v) if fn(v) else None)

    def map_error(self, fn: Callable[[BaseException], BaseException]) -> EventStream[T]:
        """Replace every error with fn(error). Values pass through."""
        return self._derive(
            lambda out, v: out.emit(v),
            lambda out, e: out.emit_error(fn(e)),
        )

    def dispose(self) -> None:
        """Tear down this stream and all downstream children."""
        self._disposed = True
        for sub in self._subscribers:
            sub.active = False
        self._subscribers.clear()
        self._buffer = None
        self._cancel()
        for child in list(self._children):
            child.dispose()
        self._children.clear()
        if self._parent_disposer is not None:
            self._parent_disposer()
            self._parent_disposer = None

    def _cancel(self) -> None:
        if not self._listening:
            return
        self._listening = False
        if self._on_cancel is not None:
            self._on_cancel()

    def _flush_buffer(self, sub: _Subscriber[T]) -> None:
        buffered, self._buffer = self._buffer, None
        for is_error, item in buffered or ():
            if not sub.active:
                break
            if is_error:
                self.emit_error(item)  # type: ignore[arg-type]
            else:
                self.emit(item)  # type: ignore[arg-type]

    def _derive(
        self,
        on_value: Callable[[EventStream[U], T], None],
        on_error: Callable[[EventStream[U], BaseException], None] | None = None,
    ) -> EventStream[U]:
        """Build a child stream that subscribes to self only while listened to."""
        upstream: list[Disposer] = []

        def _listen() -> None:
            upstream.append(
                self.subscribe(
                    lambda v: on_value(child, v),
                    on_error=(lambda e: on_error(child, e)) if on_error else child.emit_error,
                )
            )

        def _cancel() -> None:
            while upstream:
                upstream.pop()()

        child: EventStream[U] = EventStream(on_listen=_listen, on_cancel=_cancel)
        child._parent_disposer = self._track_child(child)
        return child

    def _track_child(self, child: EventStream) -> Disposer:
        """Register child for dispose propagation. Returns a disposer that removes it."""
        self._children.append(child)

        def _remove() -> None:
            try:
                self._children.remove(child)
            except ValueError:
                pass

        return _remove

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else ("listening" if self._listening else "idle")
        return f"EventStream({state}, subscribers={len(self._subscribers)})"
