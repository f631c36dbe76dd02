"""StreamMaestro — the consumer-facing hub.

Combines one primary item event stream with UI action events pushed by
hand (sorting, grouping) into a single stream for a list consumer.
"""

from __future__ import annotations

import logging
import threading
from typing import Generic, TypeVar

from stream_maestro.errors import AlreadyAttachedError, MisuseError
from stream_maestro.events import ActionEvent, ItemEvent
from stream_maestro.stream import Disposer, EventStream

T = TypeVar("T")

logger = logging.getLogger("stream_maestro.maestro")


class StreamMaestro(Generic[T]):
    """Hub merging an item event stream with UI action events.

    Anything pushed before the consumer listens is held for it. When the
    consumer cancels its subscription the hub closes itself.

    Usage:
        maestro = StreamMaestro()
        maestro.add_stream(visibility_filter(with_attachments(items, parts), pred))
        unsubscribe = maestro.stream.subscribe(view.apply)
        maestro.add_event(SortingEvent("name"))
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._output: EventStream[ItemEvent[T] | ActionEvent] = EventStream(
            on_cancel=self.close, buffered=True,
        )
        self._unsubscribe: Disposer | None = None
        self._closed = False

    @property
    def stream(self) -> EventStream[ItemEvent[T] | ActionEvent]:
        return self._output

    @property
    def closed(self) -> bool:
        return self._closed

    def add_stream(self, source: EventStream[ItemEvent[T]]) -> None:
        """Forward every event and error of source to the output. Once only."""
        with self._lock:
            if self._closed:
                raise MisuseError("Cannot add a stream to a closed StreamMaestro.")
            if self._unsubscribe is not None:
                raise AlreadyAttachedError(
                    "Cannot add a new stream while already listening to another stream. "
                    "StreamMaestro only supports adding a stream once."
                )
            logger.debug("Attaching primary stream %r", source)
            self._unsubscribe = source.subscribe(self.add_event, on_error=self.add_error)

    def add_event(self, event: ItemEvent[T] | ActionEvent) -> None:
        with self._lock:
            if not self._closed:
                self._output.emit(event)

    def add_error(self, error: BaseException) -> None:
        with self._lock:
            if not self._closed:
                self._output.emit_error(error)

    def close(self) -> None:
        """Cancel the primary stream and shut the output. Safe to call twice."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            if unsubscribe is not None:
                unsubscribe()
            self._output.dispose()
        logger.debug("StreamMaestro closed")
