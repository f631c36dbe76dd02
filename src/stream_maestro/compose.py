"""with_attachments() — merge a parent stream with its attachments.

Nothing is subscribed until the returned stream gets a listener. Then the
parent stream and every attachment's source are subscribed; cancelling the
output cancels all of them and resets the attachments.

Parent errors reach the output unchanged. Attachment source errors are
logged and dropped: a broken attachment must not take the parent
pipeline down with it.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, TypeVar

from stream_maestro.attachment import Attachment
from stream_maestro.events import ItemEvent
from stream_maestro.stream import Disposer, EventStream

T = TypeVar("T")

logger = logging.getLogger("stream_maestro.compose")


def with_attachments(
    source: EventStream[ItemEvent[T]],
    attachments: Iterable[Attachment[T, object]],
) -> EventStream[ItemEvent[T]]:
    """Compose source with attachments into one parent event stream."""
    attachments = list(attachments)
    # Handlers may be driven from several threads; one event at a time.
    lock = threading.RLock()
    subscriptions: list[Disposer] = []
    active = [False]
    # Handlers running on this thread, and whether a cancel landed during one.
    depth = [0]
    reset_pending = [False]

    def _reset() -> None:
        reset_pending[0] = False
        for attachment in attachments:
            attachment.reset()

    def _sink(event: ItemEvent[T]) -> None:
        if active[0]:
            output.emit(event)

    def _handle(fn, *args) -> None:
        with lock:
            if not active[0]:
                return
            depth[0] += 1
            try:
                fn(*args)
            finally:
                depth[0] -= 1
                if depth[0] == 0 and reset_pending[0]:
                    _reset()

    def _on_parent(event: ItemEvent[T]) -> None:
        def _run() -> None:
            for attachment in attachments:
                attachment.on_parent(event)
            output.emit(event)

        _handle(_run)

    def _on_parent_error(error: BaseException) -> None:
        with lock:
            if active[0]:
                output.emit_error(error)

    def _child_handlers(attachment: Attachment[T, object]):
        def _on_child(event: ItemEvent[object]) -> None:
            _handle(attachment.on_child, event, _sink)

        def _on_child_error(error: BaseException) -> None:
            logger.warning("Ignoring error from %r: %r", attachment, error)

        return _on_child, _on_child_error

    def _subscribe(stream: EventStream, on_value, on_error) -> bool:
        """Subscribe and keep the disposer; False if cancelled meanwhile."""
        dispose = stream.subscribe(on_value, on_error=on_error)
        if not active[0]:
            dispose()
            return False
        subscriptions.append(dispose)
        return True

    def _listen() -> None:
        with lock:
            if reset_pending[0]:
                _reset()
            active[0] = True
            logger.debug("Subscribing parent stream and %d attachments", len(attachments))
            if not _subscribe(source, _on_parent, _on_parent_error):
                return
            for attachment in attachments:
                on_child, on_child_error = _child_handlers(attachment)
                if not _subscribe(attachment.source(), on_child, on_child_error):
                    return

    def _cancel() -> None:
        with lock:
            active[0] = False
            while subscriptions:
                subscriptions.pop()()
            if depth[0]:
                # Attachments are mid-handler; clear them once it returns.
                reset_pending[0] = True
            else:
                _reset()
        logger.debug("Cancelled parent stream and %d attachments", len(attachments))

    output: EventStream[ItemEvent[T]] = EventStream(on_listen=_listen, on_cancel=_cancel)
    return output
