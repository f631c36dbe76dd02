"""visibility_filter() — filter item events across visibility transitions.

A plain filter() would drop the Change that makes an item stop matching,
leaving it on screen, and forward a Change for an item the consumer has
never seen. This filter tracks which items are visible and rewrites the
event at each transition: an item that stops matching is deleted, an item
that starts matching on a Change is fetched.
"""

from __future__ import annotations

from typing import Callable, Hashable, TypeVar

from stream_maestro.events import EventKind, ItemEvent
from stream_maestro.stream import Disposer, EventStream

T = TypeVar("T")


def visibility_filter(
    source: EventStream[ItemEvent[T]],
    predicate: Callable[[T], bool] | None,
    *,
    key: Callable[[T], Hashable] | None = None,
) -> EventStream[ItemEvent[T]]:
    """Filter source by predicate. With no predicate, source is returned as is.

    key identifies an item across replacement objects; by default an item
    is only the same item if it is the same object.
    """
    if predicate is None:
        return source

    upstream: list[Disposer] = []
    item_key = key or id
    visible: dict[Hashable, T] = {}

    def _on_event(event: ItemEvent[T]) -> None:
        item = event.item
        k = item_key(item)
        was_visible = k in visible
        is_visible = event.kind is not EventKind.DELETE and predicate(item)

        if is_visible:
            visible[k] = item
            if not was_visible and event.kind is EventKind.CHANGE:
                output.emit(ItemEvent.fetch(item, is_last=event.is_last))
            else:
                output.emit(event)
        elif was_visible:
            del visible[k]
            output.emit(ItemEvent.delete(item))

    def _listen() -> None:
        visible.clear()
        upstream.append(source.subscribe(_on_event, on_error=output.emit_error))

    def _cancel() -> None:
        while upstream:
            upstream.pop()()
        visible.clear()

    output: EventStream[ItemEvent[T]] = EventStream(on_listen=_listen, on_cancel=_cancel)
    return output
