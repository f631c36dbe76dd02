"""Conversion from record operations to item events.

A record source reports creates, updates and deletes. The engine speaks
ItemEvent, so the source stream is mapped one-to-one before anything else
sees it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from stream_maestro.errors import NoDataError, NoRecordsAvailable
from stream_maestro.events import ItemEvent
from stream_maestro.stream import EventStream

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ItemCreate(Generic[T]):
    item: T
    is_last: bool = False


@dataclass(frozen=True, slots=True)
class ItemUpdate(Generic[T]):
    item: T
    prior: T
    is_last: bool = False


@dataclass(frozen=True, slots=True)
class ItemDelete(Generic[T]):
    item: T
    is_last: bool = False


ItemOperation = ItemCreate[T] | ItemUpdate[T] | ItemDelete[T]


def to_item_event(operation: ItemOperation[T]) -> ItemEvent[T]:
    """Map a single record operation onto its item event."""
    match operation:
        case ItemCreate(item=item, is_last=is_last):
            return ItemEvent.fetch(item, is_last=is_last)
        case ItemUpdate(item=item, prior=prior, is_last=is_last):
            return ItemEvent.change(item, prior=prior, is_last=is_last)
        case ItemDelete(item=item, is_last=is_last):
            return ItemEvent.delete(item, is_last=is_last)
    raise TypeError(f"Not an item operation: {operation!r}")


def _remap_error(error: BaseException) -> BaseException:
    if isinstance(error, NoDataError):
        remapped = NoRecordsAvailable(*error.args)
        remapped.__cause__ = error
        return remapped
    return error


def to_item_events(source: EventStream[ItemOperation[T]]) -> EventStream[ItemEvent[T]]:
    """Turn a record operation stream into an item event stream.

    NoDataError from the source becomes NoRecordsAvailable, so consumers
    can tell "nothing there" from a failure. Other errors pass through.
    """
    return source.map(to_item_event).map_error(_remap_error)
