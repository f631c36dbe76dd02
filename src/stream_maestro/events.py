"""Item events and UI action events.

An ItemEvent tells a list consumer that an item was fetched, changed or
deleted. Action events (sorting, grouping) travel on the same consumer
stream and tell it to reorganise what it already holds.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


class EventKind(enum.Enum):
    FETCH = "fetch"
    CHANGE = "change"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class ItemEvent(Generic[T]):
    """One item-level event. prior is only set for changes that carry it."""

    kind: EventKind
    item: T
    prior: T | None = None
    is_last: bool = False

    @classmethod
    def fetch(cls, item: T, *, is_last: bool = False) -> ItemEvent[T]:
        return cls(EventKind.FETCH, item, is_last=is_last)

    @classmethod
    def change(cls, item: T, *, prior: T | None = None, is_last: bool = False) -> ItemEvent[T]:
        return cls(EventKind.CHANGE, item, prior, is_last)

    @classmethod
    def delete(cls, item: T, *, is_last: bool = False) -> ItemEvent[T]:
        return cls(EventKind.DELETE, item, is_last=is_last)

    @property
    def is_delete(self) -> bool:
        return self.kind is EventKind.DELETE


class ActionEvent:
    """Base class for UI actions multiplexed with item events."""

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class SortingEvent(ActionEvent):
    key: str
    descending: bool = False


@dataclass(frozen=True, slots=True)
class GroupingEvent(ActionEvent):
    key: str | None
