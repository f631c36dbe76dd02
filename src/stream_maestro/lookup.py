"""LookupAttachment — attach a single looked-up value to parents by code.

Every value seen is cached by its code (last write wins, never evicted).
A parent picks up the cached value for its code the moment it arrives;
a new value for a code is set on every live parent with that code.
"""

from __future__ import annotations

from typing import Callable, Hashable, TypeVar

from stream_maestro.attachment import Attachment, Sink
from stream_maestro.events import ItemEvent
from stream_maestro.stream import EventStream

T = TypeVar("T")
P = TypeVar("P")


class LookupAttachment(Attachment[T, P]):
    """Attach a P value to every T parent sharing its lookup code.

    Args:
        values: returns the value event stream; called on subscribe.
        assign: set the value on a parent, or clear it when given None.
        code_of_parent: the code a parent refers to, or None.
        code_of_value: a value's own code.
        parent_key: identity of a parent across replacement objects.
            Defaults to object identity.
    """

    def __init__(
        self,
        values: Callable[[], EventStream[ItemEvent[P]]],
        assign: Callable[[T, P | None], None],
        code_of_parent: Callable[[T], Hashable | None],
        code_of_value: Callable[[P], Hashable],
        *,
        parent_key: Callable[[T], Hashable] | None = None,
    ) -> None:
        self._values = values
        self._assign = assign
        self._code_of_parent = code_of_parent
        self._code_of_value = code_of_value
        self._parent_key = parent_key or id
        self._parents: dict[Hashable, T] = {}
        self._cache: dict[Hashable, P] = {}
        self._generation = 0  # bumped by reset()

    def source(self) -> EventStream[ItemEvent[P]]:
        return self._values()

    def on_parent(self, event: ItemEvent[T]) -> None:
        parent = event.item
        key = self._parent_key(parent)
        self._parents.pop(key, None)
        if event.is_delete:
            return
        self._parents[key] = parent
        self._assign(parent, self._cache.get(self._code_of_parent(parent)))

    def on_child(self, event: ItemEvent[P], sink: Sink[T]) -> None:
        value = event.item
        code = self._code_of_value(value)
        self._cache[code] = value
        generation = self._generation
        for parent in list(self._parents.values()):
            if self._generation != generation:
                return  # reset by a listener of sink
            if self._code_of_parent(parent) == code:
                self._assign(parent, value)
                sink(ItemEvent.change(parent))

    def reset(self) -> None:
        self._generation += 1
        self._parents.clear()
        self._cache.clear()

    def cached(self, code: Hashable) -> P | None:
        """The last value seen for code, if any."""
        return self._cache.get(code)

    def __repr__(self) -> str:
        return f"LookupAttachment(parents={len(self._parents)}, cached={len(self._cache)})"
