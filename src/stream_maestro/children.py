"""ListAttachment — attach a collection of children to each parent.

Parents are tracked by id. A child may belong to several parents; each
present parent gets the child applied and one Change event pushed. Child
events for parents that have not arrived yet are held per parent id and
replayed, in arrival order, onto the parent when it does arrive.

Parent items are treated as values: an update brings a new object, so the
children accumulated on the old object are handed over with transfer().
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Hashable, Iterable, TypeVar

from stream_maestro.attachment import Attachment, Sink
from stream_maestro.events import ItemEvent
from stream_maestro.stream import EventStream

T = TypeVar("T")
C = TypeVar("C")

logger = logging.getLogger("stream_maestro.children")

_MISSING = object()


class ListAttachment(Attachment[T, C]):
    """Attach a growable list of C children to T parents, keyed by parent id.

    Args:
        children: returns the child event stream; called on subscribe.
        parent_ids_of: ids of every parent a child belongs to.
        parent_id: a parent's own id.
        apply: apply one child event to a parent's stored children.
        transfer: copy accumulated children from an old parent object
            onto its replacement.
        max_pending: cap on buffered child events per missing parent id.
            None keeps every event; otherwise the oldest is dropped.
    """

    def __init__(
        self,
        children: Callable[[], EventStream[ItemEvent[C]]],
        parent_ids_of: Callable[[C], Iterable[Hashable]],
        parent_id: Callable[[T], Hashable],
        apply: Callable[[T, ItemEvent[C]], None],
        transfer: Callable[[T, T], None],
        *,
        max_pending: int | None = None,
    ) -> None:
        if max_pending is not None and max_pending < 1:
            raise ValueError(f"max_pending must be positive, got {max_pending}")
        self._children = children
        self._parent_ids_of = parent_ids_of
        self._parent_id = parent_id
        self._apply = apply
        self._transfer = transfer
        self._max_pending = max_pending
        self._parents: dict[Hashable, T] = {}
        self._pending: dict[Hashable, deque[ItemEvent[C]]] = {}
        self._generation = 0  # bumped by reset()

    def source(self) -> EventStream[ItemEvent[C]]:
        return self._children()

    def on_parent(self, event: ItemEvent[T]) -> None:
        parent = event.item
        pid = self._parent_id(parent)
        old = self._parents.pop(pid, _MISSING)

        if event.is_delete:
            self._pending.pop(pid, None)
            return

        if old is not _MISSING and old is not parent:
            self._transfer(old, parent)
        self._parents[pid] = parent

        pending = self._pending.pop(pid, None)
        while pending:
            self._apply(parent, pending.popleft())

    def on_child(self, event: ItemEvent[C], sink: Sink[T]) -> None:
        generation = self._generation
        for pid in self._parent_ids_of(event.item):
            if self._generation != generation:
                return  # reset by a listener of sink
            parent = self._parents.get(pid, _MISSING)
            if parent is _MISSING:
                self._hold(pid, event)
                continue
            self._apply(parent, event)
            sink(ItemEvent.change(parent, is_last=event.is_last))

    def reset(self) -> None:
        self._generation += 1
        self._parents.clear()
        self._pending.clear()

    @property
    def pending_count(self) -> int:
        """Child events held for parents that have not arrived."""
        return sum(len(q) for q in self._pending.values())

    def _hold(self, pid: Hashable, event: ItemEvent[C]) -> None:
        queue = self._pending.setdefault(pid, deque())
        if self._max_pending is not None and len(queue) >= self._max_pending:
            queue.popleft()
            logger.warning(
                "Pending child events for parent %r exceeded %d; dropped oldest",
                pid, self._max_pending,
            )
        queue.append(event)

    def __repr__(self) -> str:
        return f"ListAttachment(parents={len(self._parents)}, pending={self.pending_count})"
