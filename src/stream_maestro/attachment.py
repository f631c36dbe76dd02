"""Attachments — how a related stream is folded into a parent stream.

An attachment owns a stream of child (or property) events and knows how
to apply them to parent items. with_attachments() calls on_parent() for
every parent event before forwarding it, and on_child() for every event of
the attachment's own stream. Only on_child() may emit: the parent event is
already forwarded by the operator, so emitting from on_parent() would
duplicate it.
"""

from __future__ import annotations

import abc
from typing import Callable, Generic, TypeVar

from stream_maestro.events import ItemEvent
from stream_maestro.stream import EventStream

T = TypeVar("T")
C = TypeVar("C")

Sink = Callable[[ItemEvent[T]], None]


class Attachment(abc.ABC, Generic[T, C]):
    """Folds a stream of C events into a stream of T (parent) events."""

    @abc.abstractmethod
    def source(self) -> EventStream[ItemEvent[C]]:
        """Return the child event stream. Called once per subscription."""

    @abc.abstractmethod
    def on_parent(self, event: ItemEvent[T]) -> None:
        """Track a parent event. Must not emit."""

    @abc.abstractmethod
    def on_child(self, event: ItemEvent[C], sink: Sink[T]) -> None:
        """Apply a child event, pushing derived parent events to sink."""

    def reset(self) -> None:
        """Forget all per-subscription state."""
