"""stream_maestro: compose incrementally-updating item streams for list UIs."""

from importlib.metadata import version as _version

__version__ = _version("stream-maestro")

from stream_maestro.stream import EventStream
from stream_maestro.events import (
    ActionEvent,
    EventKind,
    GroupingEvent,
    ItemEvent,
    SortingEvent,
)
from stream_maestro.errors import (
    AlreadyAttachedError,
    MisuseError,
    NoDataError,
    NoRecordsAvailable,
    StreamMaestroError,
)
from stream_maestro.operations import (
    ItemCreate,
    ItemDelete,
    ItemUpdate,
    to_item_event,
    to_item_events,
)
from stream_maestro.attachment import Attachment
from stream_maestro.children import ListAttachment
from stream_maestro.lookup import LookupAttachment
from stream_maestro.compose import with_attachments
from stream_maestro.visibility import visibility_filter
from stream_maestro.maestro import StreamMaestro
# textual NOT auto-imported — opt-in only

__all__ = [
    "EventStream",
    "EventKind",
    "ItemEvent",
    "ActionEvent",
    "SortingEvent",
    "GroupingEvent",
    "StreamMaestroError",
    "NoDataError",
    "NoRecordsAvailable",
    "MisuseError",
    "AlreadyAttachedError",
    "ItemCreate",
    "ItemUpdate",
    "ItemDelete",
    "to_item_event",
    "to_item_events",
    "Attachment",
    "ListAttachment",
    "LookupAttachment",
    "with_attachments",
    "visibility_filter",
    "StreamMaestro",
]
