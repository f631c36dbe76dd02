"""Exceptions raised at the edges of the engine.

Errors coming out of a parent source are never wrapped: they reach the
output exactly as raised. The classes here cover the two conditions the
engine itself names.
"""


class StreamMaestroError(Exception):
    """Base class for stream_maestro errors."""


class NoDataError(StreamMaestroError):
    """Raised by a record source when it has nothing to return."""


class NoRecordsAvailable(StreamMaestroError):
    """Signal that the source had no records, as opposed to a failure.

    Produced by to_item_events() from a source's NoDataError.
    """


class MisuseError(StreamMaestroError, RuntimeError):
    """The caller used an object in a way it does not support."""


class AlreadyAttachedError(MisuseError):
    """A second primary stream was added to a StreamMaestro."""
