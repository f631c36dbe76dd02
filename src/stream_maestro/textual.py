"""Textual integration for stream_maestro. Opt-in — requires textual.

Delivers a hub's output to a Textual app: skipped while the app is not
running or is paused for widget replacement, marshalled onto the app
thread when emitted from elsewhere, and tolerant of NoMatches from widget
queries made while the tree is changing.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
# An id is present only inside a pause() block.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend deliveries during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def bind(app, stream, on_event, on_error=None):
    """Subscribe on_event (and on_error) to stream on behalf of app.

    Returns the disposer from stream.subscribe().
    """
    _main = threading.get_ident()

    def _guard(fn):
        def _safe(value):
            try:
                fn(value)
            except NoMatches:
                pass

        def _guarded(value):
            if not is_safe(app):
                return
            if threading.get_ident() != _main:
                app.call_from_thread(_safe, value)
            else:
                _safe(value)

        return _guarded

    return stream.subscribe(
        _guard(on_event),
        on_error=_guard(on_error) if on_error is not None else None,
    )
