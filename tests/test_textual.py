"""Tests for stream_maestro.textual — Textual integration layer."""

import threading

import pytest
from textual.css.query import NoMatches

from stream_maestro import EventStream, ItemEvent, StreamMaestro
from stream_maestro import textual as stx


class _MockApp:
    """Minimal mock matching the Textual App interface stx needs."""

    def __init__(self, *, is_running=True):
        self.is_running = is_running
        self._call_from_thread_log = []

    def call_from_thread(self, fn, *args):
        self._call_from_thread_log.append((fn, args))
        fn(*args)


class TestBind:
    def test_skips_when_not_running(self):
        app = _MockApp(is_running=False)
        stream = EventStream()
        received = []
        stx.bind(app, stream, received.append)
        stream.emit(1)
        assert received == []

    def test_skips_during_pause(self):
        app = _MockApp()
        stream = EventStream()
        received = []
        stx.bind(app, stream, received.append)
        with stx.pause(app):
            stream.emit(1)
        stream.emit(2)
        assert received == [2]

    def test_catches_nomatch(self):
        """NoMatches from widget queries are silently swallowed."""
        app = _MockApp()
        stream = EventStream()

        def _raise_nomatch(v):
            raise NoMatches("TaskList")

        stx.bind(app, stream, _raise_nomatch)
        stream.emit(1)  # should not raise

    def test_propagates_real_errors(self):
        app = _MockApp()
        stream = EventStream()

        def _raise_value_error(v):
            raise ValueError("boom")

        stx.bind(app, stream, _raise_value_error)
        with pytest.raises(ValueError, match="boom"):
            stream.emit(1)

    def test_error_callback(self):
        app = _MockApp()
        stream = EventStream()
        errors = []
        stx.bind(app, stream, lambda v: None, on_error=errors.append)
        boom = RuntimeError("boom")
        stream.emit_error(boom)
        assert errors == [boom]

    def test_dispose_stops_delivery(self):
        app = _MockApp()
        stream = EventStream()
        received = []
        unsubscribe = stx.bind(app, stream, received.append)
        stream.emit(1)
        unsubscribe()
        stream.emit(2)
        assert received == [1]

    def test_thread_marshal(self):
        """Events from a background thread use call_from_thread."""
        app = _MockApp()
        maestro = StreamMaestro()
        received = []
        stx.bind(app, maestro.stream, received.append)

        t = threading.Thread(target=lambda: maestro.add_event(ItemEvent.fetch("bg")))
        t.start()
        t.join()

        assert received == [ItemEvent.fetch("bg")]
        assert len(app._call_from_thread_log) == 1


class TestPause:
    def test_pause_restores_on_exception(self):
        app = _MockApp()
        assert stx.is_safe(app)

        with pytest.raises(RuntimeError):
            with stx.pause(app):
                assert not stx.is_safe(app)
                raise RuntimeError("oops")

        assert stx.is_safe(app)

    def test_pause_does_not_mutate_app(self):
        app = _MockApp()
        attrs_before = set(vars(app))
        with stx.pause(app):
            attrs_during = set(vars(app))
        assert attrs_before == attrs_during

    def test_multiple_apps_independent(self):
        app_a = _MockApp()
        app_b = _MockApp()
        with stx.pause(app_a):
            assert not stx.is_safe(app_a)
            assert stx.is_safe(app_b)
