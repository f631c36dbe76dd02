"""Tests for the record operation → item event conversion."""

import pytest

from stream_maestro import (
    EventKind,
    EventStream,
    ItemCreate,
    ItemDelete,
    ItemEvent,
    ItemUpdate,
    NoDataError,
    NoRecordsAvailable,
    to_item_event,
    to_item_events,
)


class TestToItemEvent:
    def test_create_becomes_fetch(self):
        event = to_item_event(ItemCreate("a", is_last=True))
        assert event == ItemEvent(EventKind.FETCH, "a", None, True)

    def test_update_becomes_change_with_prior(self):
        event = to_item_event(ItemUpdate("new", "old"))
        assert event.kind is EventKind.CHANGE
        assert event.item == "new"
        assert event.prior == "old"
        assert not event.is_last

    def test_delete_becomes_delete(self):
        event = to_item_event(ItemDelete("a", is_last=True))
        assert event == ItemEvent.delete("a", is_last=True)
        assert event.is_delete

    def test_rejects_unknown_operation(self):
        with pytest.raises(TypeError):
            to_item_event("not an operation")


class TestToItemEvents:
    def test_maps_stream(self):
        source = EventStream()
        received = []
        to_item_events(source).subscribe(received.append)
        source.emit(ItemCreate(1))
        source.emit(ItemUpdate(2, 1))
        source.emit(ItemDelete(2, is_last=True))
        assert [e.kind for e in received] == [EventKind.FETCH, EventKind.CHANGE, EventKind.DELETE]
        assert received[-1].is_last

    def test_no_data_is_remapped(self):
        source = EventStream()
        errors = []
        to_item_events(source).subscribe(lambda e: None, on_error=errors.append)
        original = NoDataError("empty")
        source.emit_error(original)
        assert isinstance(errors[0], NoRecordsAvailable)
        assert errors[0].__cause__ is original

    def test_other_errors_pass_through(self):
        source = EventStream()
        errors = []
        to_item_events(source).subscribe(lambda e: None, on_error=errors.append)
        boom = ConnectionError("down")
        source.emit_error(boom)
        assert errors == [boom]

    def test_lazy_until_listened(self):
        source = EventStream()
        events = to_item_events(source)
        assert not source.is_listening
        events.subscribe(lambda e: None)
        assert source.is_listening
