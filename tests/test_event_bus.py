"""Tests for the publish-subscribe event bus."""

import pytest

from wavescope.application.event_bus import EventBus
from wavescope.application.events import Event, MarkerAddedEvent, MarkerRemovedEvent, ViewChangedEvent


def test_publish_reaches_subscribers_in_order():
    bus = EventBus()
    calls = []
    bus.subscribe(MarkerAddedEvent, lambda e: calls.append(("first", e.marker_name)))
    bus.subscribe(MarkerAddedEvent, lambda e: calls.append(("second", e.marker_name)))

    bus.publish(MarkerAddedEvent(marker_name="m", time=5))

    assert calls == [("first", "m"), ("second", "m")]


def test_events_are_routed_by_exact_type():
    bus = EventBus()
    added = []
    bus.subscribe(MarkerAddedEvent, added.append)
    bus.subscribe(Event, added.append)

    bus.publish(MarkerRemovedEvent(marker_name="m"))
    assert added == []


def test_unsubscribe():
    bus = EventBus()
    calls = []
    handler = calls.append
    bus.subscribe(MarkerRemovedEvent, handler)
    assert bus.handler_count(MarkerRemovedEvent) == 1

    bus.unsubscribe(MarkerRemovedEvent, handler)
    bus.unsubscribe(MarkerRemovedEvent, handler)  # Unknown handler is ignored
    bus.publish(MarkerRemovedEvent(marker_name="m"))

    assert calls == []
    assert bus.handler_count(MarkerRemovedEvent) == 0


def test_clear():
    bus = EventBus()
    bus.subscribe(MarkerRemovedEvent, lambda e: None)
    bus.clear()
    assert bus.handler_count(MarkerRemovedEvent) == 0


def test_failing_handler_is_logged_and_others_still_run(caplog):
    bus = EventBus()
    calls = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(MarkerRemovedEvent, broken)
    bus.subscribe(MarkerRemovedEvent, lambda e: calls.append(e.marker_name))

    bus.publish(MarkerRemovedEvent(marker_name="m"))

    assert calls == ["m"]
    assert "Handler for MarkerRemovedEvent failed" in caplog.text
    assert "boom" in caplog.text


def test_failing_subscriber_does_not_abort_navigation(nav_controller):
    def broken(event):
        raise RuntimeError("boom")

    nav_controller.event_bus.subscribe(ViewChangedEvent, broken)
    nav_controller.zoom_in()
    assert (nav_controller.view.time_start, nav_controller.view.time_range) == (250, 500)


def test_events_are_frozen():
    event = MarkerAddedEvent(marker_name="m", time=1)
    with pytest.raises(AttributeError):
        event.time = 2
    assert event.timestamp > 0
