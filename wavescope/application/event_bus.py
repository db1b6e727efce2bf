"""Type-safe publish-subscribe event bus used by the controller."""

from typing import TypeVar, Callable, Type
import logging
from collections import defaultdict

from wavescope.application.events import Event

T = TypeVar('T', bound=Event)


class EventBus:
    """Dispatch controller events to the views interested in them.

    Handlers are keyed by exact event class; publishing a subclass does not
    reach handlers registered for its base.
    """

    def __init__(self) -> None:
        self._subscribers: dict[Type[Event], list[Callable[[Event], None]]] = defaultdict(list)
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Register handler for events of event_type."""
        self._subscribers[event_type].append(handler)  # type: ignore[arg-type]

    def unsubscribe(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Remove a previously registered handler; unknown handlers are ignored."""
        handlers = self._subscribers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)  # type: ignore[arg-type]

    def publish(self, event: Event) -> None:
        """Deliver event to every handler subscribed to its type, in order.

        Events describe state that has already changed, so a failing handler
        is logged and the remaining handlers still run.
        """
        event_type = type(event)
        for handler in list(self._subscribers.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                self._logger.exception("Handler for %s failed", event_type.__name__)

    def handler_count(self, event_type: Type[Event]) -> int:
        return len(self._subscribers.get(event_type, []))

    def clear(self) -> None:
        """Clear all subscriptions."""
        self._subscribers.clear()
