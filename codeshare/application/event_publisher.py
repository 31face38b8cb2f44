"""
Event Publisher

Application service for publishing domain events to registered handlers.
Renderers and log handlers subscribe here instead of being wired into the
sessions.
"""

import logging
from threading import Lock
from typing import Callable, Dict, List, Type

from codeshare.domain.events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class EventPublisher:
    """
    Event publisher that dispatches domain events to registered handlers.

    A handler registered for a base class receives every subclass event, so
    subscribing to DomainEvent observes everything. Handler exceptions are
    caught and logged so a broken renderer cannot break a session.
    """

    def __init__(self):
        """Initialize EventPublisher with empty handler registry."""
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}
        self._lock = Lock()

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        Register a handler for a specific event type.

        Args:
            event_type: The type of domain event to handle
            handler: Callable that accepts the event as parameter

        Example:
            publisher = EventPublisher()
            publisher.subscribe(SessionStateChangedEvent, renderer.render)
        """
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
            logger.debug(
                f"Registered handler {_handler_name(handler)} for {event_type.__name__}"
            )

    def unsubscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> bool:
        """
        Remove a previously registered handler.

        Returns:
            True if the handler was registered
        """
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)
                return True
            return False

    def publish(self, event: DomainEvent) -> None:
        """
        Publish an event to all handlers registered for its type or a base type.

        Args:
            event: The domain event to publish
        """
        event_type = type(event)

        with self._lock:
            handlers = [
                handler
                for klass in event_type.__mro__
                for handler in self._handlers.get(klass, [])
            ]

        if not handlers:
            logger.debug(f"No handlers registered for {event_type.__name__}")
            return

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                # Log but don't fail - side effects should not break core logic
                logger.error(
                    f"Error in handler {_handler_name(handler)} for {event_type.__name__}: {e}",
                    exc_info=True,
                )


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)
