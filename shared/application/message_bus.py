"""
Message Bus

In-process dispatch of committed domain events. Handlers subscribe to an
event class; subscribing to a base class also receives its subclasses.
"""

from collections import defaultdict
from typing import Callable, DefaultDict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:

    def __init__(self):
        self._event_handlers: DefaultDict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        if handler not in self._event_handlers[event_type]:
            self._event_handlers[event_type].append(handler)

    def unregister_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        if handler in self._event_handlers.get(event_type, []):
            self._event_handlers[event_type].remove(handler)

    def subscribe(self, *event_types: Type[DomainEvent]):
        def decorator(handler: EventHandler) -> EventHandler:
            for event_type in event_types:
                self.register_event_handler(event_type, handler)
            return handler
        return decorator

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        found: List[EventHandler] = []
        for klass in event_type.__mro__:
            for handler in self._event_handlers.get(klass, []):
                if handler not in found:
                    found.append(handler)
        return found

    def publish_events(self, events: Iterable[DomainEvent]) -> int:
        """
        Run every handler for every event and return how many failed.

        Events reach the bus after their transaction committed, so one
        broken handler must not stop the rest; failures are logged.
        """
        failures = 0
        for event in events:
            for handler in self.handlers_for(type(event)):
                try:
                    handler(event)
                except Exception:
                    failures += 1
                    logger.exception(
                        "Handler %s failed on %s %s",
                        getattr(handler, "__name__", repr(handler)),
                        event.event_type,
                        event.event_id,
                    )
        return failures


message_bus = MessageBus()
