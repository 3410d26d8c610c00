"""
Unit of Work

One database transaction plus the domain events raised inside it. The
events are handed to the message bus from ``transaction.on_commit`` so
a rolled back booking never notifies anyone.
"""

from typing import List, Optional
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Usage:
        with DjangoUnitOfWork() as uow:
            room = Room.objects.select_for_update().get(pk=room_id)
            ...
            uow.collect_events(request)

    Row locks taken inside the block last until the outermost atomic
    block ends. Nested units become savepoints; their events are only
    published once the outermost transaction commits.
    """

    def __init__(self, using: Optional[str] = None):
        self.using = using
        self._events: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self._schedule_publish()
        else:
            logger.info(
                "Unit of work rolled back (%s), dropping %d events",
                exc_type.__name__, len(self._events),
            )
            self._events.clear()
        return self._atomic.__exit__(exc_type, exc_val, exc_tb)

    @property
    def pending_events(self) -> List[DomainEvent]:
        return list(self._events)

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def collect_events(self, *aggregates):
        for aggregate in aggregates:
            events = aggregate.events
            if events:
                self._events.extend(events)
                aggregate.clear_events()

    def _schedule_publish(self):
        if not self._events:
            return
        events, self._events = self._events, []
        logger.debug("Scheduling %d events for after commit", len(events))
        transaction.on_commit(lambda: _publish(events), using=self.using)


def _publish(events: List[DomainEvent]):
    from shared.application.message_bus import message_bus

    message_bus.publish_events(events)
