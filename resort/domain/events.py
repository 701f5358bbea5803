"""Banquet hall scheduling rules."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from resort.domain.constraints import validate_capacity, validate_price
from resort.domain.errors import ConflictError, ValidationError
from resort.domain.intervals import overlaps
from resort.domain.models import Banquet, Event, EventStatus


EVENT_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.SCHEDULED: frozenset({EventStatus.CONFIRMED, EventStatus.CANCELLED}),
    EventStatus.CONFIRMED: frozenset({EventStatus.IN_PROGRESS, EventStatus.CANCELLED}),
    EventStatus.IN_PROGRESS: frozenset({EventStatus.COMPLETED}),
    EventStatus.COMPLETED: frozenset(),
    EventStatus.CANCELLED: frozenset(),
}


def conflicting_events(banquet_id: int | None, candidate: Event, events: Iterable[Event]) -> list[Event]:
    """Live events in the same hall whose dates overlap `candidate`."""
    return [
        event
        for event in events
        if event.banquet_id == banquet_id
        and event.event_id != candidate.event_id
        and not event.is_cancelled
        and overlaps(event.schedule, candidate.schedule)
    ]


def check_event(banquet: Banquet, event: Event, events: Iterable[Event]) -> Event:
    validate_capacity(event.capacity)
    validate_price(event.price)
    if event.capacity > banquet.seating_capacity:
        raise ValidationError(
            f"Event capacity {event.capacity} exceeds the seating capacity of {banquet.name} "
            f"({banquet.seating_capacity})"
        )
    if not event.is_cancelled and conflicting_events(banquet.banquet_id, event, events):
        raise ConflictError(f"{banquet.name} is already booked for those dates")
    return event


def transition_event(event: Event, status: EventStatus) -> Event:
    if status != event.status and status not in EVENT_TRANSITIONS[event.status]:
        raise ConflictError(f"Cannot move event from {event.status.value} to {status.value}")
    return replace(event, status=status)
