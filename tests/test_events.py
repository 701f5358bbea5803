from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from resort.domain.errors import ConflictError, ValidationError
from resort.domain.events import check_event, conflicting_events, transition_event
from resort.domain.models import Banquet, DateInterval, Event, EventStatus, EventType


HALL = Banquet(banquet_id=1, name="Grand Hall", description="Ballroom", seating_capacity=200)


def make_event(start_day: int, end_day: int, **overrides) -> Event:
    defaults = {
        "event_id": None,
        "banquet_id": 1,
        "title": "Gala dinner",
        "description": "Annual gala",
        "event_type": EventType.DINING,
        "schedule": DateInterval(date(2030, 6, start_day), date(2030, 6, end_day)),
        "capacity": 150,
        "organizer_id": 1,
    }
    defaults.update(overrides)
    return Event(**defaults)


def test_event_overlapping_a_live_event_conflicts() -> None:
    existing = [make_event(10, 12, event_id=1)]
    with pytest.raises(ConflictError, match="Grand Hall is already booked"):
        check_event(HALL, make_event(12, 13), existing)


def test_cancelled_events_and_other_halls_do_not_block() -> None:
    existing = [
        make_event(10, 12, event_id=1, status=EventStatus.CANCELLED),
        make_event(10, 12, event_id=2, banquet_id=2),
    ]
    assert conflicting_events(1, make_event(11, 12), existing) == []
    assert check_event(HALL, make_event(11, 12), existing).title == "Gala dinner"


def test_event_does_not_conflict_with_itself() -> None:
    event = make_event(10, 12, event_id=4)
    assert conflicting_events(1, event, [event]) == []


def test_event_capacity_is_bounded_by_the_hall() -> None:
    with pytest.raises(ValidationError, match="exceeds the seating capacity"):
        check_event(HALL, make_event(1, 2, capacity=201), [])
    with pytest.raises(ValidationError):
        check_event(HALL, make_event(1, 2, capacity=0), [])


def test_event_status_transitions() -> None:
    event = make_event(1, 2, event_id=1)
    confirmed = transition_event(event, EventStatus.CONFIRMED)
    assert confirmed.status == EventStatus.CONFIRMED
    assert transition_event(confirmed, EventStatus.CONFIRMED) == confirmed
    with pytest.raises(ConflictError):
        transition_event(event, EventStatus.COMPLETED)
    with pytest.raises(ConflictError):
        transition_event(replace(event, status=EventStatus.CANCELLED), EventStatus.SCHEDULED)
