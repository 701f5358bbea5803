"""Booking eligibility and maintenance scheduling for a single room."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping

from resort.domain.errors import ConflictError, NotFoundError, ValidationError
from resort.domain.intervals import overlaps
from resort.domain.models import (
    BLOCKING_MAINTENANCE_STATUSES,
    Booking,
    DateInterval,
    MaintenanceStatus,
    MaintenanceType,
    MaintenanceWindow,
    Room,
    RoomStatus,
)


def conflicting_bookings(
    room_id: int | None,
    candidate: DateInterval,
    bookings: Iterable[Booking],
) -> list[Booking]:
    """Non-cancelled bookings of the room whose stay overlaps `candidate`."""
    return [
        booking
        for booking in bookings
        if booking.room_id == room_id
        and not booking.is_cancelled
        and overlaps(booking.stay, candidate)
    ]


def blocking_maintenance(room: Room, candidate: DateInterval) -> list[MaintenanceWindow]:
    return [
        window
        for window in room.maintenance
        if window.status in BLOCKING_MAINTENANCE_STATUSES
        and overlaps(window.interval, candidate)
    ]


def is_available(room: Room, candidate: DateInterval, bookings: Iterable[Booking]) -> bool:
    if room.status == RoomStatus.OUT_OF_ORDER:
        return False
    if conflicting_bookings(room.room_id, candidate, bookings):
        return False
    return not blocking_maintenance(room, candidate)


def schedule_maintenance(
    room: Room,
    window: MaintenanceWindow,
    bookings: Iterable[Booking],
) -> Room:
    if conflicting_bookings(room.room_id, window.interval, bookings):
        raise ConflictError(
            f"Room {room.room_number} has bookings during the maintenance period"
        )
    status = room.status
    if window.status == MaintenanceStatus.IN_PROGRESS:
        status = RoomStatus.MAINTENANCE
    return replace(room, maintenance=room.maintenance + (window,), status=status)


_MUTABLE_MAINTENANCE_FIELDS = {
    "maintenance_type",
    "interval",
    "status",
    "description",
    "cost",
    "performed_by",
    "notes",
}


def update_maintenance(
    room: Room,
    maintenance_id: int,
    changes: Mapping[str, Any],
    today: date | None = None,
    bookings: Iterable[Booking] = (),
) -> Room:
    """Apply field changes to one maintenance record.

    Completing a record frees the room; starting one takes it out of service.
    A record left scheduled or in progress must not overlap a live booking.
    """
    unknown = set(changes) - _MUTABLE_MAINTENANCE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update maintenance fields: {', '.join(sorted(unknown))}")

    for index, window in enumerate(room.maintenance):
        if window.maintenance_id == maintenance_id:
            break
    else:
        raise NotFoundError("Maintenance record not found")

    updated = replace(window, **changes, updated_at=datetime.now(timezone.utc))
    if updated.status in BLOCKING_MAINTENANCE_STATUSES and conflicting_bookings(
        room.room_id, updated.interval, bookings
    ):
        raise ConflictError(
            f"Room {room.room_number} has bookings during the maintenance period"
        )
    records = list(room.maintenance)
    records[index] = updated

    status = room.status
    last_maintenance_date = room.last_maintenance_date
    if updated.status == MaintenanceStatus.COMPLETED and "status" in changes:
        last_maintenance_date = today or date.today()
        status = RoomStatus.AVAILABLE
    elif updated.status == MaintenanceStatus.IN_PROGRESS and "status" in changes:
        status = RoomStatus.MAINTENANCE

    return replace(
        room,
        maintenance=tuple(records),
        status=status,
        last_maintenance_date=last_maintenance_date,
    )


def filter_maintenance(
    room: Room,
    *,
    start: date | None = None,
    end: date | None = None,
    maintenance_type: MaintenanceType | None = None,
    status: MaintenanceStatus | None = None,
) -> list[MaintenanceWindow]:
    records = list(room.maintenance)
    if start is not None:
        records = [item for item in records if item.interval.start >= start]
    if end is not None:
        records = [item for item in records if item.interval.end <= end]
    if maintenance_type is not None:
        records = [item for item in records if item.maintenance_type == maintenance_type]
    if status is not None:
        records = [item for item in records if item.status == status]
    return records


def next_scheduled_maintenance(room: Room, today: date) -> date | None:
    upcoming = [
        window.interval.start
        for window in room.maintenance
        if window.status == MaintenanceStatus.SCHEDULED and window.interval.start >= today
    ]
    return min(upcoming) if upcoming else None
