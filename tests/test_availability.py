from __future__ import annotations

from datetime import date

import pytest

from resort.domain.availability import (
    conflicting_bookings,
    filter_maintenance,
    is_available,
    next_scheduled_maintenance,
    schedule_maintenance,
    update_maintenance,
)
from resort.domain.errors import ConflictError, NotFoundError, ValidationError
from resort.domain.models import (
    Booking,
    BookingStatus,
    DateInterval,
    MaintenanceStatus,
    MaintenanceType,
    MaintenanceWindow,
    Room,
    RoomStatus,
    RoomType,
)


def stay(start_day: int, end_day: int) -> DateInterval:
    return DateInterval(date(2026, 5, start_day), date(2026, 5, end_day))


def make_room(**overrides) -> Room:
    defaults = {
        "room_id": 7,
        "room_number": "204",
        "room_type": RoomType.STANDARD,
        "floor": 2,
        "price_per_night": 120.0,
        "base_price": 120.0,
        "description": "Standard room",
    }
    defaults.update(overrides)
    return Room(**defaults)


def make_booking(interval: DateInterval, status: BookingStatus = BookingStatus.CONFIRMED) -> Booking:
    return Booking(
        booking_id=1,
        room_id=7,
        guest_id=3,
        stay=interval,
        total_price=480.0,
        status=status,
    )


def make_window(
    interval: DateInterval,
    status: MaintenanceStatus = MaintenanceStatus.SCHEDULED,
    maintenance_id: int | None = None,
) -> MaintenanceWindow:
    return MaintenanceWindow(
        maintenance_type=MaintenanceType.REPAIR,
        interval=interval,
        status=status,
        maintenance_id=maintenance_id,
    )


def test_room_without_bookings_is_available() -> None:
    assert is_available(make_room(), stay(1, 5), []) is True


def test_stay_touching_existing_booking_is_rejected() -> None:
    bookings = [make_booking(stay(1, 5))]
    assert is_available(make_room(), stay(5, 10), bookings) is False
    assert len(conflicting_bookings(7, stay(5, 10), bookings)) == 1


def test_cancelled_bookings_do_not_block() -> None:
    bookings = [make_booking(stay(1, 5), BookingStatus.CANCELLED)]
    assert is_available(make_room(), stay(3, 8), bookings) is True


def test_bookings_of_other_rooms_are_ignored() -> None:
    other = Booking(booking_id=2, room_id=8, guest_id=3, stay=stay(1, 5), total_price=1.0)
    assert is_available(make_room(), stay(1, 5), [other]) is True


def test_out_of_order_room_is_never_available() -> None:
    assert is_available(make_room(status=RoomStatus.OUT_OF_ORDER), stay(1, 2), []) is False


@pytest.mark.parametrize(
    "status, expected",
    [
        (MaintenanceStatus.SCHEDULED, False),
        (MaintenanceStatus.IN_PROGRESS, False),
        (MaintenanceStatus.COMPLETED, True),
        (MaintenanceStatus.CANCELLED, True),
    ],
)
def test_only_live_maintenance_blocks(status: MaintenanceStatus, expected: bool) -> None:
    room = make_room(maintenance=(make_window(stay(10, 12), status),))
    assert is_available(room, stay(12, 14), []) is expected


def test_scheduling_over_a_live_booking_conflicts() -> None:
    with pytest.raises(ConflictError, match="has bookings during the maintenance period"):
        schedule_maintenance(make_room(), make_window(stay(4, 6)), [make_booking(stay(1, 5))])


def test_scheduling_over_a_cancelled_booking_succeeds() -> None:
    room = schedule_maintenance(
        make_room(),
        make_window(stay(4, 6)),
        [make_booking(stay(1, 5), BookingStatus.CANCELLED)],
    )
    assert len(room.maintenance) == 1
    assert room.status == RoomStatus.AVAILABLE


def test_in_progress_maintenance_takes_room_out_of_service() -> None:
    room = schedule_maintenance(
        make_room(),
        make_window(stay(4, 6), MaintenanceStatus.IN_PROGRESS),
        [],
    )
    assert room.status == RoomStatus.MAINTENANCE


def test_completing_maintenance_frees_the_room() -> None:
    room = make_room(
        status=RoomStatus.MAINTENANCE,
        maintenance=(make_window(stay(4, 6), MaintenanceStatus.IN_PROGRESS, maintenance_id=3),),
    )
    updated = update_maintenance(
        room,
        3,
        {"status": MaintenanceStatus.COMPLETED, "cost": 250.0},
        today=date(2026, 5, 6),
    )
    assert updated.status == RoomStatus.AVAILABLE
    assert updated.last_maintenance_date == date(2026, 5, 6)
    assert updated.maintenance[0].cost == 250.0
    assert updated.maintenance[0].updated_at is not None


def test_moving_maintenance_onto_a_booked_stay_conflicts() -> None:
    room = make_room(maintenance=(make_window(stay(20, 22), maintenance_id=3),))
    bookings = [make_booking(stay(10, 15))]
    with pytest.raises(ConflictError, match="has bookings during the maintenance period"):
        update_maintenance(
            room,
            3,
            {"interval": stay(12, 13), "status": MaintenanceStatus.IN_PROGRESS},
            bookings=bookings,
        )


def test_reopening_cancelled_maintenance_over_a_booking_conflicts() -> None:
    room = make_room(
        maintenance=(make_window(stay(12, 13), MaintenanceStatus.CANCELLED, maintenance_id=3),),
    )
    bookings = [make_booking(stay(10, 15))]
    with pytest.raises(ConflictError):
        update_maintenance(room, 3, {"status": MaintenanceStatus.SCHEDULED}, bookings=bookings)

    notes_only = update_maintenance(room, 3, {"notes": "parts back-ordered"}, bookings=bookings)
    assert notes_only.maintenance[0].notes == "parts back-ordered"


def test_moving_maintenance_past_a_cancelled_booking_succeeds() -> None:
    room = make_room(maintenance=(make_window(stay(20, 22), maintenance_id=3),))
    updated = update_maintenance(
        room,
        3,
        {"interval": stay(12, 13)},
        bookings=[make_booking(stay(10, 15), BookingStatus.CANCELLED)],
    )
    assert updated.maintenance[0].interval == stay(12, 13)


def test_update_maintenance_rejects_unknown_records_and_fields() -> None:
    room = make_room(maintenance=(make_window(stay(4, 6), maintenance_id=3),))
    with pytest.raises(NotFoundError, match="Maintenance record not found"):
        update_maintenance(room, 99, {"notes": "x"})
    with pytest.raises(ValidationError):
        update_maintenance(room, 3, {"room_id": 1})


def test_history_filters_and_next_scheduled() -> None:
    room = make_room(
        maintenance=(
            make_window(stay(1, 2), MaintenanceStatus.COMPLETED, maintenance_id=1),
            make_window(stay(20, 22), MaintenanceStatus.SCHEDULED, maintenance_id=2),
            make_window(stay(10, 12), MaintenanceStatus.SCHEDULED, maintenance_id=3),
        )
    )
    completed = filter_maintenance(room, status=MaintenanceStatus.COMPLETED)
    assert [item.maintenance_id for item in completed] == [1]
    later = filter_maintenance(room, start=date(2026, 5, 5))
    assert [item.maintenance_id for item in later] == [2, 3]
    assert next_scheduled_maintenance(room, date(2026, 5, 5)) == date(2026, 5, 10)
    assert next_scheduled_maintenance(room, date(2026, 5, 25)) is None
