from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from resort.domain.errors import ConflictError
from resort.domain.models import (
    AddOn,
    Booking,
    BookingStatus,
    DateInterval,
    Discount,
    DiscountType,
    MaintenanceType,
    MaintenanceWindow,
    Rating,
    Room,
    RoomType,
    SeasonalPricing,
    User,
)
from resort.repository.data_repository import DataRepository
from resort.utils.config import get_settings


@pytest.fixture()
def repository(tmp_path) -> DataRepository:
    get_settings.cache_clear()
    settings = replace(get_settings(), database_path=tmp_path / "repository.db")
    repo = DataRepository(settings)
    repo.initialize_database()
    return repo


def _room(number: str = "101", room_type: RoomType = RoomType.STANDARD, price: float = 100.0) -> Room:
    return Room(
        room_id=None,
        room_number=number,
        room_type=room_type,
        floor=1,
        price_per_night=price,
        base_price=price,
        description="Garden view",
        capacity_adults=2,
        amenities=("wifi", "tv"),
    )


def _guest(repository: DataRepository, email: str) -> int:
    user = repository.create_user(
        User(user_id=None, email=email, first_name="Test", last_name="Guest", password_hash="unused")
    )
    return int(user.user_id)


def test_seed_demo_rooms_is_idempotent(repository: DataRepository) -> None:
    assert repository.seed_demo_rooms() == 12
    assert repository.seed_demo_rooms() == 0
    assert repository.count_rooms() == 12
    assert repository.count_rooms(RoomType.SUITE) == 3


def test_room_document_round_trip_keeps_owned_entry_ids(repository: DataRepository) -> None:
    room = repository.create_room(_room())
    guest_id = _guest(repository, "rater@resort.test")
    july = DateInterval(date(2026, 7, 1), date(2026, 7, 31))
    saved = repository.save_room(
        replace(
            room,
            seasonal_pricing=(SeasonalPricing(interval=july, price=140.0, description="Summer"),),
            discounts=(
                Discount(
                    discount_type=DiscountType.LONG_STAY,
                    percentage=15.0,
                    validity=july,
                    minimum_stay=7,
                ),
            ),
            maintenance=(
                MaintenanceWindow(
                    maintenance_type=MaintenanceType.INSPECTION,
                    interval=DateInterval(date(2026, 8, 1), date(2026, 8, 2)),
                ),
            ),
            ratings=(Rating(guest_id=guest_id, score=4, review="Quiet"),),
        )
    )

    pricing_id = saved.seasonal_pricing[0].pricing_id
    assert pricing_id is not None
    assert saved.discounts[0].minimum_stay == 7
    assert saved.maintenance[0].maintenance_type == MaintenanceType.INSPECTION
    assert saved.ratings[0].review == "Quiet"
    assert saved.amenities == ("wifi", "tv")

    resaved = repository.save_room(replace(saved, price_per_night=110.0))
    assert resaved.seasonal_pricing[0].pricing_id == pricing_id
    assert resaved.price_per_night == 110.0


def test_duplicate_room_number_conflicts(repository: DataRepository) -> None:
    repository.create_room(_room("201"))
    with pytest.raises(ConflictError):
        repository.create_room(_room("201"))


def test_list_rooms_filters_and_sorts(repository: DataRepository) -> None:
    repository.create_room(_room("101", RoomType.STANDARD, 90.0))
    repository.create_room(_room("102", RoomType.SUITE, 300.0))
    repository.create_room(_room("103", RoomType.STANDARD, 120.0))

    standard = repository.list_rooms(room_type=RoomType.STANDARD)
    assert {room.room_number for room in standard} == {"101", "103"}

    by_price = repository.list_rooms(sort=("-price_per_night",))
    assert [room.room_number for room in by_price] == ["102", "103", "101"]

    affordable = repository.list_rooms(max_price=150.0)
    assert len(affordable) == 2


def test_active_bookings_touching_skips_cancelled(repository: DataRepository) -> None:
    room = repository.create_room(_room())
    first_guest = _guest(repository, "first@resort.test")
    second_guest = _guest(repository, "second@resort.test")
    stay = DateInterval(date(2026, 9, 1), date(2026, 9, 4))
    live = repository.create_booking(
        Booking(
            booking_id=None,
            room_id=int(room.room_id),
            guest_id=first_guest,
            stay=stay,
            total_price=300.0,
            add_ons=(AddOn(service="breakfast", price=15.0, quantity=3),),
            special_requests=("late checkout",),
        )
    )
    repository.create_booking(
        Booking(
            booking_id=None,
            room_id=int(room.room_id),
            guest_id=second_guest,
            stay=stay,
            total_price=300.0,
            status=BookingStatus.CANCELLED,
        )
    )

    touching = repository.list_active_bookings_touching(
        DateInterval(date(2026, 9, 4), date(2026, 9, 6)),
        room_ids=[int(room.room_id)],
    )
    assert [booking.booking_id for booking in touching] == [live.booking_id]
    assert touching[0].add_ons[0].total == 45.0
    assert touching[0].special_requests == ("late checkout",)
    assert repository.list_active_bookings_touching(stay, room_ids=[]) == []
