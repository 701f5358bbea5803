"""Room inventory queries, updates, availability and ratings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from threading import RLock
from typing import Any, Callable, Iterable, Optional, Sequence

from resort.domain.availability import conflicting_bookings, is_available
from resort.domain.constraints import validate_price
from resort.domain.errors import NotFoundError, ResortError, ValidationError
from resort.domain.models import DateInterval, Rating, Room, RoomStatus, RoomType
from resort.domain.pricing import current_price
from resort.domain.ratings import add_rating, average_rating
from resort.repository.data_repository import DataRepository
from resort.utils.config import Settings, get_settings
from resort.utils.logger import get_logger


logger = get_logger(__name__)


ROOM_UPDATABLE_FIELDS = {
    "room_number",
    "room_type",
    "floor",
    "price_per_night",
    "base_price",
    "description",
    "capacity_adults",
    "capacity_children",
    "status",
    "amenities",
    "special_features",
}


@dataclass
class BulkResult:
    """Per-item outcome of a bulk operation; items never share a transaction."""

    success: list[dict[str, Any]] = field(default_factory=list)
    failed: list[dict[str, Any]] = field(default_factory=list)

    def run(self, room_id: int, action: Callable[[], dict[str, Any]]) -> None:
        try:
            self.success.append({"room_id": room_id, **action()})
        except ResortError as exc:
            logger.warning("Bulk item for room %s failed: %s", room_id, exc)
            self.failed.append({"room_id": room_id, "error": str(exc)})

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {"success": self.success, "failed": self.failed}


@dataclass(frozen=True)
class RoomPage:
    rooms: list[Room]
    total: int
    page: int
    limit: int


class RoomService:
    """Coordinates room documents between the repository and the domain core."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        write_lock: Optional[RLock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._write_lock = write_lock or RLock()

    def get_room(self, room_id: int) -> Room:
        room = self._repository.get_room(room_id)
        if room is None:
            raise NotFoundError("Room not found")
        return room

    def list_rooms(
        self,
        *,
        room_type: Optional[RoomType] = None,
        status: Optional[RoomStatus] = None,
        floor: Optional[int] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        stay: Optional[DateInterval] = None,
        sort: Sequence[str] = (),
        page: int = 1,
        limit: Optional[int] = None,
    ) -> RoomPage:
        """Filter rooms; when `stay` is given only rooms bookable for it remain."""
        if page < 1:
            raise ValidationError("page must be >= 1")
        limit = limit or self._settings.default_page_size
        if not 1 <= limit <= self._settings.max_page_size:
            raise ValidationError(f"limit must be between 1 and {self._settings.max_page_size}")

        rooms = self._repository.list_rooms(
            room_type=room_type,
            status=status,
            floor=floor,
            min_price=min_price,
            max_price=max_price,
            sort=sort,
        )
        if stay is not None:
            bookings = self._repository.list_active_bookings_touching(
                stay,
                room_ids=[int(room.room_id) for room in rooms],
            )
            rooms = [room for room in rooms if is_available(room, stay, bookings)]

        offset = (page - 1) * limit
        return RoomPage(
            rooms=rooms[offset:offset + limit],
            total=len(rooms),
            page=page,
            limit=limit,
        )

    def create_room(self, room: Room) -> Room:
        validate_price(room.price_per_night, "price_per_night")
        validate_price(room.base_price, "base_price")
        return self._repository.create_room(room)

    def update_room(self, room_id: int, changes: dict[str, Any]) -> Room:
        unknown = set(changes) - ROOM_UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update room fields: {', '.join(sorted(unknown))}")
        for price_field in ("price_per_night", "base_price"):
            if price_field in changes:
                validate_price(changes[price_field], price_field)
        changes = {
            key: tuple(value) if key in ("amenities", "special_features") else value
            for key, value in changes.items()
        }
        with self._write_lock:
            room = self.get_room(room_id)
            updated = self._repository.save_room(replace(room, **changes))
        logger.info("Room %s updated: %s", room_id, ", ".join(sorted(changes)))
        return updated

    def deactivate_room(self, room_id: int) -> Room:
        """Soft delete; bookings keep referencing the room."""
        with self._write_lock:
            room = self.get_room(room_id)
            updated = self._repository.save_room(replace(room, is_active=False))
        logger.info("Room %s deactivated", room_id)
        return updated

    def check_availability(self, room_id: int, stay: DateInterval) -> dict[str, Any]:
        room = self.get_room(room_id)
        bookings = self._repository.list_active_bookings_touching(stay, room_ids=[room_id])
        available = room.is_active and is_available(room, stay, bookings)
        return {
            "room_id": room_id,
            "room_number": room.room_number,
            "available": available,
            "conflicting_bookings": len(conflicting_bookings(room_id, stay, bookings)),
            "price_per_night": current_price(room, stay.start, stay_nights=stay.days),
            "nights": stay.days,
        }

    def price_for(self, room_id: int, as_of: date, stay_nights: Optional[int] = None) -> float:
        return current_price(self.get_room(room_id), as_of, stay_nights)

    def get_ratings(self, room_id: int) -> dict[str, Any]:
        room = self.get_room(room_id)
        return {
            "ratings": list(room.ratings),
            "average_rating": average_rating(room),
            "total_ratings": len(room.ratings),
        }

    def add_rating(
        self,
        room_id: int,
        guest_id: int,
        score: int,
        review: Optional[str] = None,
    ) -> tuple[Rating, float]:
        with self._write_lock:
            room = self.get_room(room_id)
            rated = add_rating(
                room,
                Rating(
                    guest_id=guest_id,
                    score=score,
                    review=review,
                    rated_at=datetime.now(timezone.utc),
                ),
            )
            saved = self._repository.save_room(rated)
        return saved.ratings[-1], average_rating(saved)

    def bulk_update_status(self, room_ids: Iterable[int], status: RoomStatus) -> BulkResult:
        result = BulkResult()
        for room_id in room_ids:
            def action(room_id: int = room_id) -> dict[str, Any]:
                room = self.update_room(room_id, {"status": status})
                return {"room_number": room.room_number, "status": room.status.value}

            result.run(room_id, action)
        return result

    def bulk_update_rooms(self, updates: Iterable[tuple[int, dict[str, Any]]]) -> BulkResult:
        result = BulkResult()
        for room_id, changes in updates:
            def action(room_id: int = room_id, changes: dict[str, Any] = changes) -> dict[str, Any]:
                room = self.update_room(room_id, changes)
                return {"room_number": room.room_number}

            result.run(room_id, action)
        return result
