"""Seasonal pricing and discount management across rooms."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from threading import RLock
from typing import Any, Iterable, Optional

from resort.domain import pricing
from resort.domain.constraints import validate_price
from resort.domain.errors import NotFoundError
from resort.domain.models import DateInterval, Discount, DiscountType, Room, RoomType, SeasonalPricing
from resort.repository.data_repository import DataRepository
from resort.services.room_service import BulkResult
from resort.utils.config import Settings, get_settings
from resort.utils.logger import get_logger


logger = get_logger(__name__)


class PricingService:
    """Read-decide-write wrapper around the pricing rules of a room."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        write_lock: Optional[RLock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._write_lock = write_lock or RLock()

    def _load(self, room_id: int) -> Room:
        room = self._repository.get_room(room_id)
        if room is None:
            raise NotFoundError(f"Room not found: {room_id}")
        return room

    def list_seasonal_pricing(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        room_type: Optional[RoomType] = None,
    ) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for room in self._repository.list_rooms(room_type=room_type):
            entries = [
                entry
                for entry in room.seasonal_pricing
                if (start is None or entry.interval.start >= start)
                and (end is None or entry.interval.end <= end)
            ]
            if (start is not None or end is not None) and not entries:
                continue
            rows.append(
                {
                    "room_id": room.room_id,
                    "room_number": room.room_number,
                    "type": room.room_type.value,
                    "base_price": room.base_price,
                    "price_per_night": room.price_per_night,
                    "seasonal_pricing": entries,
                }
            )
        return rows

    def add_seasonal_pricing(
        self,
        room_ids: Iterable[int],
        interval: DateInterval,
        price: float,
        description: Optional[str] = None,
    ) -> BulkResult:
        validate_price(price)
        entry = SeasonalPricing(interval=interval, price=price, description=description)
        result = BulkResult()
        for room_id in room_ids:
            def action(room_id: int = room_id) -> dict[str, Any]:
                with self._write_lock:
                    room = self._repository.save_room(
                        pricing.add_seasonal_pricing(self._load(room_id), entry)
                    )
                logger.info("Seasonal pricing %s added to room %s", interval.to_dict(), room_id)
                return {
                    "room_number": room.room_number,
                    "seasonal_pricing": room.seasonal_pricing[-1],
                }

            result.run(room_id, action)
        return result

    def update_seasonal_pricing(
        self,
        room_id: int,
        pricing_id: int,
        *,
        interval: Optional[DateInterval] = None,
        price: Optional[float] = None,
        description: Optional[str] = None,
    ) -> SeasonalPricing:
        with self._write_lock:
            room = self._repository.save_room(
                pricing.update_seasonal_pricing(
                    self._load(room_id),
                    pricing_id,
                    interval=interval,
                    price=price,
                    description=description,
                )
            )
        return next(item for item in room.seasonal_pricing if item.pricing_id == pricing_id)

    def delete_seasonal_pricing(self, room_id: int, pricing_id: int) -> None:
        with self._write_lock:
            self._repository.save_room(
                pricing.remove_seasonal_pricing(self._load(room_id), pricing_id)
            )
        logger.info("Seasonal pricing %s removed from room %s", pricing_id, room_id)

    def list_discounts(
        self,
        *,
        discount_type: Optional[DiscountType] = None,
        valid_from: Optional[date] = None,
        valid_until: Optional[date] = None,
        room_type: Optional[RoomType] = None,
    ) -> list[dict[str, Any]]:
        filtered = discount_type is not None or valid_from is not None or valid_until is not None
        rows: list[dict[str, Any]] = []
        for room in self._repository.list_rooms(room_type=room_type):
            entries = [
                entry
                for entry in room.discounts
                if (discount_type is None or entry.discount_type == discount_type)
                and (valid_from is None or entry.validity.start >= valid_from)
                and (valid_until is None or entry.validity.end <= valid_until)
            ]
            if filtered and not entries:
                continue
            rows.append(
                {
                    "room_id": room.room_id,
                    "room_number": room.room_number,
                    "type": room.room_type.value,
                    "discounts": entries,
                }
            )
        return rows

    def add_discount(self, room_ids: Iterable[int], discount: Discount) -> BulkResult:
        result = BulkResult()
        for room_id in room_ids:
            def action(room_id: int = room_id) -> dict[str, Any]:
                with self._write_lock:
                    room = self._repository.save_room(
                        pricing.add_discount(self._load(room_id), discount)
                    )
                logger.info(
                    "Discount %s added to room %s",
                    discount.discount_type.value,
                    room_id,
                )
                return {"room_number": room.room_number, "discount": room.discounts[-1]}

            result.run(room_id, action)
        return result

    def update_discount(self, room_id: int, discount_id: int, **changes: Any) -> Discount:
        with self._write_lock:
            room = self._repository.save_room(
                pricing.update_discount(self._load(room_id), discount_id, **changes)
            )
        return next(item for item in room.discounts if item.discount_id == discount_id)

    def delete_discount(self, room_id: int, discount_id: int) -> None:
        with self._write_lock:
            self._repository.save_room(pricing.remove_discount(self._load(room_id), discount_id))
        logger.info("Discount %s removed from room %s", discount_id, room_id)

    def bulk_update_pricing(
        self,
        room_ids: Iterable[int],
        *,
        base_price: Optional[float] = None,
        price_per_night: Optional[float] = None,
        seasonal_pricing: Optional[SeasonalPricing] = None,
        discount: Optional[Discount] = None,
        as_of: Optional[date] = None,
    ) -> BulkResult:
        """Apply price changes room by room; overlap rules still hold per room."""
        if base_price is not None:
            validate_price(base_price, "base_price")
        if price_per_night is not None:
            validate_price(price_per_night, "price_per_night")
        reference_day = as_of or date.today()

        result = BulkResult()
        for room_id in room_ids:
            def action(room_id: int = room_id) -> dict[str, Any]:
                with self._write_lock:
                    room = self._load(room_id)
                    if base_price is not None:
                        room = replace(room, base_price=base_price)
                    if price_per_night is not None:
                        room = replace(room, price_per_night=price_per_night)
                    if seasonal_pricing is not None:
                        room = pricing.add_seasonal_pricing(room, seasonal_pricing)
                    if discount is not None:
                        room = pricing.add_discount(room, discount)
                    room = self._repository.save_room(room)
                return {
                    "room_number": room.room_number,
                    "current_price": pricing.current_price(room, reference_day),
                }

            result.run(room_id, action)
        return result
