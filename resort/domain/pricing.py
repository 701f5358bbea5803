"""Effective nightly price resolution and the owned pricing entries of a room.

A room carries a base nightly price, a list of seasonal windows that replace
that base while they are active, and a list of percentage discounts. Seasonal
windows never overlap each other; discounts never overlap another discount of
the same type. Discounts of different types may be valid on the same day, in
which case the first one in stored order is applied and nothing is compounded.

Every mutation returns a new `Room`; callers persist the result.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional

from resort.domain.constraints import validate_minimum_stay, validate_percentage, validate_price
from resort.domain.errors import ConflictError, NotFoundError
from resort.domain.intervals import overlaps
from resort.domain.models import DateInterval, Discount, DiscountType, Room, SeasonalPricing


def find_seasonal_pricing(room: Room, as_of: date) -> Optional[SeasonalPricing]:
    for entry in room.seasonal_pricing:
        if entry.interval.contains(as_of):
            return entry
    return None


def find_active_discount(
    room: Room,
    as_of: date,
    stay_nights: int | None = None,
) -> Optional[Discount]:
    """Return the first discount valid on `as_of`.

    `minimum_stay` is only enforced when the caller knows the stay length.
    """
    for discount in room.discounts:
        if not discount.validity.contains(as_of):
            continue
        if (
            stay_nights is not None
            and discount.minimum_stay is not None
            and stay_nights < discount.minimum_stay
        ):
            continue
        return discount
    return None


def apply_discount(price: float, discount: Optional[Discount]) -> float:
    if discount is None:
        return price
    return price * (1 - discount.percentage / 100)


def current_price(room: Room, as_of: date, stay_nights: int | None = None) -> float:
    seasonal = find_seasonal_pricing(room, as_of)
    base = seasonal.price if seasonal is not None else room.price_per_night
    discount = find_active_discount(room, as_of, stay_nights)
    return round(apply_discount(base, discount), 2)


def quote_stay(room: Room, stay: DateInterval) -> float:
    """Total room charge for a stay, priced at the check-in date."""
    nights = stay.days
    return round(nights * current_price(room, stay.start, stay_nights=nights), 2)


def _check_seasonal_overlap(
    room: Room,
    interval: DateInterval,
    exclude_id: int | None = None,
) -> None:
    for entry in room.seasonal_pricing:
        if exclude_id is not None and entry.pricing_id == exclude_id:
            continue
        if overlaps(interval, entry.interval):
            raise ConflictError(
                f"Room {room.room_number} has overlapping seasonal pricing"
            )


def _check_discount_overlap(
    room: Room,
    discount_type: DiscountType,
    validity: DateInterval,
    exclude_id: int | None = None,
) -> None:
    for entry in room.discounts:
        if exclude_id is not None and entry.discount_id == exclude_id:
            continue
        if entry.discount_type != discount_type:
            continue
        if overlaps(validity, entry.validity):
            raise ConflictError(
                f"Room {room.room_number} has overlapping discount of type {discount_type.value}"
            )


def add_seasonal_pricing(room: Room, entry: SeasonalPricing) -> Room:
    validate_price(entry.price)
    _check_seasonal_overlap(room, entry.interval)
    return replace(room, seasonal_pricing=room.seasonal_pricing + (entry,))


def _seasonal_index(room: Room, pricing_id: int) -> int:
    for index, entry in enumerate(room.seasonal_pricing):
        if entry.pricing_id == pricing_id:
            return index
    raise NotFoundError("Seasonal pricing not found")


def update_seasonal_pricing(
    room: Room,
    pricing_id: int,
    *,
    interval: DateInterval | None = None,
    price: float | None = None,
    description: str | None = None,
) -> Room:
    index = _seasonal_index(room, pricing_id)
    current = room.seasonal_pricing[index]
    updated = replace(
        current,
        interval=interval or current.interval,
        price=validate_price(price) if price is not None else current.price,
        description=description if description is not None else current.description,
    )
    if interval is not None:
        _check_seasonal_overlap(room, updated.interval, exclude_id=pricing_id)
    entries = list(room.seasonal_pricing)
    entries[index] = updated
    return replace(room, seasonal_pricing=tuple(entries))


def remove_seasonal_pricing(room: Room, pricing_id: int) -> Room:
    index = _seasonal_index(room, pricing_id)
    entries = room.seasonal_pricing[:index] + room.seasonal_pricing[index + 1:]
    return replace(room, seasonal_pricing=entries)


def add_discount(room: Room, discount: Discount) -> Room:
    validate_percentage(discount.percentage)
    validate_minimum_stay(discount.minimum_stay)
    _check_discount_overlap(room, discount.discount_type, discount.validity)
    return replace(room, discounts=room.discounts + (discount,))


def _discount_index(room: Room, discount_id: int) -> int:
    for index, entry in enumerate(room.discounts):
        if entry.discount_id == discount_id:
            return index
    raise NotFoundError("Discount not found")


def update_discount(
    room: Room,
    discount_id: int,
    *,
    discount_type: DiscountType | None = None,
    percentage: float | None = None,
    validity: DateInterval | None = None,
    minimum_stay: int | None = None,
    clear_minimum_stay: bool = False,
    description: str | None = None,
) -> Room:
    """Change the given fields of one discount; `clear_minimum_stay` lifts the stay gate."""
    index = _discount_index(room, discount_id)
    current = room.discounts[index]
    updated = replace(
        current,
        discount_type=discount_type or current.discount_type,
        percentage=(
            validate_percentage(percentage) if percentage is not None else current.percentage
        ),
        validity=validity or current.validity,
        minimum_stay=(
            None
            if clear_minimum_stay
            else validate_minimum_stay(minimum_stay)
            if minimum_stay is not None
            else current.minimum_stay
        ),
        description=description if description is not None else current.description,
    )
    if discount_type is not None or validity is not None:
        _check_discount_overlap(
            room,
            updated.discount_type,
            updated.validity,
            exclude_id=discount_id,
        )
    entries = list(room.discounts)
    entries[index] = updated
    return replace(room, discounts=tuple(entries))


def remove_discount(room: Room, discount_id: int) -> Room:
    index = _discount_index(room, discount_id)
    return replace(room, discounts=room.discounts[:index] + room.discounts[index + 1:])
