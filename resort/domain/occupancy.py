"""Occupancy and revenue statistics over a reporting period."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from resort.domain.intervals import overlaps
from resort.domain.models import Booking, DateInterval, Room


@dataclass
class GroupStats:
    total_bookings: int = 0
    occupied_days: int = 0
    revenue: float = 0.0
    occupancy_rate: float = 0.0

    def to_dict(self) -> dict[str, float | int]:
        return {
            "total_bookings": self.total_bookings,
            "occupied_days": self.occupied_days,
            "revenue": round(self.revenue, 2),
            "occupancy_rate": round(self.occupancy_rate, 2),
        }


@dataclass
class OccupancyStats:
    period: DateInterval
    period_days: int
    room_count: int
    total_bookings: int = 0
    occupied_days: int = 0
    total_revenue: float = 0.0
    occupancy_rate: float = 0.0
    by_room: dict[int, GroupStats] = field(default_factory=dict)
    by_room_type: dict[str, GroupStats] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "timeframe": {**self.period.to_dict(), "total_days": self.period_days},
            "room_count": self.room_count,
            "total_bookings": self.total_bookings,
            "occupied_days": self.occupied_days,
            "total_revenue": round(self.total_revenue, 2),
            "occupancy_rate": round(self.occupancy_rate, 2),
            "room_stats": {str(key): value.to_dict() for key, value in self.by_room.items()},
            "room_type_stats": {
                key: value.to_dict() for key, value in self.by_room_type.items()
            },
        }


def occupancy_rate(occupied_days: int, room_count: int, period_days: int) -> float:
    available_room_days = room_count * period_days
    if available_room_days <= 0:
        return 0.0
    return occupied_days / available_room_days * 100


def aggregate(
    bookings: Iterable[Booking],
    period: DateInterval,
    rooms: Sequence[Room],
) -> OccupancyStats:
    """Fold non-cancelled bookings touching `period` into per-room/per-type totals.

    Each booking contributes its full night count, not only the nights that
    fall inside the period.
    """
    rooms_by_id = {room.room_id: room for room in rooms}
    rooms_per_type = Counter(room.room_type.value for room in rooms)
    period_days = period.days

    stats = OccupancyStats(period=period, period_days=period_days, room_count=len(rooms))
    by_room: dict[int, GroupStats] = defaultdict(GroupStats)
    by_type: dict[str, GroupStats] = defaultdict(GroupStats)

    for booking in bookings:
        if booking.is_cancelled or not overlaps(booking.stay, period):
            continue
        nights = booking.nights
        stats.total_bookings += 1
        stats.occupied_days += nights
        stats.total_revenue += booking.total_price

        room_group = by_room[booking.room_id]
        room_group.total_bookings += 1
        room_group.occupied_days += nights
        room_group.revenue += booking.total_price

        room = rooms_by_id.get(booking.room_id)
        if room is None:
            continue
        type_group = by_type[room.room_type.value]
        type_group.total_bookings += 1
        type_group.occupied_days += nights
        type_group.revenue += booking.total_price

    stats.occupancy_rate = occupancy_rate(stats.occupied_days, len(rooms), period_days)
    for group in by_room.values():
        group.occupancy_rate = occupancy_rate(group.occupied_days, 1, period_days)
    for room_type, group in by_type.items():
        group.occupancy_rate = occupancy_rate(
            group.occupied_days,
            rooms_per_type[room_type],
            period_days,
        )

    stats.by_room = dict(by_room)
    stats.by_room_type = dict(by_type)
    return stats
