"""Occupancy and revenue reporting."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Optional

from resort.domain.models import DateInterval, RoomType
from resort.domain.occupancy import OccupancyStats, aggregate
from resort.repository.data_repository import DataRepository
from resort.utils.config import Settings, get_settings


class StatisticsService:
    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def room_statistics(
        self,
        period: DateInterval,
        room_type: Optional[RoomType] = None,
    ) -> OccupancyStats:
        rooms = self._repository.list_rooms(room_type=room_type)
        bookings = self._repository.list_active_bookings_touching(
            period,
            room_ids=[int(room.room_id) for room in rooms],
        )
        return aggregate(bookings, period, rooms)

    def _lookback_period(self, today: Optional[date]) -> DateInterval:
        end = today or date.today()
        return DateInterval(
            start=end - timedelta(days=self._settings.occupancy_lookback_days),
            end=end,
        )

    def occupancy_by_room(
        self,
        room_type: Optional[RoomType] = None,
        today: Optional[date] = None,
    ) -> list[dict[str, Any]]:
        """Per-room occupancy over the trailing lookback window."""
        period = self._lookback_period(today)
        stats = self.room_statistics(period, room_type)
        rows: list[dict[str, Any]] = []
        for room in self._repository.list_rooms(room_type=room_type):
            group = stats.by_room.get(int(room.room_id))
            rows.append(
                {
                    "room_id": room.room_id,
                    "room_number": room.room_number,
                    "type": room.room_type.value,
                    "total_bookings": group.total_bookings if group else 0,
                    "total_days_occupied": group.occupied_days if group else 0,
                    "average_occupancy_rate": round(group.occupancy_rate, 2) if group else 0.0,
                    "revenue_generated": round(group.revenue, 2) if group else 0.0,
                }
            )
        return rows

    def revenue_report(
        self,
        room_type: Optional[RoomType] = None,
        today: Optional[date] = None,
    ) -> dict[str, Any]:
        rooms = self.occupancy_by_room(room_type, today)
        total_revenue = round(sum(row["revenue_generated"] for row in rooms), 2)
        return {
            "total_revenue": total_revenue,
            "average_revenue_per_room": round(total_revenue / len(rooms), 2) if rooms else 0.0,
            "rooms": sorted(rooms, key=lambda row: row["revenue_generated"], reverse=True),
        }
