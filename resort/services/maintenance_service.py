"""Maintenance scheduling and history for rooms."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from threading import RLock
from typing import Any, Iterable, Optional

from resort.domain.availability import (
    filter_maintenance,
    next_scheduled_maintenance,
    schedule_maintenance,
    update_maintenance,
)
from resort.domain.errors import NotFoundError
from resort.domain.intervals import overlaps
from resort.domain.models import (
    DateInterval,
    MaintenanceStatus,
    MaintenanceType,
    MaintenanceWindow,
    Room,
)
from resort.repository.data_repository import DataRepository
from resort.services.room_service import BulkResult
from resort.utils.config import Settings, get_settings
from resort.utils.logger import get_logger


logger = get_logger(__name__)


class MaintenanceService:
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

    def schedule(self, room_id: int, window: MaintenanceWindow) -> tuple[Room, MaintenanceWindow]:
        """Attach a maintenance window unless a live booking overlaps it."""
        now = datetime.now(timezone.utc)
        with self._write_lock:
            room = self._load(room_id)
            bookings = self._repository.list_active_bookings_touching(
                window.interval,
                room_ids=[room_id],
            )
            scheduled = schedule_maintenance(
                room,
                replace(window, maintenance_id=None, created_at=now, updated_at=now),
                bookings,
            )
            saved = self._repository.save_room(scheduled)
        logger.info(
            "Maintenance %s scheduled for room %s (%s)",
            window.maintenance_type.value,
            room_id,
            window.interval.to_dict(),
        )
        return saved, saved.maintenance[-1]

    def update(
        self,
        room_id: int,
        maintenance_id: int,
        changes: dict[str, Any],
        today: Optional[date] = None,
    ) -> MaintenanceWindow:
        with self._write_lock:
            room = self._load(room_id)
            current = next(
                (item for item in room.maintenance if item.maintenance_id == maintenance_id),
                None,
            )
            interval = changes.get("interval") or (current.interval if current else None)
            bookings = (
                self._repository.list_active_bookings_touching(interval, room_ids=[room_id])
                if interval is not None
                else []
            )
            room = update_maintenance(room, maintenance_id, changes, today, bookings)
            saved = self._repository.save_room(room)
        return next(item for item in saved.maintenance if item.maintenance_id == maintenance_id)

    def history(
        self,
        room_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        maintenance_type: Optional[MaintenanceType] = None,
        status: Optional[MaintenanceStatus] = None,
        today: Optional[date] = None,
    ) -> dict[str, Any]:
        room = self._load(room_id)
        return {
            "room_id": room.room_id,
            "room_number": room.room_number,
            "last_maintenance_date": room.last_maintenance_date,
            "next_scheduled_maintenance": next_scheduled_maintenance(
                room,
                today or date.today(),
            ),
            "maintenance_history": filter_maintenance(
                room,
                start=start,
                end=end,
                maintenance_type=maintenance_type,
                status=status,
            ),
        }

    def scheduled(self, window: Optional[DateInterval] = None) -> list[dict[str, Any]]:
        """Scheduled or in-progress maintenance across rooms, optionally within `window`."""
        rows: list[dict[str, Any]] = []
        for room in self._repository.list_rooms():
            records = [
                record
                for record in room.maintenance
                if record.status in (MaintenanceStatus.SCHEDULED, MaintenanceStatus.IN_PROGRESS)
                and (window is None or overlaps(record.interval, window))
            ]
            if records:
                rows.append(
                    {
                        "room_id": room.room_id,
                        "room_number": room.room_number,
                        "type": room.room_type.value,
                        "status": room.status.value,
                        "maintenance": records,
                    }
                )
        return rows

    def bulk_schedule(self, room_ids: Iterable[int], window: MaintenanceWindow) -> BulkResult:
        result = BulkResult()
        for room_id in room_ids:
            def action(room_id: int = room_id) -> dict[str, Any]:
                room, record = self.schedule(room_id, window)
                return {"room_number": room.room_number, "maintenance": record}

            result.run(room_id, action)
        return result
