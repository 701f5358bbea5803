"""Banquet halls and the events held in them."""

from __future__ import annotations

from dataclasses import replace
from threading import RLock
from typing import Any, Optional

from resort.domain.constraints import validate_capacity
from resort.domain.errors import ConflictError, NotFoundError, ValidationError
from resort.domain.events import check_event, transition_event
from resort.domain.models import Banquet, Event, EventStatus, User
from resort.repository.data_repository import DataRepository
from resort.utils.config import Settings, get_settings
from resort.utils.logger import get_logger


logger = get_logger(__name__)

BANQUET_UPDATABLE_FIELDS = {"name", "description", "seating_capacity", "images"}


class BanquetService:
    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        write_lock: Optional[RLock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._write_lock = write_lock or RLock()

    def list_banquets(self) -> list[Banquet]:
        return self._repository.list_banquets()

    def get_banquet(self, banquet_id: int) -> Banquet:
        banquet = self._repository.get_banquet(banquet_id)
        if banquet is None:
            raise NotFoundError("Banquet not found")
        return banquet

    def create_banquet(self, banquet: Banquet) -> Banquet:
        validate_capacity(banquet.seating_capacity, "seating_capacity")
        return self._repository.create_banquet(banquet)

    def update_banquet(self, banquet_id: int, changes: dict[str, Any]) -> Banquet:
        unknown = set(changes) - BANQUET_UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update banquet fields: {', '.join(sorted(unknown))}")
        with self._write_lock:
            banquet = self.get_banquet(banquet_id)
            if "seating_capacity" in changes:
                seats = validate_capacity(changes["seating_capacity"], "seating_capacity")
                largest = max(
                    (
                        event.capacity
                        for event in self._repository.list_events(banquet_id)
                        if not event.is_cancelled
                    ),
                    default=0,
                )
                if seats < largest:
                    raise ConflictError(
                        f"An event in {banquet.name} already expects {largest} guests"
                    )
            updated = self._repository.save_banquet(replace(banquet, **changes))
        logger.info("Banquet updated with ID: %s", banquet_id)
        return updated

    def delete_banquet(self, banquet_id: int) -> None:
        """Only halls without live events can go; cancelled events go with them."""
        with self._write_lock:
            self.get_banquet(banquet_id)
            live = [
                event
                for event in self._repository.list_events(banquet_id)
                if not event.is_cancelled
            ]
            if live:
                raise ConflictError("Banquet still has events scheduled")
            self._repository.delete_banquet(banquet_id)

    def list_events(self, banquet_id: int, status: Optional[EventStatus] = None) -> list[Event]:
        self.get_banquet(banquet_id)
        return self._repository.list_events(banquet_id, status=status)

    def schedule_event(self, banquet_id: int, event: Event, organizer: User) -> Event:
        with self._write_lock:
            banquet = self.get_banquet(banquet_id)
            candidate = replace(
                event,
                event_id=None,
                banquet_id=banquet_id,
                organizer_id=int(organizer.user_id),
                status=EventStatus.SCHEDULED,
            )
            check_event(banquet, candidate, self._repository.list_events(banquet_id))
            created = self._repository.create_event(candidate)
        logger.info("Event %s scheduled in banquet %s", created.event_id, banquet_id)
        return created

    def update_event_status(self, banquet_id: int, event_id: int, status: EventStatus) -> Event:
        with self._write_lock:
            event = self._repository.get_event(event_id)
            if event is None or event.banquet_id != banquet_id:
                raise NotFoundError("Event not found")
            moved = transition_event(event, status)
            updated = self._repository.set_event_status(event_id, moved.status)
        logger.info("Event status updated to %s for ID: %s", status.value, event_id)
        return updated
