"""Maintenance scheduling endpoints for staff."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from resort.controllers.dependencies import (
    get_maintenance_service,
    require_roles,
    to_http_exception,
)
from resort.controllers.schemas import BulkResponse, MaintenanceResponse
from resort.domain.intervals import parse_interval, parse_optional_interval
from resort.domain.models import (
    STAFF_ROLES,
    MaintenanceStatus,
    MaintenanceType,
    MaintenanceWindow,
    User,
    UserRole,
)
from resort.services.maintenance_service import MaintenanceService


router = APIRouter(prefix="/rooms", tags=["maintenance"])

staff_only = require_roles(*STAFF_ROLES)


class MaintenanceRequest(BaseModel):
    type: MaintenanceType
    start_date: date
    end_date: date
    status: MaintenanceStatus = MaintenanceStatus.SCHEDULED
    description: Optional[str] = None
    cost: float = Field(default=0.0, ge=0.0)
    performed_by: Optional[str] = None
    notes: Optional[str] = None

    def to_window(self) -> MaintenanceWindow:
        return MaintenanceWindow(
            maintenance_type=self.type,
            interval=parse_interval(self.start_date, self.end_date),
            status=self.status,
            description=self.description,
            cost=self.cost,
            performed_by=self.performed_by,
            notes=self.notes,
        )


class MaintenanceUpdateRequest(BaseModel):
    type: Optional[MaintenanceType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[MaintenanceStatus] = None
    description: Optional[str] = None
    cost: Optional[float] = Field(default=None, ge=0.0)
    performed_by: Optional[str] = None
    notes: Optional[str] = None


class BulkMaintenanceRequest(MaintenanceRequest):
    rooms: list[int] = Field(min_length=1)


class ScheduleMaintenanceResponse(BaseModel):
    room_id: int
    room_number: str
    room_status: str
    maintenance: MaintenanceResponse


def _serialize_rows(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            **row,
            "maintenance": [
                MaintenanceResponse.from_domain(record).model_dump(mode="json")
                for record in row["maintenance"]
            ],
        }
        for row in rows
    ]


@router.get("/maintenance/scheduled")
async def scheduled_maintenance(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: MaintenanceService = Depends(get_maintenance_service),
    _: User = Depends(staff_only),
) -> dict[str, Any]:
    try:
        rows = service.scheduled(parse_optional_interval(start_date, end_date))
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return {"results": len(rows), "rooms": _serialize_rows(rows)}


@router.post("/bulk-maintenance", response_model=BulkResponse)
async def bulk_schedule_maintenance(
    payload: BulkMaintenanceRequest,
    service: MaintenanceService = Depends(get_maintenance_service),
    _: User = Depends(require_roles(UserRole.ADMIN)),
) -> BulkResponse:
    try:
        window = payload.to_window()
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BulkResponse.from_result(service.bulk_schedule(payload.rooms, window))


@router.post(
    "/{room_id}/maintenance",
    response_model=ScheduleMaintenanceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def schedule_maintenance(
    room_id: int,
    payload: MaintenanceRequest,
    service: MaintenanceService = Depends(get_maintenance_service),
    _: User = Depends(staff_only),
) -> ScheduleMaintenanceResponse:
    try:
        room, record = service.schedule(room_id, payload.to_window())
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return ScheduleMaintenanceResponse(
        room_id=int(room.room_id),
        room_number=room.room_number,
        room_status=room.status.value,
        maintenance=MaintenanceResponse.from_domain(record),
    )


@router.patch("/{room_id}/maintenance/{maintenance_id}", response_model=MaintenanceResponse)
async def update_maintenance(
    room_id: int,
    maintenance_id: int,
    payload: MaintenanceUpdateRequest,
    service: MaintenanceService = Depends(get_maintenance_service),
    _: User = Depends(staff_only),
) -> MaintenanceResponse:
    changes: dict[str, Any] = payload.model_dump(
        exclude_none=True,
        exclude={"type", "start_date", "end_date"},
    )
    if payload.type is not None:
        changes["maintenance_type"] = payload.type
    try:
        interval = parse_optional_interval(payload.start_date, payload.end_date)
        if interval is not None:
            changes["interval"] = interval
        record = service.update(room_id, maintenance_id, changes)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return MaintenanceResponse.from_domain(record)


@router.get("/{room_id}/maintenance/history")
async def maintenance_history(
    room_id: int,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    type: Optional[MaintenanceType] = Query(None),
    status_filter: Optional[MaintenanceStatus] = Query(None, alias="status"),
    service: MaintenanceService = Depends(get_maintenance_service),
    _: User = Depends(staff_only),
) -> dict[str, Any]:
    try:
        history = service.history(
            room_id,
            start=start_date,
            end=end_date,
            maintenance_type=type,
            status=status_filter,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    records = history.pop("maintenance_history")
    return {
        **history,
        "maintenance_history": [
            MaintenanceResponse.from_domain(record).model_dump(mode="json") for record in records
        ],
    }
