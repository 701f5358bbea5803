"""Occupancy and revenue reporting endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from resort.controllers.dependencies import (
    get_statistics_service,
    require_roles,
    to_http_exception,
)
from resort.domain.intervals import parse_interval
from resort.domain.models import MANAGEMENT_ROLES, STAFF_ROLES, RoomType, User
from resort.services.statistics_service import StatisticsService


router = APIRouter(prefix="/rooms/statistics", tags=["statistics"])


@router.get("")
async def room_statistics(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    type: Optional[RoomType] = Query(None),
    service: StatisticsService = Depends(get_statistics_service),
    _: User = Depends(require_roles(*STAFF_ROLES)),
) -> dict[str, Any]:
    """Occupancy over [start_date, end_date]; defaults to the last 30 days."""
    end = end_date or date.today()
    start = start_date or end - timedelta(days=30)
    try:
        period = parse_interval(start, end)
        stats = service.room_statistics(period, type)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return stats.to_dict()


@router.get("/occupancy")
async def occupancy_by_room(
    type: Optional[RoomType] = Query(None),
    service: StatisticsService = Depends(get_statistics_service),
    _: User = Depends(require_roles(*STAFF_ROLES)),
) -> dict[str, Any]:
    rows = service.occupancy_by_room(type)
    return {"results": len(rows), "rooms": rows}


@router.get("/revenue")
async def revenue_report(
    type: Optional[RoomType] = Query(None),
    service: StatisticsService = Depends(get_statistics_service),
    _: User = Depends(require_roles(*MANAGEMENT_ROLES)),
) -> dict[str, Any]:
    return service.revenue_report(type)
