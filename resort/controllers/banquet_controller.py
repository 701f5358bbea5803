"""Banquet hall endpoints and the events scheduled in each hall."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from resort.controllers.dependencies import (
    get_banquet_service,
    get_current_user,
    require_roles,
    to_http_exception,
)
from resort.domain.intervals import parse_interval
from resort.domain.models import (
    STAFF_ROLES,
    Banquet,
    Event,
    EventStatus,
    EventType,
    Image,
    User,
    UserRole,
)
from resort.services.banquet_service import BanquetService


router = APIRouter(prefix="/banquets", tags=["banquets"])

admin_only = require_roles(UserRole.ADMIN)
staff_only = require_roles(*STAFF_ROLES)


class ImagePayload(BaseModel):
    url: str = Field(min_length=1)
    caption: Optional[str] = None


class BanquetRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    seating_capacity: int = Field(ge=1)
    images: list[ImagePayload] = Field(default_factory=list)


class BanquetUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    seating_capacity: Optional[int] = Field(default=None, ge=1)
    images: Optional[list[ImagePayload]] = None


class BanquetResponse(BaseModel):
    id: int
    name: str
    description: str
    seating_capacity: int
    images: list[ImagePayload]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, banquet: Banquet) -> "BanquetResponse":
        return cls(
            id=int(banquet.banquet_id),
            name=banquet.name,
            description=banquet.description,
            seating_capacity=banquet.seating_capacity,
            images=[ImagePayload(url=image.url, caption=image.caption) for image in banquet.images],
            created_at=banquet.created_at,
            updated_at=banquet.updated_at,
        )


class BanquetListResponse(BaseModel):
    results: int
    banquets: list[BanquetResponse]


class EventRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    type: EventType
    start_date: date
    end_date: date
    capacity: int = Field(ge=1)
    price: float = Field(default=0.0, ge=0.0)
    is_complimentary: bool = False
    requirements: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class EventStatusRequest(BaseModel):
    status: EventStatus


class EventResponse(BaseModel):
    id: int
    banquet_id: int
    title: str
    description: str
    type: EventType
    start_date: date
    end_date: date
    capacity: int
    price: float
    is_complimentary: bool
    status: EventStatus
    organizer_id: int
    requirements: list[str]
    tags: list[str]

    @classmethod
    def from_domain(cls, event: Event) -> "EventResponse":
        return cls(
            id=int(event.event_id),
            banquet_id=event.banquet_id,
            title=event.title,
            description=event.description,
            type=event.event_type,
            start_date=event.schedule.start,
            end_date=event.schedule.end,
            capacity=event.capacity,
            price=event.price,
            is_complimentary=event.is_complimentary,
            status=event.status,
            organizer_id=event.organizer_id,
            requirements=list(event.requirements),
            tags=list(event.tags),
        )


class EventListResponse(BaseModel):
    results: int
    events: list[EventResponse]


def _images(items: list[ImagePayload]) -> tuple[Image, ...]:
    return tuple(Image(url=item.url, caption=item.caption) for item in items)


@router.get("", response_model=BanquetListResponse)
async def list_banquets(
    service: BanquetService = Depends(get_banquet_service),
    _: User = Depends(get_current_user),
) -> BanquetListResponse:
    banquets = service.list_banquets()
    return BanquetListResponse(
        results=len(banquets),
        banquets=[BanquetResponse.from_domain(banquet) for banquet in banquets],
    )


@router.post("", response_model=BanquetResponse, status_code=status.HTTP_201_CREATED)
async def create_banquet(
    payload: BanquetRequest,
    service: BanquetService = Depends(get_banquet_service),
    _: User = Depends(admin_only),
) -> BanquetResponse:
    try:
        banquet = service.create_banquet(
            Banquet(
                banquet_id=None,
                name=payload.name,
                description=payload.description,
                seating_capacity=payload.seating_capacity,
                images=_images(payload.images),
            )
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BanquetResponse.from_domain(banquet)


@router.get("/{banquet_id}", response_model=BanquetResponse)
async def get_banquet(
    banquet_id: int,
    service: BanquetService = Depends(get_banquet_service),
    _: User = Depends(get_current_user),
) -> BanquetResponse:
    try:
        banquet = service.get_banquet(banquet_id)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BanquetResponse.from_domain(banquet)


@router.patch("/{banquet_id}", response_model=BanquetResponse)
async def update_banquet(
    banquet_id: int,
    payload: BanquetUpdateRequest,
    service: BanquetService = Depends(get_banquet_service),
    _: User = Depends(admin_only),
) -> BanquetResponse:
    changes: dict[str, object] = payload.model_dump(exclude_none=True, exclude={"images"})
    if payload.images is not None:
        changes["images"] = _images(payload.images)
    try:
        banquet = service.update_banquet(banquet_id, changes)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BanquetResponse.from_domain(banquet)


@router.delete("/{banquet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_banquet(
    banquet_id: int,
    service: BanquetService = Depends(get_banquet_service),
    _: User = Depends(admin_only),
) -> None:
    try:
        service.delete_banquet(banquet_id)
    except Exception as exc:
        raise to_http_exception(exc) from exc


@router.get("/{banquet_id}/events", response_model=EventListResponse)
async def list_banquet_events(
    banquet_id: int,
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    service: BanquetService = Depends(get_banquet_service),
    _: User = Depends(get_current_user),
) -> EventListResponse:
    try:
        events = service.list_events(banquet_id, status_filter)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return EventListResponse(
        results=len(events),
        events=[EventResponse.from_domain(event) for event in events],
    )


@router.post(
    "/{banquet_id}/events",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
)
async def schedule_event(
    banquet_id: int,
    payload: EventRequest,
    service: BanquetService = Depends(get_banquet_service),
    user: User = Depends(staff_only),
) -> EventResponse:
    try:
        event = service.schedule_event(
            banquet_id,
            Event(
                event_id=None,
                banquet_id=banquet_id,
                title=payload.title,
                description=payload.description,
                event_type=payload.type,
                schedule=parse_interval(payload.start_date, payload.end_date),
                capacity=payload.capacity,
                organizer_id=int(user.user_id),
                price=payload.price,
                is_complimentary=payload.is_complimentary,
                requirements=tuple(payload.requirements),
                tags=tuple(payload.tags),
            ),
            user,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return EventResponse.from_domain(event)


@router.patch("/{banquet_id}/events/{event_id}/status", response_model=EventResponse)
async def update_event_status(
    banquet_id: int,
    event_id: int,
    payload: EventStatusRequest,
    service: BanquetService = Depends(get_banquet_service),
    _: User = Depends(staff_only),
) -> EventResponse:
    try:
        event = service.update_event_status(banquet_id, event_id, payload.status)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return EventResponse.from_domain(event)
