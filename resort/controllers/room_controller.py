"""HTTP controller layer for the room inventory, availability and ratings."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from resort.controllers.dependencies import (
    get_current_user,
    get_room_service,
    require_roles,
    to_http_exception,
)
from resort.controllers.schemas import BulkResponse, RatingResponse, RoomResponse
from resort.domain.intervals import parse_interval
from resort.domain.models import Room, RoomStatus, RoomType, User, UserRole
from resort.services.room_service import RoomService


router = APIRouter(prefix="/rooms", tags=["rooms"])

admin_only = require_roles(UserRole.ADMIN)


class CreateRoomRequest(BaseModel):
    room_number: str = Field(min_length=1, max_length=20)
    type: RoomType = RoomType.STANDARD
    floor: int
    capacity_adults: int = Field(ge=1)
    capacity_children: int = Field(default=0, ge=0)
    price_per_night: float = Field(ge=0.0)
    base_price: float = Field(ge=0.0)
    description: str = Field(min_length=1)
    status: RoomStatus = RoomStatus.AVAILABLE
    amenities: list[str] = Field(default_factory=list)
    special_features: list[str] = Field(default_factory=list)


class UpdateRoomRequest(BaseModel):
    room_number: Optional[str] = Field(default=None, min_length=1, max_length=20)
    type: Optional[RoomType] = None
    floor: Optional[int] = None
    capacity_adults: Optional[int] = Field(default=None, ge=1)
    capacity_children: Optional[int] = Field(default=None, ge=0)
    price_per_night: Optional[float] = Field(default=None, ge=0.0)
    base_price: Optional[float] = Field(default=None, ge=0.0)
    description: Optional[str] = Field(default=None, min_length=1)
    status: Optional[RoomStatus] = None
    amenities: Optional[list[str]] = None
    special_features: Optional[list[str]] = None

    def to_changes(self) -> dict[str, object]:
        changes = self.model_dump(exclude_none=True)
        if "type" in changes:
            changes["room_type"] = changes.pop("type")
        return changes


class BulkRoomUpdate(UpdateRoomRequest):
    room_id: int = Field(gt=0)


class BulkUpdateRequest(BaseModel):
    updates: list[BulkRoomUpdate]


class BulkStatusRequest(BaseModel):
    rooms: list[int] = Field(min_length=1)
    status: RoomStatus


class RoomListResponse(BaseModel):
    results: int
    total: int
    page: int
    limit: int
    rooms: list[RoomResponse]


class AvailabilityResponse(BaseModel):
    room_id: int
    room_number: str
    available: bool
    conflicting_bookings: int = Field(ge=0)
    price_per_night: float = Field(ge=0.0)
    nights: int = Field(gt=0)


class PriceResponse(BaseModel):
    room_id: int
    as_of: date
    price: float = Field(ge=0.0)


class RatingRequest(BaseModel):
    score: int = Field(ge=1, le=5)
    review: Optional[str] = None


class RatingsResponse(BaseModel):
    ratings: list[RatingResponse]
    average_rating: float
    total_ratings: int


class AddRatingResponse(BaseModel):
    rating: RatingResponse
    average_rating: float


@router.get("", response_model=RoomListResponse)
async def list_rooms(
    type: Optional[RoomType] = Query(None),
    status_filter: Optional[RoomStatus] = Query(None, alias="status"),
    floor: Optional[int] = Query(None),
    min_price: Optional[float] = Query(None, ge=0.0),
    max_price: Optional[float] = Query(None, ge=0.0),
    check_in: Optional[date] = Query(None),
    check_out: Optional[date] = Query(None),
    sort: Optional[str] = Query(None, description="Comma separated, '-' prefix for descending"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    service: RoomService = Depends(get_room_service),
) -> RoomListResponse:
    """Public room search; `check_in`/`check_out` hide rooms that cannot take the stay."""
    try:
        stay = None
        if check_in is not None or check_out is not None:
            stay = parse_interval(
                check_in or "",
                check_out or "",
                start_field="check_in",
                end_field="check_out",
            )
        result = service.list_rooms(
            room_type=type,
            status=status_filter,
            floor=floor,
            min_price=min_price,
            max_price=max_price,
            stay=stay,
            sort=tuple(item.strip() for item in sort.split(",")) if sort else (),
            page=page,
            limit=limit,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return RoomListResponse(
        results=len(result.rooms),
        total=result.total,
        page=result.page,
        limit=result.limit,
        rooms=[RoomResponse.from_domain(room) for room in result.rooms],
    )


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    payload: CreateRoomRequest,
    service: RoomService = Depends(get_room_service),
    _: User = Depends(admin_only),
) -> RoomResponse:
    try:
        room = service.create_room(
            Room(
                room_id=None,
                room_number=payload.room_number,
                room_type=payload.type,
                floor=payload.floor,
                price_per_night=payload.price_per_night,
                base_price=payload.base_price,
                description=payload.description,
                capacity_adults=payload.capacity_adults,
                capacity_children=payload.capacity_children,
                status=payload.status,
                amenities=tuple(payload.amenities),
                special_features=tuple(payload.special_features),
            )
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return RoomResponse.from_domain(room)


@router.post("/bulk-update", response_model=BulkResponse)
async def bulk_update_rooms(
    payload: BulkUpdateRequest,
    service: RoomService = Depends(get_room_service),
    _: User = Depends(admin_only),
) -> BulkResponse:
    updates = []
    for item in payload.updates:
        changes = item.to_changes()
        changes.pop("room_id", None)
        updates.append((item.room_id, changes))
    return BulkResponse.from_result(service.bulk_update_rooms(updates))


@router.post("/bulk-status", response_model=BulkResponse)
async def bulk_update_status(
    payload: BulkStatusRequest,
    service: RoomService = Depends(get_room_service),
    _: User = Depends(admin_only),
) -> BulkResponse:
    return BulkResponse.from_result(service.bulk_update_status(payload.rooms, payload.status))


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: int,
    service: RoomService = Depends(get_room_service),
) -> RoomResponse:
    try:
        room = service.get_room(room_id)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return RoomResponse.from_domain(room)


@router.patch("/{room_id}", response_model=RoomResponse)
async def update_room(
    room_id: int,
    payload: UpdateRoomRequest,
    service: RoomService = Depends(get_room_service),
    _: User = Depends(admin_only),
) -> RoomResponse:
    try:
        room = service.update_room(room_id, payload.to_changes())
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return RoomResponse.from_domain(room)


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: int,
    service: RoomService = Depends(get_room_service),
    _: User = Depends(admin_only),
) -> None:
    try:
        service.deactivate_room(room_id)
    except Exception as exc:
        raise to_http_exception(exc) from exc


@router.get("/{room_id}/availability", response_model=AvailabilityResponse)
async def check_room_availability(
    room_id: int,
    check_in: date = Query(...),
    check_out: date = Query(...),
    service: RoomService = Depends(get_room_service),
) -> AvailabilityResponse:
    try:
        stay = parse_interval(check_in, check_out, start_field="check_in", end_field="check_out")
        result = service.check_availability(room_id, stay)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return AvailabilityResponse(**result)


@router.get("/{room_id}/price", response_model=PriceResponse)
async def get_room_price(
    room_id: int,
    on: Optional[date] = Query(None, alias="date"),
    nights: Optional[int] = Query(None, ge=1),
    service: RoomService = Depends(get_room_service),
) -> PriceResponse:
    """Effective nightly price on a date, after seasonal pricing and one discount."""
    as_of = on or date.today()
    try:
        price = service.price_for(room_id, as_of, nights)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return PriceResponse(room_id=room_id, as_of=as_of, price=price)


@router.get("/{room_id}/ratings", response_model=RatingsResponse)
async def get_room_ratings(
    room_id: int,
    service: RoomService = Depends(get_room_service),
    _: User = Depends(get_current_user),
) -> RatingsResponse:
    try:
        result = service.get_ratings(room_id)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return RatingsResponse(
        ratings=[RatingResponse.from_domain(item) for item in result["ratings"]],
        average_rating=result["average_rating"],
        total_ratings=result["total_ratings"],
    )


@router.post(
    "/{room_id}/ratings",
    response_model=AddRatingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_room_rating(
    room_id: int,
    payload: RatingRequest,
    service: RoomService = Depends(get_room_service),
    user: User = Depends(get_current_user),
) -> AddRatingResponse:
    try:
        rating, average = service.add_rating(
            room_id,
            int(user.user_id),
            payload.score,
            payload.review,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return AddRatingResponse(rating=RatingResponse.from_domain(rating), average_rating=average)
