"""Booking endpoints for guests and front-desk staff."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from resort.controllers.dependencies import (
    get_booking_service,
    get_current_user,
    require_roles,
    to_http_exception,
)
from resort.controllers.schemas import AddOnPayload, BookingResponse
from resort.domain.intervals import parse_interval, parse_optional_interval
from resort.domain.models import STAFF_ROLES, AddOn, BookingStatus, PaymentStatus, User
from resort.services.booking_service import BookingService


router = APIRouter(prefix="/bookings", tags=["bookings"])

staff_only = require_roles(*STAFF_ROLES)


class CreateBookingRequest(BaseModel):
    room_id: int = Field(gt=0)
    check_in: date
    check_out: date
    adults: int = Field(default=1, ge=1)
    children: int = Field(default=0, ge=0)
    special_requests: list[str] = Field(default_factory=list)
    add_ons: list[AddOnPayload] = Field(default_factory=list)


class UpdateBookingRequest(BaseModel):
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    adults: Optional[int] = Field(default=None, ge=1)
    children: Optional[int] = Field(default=None, ge=0)


class StatusRequest(BaseModel):
    status: BookingStatus


class CancelRequest(BaseModel):
    reason: Optional[str] = None
    refund_amount: Optional[float] = Field(default=None, ge=0.0)


class PaymentRequest(BaseModel):
    payment_status: PaymentStatus
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    paid_amount: Optional[float] = Field(default=None, ge=0.0)


class SpecialRequestsRequest(BaseModel):
    special_requests: list[str] = Field(min_length=1)


class AddOnsRequest(BaseModel):
    add_ons: list[AddOnPayload] = Field(min_length=1)


class BookingListResponse(BaseModel):
    results: int
    bookings: list[BookingResponse]


def _to_add_ons(items: list[AddOnPayload]) -> list[AddOn]:
    return [AddOn(service=item.service, price=item.price, quantity=item.quantity) for item in items]


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    guest_id: Optional[int] = Query(None),
    room_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> BookingListResponse:
    """Staff see every booking; guests only their own."""
    bookings = service.list_bookings(
        user,
        status=status_filter,
        guest_id=guest_id,
        room_id=room_id,
        start=start_date,
        end=end_date,
    )
    return BookingListResponse(
        results=len(bookings),
        bookings=[BookingResponse.from_domain(booking) for booking in bookings],
    )


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> BookingResponse:
    try:
        booking = service.create_booking(
            user,
            payload.room_id,
            parse_interval(
                payload.check_in,
                payload.check_out,
                start_field="check_in",
                end_field="check_out",
            ),
            adults=payload.adults,
            children=payload.children,
            special_requests=payload.special_requests,
            add_ons=_to_add_ons(payload.add_ons),
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BookingResponse.from_domain(booking)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> BookingResponse:
    try:
        booking = service.get_booking(user, booking_id)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BookingResponse.from_domain(booking)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: int,
    payload: UpdateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> BookingResponse:
    try:
        booking = service.update_booking(
            user,
            booking_id,
            stay=parse_optional_interval(
                payload.check_in,
                payload.check_out,
                start_field="check_in",
                end_field="check_out",
            ),
            adults=payload.adults,
            children=payload.children,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BookingResponse.from_domain(booking)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: int,
    payload: StatusRequest,
    service: BookingService = Depends(get_booking_service),
    _: User = Depends(staff_only),
) -> BookingResponse:
    try:
        booking = service.update_status(booking_id, payload.status)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BookingResponse.from_domain(booking)


@router.patch("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    payload: Optional[CancelRequest] = None,
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> BookingResponse:
    request = payload or CancelRequest()
    try:
        booking = service.cancel_booking(
            user,
            booking_id,
            reason=request.reason,
            refund_amount=request.refund_amount,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BookingResponse.from_domain(booking)


@router.patch("/{booking_id}/payment", response_model=BookingResponse)
async def update_payment(
    booking_id: int,
    payload: PaymentRequest,
    service: BookingService = Depends(get_booking_service),
    _: User = Depends(staff_only),
) -> BookingResponse:
    try:
        booking = service.update_payment(
            booking_id,
            payload.payment_status,
            method=payload.payment_method,
            transaction_id=payload.transaction_id,
            paid_amount=payload.paid_amount,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BookingResponse.from_domain(booking)


@router.patch("/{booking_id}/special-requests", response_model=BookingResponse)
async def add_special_requests(
    booking_id: int,
    payload: SpecialRequestsRequest,
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> BookingResponse:
    try:
        booking = service.add_special_requests(user, booking_id, payload.special_requests)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BookingResponse.from_domain(booking)


@router.patch("/{booking_id}/add-ons", response_model=BookingResponse)
async def add_add_ons(
    booking_id: int,
    payload: AddOnsRequest,
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> BookingResponse:
    try:
        booking = service.add_add_ons(user, booking_id, _to_add_ons(payload.add_ons))
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BookingResponse.from_domain(booking)
