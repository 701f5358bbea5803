"""Response DTOs shared by the room and booking controllers."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from resort.domain.models import (
    Booking,
    BookingStatus,
    Discount,
    DiscountType,
    MaintenanceStatus,
    MaintenanceType,
    MaintenanceWindow,
    PaymentStatus,
    Rating,
    Room,
    RoomStatus,
    RoomType,
    SeasonalPricing,
    UserRole,
    User,
)
from resort.domain.pricing import current_price
from resort.domain.ratings import average_rating
from resort.services.room_service import BulkResult


class SeasonalPricingResponse(BaseModel):
    id: Optional[int]
    start_date: date
    end_date: date
    price: float
    description: Optional[str] = None

    @classmethod
    def from_domain(cls, entry: SeasonalPricing) -> "SeasonalPricingResponse":
        return cls(
            id=entry.pricing_id,
            start_date=entry.interval.start,
            end_date=entry.interval.end,
            price=entry.price,
            description=entry.description,
        )


class DiscountResponse(BaseModel):
    id: Optional[int]
    type: DiscountType
    percentage: float
    valid_from: date
    valid_until: date
    minimum_stay: Optional[int] = None
    description: Optional[str] = None

    @classmethod
    def from_domain(cls, entry: Discount) -> "DiscountResponse":
        return cls(
            id=entry.discount_id,
            type=entry.discount_type,
            percentage=entry.percentage,
            valid_from=entry.validity.start,
            valid_until=entry.validity.end,
            minimum_stay=entry.minimum_stay,
            description=entry.description,
        )


class MaintenanceResponse(BaseModel):
    id: Optional[int]
    type: MaintenanceType
    start_date: date
    end_date: date
    status: MaintenanceStatus
    description: Optional[str] = None
    cost: float = 0.0
    performed_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, entry: MaintenanceWindow) -> "MaintenanceResponse":
        return cls(
            id=entry.maintenance_id,
            type=entry.maintenance_type,
            start_date=entry.interval.start,
            end_date=entry.interval.end,
            status=entry.status,
            description=entry.description,
            cost=entry.cost,
            performed_by=entry.performed_by,
            notes=entry.notes,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


class RatingResponse(BaseModel):
    id: Optional[int]
    guest_id: int
    score: int = Field(ge=1, le=5)
    review: Optional[str] = None
    rated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, rating: Rating) -> "RatingResponse":
        return cls(
            id=rating.rating_id,
            guest_id=rating.guest_id,
            score=rating.score,
            review=rating.review,
            rated_at=rating.rated_at,
        )


class RoomResponse(BaseModel):
    id: int
    room_number: str
    type: RoomType
    floor: int
    capacity_adults: int
    capacity_children: int
    price_per_night: float
    base_price: float
    current_price: float
    description: str
    status: RoomStatus
    amenities: list[str]
    special_features: list[str]
    seasonal_pricing: list[SeasonalPricingResponse]
    discounts: list[DiscountResponse]
    average_rating: float
    last_maintenance_date: Optional[date] = None
    is_active: bool

    @classmethod
    def from_domain(cls, room: Room, as_of: Optional[date] = None) -> "RoomResponse":
        return cls(
            id=int(room.room_id),
            room_number=room.room_number,
            type=room.room_type,
            floor=room.floor,
            capacity_adults=room.capacity_adults,
            capacity_children=room.capacity_children,
            price_per_night=room.price_per_night,
            base_price=room.base_price,
            current_price=current_price(room, as_of or date.today()),
            description=room.description,
            status=room.status,
            amenities=list(room.amenities),
            special_features=list(room.special_features),
            seasonal_pricing=[
                SeasonalPricingResponse.from_domain(entry) for entry in room.seasonal_pricing
            ],
            discounts=[DiscountResponse.from_domain(entry) for entry in room.discounts],
            average_rating=average_rating(room),
            last_maintenance_date=room.last_maintenance_date,
            is_active=room.is_active,
        )


class AddOnPayload(BaseModel):
    service: str = Field(min_length=1)
    price: float = Field(ge=0.0)
    quantity: int = Field(default=1, ge=1)


class BookingResponse(BaseModel):
    id: int
    room_id: int
    guest_id: int
    check_in: date
    check_out: date
    number_of_nights: int
    adults: int
    children: int
    total_price: float
    status: BookingStatus
    payment_status: PaymentStatus
    payment_method: Optional[str] = None
    paid_amount: Optional[float] = None
    paid_at: Optional[datetime] = None
    special_requests: list[str]
    add_ons: list[AddOnPayload]
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    refund_amount: Optional[float] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, booking: Booking) -> "BookingResponse":
        cancellation = booking.cancellation
        return cls(
            id=int(booking.booking_id),
            room_id=booking.room_id,
            guest_id=booking.guest_id,
            check_in=booking.stay.start,
            check_out=booking.stay.end,
            number_of_nights=booking.nights,
            adults=booking.adults,
            children=booking.children,
            total_price=booking.total_price,
            status=booking.status,
            payment_status=booking.payment_status,
            payment_method=booking.payment.method,
            paid_amount=booking.payment.paid_amount,
            paid_at=booking.payment.paid_at,
            special_requests=list(booking.special_requests),
            add_ons=[
                AddOnPayload(service=item.service, price=item.price, quantity=item.quantity)
                for item in booking.add_ons
            ],
            cancelled_at=cancellation.cancelled_at if cancellation else None,
            cancellation_reason=cancellation.reason if cancellation else None,
            refund_amount=cancellation.refund_amount if cancellation else None,
            created_at=booking.created_at,
        )


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
    phone_number: Optional[str] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=int(user.user_id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            phone_number=user.phone_number,
        )


class BulkFailure(BaseModel):
    room_id: int
    error: str


class BulkResponse(BaseModel):
    success: list[dict]
    failed: list[BulkFailure]

    @classmethod
    def from_result(cls, result: BulkResult) -> "BulkResponse":
        return cls(
            success=[
                {key: _to_jsonable(value) for key, value in item.items()}
                for item in result.success
            ],
            failed=[BulkFailure(**item) for item in result.failed],
        )


_DTO_BY_TYPE = {
    SeasonalPricing: SeasonalPricingResponse,
    Discount: DiscountResponse,
    MaintenanceWindow: MaintenanceResponse,
}


def _to_jsonable(value: object) -> object:
    dto = _DTO_BY_TYPE.get(type(value))
    if dto is not None:
        return dto.from_domain(value).model_dump(mode="json")
    return value
