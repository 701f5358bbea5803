"""Domain models for rooms, bookings and the people who touch them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from resort.domain.errors import ValidationError


class UserRole(str, Enum):
    GUEST = "guest"
    STAFF = "staff"
    MANAGER = "manager"
    ADMIN = "admin"


STAFF_ROLES = (UserRole.STAFF, UserRole.MANAGER, UserRole.ADMIN)
MANAGEMENT_ROLES = (UserRole.MANAGER, UserRole.ADMIN)


class RoomType(str, Enum):
    STANDARD = "standard"
    DELUXE = "deluxe"
    SUITE = "suite"
    PRESIDENTIAL = "presidential"


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    RESERVED = "reserved"
    OUT_OF_ORDER = "out-of-order"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    REFUNDED = "refunded"


class MaintenanceType(str, Enum):
    DEEP_CLEANING = "deep-cleaning"
    REPAIR = "repair"
    RENOVATION = "renovation"
    INSPECTION = "inspection"
    OTHER = "other"


class MaintenanceStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


BLOCKING_MAINTENANCE_STATUSES = frozenset(
    {MaintenanceStatus.SCHEDULED, MaintenanceStatus.IN_PROGRESS}
)


class DiscountType(str, Enum):
    EARLY_BIRD = "early-bird"
    LAST_MINUTE = "last-minute"
    LONG_STAY = "long-stay"
    SPECIAL = "special"


@dataclass(frozen=True)
class DateInterval:
    """Inclusive pair of dates; `start` must come strictly before `end`."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if not isinstance(self.start, date) or not isinstance(self.end, date):
            raise ValidationError("interval bounds must be dates")
        if self.start >= self.end:
            raise ValidationError(
                f"interval start {self.start.isoformat()} must be before end {self.end.isoformat()}"
            )

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def contains(self, moment: date) -> bool:
        return self.start <= moment <= self.end

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class SeasonalPricing:
    interval: DateInterval
    price: float
    description: str | None = None
    pricing_id: int | None = None


@dataclass(frozen=True)
class Discount:
    discount_type: DiscountType
    percentage: float
    validity: DateInterval
    minimum_stay: int | None = None
    description: str | None = None
    discount_id: int | None = None


@dataclass(frozen=True)
class MaintenanceWindow:
    maintenance_type: MaintenanceType
    interval: DateInterval
    status: MaintenanceStatus = MaintenanceStatus.SCHEDULED
    description: str | None = None
    cost: float = 0.0
    performed_by: str | None = None
    notes: str | None = None
    maintenance_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Rating:
    guest_id: int
    score: int
    review: str | None = None
    rated_at: datetime | None = None
    rating_id: int | None = None


@dataclass(frozen=True)
class Room:
    room_id: int | None
    room_number: str
    room_type: RoomType
    floor: int
    price_per_night: float
    base_price: float
    description: str
    capacity_adults: int = 1
    capacity_children: int = 0
    status: RoomStatus = RoomStatus.AVAILABLE
    amenities: tuple[str, ...] = ()
    special_features: tuple[str, ...] = ()
    seasonal_pricing: tuple[SeasonalPricing, ...] = ()
    discounts: tuple[Discount, ...] = ()
    maintenance: tuple[MaintenanceWindow, ...] = ()
    ratings: tuple[Rating, ...] = ()
    last_maintenance_date: date | None = None
    is_active: bool = True


@dataclass(frozen=True)
class AddOn:
    service: str
    price: float
    quantity: int = 1

    @property
    def total(self) -> float:
        return self.price * self.quantity


@dataclass(frozen=True)
class Cancellation:
    cancelled_at: datetime
    reason: str | None = None
    refund_amount: float | None = None


@dataclass(frozen=True)
class PaymentDetails:
    method: str | None = None
    transaction_id: str | None = None
    paid_amount: float | None = None
    paid_at: datetime | None = None


@dataclass(frozen=True)
class Booking:
    booking_id: int | None
    room_id: int
    guest_id: int
    stay: DateInterval
    total_price: float
    status: BookingStatus = BookingStatus.PENDING
    adults: int = 1
    children: int = 0
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment: PaymentDetails = field(default_factory=PaymentDetails)
    special_requests: tuple[str, ...] = ()
    add_ons: tuple[AddOn, ...] = ()
    cancellation: Cancellation | None = None
    created_at: datetime | None = None

    @property
    def nights(self) -> int:
        return self.stay.days

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED


@dataclass(frozen=True)
class User:
    user_id: int | None
    email: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.GUEST
    phone_number: str | None = None
    password_hash: str = ""
    is_active: bool = True


class EventType(str, Enum):
    ENTERTAINMENT = "entertainment"
    SPORTS = "sports"
    DINING = "dining"
    WORKSHOP = "workshop"
    CULTURAL = "cultural"
    KIDS = "kids"
    OTHER = "other"


class EventStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Image:
    url: str
    caption: str | None = None


@dataclass(frozen=True)
class Banquet:
    banquet_id: int | None
    name: str
    description: str
    seating_capacity: int
    images: tuple[Image, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Event:
    """An event held in a banquet hall over `schedule`."""

    event_id: int | None
    banquet_id: int
    title: str
    description: str
    event_type: EventType
    schedule: DateInterval
    capacity: int
    organizer_id: int
    price: float = 0.0
    is_complimentary: bool = False
    status: EventStatus = EventStatus.SCHEDULED
    requirements: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    created_at: datetime | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == EventStatus.CANCELLED
