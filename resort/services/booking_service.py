"""Booking lifecycle: creation, ownership, status transitions and payments."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from threading import RLock
from typing import Iterable, Optional

from resort.domain.availability import blocking_maintenance, conflicting_bookings
from resort.domain.constraints import validate_price
from resort.domain.errors import ConflictError, NotFoundError, ValidationError
from resort.domain.models import (
    STAFF_ROLES,
    AddOn,
    Booking,
    BookingStatus,
    Cancellation,
    DateInterval,
    PaymentDetails,
    PaymentStatus,
    Room,
    RoomStatus,
    User,
)
from resort.domain.pricing import quote_stay
from resort.repository.data_repository import DataRepository
from resort.services.auth_service import PermissionDeniedError
from resort.utils.config import Settings, get_settings
from resort.utils.logger import get_logger


logger = get_logger(__name__)


ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def add_ons_total(add_ons: Iterable[AddOn]) -> float:
    return sum(item.total for item in add_ons)


class BookingService:
    """Guests book and manage their own stays; staff manage everyone's."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        write_lock: Optional[RLock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._write_lock = write_lock or RLock()

    def _load_room(self, room_id: int) -> Room:
        room = self._repository.get_room(room_id)
        if room is None or not room.is_active:
            raise NotFoundError("Room not found")
        return room

    def _load_booking(self, booking_id: int) -> Booking:
        booking = self._repository.get_booking(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    @staticmethod
    def _ensure_access(user: User, booking: Booking) -> None:
        if booking.guest_id != user.user_id and user.role not in STAFF_ROLES:
            raise PermissionDeniedError(
                "You do not have permission to perform this action on this booking"
            )

    def _ensure_bookable(
        self,
        room: Room,
        stay: DateInterval,
        adults: int,
        children: int,
        exclude_booking_id: Optional[int] = None,
    ) -> None:
        if adults < 1:
            raise ValidationError("At least one adult guest is required")
        if adults > room.capacity_adults or children > room.capacity_children:
            raise ValidationError(
                f"Room {room.room_number} sleeps {room.capacity_adults} adults "
                f"and {room.capacity_children} children"
            )
        if room.status == RoomStatus.OUT_OF_ORDER:
            raise ConflictError(f"Room {room.room_number} is out of order")
        bookings = [
            booking
            for booking in self._repository.list_active_bookings_touching(
                stay,
                room_ids=[int(room.room_id)],
            )
            if booking.booking_id != exclude_booking_id
        ]
        if conflicting_bookings(room.room_id, stay, bookings):
            raise ConflictError(f"Room {room.room_number} is already booked for these dates")
        if blocking_maintenance(room, stay):
            raise ConflictError(f"Room {room.room_number} is under maintenance for these dates")

    def create_booking(
        self,
        guest: User,
        room_id: int,
        stay: DateInterval,
        *,
        adults: int = 1,
        children: int = 0,
        special_requests: Iterable[str] = (),
        add_ons: Iterable[AddOn] = (),
    ) -> Booking:
        add_on_items = tuple(add_ons)
        for item in add_on_items:
            validate_price(item.price, "add-on price")
        with self._write_lock:
            room = self._load_room(room_id)
            self._ensure_bookable(room, stay, adults, children)
            total_price = round(quote_stay(room, stay) + add_ons_total(add_on_items), 2)
            booking = self._repository.create_booking(
                Booking(
                    booking_id=None,
                    room_id=room_id,
                    guest_id=int(guest.user_id),
                    stay=stay,
                    total_price=total_price,
                    adults=adults,
                    children=children,
                    special_requests=tuple(special_requests),
                    add_ons=add_on_items,
                )
            )
        logger.info(
            "Guest %s booked room %s for %s nights",
            guest.user_id,
            room.room_number,
            stay.days,
        )
        return booking

    def list_bookings(
        self,
        user: User,
        *,
        status: Optional[BookingStatus] = None,
        guest_id: Optional[int] = None,
        room_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[Booking]:
        if user.role not in STAFF_ROLES:
            guest_id = user.user_id
        return self._repository.list_bookings(
            status=status,
            guest_id=guest_id,
            room_id=room_id,
            start=start,
            end=end,
        )

    def get_booking(self, user: User, booking_id: int) -> Booking:
        booking = self._load_booking(booking_id)
        self._ensure_access(user, booking)
        return booking

    def update_booking(
        self,
        user: User,
        booking_id: int,
        *,
        stay: Optional[DateInterval] = None,
        adults: Optional[int] = None,
        children: Optional[int] = None,
    ) -> Booking:
        """Change dates or party size, re-checking conflicts and repricing."""
        with self._write_lock:
            booking = self.get_booking(user, booking_id)
            if booking.status not in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
                raise ValidationError(f"A {booking.status.value} booking cannot be modified")
            room = self._load_room(booking.room_id)
            new_stay = stay or booking.stay
            new_adults = adults if adults is not None else booking.adults
            new_children = children if children is not None else booking.children
            self._ensure_bookable(
                room,
                new_stay,
                new_adults,
                new_children,
                exclude_booking_id=booking_id,
            )
            total_price = booking.total_price
            if stay is not None:
                total_price = round(quote_stay(room, new_stay) + add_ons_total(booking.add_ons), 2)
            updated = self._repository.save_booking(
                replace(
                    booking,
                    stay=new_stay,
                    adults=new_adults,
                    children=new_children,
                    total_price=total_price,
                )
            )
        logger.info("Booking %s updated", booking_id)
        return updated

    def update_status(self, booking_id: int, status: BookingStatus) -> Booking:
        with self._write_lock:
            booking = self._load_booking(booking_id)
            if status == booking.status:
                return booking
            if status not in ALLOWED_TRANSITIONS[booking.status]:
                raise ConflictError(
                    f"Cannot move booking from {booking.status.value} to {status.value}"
                )
            changes: dict[str, object] = {"status": status}
            if status == BookingStatus.CANCELLED:
                changes["cancellation"] = Cancellation(cancelled_at=datetime.now(timezone.utc))
            updated = self._repository.save_booking(replace(booking, **changes))
        logger.info("Booking status updated to %s for ID: %s", status.value, booking_id)
        return updated

    def cancel_booking(
        self,
        user: User,
        booking_id: int,
        reason: Optional[str] = None,
        refund_amount: Optional[float] = None,
    ) -> Booking:
        if refund_amount is not None:
            validate_price(refund_amount, "refund_amount")
        with self._write_lock:
            booking = self.get_booking(user, booking_id)
            if BookingStatus.CANCELLED not in ALLOWED_TRANSITIONS[booking.status]:
                raise ConflictError(f"A {booking.status.value} booking cannot be cancelled")
            updated = self._repository.save_booking(
                replace(
                    booking,
                    status=BookingStatus.CANCELLED,
                    cancellation=Cancellation(
                        cancelled_at=datetime.now(timezone.utc),
                        reason=reason,
                        refund_amount=refund_amount,
                    ),
                )
            )
        logger.info("Booking cancelled with ID: %s", booking_id)
        return updated

    def update_payment(
        self,
        booking_id: int,
        payment_status: PaymentStatus,
        method: Optional[str] = None,
        transaction_id: Optional[str] = None,
        paid_amount: Optional[float] = None,
    ) -> Booking:
        if paid_amount is not None:
            validate_price(paid_amount, "paid_amount")
        with self._write_lock:
            booking = self._load_booking(booking_id)
            updated = self._repository.save_booking(
                replace(
                    booking,
                    payment_status=payment_status,
                    payment=PaymentDetails(
                        method=method,
                        transaction_id=transaction_id,
                        paid_amount=paid_amount,
                        paid_at=datetime.now(timezone.utc),
                    ),
                )
            )
        logger.info("Payment updated for booking ID: %s", booking_id)
        return updated

    def add_special_requests(self, user: User, booking_id: int, requests: Iterable[str]) -> Booking:
        with self._write_lock:
            booking = self.get_booking(user, booking_id)
            return self._repository.save_booking(
                replace(booking, special_requests=booking.special_requests + tuple(requests))
            )

    def add_add_ons(self, user: User, booking_id: int, add_ons: Iterable[AddOn]) -> Booking:
        items = tuple(add_ons)
        for item in items:
            validate_price(item.price, "add-on price")
        with self._write_lock:
            booking = self.get_booking(user, booking_id)
            if booking.is_cancelled:
                raise ConflictError("Cannot add services to a cancelled booking")
            updated = self._repository.save_booking(
                replace(
                    booking,
                    add_ons=booking.add_ons + items,
                    total_price=round(booking.total_price + add_ons_total(items), 2),
                )
            )
        logger.info("Add-ons added to booking ID: %s", booking_id)
        return updated
