"""Repository layer responsible for all database access.

Rooms are stored as documents split over several tables: the room row and
the entries it owns (seasonal pricing, discounts, maintenance records and
ratings). `get_room` always loads the full document and `save_room` writes
it back with a whole-document replace of the owned entries, so callers
never see a half-populated room.
"""

from __future__ import annotations

import json
import random
import sqlite3
from dataclasses import replace
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from resort.domain.errors import ConflictError
from resort.domain.models import (
    AddOn,
    Banquet,
    Booking,
    BookingStatus,
    Cancellation,
    DateInterval,
    Discount,
    DiscountType,
    Event,
    EventStatus,
    EventType,
    Image,
    MaintenanceStatus,
    MaintenanceType,
    MaintenanceWindow,
    PaymentDetails,
    PaymentStatus,
    Rating,
    Room,
    RoomStatus,
    RoomType,
    SeasonalPricing,
    User,
    UserRole,
)
from resort.utils.config import Settings, get_settings
from resort.utils.logger import get_logger


logger = get_logger(__name__)


ROOM_SORT_COLUMNS = {
    "price_per_night": "price_per_night",
    "room_number": "room_number",
    "floor": "floor",
    "type": "room_type",
    "created_at": "created_at",
}


def _iso(value: date | datetime | None) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _to_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _to_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Users (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        email TEXT NOT NULL UNIQUE,
                        first_name TEXT NOT NULL,
                        last_name TEXT NOT NULL,
                        role TEXT NOT NULL DEFAULT 'guest',
                        phone_number TEXT,
                        password_hash TEXT NOT NULL,
                        is_active INTEGER NOT NULL DEFAULT 1,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Rooms (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        room_number TEXT NOT NULL UNIQUE,
                        room_type TEXT NOT NULL,
                        floor INTEGER NOT NULL,
                        capacity_adults INTEGER NOT NULL CHECK (capacity_adults > 0),
                        capacity_children INTEGER NOT NULL DEFAULT 0,
                        price_per_night REAL NOT NULL CHECK (price_per_night >= 0),
                        base_price REAL NOT NULL CHECK (base_price >= 0),
                        description TEXT NOT NULL,
                        status TEXT NOT NULL DEFAULT 'available',
                        amenities TEXT NOT NULL DEFAULT '[]',
                        special_features TEXT NOT NULL DEFAULT '[]',
                        last_maintenance_date TEXT,
                        is_active INTEGER NOT NULL DEFAULT 1,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS SeasonalPricing (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        room_id INTEGER NOT NULL,
                        start_date TEXT NOT NULL,
                        end_date TEXT NOT NULL,
                        price REAL NOT NULL,
                        description TEXT,
                        position INTEGER NOT NULL,
                        FOREIGN KEY (room_id) REFERENCES Rooms(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Discounts (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        room_id INTEGER NOT NULL,
                        discount_type TEXT NOT NULL,
                        percentage REAL NOT NULL,
                        valid_from TEXT NOT NULL,
                        valid_until TEXT NOT NULL,
                        minimum_stay INTEGER,
                        description TEXT,
                        position INTEGER NOT NULL,
                        FOREIGN KEY (room_id) REFERENCES Rooms(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS MaintenanceRecords (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        room_id INTEGER NOT NULL,
                        maintenance_type TEXT NOT NULL,
                        start_date TEXT NOT NULL,
                        end_date TEXT NOT NULL,
                        status TEXT NOT NULL DEFAULT 'scheduled',
                        description TEXT,
                        cost REAL NOT NULL DEFAULT 0,
                        performed_by TEXT,
                        notes TEXT,
                        created_at TEXT,
                        updated_at TEXT,
                        FOREIGN KEY (room_id) REFERENCES Rooms(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Ratings (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        room_id INTEGER NOT NULL,
                        guest_id INTEGER NOT NULL,
                        score INTEGER NOT NULL CHECK (score BETWEEN 1 AND 5),
                        review TEXT,
                        rated_at TEXT,
                        FOREIGN KEY (room_id) REFERENCES Rooms(id),
                        FOREIGN KEY (guest_id) REFERENCES Users(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Bookings (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        room_id INTEGER NOT NULL,
                        guest_id INTEGER NOT NULL,
                        check_in TEXT NOT NULL,
                        check_out TEXT NOT NULL,
                        adults INTEGER NOT NULL CHECK (adults > 0),
                        children INTEGER NOT NULL DEFAULT 0,
                        total_price REAL NOT NULL,
                        status TEXT NOT NULL DEFAULT 'pending',
                        payment_status TEXT NOT NULL DEFAULT 'pending',
                        payment_details TEXT NOT NULL DEFAULT '{}',
                        special_requests TEXT NOT NULL DEFAULT '[]',
                        add_ons TEXT NOT NULL DEFAULT '[]',
                        cancelled_at TEXT,
                        cancellation_reason TEXT,
                        refund_amount REAL,
                        created_at TEXT,
                        FOREIGN KEY (room_id) REFERENCES Rooms(id),
                        FOREIGN KEY (guest_id) REFERENCES Users(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Banquets (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        description TEXT NOT NULL,
                        seating_capacity INTEGER NOT NULL CHECK (seating_capacity > 0),
                        images TEXT NOT NULL DEFAULT '[]',
                        created_at TEXT,
                        updated_at TEXT
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Events (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        banquet_id INTEGER NOT NULL,
                        title TEXT NOT NULL,
                        description TEXT NOT NULL,
                        event_type TEXT NOT NULL,
                        start_date TEXT NOT NULL,
                        end_date TEXT NOT NULL,
                        capacity INTEGER NOT NULL CHECK (capacity > 0),
                        price REAL NOT NULL DEFAULT 0,
                        is_complimentary INTEGER NOT NULL DEFAULT 0,
                        status TEXT NOT NULL DEFAULT 'scheduled',
                        organizer_id INTEGER NOT NULL,
                        requirements TEXT NOT NULL DEFAULT '[]',
                        tags TEXT NOT NULL DEFAULT '[]',
                        created_at TEXT,
                        FOREIGN KEY (banquet_id) REFERENCES Banquets(id) ON DELETE CASCADE,
                        FOREIGN KEY (organizer_id) REFERENCES Users(id)
                    );
                    """
                )

                cursor.execute(
                    "CREATE INDEX IF NOT EXISTS idx_rooms_type_status ON Rooms(room_type, status);"
                )
                cursor.execute(
                    "CREATE INDEX IF NOT EXISTS idx_events_banquet_dates "
                    "ON Events(banquet_id, start_date);"
                )
                cursor.execute(
                    "CREATE INDEX IF NOT EXISTS idx_bookings_room_dates "
                    "ON Bookings(room_id, check_in, check_out);"
                )
                cursor.execute(
                    "CREATE INDEX IF NOT EXISTS idx_bookings_guest ON Bookings(guest_id, check_in);"
                )
                cursor.execute(
                    "CREATE INDEX IF NOT EXISTS idx_seasonal_room ON SeasonalPricing(room_id, position);"
                )
                cursor.execute(
                    "CREATE INDEX IF NOT EXISTS idx_discounts_room ON Discounts(room_id, position);"
                )
                cursor.execute(
                    "CREATE INDEX IF NOT EXISTS idx_maintenance_room ON MaintenanceRecords(room_id);"
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_demo_rooms(self) -> int:
        """Seed a small deterministic room inventory only when Rooms is empty."""
        rng = random.Random(self._settings.demo_random_seed)
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM Rooms;")
            if int(cursor.fetchone()["count"]) > 0:
                logger.info("Room inventory already present; skipping seed")
                return 0

        layout = [
            (RoomType.STANDARD, 120.0, 2, 1, ("wifi", "tv", "ac", "shower")),
            (RoomType.DELUXE, 180.0, 2, 2, ("wifi", "tv", "ac", "minibar", "balcony")),
            (RoomType.SUITE, 320.0, 4, 2, ("wifi", "tv", "ac", "minibar", "bathtub", "safe")),
            (RoomType.PRESIDENTIAL, 750.0, 4, 2, (
                "wifi", "tv", "ac", "minibar", "bathtub", "safe",
                "complimentary breakfast", "complimentary drinks",
            )),
        ]
        created = 0
        for floor in range(1, 4):
            for offset, (room_type, price, adults, children, amenities) in enumerate(layout):
                nightly = round(price * rng.uniform(0.95, 1.1), 2)
                self.create_room(
                    Room(
                        room_id=None,
                        room_number=f"{floor}{offset + 1:02d}",
                        room_type=room_type,
                        floor=floor,
                        price_per_night=nightly,
                        base_price=price,
                        description=f"{room_type.value.title()} room on floor {floor}",
                        capacity_adults=adults,
                        capacity_children=children,
                        amenities=amenities,
                    )
                )
                created += 1
        logger.info("Seeded %s demo rooms", created)
        return created

    # --- Users ---

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            user_id=int(row["id"]),
            email=str(row["email"]),
            first_name=str(row["first_name"]),
            last_name=str(row["last_name"]),
            role=UserRole(row["role"]),
            phone_number=row["phone_number"],
            password_hash=str(row["password_hash"]),
            is_active=bool(row["is_active"]),
        )

    def create_user(self, user: User) -> User:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO Users (
                        email, first_name, last_name, role, phone_number, password_hash, is_active
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        user.email,
                        user.first_name,
                        user.last_name,
                        user.role.value,
                        user.phone_number,
                        user.password_hash,
                        int(user.is_active),
                    ),
                )
                conn.commit()
                return replace(user, user_id=int(cursor.lastrowid))
        except sqlite3.IntegrityError as exc:
            raise ConflictError("Email already registered") from exc

    def get_user(self, user_id: int) -> Optional[User]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM Users WHERE id = ?;", (user_id,))
            row = cursor.fetchone()
            return self._row_to_user(row) if row is not None else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM Users WHERE email = ? COLLATE NOCASE;", (email,))
            row = cursor.fetchone()
            return self._row_to_user(row) if row is not None else None

    # --- Rooms ---

    def _load_room(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Room:
        room_id = int(row["id"])
        cursor = conn.cursor()

        cursor.execute(
            "SELECT * FROM SeasonalPricing WHERE room_id = ? ORDER BY position ASC, id ASC;",
            (room_id,),
        )
        seasonal = tuple(
            SeasonalPricing(
                interval=DateInterval(
                    start=date.fromisoformat(item["start_date"]),
                    end=date.fromisoformat(item["end_date"]),
                ),
                price=float(item["price"]),
                description=item["description"],
                pricing_id=int(item["id"]),
            )
            for item in cursor.fetchall()
        )

        cursor.execute(
            "SELECT * FROM Discounts WHERE room_id = ? ORDER BY position ASC, id ASC;",
            (room_id,),
        )
        discounts = tuple(
            Discount(
                discount_type=DiscountType(item["discount_type"]),
                percentage=float(item["percentage"]),
                validity=DateInterval(
                    start=date.fromisoformat(item["valid_from"]),
                    end=date.fromisoformat(item["valid_until"]),
                ),
                minimum_stay=item["minimum_stay"],
                description=item["description"],
                discount_id=int(item["id"]),
            )
            for item in cursor.fetchall()
        )

        cursor.execute(
            "SELECT * FROM MaintenanceRecords WHERE room_id = ? ORDER BY id ASC;",
            (room_id,),
        )
        maintenance = tuple(
            MaintenanceWindow(
                maintenance_type=MaintenanceType(item["maintenance_type"]),
                interval=DateInterval(
                    start=date.fromisoformat(item["start_date"]),
                    end=date.fromisoformat(item["end_date"]),
                ),
                status=MaintenanceStatus(item["status"]),
                description=item["description"],
                cost=float(item["cost"]),
                performed_by=item["performed_by"],
                notes=item["notes"],
                maintenance_id=int(item["id"]),
                created_at=_to_datetime(item["created_at"]),
                updated_at=_to_datetime(item["updated_at"]),
            )
            for item in cursor.fetchall()
        )

        cursor.execute("SELECT * FROM Ratings WHERE room_id = ? ORDER BY id ASC;", (room_id,))
        ratings = tuple(
            Rating(
                guest_id=int(item["guest_id"]),
                score=int(item["score"]),
                review=item["review"],
                rated_at=_to_datetime(item["rated_at"]),
                rating_id=int(item["id"]),
            )
            for item in cursor.fetchall()
        )

        return Room(
            room_id=room_id,
            room_number=str(row["room_number"]),
            room_type=RoomType(row["room_type"]),
            floor=int(row["floor"]),
            price_per_night=float(row["price_per_night"]),
            base_price=float(row["base_price"]),
            description=str(row["description"]),
            capacity_adults=int(row["capacity_adults"]),
            capacity_children=int(row["capacity_children"]),
            status=RoomStatus(row["status"]),
            amenities=tuple(json.loads(row["amenities"])),
            special_features=tuple(json.loads(row["special_features"])),
            seasonal_pricing=seasonal,
            discounts=discounts,
            maintenance=maintenance,
            ratings=ratings,
            last_maintenance_date=_to_date(row["last_maintenance_date"]),
            is_active=bool(row["is_active"]),
        )

    def _write_owned_entries(self, cursor: sqlite3.Cursor, room: Room) -> None:
        room_id = room.room_id
        for table in ("SeasonalPricing", "Discounts", "MaintenanceRecords", "Ratings"):
            cursor.execute(f"DELETE FROM {table} WHERE room_id = ?;", (room_id,))

        cursor.executemany(
            """
            INSERT INTO SeasonalPricing (id, room_id, start_date, end_date, price, description, position)
            VALUES (?, ?, ?, ?, ?, ?, ?);
            """,
            [
                (
                    entry.pricing_id,
                    room_id,
                    entry.interval.start.isoformat(),
                    entry.interval.end.isoformat(),
                    entry.price,
                    entry.description,
                    position,
                )
                for position, entry in enumerate(room.seasonal_pricing)
            ],
        )
        cursor.executemany(
            """
            INSERT INTO Discounts (
                id, room_id, discount_type, percentage, valid_from, valid_until,
                minimum_stay, description, position
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            [
                (
                    entry.discount_id,
                    room_id,
                    entry.discount_type.value,
                    entry.percentage,
                    entry.validity.start.isoformat(),
                    entry.validity.end.isoformat(),
                    entry.minimum_stay,
                    entry.description,
                    position,
                )
                for position, entry in enumerate(room.discounts)
            ],
        )
        cursor.executemany(
            """
            INSERT INTO MaintenanceRecords (
                id, room_id, maintenance_type, start_date, end_date, status,
                description, cost, performed_by, notes, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            [
                (
                    entry.maintenance_id,
                    room_id,
                    entry.maintenance_type.value,
                    entry.interval.start.isoformat(),
                    entry.interval.end.isoformat(),
                    entry.status.value,
                    entry.description,
                    entry.cost,
                    entry.performed_by,
                    entry.notes,
                    _iso(entry.created_at) or _now(),
                    _iso(entry.updated_at) or _now(),
                )
                for entry in room.maintenance
            ],
        )
        cursor.executemany(
            """
            INSERT INTO Ratings (id, room_id, guest_id, score, review, rated_at)
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            [
                (
                    entry.rating_id,
                    room_id,
                    entry.guest_id,
                    entry.score,
                    entry.review,
                    _iso(entry.rated_at) or _now(),
                )
                for entry in room.ratings
            ],
        )

    def create_room(self, room: Room) -> Room:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO Rooms (
                        room_number, room_type, floor, capacity_adults, capacity_children,
                        price_per_night, base_price, description, status, amenities,
                        special_features, last_maintenance_date, is_active
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        room.room_number,
                        room.room_type.value,
                        room.floor,
                        room.capacity_adults,
                        room.capacity_children,
                        room.price_per_night,
                        room.base_price,
                        room.description,
                        room.status.value,
                        json.dumps(list(room.amenities)),
                        json.dumps(list(room.special_features)),
                        _iso(room.last_maintenance_date),
                        int(room.is_active),
                    ),
                )
                stored = replace(room, room_id=int(cursor.lastrowid))
                self._write_owned_entries(cursor, stored)
                conn.commit()
        except sqlite3.IntegrityError as exc:
            raise ConflictError(f"Room number {room.room_number} already exists") from exc
        logger.info("Room %s created with id %s", stored.room_number, stored.room_id)
        return self.get_room(int(stored.room_id))  # type: ignore[return-value]

    def get_room(self, room_id: int) -> Optional[Room]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM Rooms WHERE id = ?;", (room_id,))
            row = cursor.fetchone()
            if row is None:
                return None
            return self._load_room(conn, row)

    def list_rooms(
        self,
        *,
        room_type: Optional[RoomType] = None,
        status: Optional[RoomStatus] = None,
        floor: Optional[int] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        active_only: bool = True,
        sort: Sequence[str] = (),
    ) -> List[Room]:
        """Filter and sort rooms; `sort` entries use a leading '-' for descending."""
        clauses: list[str] = []
        params: list[object] = []
        if active_only:
            clauses.append("is_active = 1")
        if room_type is not None:
            clauses.append("room_type = ?")
            params.append(room_type.value)
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if floor is not None:
            clauses.append("floor = ?")
            params.append(floor)
        if min_price is not None:
            clauses.append("price_per_night >= ?")
            params.append(min_price)
        if max_price is not None:
            clauses.append("price_per_night <= ?")
            params.append(max_price)

        order_terms: list[str] = []
        for key in sort:
            descending = key.startswith("-")
            column = ROOM_SORT_COLUMNS.get(key.lstrip("-"))
            if column is None:
                continue
            order_terms.append(f"{column} {'DESC' if descending else 'ASC'}")
        order_terms.append("id DESC" if not sort else "id ASC")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT * FROM Rooms {where} ORDER BY {', '.join(order_terms)};",
                tuple(params),
            )
            return [self._load_room(conn, row) for row in cursor.fetchall()]

    def save_room(self, room: Room) -> Room:
        """Replace the stored room document, owned entries included."""
        if room.room_id is None:
            raise ValueError("save_room requires a persisted room")
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    UPDATE Rooms
                    SET room_number = ?, room_type = ?, floor = ?, capacity_adults = ?,
                        capacity_children = ?, price_per_night = ?, base_price = ?,
                        description = ?, status = ?, amenities = ?, special_features = ?,
                        last_maintenance_date = ?, is_active = ?
                    WHERE id = ?;
                    """,
                    (
                        room.room_number,
                        room.room_type.value,
                        room.floor,
                        room.capacity_adults,
                        room.capacity_children,
                        room.price_per_night,
                        room.base_price,
                        room.description,
                        room.status.value,
                        json.dumps(list(room.amenities)),
                        json.dumps(list(room.special_features)),
                        _iso(room.last_maintenance_date),
                        int(room.is_active),
                        room.room_id,
                    ),
                )
                self._write_owned_entries(cursor, room)
                conn.commit()
        except sqlite3.IntegrityError as exc:
            raise ConflictError(f"Room number {room.room_number} already exists") from exc
        return self.get_room(room.room_id)  # type: ignore[return-value]

    def count_rooms(self, room_type: Optional[RoomType] = None) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            if room_type is None:
                cursor.execute("SELECT COUNT(*) AS count FROM Rooms WHERE is_active = 1;")
            else:
                cursor.execute(
                    "SELECT COUNT(*) AS count FROM Rooms WHERE is_active = 1 AND room_type = ?;",
                    (room_type.value,),
                )
            return int(cursor.fetchone()["count"])

    # --- Bookings ---

    def _row_to_booking(self, row: sqlite3.Row) -> Booking:
        payment = json.loads(row["payment_details"])
        cancellation = None
        if row["cancelled_at"]:
            cancellation = Cancellation(
                cancelled_at=datetime.fromisoformat(row["cancelled_at"]),
                reason=row["cancellation_reason"],
                refund_amount=row["refund_amount"],
            )
        return Booking(
            booking_id=int(row["id"]),
            room_id=int(row["room_id"]),
            guest_id=int(row["guest_id"]),
            stay=DateInterval(
                start=date.fromisoformat(row["check_in"]),
                end=date.fromisoformat(row["check_out"]),
            ),
            total_price=float(row["total_price"]),
            status=BookingStatus(row["status"]),
            adults=int(row["adults"]),
            children=int(row["children"]),
            payment_status=PaymentStatus(row["payment_status"]),
            payment=PaymentDetails(
                method=payment.get("method"),
                transaction_id=payment.get("transaction_id"),
                paid_amount=payment.get("paid_amount"),
                paid_at=_to_datetime(payment.get("paid_at")),
            ),
            special_requests=tuple(json.loads(row["special_requests"])),
            add_ons=tuple(AddOn(**item) for item in json.loads(row["add_ons"])),
            cancellation=cancellation,
            created_at=_to_datetime(row["created_at"]),
        )

    def _booking_values(self, booking: Booking) -> tuple[object, ...]:
        cancellation = booking.cancellation
        return (
            booking.room_id,
            booking.guest_id,
            booking.stay.start.isoformat(),
            booking.stay.end.isoformat(),
            booking.adults,
            booking.children,
            booking.total_price,
            booking.status.value,
            booking.payment_status.value,
            json.dumps(
                {
                    "method": booking.payment.method,
                    "transaction_id": booking.payment.transaction_id,
                    "paid_amount": booking.payment.paid_amount,
                    "paid_at": _iso(booking.payment.paid_at),
                }
            ),
            json.dumps(list(booking.special_requests)),
            json.dumps(
                [
                    {"service": item.service, "price": item.price, "quantity": item.quantity}
                    for item in booking.add_ons
                ]
            ),
            _iso(cancellation.cancelled_at) if cancellation else None,
            cancellation.reason if cancellation else None,
            cancellation.refund_amount if cancellation else None,
        )

    def create_booking(self, booking: Booking) -> Booking:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Bookings (
                    room_id, guest_id, check_in, check_out, adults, children, total_price,
                    status, payment_status, payment_details, special_requests, add_ons,
                    cancelled_at, cancellation_reason, refund_amount, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (*self._booking_values(booking), _now()),
            )
            conn.commit()
            booking_id = int(cursor.lastrowid)
        logger.info("Booking %s created for room %s", booking_id, booking.room_id)
        return self.get_booking(booking_id)  # type: ignore[return-value]

    def save_booking(self, booking: Booking) -> Booking:
        if booking.booking_id is None:
            raise ValueError("save_booking requires a persisted booking")
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE Bookings
                SET room_id = ?, guest_id = ?, check_in = ?, check_out = ?, adults = ?,
                    children = ?, total_price = ?, status = ?, payment_status = ?,
                    payment_details = ?, special_requests = ?, add_ons = ?,
                    cancelled_at = ?, cancellation_reason = ?, refund_amount = ?
                WHERE id = ?;
                """,
                (*self._booking_values(booking), booking.booking_id),
            )
            conn.commit()
        return self.get_booking(booking.booking_id)  # type: ignore[return-value]

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM Bookings WHERE id = ?;", (booking_id,))
            row = cursor.fetchone()
            return self._row_to_booking(row) if row is not None else None

    def list_bookings(
        self,
        *,
        status: Optional[BookingStatus] = None,
        guest_id: Optional[int] = None,
        room_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Booking]:
        """Bookings matching every supplied filter.

        `start`/`end` select stays contained in the window, not merely
        touching it.
        """
        clauses: list[str] = []
        params: list[object] = []
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if guest_id is not None:
            clauses.append("guest_id = ?")
            params.append(guest_id)
        if room_id is not None:
            clauses.append("room_id = ?")
            params.append(room_id)
        if start is not None:
            clauses.append("check_in >= ?")
            params.append(start.isoformat())
        if end is not None:
            clauses.append("check_out <= ?")
            params.append(end.isoformat())
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT * FROM Bookings {where} ORDER BY check_in ASC, id ASC;",
                tuple(params),
            )
            return [self._row_to_booking(row) for row in cursor.fetchall()]

    def list_active_bookings_touching(
        self,
        interval: DateInterval,
        room_ids: Optional[Iterable[int]] = None,
    ) -> List[Booking]:
        """Non-cancelled bookings whose stay could overlap `interval`.

        This is a coarse storage-side prefilter; the overlap decision itself
        belongs to the domain layer.
        """
        clauses = ["status != ?", "check_in <= ?", "check_out >= ?"]
        params: list[object] = [
            BookingStatus.CANCELLED.value,
            interval.end.isoformat(),
            interval.start.isoformat(),
        ]
        if room_ids is not None:
            ids = list(room_ids)
            if not ids:
                return []
            clauses.append(f"room_id IN ({','.join('?' for _ in ids)})")
            params.extend(ids)
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT * FROM Bookings WHERE {' AND '.join(clauses)} ORDER BY check_in ASC;",
                tuple(params),
            )
            return [self._row_to_booking(row) for row in cursor.fetchall()]

    def count_bookings(self) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM Bookings;")
            return int(cursor.fetchone()["count"])

    # --- Banquets ---

    def _row_to_banquet(self, row: sqlite3.Row) -> Banquet:
        return Banquet(
            banquet_id=int(row["id"]),
            name=str(row["name"]),
            description=str(row["description"]),
            seating_capacity=int(row["seating_capacity"]),
            images=tuple(
                Image(url=item["url"], caption=item.get("caption"))
                for item in json.loads(row["images"])
            ),
            created_at=_to_datetime(row["created_at"]),
            updated_at=_to_datetime(row["updated_at"]),
        )

    @staticmethod
    def _images_json(banquet: Banquet) -> str:
        return json.dumps([{"url": image.url, "caption": image.caption} for image in banquet.images])

    def create_banquet(self, banquet: Banquet) -> Banquet:
        now = _now()
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Banquets (name, description, seating_capacity, images, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?);
                """,
                (
                    banquet.name,
                    banquet.description,
                    banquet.seating_capacity,
                    self._images_json(banquet),
                    now,
                    now,
                ),
            )
            conn.commit()
            banquet_id = int(cursor.lastrowid)
        logger.info("Banquet created with ID: %s", banquet_id)
        return self.get_banquet(banquet_id)  # type: ignore[return-value]

    def get_banquet(self, banquet_id: int) -> Optional[Banquet]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM Banquets WHERE id = ?;", (banquet_id,))
            row = cursor.fetchone()
            return self._row_to_banquet(row) if row is not None else None

    def list_banquets(self) -> List[Banquet]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM Banquets ORDER BY name ASC, id ASC;")
            return [self._row_to_banquet(row) for row in cursor.fetchall()]

    def save_banquet(self, banquet: Banquet) -> Banquet:
        if banquet.banquet_id is None:
            raise ValueError("save_banquet requires a persisted banquet")
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE Banquets
                SET name = ?, description = ?, seating_capacity = ?, images = ?, updated_at = ?
                WHERE id = ?;
                """,
                (
                    banquet.name,
                    banquet.description,
                    banquet.seating_capacity,
                    self._images_json(banquet),
                    _now(),
                    banquet.banquet_id,
                ),
            )
            conn.commit()
        return self.get_banquet(banquet.banquet_id)  # type: ignore[return-value]

    def delete_banquet(self, banquet_id: int) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM Banquets WHERE id = ?;", (banquet_id,))
            conn.commit()
        logger.info("Banquet deleted with ID: %s", banquet_id)

    # --- Events ---

    def _row_to_event(self, row: sqlite3.Row) -> Event:
        return Event(
            event_id=int(row["id"]),
            banquet_id=int(row["banquet_id"]),
            title=str(row["title"]),
            description=str(row["description"]),
            event_type=EventType(row["event_type"]),
            schedule=DateInterval(
                date.fromisoformat(row["start_date"]),
                date.fromisoformat(row["end_date"]),
            ),
            capacity=int(row["capacity"]),
            organizer_id=int(row["organizer_id"]),
            price=float(row["price"]),
            is_complimentary=bool(row["is_complimentary"]),
            status=EventStatus(row["status"]),
            requirements=tuple(json.loads(row["requirements"])),
            tags=tuple(json.loads(row["tags"])),
            created_at=_to_datetime(row["created_at"]),
        )

    def create_event(self, event: Event) -> Event:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Events (
                    banquet_id, title, description, event_type, start_date, end_date, capacity,
                    price, is_complimentary, status, organizer_id, requirements, tags, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    event.banquet_id,
                    event.title,
                    event.description,
                    event.event_type.value,
                    event.schedule.start.isoformat(),
                    event.schedule.end.isoformat(),
                    event.capacity,
                    event.price,
                    int(event.is_complimentary),
                    event.status.value,
                    event.organizer_id,
                    json.dumps(list(event.requirements)),
                    json.dumps(list(event.tags)),
                    _now(),
                ),
            )
            conn.commit()
            event_id = int(cursor.lastrowid)
        return self.get_event(event_id)  # type: ignore[return-value]

    def get_event(self, event_id: int) -> Optional[Event]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM Events WHERE id = ?;", (event_id,))
            row = cursor.fetchone()
            return self._row_to_event(row) if row is not None else None

    def set_event_status(self, event_id: int, status: EventStatus) -> Event:
        with self._connect() as conn:
            conn.execute("UPDATE Events SET status = ? WHERE id = ?;", (status.value, event_id))
            conn.commit()
        return self.get_event(event_id)  # type: ignore[return-value]

    def list_events(
        self,
        banquet_id: int,
        *,
        status: Optional[EventStatus] = None,
    ) -> List[Event]:
        clauses = ["banquet_id = ?"]
        params: list[object] = [banquet_id]
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT * FROM Events WHERE {' AND '.join(clauses)} ORDER BY start_date ASC, id ASC;",
                tuple(params),
            )
            return [self._row_to_event(row) for row in cursor.fetchall()]
