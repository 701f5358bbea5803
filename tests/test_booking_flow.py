from __future__ import annotations

from dataclasses import replace
from datetime import date
from threading import RLock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from resort.controllers.auth_controller import router as auth_router
from resort.controllers.booking_controller import router as booking_router
from resort.controllers.maintenance_controller import router as maintenance_router
from resort.controllers.pricing_controller import router as pricing_router
from resort.controllers.room_controller import router as room_router
from resort.controllers.statistics_controller import router as statistics_router
from resort.repository.data_repository import DataRepository
from resort.services.auth_service import AuthService
from resort.services.booking_service import BookingService
from resort.services.maintenance_service import MaintenanceService
from resort.services.pricing_service import PricingService
from resort.services.room_service import RoomService
from resort.services.statistics_service import StatisticsService
from resort.utils.config import get_settings


ADMIN_EMAIL = "admin@resort.test"
ADMIN_PASSWORD = "admin-secret-1"


def _build_test_settings(tmp_path, filename: str):
    get_settings.cache_clear()
    base = get_settings()
    return replace(
        base,
        database_path=tmp_path / filename,
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        password_hash_iterations=1_000,
        seed_demo_data=False,
    )


def _build_test_app(tmp_path, filename: str = "booking_flow.db") -> tuple[FastAPI, DataRepository]:
    settings = _build_test_settings(tmp_path, filename)
    repository = DataRepository(settings)
    repository.initialize_database()
    write_lock = RLock()

    auth_service = AuthService(repository=repository, settings=settings)
    auth_service.ensure_admin_user()

    app = FastAPI()
    app.include_router(auth_router)
    app.include_router(statistics_router)
    app.include_router(maintenance_router)
    app.include_router(pricing_router)
    app.include_router(room_router)
    app.include_router(booking_router)
    app.state.repository = repository
    app.state.auth_service = auth_service
    app.state.room_service = RoomService(repository, settings, write_lock)
    app.state.pricing_service = PricingService(repository, settings, write_lock)
    app.state.maintenance_service = MaintenanceService(repository, settings, write_lock)
    app.state.booking_service = BookingService(repository, settings, write_lock)
    app.state.statistics_service = StatisticsService(repository, settings)
    return app, repository


def _login(client: TestClient, email: str, password: str) -> dict[str, str]:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _register_guest(client: TestClient, email: str = "guest@resort.test") -> dict[str, str]:
    response = client.post(
        "/auth/register",
        json={
            "email": email,
            "password": "guest-pass-1",
            "first_name": "Gina",
            "last_name": "Guest",
        },
    )
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "guest"
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _create_staff(client: TestClient, admin: dict[str, str], role: str, email: str) -> dict[str, str]:
    response = client.post(
        "/auth/users",
        json={
            "email": email,
            "password": "staff-pass-1",
            "first_name": "Sam",
            "last_name": "Staff",
            "role": role,
        },
        headers=admin,
    )
    assert response.status_code == 201
    return _login(client, email, "staff-pass-1")


def _create_room(client: TestClient, admin: dict[str, str], number: str = "301") -> int:
    response = client.post(
        "/rooms",
        json={
            "room_number": number,
            "type": "deluxe",
            "floor": 3,
            "capacity_adults": 2,
            "capacity_children": 1,
            "price_per_night": 150.0,
            "base_price": 150.0,
            "description": "Deluxe room with a sea view",
            "amenities": ["wifi", "balcony"],
        },
        headers=admin,
    )
    assert response.status_code == 201
    return response.json()["id"]


def test_booking_end_to_end_flow(tmp_path):
    app, repository = _build_test_app(tmp_path)
    client = TestClient(app)

    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    room_id = _create_room(client, admin)
    guest = _register_guest(client)

    availability = client.get(
        f"/rooms/{room_id}/availability",
        params={"check_in": "2030-01-10", "check_out": "2030-01-14"},
    )
    assert availability.status_code == 200
    assert availability.json()["available"] is True
    assert availability.json()["nights"] == 4

    booking_response = client.post(
        "/bookings",
        json={
            "room_id": room_id,
            "check_in": "2030-01-10",
            "check_out": "2030-01-14",
            "adults": 2,
            "add_ons": [{"service": "spa", "price": 40.0, "quantity": 2}],
        },
        headers=guest,
    )
    assert booking_response.status_code == 201
    booking = booking_response.json()
    assert booking["status"] == "pending"
    assert booking["number_of_nights"] == 4
    assert booking["total_price"] == 4 * 150.0 + 80.0
    assert repository.count_bookings() == 1

    # Checkout day of the first stay is the check-in day of the second.
    touching = client.post(
        "/bookings",
        json={"room_id": room_id, "check_in": "2030-01-14", "check_out": "2030-01-16"},
        headers=guest,
    )
    assert touching.status_code == 409
    assert "already booked" in touching.json()["detail"]

    listed = client.get(
        "/rooms",
        params={"check_in": "2030-01-12", "check_out": "2030-01-13"},
    )
    assert listed.status_code == 200
    assert listed.json()["total"] == 0

    cancel_response = client.patch(
        f"/bookings/{booking['id']}/cancel",
        json={"reason": "change of plans"},
        headers=guest,
    )
    assert cancel_response.status_code == 200
    assert cancel_response.json()["status"] == "cancelled"
    assert cancel_response.json()["cancellation_reason"] == "change of plans"

    rebook = client.post(
        "/bookings",
        json={"room_id": room_id, "check_in": "2030-01-10", "check_out": "2030-01-14"},
        headers=guest,
    )
    assert rebook.status_code == 201

    mine = client.get("/bookings", headers=guest)
    assert mine.status_code == 200
    assert mine.json()["results"] == 2

    stats = client.get(
        "/rooms/statistics",
        params={"start_date": "2030-01-01", "end_date": "2030-01-31"},
        headers=admin,
    )
    assert stats.status_code == 200
    payload = stats.json()
    assert payload["total_bookings"] == 1
    assert payload["occupied_days"] == 4
    assert payload["total_revenue"] == 600.0


def test_role_guards(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    guest = _register_guest(client)

    assert client.get("/rooms/statistics").status_code == 401
    assert client.get("/rooms/statistics", headers=guest).status_code == 403
    assert client.get("/rooms/pricing/seasonal", headers=guest).status_code == 403
    assert client.get("/auth/me", headers={"Authorization": "Bearer bogus"}).status_code == 401

    forbidden_room = client.post(
        "/rooms",
        json={
            "room_number": "999",
            "floor": 9,
            "capacity_adults": 1,
            "price_per_night": 1.0,
            "base_price": 1.0,
            "description": "nope",
        },
        headers=guest,
    )
    assert forbidden_room.status_code == 403


def test_login_rejects_wrong_password(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    response = client.post(
        "/auth/login",
        json={"email": ADMIN_EMAIL, "password": "not-the-password"},
    )
    assert response.status_code == 401


def test_guest_cannot_read_someone_elses_booking(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    room_id = _create_room(client, admin)
    owner = _register_guest(client, "owner@resort.test")
    stranger = _register_guest(client, "stranger@resort.test")

    created = client.post(
        "/bookings",
        json={"room_id": room_id, "check_in": "2030-03-01", "check_out": "2030-03-03"},
        headers=owner,
    )
    assert created.status_code == 201
    booking_id = created.json()["id"]

    assert client.get(f"/bookings/{booking_id}", headers=stranger).status_code == 403
    assert client.get(f"/bookings/{booking_id}", headers=admin).status_code == 200
    assert client.get("/bookings", headers=stranger).json()["results"] == 0


def test_booking_status_transitions(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    staff = _create_staff(client, admin, "staff", "desk@resort.test")
    room_id = _create_room(client, admin)
    guest = _register_guest(client)

    booking_id = client.post(
        "/bookings",
        json={"room_id": room_id, "check_in": "2030-04-01", "check_out": "2030-04-05"},
        headers=guest,
    ).json()["id"]

    assert client.patch(
        f"/bookings/{booking_id}/status",
        json={"status": "confirmed"},
        headers=guest,
    ).status_code == 403

    skipped = client.patch(
        f"/bookings/{booking_id}/status",
        json={"status": "checked-out"},
        headers=staff,
    )
    assert skipped.status_code == 409

    for status in ("confirmed", "checked-in", "checked-out"):
        response = client.patch(
            f"/bookings/{booking_id}/status",
            json={"status": status},
            headers=staff,
        )
        assert response.status_code == 200
        assert response.json()["status"] == status

    late_cancel = client.patch(f"/bookings/{booking_id}/cancel", headers=guest)
    assert late_cancel.status_code == 409

    payment = client.patch(
        f"/bookings/{booking_id}/payment",
        json={"payment_status": "paid", "payment_method": "card", "paid_amount": 600.0},
        headers=staff,
    )
    assert payment.status_code == 200
    assert payment.json()["payment_status"] == "paid"
    assert payment.json()["paid_amount"] == 600.0


def test_seasonal_pricing_and_discounts_drive_quotes(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    manager = _create_staff(client, admin, "manager", "manager@resort.test")
    room_id = _create_room(client, admin)
    other_room_id = _create_room(client, admin, "302")

    seasonal = client.post(
        "/rooms/pricing/seasonal",
        json={
            "rooms": [room_id, other_room_id],
            "start_date": "2030-07-01",
            "end_date": "2030-07-31",
            "price": 200.0,
            "description": "Summer",
        },
        headers=manager,
    )
    assert seasonal.status_code == 201
    assert len(seasonal.json()["success"]) == 2
    pricing_id = seasonal.json()["success"][0]["seasonal_pricing"]["id"]

    overlapping = client.post(
        "/rooms/pricing/seasonal",
        json={
            "rooms": [room_id],
            "start_date": "2030-07-31",
            "end_date": "2030-08-10",
            "price": 180.0,
        },
        headers=manager,
    )
    assert overlapping.status_code == 201
    assert overlapping.json()["success"] == []
    assert overlapping.json()["failed"][0]["room_id"] == room_id

    discount = client.post(
        "/rooms/pricing/discounts",
        json={
            "rooms": [room_id],
            "type": "early-bird",
            "percentage": 20.0,
            "valid_from": "2030-07-01",
            "valid_until": "2030-07-31",
        },
        headers=manager,
    )
    assert discount.status_code == 201

    price = client.get(f"/rooms/{room_id}/price", params={"date": "2030-07-10"})
    assert price.status_code == 200
    assert price.json()["price"] == 160.0

    moved = client.patch(
        f"/rooms/pricing/seasonal/{pricing_id}",
        json={"room_id": room_id, "start_date": "2030-07-05", "end_date": "2030-07-20"},
        headers=manager,
    )
    assert moved.status_code == 200
    assert moved.json()["start_date"] == "2030-07-05"

    removed = client.delete(
        f"/rooms/pricing/seasonal/{pricing_id}",
        params={"room_id": room_id},
        headers=manager,
    )
    assert removed.status_code == 204
    price_after = client.get(f"/rooms/{room_id}/price", params={"date": "2030-07-10"})
    assert price_after.json()["price"] == 120.0

    listing = client.get(
        "/rooms/pricing/discounts",
        params={"type": "early-bird"},
        headers=manager,
    )
    assert listing.status_code == 200
    assert listing.json()["rooms"][0]["discounts"][0]["type"] == "early-bird"


def test_maintenance_blocks_bookings_and_respects_existing_stays(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    staff = _create_staff(client, admin, "staff", "engineer@resort.test")
    room_id = _create_room(client, admin)
    guest = _register_guest(client)

    client.post(
        "/bookings",
        json={"room_id": room_id, "check_in": "2030-05-01", "check_out": "2030-05-05"},
        headers=guest,
    )
    clash = client.post(
        f"/rooms/{room_id}/maintenance",
        json={"type": "repair", "start_date": "2030-05-04", "end_date": "2030-05-06"},
        headers=staff,
    )
    assert clash.status_code == 409

    scheduled = client.post(
        f"/rooms/{room_id}/maintenance",
        json={"type": "deep-cleaning", "start_date": "2030-05-10", "end_date": "2030-05-12"},
        headers=staff,
    )
    assert scheduled.status_code == 201
    maintenance_id = scheduled.json()["maintenance"]["id"]

    blocked = client.post(
        "/bookings",
        json={"room_id": room_id, "check_in": "2030-05-12", "check_out": "2030-05-14"},
        headers=guest,
    )
    assert blocked.status_code == 409
    assert "under maintenance" in blocked.json()["detail"]

    completed = client.patch(
        f"/rooms/{room_id}/maintenance/{maintenance_id}",
        json={"status": "completed", "cost": 90.0},
        headers=staff,
    )
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"

    history = client.get(f"/rooms/{room_id}/maintenance/history", headers=staff)
    assert history.status_code == 200
    assert history.json()["last_maintenance_date"] is not None
    assert len(history.json()["maintenance_history"]) == 1

    open_again = client.get(
        f"/rooms/{room_id}/availability",
        params={"check_in": "2030-05-12", "check_out": "2030-05-14"},
    )
    assert open_again.json()["available"] is True


def test_ratings_one_per_guest(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    room_id = _create_room(client, admin)
    guest = _register_guest(client)

    first = client.post(f"/rooms/{room_id}/ratings", json={"score": 4}, headers=guest)
    assert first.status_code == 201
    assert first.json()["average_rating"] == 4.0

    again = client.post(f"/rooms/{room_id}/ratings", json={"score": 5}, headers=guest)
    assert again.status_code == 409

    admin_rating = client.post(
        f"/rooms/{room_id}/ratings",
        json={"score": 5, "review": "Spotless"},
        headers=admin,
    )
    assert admin_rating.status_code == 201

    ratings = client.get(f"/rooms/{room_id}/ratings", headers=guest)
    assert ratings.json()["total_ratings"] == 2
    assert ratings.json()["average_rating"] == 4.5
    assert client.get(f"/rooms/{room_id}").json()["average_rating"] == 4.5


def _book(client: TestClient, guest: dict[str, str], room_id: int, check_in: str, check_out: str) -> dict:
    response = client.post(
        "/bookings",
        json={"room_id": room_id, "check_in": check_in, "check_out": check_out},
        headers=guest,
    )
    assert response.status_code == 201
    return response.json()


def test_maintenance_update_cannot_move_onto_a_booked_stay(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    staff = _create_staff(client, admin, "staff", "engineer@resort.test")
    room_id = _create_room(client, admin)
    guest = _register_guest(client)
    _book(client, guest, room_id, "2030-06-10", "2030-06-15")

    scheduled = client.post(
        f"/rooms/{room_id}/maintenance",
        json={"type": "repair", "start_date": "2030-07-01", "end_date": "2030-07-03"},
        headers=staff,
    )
    assert scheduled.status_code == 201
    maintenance_id = scheduled.json()["maintenance"]["id"]

    moved = client.patch(
        f"/rooms/{room_id}/maintenance/{maintenance_id}",
        json={"start_date": "2030-06-12", "end_date": "2030-06-13", "status": "in-progress"},
        headers=staff,
    )
    assert moved.status_code == 409
    assert "has bookings during the maintenance period" in moved.json()["detail"]

    room = client.get(f"/rooms/{room_id}").json()
    assert room["status"] == "available"
    history = client.get(f"/rooms/{room_id}/maintenance/history", headers=staff).json()
    assert history["maintenance_history"][0]["start_date"] == "2030-07-01"

    cancelled = client.patch(
        f"/rooms/{room_id}/maintenance/{maintenance_id}",
        json={"status": "cancelled"},
        headers=staff,
    )
    assert cancelled.status_code == 200
    parked = client.patch(
        f"/rooms/{room_id}/maintenance/{maintenance_id}",
        json={"start_date": "2030-06-12", "end_date": "2030-06-13"},
        headers=staff,
    )
    assert parked.status_code == 200
    reopened = client.patch(
        f"/rooms/{room_id}/maintenance/{maintenance_id}",
        json={"status": "scheduled"},
        headers=staff,
    )
    assert reopened.status_code == 409


def test_bulk_maintenance_evaluates_each_room(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    booked_room = _create_room(client, admin, "301")
    free_room = _create_room(client, admin, "302")
    guest = _register_guest(client)
    _book(client, guest, booked_room, "2030-08-01", "2030-08-05")

    response = client.post(
        "/rooms/bulk-maintenance",
        json={
            "rooms": [booked_room, free_room, 9999],
            "type": "deep-cleaning",
            "start_date": "2030-08-03",
            "end_date": "2030-08-04",
        },
        headers=admin,
    )
    assert response.status_code == 200
    body = response.json()
    assert [item["room_id"] for item in body["success"]] == [free_room]
    assert body["success"][0]["room_number"] == "302"
    assert body["success"][0]["maintenance"]["type"] == "deep-cleaning"
    assert [item["room_id"] for item in body["failed"]] == [booked_room, 9999]
    assert "has bookings" in body["failed"][0]["error"]

    scheduled = client.get("/rooms/maintenance/scheduled", headers=admin).json()
    assert [row["room_id"] for row in scheduled["rooms"]] == [free_room]


def test_bulk_pricing_skips_rooms_with_overlapping_windows(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    summer_room = _create_room(client, admin, "301")
    plain_room = _create_room(client, admin, "302")

    client.post(
        "/rooms/pricing/seasonal",
        json={
            "rooms": [summer_room],
            "start_date": "2030-07-01",
            "end_date": "2030-07-31",
            "price": 200.0,
        },
        headers=admin,
    )

    response = client.post(
        "/rooms/bulk-pricing",
        json={
            "rooms": [summer_room, plain_room],
            "base_price": 175.0,
            "seasonal_pricing": {
                "start_date": "2030-07-15",
                "end_date": "2030-08-15",
                "price": 210.0,
            },
        },
        headers=admin,
    )
    assert response.status_code == 200
    body = response.json()
    assert [item["room_id"] for item in body["success"]] == [plain_room]
    assert [item["room_id"] for item in body["failed"]] == [summer_room]

    # A failed item leaves its room untouched.
    assert client.get(f"/rooms/{summer_room}").json()["base_price"] == 150.0
    assert client.get(f"/rooms/{plain_room}").json()["base_price"] == 175.0
    quote = client.get(f"/rooms/{plain_room}/price", params={"date": "2030-08-01"})
    assert quote.json()["price"] == 210.0


def test_bulk_status_and_bulk_update_report_per_room(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    first = _create_room(client, admin, "301")
    second = _create_room(client, admin, "302")

    statuses = client.post(
        "/rooms/bulk-status",
        json={"rooms": [first, 9999], "status": "out-of-order"},
        headers=admin,
    )
    assert statuses.status_code == 200
    assert statuses.json()["success"] == [
        {"room_id": first, "room_number": "301", "status": "out-of-order"}
    ]
    assert statuses.json()["failed"][0]["room_id"] == 9999

    availability = client.get(
        f"/rooms/{first}/availability",
        params={"check_in": "2030-09-01", "check_out": "2030-09-03"},
    )
    assert availability.json()["available"] is False

    updates = client.post(
        "/rooms/bulk-update",
        json={
            "updates": [
                {"room_id": second, "floor": 5, "price_per_night": 180.0},
                {"room_id": 9999, "floor": 1},
            ]
        },
        headers=admin,
    )
    assert updates.status_code == 200
    assert [item["room_id"] for item in updates.json()["success"]] == [second]
    assert [item["room_id"] for item in updates.json()["failed"]] == [9999]
    updated = client.get(f"/rooms/{second}").json()
    assert updated["floor"] == 5
    assert updated["price_per_night"] == 180.0


def test_add_ons_and_special_requests_extend_a_booking(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    room_id = _create_room(client, admin)
    guest = _register_guest(client)
    booking = _book(client, guest, room_id, "2030-10-01", "2030-10-05")
    assert booking["total_price"] == 600.0

    requests = client.patch(
        f"/bookings/{booking['id']}/special-requests",
        json={"special_requests": ["extra pillows", "late checkout"]},
        headers=guest,
    )
    assert requests.status_code == 200
    assert requests.json()["special_requests"] == ["extra pillows", "late checkout"]

    extras = client.patch(
        f"/bookings/{booking['id']}/add-ons",
        json={"add_ons": [{"service": "breakfast", "price": 20.0, "quantity": 3}]},
        headers=guest,
    )
    assert extras.status_code == 200
    assert extras.json()["total_price"] == 600.0 + 20.0 * 3
    assert extras.json()["add_ons"][0]["service"] == "breakfast"

    client.patch(f"/bookings/{booking['id']}/cancel", headers=guest)
    too_late = client.patch(
        f"/bookings/{booking['id']}/add-ons",
        json={"add_ons": [{"service": "spa", "price": 50.0}]},
        headers=guest,
    )
    assert too_late.status_code == 409


def test_occupancy_and_revenue_reports(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    staff = _create_staff(client, admin, "staff", "desk@resort.test")
    manager = _create_staff(client, admin, "manager", "manager@resort.test")
    busy_room = _create_room(client, admin, "301")
    quiet_room = _create_room(client, admin, "302")
    guest = _register_guest(client)
    _book(client, guest, busy_room, "2030-02-01", "2030-02-05")

    occupancy = client.get("/rooms/statistics/occupancy", headers=staff)
    assert occupancy.status_code == 200
    assert occupancy.json()["results"] == 2
    assert client.get("/rooms/statistics/revenue", headers=staff).status_code == 403
    assert client.get("/rooms/statistics/revenue", headers=manager).status_code == 200

    service = app.state.statistics_service
    rows = {row["room_id"]: row for row in service.occupancy_by_room(today=date(2030, 3, 1))}
    assert rows[busy_room]["total_bookings"] == 1
    assert rows[busy_room]["total_days_occupied"] == 4
    assert rows[quiet_room]["revenue_generated"] == 0.0

    report = service.revenue_report(today=date(2030, 3, 1))
    assert report["total_revenue"] == 600.0
    assert report["average_revenue_per_room"] == 300.0
    assert report["rooms"][0]["room_id"] == busy_room


def test_discount_patch_with_null_minimum_stay_lifts_the_gate(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    room_id = _create_room(client, admin)

    created = client.post(
        "/rooms/pricing/discounts",
        json={
            "rooms": [room_id],
            "type": "long-stay",
            "percentage": 10.0,
            "valid_from": "2030-11-01",
            "valid_until": "2030-11-30",
            "minimum_stay": 5,
        },
        headers=admin,
    )
    assert created.status_code == 201
    discount_id = created.json()["success"][0]["discount"]["id"]

    untouched = client.patch(
        f"/rooms/pricing/discounts/{discount_id}",
        json={"room_id": room_id, "percentage": 20.0},
        headers=admin,
    )
    assert untouched.status_code == 200
    assert untouched.json()["minimum_stay"] == 5

    lifted = client.patch(
        f"/rooms/pricing/discounts/{discount_id}",
        json={"room_id": room_id, "minimum_stay": None},
        headers=admin,
    )
    assert lifted.status_code == 200
    assert lifted.json()["minimum_stay"] is None
    quote = client.get(f"/rooms/{room_id}/price", params={"date": "2030-11-10", "nights": 2})
    assert quote.json()["price"] == 120.0
