from __future__ import annotations

from dataclasses import replace
from threading import RLock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from resort.controllers.auth_controller import router as auth_router
from resort.controllers.banquet_controller import router as banquet_router
from resort.repository.data_repository import DataRepository
from resort.services.auth_service import AuthService
from resort.services.banquet_service import BanquetService
from resort.utils.config import get_settings


ADMIN_EMAIL = "admin@resort.test"
ADMIN_PASSWORD = "admin-secret-1"


def _build_test_app(tmp_path) -> FastAPI:
    get_settings.cache_clear()
    settings = replace(
        get_settings(),
        database_path=tmp_path / "banquet_flow.db",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        password_hash_iterations=1_000,
        seed_demo_data=False,
    )
    repository = DataRepository(settings)
    repository.initialize_database()
    auth_service = AuthService(repository=repository, settings=settings)
    auth_service.ensure_admin_user()

    app = FastAPI()
    app.include_router(auth_router)
    app.include_router(banquet_router)
    app.state.repository = repository
    app.state.auth_service = auth_service
    app.state.banquet_service = BanquetService(repository, settings, RLock())
    return app


def _login(client: TestClient, email: str, password: str) -> dict[str, str]:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _register_guest(client: TestClient) -> dict[str, str]:
    response = client.post(
        "/auth/register",
        json={
            "email": "guest@resort.test",
            "password": "guest-pass-1",
            "first_name": "Gina",
            "last_name": "Guest",
        },
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _create_hall(client: TestClient, admin: dict[str, str], seats: int = 120) -> int:
    response = client.post(
        "/banquets",
        json={
            "name": "Grand Hall",
            "description": "Ballroom overlooking the lagoon",
            "seating_capacity": seats,
            "images": [{"url": "https://img.resort.test/hall.jpg", "caption": "Main floor"}],
        },
        headers=admin,
    )
    assert response.status_code == 201
    return response.json()["id"]


def _event(start: str, end: str, capacity: int = 80) -> dict[str, object]:
    return {
        "title": "Wedding reception",
        "description": "Dinner and dancing",
        "type": "dining",
        "start_date": start,
        "end_date": end,
        "capacity": capacity,
    }


def test_banquet_crud_is_admin_only_for_writes(tmp_path):
    client = TestClient(_build_test_app(tmp_path))
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    guest = _register_guest(client)

    assert client.get("/banquets").status_code == 401
    denied = client.post(
        "/banquets",
        json={"name": "Patio", "description": "Open air", "seating_capacity": 40},
        headers=guest,
    )
    assert denied.status_code == 403

    hall_id = _create_hall(client, admin)
    listed = client.get("/banquets", headers=guest)
    assert listed.status_code == 200
    assert listed.json()["results"] == 1
    fetched = client.get(f"/banquets/{hall_id}", headers=guest).json()
    assert fetched["images"][0]["caption"] == "Main floor"

    assert client.patch(
        f"/banquets/{hall_id}",
        json={"seating_capacity": 150},
        headers=guest,
    ).status_code == 403
    renamed = client.patch(
        f"/banquets/{hall_id}",
        json={"name": "Lagoon Hall", "seating_capacity": 150},
        headers=admin,
    )
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Lagoon Hall"
    assert renamed.json()["seating_capacity"] == 150

    assert client.delete(f"/banquets/{hall_id}", headers=admin).status_code == 204
    assert client.get(f"/banquets/{hall_id}", headers=admin).status_code == 404


def test_hall_events_cannot_overlap(tmp_path):
    client = TestClient(_build_test_app(tmp_path))
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    guest = _register_guest(client)
    hall_id = _create_hall(client, admin)

    first = client.post(
        f"/banquets/{hall_id}/events",
        json=_event("2030-06-10", "2030-06-11"),
        headers=admin,
    )
    assert first.status_code == 201
    assert first.json()["status"] == "scheduled"
    event_id = first.json()["id"]

    clash = client.post(
        f"/banquets/{hall_id}/events",
        json=_event("2030-06-11", "2030-06-12"),
        headers=admin,
    )
    assert clash.status_code == 409

    too_big = client.post(
        f"/banquets/{hall_id}/events",
        json=_event("2030-07-01", "2030-07-02", capacity=500),
        headers=admin,
    )
    assert too_big.status_code == 400

    assert client.post(
        f"/banquets/{hall_id}/events",
        json=_event("2030-08-01", "2030-08-02"),
        headers=guest,
    ).status_code == 403

    shrink = client.patch(
        f"/banquets/{hall_id}",
        json={"seating_capacity": 50},
        headers=admin,
    )
    assert shrink.status_code == 409

    confirmed = client.patch(
        f"/banquets/{hall_id}/events/{event_id}/status",
        json={"status": "confirmed"},
        headers=admin,
    )
    assert confirmed.status_code == 200
    listing = client.get(
        f"/banquets/{hall_id}/events",
        params={"status": "confirmed"},
        headers=guest,
    )
    assert listing.json()["results"] == 1
    assert listing.json()["events"][0]["title"] == "Wedding reception"

    assert client.delete(f"/banquets/{hall_id}", headers=admin).status_code == 409

    cancelled = client.patch(
        f"/banquets/{hall_id}/events/{event_id}/status",
        json={"status": "cancelled"},
        headers=admin,
    )
    assert cancelled.status_code == 200
    rebooked = client.post(
        f"/banquets/{hall_id}/events",
        json=_event("2030-06-11", "2030-06-12"),
        headers=admin,
    )
    assert rebooked.status_code == 201
