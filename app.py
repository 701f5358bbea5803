"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires all services, registers routers, and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from threading import RLock
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resort.controllers.auth_controller import router as auth_router
from resort.controllers.banquet_controller import router as banquet_router
from resort.controllers.booking_controller import router as booking_router
from resort.controllers.maintenance_controller import router as maintenance_router
from resort.controllers.pricing_controller import router as pricing_router
from resort.controllers.room_controller import router as room_router
from resort.controllers.statistics_controller import router as statistics_router
from resort.repository.data_repository import DataRepository
from resort.services.auth_service import AuthService
from resort.services.banquet_service import BanquetService
from resort.services.booking_service import BookingService
from resort.services.maintenance_service import MaintenanceService
from resort.services.pricing_service import PricingService
from resort.services.room_service import RoomService
from resort.services.statistics_service import StatisticsService
from resort.utils.config import Settings, get_settings
from resort.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Instantiates all services with explicit dependency injection via app.state.
    Every mutating service shares one write lock so room and booking updates
    have a single writer per process.
    """
    settings = settings or get_settings()

    # --- Repository (SQLite connection factory) ---
    repository = DataRepository(settings)
    write_lock = RLock()

    # --- Services (business logic, no direct DB access) ---
    auth_service = AuthService(repository=repository, settings=settings)
    room_service = RoomService(repository=repository, settings=settings, write_lock=write_lock)
    pricing_service = PricingService(
        repository=repository,
        settings=settings,
        write_lock=write_lock,
    )
    maintenance_service = MaintenanceService(
        repository=repository,
        settings=settings,
        write_lock=write_lock,
    )
    booking_service = BookingService(
        repository=repository,
        settings=settings,
        write_lock=write_lock,
    )
    statistics_service = StatisticsService(repository=repository, settings=settings)
    banquet_service = BanquetService(
        repository=repository,
        settings=settings,
        write_lock=write_lock,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Routers ---
    # Fixed /rooms/... paths register ahead of /rooms/{room_id}.
    app.include_router(auth_router)
    app.include_router(statistics_router)
    app.include_router(maintenance_router)
    app.include_router(pricing_router)
    app.include_router(room_router)
    app.include_router(booking_router)
    app.include_router(banquet_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, object]:
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.app_version,
        }

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.repository = repository
    app.state.auth_service = auth_service
    app.state.room_service = room_service
    app.state.pricing_service = pricing_service
    app.state.maintenance_service = maintenance_service
    app.state.booking_service = booking_service
    app.state.statistics_service = statistics_service
    app.state.banquet_service = banquet_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Order matters:
      1. Schema must exist before seeding.
      2. Demo rooms are seeded only into an empty inventory.
      3. The admin account is bootstrapped last so it can log in immediately.
    """
    settings: Settings = app.state.settings
    repository: DataRepository = app.state.repository
    auth_service: AuthService = app.state.auth_service

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if settings.seed_demo_data:
        logger.info("Startup: seeding demo rooms (skipped if Rooms table not empty)")
        repository.seed_demo_rooms()

    logger.info("Startup: bootstrapping admin account")
    auth_service.ensure_admin_user()

    logger.info("Startup complete, system ready")


# Module-level app object for uvicorn
app = create_app()
