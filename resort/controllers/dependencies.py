"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from resort.domain.errors import ConflictError, NotFoundError, ResortError, ValidationError
from resort.domain.models import User, UserRole
from resort.services.auth_service import AuthenticationError, AuthService, PermissionDeniedError
from resort.services.banquet_service import BanquetService
from resort.services.booking_service import BookingService
from resort.services.maintenance_service import MaintenanceService
from resort.services.pricing_service import PricingService
from resort.services.room_service import RoomService
from resort.services.statistics_service import StatisticsService
from resort.utils.logger import get_logger


logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _service(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name.replace('_', ' ').capitalize()} is not initialized",
        )
    return service


def get_auth_service(request: Request) -> AuthService:
    return _service(request, "auth_service")


def get_room_service(request: Request) -> RoomService:
    return _service(request, "room_service")


def get_pricing_service(request: Request) -> PricingService:
    return _service(request, "pricing_service")


def get_maintenance_service(request: Request) -> MaintenanceService:
    return _service(request, "maintenance_service")


def get_booking_service(request: Request) -> BookingService:
    return _service(request, "booking_service")


def get_statistics_service(request: Request) -> StatisticsService:
    return _service(request, "statistics_service")


def get_banquet_service(request: Request) -> BanquetService:
    return _service(request, "banquet_service")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You are not logged in. Please log in to get access.",
        )
    try:
        return auth_service.authenticate(credentials.credentials)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Dependency factory admitting only users whose role is in `roles`."""

    async def dependency(user: User = Depends(get_current_user)) -> User:
        try:
            AuthService.ensure_role(user, roles)
        except PermissionDeniedError as exc:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=str(exc),
            ) from exc
        return user

    return dependency


def to_http_exception(exc: Exception) -> HTTPException:
    """Map domain and auth failures onto HTTP status codes."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, PermissionDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, AuthenticationError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    if isinstance(exc, ResortError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    logger.exception("Unexpected failure", exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )
