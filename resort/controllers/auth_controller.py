"""Registration, login and account endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, Field, field_validator

from resort.controllers.dependencies import (
    bearer_scheme,
    get_auth_service,
    get_current_user,
    require_roles,
    to_http_exception,
)
from resort.controllers.schemas import UserResponse
from resort.domain.models import User, UserRole
from resort.services.auth_service import AuthService, InvalidCredentialsError
from resort.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    phone_number: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        local, _, domain = value.strip().partition("@")
        if not local or "." not in domain:
            raise ValueError("email must be a valid address")
        return value.strip().lower()


class CreateUserRequest(RegisterRequest):
    role: UserRole = UserRole.STAFF


class LoginRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Self-service sign-up; always creates a guest account."""
    try:
        auth_service.register(
            email=payload.email,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone_number=payload.phone_number,
        )
        token, user = auth_service.login(payload.email, payload.password)
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return TokenResponse(access_token=token, user=UserResponse.from_domain(user))


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    try:
        token, user = auth_service.login(payload.email, payload.password)
    except InvalidCredentialsError as exc:
        logger.warning("Failed login for %s", payload.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    return TokenResponse(access_token=token, user=UserResponse.from_domain(user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
    _: User = Depends(get_current_user),
) -> None:
    if credentials is not None:
        auth_service.logout(credentials.credentials)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.from_domain(user)


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: CreateUserRequest,
    auth_service: AuthService = Depends(get_auth_service),
    _: User = Depends(require_roles(UserRole.ADMIN)),
) -> UserResponse:
    """Admin-only account creation for staff, managers and other admins."""
    try:
        user = auth_service.register(
            email=payload.email,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone_number=payload.phone_number,
            role=payload.role,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return UserResponse.from_domain(user)
