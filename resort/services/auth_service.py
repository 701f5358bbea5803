"""User registration, password login and bearer-token sessions."""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import RLock
from typing import Iterable, Optional

from resort.domain.errors import ConflictError, ValidationError
from resort.domain.models import User, UserRole
from resort.repository.data_repository import DataRepository
from resort.utils.config import Settings, get_settings
from resort.utils.logger import get_logger


logger = get_logger(__name__)

_HASH_ALGORITHM = "pbkdf2_sha256"
MIN_PASSWORD_LENGTH = 8


class AuthenticationError(Exception):
    """Base authentication failure."""


class InvalidCredentialsError(AuthenticationError):
    """Raised when email/password do not match a stored user."""


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token is unknown or expired."""


class PermissionDeniedError(Exception):
    """Raised when an authenticated user lacks the required role."""


@dataclass(frozen=True)
class Session:
    user_id: int
    expires_at: datetime


class AuthService:
    """Issues opaque session tokens and enforces role checks."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._sessions: dict[str, Session] = {}
        self._lock = RLock()

    def hash_password(self, password: str, salt: Optional[str] = None) -> str:
        salt = salt or secrets.token_hex(16)
        iterations = self._settings.password_hash_iterations
        digest = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            salt.encode("utf-8"),
            iterations,
        ).hex()
        return f"{_HASH_ALGORITHM}${iterations}${salt}${digest}"

    def verify_password(self, password: str, stored_hash: str) -> bool:
        try:
            algorithm, iterations, salt, expected = stored_hash.split("$")
        except ValueError:
            return False
        if algorithm != _HASH_ALGORITHM:
            return False
        digest = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            salt.encode("utf-8"),
            int(iterations),
        ).hex()
        return secrets.compare_digest(digest, expected)

    def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone_number: Optional[str] = None,
        role: UserRole = UserRole.GUEST,
    ) -> User:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        normalized_email = email.strip().lower()
        if self._repository.get_user_by_email(normalized_email) is not None:
            raise ConflictError("Email already registered")
        user = self._repository.create_user(
            User(
                user_id=None,
                email=normalized_email,
                first_name=first_name,
                last_name=last_name,
                role=role,
                phone_number=phone_number,
                password_hash=self.hash_password(password),
            )
        )
        logger.info("Registered user %s with role %s", user.email, user.role.value)
        return user

    def ensure_admin_user(self) -> Optional[User]:
        """Create the bootstrap admin account when a password is configured."""
        if not self._settings.admin_password:
            logger.warning("RESORT_ADMIN_PASSWORD not set; no admin account bootstrapped")
            return None
        existing = self._repository.get_user_by_email(self._settings.admin_email)
        if existing is not None:
            return existing
        return self.register(
            email=self._settings.admin_email,
            password=self._settings.admin_password,
            first_name="Resort",
            last_name="Administrator",
            role=UserRole.ADMIN,
        )

    def login(self, email: str, password: str) -> tuple[str, User]:
        user = self._repository.get_user_by_email(email.strip().lower())
        if user is None or not user.is_active:
            raise InvalidCredentialsError("Incorrect email or password")
        if not self.verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Incorrect email or password")
        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=self._settings.session_ttl_minutes
        )
        with self._lock:
            self._sessions[token] = Session(user_id=int(user.user_id), expires_at=expires_at)
        logger.info("User %s logged in", user.email)
        return token, user

    def logout(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def authenticate(self, bearer_token: str) -> User:
        with self._lock:
            session = self._sessions.get(bearer_token)
        if session is None:
            raise InvalidTokenError("Invalid token or authentication failed")
        if session.expires_at <= datetime.now(timezone.utc):
            self.logout(bearer_token)
            raise InvalidTokenError("Session expired. Please log in again.")
        user = self._repository.get_user(session.user_id)
        if user is None or not user.is_active:
            self.logout(bearer_token)
            raise InvalidTokenError("The user belonging to this token no longer exists.")
        return user

    @staticmethod
    def ensure_role(user: User, allowed: Iterable[UserRole]) -> None:
        if user.role not in set(allowed):
            raise PermissionDeniedError("You do not have permission to perform this action")
