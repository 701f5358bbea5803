"""Environment-driven runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    log_format: str
    database_path: Path
    admin_email: str
    admin_password: str | None
    session_ttl_minutes: int
    password_hash_iterations: int
    default_page_size: int
    max_page_size: int
    occupancy_lookback_days: int
    seed_demo_data: bool
    demo_random_seed: int
    cors_origins: tuple[str, ...]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings once per process; tests call `get_settings.cache_clear()`."""
    database_path = os.getenv(
        "RESORT_DATABASE_PATH",
        str(PROJECT_ROOT / "data" / "resort.db"),
    )
    origins = os.getenv("RESORT_CORS_ORIGINS", "*")
    return Settings(
        app_name=os.getenv("RESORT_APP_NAME", "Resort Operations API"),
        app_version=os.getenv("RESORT_APP_VERSION", "1.0.0"),
        log_level=os.getenv("RESORT_LOG_LEVEL", "INFO"),
        log_format=os.getenv(
            "RESORT_LOG_FORMAT",
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        ),
        database_path=Path(database_path),
        admin_email=os.getenv("RESORT_ADMIN_EMAIL", "admin@resort.local"),
        admin_password=os.getenv("RESORT_ADMIN_PASSWORD") or None,
        session_ttl_minutes=_env_int("RESORT_SESSION_TTL_MINUTES", 12 * 60),
        password_hash_iterations=_env_int("RESORT_PASSWORD_HASH_ITERATIONS", 200_000),
        default_page_size=_env_int("RESORT_DEFAULT_PAGE_SIZE", 10),
        max_page_size=_env_int("RESORT_MAX_PAGE_SIZE", 100),
        occupancy_lookback_days=_env_int("RESORT_OCCUPANCY_LOOKBACK_DAYS", 365),
        seed_demo_data=_env_bool("RESORT_SEED_DEMO_DATA", True),
        demo_random_seed=_env_int("RESORT_DEMO_RANDOM_SEED", 42),
        cors_origins=tuple(item.strip() for item in origins.split(",") if item.strip()),
    )
