#!/usr/bin/env python3
"""Validate local resort backend environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import date, timedelta
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resort.domain.intervals import parse_interval
from resort.repository.data_repository import DataRepository
from resort.services.room_service import RoomService
from resort.utils.config import get_settings

SEPARATOR_LINE = "=" * 44
EXPECTED_DEMO_ROOMS = 12


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="resort-env-")

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable with versions
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    from importlib.metadata import PackageNotFoundError, version

    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except (ImportError, PackageNotFoundError) as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        base_settings = get_settings()
        validation_settings = replace(
            base_settings,
            database_path=Path(temp_dir) / "resort_validation.db",
        )
        repository = DataRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Demo room seeding
        try:
            repository.seed_demo_rooms()
            seeded = repository.count_rooms()
            if seeded != EXPECTED_DEMO_ROOMS:
                raise RuntimeError(f"expected {EXPECTED_DEMO_ROOMS} rooms, got {seeded}")
            ok, line = _print_result(f"Demo rooms: {seeded} rooms", True)
        except Exception as exc:
            ok, line = _print_result("Demo rooms", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Price and availability resolution
        room_service = RoomService(repository=repository, settings=validation_settings)
        try:
            room = room_service.list_rooms(limit=1).rooms[0]
            check_in = date.today() + timedelta(days=7)
            stay = parse_interval(check_in, check_in + timedelta(days=3))
            availability = room_service.check_availability(int(room.room_id), stay)
            if not availability["available"]:
                raise RuntimeError(f"room {room.room_number} unexpectedly unavailable")
            price = room_service.price_for(int(room.room_id), check_in)
            if price != room.price_per_night:
                raise RuntimeError(f"expected {room.price_per_night}, got {price}")
            ok, line = _print_result(
                "Price/availability",
                True,
                f": room {room.room_number} at {price:.2f}/night",
            )
        except Exception as exc:
            ok, line = _print_result("Price/availability", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Resort Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
