"""Domain-level value checks for prices, discounts and ratings."""

from __future__ import annotations

import math

from resort.domain.errors import ValidationError


MIN_RATING_SCORE = 1
MAX_RATING_SCORE = 5


def validate_price(value: float, field_name: str = "price") -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be numeric")
    if math.isnan(value) or math.isinf(value):
        raise ValidationError(f"{field_name} must be a finite number")
    if value < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return float(value)


def validate_percentage(value: float) -> float:
    validate_price(value, "percentage")
    if value > 100:
        raise ValidationError("percentage must be between 0 and 100")
    return float(value)


def validate_minimum_stay(value: int | None) -> int | None:
    if value is None:
        return None
    if value < 1:
        raise ValidationError("minimum_stay must be at least one night")
    return value


def validate_rating_score(score: int) -> int:
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValidationError("rating score must be an integer")
    if not MIN_RATING_SCORE <= score <= MAX_RATING_SCORE:
        raise ValidationError(
            f"rating score must be between {MIN_RATING_SCORE} and {MAX_RATING_SCORE}"
        )
    return score


def validate_capacity(value: int, field_name: str = "capacity") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer")
    if value < 1:
        raise ValidationError(f"{field_name} must be at least 1")
    return value
