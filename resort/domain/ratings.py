"""Guest ratings attached to a room."""

from __future__ import annotations

from dataclasses import replace

from resort.domain.constraints import validate_rating_score
from resort.domain.errors import ConflictError
from resort.domain.models import Rating, Room


def average_rating(room: Room) -> float:
    if not room.ratings:
        return 0.0
    return round(sum(rating.score for rating in room.ratings) / len(room.ratings), 2)


def add_rating(room: Room, rating: Rating) -> Room:
    validate_rating_score(rating.score)
    if any(existing.guest_id == rating.guest_id for existing in room.ratings):
        raise ConflictError("You have already rated this room")
    return replace(room, ratings=room.ratings + (rating,))
