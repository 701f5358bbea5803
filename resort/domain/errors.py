"""Typed failures raised by the domain core and the services around it."""

from __future__ import annotations


class ResortError(Exception):
    """Base exception for resort operations."""


class ValidationError(ResortError):
    """Raised for malformed intervals, prices, percentages or scores."""


class NotFoundError(ResortError):
    """Raised when a referenced room, booking or owned entry does not exist."""


class ConflictError(ResortError):
    """Raised when a write would violate an overlap or uniqueness rule."""
