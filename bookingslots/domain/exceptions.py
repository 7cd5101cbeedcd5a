"""
Domain-specific exception hierarchy for the booking slots engine.
"""

from __future__ import annotations

from datetime import datetime


class BookingSlotsError(Exception):
    """Base class for all application-level errors."""


class InvalidInputError(BookingSlotsError, ValueError):
    """Raised for malformed dates, granularities or other caller input."""


class InvalidZoneError(InvalidInputError):
    """Raised when a zone identifier is not a known IANA zone."""

    def __init__(self, zone: object) -> None:
        self.zone = zone
        super().__init__(f"Unknown time zone: {zone!r}")


class AmbiguousOrNonexistentLocalTimeError(BookingSlotsError):
    """
    Raised when a wall-clock value falls into a DST gap or fold.

    ``kind`` is ``"nonexistent"`` for a gap and ``"ambiguous"`` for a fold.
    """

    def __init__(self, wall_clock: datetime, zone: str, kind: str) -> None:
        self.wall_clock = wall_clock
        self.zone = zone
        self.kind = kind
        super().__init__(
            f"Local time {wall_clock.isoformat()} is {kind} in zone {zone}"
        )


class ProviderNotFoundError(BookingSlotsError):
    """Raised by repositories when a provider id is unknown."""

    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        super().__init__(f"Provider not found: {provider_id}")
