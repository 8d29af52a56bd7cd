"""Domain exceptions raised by pricing, catalogue and persistence code.

The HTTP layer maps each class to a status code (see api/errors.py).
"""

from typing import Any


class TourDeskError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 500

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []


class PricingError(TourDeskError, ValueError):
    """Pricing input cannot be priced at all (e.g. non-positive pax)."""

    status_code = 400


class NotFoundError(TourDeskError):
    """Requested resource does not exist in the caller's org."""

    status_code = 404


class ConflictError(TourDeskError):
    """Write would violate a catalogue invariant."""

    status_code = 409


class OverlappingRatesError(ConflictError):
    """More than one active rate matches the same service, date and tier."""

    def __init__(self, message: str, rate_ids: list[str]) -> None:
        super().__init__(message, details=[{"rate_id": rate_id} for rate_id in rate_ids])
        self.rate_ids = rate_ids
