"""Tour validation result."""

from pydantic import BaseModel, Field


class TourValidation(BaseModel):
    """Outcome of validate_tour.

    Errors block saving a finished tour; warnings are advisory only.
    """

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
