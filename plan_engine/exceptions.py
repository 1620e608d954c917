"""
Exceptions for the Payment Plan Engine

All engine failures are typed. Each one is also a ValueError so API layers
can keep catching validation problems with a single `except ValueError`.
"""

from typing import Optional


class PlanEngineError(Exception):
    """Base class for every error raised by the engine."""


class ValidationError(PlanEngineError, ValueError):
    """Input has the wrong shape or is out of range."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class InvalidDateError(ValidationError):
    """A date string could not be parsed or names an impossible date."""


class InvalidAmountError(ValidationError):
    """A money amount could not be parsed or is negative where it must not be."""
