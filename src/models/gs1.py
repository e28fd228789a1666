"""
GS1 Application Identifier models.
"""

from enum import Enum

from pydantic import Field

from src.models.base import FrozenModel


class AIFormat(str, Enum):
    """Character class of an AI value."""

    NUMERIC = "N"
    ALPHANUMERIC = "X"


class ApplicationIdentifierDefinition(FrozenModel):
    """Static definition of one GS1 Application Identifier."""

    ai: str = Field(..., min_length=2, max_length=4, pattern=r"^\d{2,4}$")
    name: str
    format: AIFormat
    min_length: int = Field(..., ge=1)
    max_length: int = Field(..., ge=1)
    is_fixed_length: bool
    fnc1_required: bool = Field(False, description="Field must be terminated by a separator")


class ParsedApplicationIdentifier(FrozenModel):
    """One AI/value pair read from a payload."""

    ai: str
    name: str
    value: str
    is_valid: bool
    error: str | None = None


class GS1ValidationResult(FrozenModel):
    """Outcome of parsing and validating a GS1 element string."""

    is_valid: bool
    has_gs1_prefix: bool = False
    application_identifiers: list[ParsedApplicationIdentifier] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def get(self, ai: str) -> ParsedApplicationIdentifier | None:
        """First parsed element with the given AI."""
        for element in self.application_identifiers:
            if element.ai == ai:
                return element
        return None
