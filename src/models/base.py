"""
Common base models and utilities.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict


class FrozenModel(BaseModel):
    """Base model for immutable engine values."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to a JSON-compatible dictionary."""
        return self.model_dump(mode="json", exclude_none=True)


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)
