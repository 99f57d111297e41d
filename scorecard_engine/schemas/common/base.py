# --- File: scorecard_engine/schemas/common/base.py ---
"""
Base schema classes with common configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

__all__ = [
    "BaseSchema",
    "BaseRequestSchema",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    All application-facing schemas inherit from this to keep ORM loading
    and enum handling consistent.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class BaseRequestSchema(BaseSchema):
    """Base schema for request bodies; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")
