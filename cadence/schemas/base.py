"""Base schema configuration."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,  # Enable ORM mode
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class TimestampMixin(BaseModel):
    """Mixin for created_at/updated_at timestamps."""

    created_at: datetime
    updated_at: datetime


def _round_minutes(value: Any) -> Any:
    if isinstance(value, float):
        return round(value)
    return value


# Whole minutes; fractional values (JSON numbers from the model) are rounded
Minutes = Annotated[int, BeforeValidator(_round_minutes)]
