"""Base DTO classes."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DTO(BaseModel):
    """Base class for application DTOs."""

    # Web forms send phone numbers as JSON numbers too
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)


class CamelDTO(BaseModel):
    """Base class for DTOs exchanged with browser clients in camelCase."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)
