from __future__ import annotations

import uuid
from typing import Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import HABIT_ID_PREFIX

_M = TypeVar("_M", bound=BaseModel)


def _check_name(v: str) -> str:
    """
    Reject empty or whitespace-only names. The name itself is kept verbatim
    so lookups match exactly what the user typed.
    """
    if v is None or not v.strip():
        raise ValueError("habit name must not be empty")
    return v


# PUBLIC_INTERFACE
class HabitCreate(BaseModel):
    """
    Schema for creating a new habit.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"name": "read"}})

    name: str = Field(..., description="Unique habit name")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v)


# PUBLIC_INTERFACE
class HabitRename(BaseModel):
    """
    Schema for renaming a habit in place.

    Only emptiness of `new_name` is checked; collisions with another habit
    are not.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"name": "read", "new_name": "reading"}})

    name: str = Field(..., description="Current habit name")
    new_name: str = Field(..., description="Name to rename the habit to")

    @field_validator("new_name")
    @classmethod
    def validate_new_name(cls, v: str) -> str:
        return _check_name(v)


# PUBLIC_INTERFACE
def validate(model: Type[_M], **data: object) -> _M:
    """
    Build `model` from keyword data, translating pydantic failures into
    htrackr's ValidationError.
    """
    try:
        return model(**data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        message = str(first.get("msg", "invalid input"))
        # pydantic prefixes custom ValueError messages
        message = message.removeprefix("Value error, ")
        raise ValidationError(message) from e


def new_habit_id() -> str:
    """Generate a fresh, globally unique habit identifier."""
    return f"{HABIT_ID_PREFIX}{uuid.uuid4()}"
