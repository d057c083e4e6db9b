"""Request bodies accepted by the REST API."""

import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field, field_validator

from models import CamelModel


def _not_null(value):
    if value is None:
        raise ValueError("field may not be null")
    return value


class WorkoutCreate(CamelModel):
    name: str = Field(min_length=1)
    start_time: datetime.datetime
    end_time: Optional[datetime.datetime] = None
    duration: Optional[int] = Field(default=None, ge=0)
    total_volume: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class WorkoutUpdate(CamelModel):
    """Partial workout update; only the fields sent are applied."""

    name: Optional[str] = Field(default=None, min_length=1)
    start_time: Optional[datetime.datetime] = None
    end_time: Optional[datetime.datetime] = None
    duration: Optional[int] = Field(default=None, ge=0)
    total_volume: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @field_validator("name", "start_time", "total_volume")
    @classmethod
    def _required(cls, value):
        return _not_null(value)


class ExerciseCreate(CamelModel):
    name: str = Field(min_length=1)
    body_part: str = Field(min_length=1)
    category: Literal["upper", "lower"]


class WorkoutExerciseCreate(CamelModel):
    exercise_id: str = Field(min_length=1)
    order: int = Field(default=1, ge=1)


class SetCreate(CamelModel):
    set_number: int = Field(ge=1)
    weight: Decimal = Field(ge=0)
    reps: int = Field(ge=1)
    rest_time: Optional[int] = Field(default=None, ge=0)


class SetUpdate(CamelModel):
    set_number: Optional[int] = Field(default=None, ge=1)
    weight: Optional[Decimal] = Field(default=None, ge=0)
    reps: Optional[int] = Field(default=None, ge=1)
    rest_time: Optional[int] = Field(default=None, ge=0)

    @field_validator("set_number", "weight", "reps")
    @classmethod
    def _required(cls, value):
        return _not_null(value)
