from __future__ import annotations

import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def as_utc(value: datetime.datetime) -> datetime.datetime:
    """Return ``value`` as an aware UTC datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


class CamelModel(BaseModel):
    """Base model serialising field names in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Workout(CamelModel):
    id: str
    name: str
    start_time: datetime.datetime
    end_time: Optional[datetime.datetime] = None
    duration: Optional[int] = None
    total_volume: Decimal = Decimal("0")
    notes: Optional[str] = None


class Exercise(CamelModel):
    id: str
    name: str
    body_part: str
    category: str
    is_custom: bool = False


class WorkoutExercise(CamelModel):
    id: str
    workout_id: str
    exercise_id: str
    order: int


class WorkoutSet(CamelModel):
    id: str
    workout_exercise_id: str
    set_number: int
    weight: Decimal
    reps: int
    rest_time: Optional[int] = None

    @property
    def volume(self) -> Decimal:
        return self.weight * self.reps


class WorkoutExerciseDetail(WorkoutExercise):
    exercise: Exercise
    sets: List[WorkoutSet] = []


class WorkoutWithDetails(Workout):
    """Workout joined with its ordered exercises and their ordered sets."""

    exercises: List[WorkoutExerciseDetail] = []


class ProgressPoint(CamelModel):
    date: str
    weight: float
    volume: float


class ExerciseProgress(CamelModel):
    exercise_id: str
    exercise_name: str
    max_weight: float
    total_volume: float
    progress_data: List[ProgressPoint] = []
