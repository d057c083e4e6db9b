import logging
import threading
import uuid
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from models import Exercise, Workout, WorkoutExercise, WorkoutSet

logger = logging.getLogger(__name__)

DEFAULT_EXERCISES = [
    ("Bench Press", "Chest", "upper"),
    ("Squat", "Legs", "lower"),
    ("Deadlift", "Back", "lower"),
    ("Overhead Press", "Shoulders", "upper"),
    ("Barbell Row", "Back", "upper"),
    ("Pull-ups", "Back", "upper"),
    ("Dips", "Chest", "upper"),
    ("Bicep Curls", "Arms", "upper"),
    ("Tricep Extensions", "Arms", "upper"),
    ("Lunges", "Legs", "lower"),
]

CATEGORIES = {"upper", "lower"}


def new_id() -> str:
    return str(uuid.uuid4())


def to_decimal(value) -> Decimal:
    """Convert ``value`` to ``Decimal`` going through ``str`` for floats."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"invalid decimal value: {value!r}")


class Database:
    """Holds the in-memory entity tables and the lock guarding them.

    Nothing is persisted: every table lives for the lifetime of the object.
    All repositories built on the same instance share the tables and the
    lock, so a caller holding ``lock`` sees a consistent snapshot and may
    chain several repository calls into one critical section.
    """

    _TABLES = ("workouts", "exercises", "workout_exercises", "sets")

    def __init__(self, seed_exercises: bool = True) -> None:
        self.lock = threading.RLock()
        self._tables: Dict[str, Dict[str, object]] = {
            name: {} for name in self._TABLES
        }
        if seed_exercises:
            self._import_default_exercises()

    @contextmanager
    def _connection(self):
        with self.lock:
            yield self._tables

    def _import_default_exercises(self) -> None:
        with self._connection() as tables:
            for name, body_part, category in DEFAULT_EXERCISES:
                exercise = Exercise(
                    id=new_id(),
                    name=name,
                    body_part=body_part,
                    category=category,
                    is_custom=False,
                )
                tables["exercises"][exercise.id] = exercise
        logger.info("Seeded %d default exercises", len(DEFAULT_EXERCISES))

    def clear(self) -> None:
        with self._connection() as tables:
            for table in tables.values():
                table.clear()


class BaseRepository:
    """Base repository providing helper methods over one table."""

    table = ""
    model = None
    _DECIMALS = frozenset()

    def __init__(self, db: Database) -> None:
        self.db = db

    def _check(self, row) -> None:
        """Enforce rules the field types cannot express; raise ``ValueError``."""

    def _build(self, fields: dict):
        data = {
            key: to_decimal(value)
            if key in self._DECIMALS and value is not None
            else value
            for key, value in fields.items()
        }
        row = self.model.model_validate(data)
        self._check(row)
        return row

    def _insert(self, row):
        with self.db._connection() as tables:
            tables[self.table][row.id] = row
        logger.debug("Inserted %s %s", self.table, row.id)
        return row.model_copy(deep=True)

    def _get(self, row_id: str):
        with self.db._connection() as tables:
            row = tables[self.table].get(row_id)
            return row.model_copy(deep=True) if row is not None else None

    def _rows(self) -> List:
        with self.db._connection() as tables:
            return [row.model_copy(deep=True) for row in tables[self.table].values()]

    def _merge(self, row_id: str, fields: dict):
        with self.db._connection() as tables:
            existing = tables[self.table].get(row_id)
            if existing is None:
                return None
            # The merged record goes through the same validation as a new one.
            updated = self._build({**existing.model_dump(), **fields})
            tables[self.table][row_id] = updated
        logger.debug("Updated %s %s: %s", self.table, row_id, sorted(fields))
        return updated.model_copy(deep=True)

    def _delete(self, row_id: str) -> bool:
        with self.db._connection() as tables:
            existed = tables[self.table].pop(row_id, None) is not None
        if existed:
            logger.debug("Deleted %s %s", self.table, row_id)
        return existed


class WorkoutRepository(BaseRepository):
    """Repository for workout records."""

    table = "workouts"
    model = Workout
    _FIELDS = {"name", "start_time", "end_time", "duration", "total_volume", "notes"}
    _DECIMALS = frozenset({"total_volume"})

    def _check(self, row: Workout) -> None:
        if not row.name:
            raise ValueError("name must not be empty")
        if row.duration is not None and row.duration < 0:
            raise ValueError("duration must be non-negative")
        if row.total_volume < 0:
            raise ValueError("total_volume must be non-negative")

    def create(
        self,
        name: str,
        start_time,
        end_time=None,
        duration: Optional[int] = None,
        total_volume=None,
        notes: Optional[str] = None,
    ) -> Workout:
        fields = {
            "id": new_id(),
            "name": name,
            "start_time": start_time,
            "end_time": end_time,
            "duration": duration,
            "notes": notes,
        }
        if total_volume is not None:
            fields["total_volume"] = total_volume
        return self._insert(self._build(fields))

    def fetch(self, workout_id: str) -> Optional[Workout]:
        return self._get(workout_id)

    def fetch_all(self) -> List[Workout]:
        return self._rows()

    def update(self, workout_id: str, **fields) -> Optional[Workout]:
        unknown = set(fields) - self._FIELDS
        if unknown:
            raise ValueError(f"unknown workout fields: {', '.join(sorted(unknown))}")
        return self._merge(workout_id, fields)

    def add_volume(self, workout_id: str, delta) -> Optional[Workout]:
        """Add ``delta`` to the stored total volume of ``workout_id``."""
        with self.db.lock:
            workout = self.fetch(workout_id)
            if workout is None:
                return None
            total = workout.total_volume + to_decimal(delta)
            return self._merge(workout_id, {"total_volume": total})

    def delete(self, workout_id: str) -> bool:
        return self._delete(workout_id)


class ExerciseRepository(BaseRepository):
    """Repository for the exercise catalog."""

    table = "exercises"

    def create(
        self, name: str, body_part: str, category: str, is_custom: bool = False
    ) -> Exercise:
        if not name:
            raise ValueError("name must not be empty")
        if not body_part:
            raise ValueError("body_part must not be empty")
        if category not in CATEGORIES:
            raise ValueError("category must be 'upper' or 'lower'")
        return self._insert(
            Exercise(
                id=new_id(),
                name=name,
                body_part=body_part,
                category=category,
                is_custom=is_custom,
            )
        )

    def fetch(self, exercise_id: str) -> Optional[Exercise]:
        return self._get(exercise_id)

    def fetch_all(self) -> List[Exercise]:
        return self._rows()

    def fetch_by_body_part(self, body_part: str) -> List[Exercise]:
        wanted = body_part.lower()
        return [e for e in self._rows() if e.body_part.lower() == wanted]


class WorkoutExerciseRepository(BaseRepository):
    """Repository linking exercises to workouts."""

    table = "workout_exercises"

    def add(self, workout_id: str, exercise_id: str, order: int = 1) -> WorkoutExercise:
        if order < 1:
            raise ValueError("order must be positive")
        return self._insert(
            WorkoutExercise(
                id=new_id(),
                workout_id=workout_id,
                exercise_id=exercise_id,
                order=order,
            )
        )

    def fetch(self, workout_exercise_id: str) -> Optional[WorkoutExercise]:
        return self._get(workout_exercise_id)

    def fetch_for_workout(self, workout_id: str) -> List[WorkoutExercise]:
        return [we for we in self._rows() if we.workout_id == workout_id]

    def fetch_for_exercise(self, exercise_id: str) -> List[WorkoutExercise]:
        return [we for we in self._rows() if we.exercise_id == exercise_id]


class SetRepository(BaseRepository):
    """Repository for logged sets."""

    table = "sets"
    model = WorkoutSet
    _FIELDS = {"set_number", "weight", "reps", "rest_time"}
    _DECIMALS = frozenset({"weight"})

    def _check(self, row: WorkoutSet) -> None:
        if row.set_number < 1:
            raise ValueError("set_number must be positive")
        if row.reps <= 0:
            raise ValueError("reps must be positive")
        if row.weight < 0:
            raise ValueError("weight must be non-negative")
        if row.rest_time is not None and row.rest_time < 0:
            raise ValueError("rest_time must be non-negative")

    def add(
        self,
        workout_exercise_id: str,
        set_number: int,
        weight,
        reps: int,
        rest_time: Optional[int] = None,
    ) -> WorkoutSet:
        return self._insert(
            self._build(
                {
                    "id": new_id(),
                    "workout_exercise_id": workout_exercise_id,
                    "set_number": set_number,
                    "weight": weight,
                    "reps": reps,
                    "rest_time": rest_time,
                }
            )
        )

    def fetch(self, set_id: str) -> Optional[WorkoutSet]:
        return self._get(set_id)

    def fetch_all(self) -> List[WorkoutSet]:
        return self._rows()

    def fetch_for_workout_exercise(self, workout_exercise_id: str) -> List[WorkoutSet]:
        sets = [s for s in self._rows() if s.workout_exercise_id == workout_exercise_id]
        return sorted(sets, key=lambda s: s.set_number)

    def update(self, set_id: str, **fields) -> Optional[WorkoutSet]:
        unknown = set(fields) - self._FIELDS
        if unknown:
            raise ValueError(f"unknown set fields: {', '.join(sorted(unknown))}")
        return self._merge(set_id, fields)

    def remove(self, set_id: str) -> bool:
        return self._delete(set_id)
