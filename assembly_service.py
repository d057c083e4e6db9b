from __future__ import annotations

import logging
from typing import List, Optional

from db import (
    ExerciseRepository,
    SetRepository,
    WorkoutExerciseRepository,
    WorkoutRepository,
)
from models import WorkoutExerciseDetail, WorkoutWithDetails, as_utc

logger = logging.getLogger(__name__)


class WorkoutAssembler:
    """Join workouts with their exercises and sets.

    The read model is rebuilt on every call. Referential integrity is not
    enforced by the store, so a workout exercise pointing at an unknown
    exercise is left out of the result instead of raising.
    """

    def __init__(
        self,
        workout_repo: WorkoutRepository,
        exercise_repo: ExerciseRepository,
        workout_exercise_repo: WorkoutExerciseRepository,
        set_repo: SetRepository,
    ) -> None:
        self.workouts = workout_repo
        self.exercises = exercise_repo
        self.workout_exercises = workout_exercise_repo
        self.sets = set_repo

    def workout_detail(self, workout_id: str) -> Optional[WorkoutWithDetails]:
        with self.workouts.db.lock:
            workout = self.workouts.fetch(workout_id)
            if workout is None:
                return None
            linked = sorted(
                self.workout_exercises.fetch_for_workout(workout_id),
                key=lambda we: we.order,
            )
            details: List[WorkoutExerciseDetail] = []
            for we in linked:
                exercise = self.exercises.fetch(we.exercise_id)
                if exercise is None:
                    logger.warning(
                        "Workout exercise %s references unknown exercise %s",
                        we.id,
                        we.exercise_id,
                    )
                    continue
                details.append(
                    WorkoutExerciseDetail(
                        **we.model_dump(),
                        exercise=exercise,
                        sets=self.sets.fetch_for_workout_exercise(we.id),
                    )
                )
        return WorkoutWithDetails(**workout.model_dump(), exercises=details)

    def all_workout_details(self, newest_first: bool = False) -> List[WorkoutWithDetails]:
        """Return every workout assembled, optionally sorted by start time."""
        with self.workouts.db.lock:
            assembled = [self.workout_detail(w.id) for w in self.workouts.fetch_all()]
        result = [w for w in assembled if w is not None]
        if newest_first:
            result.sort(key=lambda w: as_utc(w.start_time), reverse=True)
        return result
