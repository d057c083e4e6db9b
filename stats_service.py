from __future__ import annotations

import datetime
import math
from decimal import Decimal
from typing import Dict, List, Optional

from db import (
    ExerciseRepository,
    SetRepository,
    WorkoutExerciseRepository,
    WorkoutRepository,
    to_decimal,
)
from models import ExerciseProgress, ProgressPoint, Workout, as_utc

TIMEFRAMES = {
    "week": datetime.timedelta(days=7),
    "month": datetime.timedelta(days=30),
    "all": None,
}


class StatisticsService:
    """Compute workout statistics for analysis."""

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

    def _filter_workouts(
        self, timeframe: str, now: Optional[datetime.datetime] = None
    ) -> List[Workout]:
        if timeframe not in TIMEFRAMES:
            raise ValueError(f"timeframe must be one of {', '.join(TIMEFRAMES)}")
        workouts = self.workouts.fetch_all()
        window = TIMEFRAMES[timeframe]
        if window is None:
            return workouts
        now = as_utc(now) if now is not None else datetime.datetime.now(datetime.timezone.utc)
        cutoff = now - window
        return [w for w in workouts if as_utc(w.start_time) >= cutoff]

    @staticmethod
    def _round_minutes(seconds: float) -> int:
        # half-up, not banker's rounding
        return int(math.floor(seconds / 60 + 0.5))

    def workout_stats(
        self, timeframe: str = "all", now: Optional[datetime.datetime] = None
    ) -> Dict[str, object]:
        """Return workout count, volume, average duration and body part counts."""
        with self.workouts.db.lock:
            workouts = self._filter_workouts(timeframe, now)
            total_volume = sum(
                (to_decimal(w.total_volume or 0) for w in workouts), Decimal("0")
            )
            avg_duration = (
                sum(w.duration or 0 for w in workouts) / len(workouts)
                if workouts
                else 0
            )
            counts: Dict[str, int] = {}
            for workout in workouts:
                for we in self.workout_exercises.fetch_for_workout(workout.id):
                    exercise = self.exercises.fetch(we.exercise_id)
                    if exercise is not None:
                        counts[exercise.body_part] = counts.get(exercise.body_part, 0) + 1
        distribution = sorted(
            ({"bodyPart": part, "count": count} for part, count in counts.items()),
            key=lambda item: item["count"],
            reverse=True,
        )
        return {
            "totalWorkouts": len(workouts),
            "totalVolume": float(total_volume),
            "avgDuration": self._round_minutes(avg_duration),
            "bodyPartDistribution": distribution,
        }

    def exercise_progress(self, exercise_id: str) -> Optional[ExerciseProgress]:
        """Return per-session max weight and volume for ``exercise_id``.

        Sessions without a workout or without sets are skipped. The series is
        sorted by the UTC day of the workout start time.
        """
        with self.workouts.db.lock:
            exercise = self.exercises.fetch(exercise_id)
            if exercise is None:
                return None
            points: List[ProgressPoint] = []
            max_weight = Decimal("0")
            total_volume = Decimal("0")
            for we in self.workout_exercises.fetch_for_exercise(exercise_id):
                workout = self.workouts.fetch(we.workout_id)
                sets = self.sets.fetch_for_workout_exercise(we.id)
                if workout is None or not sets:
                    continue
                session_max = max(s.weight for s in sets)
                session_volume = sum((s.volume for s in sets), Decimal("0"))
                max_weight = max(max_weight, session_max)
                total_volume += session_volume
                points.append(
                    ProgressPoint(
                        date=as_utc(workout.start_time).date().isoformat(),
                        weight=float(session_max),
                        volume=float(session_volume),
                    )
                )
        points.sort(key=lambda p: p.date)
        return ExerciseProgress(
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            max_weight=float(max_weight),
            total_volume=float(total_volume),
            progress_data=points,
        )
