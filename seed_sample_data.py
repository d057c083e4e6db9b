import datetime
import logging

from rest_api import WorkoutAPI

logger = logging.getLogger(__name__)

SAMPLE_SESSIONS = [
    (
        9,
        "Push Day",
        3600,
        [("Bench Press", [(135, 10), (135, 8), (145, 6)]), ("Dips", [(0, 12), (0, 10)])],
    ),
    (
        5,
        "Leg Day",
        4200,
        [("Squat", [(185, 8), (205, 5)]), ("Lunges", [(40, 12)])],
    ),
    (
        2,
        "Push Day",
        3300,
        [("Bench Press", [(145, 8), (155, 5)]), ("Overhead Press", [(95, 8)])],
    ),
]


def seed(api: WorkoutAPI, now: datetime.datetime | None = None) -> bool:
    """Populate an empty store with sample sessions; return whether it did."""
    if api.workouts.fetch_all():
        logger.info("Store already contains workouts")
        return False
    now = now or datetime.datetime.now(datetime.timezone.utc)
    catalog = {e.name: e for e in api.exercises.fetch_all()}
    for days_ago, name, duration, entries in SAMPLE_SESSIONS:
        start = now - datetime.timedelta(days=days_ago)
        workout = api.workouts.create(
            name,
            start,
            end_time=start + datetime.timedelta(seconds=duration),
            duration=duration,
        )
        for order, (exercise_name, sets) in enumerate(entries, start=1):
            exercise = catalog.get(exercise_name)
            if exercise is None:
                continue
            we = api.workout_exercises.add(workout.id, exercise.id, order)
            for number, (weight, reps) in enumerate(sets, start=1):
                created = api.sets.add(we.id, number, weight, reps, rest_time=90)
                api.workouts.add_volume(workout.id, created.volume)
    logger.info("Seeded %d sample workouts", len(SAMPLE_SESSIONS))
    return True


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    api = WorkoutAPI()
    seed(api)
    print(api.exports.export_csv())
