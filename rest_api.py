import logging
from typing import Literal, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from assembly_service import WorkoutAssembler
from config import APP_VERSION, YamlConfig
from db import (
    Database,
    ExerciseRepository,
    SetRepository,
    WorkoutExerciseRepository,
    WorkoutRepository,
)
from export_service import ExportService
from schemas import (
    ExerciseCreate,
    SetCreate,
    SetUpdate,
    WorkoutCreate,
    WorkoutExerciseCreate,
    WorkoutUpdate,
)
from settings_schema import SettingsSchema, validate_settings
from stats_service import StatisticsService

logger = logging.getLogger(__name__)


class WorkoutAPI:
    """Provides REST endpoints for workout logging."""

    def __init__(
        self,
        db: Database | None = None,
        yaml_path: str | None = None,
        settings: SettingsSchema | None = None,
    ) -> None:
        self.config = YamlConfig(yaml_path)
        self.settings = (
            settings if settings is not None else validate_settings(self.config.load())
        )
        self.db = db if db is not None else Database(
            seed_exercises=self.settings.seed_default_exercises
        )
        self.workouts = WorkoutRepository(self.db)
        self.exercises = ExerciseRepository(self.db)
        self.workout_exercises = WorkoutExerciseRepository(self.db)
        self.sets = SetRepository(self.db)
        self.assembler = WorkoutAssembler(
            self.workouts, self.exercises, self.workout_exercises, self.sets
        )
        self.statistics = StatisticsService(
            self.workouts, self.exercises, self.workout_exercises, self.sets
        )
        self.exports = ExportService(self.assembler)
        self.app = FastAPI(
            title="Workout Tracker API",
            description="REST API for workout logging and statistics",
            version=APP_VERSION,
        )
        self._setup_error_handlers()
        self._setup_routes()

    def _accrue_volume(self, workout_exercise_id: str, delta) -> None:
        """Add ``delta`` to the volume of the workout owning the exercise."""
        we = self.workout_exercises.fetch(workout_exercise_id)
        if we is None:
            logger.warning(
                "Volume not updated: unknown workout exercise %s", workout_exercise_id
            )
            return
        if self.workouts.add_volume(we.workout_id, delta) is None:
            logger.warning("Volume not updated: unknown workout %s", we.workout_id)

    def _setup_error_handlers(self) -> None:
        @self.app.exception_handler(RequestValidationError)
        async def validation_error(request: Request, exc: RequestValidationError):
            errors = [
                {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                for e in exc.errors()
            ]
            return JSONResponse(
                status_code=400,
                content={"message": "Invalid request data", "errors": errors},
            )

        @self.app.exception_handler(ValueError)
        async def value_error(request: Request, exc: ValueError):
            return JSONResponse(status_code=400, content={"message": str(exc)})

        @self.app.exception_handler(Exception)
        async def internal_error(request: Request, exc: Exception):
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=500, content={"message": "Internal server error"}
            )

    def _setup_routes(self) -> None:
        router = APIRouter(prefix="/api")

        @self.app.get("/health")
        def health():
            return {"status": "ok"}

        @router.get(
            "/workouts",
            summary="List workouts",
            description="All workouts with exercises and sets, newest first.",
        )
        def list_workouts():
            return self.assembler.all_workout_details(newest_first=True)

        @router.get("/workouts/{workout_id}")
        def get_workout(workout_id: str):
            workout = self.assembler.workout_detail(workout_id)
            if workout is None:
                raise HTTPException(status_code=404, detail="Workout not found")
            return workout

        @router.post(
            "/workouts",
            status_code=201,
            summary="Create workout",
            description="Start a new workout session.",
        )
        def create_workout(payload: WorkoutCreate):
            workout = self.workouts.create(**payload.model_dump())
            logger.info("Workout %s created", workout.id)
            return workout

        @router.patch("/workouts/{workout_id}")
        def update_workout(workout_id: str, payload: WorkoutUpdate):
            workout = self.workouts.update(
                workout_id, **payload.model_dump(exclude_unset=True)
            )
            if workout is None:
                raise HTTPException(status_code=404, detail="Workout not found")
            return workout

        @router.delete("/workouts/{workout_id}", status_code=204)
        def delete_workout(workout_id: str):
            if not self.workouts.delete(workout_id):
                raise HTTPException(status_code=404, detail="Workout not found")
            logger.info("Workout %s deleted", workout_id)
            return Response(status_code=204)

        @router.get("/workouts/{workout_id}/exercises")
        def list_workout_exercises(workout_id: str):
            rows = self.workout_exercises.fetch_for_workout(workout_id)
            return sorted(rows, key=lambda we: we.order)

        @router.post("/workouts/{workout_id}/exercises", status_code=201)
        def add_exercise_to_workout(workout_id: str, payload: WorkoutExerciseCreate):
            return self.workout_exercises.add(
                workout_id, payload.exercise_id, payload.order
            )

        @router.get("/exercises")
        def list_exercises(body_part: Optional[str] = Query(None, alias="bodyPart")):
            if body_part:
                return self.exercises.fetch_by_body_part(body_part)
            return self.exercises.fetch_all()

        @router.post("/exercises", status_code=201)
        def create_exercise(payload: ExerciseCreate):
            return self.exercises.create(
                payload.name, payload.body_part, payload.category, is_custom=True
            )

        @router.get("/exercises/{exercise_id}")
        def get_exercise(exercise_id: str):
            exercise = self.exercises.fetch(exercise_id)
            if exercise is None:
                raise HTTPException(status_code=404, detail="Exercise not found")
            return exercise

        @router.get("/exercises/{exercise_id}/progress")
        def exercise_progress(exercise_id: str):
            progress = self.statistics.exercise_progress(exercise_id)
            if progress is None:
                raise HTTPException(status_code=404, detail="Exercise not found")
            return progress

        @router.get("/workout-exercises/{workout_exercise_id}/sets")
        def list_sets(workout_exercise_id: str):
            return self.sets.fetch_for_workout_exercise(workout_exercise_id)

        @router.post(
            "/workout-exercises/{workout_exercise_id}/sets",
            status_code=201,
            summary="Log set",
            description="Add a set and accrue its volume on the owning workout.",
        )
        def add_set(workout_exercise_id: str, payload: SetCreate):
            with self.db.lock:
                created = self.sets.add(
                    workout_exercise_id,
                    payload.set_number,
                    payload.weight,
                    payload.reps,
                    payload.rest_time,
                )
                self._accrue_volume(workout_exercise_id, created.volume)
            return created

        @router.patch("/sets/{set_id}")
        def update_set(set_id: str, payload: SetUpdate):
            with self.db.lock:
                existing = self.sets.fetch(set_id)
                if existing is None:
                    raise HTTPException(status_code=404, detail="Set not found")
                updated = self.sets.update(
                    set_id, **payload.model_dump(exclude_unset=True)
                )
                delta = updated.volume - existing.volume
                if delta:
                    self._accrue_volume(updated.workout_exercise_id, delta)
            return updated

        @router.delete("/sets/{set_id}", status_code=204)
        def delete_set(set_id: str):
            with self.db.lock:
                existing = self.sets.fetch(set_id)
                if existing is None or not self.sets.remove(set_id):
                    raise HTTPException(status_code=404, detail="Set not found")
                self._accrue_volume(existing.workout_exercise_id, -existing.volume)
            return Response(status_code=204)

        @router.get(
            "/stats",
            summary="Workout statistics",
            description="Totals over the last week, the last 30 days or all time.",
        )
        def workout_stats(timeframe: Optional[Literal["week", "month", "all"]] = None):
            return self.statistics.workout_stats(
                timeframe or self.settings.default_timeframe
            )

        @router.get("/export/csv")
        def export_csv():
            data = self.exports.export_csv()
            filename = self.settings.export_filename
            return Response(
                content=data,
                media_type="text/csv",
                headers={"Content-Disposition": f'attachment; filename="{filename}"'},
            )

        @router.get("/export/json")
        def export_json():
            return Response(content=self.exports.export_json(), media_type="application/json")

        self.app.include_router(router)


def create_app(yaml_path: str | None = None) -> FastAPI:
    """Build the application; used by ``uvicorn rest_api:create_app --factory``."""
    return WorkoutAPI(yaml_path=yaml_path).app


if __name__ == "__main__":
    import uvicorn

    api = WorkoutAPI()
    uvicorn.run(api.app, host=api.settings.host, port=api.settings.port)
