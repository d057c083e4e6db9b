import datetime
from typing import Optional

import requests


class TrackerClient:
    """Simple REST client for the workout API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 10) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api{path}"

    def _get(self, path: str, **params):
        resp = requests.get(self._url(path), params=params or None, timeout=self.timeout)
        resp.raise_for_status()
        return resp

    def _send(self, method: str, path: str, payload: dict):
        resp = getattr(requests, method)(self._url(path), json=payload, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def create_workout(
        self,
        name: str,
        start_time: Optional[datetime.datetime] = None,
        notes: Optional[str] = None,
    ) -> dict:
        start = start_time or datetime.datetime.now(datetime.timezone.utc)
        payload = {"name": name, "startTime": start.isoformat()}
        if notes is not None:
            payload["notes"] = notes
        return self._send("post", "/workouts", payload)

    def list_workouts(self) -> list:
        return self._get("/workouts").json()

    def get_workout(self, workout_id: str) -> dict:
        return self._get(f"/workouts/{workout_id}").json()

    def finish_workout(
        self, workout_id: str, end_time: Optional[datetime.datetime] = None
    ) -> dict:
        """Record the end time and the elapsed seconds since the start."""
        workout = self.get_workout(workout_id)
        start = datetime.datetime.fromisoformat(workout["startTime"].replace("Z", "+00:00"))
        end = end_time or datetime.datetime.now(start.tzinfo)
        duration = max(int((end - start).total_seconds()), 0)
        return self._send(
            "patch",
            f"/workouts/{workout_id}",
            {"endTime": end.isoformat(), "duration": duration},
        )

    def list_exercises(self, body_part: Optional[str] = None) -> list:
        params = {"bodyPart": body_part} if body_part else {}
        return self._get("/exercises", **params).json()

    def add_exercise(self, workout_id: str, exercise_id: str, order: int = 1) -> dict:
        return self._send(
            "post",
            f"/workouts/{workout_id}/exercises",
            {"exerciseId": exercise_id, "order": order},
        )

    def add_set(
        self,
        workout_exercise_id: str,
        set_number: int,
        weight: float,
        reps: int,
        rest_time: Optional[int] = None,
    ) -> dict:
        payload = {"setNumber": set_number, "weight": weight, "reps": reps}
        if rest_time is not None:
            payload["restTime"] = rest_time
        return self._send("post", f"/workout-exercises/{workout_exercise_id}/sets", payload)

    def stats(self, timeframe: str = "all") -> dict:
        return self._get("/stats", timeframe=timeframe).json()

    def progress(self, exercise_id: str) -> dict:
        return self._get(f"/exercises/{exercise_id}/progress").json()

    def export_csv(self) -> str:
        return self._get("/export/csv").text
