import csv
import io
import json
from typing import Iterator, List

from assembly_service import WorkoutAssembler
from models import as_utc

CSV_HEADER = ["Date", "Workout", "Exercise", "Body Part", "Set", "Weight", "Reps", "Volume"]


class ExportService:
    """Flatten assembled workouts into one row per logged set."""

    def __init__(self, assembler: WorkoutAssembler) -> None:
        self.assembler = assembler

    def rows(self) -> Iterator[dict]:
        for workout in self.assembler.all_workout_details():
            date = as_utc(workout.start_time).date().isoformat()
            for entry in workout.exercises:
                for s in entry.sets:
                    yield {
                        "date": date,
                        "workout": workout.name,
                        "exercise": entry.exercise.name,
                        "bodyPart": entry.exercise.body_part,
                        "set": s.set_number,
                        "weight": s.weight,
                        "reps": s.reps,
                        "volume": s.volume,
                    }

    def export_csv(self) -> str:
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for row in self.rows():
            writer.writerow(
                [
                    row["date"],
                    row["workout"],
                    row["exercise"],
                    row["bodyPart"],
                    row["set"],
                    format(row["weight"], "f"),
                    row["reps"],
                    format(row["volume"], "f"),
                ]
            )
        return output.getvalue()

    def export_json(self) -> str:
        """Return the exported rows as a JSON array."""
        data: List[dict] = []
        for row in self.rows():
            row["weight"] = float(row["weight"])
            row["volume"] = float(row["volume"])
            data.append(row)
        return json.dumps(data)
