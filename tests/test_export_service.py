import csv
import datetime
import io
import json
import os
import sys
import unittest
from decimal import Decimal

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from rest_api import WorkoutAPI
from settings_schema import SettingsSchema
from export_service import CSV_HEADER


class ExportServiceTest(unittest.TestCase):
    def setUp(self) -> None:
        self.api = WorkoutAPI(settings=SettingsSchema())
        self.catalog = {e.name: e for e in self.api.exercises.fetch_all()}
        start = datetime.datetime(2024, 3, 4, 18, 0, tzinfo=datetime.timezone.utc)
        workout = self.api.workouts.create("Push, heavy", start)
        bench = self.api.workout_exercises.add(workout.id, self.catalog["Bench Press"].id, 1)
        dips = self.api.workout_exercises.add(workout.id, self.catalog["Dips"].id, 2)
        self.api.sets.add(bench.id, 2, "102.5", 5)
        self.api.sets.add(bench.id, 1, 100, 5)
        self.api.sets.add(dips.id, 1, 0, 12)
        self.api.workouts.create("Empty", start)

    def test_csv_rows(self) -> None:
        text = self.api.exports.export_csv()
        rows = list(csv.reader(io.StringIO(text)))
        self.assertEqual(rows[0], CSV_HEADER)
        self.assertEqual(len(rows) - 1, len(self.api.sets.fetch_all()))
        self.assertEqual(
            rows[1],
            ["2024-03-04", "Push, heavy", "Bench Press", "Chest", "1", "100", "5", "500"],
        )
        self.assertEqual([r[4] for r in rows[1:]], ["1", "2", "1"])
        for row in rows[1:]:
            self.assertEqual(Decimal(row[5]) * int(row[6]), Decimal(row[7]))

    def test_csv_writes_plain_decimals(self) -> None:
        api = WorkoutAPI(settings=SettingsSchema())
        start = datetime.datetime(2024, 3, 5, 7, 0, tzinfo=datetime.timezone.utc)
        workout = api.workouts.create("Legs", start)
        squat_id = next(e.id for e in api.exercises.fetch_all() if e.name == "Squat")
        squat = api.workout_exercises.add(workout.id, squat_id, 1)
        api.sets.add(squat.id, 1, "1e2", 5)
        api.sets.add(squat.id, 2, Decimal("3E+1"), 4)
        rows = list(csv.reader(io.StringIO(api.exports.export_csv())))
        self.assertEqual([r[5:] for r in rows[1:]], [["100", "5", "500"], ["30", "4", "120"]])

    def test_workout_name_with_comma_is_quoted(self) -> None:
        self.assertIn('"Push, heavy"', self.api.exports.export_csv())

    def test_empty_export_has_header_only(self) -> None:
        api = WorkoutAPI(settings=SettingsSchema())
        self.assertEqual(api.exports.export_csv(), ",".join(CSV_HEADER) + "\n")
        self.assertEqual(json.loads(api.exports.export_json()), [])

    def test_json_rows(self) -> None:
        data = json.loads(self.api.exports.export_json())
        self.assertEqual(len(data), 3)
        self.assertEqual(
            data[1],
            {
                "date": "2024-03-04",
                "workout": "Push, heavy",
                "exercise": "Bench Press",
                "bodyPart": "Chest",
                "set": 2,
                "weight": 102.5,
                "reps": 5,
                "volume": 512.5,
            },
        )
        self.assertEqual(data[2]["exercise"], "Dips")


if __name__ == "__main__":
    unittest.main()
