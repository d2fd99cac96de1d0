"""
JSON-document record store for plans, the exercise catalog and set logs.

The whole store is one JSON file holding a list of rows per table plus the
next id of each table. Writes only happen through transaction(), which
works on a deep copy and replaces the file atomically on success, so a
failed generation run leaves the previous state untouched.
"""

import copy
import json
import os
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

from ..core.errors import StoreError
from ..core.models import (
    ExerciseRecord,
    GenerationInputsRecord,
    PlanRecord,
    PlanRequest,
    PlanWeekRecord,
    SetLogRecord,
    WorkoutExerciseRecord,
    WorkoutRecord,
)
from .serializers import (
    dict_to_exercise_record,
    dict_to_generation_inputs,
    dict_to_plan_record,
    dict_to_plan_week_record,
    dict_to_set_log_record,
    dict_to_workout_exercise_record,
    dict_to_workout_record,
    exercise_record_to_dict,
    generation_inputs_to_dict,
    plan_record_to_dict,
    plan_week_record_to_dict,
    set_log_record_to_dict,
    workout_exercise_record_to_dict,
    workout_record_to_dict,
)

SCHEMA_VERSION = 1

TABLES: tuple[str, ...] = (
    "exercises",
    "plans",
    "plan_generation_inputs",
    "plan_weeks",
    "workouts",
    "workout_exercises",
    "set_logs",
)


def _empty_document() -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "next_ids": {table: 1 for table in TABLES},
        **{table: [] for table in TABLES},
    }


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


class StoreTransaction:
    """
    Write handle over a private copy of the store document.

    Created by PlanStore.transaction(); nothing written here is visible
    until the transaction commits.
    """

    def __init__(self, data: dict[str, Any]):
        self._data = data

    def _insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        row_id = self._data["next_ids"][table]
        self._data["next_ids"][table] = row_id + 1
        row = {"id": row_id, **row}
        self._data[table].append(row)
        return row

    def _require(self, table: str, row_id: int) -> None:
        if not any(r.get("id") == row_id for r in self._data[table]):
            raise StoreError(f"No {table} row with id {row_id}")

    def seed_exercises(self, entries: list[dict]) -> int:
        """
        Add catalog entries; existing (name, base_lift) pairs are updated in place.

        Returns:
            Number of newly added exercises
        """
        existing = {(r["name"], r["base_lift"]): r for r in self._data["exercises"]}
        added = 0
        for entry in entries:
            key = (entry["name"], entry["base_lift"])
            if key in existing:
                existing[key]["is_main_lift"] = entry["is_main_lift"]
                existing[key]["tracking_mode"] = entry["tracking_mode"]
                continue
            row = self._insert("exercises", dict(entry))
            dict_to_exercise_record(row)
            existing[key] = row
            added += 1
        return added

    def deactivate_active_plans(self, user_id: str) -> list[int]:
        """Mark every active plan of ``user_id`` inactive; return their ids."""
        ids = []
        for row in self._data["plans"]:
            if row.get("user_id") == user_id and row.get("is_active"):
                row["is_active"] = False
                ids.append(row["id"])
        return ids

    def insert_plan(self, user_id: str, name: str, cycle_weeks: int) -> PlanRecord:
        row_id = self._data["next_ids"]["plans"]
        record = PlanRecord(
            id=row_id,
            user_id=user_id,
            name=name,
            is_active=True,
            created_at=_now(),
            cycle_weeks=cycle_weeks,
        )
        self._insert("plans", {k: v for k, v in plan_record_to_dict(record).items() if k != "id"})
        return record

    def insert_generation_inputs(self, plan_id: int, request: PlanRequest) -> GenerationInputsRecord:
        self._require("plans", plan_id)
        row_id = self._data["next_ids"]["plan_generation_inputs"]
        row = generation_inputs_to_dict(row_id, plan_id, request)
        self._insert("plan_generation_inputs", {k: v for k, v in row.items() if k != "id"})
        return dict_to_generation_inputs(row)

    def insert_plan_week(
        self, plan_id: int, week_number: int, sequence_number: int, is_deload: bool
    ) -> PlanWeekRecord:
        self._require("plans", plan_id)
        record = PlanWeekRecord(
            id=self._data["next_ids"]["plan_weeks"],
            plan_id=plan_id,
            week_number=week_number,
            sequence_number=sequence_number,
            is_deload=is_deload,
        )
        row = plan_week_record_to_dict(record)
        dict_to_plan_week_record(row)
        self._insert("plan_weeks", {k: v for k, v in row.items() if k != "id"})
        return record

    def insert_workout(self, week_id: int, day_number: int, name: str) -> WorkoutRecord:
        self._require("plan_weeks", week_id)
        record = WorkoutRecord(
            id=self._data["next_ids"]["workouts"],
            week_id=week_id,
            day_number=day_number,
            name=name,
        )
        row = workout_record_to_dict(record)
        dict_to_workout_record(row)
        self._insert("workouts", {k: v for k, v in row.items() if k != "id"})
        return record

    def insert_workout_exercise(
        self,
        workout_id: int,
        exercise_id: int,
        target_sets: int,
        target_reps: int,
        target_rpe: float | None,
        target_percentage: float | None,
        planned_weight: float | None,
    ) -> WorkoutExerciseRecord:
        self._require("workouts", workout_id)
        self._require("exercises", exercise_id)
        record = WorkoutExerciseRecord(
            id=self._data["next_ids"]["workout_exercises"],
            workout_id=workout_id,
            exercise_id=exercise_id,
            target_sets=target_sets,
            target_reps=target_reps,
            target_rpe=target_rpe,
            target_percentage=target_percentage,
            planned_weight=planned_weight,
        )
        row = workout_exercise_record_to_dict(record)
        dict_to_workout_exercise_record(row)
        self._insert("workout_exercises", {k: v for k, v in row.items() if k != "id"})
        return record

    def insert_set_logs(
        self,
        user_id: str,
        workout_exercise_id: int,
        base_lift: str | None,
        entries: list[tuple[float, int, float | None, float | None]],
    ) -> list[SetLogRecord]:
        """Append one row per (weight, reps, rpe, e1rm) entry."""
        self._require("workout_exercises", workout_exercise_id)
        logged_at = _now()
        records = []
        for weight, reps, rpe, e1rm in entries:
            record = SetLogRecord(
                id=self._data["next_ids"]["set_logs"],
                user_id=user_id,
                workout_exercise_id=workout_exercise_id,
                weight=weight,
                reps=reps,
                rpe=rpe,
                e1rm=e1rm,
                base_lift=base_lift,  # type: ignore[arg-type]
                logged_at=logged_at,
            )
            row = set_log_record_to_dict(record)
            dict_to_set_log_record(row)
            self._insert("set_logs", {k: v for k, v in row.items() if k != "id"})
            records.append(record)
        return records


class PlanStore:
    """
    Record store kept in a single JSON file.

    Reads return validated records; writes go through transaction().
    """

    def __init__(self, store_path: str | Path):
        """
        Initialize the store.

        Args:
            store_path: Path to the JSON store file
        """
        self.store_path = Path(store_path)

    def exists(self) -> bool:
        """Check if the store file exists."""
        return self.store_path.exists()

    def init(self) -> None:
        """
        Create an empty store file if it doesn't exist.

        Creates parent directories if needed.
        """
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.store_path.exists():
            self._write(_empty_document())

    # -------------------------------------------------------------------------
    # Raw document access
    # -------------------------------------------------------------------------

    def _load(self) -> dict[str, Any]:
        if not self.store_path.exists():
            raise StoreError(f"Store not found: {self.store_path}. Run 'init' first.")
        try:
            with open(self.store_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"Store file is corrupt: {self.store_path} ({e})") from e

        if not isinstance(data, dict) or data.get("schema_version") != SCHEMA_VERSION:
            raise StoreError(f"Unsupported store format: {self.store_path}")
        for table in TABLES:
            if not isinstance(data.get(table), list):
                raise StoreError(f"Store table '{table}' is missing or malformed")
        if not isinstance(data.get("next_ids"), dict):
            raise StoreError("Store is missing its id counters")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.store_path.parent, prefix=".store-", suffix=".json"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.store_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """
        All-or-nothing write scope.

        On clean exit the modified copy replaces the store file; on an
        exception nothing is written and the exception propagates.
        """
        data = copy.deepcopy(self._load())
        yield StoreTransaction(data)
        self._write(data)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def load_catalog(self) -> dict[tuple[str, str], ExerciseRecord]:
        """Return {(name, base_lift): ExerciseRecord} for every catalog entry."""
        records = [dict_to_exercise_record(r) for r in self._load()["exercises"]]
        return {(r.name, r.base_lift): r for r in records}

    def exercise(self, exercise_id: int) -> ExerciseRecord:
        for row in self._load()["exercises"]:
            if row.get("id") == exercise_id:
                return dict_to_exercise_record(row)
        raise StoreError(f"No exercise with id {exercise_id}")

    def plans_for_user(self, user_id: str) -> list[PlanRecord]:
        """All plans of a user, oldest first."""
        rows = [r for r in self._load()["plans"] if r.get("user_id") == user_id]
        return sorted((dict_to_plan_record(r) for r in rows), key=lambda p: p.id)

    def active_plan(self, user_id: str) -> PlanRecord | None:
        """The user's active plan, or None."""
        active = [p for p in self.plans_for_user(user_id) if p.is_active]
        return active[-1] if active else None

    def generation_inputs(self, plan_id: int) -> GenerationInputsRecord | None:
        for row in self._load()["plan_generation_inputs"]:
            if row.get("plan_id") == plan_id:
                return dict_to_generation_inputs(row)
        return None

    def plan_weeks(self, plan_id: int) -> list[PlanWeekRecord]:
        """Weeks of a plan ordered by sequence_number."""
        rows = [r for r in self._load()["plan_weeks"] if r.get("plan_id") == plan_id]
        return sorted((dict_to_plan_week_record(r) for r in rows), key=lambda w: w.sequence_number)

    def workouts(self, week_id: int) -> list[WorkoutRecord]:
        """Workouts of a week ordered by day number."""
        rows = [r for r in self._load()["workouts"] if r.get("week_id") == week_id]
        return sorted((dict_to_workout_record(r) for r in rows), key=lambda w: w.day_number)

    def workout_exercises(self, workout_id: int) -> list[WorkoutExerciseRecord]:
        """Rows of a workout in insertion order."""
        rows = [r for r in self._load()["workout_exercises"] if r.get("workout_id") == workout_id]
        return sorted((dict_to_workout_exercise_record(r) for r in rows), key=lambda e: e.id)

    def plan_tree(
        self, plan_id: int
    ) -> list[tuple[PlanWeekRecord, list[tuple[WorkoutRecord, list[WorkoutExerciseRecord]]]]]:
        """
        A plan's weeks, workouts and rows from a single read of the store.

        Same ordering as plan_weeks, workouts and workout_exercises.
        """
        data = self._load()

        rows_by_workout: dict[int, list[WorkoutExerciseRecord]] = {}
        for r in data["workout_exercises"]:
            rows_by_workout.setdefault(r.get("workout_id"), []).append(
                dict_to_workout_exercise_record(r)
            )
        workouts_by_week: dict[int, list[WorkoutRecord]] = {}
        for r in data["workouts"]:
            workouts_by_week.setdefault(r.get("week_id"), []).append(dict_to_workout_record(r))

        weeks = sorted(
            (dict_to_plan_week_record(r) for r in data["plan_weeks"] if r.get("plan_id") == plan_id),
            key=lambda w: w.sequence_number,
        )
        tree = []
        for week in weeks:
            workouts = sorted(workouts_by_week.get(week.id, []), key=lambda w: w.day_number)
            tree.append(
                (
                    week,
                    [
                        (workout, sorted(rows_by_workout.get(workout.id, []), key=lambda e: e.id))
                        for workout in workouts
                    ],
                )
            )
        return tree

    def workout_exercise(self, workout_exercise_id: int) -> WorkoutExerciseRecord:
        for row in self._load()["workout_exercises"]:
            if row.get("id") == workout_exercise_id:
                return dict_to_workout_exercise_record(row)
        raise StoreError(f"No workout exercise with id {workout_exercise_id}")

    def set_logs(self, user_id: str) -> list[SetLogRecord]:
        """Every set logged by a user, oldest first."""
        rows = [r for r in self._load()["set_logs"] if r.get("user_id") == user_id]
        return sorted((dict_to_set_log_record(r) for r in rows), key=lambda s: s.id)


def get_default_store_path() -> Path:
    """
    Get the default store file path.

    Returns:
        ~/.sbd-planner/store.json
    """
    return Path.home() / ".sbd-planner" / "store.json"
