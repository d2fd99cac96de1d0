"""
Tests for the exercise catalog, the JSON store and read-time analytics.
"""

import itertools
import json

import pytest

from sbd_planner.core.analytics import (
    log_sets,
    set_log_e1rm,
    weekly_e1rm_timeline,
    workout_history,
)
from sbd_planner.cli.commands.planning import build_plan_overview
from sbd_planner.core.catalog import entry_from_dict, load_catalog_entries
from sbd_planner.core.errors import PlanInputError, StoreError
from sbd_planner.core.models import ExerciseRecord, OneRepMaxes, PlanRequest
from sbd_planner.core.planner import generate_plan
from sbd_planner.io import plan_store
from sbd_planner.io.plan_store import PlanStore
from sbd_planner.io.serializers import (
    dict_to_plan_record,
    dict_to_set_log_record,
    dict_to_workout_exercise_record,
)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def store(tmp_path):
    s = PlanStore(tmp_path / "store.json")
    s.init()
    with s.transaction() as tx:
        tx.seed_exercises(load_catalog_entries())
    return s


@pytest.fixture
def plan_id(store):
    request = PlanRequest(
        user_id="lifter",
        days_of_week=["Mon", "Tue", "Thu", "Fri"],
        one_rms=OneRepMaxes(squat=200.0, bench=140.0, deadlift=240.0),
        proficiency="Beginner",
    )
    return generate_plan(request, store)


@pytest.fixture
def ticking_clock(monkeypatch):
    """Give every store write a later timestamp."""
    ticks = itertools.count(1)
    monkeypatch.setattr(
        plan_store, "_now", lambda: f"2026-01-01T10:00:{next(ticks):02d}"
    )


def find_row(store, plan_id, week_label, exercise_name):
    """Return (workout, workout_exercise) of the first matching row."""
    names = {rec.id: rec.name for rec in store.load_catalog().values()}
    for week in store.plan_weeks(plan_id):
        if week.label != week_label:
            continue
        for workout in store.workouts(week.id):
            for we in store.workout_exercises(workout.id):
                if names[we.exercise_id] == exercise_name:
                    return workout, we
    raise AssertionError(f"{exercise_name} not found in {week_label}")


class TestCatalog:
    """YAML catalog loading and user overrides."""

    def test_bundled_catalog(self):
        entries = load_catalog_entries()
        assert len(entries) == 14
        mains = {(e["name"], e["base_lift"]) for e in entries if e["is_main_lift"]}
        assert mains == {
            ("Competition Squat", "squat"),
            ("Competition Bench", "bench"),
            ("Competition Deadlift", "deadlift"),
        }
        hip_thrust = next(e for e in entries if e["name"] == "Hip Thrust")
        assert hip_thrust["base_lift"] == "deadlift"
        assert hip_thrust["tracking_mode"] == "none"

    def test_user_override_merges(self, isolated_home):
        user_dir = isolated_home / ".sbd-planner"
        user_dir.mkdir()
        (user_dir / "catalog.yaml").write_text(
            "exercises:\n"
            "  - name: Paused Squat\n"
            "    base_lift: squat\n"
            "    tracking_mode: volume\n"
            "  - name: Box Squat\n"
            "    base_lift: squat\n"
        )
        entries = load_catalog_entries()
        assert len(entries) == 15
        paused = next(e for e in entries if e["name"] == "Paused Squat")
        assert paused["tracking_mode"] == "volume"
        assert any(e["name"] == "Box Squat" for e in entries)

    def test_broken_user_file_is_ignored(self, tmp_path):
        broken = tmp_path / "catalog.yaml"
        broken.write_text("exercises:\n  - name: Floor Press\n    base_lift: overhead\n")
        with pytest.warns(UserWarning, match="ignoring user catalog"):
            entries = load_catalog_entries(user_path=broken)
        assert len(entries) == 14

    @pytest.mark.parametrize(
        "raw",
        [
            {"base_lift": "squat"},
            {"name": "  ", "base_lift": "squat"},
            {"name": "Belt Squat", "base_lift": "legs"},
            {"name": "Belt Squat", "base_lift": "squat", "tracking_mode": "reps"},
            "Belt Squat",
        ],
    )
    def test_entry_validation(self, raw):
        with pytest.raises(ValueError):
            entry_from_dict(raw)

    def test_seeding_is_idempotent(self, store):
        with store.transaction() as tx:
            added = tx.seed_exercises(load_catalog_entries())
        assert added == 0
        assert len(store.load_catalog()) == 14


class TestStore:
    """JSON document store."""

    def test_init_creates_empty_document(self, tmp_path):
        s = PlanStore(tmp_path / "nested" / "store.json")
        s.init()
        data = json.loads(s.store_path.read_text())
        assert data["schema_version"] == 1
        assert data["plans"] == []
        assert data["next_ids"]["exercises"] == 1

    def test_missing_store(self, tmp_path):
        with pytest.raises(StoreError, match="Run 'init' first"):
            PlanStore(tmp_path / "absent.json").load_catalog()

    def test_corrupt_store(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")
        with pytest.raises(StoreError, match="corrupt"):
            PlanStore(path).load_catalog()

    def test_unsupported_schema(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"schema_version": 99}))
        with pytest.raises(StoreError, match="Unsupported"):
            PlanStore(path).active_plan("lifter")

    def test_transaction_rolls_back_on_error(self, store):
        before = store.store_path.read_text()
        with pytest.raises(RuntimeError):
            with store.transaction() as tx:
                tx.insert_plan("lifter", "Scratch", 10)
                raise RuntimeError("abort")
        assert store.store_path.read_text() == before
        assert store.plans_for_user("lifter") == []

    def test_insert_requires_parent_row(self, store):
        with pytest.raises(StoreError, match="No plan_weeks row"):
            with store.transaction() as tx:
                tx.insert_workout(42, 1, "Day 1 (Mon)")

    def test_plan_tree_matches_row_reads(self, store, plan_id):
        tree = store.plan_tree(plan_id)
        assert [week for week, _ in tree] == store.plan_weeks(plan_id)
        for week, workouts in tree:
            assert [w for w, _ in workouts] == store.workouts(week.id)
            for workout, rows in workouts:
                assert rows == store.workout_exercises(workout.id)

    def test_plan_tree_unknown_plan(self, store):
        assert store.plan_tree(999) == []

    def test_malformed_rows(self):
        with pytest.raises(StoreError, match="missing required field"):
            dict_to_plan_record({"id": 1, "user_id": "lifter"})
        with pytest.raises(StoreError, match="exactly one"):
            dict_to_workout_exercise_record({
                "id": 1, "workout_id": 1, "exercise_id": 1,
                "target_sets": 3, "target_reps": 5,
                "target_rpe": 7.0, "target_percentage": 0.65,
                "planned_weight": 130.0,
            })
        with pytest.raises(StoreError, match="weight must be positive"):
            dict_to_set_log_record({
                "id": 1, "user_id": "lifter", "workout_exercise_id": 1,
                "weight": 0, "reps": 5, "rpe": None, "e1rm": None,
                "base_lift": "squat", "logged_at": "2026-01-01T10:00:00",
            })


class TestLogSets:
    """Set logging against the active plan."""

    def test_main_lift_gets_e1rm(self, store, plan_id):
        _, row = find_row(store, plan_id, "W1", "Competition Squat")
        logs = log_sets(store, "lifter", row.id, weight=150.0, reps=6, rpe=6.0)
        assert len(logs) == 1
        assert logs[0].e1rm == pytest.approx(200.0)
        assert logs[0].base_lift == "squat"
        assert store.set_logs("lifter") == logs

    def test_multiple_sets(self, store, plan_id):
        _, row = find_row(store, plan_id, "W1", "Competition Bench")
        logs = log_sets(store, "lifter", row.id, weight=100.0, reps=6, rpe=6.0, sets=4)
        assert len(logs) == 4
        assert [log.id for log in logs] == [1, 2, 3, 4]

    def test_accessory_has_no_e1rm(self, store, plan_id):
        _, row = find_row(store, plan_id, "W1", "Tempo Bench")
        logs = log_sets(store, "lifter", row.id, weight=80.0, reps=8, rpe=7.0)
        assert logs[0].e1rm is None

    def test_main_lift_without_rpe_has_no_stored_e1rm(self):
        squat = ExerciseRecord(
            id=1, name="Competition Squat", base_lift="squat",
            is_main_lift=True, tracking_mode="e1rm",
        )
        assert set_log_e1rm(squat, 150.0, 6, None) is None

    @pytest.mark.parametrize(
        "weight,reps,rpe,sets",
        [
            (0, 5, 8.0, 1),
            (100.0, 0, 8.0, 1),
            (100.0, 5, 11.0, 1),
            (100.0, 5, 8.0, 0),
            (float("nan"), 5, 8.0, 1),
            (float("inf"), 5, 8.0, 1),
            (100.0, float("nan"), 8.0, 1),
            (100.0, float("inf"), 8.0, 1),
            (100.0, 5, float("nan"), 1),
            (100.0, 5, float("-inf"), 1),
        ],
    )
    def test_invalid_values(self, store, plan_id, weight, reps, rpe, sets):
        _, row = find_row(store, plan_id, "W1", "Competition Squat")
        with pytest.raises(PlanInputError):
            log_sets(store, "lifter", row.id, weight=weight, reps=reps, rpe=rpe, sets=sets)
        assert store.set_logs("lifter") == []

    def test_row_of_inactive_plan_rejected(self, store, plan_id):
        _, old_row = find_row(store, plan_id, "W1", "Competition Squat")
        request = store.generation_inputs(plan_id).to_request("lifter")
        generate_plan(request, store)
        with pytest.raises(StoreError, match="not part of the active plan"):
            log_sets(store, "lifter", old_row.id, weight=150.0, reps=6, rpe=6.0)

    def test_no_active_plan(self, store):
        with pytest.raises(StoreError, match="No active plan"):
            log_sets(store, "nobody", 1, weight=150.0, reps=6, rpe=6.0)


class TestTimeline:
    """Planned vs actual e1RM per week."""

    def test_labels_follow_sequence(self, store, plan_id):
        points = weekly_e1rm_timeline(store, plan_id, "lifter")
        assert [p.label for p in points] == [
            "W1", "W2", "W3", "W4", "W5", "W6", "W7", "W8",
            "Deload (8)", "W9", "W10",
        ]
        assert [p.sequence_number for p in points] == list(range(1, 12))

    def test_planned_values(self, store, plan_id):
        points = weekly_e1rm_timeline(store, plan_id, "lifter")
        first = points[0]
        # target RPE is ignored: 150 kg x 6 -> 150 * (1 + 6/30)
        assert first.planned.get("squat") == pytest.approx(180.0)
        _, bench = find_row(store, plan_id, "W1", "Competition Bench")
        assert first.planned.get("bench") == pytest.approx(
            bench.planned_weight * (1 + bench.target_reps / 31)
        )
        _, deadlift = find_row(store, plan_id, "W1", "Competition Deadlift")
        assert first.planned.get("deadlift") == pytest.approx(
            deadlift.planned_weight * (1 + deadlift.target_reps / 28)
        )
        assert first.actual.to_dict() == {"squat": None, "bench": None, "deadlift": None}

        deload = points[8]
        assert deload.is_deload
        # 130 kg x 5 -> 130 * (1 + 5/30)
        assert deload.planned.get("squat") == pytest.approx(151.667, abs=1e-3)

    def test_actual_values(self, store, plan_id):
        _, row = find_row(store, plan_id, "W1", "Competition Squat")
        log_sets(store, "lifter", row.id, weight=155.0, reps=6, rpe=None)
        points = weekly_e1rm_timeline(store, plan_id, "lifter")
        # no RPE counts as a set to failure: 155 * (1 + 6/30)
        assert points[0].actual.get("squat") == pytest.approx(186.0)

        # the logged RPE does not change the dashboard figure
        log_sets(store, "lifter", row.id, weight=150.0, reps=6, rpe=6.0)
        points = weekly_e1rm_timeline(store, plan_id, "lifter")
        assert points[0].actual.get("squat") == pytest.approx(186.0)
        assert points[1].actual.get("squat") is None

    @pytest.mark.parametrize(
        "week_label,exercise_name,lift",
        [
            ("W1", "Competition Squat", "squat"),
            ("W1", "Competition Bench", "bench"),
            ("W1", "Competition Deadlift", "deadlift"),
            ("Deload (8)", "Competition Squat", "squat"),
        ],
    )
    def test_logging_the_plan_matches_the_plan(
        self, store, plan_id, week_label, exercise_name, lift
    ):
        _, row = find_row(store, plan_id, week_label, exercise_name)
        log_sets(
            store, "lifter", row.id,
            weight=row.planned_weight, reps=row.target_reps, rpe=row.target_rpe,
        )
        points = weekly_e1rm_timeline(store, plan_id, "lifter")
        point = next(p for p in points if p.label == week_label)
        assert point.actual.get(lift) == pytest.approx(point.planned.get(lift))

    def test_other_users_logs_ignored(self, store, plan_id):
        _, row = find_row(store, plan_id, "W1", "Competition Squat")
        log_sets(store, "lifter", row.id, weight=150.0, reps=6, rpe=6.0)
        points = weekly_e1rm_timeline(store, plan_id, "someone-else")
        assert all(p.actual.get("squat") is None for p in points)


class TestHistory:
    """Logged workouts, most recent first."""

    def test_history(self, store, plan_id, ticking_clock):
        squat_day, squat_row = find_row(store, plan_id, "W1", "Competition Squat")
        bench_day, bench_row = find_row(store, plan_id, "W1", "Competition Bench")

        log_sets(store, "lifter", squat_row.id, weight=150.0, reps=6, rpe=6.0, sets=2)
        log_sets(store, "lifter", bench_row.id, weight=105.0, reps=6, rpe=6.0)

        items = workout_history(store, plan_id, "lifter")
        assert [i.workout_id for i in items] == [bench_day.id, squat_day.id]
        assert items[1].sets_logged == 2
        assert items[1].week_label == "W1"
        assert items[1].best_e1rm.get("squat") == 200.0
        # 105 kg x 6 @ 6 -> 138.87, rounded to a whole kilo
        assert items[0].best_e1rm.get("bench") == 139.0

    def test_best_e1rm_rounds_half_up(self, store, plan_id):
        _, row = find_row(store, plan_id, "W1", "Competition Deadlift")
        # 110 kg x 7 @ 10 -> 110 * (1 + 7/28) = 137.5
        log_sets(store, "lifter", row.id, weight=110.0, reps=7, rpe=10.0)
        items = workout_history(store, plan_id, "lifter")
        assert items[0].best_e1rm.get("deadlift") == 138.0

    def test_empty_history(self, store, plan_id):
        assert workout_history(store, plan_id, "lifter") == []


class TestStoreReads:
    """Read paths parse the store a fixed number of times, not once per row."""

    @pytest.fixture
    def load_counter(self, monkeypatch):
        calls = []
        original = PlanStore._load

        def counting_load(self):
            calls.append(1)
            return original(self)

        monkeypatch.setattr(PlanStore, "_load", counting_load)
        return calls

    def test_timeline(self, store, plan_id, load_counter):
        weekly_e1rm_timeline(store, plan_id, "lifter")
        # catalog, set logs, plan tree
        assert len(load_counter) == 3

    def test_history(self, store, plan_id, load_counter):
        workout_history(store, plan_id, "lifter")
        assert len(load_counter) == 2

    def test_plan_overview(self, store, plan_id, load_counter):
        plan = store.active_plan("lifter")
        load_counter.clear()
        overview = build_plan_overview(store, plan)
        assert len(overview["weeks"]) == 11
        assert len(load_counter) == 2
