"""
Formula-focused unit tests for the plan-generation engine.

Covers the load model, the static prescription tables and the fatigue
estimator. Values are hand-computed from the formulas so the tests act
as a reference:

    denom  = 1 + (reps + (10 - RPE)) / k      k: squat 30, bench 31, deadlift 28
    weight = round_2.5(1RM / denom)
    e1RM   = weight * denom
    fatigue = base * (sets * reps / 10) * (rpe / 10)
"""

import math

import pytest

from sbd_planner.core.config import LIFTS, PROFICIENCIES, PROFICIENCY_CAPS
from sbd_planner.core.errors import PrescriptionTableError
from sbd_planner.core.fatigue import (
    apply_fatigue,
    fatigue_for_exercise,
    lift_region,
    slot_fatigue,
    weekly_excess,
)
from sbd_planner.core.load_model import (
    estimate_one_rep_max,
    k_factor,
    required_weight,
    round_to_increment,
    weight_from_percentage,
)
from sbd_planner.core.models import FatigueTotals, SetScheme, SlotItem
from sbd_planner.core.tables import (
    block_bounds,
    block_for_week,
    canonical_week,
    find_primary,
    find_secondary,
    find_tertiary,
    get_slot_targets,
    prescription_rows,
    secondary_variation,
    tertiary_variation,
)


# ===========================================================================
# Load model
# ===========================================================================


class TestRequiredWeight:
    """1RM -> planned weight."""

    def test_squat_five_at_rpe_eight(self):
        # RIR 2, denom = 1 + 7/30 = 1.2333, 200 / 1.2333 = 162.16 -> 162.5
        assert required_weight(200, 5, 8, "squat") == 162.5

    def test_bench_uses_own_k(self):
        # denom = 1 + 7/31 = 1.2258, 100 / 1.2258 = 81.58 -> 82.5
        assert required_weight(100, 5, 8, "bench") == 82.5

    def test_volume_primary_week1(self):
        # 4x6 @ 6: RIR 4, denom = 1 + 10/30 = 4/3, 200 * 3/4 = 150
        assert required_weight(200, 6, 6, "squat") == 150.0

    @pytest.mark.parametrize(
        "one_rm,reps,rpe",
        [
            (0, 5, 8),
            (-100, 5, 8),
            (200, 0, 8),
            (200, -3, 8),
            (200, 5, 0),
            (200, 5, 10.5),
            (float("nan"), 5, 8),
            (float("inf"), 5, 8),
            (200, 5, float("nan")),
        ],
    )
    def test_degenerate_inputs_return_none(self, one_rm, reps, rpe):
        assert required_weight(one_rm, reps, rpe, "squat") is None

    def test_unknown_lift_rejected(self):
        with pytest.raises(ValueError):
            k_factor("clean")

    def test_always_multiple_of_increment(self):
        for lift in LIFTS:
            for one_rm in (57.3, 100, 142.5, 211.1, 317):
                for reps in range(1, 11):
                    for rpe in (5, 6.5, 7, 8.5, 10):
                        w = required_weight(one_rm, reps, rpe, lift)
                        assert w is not None
                        assert math.isclose(w / 2.5, round(w / 2.5), abs_tol=1e-9)


class TestRounding:
    """Nearest 2.5, ties up."""

    def test_rounds_to_nearest(self):
        assert round_to_increment(162.16) == 162.5
        assert round_to_increment(161.2) == 160.0

    def test_ties_round_up(self):
        # 163.75 / 2.5 = 65.5 -> 66 -> 165
        assert round_to_increment(163.75) == 165.0
        # 218.75 / 2.5 = 87.5 -> 88 -> 220
        assert round_to_increment(218.75) == 220.0

    def test_percentage_weight(self):
        assert weight_from_percentage(200, 0.65) == 130.0
        # 142.5 * 0.6 = 85.5 -> 85.0
        assert weight_from_percentage(142.5, 0.6) == 85.0
        assert weight_from_percentage(0, 0.6) is None
        assert weight_from_percentage(200, 0) is None


class TestEstimateOneRepMax:
    """Logged set -> e1RM."""

    def test_inverse_of_formula(self):
        # 162.5 * 37/30 = 200.4167
        assert estimate_one_rep_max(162.5, 5, 8, "squat") == pytest.approx(200.4167, abs=1e-3)

    def test_no_rpe_means_failure(self):
        # RIR 0: 100 * (1 + 5/30) = 116.667
        assert estimate_one_rep_max(100, 5, None, "squat") == pytest.approx(116.667, abs=1e-3)

    def test_degenerate_inputs_return_none(self):
        assert estimate_one_rep_max(0, 5, 8, "bench") is None
        assert estimate_one_rep_max(100, 0, 8, "bench") is None
        assert estimate_one_rep_max(100, 5, 0, "bench") is None
        assert estimate_one_rep_max(100, 5, 11, "bench") is None

    def test_round_trip_within_rounding_tolerance(self):
        for lift in LIFTS:
            for one_rm in (60, 142.5, 200, 317):
                for reps in range(1, 11):
                    for rpe in (6, 7.5, 8, 9.5, 10):
                        w = required_weight(one_rm, reps, rpe, lift)
                        e1rm = estimate_one_rep_max(w, reps, rpe, lift)
                        assert abs(e1rm - one_rm) <= 2.5, (lift, one_rm, reps, rpe)


# ===========================================================================
# Prescription tables
# ===========================================================================


class TestBlocks:
    """Block boundaries and canonical week mapping."""

    def test_canonical_cycle(self):
        assert [block_for_week(w) for w in range(1, 11)] == (
            ["Volume"] * 4 + ["Strength"] * 4 + ["Peak"] * 2
        )

    def test_proportional_boundaries(self):
        # 6 weeks: round(2.4)=2, round(4.8)=5
        assert block_bounds("Volume", 6) == (1, 2)
        assert block_bounds("Strength", 6) == (3, 5)
        assert block_bounds("Peak", 6) == (6, 6)
        # 12 weeks: round(4.8)=5, round(9.6)=10
        assert block_bounds("Volume", 12) == (1, 5)
        assert block_bounds("Strength", 12) == (6, 10)
        assert block_bounds("Peak", 12) == (11, 12)

    def test_week_zero_rejected(self):
        with pytest.raises(ValueError):
            block_for_week(0)

    def test_canonical_week_keeps_block_and_order(self):
        for n in range(6, 13):
            mapped = [canonical_week(w, n) for w in range(1, n + 1)]
            assert mapped[0] == 1
            assert mapped[-1] == 10
            assert mapped == sorted(mapped)
            for w, c in zip(range(1, n + 1), mapped):
                assert block_for_week(w, n) == block_for_week(c)

    def test_single_week_peak_maps_to_last_peak_week(self):
        assert canonical_week(6, 6) == 10


class TestPrescriptionRows:
    """Static rows per (block, week, lift)."""

    def test_strength_primary_has_backoff(self):
        p = find_primary(5, "bench")
        assert p.top == SetScheme(sets=1, reps=4, rpe=7.0)
        assert p.backoff == SetScheme(sets=3, reps=4, rpe=6.5)

    def test_volume_primary_has_no_backoff(self):
        p = find_primary(2, "deadlift")
        assert p.top == SetScheme(sets=4, reps=6, rpe=6.5)
        assert p.backoff is None

    def test_peak_accessories_are_empty(self):
        for lift in LIFTS:
            assert find_secondary(9, lift).is_empty
            assert find_tertiary(10, lift).is_empty
            item = SlotItem(slot="secondary", lift=lift)
            assert prescription_rows(item, 10) == []

    def test_every_supported_row_exists(self):
        for week in range(1, 11):
            for lift in LIFTS:
                find_primary(week, lift)
                find_secondary(week, lift)
                find_tertiary(week, lift)

    def test_missing_row_is_table_error(self):
        with pytest.raises(PrescriptionTableError):
            find_primary(11, "squat")

    def test_primary_rows_order(self):
        rows = prescription_rows(SlotItem(slot="primary", lift="squat"), 9)
        assert [kind for kind, _ in rows] == ["top", "backoff"]


class TestSlotTargets:
    """Per-frequency slot counts."""

    def test_bench_doubles_at_five_days(self):
        for prof in PROFICIENCIES:
            assert get_slot_targets(3, prof)["bench"].primary == 1
            assert get_slot_targets(4, prof)["bench"].primary == 1
            assert get_slot_targets(5, prof)["bench"].primary == 2
            assert get_slot_targets(6, prof)["bench"].primary == 2

    def test_deadlift_secondary_only_for_advanced(self):
        assert get_slot_targets(4, "Beginner")["deadlift"].secondary == 0
        assert get_slot_targets(4, "Advanced")["deadlift"].secondary == 1

    def test_unsupported_frequency(self):
        with pytest.raises(PrescriptionTableError):
            get_slot_targets(2, "Beginner")


class TestVariations:
    """Deterministic exercise choice."""

    def test_bench_secondary(self):
        assert secondary_variation("Strength", "bench") == "Close Grip Bench"
        assert secondary_variation("Strength", "bench", ["bench_lockout"]) == "Pin Press"
        # off-chest wins over lockout
        assert (
            secondary_variation("Volume", "bench", ["bench_lockout", "bench_off_chest"])
            == "Paused Bench"
        )

    def test_squat_secondary(self):
        assert secondary_variation("Volume", "squat") == "Pin Squat (Mid)"
        for tag in ("squat_hole", "squat_out_of_hole", "squat_depth"):
            assert secondary_variation("Strength", "squat", [tag]) == "Paused Squat"

    def test_deadlift_secondary(self):
        assert secondary_variation("Volume", "deadlift", ["deadlift_off_floor"]) == "Deficit Deadlift"
        assert secondary_variation("Strength", "deadlift", ["deadlift_off_floor"]) == "Paused Deadlift"
        assert secondary_variation("Strength", "deadlift") == "RDL"

    def test_tertiary(self):
        assert tertiary_variation("bench") == "Tempo Bench"
        assert tertiary_variation("squat") == "Tempo Squat"
        assert tertiary_variation("deadlift") == "Hip Thrust"


# ===========================================================================
# Fatigue
# ===========================================================================


class TestFatigueScore:
    """score = base * (sets*reps/10) * (rpe/10)"""

    def test_competition_squat(self):
        # 1.5 * 2.4 * 0.6 = 2.16
        assert fatigue_for_exercise("Competition Squat", 4, 6, 6) == pytest.approx(2.16)

    def test_unknown_exercise_scores_one(self):
        # 1.0 * 3.0 * 0.5 = 1.5
        assert fatigue_for_exercise("Belt Squat", 3, 10, 5) == pytest.approx(1.5)

    def test_empty_row_scores_zero(self):
        assert fatigue_for_exercise("Competition Bench", 0, 5, 7) == 0.0

    def test_regions(self):
        assert lift_region("bench") == "upper"
        assert lift_region("squat") == "lower"
        assert lift_region("deadlift") == "lower"


class TestSlotFatigue:
    """Per-item cost including backoff and neural cost."""

    def test_volume_primary(self):
        item = SlotItem(slot="primary", lift="squat")
        assert slot_fatigue(item, 1) == pytest.approx(2.16)

    def test_strength_primary_squat(self):
        # top 1x4@7: 1.5*0.4*0.7 = 0.42; backoff 3x4@6.5: 1.5*1.2*0.65 = 1.17; + 0.3
        item = SlotItem(slot="primary", lift="squat")
        assert slot_fatigue(item, 5) == pytest.approx(1.89)

    def test_strength_primary_deadlift(self):
        # 1.7 * (0.28 + 0.78) = 1.802; + 0.5
        item = SlotItem(slot="primary", lift="deadlift")
        assert slot_fatigue(item, 5) == pytest.approx(2.302)

    def test_secondary_follows_weakness(self):
        item = SlotItem(slot="secondary", lift="squat")
        # Pin Squat (Mid): 1.1 * 3.2 * 0.6 = 2.112
        assert slot_fatigue(item, 1) == pytest.approx(2.112)
        # Paused Squat: 1.0 * 3.2 * 0.6 = 1.92
        assert slot_fatigue(item, 1, ("squat_hole",)) == pytest.approx(1.92)

    def test_peak_secondary_is_free(self):
        assert slot_fatigue(SlotItem(slot="secondary", lift="bench"), 9) == 0.0


class TestFatigueTotals:
    """Accumulation is additive and monotonic."""

    def test_overall_is_lower_plus_upper(self):
        totals = FatigueTotals()
        for lift, amount in [("squat", 2.16), ("bench", 1.728), ("deadlift", 2.448), ("bench", 1.26)]:
            before = totals
            totals = apply_fatigue(totals, lift, amount)
            assert totals.overall >= before.overall
            assert totals.lower >= before.lower
            assert totals.upper >= before.upper
            assert totals.overall == pytest.approx(totals.lower + totals.upper)
        assert totals.lower == pytest.approx(4.608)
        assert totals.upper == pytest.approx(2.988)

    def test_negative_contribution_rejected(self):
        with pytest.raises(ValueError):
            FatigueTotals().add("lower", -0.1)

    def test_weekly_excess(self):
        caps = PROFICIENCY_CAPS["Beginner"]
        # lower 10 (cap 9) -> 1; upper 7 (cap 8) -> 0; overall 17 (cap 15) -> 2
        totals = FatigueTotals(lower=10.0, upper=7.0)
        assert weekly_excess(totals, caps) == pytest.approx(3.0)
        assert weekly_excess(FatigueTotals(lower=1.0, upper=1.0), caps) == 0.0
