"""
Slot scheduler.

Assigns a week's slot items to training days in a single greedy pass.
Each item goes to the valid day with the lowest soft score; ties go to
the lowest day index. Items are never revisited once placed.

Hard rules (a day that breaks one is not a candidate):
    - per-day slot cap (3 at 3-4 days, 2 at 5-6 days)
    - squat primary and deadlift primary never share a day
    - Strength/Peak: no deadlift secondary/tertiary on a squat-primary day,
      no squat secondary on a deadlift-primary day (and the reverse placements)
    - at 4+ days a lift appears once per day, except bench may appear twice
      when at most one of the two is primary
    - daily fatigue caps

When no day passes, a relaxed pass keeps only the squat/deadlift primary
exclusion and the daily caps. When that fails too, the item is forced
onto day 0. Both fallbacks are logged and returned with the schedule.
"""

import logging
from dataclasses import dataclass, field

from .config import (
    BALANCE_FATIGUE_WEIGHT,
    BALANCE_SLOT_WEIGHT,
    DAY_SLOT_CAPS,
    LIFT_ORDER_DEFAULT,
    LIFT_ORDER_VOLUME,
    PRIMARY_DAY_BIAS,
    PROFICIENCY_CAPS,
    SAME_LIFT_RULE_MIN_DAYS,
    SLOT_TYPES,
    SQUAT_DEADLIFT_INTERACTION_PENALTY,
    WEEKLY_EXCESS_WEIGHT,
)
from .fatigue import apply_fatigue, exceeds_daily_caps, slot_fatigue, weekly_excess
from .models import FatigueTotals, Placement, SlotItem
from .tables import block_for_week, get_slot_targets, prescription_rows

logger = logging.getLogger(__name__)

_LOWER_PAIR = ("squat", "deadlift")


@dataclass
class WeekSchedule:
    """
    Result of scheduling one week.

    ``days[i]`` holds the items of day index i ordered
    primary -> secondary -> tertiary.
    """

    block: str
    days: list[list[SlotItem]]
    day_totals: list[FatigueTotals]
    week_totals: FatigueTotals
    fallbacks: list[Placement] = field(default_factory=list)

    @property
    def placed_count(self) -> int:
        return sum(len(items) for items in self.days)


def lift_order(block: str) -> tuple[str, ...]:
    """Bench leads in Volume, squat leads otherwise."""
    return LIFT_ORDER_VOLUME if block == "Volume" else LIFT_ORDER_DEFAULT


def build_slot_items(
    week: int,
    days: int,
    proficiency: str,
) -> list[SlotItem]:
    """
    Required slot items for a canonical week, in placement order.

    Primaries first, then secondaries, then tertiaries; inside each tier
    lifts follow the block's lift order. Items whose prescription has no
    sets that week are left out.
    """
    block = block_for_week(week)
    targets = get_slot_targets(days, proficiency)

    items: list[SlotItem] = []
    for slot in SLOT_TYPES:
        for lift in lift_order(block):
            for _ in range(targets[lift].count(slot)):
                item = SlotItem(slot=slot, lift=lift)  # type: ignore[arg-type]
                if prescription_rows(item, week):
                    items.append(item)
    return items


class SlotScheduler:
    """
    Greedy day assignment for one week.

    All accumulator state is created inside schedule(), so one instance
    can be reused and repeated calls give identical results.
    """

    def __init__(
        self,
        days: int,
        week: int,
        proficiency: str,
        weaknesses: tuple[str, ...] = (),
    ) -> None:
        if days not in DAY_SLOT_CAPS:
            raise ValueError(f"days must be one of {sorted(DAY_SLOT_CAPS)}, got {days}")
        if proficiency not in PROFICIENCY_CAPS:
            raise ValueError(f"Unknown proficiency: {proficiency!r}")
        self.days = days
        self.week = week
        self.block = block_for_week(week)
        self.caps = PROFICIENCY_CAPS[proficiency]
        self.slot_cap = DAY_SLOT_CAPS[days]
        self.weaknesses = weaknesses

    # -------------------------------------------------------------------------
    # Public
    # -------------------------------------------------------------------------

    def schedule(self, items: list[SlotItem]) -> WeekSchedule:
        """Place every item on exactly one day."""
        result = WeekSchedule(
            block=self.block,
            days=[[] for _ in range(self.days)],
            day_totals=[FatigueTotals() for _ in range(self.days)],
            week_totals=FatigueTotals(),
        )
        for item in items:
            self._place(item, result)

        for day_items in result.days:
            day_items.sort(key=lambda it: SLOT_TYPES.index(it.slot))
        return result

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------

    def _place(self, item: SlotItem, state: WeekSchedule) -> None:
        cost = slot_fatigue(item, self.week, self.weaknesses)

        day = self._best_day(item, cost, state, relaxed=False)
        if day is not None:
            logger.debug("W%d: %s -> day %d (cost %.3f)", self.week, item, day, cost)
            self._commit(item, day, cost, state)
            return

        day = self._best_day(item, cost, state, relaxed=True)
        if day is not None:
            reason = "no day satisfied every hard rule; same-lift and slot-cap rules relaxed"
            logger.warning("W%d: relaxed placement of %s on day %d", self.week, item, day)
            state.fallbacks.append(Placement(item=item, day_index=day, mode="relaxed", reason=reason))
            self._commit(item, day, cost, state)
            return

        reason = "no day satisfied the relaxed rules; placed on day 0"
        logger.warning("W%d: forced placement of %s on day 0", self.week, item)
        state.fallbacks.append(Placement(item=item, day_index=0, mode="forced", reason=reason))
        self._commit(item, 0, cost, state)

    def _best_day(
        self,
        item: SlotItem,
        cost: float,
        state: WeekSchedule,
        relaxed: bool,
    ) -> int | None:
        best_day = None
        best_score = float("inf")
        for day in range(self.days):
            if self._violation(item, day, cost, state, relaxed) is not None:
                continue
            score = self._soft_score(item, day, cost, state)
            if score < best_score:
                best_day, best_score = day, score
        return best_day

    def _commit(self, item: SlotItem, day: int, cost: float, state: WeekSchedule) -> None:
        state.days[day].append(item)
        state.day_totals[day] = apply_fatigue(state.day_totals[day], item.lift, cost)
        state.week_totals = apply_fatigue(state.week_totals, item.lift, cost)

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def _violation(
        self,
        item: SlotItem,
        day: int,
        cost: float,
        state: WeekSchedule,
        relaxed: bool,
    ) -> str | None:
        """Return the name of the first hard rule broken, or None."""
        day_items = state.days[day]

        if _primary_pair_clash(item, day_items):
            return "squat/deadlift primary"

        if not relaxed:
            if len(day_items) >= self.slot_cap:
                return "slot cap"
            if self.block != "Volume" and _heavy_lower_clash(item, day_items):
                return "squat/deadlift interaction"
            if self.days >= SAME_LIFT_RULE_MIN_DAYS and _same_lift_clash(item, day_items):
                return "same lift"

        hypothetical = apply_fatigue(state.day_totals[day], item.lift, cost)
        if exceeds_daily_caps(hypothetical, self.caps):
            return "daily fatigue cap"
        return None

    def _soft_score(self, item: SlotItem, day: int, cost: float, state: WeekSchedule) -> float:
        hypothetical_week = apply_fatigue(state.week_totals, item.lift, cost)
        score = WEEKLY_EXCESS_WEIGHT * weekly_excess(hypothetical_week, self.caps)
        score += BALANCE_SLOT_WEIGHT * len(state.days[day])
        score += BALANCE_FATIGUE_WEIGHT * state.day_totals[day].overall

        if self.block != "Volume" and item.lift in _LOWER_PAIR:
            other = "deadlift" if item.lift == "squat" else "squat"
            if any(it.lift == other for it in state.days[day]):
                score += SQUAT_DEADLIFT_INTERACTION_PENALTY

        if item.is_primary:
            score += PRIMARY_DAY_BIAS * day
        return score


def _primary_pair_clash(item: SlotItem, day_items: list[SlotItem]) -> bool:
    if not item.is_primary or item.lift not in _LOWER_PAIR:
        return False
    other = "deadlift" if item.lift == "squat" else "squat"
    return any(it.is_primary and it.lift == other for it in day_items)


def _heavy_lower_clash(item: SlotItem, day_items: list[SlotItem]) -> bool:
    """Squat-primary vs deadlift accessories, deadlift-primary vs squat secondary."""
    for other in day_items:
        for a, b in ((item, other), (other, item)):
            if a.is_primary and a.lift == "squat" and b.lift == "deadlift" and not b.is_primary:
                return True
            if a.is_primary and a.lift == "deadlift" and b.lift == "squat" and b.slot == "secondary":
                return True
    return False


def _same_lift_clash(item: SlotItem, day_items: list[SlotItem]) -> bool:
    same = [it for it in day_items if it.lift == item.lift]
    if not same:
        return False
    if item.lift != "bench" or len(same) > 1:
        return True
    primaries = sum(1 for it in same + [item] if it.is_primary)
    return primaries > 1


def schedule_week(
    week: int,
    days: int,
    proficiency: str,
    weaknesses: tuple[str, ...] = (),
) -> WeekSchedule:
    """Build the slot items for a canonical week and schedule them."""
    items = build_slot_items(week, days, proficiency)
    return SlotScheduler(days, week, proficiency, weaknesses).schedule(items)
