"""Pure smoothing re-estimation of planned effort - no I/O dependencies."""

import math

from .models import Candidate, DurationMode, ItemStatus

PRIOR_WEIGHT = 0.7
PACE_WEIGHT = 0.3


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def is_reestimable(item: Candidate) -> bool:
    """Unit-tracked estimate items with recorded progress that are still open."""
    return (
        item.duration_mode == DurationMode.ESTIMATE
        and item.status not in (ItemStatus.DONE, ItemStatus.ARCHIVED)
        and item.units_total is not None
        and item.units_done is not None
        and item.units_total > 0
        and item.units_done > 0
    )


def smooth_reestimate(planned_min: int, logged_min: int, units_total: int, units_done: int) -> int:
    """
    Blend the prior estimate with the total implied by pace per unit.

    new = round(0.7 * planned + 0.3 * implied_total), never below logged_min.

    When rounding would leave the value where it is although it still differs
    from the implied total, it moves one minute toward it instead, so repeated
    application converges exactly on the implied total and then stays put.

    Returns planned_min unchanged when there is no unit progress to go on.
    """
    if units_done <= 0 or units_total <= 0:
        return planned_min

    implied_total = logged_min / units_done * units_total
    target = max(round_half_up(implied_total), logged_min)

    result = round_half_up(PRIOR_WEIGHT * planned_min + PACE_WEIGHT * implied_total)
    if result == planned_min and planned_min != target:
        result += 1 if target > planned_min else -1

    return max(result, logged_min)


def reestimate_item(item: Candidate) -> int:
    """New planned minutes for an item (unchanged if not re-estimable)."""
    if not is_reestimable(item):
        return item.planned_min
    return smooth_reestimate(item.planned_min, item.logged_min, item.units_total, item.units_done)
