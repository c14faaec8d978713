"""Pure deadline risk classification - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime

from .models import RiskLevel, days_until

# Floor for days remaining, so a passed deadline yields a large but finite pace.
MIN_DAYS_REMAINING = 0.05
# Effective pace may fall this far short of the required pace and still count.
PACE_MARGIN = 0.05
# Progress trailing due-based expectation by more than this (points) is critical.
CRITICAL_LAG_PCT = 20.0
# Progress trailing elapsed time by more than this (points) is at risk.
AT_RISK_LAG_PCT = 25.0
# Deadlines closer than this many days with work left are imminent.
IMMINENT_DAYS = 3.0


@dataclass
class RiskInput:
    """Everything the classifier needs about one project."""

    now: datetime
    planned_min: int
    logged_min: int
    target_date: date | None = None
    buffer_pct: float = 0.0
    effective_daily_min: float = 0.0
    progress_pct: float = 0.0
    time_elapsed_pct: float = 0.0
    due_based_expected_pct: float = 0.0


@dataclass
class RiskResult:
    """Outcome of classifying one project."""

    level: RiskLevel
    required_daily_min: float
    remaining_min: int
    days_remaining: float | None = None
    slack_min_per_day: float = 0.0


def risk_priority(level: RiskLevel) -> int:
    """Sort priority for a risk level (lower = more urgent)."""
    return {
        RiskLevel.CRITICAL: 0,
        RiskLevel.AT_RISK: 1,
        RiskLevel.ON_TRACK: 2,
    }[level]


def classify_risk(inp: RiskInput) -> RiskResult:
    """
    Classify a project's deadline risk and the daily pace needed to hold it.

    Pure function - no I/O. Depends only on this project's numbers, so
    classifying one project never affects another.

    Rules:
        critical: pace cannot cover the required daily minutes AND either
                  progress trails due-based expectation by > 20 points or the
                  deadline is under 3 days away with work outstanding
        at_risk:  pace is short otherwise, or progress trails elapsed time
                  by > 25 points
        on_track: everything else, including projects with nothing planned
    """
    if inp.planned_min <= 0:
        return RiskResult(level=RiskLevel.ON_TRACK, required_daily_min=0.0, remaining_min=0)

    remaining = max(inp.planned_min - inp.logged_min, 0)

    if inp.target_date is None:
        overdue = inp.due_based_expected_pct > inp.progress_pct
        level = RiskLevel.AT_RISK if overdue and remaining > 0 else RiskLevel.ON_TRACK
        return RiskResult(
            level=level,
            required_daily_min=0.0,
            remaining_min=remaining,
            slack_min_per_day=inp.effective_daily_min,
        )

    days_remaining = max(days_until(inp.target_date, inp.now), MIN_DAYS_REMAINING)
    required = remaining / days_remaining * (1 + inp.buffer_pct)

    pace_short = inp.effective_daily_min * (1 + PACE_MARGIN) < required
    lagging_due = inp.due_based_expected_pct - inp.progress_pct > CRITICAL_LAG_PCT
    imminent = days_remaining < IMMINENT_DAYS and remaining > 0
    lagging_time = inp.time_elapsed_pct - inp.progress_pct > AT_RISK_LAG_PCT

    if pace_short and (lagging_due or imminent):
        level = RiskLevel.CRITICAL
    elif pace_short or lagging_time:
        level = RiskLevel.AT_RISK
    else:
        level = RiskLevel.ON_TRACK

    return RiskResult(
        level=level,
        required_daily_min=required,
        remaining_min=remaining,
        days_remaining=days_remaining,
        slack_min_per_day=inp.effective_daily_min - required,
    )
