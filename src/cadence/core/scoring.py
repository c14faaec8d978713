"""Pure multi-factor scoring of work items - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .models import Candidate, RiskLevel, ScoringWeights, days_until

# Contributions at or below this magnitude produce no reason.
NEGLIGIBLE = 1e-3
# Deadline pressure is 0.5 this many days out.
PRESSURE_HALF_DAYS = 2.0
# Beyond this many days, pressure decays quadratically.
PRESSURE_WINDOW_DAYS = 14.0
# Spacing bonus saturates after this many days away from an item.
SPACING_FULL_DAYS = 3.0
# Variation bonus saturates after this many days away from a project.
VARIATION_FULL_DAYS = 7.0
# A minimum session above this share of available time barely fits.
TIGHT_FIT_SHARE = 0.9

RISK_ELEVATION = {
    RiskLevel.CRITICAL: 1.0,
    RiskLevel.AT_RISK: 0.5,
    RiskLevel.ON_TRACK: 0.0,
}


class ReasonCode(Enum):
    """One code per scoring factor, in scoring order."""

    DEADLINE_PRESSURE = "deadline_pressure"
    RISK_ELEVATION = "risk_elevation"
    SPACING = "spacing"
    VARIATION = "variation"
    PACE_DEVIATION = "pace_deviation"
    SESSION_FIT = "session_fit"


@dataclass
class Reason:
    """Why a factor moved the score, and by how much."""

    code: ReasonCode
    contribution: float
    message: str


@dataclass
class ScoredCandidate:
    """A candidate with its score and explanation."""

    candidate: Candidate
    score: float
    risk_level: RiskLevel
    reasons: list[Reason] = field(default_factory=list)

    @property
    def work_item_id(self) -> str:
        return self.candidate.work_item_id

    @property
    def project_id(self) -> str:
        return self.candidate.project_id

    @property
    def due_date(self) -> date | None:
        return self.candidate.effective_due_date


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def deadline_pressure(due: date | None, now: datetime) -> tuple[float, str]:
    """Near 0 for distant deadlines, 1.0 once the deadline has passed."""
    if due is None:
        return 0.0, ""
    days = days_until(due, now)
    if days <= 0:
        return 1.0, "Past due"
    value = PRESSURE_HALF_DAYS / (PRESSURE_HALF_DAYS + days)
    if days > PRESSURE_WINDOW_DAYS:
        value *= PRESSURE_WINDOW_DAYS / days
    if days <= 1:
        return value, "Due today"
    return value, f"Due in {_plural(int(days), 'day')}"


def risk_elevation(level: RiskLevel) -> tuple[float, str]:
    value = RISK_ELEVATION[level]
    if level == RiskLevel.CRITICAL:
        return value, "Project is critical"
    if level == RiskLevel.AT_RISK:
        return value, "Project is at risk"
    return value, ""


def spacing(item_days_since: int | None, project_days_since: int | None) -> tuple[float, str]:
    """Reward time away from an item (or its project); penalize same-day repeats of the item."""
    if item_days_since is not None:
        if item_days_since <= 0:
            return -1.0, "Already worked on today"
        return min(item_days_since / SPACING_FULL_DAYS, 1.0), f"Last worked {_plural(item_days_since, 'day')} ago"
    if project_days_since is None or project_days_since <= 0:
        return 0.0, ""
    value = min(project_days_since / SPACING_FULL_DAYS, 1.0)
    return value, f"Project last worked {_plural(project_days_since, 'day')} ago"


def variation(project_days_since: int | None) -> tuple[float, str]:
    """Reward projects that have not contributed work recently."""
    if project_days_since is None:
        return 1.0, "Project has never been worked on"
    if project_days_since <= 0:
        return 0.0, ""
    value = min(project_days_since / VARIATION_FULL_DAYS, 1.0)
    return value, f"Project untouched for {_plural(project_days_since, 'day')}"


def pace_deviation(candidate: Candidate, project_progress_pct: float) -> tuple[float, str]:
    """Surface items trailing their own project's progress."""
    project_ratio = min(project_progress_pct / 100, 1.0)
    item_ratio = min(candidate.logged_min / candidate.planned_min, 1.0) if candidate.planned_min > 0 else 1.0
    gap = max(project_ratio - item_ratio, 0.0)
    if gap <= 0:
        return 0.0, ""
    return gap, f"Trails project progress by {round(gap * 100)}%"


def session_fit(candidate: Candidate, available_min: int) -> tuple[float, str]:
    """Prefer items whose preferred session matches the time on hand."""
    if available_min <= 0 or candidate.min_session_min > available_min:
        return -1.0, f"Minimum session of {candidate.min_session_min}m exceeds {available_min}m available"
    preferred = max(candidate.preferred_session_min, 1)
    value = 1.0 - abs(available_min - preferred) / max(available_min, preferred)
    if candidate.min_session_min > available_min * TIGHT_FIT_SHARE:
        return value - 0.5, f"Minimum session of {candidate.min_session_min}m barely fits"
    return value, f"{preferred}m session suits {available_min}m available"


def score_candidate(
    candidate: Candidate,
    risk_level: RiskLevel,
    now: datetime,
    available_min: int,
    weights: ScoringWeights,
    project_progress_pct: float = 0.0,
    item_days_since: int | None = None,
    project_days_since: int | None = None,
) -> ScoredCandidate:
    """
    Score one candidate as the weighted sum of six factors.

    Pure function - no I/O. Weights are passed on every call. Reasons are
    emitted in factor order for every non-negligible contribution, so equal
    inputs always explain themselves with identical text.
    """
    factors = [
        (ReasonCode.DEADLINE_PRESSURE, weights.deadline_pressure, deadline_pressure(candidate.effective_due_date, now)),
        (ReasonCode.RISK_ELEVATION, weights.risk, risk_elevation(risk_level)),
        (ReasonCode.SPACING, weights.spacing, spacing(item_days_since, project_days_since)),
        (ReasonCode.VARIATION, weights.variation, variation(project_days_since)),
        (ReasonCode.PACE_DEVIATION, weights.pace_deviation, pace_deviation(candidate, project_progress_pct)),
        (ReasonCode.SESSION_FIT, weights.session_fit, session_fit(candidate, available_min)),
    ]

    score = 0.0
    reasons = []
    for code, weight, (value, message) in factors:
        contribution = value * weight
        score += contribution
        if abs(contribution) > NEGLIGIBLE:
            reasons.append(Reason(code=code, contribution=contribution, message=message))

    return ScoredCandidate(candidate=candidate, score=score, risk_level=risk_level, reasons=reasons)
