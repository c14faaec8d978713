"""Pure planning domain model - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum


class RiskLevel(Enum):
    """Deadline risk of a project."""

    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    CRITICAL = "critical"


class Mode(Enum):
    """Scheduling posture for a whole recommendation."""

    BALANCED = "balanced"
    CRITICAL = "critical"  # Only critical-risk projects are eligible


class DurationMode(Enum):
    ESTIMATE = "estimate"
    FIXED = "fixed"


class ItemStatus(Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    SKIPPED = "skipped"
    ARCHIVED = "archived"

    @property
    def is_completed(self) -> bool:
        return self in (ItemStatus.DONE, ItemStatus.SKIPPED)

    @property
    def is_schedulable(self) -> bool:
        return self in (ItemStatus.TODO, ItemStatus.IN_PROGRESS)


class ProjectStatus(Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    DONE = "done"
    ARCHIVED = "archived"


@dataclass
class Project:
    """A tracked project with an optional deadline."""

    id: str
    name: str
    start_date: date
    target_date: date | None = None
    status: ProjectStatus = ProjectStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == ProjectStatus.ACTIVE


@dataclass
class Candidate:
    """A work item joined with its node and project context."""

    work_item_id: str
    node_id: str
    project_id: str
    planned_min: int
    logged_min: int = 0
    min_session_min: int = 15
    max_session_min: int = 60
    preferred_session_min: int = 30
    title: str = ""
    project_name: str = ""
    node_title: str = ""
    not_before: date | None = None
    due_date: date | None = None
    node_due_date: date | None = None
    project_target_date: date | None = None
    units_total: int | None = None
    units_done: int | None = None
    duration_mode: DurationMode = DurationMode.ESTIMATE
    status: ItemStatus = ItemStatus.TODO
    dependencies_met: bool = True
    last_worked_at: datetime | None = None

    @property
    def remaining_min(self) -> int:
        """Minutes of planned work not yet logged (never negative)."""
        return max(self.planned_min - self.logged_min, 0)

    @property
    def is_work_complete(self) -> bool:
        return self.logged_min >= self.planned_min

    @property
    def inherited_due_date(self) -> date | None:
        """Own due date, falling back to the node's, then the project's."""
        return self.due_date or self.node_due_date or self.project_target_date

    @property
    def effective_due_date(self) -> date | None:
        """Earliest of the item, node and project deadlines."""
        return earliest_date(self.due_date, self.node_due_date, self.project_target_date)


@dataclass
class Session:
    """A logged block of work on one item."""

    id: str
    work_item_id: str
    started_at: datetime
    minutes: int
    units_done_delta: int = 0


@dataclass
class ScoringWeights:
    """Per-factor multipliers for the scorer."""

    deadline_pressure: float = 1.0
    risk: float = 0.8
    spacing: float = 0.5
    variation: float = 0.3
    pace_deviation: float = 0.6
    session_fit: float = 0.4


@dataclass
class UserProfile:
    """User tuning parameters."""

    weights: ScoringWeights = field(default_factory=ScoringWeights)
    baseline_daily_min: int = 0
    buffer_pct: float = 0.1


@dataclass
class PlanSnapshot:
    """Everything one pipeline run may look at, captured once."""

    now: datetime
    projects: list[Project]
    items: list[Candidate]
    sessions: list[Session] = field(default_factory=list)
    profile: UserProfile = field(default_factory=UserProfile)
    window_days: int = 7

    def items_for(self, project_id: str) -> list[Candidate]:
        return [c for c in self.items if c.project_id == project_id]


def earliest_date(*dates: date | None) -> date | None:
    """Earliest non-None date, or None."""
    present = [d for d in dates if d is not None]
    return min(present) if present else None


def deadline_at(d: date, now: datetime) -> datetime:
    """A date deadline expires at the end of that day, in now's timezone."""
    return datetime.combine(d + timedelta(days=1), time.min, tzinfo=now.tzinfo)


def days_until(d: date, now: datetime) -> float:
    """Fractional days from now to the end of date d (negative once passed)."""
    return (deadline_at(d, now) - now).total_seconds() / 86400


def days_since(moment: datetime, now: datetime) -> int:
    """Whole calendar days between moment and now (0 = same day)."""
    return (now.date() - moment.date()).days
