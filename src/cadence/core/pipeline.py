"""
Pure planning pipeline - no I/O dependencies.

Composes aggregation, risk, scoring, ordering, allocation and re-estimation
into the three engine operations: recommend, status and replan. Each takes a
PlanSnapshot captured by the caller and returns a fresh response.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime

from .aggregate import (
    ProjectAggregate,
    active_projects,
    aggregate_project,
    aggregate_snapshot,
    project_risk,
    recent_daily_pace,
)
from .allocation import Blocker, WorkSlice, allocate
from .errors import NoActiveProjects, NoEligibleWork, ValidationError
from .models import Candidate, Mode, PlanSnapshot, RiskLevel, days_since
from .reestimate import reestimate_item
from .risk import RiskResult, risk_priority
from .scoring import score_candidate
from .sorting import canonical_sort


@dataclass
class RecommendRequest:
    available_min: int
    max_slices: int | None = None
    project_scope: list[str] | None = None


@dataclass
class ProjectRisk:
    """Risk summary for one project."""

    project_id: str
    project_name: str
    level: RiskLevel
    target_date: date | None
    days_remaining: float | None
    planned_min: int
    logged_min: int
    remaining_min: int
    required_daily_min: float
    recent_daily_min: float
    slack_min_per_day: float
    progress_pct: float


@dataclass
class RecommendResponse:
    generated_at: datetime
    mode: Mode
    requested_min: int
    allocated_min: int
    unallocated_min: int
    slices: list[WorkSlice] = field(default_factory=list)
    blockers: list[Blocker] = field(default_factory=list)
    risks: list[ProjectRisk] = field(default_factory=list)
    policy_messages: list[str] = field(default_factory=list)


@dataclass
class ProjectStatusView:
    project_id: str
    project_name: str
    level: RiskLevel
    target_date: date | None
    days_remaining: float | None
    progress_pct: float
    structural_pct: float
    time_elapsed_pct: float
    planned_min: int
    logged_min: int
    remaining_min: int
    required_daily_min: float
    recent_daily_min: float
    slack_min_per_day: float
    safe_for_secondary_work: bool


@dataclass
class StatusSummary:
    generated_at: datetime
    total: int
    on_track: int
    at_risk: int
    critical: int
    mode_if_now: Mode
    policy_message: str


@dataclass
class StatusResponse:
    summary: StatusSummary
    projects: list[ProjectStatusView] = field(default_factory=list)


@dataclass
class ProjectDelta:
    """Risk of one project before and after re-estimation."""

    project_id: str
    project_name: str
    before: RiskResult
    after: RiskResult
    changed_items_count: int = 0
    reestimates: dict[str, int] = field(default_factory=dict)


@dataclass
class ReplanResponse:
    generated_at: datetime
    recomputed_projects: int
    mode_after: Mode
    deltas: list[ProjectDelta] = field(default_factory=list)

    @property
    def changed_items_count(self) -> int:
        return sum(d.changed_items_count for d in self.deltas)


# ============== Validation ==============


def validate_snapshot(snapshot: PlanSnapshot) -> None:
    """Reject malformed snapshots before any stage runs."""
    profile = snapshot.profile
    if snapshot.window_days < 1:
        raise ValidationError(f"window_days must be >= 1, got {snapshot.window_days}")
    if profile.buffer_pct < 0:
        raise ValidationError(f"buffer_pct must be >= 0, got {profile.buffer_pct}")
    if profile.baseline_daily_min < 0:
        raise ValidationError(f"baseline_daily_min must be >= 0, got {profile.baseline_daily_min}")

    for item in snapshot.items:
        wid = item.work_item_id
        if item.planned_min < 0 or item.logged_min < 0:
            raise ValidationError(f"work item {wid}: planned and logged minutes must be >= 0")
        if item.min_session_min < 1 or item.max_session_min < 1:
            raise ValidationError(f"work item {wid}: session bounds must be at least 1 minute")
        if item.min_session_min > item.max_session_min:
            raise ValidationError(
                f"work item {wid}: min_session_min ({item.min_session_min}) "
                f"exceeds max_session_min ({item.max_session_min})"
            )
        if (item.units_total is not None and item.units_total < 0) or (
            item.units_done is not None and item.units_done < 0
        ):
            raise ValidationError(f"work item {wid}: unit counts must be >= 0")


def validate_request(request: RecommendRequest) -> None:
    if request.available_min <= 0:
        raise ValidationError(f"available_min must be > 0, got {request.available_min}")
    if request.max_slices is not None and request.max_slices < 1:
        raise ValidationError(f"max_slices must be >= 1, got {request.max_slices}")


# ============== Shared stages ==============


def determine_mode(risks: list[RiskResult]) -> Mode:
    """Critical if any project is critical, otherwise balanced."""
    if any(r.level == RiskLevel.CRITICAL for r in risks):
        return Mode.CRITICAL
    return Mode.BALANCED


def _project_order(agg: ProjectAggregate, risk: RiskResult) -> tuple:
    return (
        risk_priority(risk.level),
        agg.target_date is None,
        agg.target_date or date.max,
        agg.project_name,
        agg.project_id,
    )


def _ordered(projects: dict[str, tuple[ProjectAggregate, RiskResult]]) -> list[tuple[ProjectAggregate, RiskResult]]:
    return sorted(projects.values(), key=lambda pair: _project_order(*pair))


def _project_risk(agg: ProjectAggregate, risk: RiskResult, snapshot: PlanSnapshot) -> ProjectRisk:
    recent, _ = recent_daily_pace(agg, snapshot.window_days, snapshot.profile.baseline_daily_min)
    return ProjectRisk(
        project_id=agg.project_id,
        project_name=agg.project_name,
        level=risk.level,
        target_date=agg.target_date,
        days_remaining=risk.days_remaining,
        planned_min=agg.planned_min,
        logged_min=agg.logged_min,
        remaining_min=risk.remaining_min,
        required_daily_min=risk.required_daily_min,
        recent_daily_min=recent,
        slack_min_per_day=risk.slack_min_per_day,
        progress_pct=agg.progress_pct,
    )


def last_worked_index(snapshot: PlanSnapshot) -> dict[str, datetime]:
    """Most recent session start per work item, up to now."""
    index: dict[str, datetime] = {}
    for item in snapshot.items:
        if item.last_worked_at and item.last_worked_at <= snapshot.now:
            index[item.work_item_id] = item.last_worked_at
    for sess in snapshot.sessions:
        if sess.started_at > snapshot.now:
            continue
        current = index.get(sess.work_item_id)
        if current is None or sess.started_at > current:
            index[sess.work_item_id] = sess.started_at
    return index


# ============== Operations ==============


def recommend(snapshot: PlanSnapshot, request: RecommendRequest) -> RecommendResponse:
    """
    Recommend how to spend the available minutes.

    Pure function - no I/O.

    Raises:
        ValidationError: malformed snapshot or request
        NoEligibleWork: nothing could be allocated (response attached)
    """
    validate_request(request)
    validate_snapshot(snapshot)
    now = snapshot.now

    projects = aggregate_snapshot(snapshot, request.project_scope)
    mode = determine_mode([risk for _, risk in projects.values()])

    worked = last_worked_index(snapshot)
    scored = []
    for c in snapshot.items:
        if c.project_id not in projects or not c.status.is_schedulable:
            continue
        agg, risk = projects[c.project_id]
        item_last = worked.get(c.work_item_id)
        scored.append(
            score_candidate(
                c,
                risk_level=risk.level,
                now=now,
                available_min=request.available_min,
                weights=snapshot.profile.weights,
                project_progress_pct=agg.progress_pct,
                item_days_since=days_since(item_last, now) if item_last else None,
                project_days_since=days_since(agg.last_worked_at, now) if agg.last_worked_at else None,
            )
        )

    ordered = canonical_sort(scored)
    slices, blockers = allocate(ordered, request.available_min, mode, now, request.max_slices)

    allocated = sum(s.allocated_min for s in slices)
    ordered_projects = _ordered(projects)

    policy = []
    if mode == Mode.CRITICAL:
        policy.append("Critical mode: only work from critical projects is recommended")
    for agg, risk in ordered_projects:
        if risk.level == RiskLevel.ON_TRACK:
            policy.append(f"{agg.project_name} is on track, secondary work is safe")

    response = RecommendResponse(
        generated_at=now,
        mode=mode,
        requested_min=request.available_min,
        allocated_min=allocated,
        unallocated_min=request.available_min - allocated,
        slices=slices,
        blockers=blockers,
        risks=[_project_risk(agg, risk, snapshot) for agg, risk in ordered_projects],
        policy_messages=policy,
    )

    if allocated == 0:
        if scored:
            message = f"No eligible work: all {len(scored)} candidates are blocked"
        else:
            message = "No eligible work: nothing is schedulable"
        raise NoEligibleWork(message, response)

    return response


def status(snapshot: PlanSnapshot, project_scope: list[str] | None = None) -> StatusResponse:
    """
    Read-only risk snapshot of every active project.

    Pure function - no I/O.
    """
    validate_snapshot(snapshot)
    projects = aggregate_snapshot(snapshot, project_scope)

    views = []
    counts = {level: 0 for level in RiskLevel}
    for agg, risk in _ordered(projects):
        counts[risk.level] += 1
        recent, _ = recent_daily_pace(agg, snapshot.window_days, snapshot.profile.baseline_daily_min)
        views.append(
            ProjectStatusView(
                project_id=agg.project_id,
                project_name=agg.project_name,
                level=risk.level,
                target_date=agg.target_date,
                days_remaining=risk.days_remaining,
                progress_pct=agg.progress_pct,
                structural_pct=agg.structural_pct,
                time_elapsed_pct=agg.time_elapsed_pct,
                planned_min=agg.planned_min,
                logged_min=agg.logged_min,
                remaining_min=risk.remaining_min,
                required_daily_min=risk.required_daily_min,
                recent_daily_min=recent,
                slack_min_per_day=risk.slack_min_per_day,
                safe_for_secondary_work=risk.level == RiskLevel.ON_TRACK,
            )
        )

    if counts[RiskLevel.CRITICAL]:
        policy_message = "Critical work requires attention"
    elif counts[RiskLevel.AT_RISK]:
        policy_message = "Some projects at risk, monitor closely"
    else:
        policy_message = "All projects on track"

    return StatusResponse(
        summary=StatusSummary(
            generated_at=snapshot.now,
            total=len(views),
            on_track=counts[RiskLevel.ON_TRACK],
            at_risk=counts[RiskLevel.AT_RISK],
            critical=counts[RiskLevel.CRITICAL],
            mode_if_now=Mode.CRITICAL if counts[RiskLevel.CRITICAL] else Mode.BALANCED,
            policy_message=policy_message,
        ),
        projects=views,
    )


def replan(snapshot: PlanSnapshot, project_scope: list[str] | None = None) -> ReplanResponse:
    """
    Re-estimate unit-tracked items and report each project's risk before and after.

    Pure function - no I/O. The new planned minutes are returned in each
    delta's `reestimates`; persisting them is up to the caller.

    Raises:
        ValidationError: malformed snapshot
        NoActiveProjects: no active project in scope
    """
    validate_snapshot(snapshot)
    now = snapshot.now
    profile = snapshot.profile

    projects = active_projects(snapshot, project_scope)
    if not projects:
        raise NoActiveProjects("no active projects to replan")

    deltas = []
    for project in projects:
        items = snapshot.items_for(project.id)

        before_agg = aggregate_project(project, items, snapshot.sessions, now, snapshot.window_days)
        _, effective = recent_daily_pace(before_agg, snapshot.window_days, profile.baseline_daily_min)
        before = project_risk(before_agg, now, profile.buffer_pct, effective)

        reestimates: dict[str, int] = {}
        updated: list[Candidate] = []
        for item in items:
            new_planned = reestimate_item(item)
            if new_planned != item.planned_min:
                reestimates[item.work_item_id] = new_planned
                item = replace(item, planned_min=new_planned)
            updated.append(item)

        after_agg = aggregate_project(project, updated, snapshot.sessions, now, snapshot.window_days)
        after = project_risk(after_agg, now, profile.buffer_pct, effective)

        deltas.append(
            ProjectDelta(
                project_id=project.id,
                project_name=project.name,
                before=before,
                after=after,
                changed_items_count=len(reestimates),
                reestimates=reestimates,
            )
        )

    return ReplanResponse(
        generated_at=now,
        recomputed_projects=len(deltas),
        mode_after=determine_mode([d.after for d in deltas]),
        deltas=deltas,
    )
