"""Pure per-project rollups - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from .models import Candidate, ItemStatus, PlanSnapshot, Project, Session, deadline_at
from .risk import RiskInput, RiskResult, classify_risk


@dataclass
class ProjectAggregate:
    """Rollup of one project's work items and recent sessions."""

    project_id: str
    project_name: str
    planned_min: int = 0
    logged_min: int = 0
    done_planned_min: int = 0
    due_by_now_min: int = 0
    recent_min: int = 0
    item_count: int = 0
    done_count: int = 0
    start_date: date | None = None
    target_date: date | None = None
    last_worked_at: datetime | None = None
    progress_pct: float = 0.0
    time_elapsed_pct: float = 0.0
    due_based_expected_pct: float = 0.0

    @property
    def structural_pct(self) -> float:
        """Share of items completed, by count."""
        if not self.item_count:
            return 0.0
        return self.done_count / self.item_count * 100


def aggregate_project(
    project: Project,
    items: list[Candidate],
    sessions: list[Session],
    now: datetime,
    window_days: int = 7,
) -> ProjectAggregate:
    """
    Roll up a project's items into totals and progress percentages.

    Pure function - no I/O. Archived items are ignored. Completed items credit
    the larger of planned and logged minutes, so progress_pct may exceed 100.
    """
    agg = ProjectAggregate(
        project_id=project.id,
        project_name=project.name,
        start_date=project.start_date,
        target_date=project.target_date,
    )

    item_ids = set()
    for item in items:
        if item.status == ItemStatus.ARCHIVED:
            continue
        item_ids.add(item.work_item_id)
        agg.item_count += 1
        agg.planned_min += item.planned_min
        agg.logged_min += item.logged_min

        worked = item.last_worked_at
        if worked and worked <= now and (agg.last_worked_at is None or worked > agg.last_worked_at):
            agg.last_worked_at = worked

        if item.status.is_completed:
            agg.done_count += 1
            agg.done_planned_min += max(item.planned_min, item.logged_min)
            continue

        due = item.inherited_due_date
        if due is not None and deadline_at(due, now) <= now:
            agg.due_by_now_min += item.planned_min

    window_start = now - timedelta(days=window_days)
    for sess in sessions:
        if sess.work_item_id not in item_ids:
            continue
        if window_start <= sess.started_at <= now:
            agg.recent_min += sess.minutes
        if sess.started_at <= now and (agg.last_worked_at is None or sess.started_at > agg.last_worked_at):
            agg.last_worked_at = sess.started_at

    if agg.planned_min > 0:
        agg.progress_pct = agg.done_planned_min / agg.planned_min * 100
        agg.due_based_expected_pct = (agg.done_planned_min + agg.due_by_now_min) / agg.planned_min * 100

    if project.target_date and project.start_date:
        start = datetime.combine(project.start_date, time.min, tzinfo=now.tzinfo)
        total = (deadline_at(project.target_date, now) - start).total_seconds()
        elapsed = (now - start).total_seconds()
        if total > 0:
            agg.time_elapsed_pct = max(elapsed, 0.0) / total * 100

    return agg


def recent_daily_pace(agg: ProjectAggregate, window_days: int, baseline_daily_min: int) -> tuple[float, float]:
    """
    Trailing daily pace and the effective pace used for risk.

    Returns: (recent_daily_min, effective_daily_min)
    """
    recent = agg.recent_min / window_days if window_days > 0 else 0.0
    return recent, max(recent, float(baseline_daily_min))


def project_risk(
    agg: ProjectAggregate,
    now: datetime,
    buffer_pct: float,
    effective_daily_min: float,
) -> RiskResult:
    """Classify a project from its aggregate."""
    return classify_risk(
        RiskInput(
            now=now,
            target_date=agg.target_date,
            planned_min=agg.planned_min,
            logged_min=agg.logged_min,
            buffer_pct=buffer_pct,
            effective_daily_min=effective_daily_min,
            progress_pct=agg.progress_pct,
            time_elapsed_pct=agg.time_elapsed_pct,
            due_based_expected_pct=agg.due_based_expected_pct,
        )
    )


def active_projects(snapshot: PlanSnapshot, scope: list[str] | None = None) -> list[Project]:
    """Active projects, optionally restricted to a list of ids, in id order."""
    projects = [p for p in snapshot.projects if p.is_active]
    if scope:
        wanted = set(scope)
        projects = [p for p in projects if p.id in wanted]
    return sorted(projects, key=lambda p: p.id)


def aggregate_snapshot(
    snapshot: PlanSnapshot,
    scope: list[str] | None = None,
) -> dict[str, tuple[ProjectAggregate, RiskResult]]:
    """Aggregate and classify every active project in scope."""
    profile = snapshot.profile
    result = {}
    for project in active_projects(snapshot, scope):
        agg = aggregate_project(
            project, snapshot.items_for(project.id), snapshot.sessions, snapshot.now, snapshot.window_days
        )
        _, effective = recent_daily_pace(agg, snapshot.window_days, profile.baseline_daily_min)
        result[project.id] = (agg, project_risk(agg, snapshot.now, profile.buffer_pct, effective))
    return result
