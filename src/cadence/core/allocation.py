"""Pure two-pass time allocation - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .models import Candidate, Mode, RiskLevel
from .scoring import Reason, ScoredCandidate


class BlockerCode(Enum):
    """Why a candidate received no slice."""

    NOT_BEFORE = "not_before"
    DEPENDENCY = "dependency"
    NOT_IN_CRITICAL_SCOPE = "not_in_critical_scope"
    SESSION_MIN_EXCEEDS_AVAILABLE = "session_min_exceeds_available"
    WORK_COMPLETE = "work_complete"
    STATUS_DONE = "status_done"  # Reserved: done items are filtered before the engine


@dataclass
class Blocker:
    entity_id: str
    code: BlockerCode
    message: str


@dataclass
class WorkSlice:
    """One allocation of minutes to one work item."""

    work_item_id: str
    project_id: str
    node_id: str
    title: str
    allocated_min: int
    min_session_min: int
    max_session_min: int
    requested_remaining_min: int
    risk_level: RiskLevel
    score: float
    reasons: list[Reason] = field(default_factory=list)


def check_eligibility(
    sc: ScoredCandidate,
    mode: Mode,
    available_min: int,
    now: datetime,
) -> Blocker | None:
    """
    First applicable reason a candidate may not be scheduled, or None.

    Order: not_before, dependency, work complete, critical scope, minimum
    session vs. available time. Fully logged work always reports
    work_complete.
    """
    c = sc.candidate
    label = c.title or c.work_item_id

    if c.not_before is not None and c.not_before > now.date():
        return Blocker(
            entity_id=c.work_item_id,
            code=BlockerCode.NOT_BEFORE,
            message=f"'{label}' is not available before {c.not_before.isoformat()}",
        )
    if not c.dependencies_met:
        return Blocker(
            entity_id=c.work_item_id,
            code=BlockerCode.DEPENDENCY,
            message=f"'{label}' has unfinished predecessors",
        )
    if c.is_work_complete:
        return Blocker(
            entity_id=c.work_item_id,
            code=BlockerCode.WORK_COMPLETE,
            message=f"'{label}' is fully logged ({c.logged_min}m/{c.planned_min}m)",
        )
    if mode == Mode.CRITICAL and sc.risk_level != RiskLevel.CRITICAL:
        return Blocker(
            entity_id=c.work_item_id,
            code=BlockerCode.NOT_IN_CRITICAL_SCOPE,
            message=f"'{label}' skipped: not in critical scope during critical mode",
        )
    if c.min_session_min > available_min:
        return Blocker(
            entity_id=c.work_item_id,
            code=BlockerCode.SESSION_MIN_EXCEEDS_AVAILABLE,
            message=f"'{label}' needs at least {c.min_session_min}m, only {available_min}m available",
        )
    return None


def _floor(c: Candidate) -> int:
    """Fewest minutes one slice of this candidate may hold."""
    return max(c.min_session_min, 1)


def _ceiling(sc: ScoredCandidate) -> int:
    """Most minutes one slice of this candidate may hold."""
    c = sc.candidate
    return min(c.max_session_min, c.remaining_min)


def allocate(
    candidates: list[ScoredCandidate],
    available_min: int,
    mode: Mode,
    now: datetime,
    max_slices: int | None = None,
) -> tuple[list[WorkSlice], list[Blocker]]:
    """
    Allocate available minutes over canonically sorted candidates.

    Pure function - no I/O. Consumes candidates in the given order and never
    reorders them.

    Pass 1 gives each project one slice of its best fitting candidate, sized
    to the preferred session. Pass 2 walks the list again from the top,
    growing existing slices and opening new ones up to each candidate's
    ceiling, until the budget runs out. Every slice stays within
    [min_session_min, min(max_session_min, remaining work)].

    Returns: (slices in canonical order, blockers)
    """
    blockers: list[Blocker] = []
    eligible: list[tuple[int, ScoredCandidate]] = []
    for index, sc in enumerate(candidates):
        blocker = check_eligibility(sc, mode, available_min, now)
        if blocker:
            blockers.append(blocker)
        else:
            eligible.append((index, sc))

    budget = available_min
    allocated: dict[int, int] = {}
    projects_seen: set[str] = set()

    def can_open() -> bool:
        return max_slices is None or len(allocated) < max_slices

    # Pass 1: one slice per project
    for index, sc in eligible:
        if sc.project_id in projects_seen or not can_open():
            continue
        c = sc.candidate
        ceiling = _ceiling(sc)
        amount = min(max(c.preferred_session_min, c.min_session_min), ceiling, budget)
        if amount < _floor(c):
            continue
        allocated[index] = amount
        budget -= amount
        projects_seen.add(sc.project_id)

    # Pass 2: fill from the top
    for index, sc in eligible:
        if budget <= 0:
            break
        c = sc.candidate
        ceiling = _ceiling(sc)
        if index in allocated:
            extra = min(ceiling - allocated[index], budget)
            if extra > 0:
                allocated[index] += extra
                budget -= extra
            continue
        if not can_open():
            continue
        amount = min(ceiling, budget)
        if amount < _floor(c):
            continue
        allocated[index] = amount
        budget -= amount

    slices = []
    for index, sc in eligible:
        c = sc.candidate
        if index in allocated:
            slices.append(
                WorkSlice(
                    work_item_id=c.work_item_id,
                    project_id=c.project_id,
                    node_id=c.node_id,
                    title=c.title,
                    allocated_min=allocated[index],
                    min_session_min=c.min_session_min,
                    max_session_min=c.max_session_min,
                    requested_remaining_min=c.remaining_min,
                    risk_level=sc.risk_level,
                    score=sc.score,
                    reasons=list(sc.reasons),
                )
            )
        elif c.remaining_min < _floor(c):
            blockers.append(
                Blocker(
                    entity_id=c.work_item_id,
                    code=BlockerCode.SESSION_MIN_EXCEEDS_AVAILABLE,
                    message=(
                        f"'{c.title or c.work_item_id}' has {c.remaining_min}m of work left, "
                        f"below its {_floor(c)}m minimum session"
                    ),
                )
            )
        elif budget < _floor(c):
            blockers.append(
                Blocker(
                    entity_id=c.work_item_id,
                    code=BlockerCode.SESSION_MIN_EXCEEDS_AVAILABLE,
                    message=(
                        f"'{c.title or c.work_item_id}' needs at least {_floor(c)}m, "
                        f"only {budget}m left after higher-ranked work"
                    ),
                )
            )

    return slices, blockers
