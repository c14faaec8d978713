"""Shared workflow layer between the CLI and the planning core.

Each workflow loads a snapshot through the ports, runs one pure pipeline
operation, and persists anything it changed.
"""

import logging
from datetime import datetime, timedelta

from .adapters.json_store import JsonPlanStore
from .config import Config
from .core import pipeline
from .core.models import PlanSnapshot
from .core.pipeline import RecommendRequest, RecommendResponse, ReplanResponse, StatusResponse
from .ports import PlanRepository, ProfileRepository, SessionRepository

logger = logging.getLogger(__name__)


def get_store(config: Config) -> JsonPlanStore:
    """Resolve the plan store from config."""
    return JsonPlanStore(config.data_path)


def load_snapshot(
    plans: PlanRepository,
    sessions: SessionRepository,
    profiles: ProfileRepository,
    config: Config,
    now: datetime | None = None,
) -> PlanSnapshot:
    """Capture everything one pipeline run needs, once."""
    now = now or datetime.now().astimezone()
    window_days = config.recent_session_days

    projects = plans.list_projects()
    items = plans.list_work_items()
    recent = sessions.list_sessions(since=now - timedelta(days=window_days))
    profile = profiles.get_profile() or config.default_profile()

    logger.debug(f"Snapshot at {now.isoformat()}: {len(projects)} projects, {len(items)} items, {len(recent)} sessions")

    return PlanSnapshot(
        now=now,
        projects=projects,
        items=items,
        sessions=recent,
        profile=profile,
        window_days=window_days,
    )


def capture_snapshot(store: JsonPlanStore, config: Config, now: datetime | None = None) -> PlanSnapshot:
    """Load a snapshot from a single read of the plan file."""
    with store.reading():
        return load_snapshot(store, store, store, config, now)


def what_now(
    store: JsonPlanStore,
    config: Config,
    available_min: int,
    max_slices: int | None = None,
    project_scope: list[str] | None = None,
    now: datetime | None = None,
) -> RecommendResponse:
    """Recommend how to spend the next `available_min` minutes."""
    snapshot = capture_snapshot(store, config, now)
    request = RecommendRequest(
        available_min=available_min,
        max_slices=max_slices if max_slices is not None else config.default_max_slices,
        project_scope=project_scope or None,
    )
    response = pipeline.recommend(snapshot, request)
    logger.info(f"Recommended {response.allocated_min}m over {len(response.slices)} slices in {response.mode.value} mode")
    return response


def get_status(
    store: JsonPlanStore,
    config: Config,
    project_scope: list[str] | None = None,
    now: datetime | None = None,
) -> StatusResponse:
    """Read-only risk overview."""
    snapshot = capture_snapshot(store, config, now)
    return pipeline.status(snapshot, project_scope or None)


def run_replan(
    store: JsonPlanStore,
    config: Config,
    project_scope: list[str] | None = None,
    dry_run: bool = False,
    now: datetime | None = None,
) -> ReplanResponse:
    """Re-estimate items and persist the new plan per project unless dry_run."""
    snapshot = capture_snapshot(store, config, now)
    response = pipeline.replan(snapshot, project_scope or None)

    for delta in response.deltas:
        if not delta.reestimates:
            continue
        if dry_run:
            logger.info(f"Dry run: {delta.changed_items_count} re-estimates for {delta.project_id} not saved")
            continue
        store.apply_reestimates(delta.project_id, delta.reestimates)

    logger.info(f"Replanned {response.recomputed_projects} projects, mode after: {response.mode_after.value}")
    return response
