"""JSON file plan storage adapter."""

import json
import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any

from cadence.core.models import (
    Candidate,
    DurationMode,
    ItemStatus,
    Project,
    ProjectStatus,
    ScoringWeights,
    Session,
    UserProfile,
)

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the plan document is missing or malformed."""

    def __init__(self, message: str, record: Any = None):
        super().__init__(message)
        self.record = record


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    return date.fromisoformat(value)


def _parse_datetime(value: str | None) -> datetime | None:
    """Parse an ISO timestamp; naive values are taken as local time."""
    if not value:
        return None
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


class JsonPlanStore:
    """
    Plan storage in a single JSON document.

    Implements PlanRepository, SessionRepository and ProfileRepository.
    The document holds `profile`, `projects`, `nodes`, `work_items` and
    `sessions`. Reads go to disk unless pinned by `reading()`; writes
    replace the whole file atomically.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()
        self._pinned: dict | None = None

    # ============== Document I/O ==============

    def _read(self) -> dict:
        if not self.path.exists():
            raise StoreError(f"Plan file not found: {self.path}")
        try:
            doc = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise StoreError(f"Plan file {self.path} is not valid JSON: {e}") from e
        if not isinstance(doc, dict):
            raise StoreError(f"Plan file {self.path} must hold a JSON object")
        return doc

    def _load(self) -> dict:
        if self._pinned is not None:
            return self._pinned
        return self._read()

    @contextmanager
    def reading(self) -> Iterator["JsonPlanStore"]:
        """Serve every read inside the block from a single load of the document."""
        self._pinned = self._read()
        try:
            yield self
        finally:
            self._pinned = None

    def _save(self, doc: dict) -> None:
        """Write to a temp file beside the target, then swap it in."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(doc, f, indent=2)
                f.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # ============== Parsing ==============

    def _parse_project(self, raw: dict) -> Project:
        try:
            return Project(
                id=raw["id"],
                name=raw.get("name", raw["id"]),
                start_date=_parse_date(raw["start_date"]),
                target_date=_parse_date(raw.get("target_date")),
                status=ProjectStatus(raw.get("status", "active")),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise StoreError(f"Invalid project record: {e}", raw) from e

    def _parse_session(self, raw: dict) -> Session:
        try:
            return Session(
                id=raw["id"],
                work_item_id=raw["work_item_id"],
                started_at=_parse_datetime(raw["started_at"]),
                minutes=int(raw["minutes"]),
                units_done_delta=int(raw.get("units_done_delta", 0)),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise StoreError(f"Invalid session record: {e}", raw) from e

    # ============== PlanRepository ==============

    def list_projects(self) -> list[Project]:
        return [self._parse_project(p) for p in self._load().get("projects", [])]

    def list_work_items(self) -> list[Candidate]:
        """
        Join every non-archived work item with its node and project.

        Dependencies count as met once every predecessor is done or skipped.
        """
        doc = self._load()
        projects = {p.id: p for p in (self._parse_project(raw) for raw in doc.get("projects", []))}
        nodes = {n["id"]: n for n in doc.get("nodes", []) if "id" in n}
        raw_items = doc.get("work_items", [])
        statuses = {raw.get("id"): raw.get("status", "todo") for raw in raw_items}

        last_worked: dict[str, datetime] = {}
        for raw in doc.get("sessions", []):
            sess = self._parse_session(raw)
            current = last_worked.get(sess.work_item_id)
            if current is None or sess.started_at > current:
                last_worked[sess.work_item_id] = sess.started_at

        items = []
        for raw in raw_items:
            try:
                status = ItemStatus(raw.get("status", "todo"))
                if status == ItemStatus.ARCHIVED:
                    continue
                node = nodes[raw["node_id"]]
                project = projects[node["project_id"]]
                depends_on = raw.get("depends_on", [])
                deps_met = all(
                    statuses.get(dep) in (ItemStatus.DONE.value, ItemStatus.SKIPPED.value) for dep in depends_on
                )
                items.append(
                    Candidate(
                        work_item_id=raw["id"],
                        node_id=node["id"],
                        project_id=project.id,
                        planned_min=int(raw["planned_min"]),
                        logged_min=int(raw.get("logged_min", 0)),
                        min_session_min=int(raw.get("min_session_min", 15)),
                        max_session_min=int(raw.get("max_session_min", 60)),
                        preferred_session_min=int(raw.get("preferred_session_min", 30)),
                        title=raw.get("title", ""),
                        project_name=project.name,
                        node_title=node.get("title", ""),
                        not_before=_parse_date(raw.get("not_before")),
                        due_date=_parse_date(raw.get("due_date")),
                        node_due_date=_parse_date(node.get("due_date")),
                        project_target_date=project.target_date,
                        units_total=raw.get("units_total"),
                        units_done=raw.get("units_done"),
                        duration_mode=DurationMode(raw.get("duration_mode", "estimate")),
                        status=status,
                        dependencies_met=deps_met,
                        last_worked_at=last_worked.get(raw["id"]),
                    )
                )
            except (KeyError, ValueError, TypeError) as e:
                raise StoreError(f"Invalid work item record: {e}", raw) from e

        logger.debug(f"Loaded {len(items)} work items from {self.path}")
        return items

    def apply_reestimates(self, project_id: str, planned_by_item: dict[str, int]) -> None:
        """
        Set planned minutes for items of one project.

        All ids are checked before anything is written, so an unknown id
        leaves the document untouched.
        """
        if not planned_by_item:
            return

        doc = self._read()
        node_project = {n.get("id"): n.get("project_id") for n in doc.get("nodes", [])}
        by_id = {raw.get("id"): raw for raw in doc.get("work_items", [])}

        for item_id in planned_by_item:
            raw = by_id.get(item_id)
            if raw is None:
                raise StoreError(f"Unknown work item: {item_id}")
            if node_project.get(raw.get("node_id")) != project_id:
                raise StoreError(f"Work item {item_id} does not belong to project {project_id}", raw)

        for item_id, planned in planned_by_item.items():
            by_id[item_id]["planned_min"] = planned

        self._save(doc)
        logger.info(f"Saved {len(planned_by_item)} re-estimates for project {project_id}")

    # ============== SessionRepository ==============

    def list_sessions(self, since: datetime) -> list[Session]:
        sessions = [self._parse_session(raw) for raw in self._load().get("sessions", [])]
        return [s for s in sessions if s.started_at >= since]

    # ============== ProfileRepository ==============

    def get_profile(self) -> UserProfile | None:
        raw = self._load().get("profile")
        if not raw:
            return None
        try:
            weights = ScoringWeights(**raw.get("weights", {}))
            return UserProfile(
                weights=weights,
                baseline_daily_min=int(raw.get("baseline_daily_min", 0)),
                buffer_pct=float(raw.get("buffer_pct", 0.1)),
            )
        except (ValueError, TypeError) as e:
            raise StoreError(f"Invalid profile record: {e}", raw) from e
