"""Plan repository interface."""

from typing import Protocol

from cadence.core.models import Candidate, Project


class PlanRepository(Protocol):
    """Interface for reading and updating projects and work items."""

    def list_projects(self) -> list[Project]:
        """Fetch all projects, whatever their status."""
        ...

    def list_work_items(self) -> list[Candidate]:
        """Fetch every non-archived work item joined with its node and project."""
        ...

    def apply_reestimates(self, project_id: str, planned_by_item: dict[str, int]) -> None:
        """Persist new planned minutes for one project's items, all or nothing."""
        ...
