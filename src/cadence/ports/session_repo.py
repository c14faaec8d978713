"""Session repository interface."""

from datetime import datetime
from typing import Protocol

from cadence.core.models import Session


class SessionRepository(Protocol):
    """Interface for reading logged work sessions."""

    def list_sessions(self, since: datetime) -> list[Session]:
        """Fetch sessions started at or after `since`."""
        ...
