"""Profile repository interface."""

from typing import Protocol

from cadence.core.models import UserProfile


class ProfileRepository(Protocol):
    """Interface for reading the user's tuning parameters."""

    def get_profile(self) -> UserProfile | None:
        """Fetch the stored profile, or None if none is stored."""
        ...
