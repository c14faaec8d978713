"""Ports - interfaces/protocols for external dependencies."""

from .plan_repo import PlanRepository
from .session_repo import SessionRepository
from .profile_repo import ProfileRepository

__all__ = [
    "PlanRepository",
    "SessionRepository",
    "ProfileRepository",
]
