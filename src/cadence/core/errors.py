"""Typed engine failures."""

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    INVALID_INPUT = "invalid_input"
    NO_ELIGIBLE_WORK = "no_eligible_work"
    NO_ACTIVE_PROJECTS = "no_active_projects"


class EngineError(Exception):
    """Base class for failures reported by the planning engine."""

    code: ErrorCode = ErrorCode.INVALID_INPUT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(EngineError):
    """Raised for malformed input, before any pipeline stage runs."""

    code = ErrorCode.INVALID_INPUT


class NoEligibleWork(EngineError):
    """
    Nothing could be allocated.

    An expected outcome (everything done or blocked), not a crash. The
    assembled response is attached so callers can show the blockers.
    """

    code = ErrorCode.NO_ELIGIBLE_WORK

    def __init__(self, message: str, response: Any = None):
        super().__init__(message)
        self.response = response


class NoActiveProjects(EngineError):
    """Replan found no active project to work on."""

    code = ErrorCode.NO_ACTIVE_PROJECTS
