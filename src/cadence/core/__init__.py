"""Functional core - pure planning logic with no I/O."""

from .models import (
    Candidate,
    DurationMode,
    ItemStatus,
    Mode,
    PlanSnapshot,
    Project,
    ProjectStatus,
    RiskLevel,
    ScoringWeights,
    Session,
    UserProfile,
)
from .errors import EngineError, ErrorCode, NoActiveProjects, NoEligibleWork, ValidationError
from .risk import RiskInput, RiskResult, classify_risk
from .aggregate import ProjectAggregate, aggregate_project
from .scoring import Reason, ReasonCode, ScoredCandidate, score_candidate
from .sorting import canonical_sort
from .allocation import Blocker, BlockerCode, WorkSlice, allocate
from .reestimate import reestimate_item, smooth_reestimate
from .pipeline import (
    ProjectDelta,
    ProjectRisk,
    ProjectStatusView,
    RecommendRequest,
    RecommendResponse,
    ReplanResponse,
    StatusResponse,
    StatusSummary,
    recommend,
    replan,
    status,
)

__all__ = [
    # Models
    "Candidate",
    "DurationMode",
    "ItemStatus",
    "Mode",
    "PlanSnapshot",
    "Project",
    "ProjectStatus",
    "RiskLevel",
    "ScoringWeights",
    "Session",
    "UserProfile",
    # Errors
    "EngineError",
    "ErrorCode",
    "NoActiveProjects",
    "NoEligibleWork",
    "ValidationError",
    # Components
    "RiskInput",
    "RiskResult",
    "classify_risk",
    "ProjectAggregate",
    "aggregate_project",
    "Reason",
    "ReasonCode",
    "ScoredCandidate",
    "score_candidate",
    "canonical_sort",
    "Blocker",
    "BlockerCode",
    "WorkSlice",
    "allocate",
    "reestimate_item",
    "smooth_reestimate",
    # Pipeline
    "ProjectDelta",
    "ProjectRisk",
    "ProjectStatusView",
    "RecommendRequest",
    "RecommendResponse",
    "ReplanResponse",
    "StatusResponse",
    "StatusSummary",
    "recommend",
    "replan",
    "status",
]
