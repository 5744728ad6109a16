"""
Sprint Capacity Planner

Capacity planning, task assignment, workload balancing and success prediction
for sprint teams.
"""

__version__ = "1.0.0"

from .models import (
    Developer,
    Task,
    TaskType,
    TaskStatus,
    Priority,
    Sprint,
    SprintDraft,
    SprintStatus,
    PlanningOptions,
    SprintOptions
)

from .exceptions import (
    PlannerError,
    ValidationError,
    NotFoundError,
    PersistenceError
)

from .velocity import (
    VelocityEstimator,
    VelocityMetrics,
    TeamVelocityMetrics,
    SprintVelocityRecord
)

from .analyzer import (
    CapacityCalculator,
    CapacityPlan,
    DeveloperCapacity,
    SprintHealth
)

from .recommendations import (
    RecommendationGenerator,
    Recommendation
)

from .assignment import (
    TaskAssignmentEngine,
    AssignmentResult,
    AssignmentDecision,
    ItemOutcome
)

from .balancer import (
    WorkloadBalancer,
    BalanceResult
)

from .predictor import (
    SprintSuccessPredictor,
    SuccessPrediction,
    SuccessFactor,
    RiskLevel,
    predict_sprint_success
)

from .orchestrator import (
    SprintOrchestrator,
    OptimizedSprint,
    SprintAnalytics,
    Retrospective
)

from .config import Config

__all__ = [
    # Version
    "__version__",

    # Models
    "Developer",
    "Task",
    "TaskType",
    "TaskStatus",
    "Priority",
    "Sprint",
    "SprintDraft",
    "SprintStatus",
    "PlanningOptions",
    "SprintOptions",

    # Errors
    "PlannerError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",

    # Velocity
    "VelocityEstimator",
    "VelocityMetrics",
    "TeamVelocityMetrics",
    "SprintVelocityRecord",

    # Capacity
    "CapacityCalculator",
    "CapacityPlan",
    "DeveloperCapacity",
    "SprintHealth",
    "RecommendationGenerator",
    "Recommendation",

    # Assignment and balancing
    "TaskAssignmentEngine",
    "AssignmentResult",
    "AssignmentDecision",
    "ItemOutcome",
    "WorkloadBalancer",
    "BalanceResult",

    # Predictor
    "SprintSuccessPredictor",
    "SuccessPrediction",
    "SuccessFactor",
    "RiskLevel",
    "predict_sprint_success",

    # Orchestration
    "SprintOrchestrator",
    "OptimizedSprint",
    "SprintAnalytics",
    "Retrospective",

    # Config
    "Config",
]
