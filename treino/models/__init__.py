from .exercise import ExerciseTemplate, Equipment, ExerciseRole, MuscleGroup, MovementPattern
from .plan import Exercise, TrainingDay, TrainingPlan
from .profile import TrainingProfile, Division, TrainingLocation
from .contract import MuscleGroupContract, ContractTier
from .metrics import (
    RejectionReason,
    CorrectionReason,
    RuleSeverity,
    RejectionMetric,
    CorrectionMetric,
    PlanQualityMetric,
    MetricStatistics,
    QualityStatistics,
)
from .insights import (
    Insight,
    ReasonCount,
    LevelBreakdown,
    DimensionBreakdown,
    PeriodStats,
    PreviousPeriodStats,
    Trends,
    MetricsSummary,
)
from .pipeline import (
    PlanRequest,
    PlanResponse,
    ValidationRequest,
    ValidationReport,
    RepairRequest,
    RepairResponse,
)

__all__ = [
    "ExerciseTemplate",
    "Equipment",
    "ExerciseRole",
    "MuscleGroup",
    "MovementPattern",
    "Exercise",
    "TrainingDay",
    "TrainingPlan",
    "TrainingProfile",
    "Division",
    "TrainingLocation",
    "MuscleGroupContract",
    "ContractTier",
    "RejectionReason",
    "CorrectionReason",
    "RuleSeverity",
    "RejectionMetric",
    "CorrectionMetric",
    "PlanQualityMetric",
    "MetricStatistics",
    "QualityStatistics",
    "Insight",
    "ReasonCount",
    "LevelBreakdown",
    "DimensionBreakdown",
    "PeriodStats",
    "PreviousPeriodStats",
    "Trends",
    "MetricsSummary",
    "PlanRequest",
    "PlanResponse",
    "ValidationRequest",
    "ValidationReport",
    "RepairRequest",
    "RepairResponse",
]
