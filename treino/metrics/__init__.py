from .store import (
    MetricBuffer,
    MetricSink,
    MetricsService,
    RejectionMetricsStore,
    CorrectionMetricsStore,
    QualityMetricsStore,
)
from .quality import PlanQualityAccumulator
from .insights import generate_insights
from .summary import build_summary, period_windows

__all__ = [
    "MetricBuffer",
    "MetricSink",
    "MetricsService",
    "RejectionMetricsStore",
    "CorrectionMetricsStore",
    "QualityMetricsStore",
    "PlanQualityAccumulator",
    "generate_insights",
    "build_summary",
    "period_windows",
]
