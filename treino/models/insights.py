from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field


InsightType = Literal["problem", "success", "warning", "info"]
InsightSeverity = Literal["high", "medium", "low"]
Trend = Literal["increasing", "decreasing", "stable"]
QualityTrend = Literal["improving", "degrading", "stable"]
Period = Literal["daily", "weekly", "monthly"]


class Insight(BaseModel):
    type: InsightType
    severity: InsightSeverity
    title: str
    description: str
    suggestion: Optional[str] = None
    affected_levels: List[str] = Field(default_factory=list)
    affected_day_types: List[str] = Field(default_factory=list)
    affected_muscles: List[str] = Field(default_factory=list)
    metric: Optional[str] = None
    trend: Optional[Trend] = None
    change_percent: Optional[float] = None


class ReasonCount(BaseModel):
    reason: str
    count: int
    percentage: float


class LevelBreakdown(BaseModel):
    rejections: int = 0
    corrections: int = 0
    quality_score: float = 0.0


class DimensionBreakdown(BaseModel):
    rejections: int = 0
    corrections: int = 0


class PeriodStats(BaseModel):
    total_rejections: int = 0
    total_corrections: int = 0
    total_quality_metrics: int = 0
    average_quality_score: float = 0.0
    top_rejection_reasons: List[ReasonCount] = Field(default_factory=list)
    top_correction_reasons: List[ReasonCount] = Field(default_factory=list)
    rejection_rate: float = 0.0
    correction_success_rate: float = 0.0
    by_activity_level: Dict[str, LevelBreakdown] = Field(default_factory=dict)
    by_day_type: Dict[str, DimensionBreakdown] = Field(default_factory=dict)
    by_muscle: Dict[str, DimensionBreakdown] = Field(default_factory=dict)


class PreviousPeriodStats(BaseModel):
    total_rejections: int = 0
    total_corrections: int = 0
    average_quality_score: float = 0.0
    rejection_rate: float = 0.0
    correction_success_rate: float = 0.0


class Trends(BaseModel):
    rejection_rate: Trend = "stable"
    quality_score: QualityTrend = "stable"
    correction_rate: Trend = "stable"


class MetricsSummary(BaseModel):
    period: Period
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    current: PeriodStats
    previous: Optional[PreviousPeriodStats] = None
    trends: Trends = Field(default_factory=Trends)
    insights: List[Insight] = Field(default_factory=list)
