from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from treino.config import get_settings
from treino.models.insights import (
    DimensionBreakdown,
    LevelBreakdown,
    MetricsSummary,
    Period,
    PeriodStats,
    PreviousPeriodStats,
    ReasonCount,
    Trends,
)
from treino.models.metrics import CorrectionMetric, PlanQualityMetric, RejectionMetric, as_utc, utcnow
from .insights import generate_insights
from .store import UNKNOWN_KEY, MetricsService

STABLE_BAND = 2.0


def period_windows(period: Period, now: datetime) -> Tuple[datetime, datetime, datetime, datetime]:
    """(current start, current end, previous start, previous end) in the timezone of `now`."""
    now = as_utc(now)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "daily":
        start = today
        previous_start = today - timedelta(days=1)
    elif period == "weekly":
        # weeks start on Sunday
        start = today - timedelta(days=(today.weekday() + 1) % 7)
        previous_start = start - timedelta(days=7)
    elif period == "monthly":
        start = today.replace(day=1)
        previous_start = (start - timedelta(days=1)).replace(day=1)
    else:
        raise ValueError(f"Unknown period: {period!r}")
    return start, now, previous_start, start


def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole > 0 else 0.0


def _average(scores: Sequence[int]) -> float:
    return round(sum(scores) / len(scores), 1) if scores else 0.0


def _top_reasons(reasons: Sequence[str], limit: int) -> List[ReasonCount]:
    total = len(reasons)
    counts = Counter(reasons)
    # ties keep alphabetical order so summaries are stable
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]
    return [ReasonCount(reason=r, count=c, percentage=round(c / total * 100, 1)) for r, c in ordered]


def _key(context: Dict[str, Any], key: str) -> str:
    value = context.get(key)
    return str(value) if value not in (None, "") else UNKNOWN_KEY


def calculate_current_stats(
    rejections: Sequence[RejectionMetric],
    corrections: Sequence[CorrectionMetric],
    quality: Sequence[PlanQualityMetric],
) -> PeriodStats:
    limit = get_settings().TOP_REASONS_LIMIT
    total_rejections = len(rejections)
    total_plans = total_rejections + len(quality)

    levels: Dict[str, LevelBreakdown] = {}
    level_scores: Dict[str, List[int]] = {}
    day_types: Dict[str, DimensionBreakdown] = {}
    muscles: Dict[str, DimensionBreakdown] = {}

    for r in rejections:
        levels.setdefault(_key(r.context, "activity_level"), LevelBreakdown()).rejections += 1
        day_types.setdefault(_key(r.context, "day_type"), DimensionBreakdown()).rejections += 1
        if r.context.get("muscle"):
            muscles.setdefault(str(r.context["muscle"]), DimensionBreakdown()).rejections += 1
    for c in corrections:
        levels.setdefault(_key(c.context, "activity_level"), LevelBreakdown()).corrections += 1
        if c.payload.get("day_type"):
            day_types.setdefault(str(c.payload["day_type"]), DimensionBreakdown()).corrections += 1
        if c.payload.get("muscle"):
            muscles.setdefault(str(c.payload["muscle"]), DimensionBreakdown()).corrections += 1
    for q in quality:
        level = _key(q.context, "activity_level")
        levels.setdefault(level, LevelBreakdown())
        level_scores.setdefault(level, []).append(q.quality_score)
    for level, scores in level_scores.items():
        levels[level].quality_score = _average(scores)

    return PeriodStats(
        total_rejections=total_rejections,
        total_corrections=len(corrections),
        total_quality_metrics=len(quality),
        average_quality_score=_average([q.quality_score for q in quality]),
        top_rejection_reasons=_top_reasons([r.reason for r in rejections], limit),
        top_correction_reasons=_top_reasons([c.reason for c in corrections], limit),
        rejection_rate=_rate(total_rejections, total_plans),
        correction_success_rate=_rate(len(corrections), total_rejections),
        by_activity_level=levels,
        by_day_type=day_types,
        by_muscle=muscles,
    )


def calculate_previous_stats(
    rejections: Sequence[RejectionMetric],
    corrections: Sequence[CorrectionMetric],
    quality: Sequence[PlanQualityMetric],
) -> Optional[PreviousPeriodStats]:
    if not (rejections or corrections or quality):
        return None
    return PreviousPeriodStats(
        total_rejections=len(rejections),
        total_corrections=len(corrections),
        average_quality_score=_average([q.quality_score for q in quality]),
        rejection_rate=_rate(len(rejections), len(rejections) + len(quality)),
        correction_success_rate=_rate(len(corrections), len(rejections)),
    )


def _direction(change: float, up: str, down: str) -> str:
    if abs(change) < STABLE_BAND:
        return "stable"
    return up if change > 0 else down


def calculate_trends(current: PeriodStats, previous: Optional[PreviousPeriodStats]) -> Trends:
    if previous is None:
        return Trends()
    return Trends(
        rejection_rate=_direction(current.rejection_rate - previous.rejection_rate, "increasing", "decreasing"),  # type: ignore[arg-type]
        quality_score=_direction(current.average_quality_score - previous.average_quality_score, "improving", "degrading"),  # type: ignore[arg-type]
        correction_rate=_direction(current.correction_success_rate - previous.correction_success_rate, "increasing", "decreasing"),  # type: ignore[arg-type]
    )


def build_summary(service: MetricsService, period: Period = "weekly", now: datetime | None = None) -> MetricsSummary:
    """Compare the current window with the previous one and attach insights."""
    now = now or utcnow()
    start, end, previous_start, previous_end = period_windows(period, now)

    current = calculate_current_stats(
        service.rejections.get_metrics_by_period(start, end),
        service.corrections.get_metrics_by_period(start, end),
        service.quality.get_metrics_by_period(start, end),
    )
    # previous window is half-open so a record at the boundary counts once
    previous = calculate_previous_stats(
        [m for m in service.rejections.get_metrics_by_period(previous_start, previous_end) if m.timestamp < previous_end],
        [m for m in service.corrections.get_metrics_by_period(previous_start, previous_end) if m.timestamp < previous_end],
        [m for m in service.quality.get_metrics_by_period(previous_start, previous_end) if m.timestamp < previous_end],
    )
    summary = MetricsSummary(
        period=period,
        start=start,
        end=end,
        current=current,
        previous=previous,
        trends=calculate_trends(current, previous),
    )
    summary.insights = generate_insights(summary)
    return summary
