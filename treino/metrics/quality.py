from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from treino.models.metrics import FlexibleWarningType, PlanQualityMetric, RuleSeverity, SoftWarningType
from treino.services.classification import normalize_text

logger = logging.getLogger(__name__)

SOFT_PENALTY = 5
FLEXIBLE_PENALTY = 2
MIN_QUALITY_SCORE = 60
MAX_QUALITY_SCORE = 100


def _soft_type(reason: str) -> SoftWarningType:
    text = normalize_text(reason)
    if "ombro" in text or "shoulder" in text:
        return "joint_shoulder"
    if "joelho" in text or "knee" in text:
        return "joint_knee"
    if "volume" in text or "distribuicao" in text or "distribution" in text:
        return "volume_distribution"
    if "alternativ" in text:
        return "alternative_used"
    return "other"


def _flexible_type(reason: str) -> FlexibleWarningType:
    text = normalize_text(reason)
    if "serie" in text or "series" in text or "sets" in text:
        return "series_adjustment"
    if "volume" in text:
        return "volume_adjustment"
    return "other"


class PlanQualityAccumulator:
    """Collects the compromises made while generating one plan.

    HARD rules are never relaxed, so only SOFT and FLEXIBLE registrations
    count against the score.
    """

    def __init__(self) -> None:
        self.clear()

    def clear(self) -> None:
        self.soft_warnings: Counter = Counter()
        self.flexible_warnings: Counter = Counter()
        self.exercises_with_soft_warnings: List[str] = []
        self.alternatives_used = 0

    @property
    def soft_count(self) -> int:
        return sum(self.soft_warnings.values())

    @property
    def flexible_count(self) -> int:
        return sum(self.flexible_warnings.values())

    def register(self, allowed: bool, reason_type: RuleSeverity, reason: str, exercise: Optional[str] = None) -> None:
        if not allowed or reason_type == "HARD":
            return
        if reason_type == "SOFT":
            self.record_soft(_soft_type(reason), exercise)
        else:
            self.record_flexible(_flexible_type(reason))

    def record_soft(self, warning_type: SoftWarningType, exercise: Optional[str] = None) -> None:
        self.soft_warnings[warning_type] += 1
        if exercise and exercise not in self.exercises_with_soft_warnings:
            self.exercises_with_soft_warnings.append(exercise)
        logger.debug("Soft warning %s (%s)", warning_type, exercise)

    def record_flexible(self, warning_type: FlexibleWarningType) -> None:
        self.flexible_warnings[warning_type] += 1
        logger.debug("Flexible warning %s", warning_type)

    def record_alternative_used(self) -> None:
        self.alternatives_used += 1

    def calculate_quality_score(self) -> int:
        score = MAX_QUALITY_SCORE - SOFT_PENALTY * self.soft_count - FLEXIBLE_PENALTY * self.flexible_count
        return max(MIN_QUALITY_SCORE, min(MAX_QUALITY_SCORE, score))

    def generate_metric(self, context: Optional[Dict[str, Any]] = None, plan_id: Optional[str] = None) -> PlanQualityMetric:
        return PlanQualityMetric(
            plan_id=plan_id,
            soft_warnings_count=self.soft_count,
            flexible_warnings_count=self.flexible_count,
            soft_warnings_by_type=dict(self.soft_warnings),
            flexible_warnings_by_type=dict(self.flexible_warnings),
            exercises_with_soft_warnings=list(self.exercises_with_soft_warnings),
            alternatives_used_count=self.alternatives_used,
            quality_score=self.calculate_quality_score(),
            context=dict(context or {}),
        )
