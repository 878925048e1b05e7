from __future__ import annotations

import logging
from typing import Optional

from treino.metrics.quality import PlanQualityAccumulator
from treino.metrics.store import MetricsService
from treino.models import (
    PlanRequest,
    PlanResponse,
    RepairRequest,
    RepairResponse,
    TrainingPlan,
    TrainingProfile,
    ValidationReport,
    ValidationRequest,
)
from treino.services.auditor import audit
from treino.services.classification import to_activity_level
from treino.services.corrector import correct_same_type_days_exercises
from treino.services.generator import generate_plan, technical_division
from treino.services.levels import resolve_operational_level
from treino.services.validator import find_divergent_same_type_days, find_violation

logger = logging.getLogger(__name__)


def plan_generate_node(req: PlanRequest, quality: Optional[PlanQualityAccumulator] = None) -> PlanResponse:
    profile = req.profile
    rules, downgraded = resolve_operational_level(profile.activity_level, profile.available_time_minutes)
    plan = generate_plan(profile, quality=quality)
    return PlanResponse(
        plan=plan,
        operational_level=rules.key,
        downgraded=downgraded,
        division=technical_division(profile.training_days),
    )


def validate_node(req: ValidationRequest, metrics: Optional[MetricsService] = None) -> ValidationReport:
    profile = req.profile
    violation = find_violation(req.plan, profile.training_days, profile.activity_level, profile.available_time_minutes)
    if violation is None:
        return ValidationReport(ok=True)
    logger.warning("Plan rejected: %s %s", violation.reason, violation.context)
    if metrics is not None:
        metrics.rejections.record(violation.reason, violation.context)
    return ValidationReport(ok=False, reason=violation.reason, context=violation.context)


def repair_node(req: RepairRequest, metrics: Optional[MetricsService] = None) -> RepairResponse:
    if not find_divergent_same_type_days(req.plan):
        return RepairResponse(plan=req.plan, changed=False)
    plan = correct_same_type_days_exercises(req.plan, metrics=metrics, activity_level=req.profile.activity_level)
    return RepairResponse(plan=plan, changed=True)


def audit_node(profile: TrainingProfile, plan: TrainingPlan, metrics: Optional[MetricsService] = None) -> None:
    audit(plan, profile.activity_level, metrics=metrics)


def quality_node(
    profile: TrainingProfile,
    quality: PlanQualityAccumulator,
    metrics: Optional[MetricsService] = None,
    plan_id: Optional[str] = None,
) -> int:
    metric = quality.generate_metric(
        context={
            "activity_level": to_activity_level(profile.activity_level),
            "training_days": profile.training_days,
            "division": technical_division(profile.training_days),
            "training_location": profile.training_location,
        },
        plan_id=plan_id,
    )
    if metrics is not None:
        metrics.quality.record(metric)
    return metric.quality_score
