from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from treino.config import configure_logging, get_settings
from treino.metrics.quality import PlanQualityAccumulator
from treino.metrics.store import MetricsService
from treino.models import (
    PlanRequest,
    PlanResponse,
    RepairRequest,
    TrainingPlan,
    TrainingProfile,
    ValidationReport,
    ValidationRequest,
)
from treino.models.metrics import CorrectionReason
from treino.services.classification import to_activity_level
from .nodes import audit_node, plan_generate_node, quality_node, repair_node, validate_node


@dataclass
class GraphState:
    plan_req: PlanRequest | None = None
    plan_res: PlanResponse | None = None
    validation_req: ValidationRequest | None = None
    validation: ValidationReport | None = None
    repair_req: RepairRequest | None = None
    plan: TrainingPlan | None = None
    usable: bool = False
    quality: int | None = None
    operational_level: str | None = None
    corrections_applied: List[str] = field(default_factory=list)


class PlanGraph:
    def __init__(self, metrics: Optional[MetricsService] = None) -> None:
        configure_logging()
        self.settings = get_settings()
        self.metrics = metrics

    def _correction(self, state: GraphState, reason: CorrectionReason, payload: Dict[str, Any], profile: TrainingProfile) -> None:
        state.corrections_applied.append(reason)
        if self.metrics is not None:
            self.metrics.corrections.record(
                reason,
                payload=payload,
                context={"activity_level": to_activity_level(profile.activity_level), "training_days": profile.training_days},
            )

    def invoke(self, profile: TrainingProfile, plan_id: str | None = None) -> Dict[str, Any]:
        state = GraphState()
        accumulator = PlanQualityAccumulator()
        # plan_generate
        state.plan_req = PlanRequest(profile=profile)
        state.plan_res = plan_generate_node(state.plan_req, quality=accumulator)
        state.plan = state.plan_res.plan
        state.operational_level = state.plan_res.operational_level
        if state.plan_res.downgraded:
            self._correction(state, "rebaixamento_por_tempo_insuficiente", {
                "declared_level": to_activity_level(profile.activity_level),
                "operational_level": state.plan_res.operational_level,
                "available_time_minutes": profile.available_time_minutes,
            }, profile)
        if state.plan_res.division != profile.division:
            self._correction(state, "divisao_ajustada_tecnica", {
                "requested_division": profile.division,
                "applied_division": state.plan_res.division,
                "training_days": profile.training_days,
            }, profile)
        if accumulator.flexible_count:
            self._correction(state, "ajuste_volume_minimo_obrigatorio", {
                "flexible_adjustments": dict(accumulator.flexible_warnings),
                "available_time_minutes": profile.available_time_minutes,
            }, profile)
        # validate and repair loop
        iter_left = self.settings.MAX_REPAIR_ITERATIONS
        first_attempt = True
        while True:
            state.validation_req = ValidationRequest(profile=profile, plan=state.plan)
            # a repaired plan that still fails keeps the first rejection
            state.validation = validate_node(state.validation_req, metrics=self.metrics if first_attempt else None)
            first_attempt = False
            if state.validation.ok:
                break
            if iter_left <= 0:
                break
            iter_left -= 1
            state.repair_req = RepairRequest(profile=profile, plan=state.plan, reason=state.validation.reason)
            repaired = repair_node(state.repair_req, metrics=self.metrics)
            if not repaired.changed:
                break
            state.corrections_applied.append("same_type_days_exercises")
            state.plan = repaired.plan
        state.usable = state.validation.ok
        # audit and score only plans that are served
        if state.usable:
            audit_node(profile, state.plan, metrics=self.metrics)
            state.quality = quality_node(profile, accumulator, metrics=self.metrics, plan_id=plan_id)
        return state.__dict__
