from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


RejectionReason = Literal[
    "weeklySchedule_invalido",
    "numero_dias_incompativel",
    "divisao_incompativel_frequencia",
    "dias_mesmo_tipo_exercicios_diferentes",
    "dia_sem_exercicios",
    "excesso_exercicios_nivel",
    "exercicios_insuficientes_dia",
    "exercicio_sem_primaryMuscle",
    "exercicio_duplicado",
    "grupo_muscular_proibido",
    "lower_sem_grupos_obrigatorios",
    "full_body_sem_grupos_obrigatorios",
    "grupo_obrigatorio_ausente",
    "exercicio_musculo_incompativel",
    "ordem_exercicios_invalida",
    "excesso_exercicios_musculo_primario",
    "distribuicao_inteligente_invalida",
    "secondaryMuscles_excede_limite",
    "tempo_treino_excede_disponivel",
    "contract_violation",
]

CorrectionReason = Literal[
    "same_type_days_exercises",
    "rebaixamento_por_tempo_insuficiente",
    "divisao_ajustada_tecnica",
    "ajuste_volume_minimo_obrigatorio",
]

RuleSeverity = Literal["HARD", "SOFT", "FLEXIBLE"]

SoftWarningType = Literal["joint_shoulder", "joint_knee", "volume_distribution", "alternative_used", "other"]

FlexibleWarningType = Literal["series_adjustment", "volume_adjustment", "other"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


class RejectionMetric(BaseModel):
    reason: RejectionReason
    timestamp: datetime = Field(default_factory=utcnow)
    context: Dict[str, Any] = Field(default_factory=dict)


class CorrectionMetric(BaseModel):
    reason: CorrectionReason
    timestamp: datetime = Field(default_factory=utcnow)
    payload: Dict[str, Any] = Field(default_factory=dict)
    context: Dict[str, Any] = Field(default_factory=dict)


class PlanQualityMetric(BaseModel):
    plan_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)
    soft_warnings_count: int = Field(0, ge=0)
    flexible_warnings_count: int = Field(0, ge=0)
    soft_warnings_by_type: Dict[str, int] = Field(default_factory=dict)
    flexible_warnings_by_type: Dict[str, int] = Field(default_factory=dict)
    exercises_with_soft_warnings: List[str] = Field(default_factory=list)
    alternatives_used_count: int = Field(0, ge=0)
    quality_score: int = Field(..., ge=60, le=100)
    context: Dict[str, Any] = Field(default_factory=dict)


class MetricStatistics(BaseModel):
    total: int
    by_reason: Dict[str, int] = Field(default_factory=dict)
    by_activity_level: Dict[str, int] = Field(default_factory=dict)
    by_day_type: Dict[str, int] = Field(default_factory=dict)
    by_muscle: Dict[str, int] = Field(default_factory=dict)
    recent: List[Any] = Field(default_factory=list)


class QualityStatistics(BaseModel):
    total: int
    average_quality_score: float = 0.0
    by_activity_level: Dict[str, float] = Field(default_factory=dict)
    soft_warnings_by_type: Dict[str, int] = Field(default_factory=dict)
    flexible_warnings_by_type: Dict[str, int] = Field(default_factory=dict)
    alternatives_used: int = 0
    recent: List[PlanQualityMetric] = Field(default_factory=list)
