from __future__ import annotations

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from .metrics import RejectionReason
from .plan import TrainingPlan
from .profile import TrainingProfile


class PlanRequest(BaseModel):
    profile: TrainingProfile


class PlanResponse(BaseModel):
    plan: TrainingPlan
    operational_level: str
    downgraded: bool = False
    division: str


class ValidationRequest(BaseModel):
    profile: TrainingProfile
    plan: Optional[TrainingPlan] = None


class ValidationReport(BaseModel):
    ok: bool
    reason: Optional[RejectionReason] = None
    context: Dict[str, Any] = Field(default_factory=dict)


class RepairRequest(BaseModel):
    profile: TrainingProfile
    plan: TrainingPlan
    reason: Optional[RejectionReason] = None


class RepairResponse(BaseModel):
    plan: TrainingPlan
    changed: bool = False
