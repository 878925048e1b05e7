from __future__ import annotations

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from .exercise import MovementPattern


ContractTier = Literal["sedentary", "moderate", "athlete", "advanced"]


class MuscleGroupContract(BaseModel):
    name: str
    min_structural: Dict[ContractTier, int]
    required_patterns: List[MovementPattern] = Field(default_factory=list)
    allowed_patterns: Optional[List[MovementPattern]] = None
    allow_unilateral_as_structural: bool = False

    model_config = {"frozen": True}
