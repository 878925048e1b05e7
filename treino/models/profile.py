from __future__ import annotations

from typing import Literal
from pydantic import BaseModel, Field


Division = Literal["PPL", "Upper/Lower", "Full Body"]

TrainingLocation = Literal["academia", "casa", "ambos", "ar_livre"]


class TrainingProfile(BaseModel):
    training_days: int = Field(..., ge=1, le=7)
    activity_level: str = "Moderado"
    division: Division = "PPL"
    available_time_minutes: int = Field(..., gt=0, le=240)
    imc: float = Field(..., gt=0)
    objective: str = ""
    joint_limitations: bool = False
    knee_limitations: bool = False
    training_location: TrainingLocation = "academia"
