from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field


class Exercise(BaseModel):
    name: str
    primary_muscle: Optional[str] = None
    secondary_muscles: List[str] = Field(default_factory=list)
    sets: int = Field(..., ge=1)
    reps: str
    rest: str
    notes: str = ""


class TrainingDay(BaseModel):
    day: str
    type: str
    exercises: List[Exercise] = Field(default_factory=list)


class TrainingPlan(BaseModel):
    overview: str = ""
    progression: str = ""
    weekly_schedule: List[TrainingDay] = Field(default_factory=list)
