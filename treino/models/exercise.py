from __future__ import annotations

from pydantic import BaseModel, Field
from typing import List, Literal, Optional


Equipment = Literal["gym", "home", "both", "outdoor"]

ExerciseRole = Literal["structural", "isolated"]

MuscleGroup = Literal[
    "chest",
    "back",
    "quadriceps",
    "hamstrings",
    "glutes",
    "shoulders",
    "biceps",
    "triceps",
    "calves",
    "traps",
]

MovementPattern = Literal[
    "knee_dominant",
    "hip_dominant",
    "horizontal_push",
    "vertical_push",
    "horizontal_pull",
    "vertical_pull",
    "unilateral",
]

ExerciseTag = Literal["rear_delt", "overhead", "deep_flexion", "impact", "bodyweight"]


class ExerciseTemplate(BaseModel):
    name: str
    primary_muscle: str = Field(..., description="Locale muscle name, e.g. peitoral")
    secondary_muscles: List[str] = Field(default_factory=list)
    equipment: Equipment
    role: ExerciseRole
    pattern: Optional[MovementPattern] = None
    tags: List[ExerciseTag] = Field(default_factory=list)
    sets: int = Field(..., ge=1)
    reps: str
    rest: str
    notes: str = ""

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Supino reto com barra",
                    "primary_muscle": "peitoral",
                    "secondary_muscles": ["triceps", "ombros"],
                    "equipment": "gym",
                    "role": "structural",
                    "pattern": "horizontal_push",
                    "tags": [],
                    "sets": 4,
                    "reps": "6-10",
                    "rest": "90-120s",
                    "notes": "Escápulas retraídas durante todo o movimento",
                }
            ]
        },
    }
