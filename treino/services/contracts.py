from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple

from treino.models.contract import MuscleGroupContract
from treino.models.exercise import ExerciseTemplate, MovementPattern, MuscleGroup
from .classification import to_contract_tier, to_muscle_group

JointSeverity = Literal["HARD", "SOFT"]

LOWER_BODY_CONTRACT = MuscleGroupContract(
    name="lower_body",
    min_structural={"sedentary": 1, "moderate": 2, "athlete": 2, "advanced": 3},
    required_patterns=["knee_dominant", "hip_dominant"],
    allow_unilateral_as_structural=True,
)

CHEST_CONTRACT = MuscleGroupContract(
    name="chest",
    min_structural={"sedentary": 1, "moderate": 1, "athlete": 1, "advanced": 2},
    required_patterns=["horizontal_push"],
    allowed_patterns=["horizontal_push", "vertical_push"],
)

BACK_CONTRACT = MuscleGroupContract(
    name="back",
    min_structural={"sedentary": 1, "moderate": 1, "athlete": 1, "advanced": 2},
    required_patterns=["horizontal_pull", "vertical_pull"],
)

SHOULDERS_CONTRACT = MuscleGroupContract(
    name="shoulders",
    min_structural={"sedentary": 0, "moderate": 0, "athlete": 1, "advanced": 1},
    required_patterns=["vertical_push"],
)

MUSCLE_GROUP_CONTRACTS: Dict[MuscleGroup, MuscleGroupContract] = {
    "quadriceps": LOWER_BODY_CONTRACT,
    "hamstrings": LOWER_BODY_CONTRACT,
    "glutes": LOWER_BODY_CONTRACT,
    "chest": CHEST_CONTRACT,
    "back": BACK_CONTRACT,
    "shoulders": SHOULDERS_CONTRACT,
}


def get_contract_for_muscle_group(muscle: str | None) -> Optional[MuscleGroupContract]:
    group = to_muscle_group(muscle)
    if group is None:
        return None
    return MUSCLE_GROUP_CONTRACTS.get(group)


def contract_muscle_groups(contract: MuscleGroupContract) -> List[MuscleGroup]:
    return [group for group, c in MUSCLE_GROUP_CONTRACTS.items() if c.name == contract.name]


def get_min_structural(contract: MuscleGroupContract, activity_level: str | None) -> int:
    return contract.min_structural[to_contract_tier(activity_level)]


def is_pattern_required(contract: MuscleGroupContract, pattern: MovementPattern) -> bool:
    return pattern in contract.required_patterns


def is_pattern_allowed(contract: MuscleGroupContract, pattern: MovementPattern) -> bool:
    if contract.allowed_patterns is None:
        return True
    return pattern in contract.allowed_patterns


def satisfied_patterns(contract: MuscleGroupContract, pattern: MovementPattern | None) -> Tuple[MovementPattern, ...]:
    """Required patterns an exercise with `pattern` counts towards."""
    if pattern is None:
        return ()
    if pattern == "unilateral" and contract.allow_unilateral_as_structural:
        return ("knee_dominant",) if is_pattern_required(contract, "knee_dominant") else ()
    return (pattern,) if is_pattern_required(contract, pattern) else ()


# Shoulder: pressing overhead is never allowed, raises near 90 degrees are tolerated.
# Knee: squat-like and loaded deep flexion or impact are never allowed.
_JOINT_RULES: Dict[str, Dict[str, JointSeverity]] = {
    "shoulder": {"vertical_push": "HARD", "overhead": "SOFT"},
    "knee": {"knee_dominant": "HARD", "unilateral": "HARD", "deep_flexion": "HARD", "impact": "HARD"},
}


def joint_restriction_severity(
    template: ExerciseTemplate,
    shoulder_limited: bool = False,
    knee_limited: bool = False,
) -> Tuple[Optional[JointSeverity], Optional[str]]:
    """Most severe restriction hit by `template` and the joint it concerns."""
    found: Tuple[Optional[JointSeverity], Optional[str]] = (None, None)
    for joint, limited in (("shoulder", shoulder_limited), ("knee", knee_limited)):
        if not limited:
            continue
        rules = _JOINT_RULES[joint]
        keys = [template.pattern or "", *template.tags]
        for key in keys:
            severity = rules.get(key)
            if severity == "HARD":
                return "HARD", joint
            if severity == "SOFT" and found[0] is None:
                found = ("SOFT", joint)
    return found
