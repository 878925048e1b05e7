"""Muscle-group rules per day type, shared by the generator and the validator."""
from __future__ import annotations

import math
from typing import Dict, FrozenSet, List, Tuple

from treino.models.exercise import MuscleGroup
from .classification import DayType, LEG_GROUPS

Groups = FrozenSet[MuscleGroup]

LOWER_BODY_GROUPS: Groups = frozenset({"quadriceps", "hamstrings", "glutes"})

FORBIDDEN_GROUPS: Dict[DayType, Groups] = {
    "lower": frozenset({"chest", "back", "biceps", "triceps"}),
    "push": frozenset({"back", "biceps"}),
    "pull": frozenset({"chest", "triceps"}),
}

# Full body needs every major region; legs may be any leg group.
FULL_BODY_REGIONS: List[Groups] = [
    frozenset({"chest"}),
    frozenset({"back"}),
    LEG_GROUPS,
    frozenset({"shoulders"}),
]

REQUIRED_GROUPS: Dict[DayType, List[Groups]] = {
    "push": [frozenset({"chest"}), frozenset({"triceps"})],
    "pull": [frozenset({"back"}), frozenset({"biceps"})],
    "lower": [frozenset({"quadriceps"}), frozenset({"hamstrings"})],
    "upper": [frozenset({"chest"}), frozenset({"back"}), frozenset({"shoulders"})],
    "full_body": [frozenset({"chest"}), frozenset({"back"})],
}

# Groups of a day must appear in this order; groups outside the table are ignored.
EXPECTED_ORDER: Dict[DayType, List[Groups]] = {
    "push": [frozenset({"chest"}), frozenset({"shoulders"}), frozenset({"triceps"})],
    "pull": [frozenset({"back"}), frozenset({"biceps"})],
    "lower": [frozenset({"quadriceps"}), frozenset({"hamstrings"}), frozenset({"glutes", "calves"})],
    "upper": [frozenset({"chest", "back"}), frozenset({"shoulders"}), frozenset({"biceps", "triceps"})],
    "full_body": [
        frozenset({"chest", "back"}),
        LOWER_BODY_GROUPS,
        frozenset({"shoulders"}),
        frozenset({"biceps", "triceps"}),
    ],
}

# (group, max share of the day's exercises)
DISTRIBUTION_LIMITS: Dict[DayType, List[Tuple[MuscleGroup, float]]] = {
    "push": [("triceps", 0.3)],
    "pull": [("biceps", 0.3)],
    "lower": [("quadriceps", 0.5), ("hamstrings", 0.5), ("glutes", 0.5), ("calves", 0.5)],
}


def required_regions(day_type: DayType | None) -> List[Groups]:
    """Every group set that must keep at least one exercise on a day of this type."""
    if day_type is None:
        return []
    regions = list(REQUIRED_GROUPS.get(day_type, []))
    if day_type == "full_body":
        regions = FULL_BODY_REGIONS + regions
    elif day_type == "lower":
        regions.append(LOWER_BODY_GROUPS)
    return regions


def distribution_cap(share: float, total: int) -> int:
    return math.ceil(share * total)
