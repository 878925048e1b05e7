"""Accept/reject gate for finished training plans.

`find_violation` is a pure check that returns the first broken rule.
`is_usable` wraps it and records exactly one rejection metric per failing
plan. Nothing here reorders or mutates the plan.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from treino.config import get_settings
from treino.models.exercise import MuscleGroup
from treino.models.metrics import RejectionReason
from treino.models.plan import Exercise, TrainingDay, TrainingPlan
from .classification import (
    ARM_GROUPS,
    LEG_GROUPS,
    DayType,
    normalize_text,
    to_activity_level,
    to_contract_tier,
    to_day_type,
    to_muscle_group,
)
from .day_rules import (
    DISTRIBUTION_LIMITS,
    EXPECTED_ORDER,
    FORBIDDEN_GROUPS,
    FULL_BODY_REGIONS,
    LOWER_BODY_GROUPS,
    REQUIRED_GROUPS,
    distribution_cap,
)
from .levels import get_level_rules
from .patterns import is_structural
from .timing import day_minutes

if TYPE_CHECKING:
    from treino.metrics.store import MetricsService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    reason: RejectionReason
    context: Dict[str, Any] = field(default_factory=dict)


# Name fragments that can never belong to the listed groups.
_INCOMPATIBLE_NAMES: List[Tuple[Tuple[str, ...], frozenset]] = [
    (("panturrilha", "remada"), frozenset({"shoulders"})),
    (
        ("agachamento", "leg press", "stiff", "cadeira extensora", "mesa flexora", "leg curl", "hip thrust", "afundo", "bulgaro", "panturrilha"),
        ARM_GROUPS | {"chest", "back"},
    ),
    (("supino", "desenvolvimento", "elevacao lateral", "crucifixo"), LEG_GROUPS),
]

_STRUCTURAL_SECONDARY_LIMIT = 3
_ISOLATED_SECONDARY_LIMIT = 2


def _day_key(exercises: Sequence[Exercise]) -> Tuple[str, ...]:
    return tuple(normalize_text(e.name) for e in exercises)


def find_divergent_same_type_days(plan: TrainingPlan) -> List[Tuple[DayType, int, int]]:
    """(day type, index of first day, index of diverging day) for every mismatch."""
    first_seen: Dict[DayType, int] = {}
    divergent: List[Tuple[DayType, int, int]] = []
    for idx, day in enumerate(plan.weekly_schedule):
        day_type = to_day_type(day.type)
        if day_type is None:
            continue
        if day_type not in first_seen:
            first_seen[day_type] = idx
            continue
        reference = plan.weekly_schedule[first_seen[day_type]]
        if _day_key(reference.exercises) != _day_key(day.exercises):
            divergent.append((day_type, first_seen[day_type], idx))
    return divergent


def _division_matches_frequency(day_types: List[Optional[DayType]], activity_level: str | None) -> bool:
    present = set(day_types)
    count = len(day_types)
    if count == 1:
        return True
    if count <= 3:
        return present == {"full_body"}
    if count == 4:
        return present == {"upper", "lower"}
    ppl = {"push", "pull", "lower"}
    if count == 5:
        allowed = set(ppl)
        if to_contract_tier(activity_level) in ("athlete", "advanced"):
            allowed.add("upper")
        return ppl <= present and present <= allowed
    return present == ppl


def _group_of(exercise: Exercise) -> Optional[MuscleGroup]:
    return to_muscle_group(exercise.primary_muscle)


def _covers(groups: Sequence[Optional[MuscleGroup]], region: frozenset) -> bool:
    return any(g in region for g in groups)


def _order_is_valid(groups: Sequence[Optional[MuscleGroup]], day_type: DayType) -> bool:
    last = -1
    for region in EXPECTED_ORDER.get(day_type, []):
        first = next((i for i, g in enumerate(groups) if g in region), None)
        if first is None:
            continue
        if first < last:
            return False
        last = first
    return True


def _incompatible_muscle(exercise: Exercise, group: Optional[MuscleGroup]) -> bool:
    if group is None:
        return False
    name = normalize_text(exercise.name)
    for needles, forbidden in _INCOMPATIBLE_NAMES:
        if group in forbidden and any(n in name for n in needles):
            return True
    return False


def _check_day(
    day: TrainingDay,
    activity_level: str | None,
    available_time_minutes: int | None,
    base: Dict[str, Any],
) -> Optional[Violation]:
    settings = get_settings()
    rules = get_level_rules(activity_level)
    day_type = to_day_type(day.type)
    ctx = {**base, "day": day.day, "day_type": day_type or day.type}
    exercises = day.exercises
    total = len(exercises)

    if total == 0:
        return Violation("dia_sem_exercicios", ctx)
    if total > rules.max_exercises_per_day:
        return Violation("excesso_exercicios_nivel", {**ctx, "count": total, "limit": rules.max_exercises_per_day})
    if total < settings.MIN_EXERCISES_PER_DAY:
        return Violation("exercicios_insuficientes_dia", {**ctx, "count": total, "minimum": settings.MIN_EXERCISES_PER_DAY})

    for ex in exercises:
        if not (ex.primary_muscle or "").strip():
            return Violation("exercicio_sem_primaryMuscle", {**ctx, "exercise": ex.name})

    names = Counter(normalize_text(ex.name) for ex in exercises)
    duplicated = [ex.name for ex in exercises if names[normalize_text(ex.name)] > 1]
    if duplicated:
        return Violation("exercicio_duplicado", {**ctx, "exercise": duplicated[0]})

    groups = [_group_of(ex) for ex in exercises]

    forbidden = FORBIDDEN_GROUPS.get(day_type) if day_type else None
    if forbidden:
        for ex, group in zip(exercises, groups):
            if group in forbidden:
                return Violation("grupo_muscular_proibido", {**ctx, "muscle": group, "exercise": ex.name})

    if day_type == "lower" and not _covers(groups, LOWER_BODY_GROUPS):
        return Violation("lower_sem_grupos_obrigatorios", ctx)

    if day_type == "full_body":
        missing = [sorted(region)[0] if len(region) == 1 else "pernas" for region in FULL_BODY_REGIONS if not _covers(groups, region)]
        if missing:
            return Violation("full_body_sem_grupos_obrigatorios", {**ctx, "muscle": missing[0], "missing": missing})

    for region in REQUIRED_GROUPS.get(day_type, []):
        if not _covers(groups, region):
            return Violation("grupo_obrigatorio_ausente", {**ctx, "muscle": sorted(region)[0]})

    for ex, group in zip(exercises, groups):
        if _incompatible_muscle(ex, group):
            return Violation("exercicio_musculo_incompativel", {**ctx, "muscle": group, "exercise": ex.name})

    if day_type and not _order_is_valid(groups, day_type):
        return Violation("ordem_exercicios_invalida", ctx)

    per_muscle = Counter(g or normalize_text(ex.primary_muscle) for ex, g in zip(exercises, groups))
    for muscle, count in per_muscle.items():
        if count > rules.max_exercises_per_muscle:
            return Violation(
                "excesso_exercicios_musculo_primario",
                {**ctx, "muscle": muscle, "count": count, "limit": rules.max_exercises_per_muscle},
            )

    for muscle, share in DISTRIBUTION_LIMITS.get(day_type, []):
        cap = distribution_cap(share, total)
        if per_muscle.get(muscle, 0) > cap:
            return Violation(
                "distribuicao_inteligente_invalida",
                {**ctx, "muscle": muscle, "count": per_muscle[muscle], "limit": cap},
            )

    for ex, group in zip(exercises, groups):
        limit = _STRUCTURAL_SECONDARY_LIMIT if is_structural(ex.name) else _ISOLATED_SECONDARY_LIMIT
        if len(ex.secondary_muscles) > limit:
            return Violation(
                "secondaryMuscles_excede_limite",
                {**ctx, "muscle": group, "exercise": ex.name, "count": len(ex.secondary_muscles), "limit": limit},
            )

    if available_time_minutes:
        minutes = day_minutes(exercises)
        if minutes > available_time_minutes:
            return Violation(
                "tempo_treino_excede_disponivel",
                {**ctx, "minutes": minutes, "available_time_minutes": available_time_minutes},
            )
    return None


def find_violation(
    plan: Optional[TrainingPlan],
    training_days: int,
    activity_level: str | None,
    available_time_minutes: int | None = None,
) -> Optional[Violation]:
    """Return the first rule the plan breaks, or None when it is usable."""
    base: Dict[str, Any] = {
        "activity_level": to_activity_level(activity_level),
        "training_days": training_days,
    }
    if plan is None or not plan.weekly_schedule:
        return Violation("weeklySchedule_invalido", base)

    schedule = plan.weekly_schedule
    if len(schedule) != training_days:
        return Violation("numero_dias_incompativel", {**base, "count": len(schedule)})

    day_types = [to_day_type(day.type) for day in schedule]
    if not _division_matches_frequency(day_types, activity_level):
        return Violation("divisao_incompativel_frequencia", {**base, "day_types": [d.type for d in schedule]})

    divergent = find_divergent_same_type_days(plan)
    if divergent:
        day_type, _, idx = divergent[0]
        return Violation(
            "dias_mesmo_tipo_exercicios_diferentes",
            {**base, "day": schedule[idx].day, "day_type": day_type},
        )

    for day in schedule:
        violation = _check_day(day, activity_level, available_time_minutes, base)
        if violation is not None:
            return violation
    return None


def is_usable(
    plan: Optional[TrainingPlan],
    training_days: int,
    activity_level: str | None,
    available_time_minutes: int | None = None,
    *,
    metrics: Optional["MetricsService"] = None,
) -> bool:
    violation = find_violation(plan, training_days, activity_level, available_time_minutes)
    if violation is None:
        return True
    logger.warning("Plan rejected: %s %s", violation.reason, violation.context)
    if metrics is not None:
        metrics.rejections.record(violation.reason, violation.context)
    return False
