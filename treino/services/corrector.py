from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Optional

from treino.models.plan import TrainingDay, TrainingPlan
from .classification import DayType, to_activity_level, to_day_type
from .validator import find_divergent_same_type_days

if TYPE_CHECKING:
    from treino.metrics.store import MetricsService

logger = logging.getLogger(__name__)


def correct_same_type_days_exercises(
    plan: TrainingPlan,
    *,
    metrics: Optional["MetricsService"] = None,
    activity_level: str | None = None,
) -> TrainingPlan:
    """Give every day of a type the exercise list of the first day of that type.

    Returns a new plan; the input plan is left untouched.
    """
    divergent = {idx for _, _, idx in find_divergent_same_type_days(plan)}
    canonical: Dict[DayType, TrainingDay] = {}
    days = []
    for idx, day in enumerate(plan.weekly_schedule):
        day_type = to_day_type(day.type)
        if day_type is None:
            days.append(day.model_copy(deep=True))
            continue
        reference = canonical.setdefault(day_type, day)
        if idx not in divergent:
            days.append(day.model_copy(deep=True))
            continue
        exercises = [ex.model_copy(deep=True) for ex in reference.exercises]
        days.append(day.model_copy(update={"exercises": exercises}, deep=True))
        if metrics is not None:
            metrics.corrections.record(
                "same_type_days_exercises",
                payload={
                    "day_type": day_type,
                    "first_day": reference.day,
                    "corrected_day": day.day,
                    "exercise_count": len(exercises),
                },
                context={"activity_level": to_activity_level(activity_level) if activity_level else None},
            )
        else:
            logger.info("Aligned %s with %s (%s)", day.day, reference.day, day_type)
    return plan.model_copy(update={"weekly_schedule": days}, deep=True)
