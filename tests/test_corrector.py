from __future__ import annotations

from typing import List

from treino.metrics import MetricsService
from treino.models import Exercise, TrainingDay, TrainingPlan
from treino.services.corrector import correct_same_type_days_exercises
from treino.services.validator import find_violation, is_usable


def ex(name: str, muscle: str) -> Exercise:
    return Exercise(name=name, primary_muscle=muscle, sets=3, reps="8-12", rest="60s")


def day(label: str, day_type: str, exercises: List[Exercise]) -> TrainingDay:
    return TrainingDay(day=label, type=day_type, exercises=exercises)


def push_a() -> List[Exercise]:
    return [
        ex("Supino reto com barra", "peitoral"),
        ex("Desenvolvimento com halteres", "ombros"),
        ex("Tríceps na polia alta", "triceps"),
    ]


def push_b() -> List[Exercise]:
    return [
        ex("Supino inclinado com halteres", "peitoral"),
        ex("Elevação lateral com halteres", "ombros"),
        ex("Tríceps testa com barra EZ", "triceps"),
    ]


def pull() -> List[Exercise]:
    return [
        ex("Remada curvada com barra", "costas"),
        ex("Face pull", "ombros"),
        ex("Rosca direta com barra", "biceps"),
    ]


def legs() -> List[Exercise]:
    return [
        ex("Agachamento com barra", "quadriceps"),
        ex("Stiff com barra", "posterior de coxa"),
        ex("Elevação de panturrilha em pé", "panturrilhas"),
    ]


def six_day_plan() -> TrainingPlan:
    return TrainingPlan(weekly_schedule=[
        day("Treino A – Peito/Tríceps", "Push", push_a()),
        day("Treino B – Costas/Bíceps", "Pull", pull()),
        day("Treino C – Pernas", "Legs", legs()),
        day("Treino D – Peito/Tríceps", "Push", push_b()),
        day("Treino E – Costas/Bíceps", "Pull", pull()),
        day("Treino F – Pernas", "Legs", legs()),
    ])


def names(d: TrainingDay) -> List[str]:
    return [e.name for e in d.exercises]


def test_divergent_push_days_are_aligned() -> None:
    plan = six_day_plan()
    metrics = MetricsService()

    violation = find_violation(plan, 6, "Moderado")
    assert violation is not None and violation.reason == "dias_mesmo_tipo_exercicios_diferentes"

    corrected = correct_same_type_days_exercises(plan, metrics=metrics, activity_level="Moderado")

    assert names(corrected.weekly_schedule[3]) == names(corrected.weekly_schedule[0])
    assert corrected.weekly_schedule[3].day == "Treino D – Peito/Tríceps"
    assert is_usable(corrected, 6, "Moderado")

    records = metrics.corrections.all()
    assert len(records) == 1
    assert records[0].reason == "same_type_days_exercises"
    assert records[0].payload == {
        "day_type": "push",
        "first_day": "Treino A – Peito/Tríceps",
        "corrected_day": "Treino D – Peito/Tríceps",
        "exercise_count": 3,
    }
    assert records[0].context["activity_level"] == "moderado"


def test_input_plan_is_not_mutated() -> None:
    plan = six_day_plan()
    before = plan.model_dump()

    corrected = correct_same_type_days_exercises(plan)

    assert plan.model_dump() == before
    assert names(plan.weekly_schedule[3]) != names(plan.weekly_schedule[0])
    # copied exercises are independent objects
    corrected.weekly_schedule[3].exercises[0].sets = 5
    assert corrected.weekly_schedule[0].exercises[0].sets == 3


def test_consistent_plan_is_returned_unchanged() -> None:
    plan = six_day_plan()
    plan.weekly_schedule[3] = day("Treino D – Peito/Tríceps", "Push", push_a())
    metrics = MetricsService()

    corrected = correct_same_type_days_exercises(plan, metrics=metrics)

    assert corrected.model_dump() == plan.model_dump()
    assert len(metrics.corrections) == 0
