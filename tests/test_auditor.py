from __future__ import annotations

import logging

from treino.metrics import MetricsService
from treino.models import Exercise, TrainingDay, TrainingPlan
from treino.services.auditor import audit


def ex(name: str, muscle: str) -> Exercise:
    return Exercise(name=name, primary_muscle=muscle, sets=3, reps="8-12", rest="60s")


def upper_lower_plan(lower: list) -> TrainingPlan:
    upper = [
        ex("Supino reto com barra", "peitoral"),
        ex("Remada curvada com barra", "costas"),
        ex("Puxada na frente com barra", "costas"),
        ex("Desenvolvimento com halteres", "ombros"),
        ex("Rosca direta com barra", "biceps"),
        ex("Tríceps na polia alta", "triceps"),
    ]
    return TrainingPlan(weekly_schedule=[
        TrainingDay(day="Segunda-feira", type="Upper", exercises=upper),
        TrainingDay(day="Terça-feira", type="Lower", exercises=lower),
    ])


def test_plan_meeting_every_contract_records_nothing() -> None:
    plan = upper_lower_plan([
        ex("Agachamento com barra", "quadriceps"),
        ex("Leg press", "quadriceps"),
        ex("Cadeira extensora", "quadriceps"),
        ex("Stiff com barra", "posterior de coxa"),
        ex("Mesa flexora", "posterior de coxa"),
    ])
    metrics = MetricsService()

    audit(plan, "Moderado", metrics=metrics)

    assert len(metrics.rejections) == 0


def test_missing_lower_body_patterns_record_contract_violation() -> None:
    plan = upper_lower_plan([
        ex("Cadeira extensora", "quadriceps"),
        ex("Extensão de joelho com caneleira", "quadriceps"),
        ex("Mesa flexora", "posterior de coxa"),
    ])
    metrics = MetricsService()

    audit(plan, "Moderado", metrics=metrics)

    records = metrics.rejections.all()
    assert [r.reason for r in records] == ["contract_violation"]
    context = records[0].context
    assert context["contract"] == "lower_body"
    assert context["activity_level"] == "moderado"
    assert context["min_required"] == 2
    assert context["structural_count"] == 0
    assert context["missing_patterns"] == ["knee_dominant", "hip_dominant"]


def test_unilateral_work_counts_for_lower_body() -> None:
    plan = upper_lower_plan([
        ex("Afundo com halteres", "quadriceps"),
        ex("Stiff com halteres", "posterior de coxa"),
    ])
    metrics = MetricsService()

    audit(plan, "Moderado", metrics=metrics)

    assert len(metrics.rejections) == 0


def test_audit_can_be_limited_to_some_groups() -> None:
    plan = upper_lower_plan([ex("Cadeira extensora", "quadriceps")])
    metrics = MetricsService()

    audit(plan, "Moderado", ["peitoral", "costas"], metrics=metrics)

    assert len(metrics.rejections) == 0


def test_audit_never_raises(caplog) -> None:
    metrics = MetricsService()
    with caplog.at_level(logging.ERROR, logger="treino.services.auditor"):
        audit(None, "Moderado", metrics=metrics)  # type: ignore[arg-type]
    assert len(metrics.rejections) == 0
    assert "Contract audit failed" in caplog.text
