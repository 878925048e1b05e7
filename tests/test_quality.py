from __future__ import annotations

import pytest

from treino.metrics import PlanQualityAccumulator


def test_clean_plan_scores_100() -> None:
    assert PlanQualityAccumulator().calculate_quality_score() == 100


def test_soft_and_flexible_penalties() -> None:
    acc = PlanQualityAccumulator()
    acc.record_soft("joint_shoulder", "Elevação lateral com halteres")
    acc.record_soft("volume_distribution")
    acc.record_flexible("series_adjustment")

    assert acc.soft_count == 2
    assert acc.flexible_count == 1
    assert acc.calculate_quality_score() == 100 - 2 * 5 - 2


def test_score_is_monotone_and_floored_at_60() -> None:
    acc = PlanQualityAccumulator()
    scores = []
    for _ in range(20):
        acc.record_soft("other")
        scores.append(acc.calculate_quality_score())

    assert scores == sorted(scores, reverse=True)
    assert scores[-1] == 60


@pytest.mark.parametrize(
    "severity, reason, bucket, expected_type",
    [
        ("SOFT", "Limitação de ombro: elevação acima de 90 graus", "soft", "joint_shoulder"),
        ("SOFT", "Knee restriction", "soft", "joint_knee"),
        ("SOFT", "Distribuição de volume abaixo do ideal", "soft", "volume_distribution"),
        ("SOFT", "Alternativa usada", "soft", "alternative_used"),
        ("FLEXIBLE", "Séries reduzidas para caber no tempo", "flexible", "series_adjustment"),
        ("FLEXIBLE", "Volume ajustado", "flexible", "volume_adjustment"),
        ("FLEXIBLE", "outro ajuste", "flexible", "other"),
    ],
)
def test_register_infers_warning_type(severity: str, reason: str, bucket: str, expected_type: str) -> None:
    acc = PlanQualityAccumulator()
    acc.register(True, severity, reason)  # type: ignore[arg-type]
    counter = acc.soft_warnings if bucket == "soft" else acc.flexible_warnings
    assert dict(counter) == {expected_type: 1}


def test_hard_and_disallowed_registrations_are_ignored() -> None:
    acc = PlanQualityAccumulator()
    acc.register(True, "HARD", "Desenvolvimento com ombro limitado")
    acc.register(False, "SOFT", "Limitação de ombro")

    assert acc.soft_count == 0 and acc.flexible_count == 0
    assert acc.calculate_quality_score() == 100


def test_generate_metric_and_clear() -> None:
    acc = PlanQualityAccumulator()
    acc.record_soft("joint_knee", "Leg press")
    acc.record_soft("joint_knee", "Leg press")
    acc.record_flexible("volume_adjustment")
    acc.record_alternative_used()

    metric = acc.generate_metric({"activity_level": "moderado"}, plan_id="plan-1")

    assert metric.plan_id == "plan-1"
    assert metric.soft_warnings_count == 2
    assert metric.soft_warnings_by_type == {"joint_knee": 2}
    assert metric.flexible_warnings_by_type == {"volume_adjustment": 1}
    assert metric.exercises_with_soft_warnings == ["Leg press"]
    assert metric.alternatives_used_count == 1
    assert metric.quality_score == 88
    assert metric.context == {"activity_level": "moderado"}

    acc.clear()
    assert acc.calculate_quality_score() == 100
    assert acc.alternatives_used == 0
