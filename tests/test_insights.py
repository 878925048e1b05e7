from __future__ import annotations

from typing import Optional, get_args

import pytest

from treino.metrics import generate_insights
from treino.models import (
    DimensionBreakdown,
    LevelBreakdown,
    MetricsSummary,
    PeriodStats,
    PreviousPeriodStats,
    ReasonCount,
    RejectionReason,
    Trends,
)


def summary(current: PeriodStats, previous: Optional[PreviousPeriodStats] = None, trends: Optional[Trends] = None) -> MetricsSummary:
    return MetricsSummary(period="weekly", current=current, previous=previous, trends=trends or Trends())


def titles(s: MetricsSummary) -> list:
    return [i.title for i in generate_insights(s)]


def test_empty_summary_has_no_insights() -> None:
    assert generate_insights(summary(PeriodStats())) == []


def test_insights_are_deterministic() -> None:
    s = summary(
        PeriodStats(
            total_rejections=30,
            rejection_rate=40.0,
            top_rejection_reasons=[ReasonCount(reason="excesso_exercicios_nivel", count=18, percentage=60.0)],
            by_activity_level={
                "iniciante": LevelBreakdown(rejections=15),
                "atleta": LevelBreakdown(rejections=15),
            },
        ),
        previous=PreviousPeriodStats(total_rejections=10),
    )
    first = generate_insights(s)
    assert first == generate_insights(s)
    assert [i.affected_levels for i in first if i.affected_levels] == [["atleta"], ["iniciante"]]


def test_high_rejection_rate() -> None:
    insights = generate_insights(summary(PeriodStats(total_rejections=5, rejection_rate=25.0)))
    assert insights[0].title == "Taxa de rejeição alta"
    assert insights[0].severity == "high"
    assert insights[0].metric == "rejection_rate"


def test_low_rejection_rate_needs_a_falling_trend() -> None:
    current = PeriodStats(rejection_rate=3.0)
    previous = PreviousPeriodStats(rejection_rate=10.0)

    assert "Taxa de rejeição excelente" in titles(summary(current, previous, Trends(rejection_rate="decreasing")))
    assert "Taxa de rejeição excelente" not in titles(summary(current, previous, Trends(rejection_rate="stable")))
    assert "Taxa de rejeição excelente" not in titles(summary(current))


def test_rejection_spike_and_drop() -> None:
    spike = generate_insights(summary(PeriodStats(total_rejections=14), PreviousPeriodStats(total_rejections=10)))
    assert spike[0].title == "Aumento significativo de rejeições"
    assert spike[0].change_percent == 40.0
    assert spike[0].trend == "increasing"

    drop = generate_insights(summary(PeriodStats(total_rejections=7), PreviousPeriodStats(total_rejections=10)))
    assert drop[0].title == "Redução significativa de rejeições"
    assert drop[0].change_percent == -30.0

    steady = generate_insights(summary(PeriodStats(total_rejections=11), PreviousPeriodStats(total_rejections=10)))
    assert all(i.trend is None for i in steady)


def test_dominant_reason_gets_a_specific_recommendation() -> None:
    dominant = PeriodStats(
        total_rejections=10,
        top_rejection_reasons=[ReasonCount(reason="tempo_treino_excede_disponivel", count=5, percentage=50.0)],
    )
    insight = next(i for i in generate_insights(summary(dominant)) if i.metric == "tempo_treino_excede_disponivel")
    assert insight.severity == "high"
    assert insight.suggestion

    spread = PeriodStats(
        total_rejections=10,
        top_rejection_reasons=[ReasonCount(reason="tempo_treino_excede_disponivel", count=4, percentage=40.0)],
    )
    assert all(i.metric != "tempo_treino_excede_disponivel" for i in generate_insights(summary(spread)))


@pytest.mark.parametrize("reason", get_args(RejectionReason))
def test_every_dominant_reason_has_a_recommendation(reason: str) -> None:
    current = PeriodStats(
        total_rejections=4,
        top_rejection_reasons=[ReasonCount(reason=reason, count=4, percentage=100.0)],
    )
    matching = [i for i in generate_insights(summary(current)) if i.metric == reason]
    assert len(matching) == 1
    assert matching[0].suggestion
    assert "100.0%" in matching[0].description


def test_quality_score_thresholds() -> None:
    assert "Score de qualidade baixo" in titles(summary(PeriodStats(total_quality_metrics=3, average_quality_score=65.0)))
    assert "Score de qualidade excelente" in titles(summary(PeriodStats(total_quality_metrics=3, average_quality_score=92.0)))
    assert titles(summary(PeriodStats(total_quality_metrics=3, average_quality_score=80.0))) == []
    # no quality data, no quality insight
    assert titles(summary(PeriodStats(total_quality_metrics=0, average_quality_score=0.0))) == []


def test_low_quality_per_level() -> None:
    current = PeriodStats(
        total_quality_metrics=4,
        average_quality_score=80.0,
        by_activity_level={
            "idoso": LevelBreakdown(quality_score=65.0),
            "moderado": LevelBreakdown(quality_score=95.0),
        },
    )
    insights = generate_insights(summary(current))
    assert [i.title for i in insights] == ['Qualidade baixa para nível "idoso"']


def test_dimension_thresholds() -> None:
    current = PeriodStats(
        total_rejections=20,
        by_activity_level={"iniciante": LevelBreakdown(rejections=11), "moderado": LevelBreakdown(rejections=9)},
        by_day_type={"push": DimensionBreakdown(rejections=6), "pull": DimensionBreakdown(rejections=5)},
        by_muscle={"triceps": DimensionBreakdown(rejections=6), "biceps": DimensionBreakdown(rejections=3)},
    )
    insights = generate_insights(summary(current))
    flagged = [(i.affected_levels, i.affected_day_types, i.affected_muscles) for i in insights if i.type == "warning"]
    assert (["iniciante"], [], []) in flagged
    assert ([], ["push"], []) in flagged
    assert ([], [], ["triceps"]) in flagged
    assert ([], ["pull"], []) not in flagged


def test_correction_rate_insights() -> None:
    high = PeriodStats(total_rejections=10, correction_success_rate=100.0)
    low = PeriodStats(total_rejections=10, correction_success_rate=50.0)
    none = PeriodStats(total_rejections=0, correction_success_rate=0.0)

    assert "Sistema de correção funcionando muito bem" in titles(summary(high))
    assert "Taxa de correção pode melhorar" in titles(summary(low))
    assert titles(summary(none)) == []
