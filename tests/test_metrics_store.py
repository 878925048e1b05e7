from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone

from treino.metrics import CorrectionMetricsStore, MetricsService, RejectionMetricsStore
from treino.metrics.store import REJECTION_TABLE, UNKNOWN_KEY
from treino.models import PlanQualityMetric, RejectionMetric

NOW = datetime(2026, 3, 18, 12, 0, tzinfo=timezone.utc)


def test_buffer_evicts_oldest_records() -> None:
    store = RejectionMetricsStore(maxlen=3)
    for training_days in range(5):
        store.record("excesso_exercicios_nivel", {"training_days": training_days})

    assert len(store) == 3
    assert [m.context["training_days"] for m in store.all()] == [2, 3, 4]


def test_concurrent_writers_do_not_lose_records() -> None:
    store = RejectionMetricsStore(maxlen=10_000)

    def write() -> None:
        for _ in range(500):
            store.record("dia_sem_exercicios")

    threads = [threading.Thread(target=write) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store) == 2000


def test_sink_receives_json_rows() -> None:
    rows = []
    service = MetricsService(sink=lambda table, row: rows.append((table, row)))
    assert service.is_persistence_enabled()

    service.rejections.record("exercicio_duplicado", {"activity_level": "moderado"})
    service.close()

    assert len(rows) == 1
    table, row = rows[0]
    assert table == REJECTION_TABLE
    assert row["reason"] == "exercicio_duplicado"
    assert isinstance(row["timestamp"], str)


def test_sink_failure_keeps_record_in_memory(caplog) -> None:
    def broken(table, row):
        raise ConnectionError("database unavailable")

    service = MetricsService(sink=broken)
    with caplog.at_level(logging.WARNING, logger="treino.metrics.store"):
        service.rejections.record("dia_sem_exercicios")
        service.flush()
        service.close()

    assert len(service.rejections) == 1
    assert "Failed to persist metric" in caplog.text


def test_persistence_disabled_without_sink() -> None:
    service = MetricsService()
    assert not service.is_persistence_enabled()
    service.flush()
    service.close()


def test_metrics_by_period_is_inclusive() -> None:
    store = RejectionMetricsStore()
    for hours in (0, 1, 5, 30):
        store.add(RejectionMetric(reason="exercicio_duplicado", timestamp=NOW - timedelta(hours=hours)))

    found = store.get_metrics_by_period(NOW - timedelta(hours=5), NOW)
    assert len(found) == 3
    assert len(store.get_last_24_hours_statistics(now=NOW).recent) == 3


def test_naive_bounds_are_read_as_utc() -> None:
    store = RejectionMetricsStore()
    store.record("exercicio_duplicado")
    naive_now = datetime.now(timezone.utc).replace(tzinfo=None)

    found = store.get_metrics_by_period(naive_now - timedelta(days=1), naive_now + timedelta(days=1))
    assert len(found) == 1

    store.add(RejectionMetric(reason="exercicio_duplicado", timestamp=NOW))
    assert len(store.get_metrics_by_period(datetime(2026, 3, 18, 11), datetime(2026, 3, 18, 13))) == 1
    assert len(store.get_last_24_hours_statistics(now=datetime(2026, 3, 18, 13)).recent) == 1


def test_rejection_statistics() -> None:
    store = RejectionMetricsStore()
    store.record("excesso_exercicios_nivel", {"activity_level": "iniciante", "day_type": "upper"})
    store.record("excesso_exercicios_nivel", {"activity_level": "iniciante", "day_type": "push"})
    store.record("grupo_obrigatorio_ausente", {"activity_level": "atleta", "day_type": "push", "muscle": "triceps"})

    stats = store.get_statistics()

    assert stats.total == 3
    assert stats.by_reason == {"excesso_exercicios_nivel": 2, "grupo_obrigatorio_ausente": 1}
    assert stats.by_activity_level == {"iniciante": 2, "atleta": 1}
    assert stats.by_day_type == {"upper": 1, "push": 2}
    assert stats.by_muscle == {UNKNOWN_KEY: 2, "triceps": 1}
    assert stats.recent[0].reason == "grupo_obrigatorio_ausente", "recent records come newest first"


def test_correction_statistics() -> None:
    store = CorrectionMetricsStore()
    store.record("same_type_days_exercises", {"day_type": "push"}, {"activity_level": "moderado"})
    store.record("divisao_ajustada_tecnica")

    stats = store.get_statistics()

    assert stats.total == 2
    assert stats.by_reason == {"same_type_days_exercises": 1, "divisao_ajustada_tecnica": 1}
    assert stats.by_activity_level == {"moderado": 1, UNKNOWN_KEY: 1}


def test_quality_statistics() -> None:
    service = MetricsService()
    assert service.quality.get_statistics().total == 0

    service.quality.record(PlanQualityMetric(
        quality_score=90,
        soft_warnings_count=2,
        soft_warnings_by_type={"joint_shoulder": 2},
        alternatives_used_count=1,
        context={"activity_level": "moderado"},
    ))
    service.quality.record(PlanQualityMetric(
        quality_score=80,
        flexible_warnings_count=1,
        flexible_warnings_by_type={"series_adjustment": 1},
        context={"activity_level": "moderado"},
    ))

    stats = service.quality.get_statistics()
    assert stats.total == 2
    assert stats.average_quality_score == 85.0
    assert stats.by_activity_level == {"moderado": 85.0}
    assert stats.soft_warnings_by_type == {"joint_shoulder": 2}
    assert stats.flexible_warnings_by_type == {"series_adjustment": 1}
    assert stats.alternatives_used == 1


def test_clear_empties_every_store() -> None:
    service = MetricsService()
    service.rejections.record("dia_sem_exercicios")
    service.corrections.record("divisao_ajustada_tecnica")
    service.quality.record(PlanQualityMetric(quality_score=100))

    service.clear()

    assert (len(service.rejections), len(service.corrections), len(service.quality)) == (0, 0, 0)
