"""In-memory metric stores with optional best-effort persistence.

Each store keeps the newest ``METRICS_BUFFER_SIZE`` records in a lock-protected
ring buffer. Reads take a snapshot, so aggregation never blocks writers for
long. When a sink is configured every record is also handed to it on a single
background worker; sink failures are logged and dropped.
"""
from __future__ import annotations

import logging
import threading
from collections import Counter, deque
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Any, Callable, Deque, Dict, Generic, Iterable, List, Optional, TypeVar

from treino.config import get_settings
from treino.models.metrics import (
    CorrectionMetric,
    CorrectionReason,
    MetricStatistics,
    PlanQualityMetric,
    QualityStatistics,
    RejectionMetric,
    RejectionReason,
    as_utc,
    utcnow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

MetricSink = Callable[[str, Dict[str, Any]], None]

REJECTION_TABLE = "plan_rejection_metrics"
CORRECTION_TABLE = "plan_correction_metrics"
QUALITY_TABLE = "plan_quality_metrics"

UNKNOWN_KEY = "Não informado"


class MetricBuffer(Generic[T]):
    """Bounded append-only buffer; the oldest entry is evicted when full."""

    def __init__(self, maxlen: int) -> None:
        self._lock = threading.Lock()
        self._items: Deque[T] = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> int:
        return self._items.maxlen or 0

    def append(self, item: T) -> None:
        with self._lock:
            self._items.append(item)

    def snapshot(self) -> List[T]:
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class _SinkWorker:
    def __init__(self, sink: MetricSink) -> None:
        self.sink = sink
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="metrics-sink")
        self._pending: List[Future] = []
        self._lock = threading.Lock()

    def submit(self, table: str, row: Dict[str, Any]) -> None:
        try:
            future = self._executor.submit(self.sink, table, row)
        except RuntimeError as e:
            logger.warning("Metric sink unavailable, dropping %s row: %s", table, e)
            return
        with self._lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)
        future.add_done_callback(lambda f: _log_sink_failure(table, f))

    def flush(self, timeout: float | None = None) -> None:
        with self._lock:
            pending = list(self._pending)
        for future in pending:
            try:
                future.result(timeout=timeout)
            except Exception:
                # already logged by the done callback
                pass

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


def _log_sink_failure(table: str, future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        logger.warning("Failed to persist metric to %s: %s", table, exc)


def _context_key(context: Dict[str, Any], key: str) -> str:
    value = context.get(key)
    if value is None or value == "":
        return UNKNOWN_KEY
    return str(value)


def _in_period(metrics: Iterable[Any], start: datetime, end: datetime) -> List[Any]:
    return [m for m in metrics if start <= m.timestamp <= end]


class _MetricsStore(Generic[T]):
    table = ""

    def __init__(self, *, maxlen: int | None = None, sink: MetricSink | None = None, worker: _SinkWorker | None = None) -> None:
        settings = get_settings()
        self._buffer: MetricBuffer[T] = MetricBuffer(maxlen or settings.METRICS_BUFFER_SIZE)
        self._worker = worker if worker is not None else (_SinkWorker(sink) if sink is not None else None)

    def _append(self, metric: Any) -> None:
        self._buffer.append(metric)
        if self._worker is not None:
            self._worker.submit(self.table, metric.model_dump(mode="json"))

    def add(self, metric: T) -> T:
        """Append an already built record, e.g. one reloaded from persistence."""
        self._append(metric)
        return metric

    def all(self) -> List[T]:
        return self._buffer.snapshot()

    def get_metrics_by_period(self, start: datetime, end: datetime) -> List[T]:
        return _in_period(self._buffer.snapshot(), as_utc(start), as_utc(end))

    def is_persistence_enabled(self) -> bool:
        return self._worker is not None

    def flush(self, timeout: float | None = None) -> None:
        if self._worker is not None:
            self._worker.flush(timeout)

    def clear(self) -> None:
        self._buffer.clear()

    def __len__(self) -> int:
        return len(self._buffer)


def _dimension_statistics(metrics: List[Any], by_reason: Dict[str, int], recent_limit: int) -> MetricStatistics:
    by_level: Counter = Counter()
    by_day_type: Counter = Counter()
    by_muscle: Counter = Counter()
    for m in metrics:
        by_level[_context_key(m.context, "activity_level")] += 1
        by_day_type[_context_key(m.context, "day_type")] += 1
        by_muscle[_context_key(m.context, "muscle")] += 1
    return MetricStatistics(
        total=len(metrics),
        by_reason=by_reason,
        by_activity_level=dict(by_level),
        by_day_type=dict(by_day_type),
        by_muscle=dict(by_muscle),
        recent=list(reversed(metrics))[:recent_limit],
    )


class RejectionMetricsStore(_MetricsStore[RejectionMetric]):
    table = REJECTION_TABLE

    def record(self, reason: RejectionReason, context: Optional[Dict[str, Any]] = None) -> RejectionMetric:
        metric = RejectionMetric(reason=reason, context=dict(context or {}))
        self._append(metric)
        return metric

    def statistics_for(self, metrics: List[RejectionMetric]) -> MetricStatistics:
        by_reason = Counter(m.reason for m in metrics)
        return _dimension_statistics(metrics, dict(by_reason), get_settings().RECENT_METRICS_LIMIT)

    def get_statistics(self) -> MetricStatistics:
        return self.statistics_for(self.all())

    def get_last_24_hours_statistics(self, now: datetime | None = None) -> MetricStatistics:
        end = now or utcnow()
        return self.statistics_for(self.get_metrics_by_period(end - timedelta(hours=24), end))


class CorrectionMetricsStore(_MetricsStore[CorrectionMetric]):
    table = CORRECTION_TABLE

    def record(
        self,
        reason: CorrectionReason,
        payload: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> CorrectionMetric:
        metric = CorrectionMetric(reason=reason, payload=dict(payload or {}), context=dict(context or {}))
        self._append(metric)
        logger.info("Plan corrected: %s %s", reason, metric.payload)
        return metric

    def statistics_for(self, metrics: List[CorrectionMetric]) -> MetricStatistics:
        by_reason = Counter(m.reason for m in metrics)
        return _dimension_statistics(metrics, dict(by_reason), get_settings().RECENT_METRICS_LIMIT)

    def get_statistics(self) -> MetricStatistics:
        return self.statistics_for(self.all())

    def get_last_24_hours_statistics(self, now: datetime | None = None) -> MetricStatistics:
        end = now or utcnow()
        return self.statistics_for(self.get_metrics_by_period(end - timedelta(hours=24), end))


class QualityMetricsStore(_MetricsStore[PlanQualityMetric]):
    table = QUALITY_TABLE

    def record(self, metric: PlanQualityMetric) -> PlanQualityMetric:
        self._append(metric)
        return metric

    def statistics_for(self, metrics: List[PlanQualityMetric]) -> QualityStatistics:
        if not metrics:
            return QualityStatistics(total=0)
        soft: Counter = Counter()
        flexible: Counter = Counter()
        scores_by_level: Dict[str, List[int]] = {}
        for m in metrics:
            soft.update(m.soft_warnings_by_type)
            flexible.update(m.flexible_warnings_by_type)
            scores_by_level.setdefault(_context_key(m.context, "activity_level"), []).append(m.quality_score)
        average = sum(m.quality_score for m in metrics) / len(metrics)
        return QualityStatistics(
            total=len(metrics),
            average_quality_score=round(average, 1),
            by_activity_level={k: round(sum(v) / len(v), 1) for k, v in scores_by_level.items()},
            soft_warnings_by_type=dict(soft),
            flexible_warnings_by_type=dict(flexible),
            alternatives_used=sum(m.alternatives_used_count for m in metrics),
            recent=list(reversed(metrics))[: get_settings().RECENT_METRICS_LIMIT],
        )

    def get_statistics(self) -> QualityStatistics:
        return self.statistics_for(self.all())

    def get_last_24_hours_statistics(self, now: datetime | None = None) -> QualityStatistics:
        end = now or utcnow()
        return self.statistics_for(self.get_metrics_by_period(end - timedelta(hours=24), end))


class MetricsService:
    """Owns the three stores; pass one instance to the validator, corrector, auditor and pipeline."""

    def __init__(self, *, maxlen: int | None = None, sink: MetricSink | None = None) -> None:
        self._worker = _SinkWorker(sink) if sink is not None else None
        self.rejections = RejectionMetricsStore(maxlen=maxlen, worker=self._worker)
        self.corrections = CorrectionMetricsStore(maxlen=maxlen, worker=self._worker)
        self.quality = QualityMetricsStore(maxlen=maxlen, worker=self._worker)

    def is_persistence_enabled(self) -> bool:
        return self._worker is not None

    def flush(self, timeout: float | None = None) -> None:
        if self._worker is not None:
            self._worker.flush(timeout)

    def close(self) -> None:
        if self._worker is not None:
            self._worker.shutdown()

    def clear(self) -> None:
        for store in (self.rejections, self.corrections, self.quality):
            store.clear()
