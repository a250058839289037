"""Run tracing and aggregate pipeline metrics."""

from __future__ import annotations

import threading
import time
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone

from adaptive_rag.types import Phase, ProgressEvent, RouteDecision, Source


@dataclass(slots=True)
class TraceRecord:
    trace_id: str
    timestamp_utc: str
    query: str
    route: str | None
    phases: list[str]
    answer: str
    sources: list[Source]
    events: list[ProgressEvent]
    latency_ms: float
    failed: bool
    error: str | None = None


class TraceStore:
    """In-memory trace storage for API-level observability.

    Records are written after a run has finished, so they never influence
    a later query. A lock guards the dict because FastAPI serves sync
    endpoints from a threadpool.
    """

    def __init__(self, max_records: int = 1000) -> None:
        self._records: dict[str, TraceRecord] = {}
        self._max_records = max_records
        self._lock = threading.Lock()

    def create_record(
        self,
        *,
        query: str,
        route: RouteDecision | None,
        phases: list[Phase],
        answer: str,
        sources: list[Source],
        events: list[ProgressEvent],
        latency_ms: float,
        error: str | None = None,
    ) -> TraceRecord:
        record = TraceRecord(
            trace_id=str(uuid.uuid4()),
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
            query=query,
            route=route.value if route is not None else None,
            phases=[phase.value for phase in phases],
            answer=answer,
            sources=list(sources),
            events=list(events),
            latency_ms=latency_ms,
            failed=error is not None,
            error=error,
        )
        with self._lock:
            self._records[record.trace_id] = record
            while len(self._records) > self._max_records:
                self._records.pop(next(iter(self._records)))
        return record

    def get(self, trace_id: str) -> TraceRecord:
        with self._lock:
            record = self._records.get(trace_id)
        if record is None:
            raise KeyError(f"Trace not found: {trace_id}")
        return record

    def list_recent(self, limit: int = 20) -> list[TraceRecord]:
        with self._lock:
            records = list(self._records.values())
        return records[-limit:] if limit > 0 else []

    def summary(self) -> dict[str, object]:
        """Aggregate core observability metrics for dashboard display."""
        with self._lock:
            records = list(self._records.values())
        total = len(records)
        if total == 0:
            return {
                "total_requests": 0,
                "failed_requests": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
                "routes": {},
                "web_search_fallbacks": 0,
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        routes = Counter(record.route or "unknown" for record in records)
        fallbacks = sum(
            1
            for record in records
            if Phase.GRADING.value in record.phases
            and Phase.WEB_SEARCH.value in record.phases
        )

        return {
            "total_requests": total,
            "failed_requests": sum(1 for record in records if record.failed),
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
            "routes": dict(routes),
            "web_search_fallbacks": fallbacks,
        }


class Timer:
    """Simple context timer used around pipeline runs."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
