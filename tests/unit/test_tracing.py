import threading

import pytest

from adaptive_rag.obs.tracing import Timer, TraceStore
from adaptive_rag.types import Phase, ProgressEvent, RouteDecision, Source


def _record(store: TraceStore, *, route, phases, latency_ms, error=None):
    return store.create_record(
        query="q",
        route=route,
        phases=phases,
        answer="a",
        sources=[Source(title="t", uri="#")],
        events=[ProgressEvent(Phase.ROUTING, "Analyzing query")],
        latency_ms=latency_ms,
        error=error,
    )


def test_summary_counts_routes_failures_and_fallbacks() -> None:
    store = TraceStore()
    _record(store, route=RouteDecision.DIRECT, phases=[Phase.ROUTING, Phase.DIRECT_ANSWER], latency_ms=10.0)
    _record(
        store,
        route=RouteDecision.VECTORSTORE,
        phases=[Phase.ROUTING, Phase.GENERATE_QUERIES, Phase.RETRIEVING, Phase.GRADING, Phase.WEB_SEARCH],
        latency_ms=30.0,
        error="web search down",
    )

    summary = store.summary()

    assert summary["total_requests"] == 2
    assert summary["failed_requests"] == 1
    assert summary["avg_latency_ms"] == pytest.approx(20.0)
    assert summary["routes"] == {"direct": 1, "vectorstore": 1}
    assert summary["web_search_fallbacks"] == 1


def test_store_lookup_and_eviction() -> None:
    store = TraceStore(max_records=2)
    first = _record(store, route=None, phases=[], latency_ms=1.0)
    _record(store, route=None, phases=[], latency_ms=2.0)
    third = _record(store, route=None, phases=[], latency_ms=3.0)

    with pytest.raises(KeyError):
        store.get(first.trace_id)
    assert store.get(third.trace_id).route is None
    assert len(store.list_recent(limit=10)) == 2
    assert TraceStore().summary()["total_requests"] == 0


def test_timer_measures_elapsed() -> None:
    with Timer() as timer:
        sum(range(1000))
    assert timer.elapsed_ms >= 0.0


def test_lookup_waits_for_writers() -> None:
    store = TraceStore()
    record = _record(store, route=None, phases=[], latency_ms=1.0)
    found = []

    with store._lock:
        reader = threading.Thread(target=lambda: found.append(store.get(record.trace_id)))
        reader.start()
        reader.join(timeout=0.05)
        assert reader.is_alive()
    reader.join(timeout=1.0)

    assert found == [record]
