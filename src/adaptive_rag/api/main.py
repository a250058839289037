"""FastAPI entrypoint for query/corpus/trace endpoints."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from adaptive_rag.agent.orchestrator import AdaptiveRagOrchestrator, RunContext, apology_result
from adaptive_rag.config import AgentConfig, GatewayConfig, RetrievalConfig
from adaptive_rag.errors import PipelineError
from adaptive_rag.gateway.base import InferenceGateway
from adaptive_rag.gateway.langchain_gateway import LangChainGateway
from adaptive_rag.gateway.offline import OfflineGateway
from adaptive_rag.obs.tracing import Timer, TraceRecord, TraceStore
from adaptive_rag.retrieval.corpus import Corpus, default_corpus
from adaptive_rag.types import Phase, ProgressEvent

logger = logging.getLogger(__name__)


def _create_gateway() -> InferenceGateway | None:
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        return None

    from langchain_openai import ChatOpenAI

    config = GatewayConfig(model=os.getenv("OPENAI_MODEL", GatewayConfig().model))
    llm = ChatOpenAI(
        model=config.model,
        temperature=config.temperature,
        timeout=config.timeout_seconds,
        max_retries=config.max_retries,
    )
    search_llm = ChatOpenAI(
        model=config.model,
        timeout=config.timeout_seconds,
        max_retries=config.max_retries,
        use_responses_api=True,
    ).bind_tools([{"type": "web_search_preview"}])
    return LangChainGateway(llm, grounded_llm=search_llm)


def _load_corpus() -> Corpus:
    path = os.getenv("ADAPTIVE_RAG_CORPUS")
    if path:
        logger.info("Loading corpus from %s", path)
        return Corpus.from_json(path)
    return default_corpus()


class QueryRequest(BaseModel):
    query: str = Field(min_length=1)


class CorpusSearchRequest(BaseModel):
    query: str = Field(min_length=1)
    variants: list[str] = Field(default_factory=list)
    top_k: int = Field(default=3, ge=1, le=20)


def create_app(
    orchestrator: AdaptiveRagOrchestrator | None = None,
    *,
    trace_store: TraceStore | None = None,
    agent_config: AgentConfig | None = None,
) -> FastAPI:
    """Build the HTTP app; without an orchestrator one is built from env."""

    gateway_mode = "custom"
    if orchestrator is None:
        gateway = _create_gateway()
        gateway_mode = "langchain" if gateway is not None else "offline"
        orchestrator = AdaptiveRagOrchestrator(
            gateway=gateway if gateway is not None else OfflineGateway(),
            corpus=_load_corpus(),
            retrieval_config=RetrievalConfig(),
            agent_config=agent_config or AgentConfig(),
        )
    pipeline = orchestrator
    traces = trace_store or TraceStore()
    latency_target_ms = pipeline.agent_config.target_latency_seconds * 1000.0

    app = FastAPI(title="Adaptive RAG", version="0.1.0")

    def _run(query: str) -> TraceRecord:
        with Timer() as timer:
            try:
                outcome: RunContext | PipelineError = pipeline.execute(query)
            except PipelineError as exc:
                outcome = exc
        return _record_outcome(traces, query, outcome, timer.elapsed_ms)

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "gateway_mode": gateway_mode,
            "corpus_size": len(pipeline.corpus),
            "trace_count": len(traces.list_recent(limit=1000)),
        }

    @app.post("/query")
    def query(request: QueryRequest) -> dict[str, Any]:
        record = _run(request.query)
        return {
            "answer": record.answer,
            "sources": [asdict(source) for source in record.sources],
            "route": record.route,
            "events": [_event_payload(event) for event in record.events],
            "trace_id": record.trace_id,
            "latency_ms": record.latency_ms,
            "latency_target_met": record.latency_ms <= latency_target_ms,
            "failed": record.failed,
        }

    @app.post("/query/stream")
    def query_stream(request: QueryRequest) -> StreamingResponse:
        return StreamingResponse(
            _stream_lines(pipeline, traces, request.query),
            media_type="application/x-ndjson",
        )

    @app.get("/corpus")
    def corpus() -> dict[str, Any]:
        return {"items": [asdict(doc) for doc in pipeline.corpus]}

    @app.post("/corpus/search")
    def corpus_search(request: CorpusSearchRequest) -> dict[str, Any]:
        hits = pipeline.retriever.score(
            [request.query, *request.variants], top_k=request.top_k
        )
        return {
            "items": [
                {
                    "id": hit.document.id,
                    "source": hit.document.source,
                    "score": hit.score,
                    "rank": hit.rank,
                    "content": hit.document.content,
                }
                for hit in hits
            ]
        }

    @app.get("/traces")
    def list_traces(limit: int = 20) -> dict[str, Any]:
        return {"items": [asdict(record) for record in traces.list_recent(limit=limit)]}

    @app.get("/traces/{trace_id}")
    def trace_detail(trace_id: str) -> dict[str, Any]:
        try:
            record = traces.get(trace_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return asdict(record)

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return traces.summary()

    return app


def _stream_lines(
    pipeline: AdaptiveRagOrchestrator, traces: TraceStore, query: str
) -> Iterator[str]:
    step = pipeline.stream_run(query)
    with Timer() as timer:
        while True:
            try:
                event = next(step)
            except StopIteration as stop:
                outcome: RunContext | PipelineError = stop.value
                break
            except PipelineError as exc:
                outcome = exc
                break
            yield json.dumps({"type": "progress", **_event_payload(event)}) + "\n"

    record = _record_outcome(traces, query, outcome, timer.elapsed_ms)
    yield json.dumps(
        {
            "type": "result",
            "answer": record.answer,
            "sources": [asdict(source) for source in record.sources],
            "trace_id": record.trace_id,
            "failed": record.failed,
        }
    ) + "\n"


def _record_outcome(
    traces: TraceStore,
    query: str,
    outcome: RunContext | PipelineError,
    latency_ms: float,
) -> TraceRecord:
    """Store one trace per query, whichever endpoint served it."""
    if isinstance(outcome, PipelineError):
        apology = apology_result()
        return traces.create_record(
            query=query,
            route=outcome.route,
            phases=_phases_from_events(outcome.events),
            answer=apology.answer,
            sources=apology.sources,
            events=outcome.events,
            latency_ms=latency_ms,
            error=str(outcome),
        )
    result = outcome.answer_result()
    return traces.create_record(
        query=query,
        route=outcome.decision,
        phases=outcome.phases,
        answer=result.answer,
        sources=result.sources,
        events=outcome.events,
        latency_ms=latency_ms,
    )


def _event_payload(event: ProgressEvent) -> dict[str, str]:
    return {"phase": event.phase.value, "message": event.message}


def _phases_from_events(events: list[ProgressEvent]) -> list[Phase]:
    phases: list[Phase] = []
    for event in events:
        if not phases or phases[-1] is not event.phase:
            phases.append(event.phase)
    return phases


app = create_app()
