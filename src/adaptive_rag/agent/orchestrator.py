"""Adaptive RAG orchestrator."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from adaptive_rag.agent.expander import QueryExpander
from adaptive_rag.agent.grader import RelevanceGrader
from adaptive_rag.agent.router import QueryRouter
from adaptive_rag.agent.state_machine import (
    TERMINAL_STAGES,
    Signal,
    route_signal,
    transition,
)
from adaptive_rag.agent.synthesis import AnswerGenerator, DirectAnswerer, WebSearchAnswerer
from adaptive_rag.config import AgentConfig, RetrievalConfig
from adaptive_rag.errors import GatewayError, PipelineError
from adaptive_rag.gateway.base import InferenceGateway
from adaptive_rag.retrieval.corpus import Corpus
from adaptive_rag.retrieval.retriever import LexicalRetriever
from adaptive_rag.steps import Step, drain
from adaptive_rag.types import (
    AnswerResult,
    Document,
    Phase,
    ProgressEvent,
    RouteDecision,
)

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = "Sorry, I encountered an error while answering. Please try again."


@dataclass(slots=True)
class RunContext:
    """Mutable state of a single pipeline run, owned by that run only."""

    query: str
    decision: RouteDecision | None = None
    variants: list[str] = field(default_factory=list)
    retrieved: list[Document] = field(default_factory=list)
    relevant: list[Document] = field(default_factory=list)
    result: AnswerResult | None = None
    phases: list[Phase] = field(default_factory=list)
    events: list[ProgressEvent] = field(default_factory=list)

    def answer_result(self) -> AnswerResult:
        if self.result is None:
            raise RuntimeError(f"Run for {self.query!r} finished without an answer")
        return self.result


class AdaptiveRagOrchestrator:
    """Runs one query through route -> (expand -> retrieve -> grade) -> answer.

    Control follows the transition table in `state_machine`. Each phase has
    one step; a step yields progress events and returns the signal for the
    next transition. Routing, expansion and grading never fail the run.
    Gateway errors in the answering stages raise `PipelineError`.

    The instance holds no per-query state, so one orchestrator can serve
    concurrent queries that share its gateway and corpus.
    """

    def __init__(
        self,
        *,
        gateway: InferenceGateway,
        corpus: Corpus,
        retrieval_config: RetrievalConfig | None = None,
        agent_config: AgentConfig | None = None,
    ) -> None:
        self.gateway = gateway
        self.corpus = corpus
        self.agent_config = agent_config or AgentConfig()

        self.router = QueryRouter(gateway)
        self.expander = QueryExpander(gateway, self.agent_config)
        self.retriever = LexicalRetriever(corpus, retrieval_config)
        self.grader = RelevanceGrader(gateway)
        self.generator = AnswerGenerator(gateway)
        self.web_search = WebSearchAnswerer(gateway)
        self.direct = DirectAnswerer(gateway)

        self._steps: dict[Phase, Callable[[RunContext], Step[Signal]]] = {
            Phase.ROUTING: self._route_step,
            Phase.GENERATE_QUERIES: self._expand_step,
            Phase.RETRIEVING: self._retrieve_step,
            Phase.GRADING: self._grade_step,
            Phase.GENERATING: self._generate_step,
            Phase.WEB_SEARCH: self._web_search_step,
            Phase.DIRECT_ANSWER: self._direct_step,
        }

    def stream(self, query: str) -> Step[AnswerResult]:
        """Yield progress events for `query` and return its `AnswerResult`."""
        run = yield from self.stream_run(query)
        return run.answer_result()

    def stream_run(self, query: str) -> Step[RunContext]:
        """Yield progress events for `query` and return the full run record."""
        return self._run(RunContext(query=query))

    def execute(
        self,
        query: str,
        on_progress: Callable[[ProgressEvent], None] | None = None,
    ) -> RunContext:
        """Run `query` to completion and return the full run record."""
        run, _ = drain(self.stream_run(query), on_progress)
        return run

    def process_query(
        self,
        query: str,
        on_progress: Callable[[ProgressEvent], None] | None = None,
    ) -> AnswerResult:
        result, _ = drain(self.stream(query), on_progress)
        return result

    def _run(self, run: RunContext) -> Step[RunContext]:
        phase = transition(Phase.IDLE, Signal.START)
        while phase is not Phase.FINISHED:
            run.phases.append(phase)
            step = self._steps[phase](run)
            try:
                signal = yield from self._record(run, step)
            except GatewayError as exc:
                if phase not in TERMINAL_STAGES:
                    raise
                logger.error("Pipeline failed in %s: %s", phase.value, exc)
                raise PipelineError(
                    f"{phase.value} failed: {exc}",
                    phase=phase,
                    events=run.events,
                    route=run.decision,
                ) from exc
            phase = transition(phase, signal)
        run.phases.append(Phase.FINISHED)
        logger.info(
            "Query finished via %s", " -> ".join(p.value for p in run.phases)
        )
        return run

    @staticmethod
    def _record(run: RunContext, step: Step[Signal]) -> Step[Signal]:
        while True:
            try:
                event = next(step)
            except StopIteration as stop:
                return stop.value
            run.events.append(event)
            yield event

    def _route_step(self, run: RunContext) -> Step[Signal]:
        run.decision = yield from self.router.run(run.query)
        return route_signal(run.decision)

    def _expand_step(self, run: RunContext) -> Step[Signal]:
        run.variants = yield from self.expander.run(run.query)
        return Signal.EXPANDED

    def _retrieve_step(self, run: RunContext) -> Step[Signal]:
        run.retrieved = yield from self.retriever.run(run.variants)
        return Signal.RETRIEVED

    def _grade_step(self, run: RunContext) -> Step[Signal]:
        run.relevant = yield from self.grader.run(run.query, run.retrieved)
        if run.relevant:
            return Signal.GRADED_RELEVANT
        yield ProgressEvent(
            Phase.GRADING,
            "No relevant documents found in vector store. Falling back to web search.",
        )
        return Signal.GRADED_EMPTY

    def _generate_step(self, run: RunContext) -> Step[Signal]:
        run.result = yield from self.generator.run(run.query, run.relevant)
        return Signal.ANSWERED

    def _web_search_step(self, run: RunContext) -> Step[Signal]:
        run.result = yield from self.web_search.run(run.query)
        return Signal.ANSWERED

    def _direct_step(self, run: RunContext) -> Step[Signal]:
        run.result = yield from self.direct.run(run.query)
        return Signal.ANSWERED


def apology_result() -> AnswerResult:
    return AnswerResult(answer=APOLOGY_MESSAGE, sources=[])
