"""Finite-state machine describing the pipeline control path."""

from __future__ import annotations

from enum import Enum

from adaptive_rag.errors import InvalidTransitionError
from adaptive_rag.types import Phase, RouteDecision


class Signal(str, Enum):
    """Outcome reported by a step; drives the next transition."""

    START = "start"
    ROUTED_DIRECT = "routed_direct"
    ROUTED_WEB_SEARCH = "routed_web_search"
    ROUTED_VECTORSTORE = "routed_vectorstore"
    EXPANDED = "expanded"
    RETRIEVED = "retrieved"
    GRADED_RELEVANT = "graded_relevant"
    GRADED_EMPTY = "graded_empty"
    ANSWERED = "answered"


_TRANSITIONS: dict[tuple[Phase, Signal], Phase] = {
    (Phase.IDLE, Signal.START): Phase.ROUTING,
    (Phase.ROUTING, Signal.ROUTED_DIRECT): Phase.DIRECT_ANSWER,
    (Phase.ROUTING, Signal.ROUTED_WEB_SEARCH): Phase.WEB_SEARCH,
    (Phase.ROUTING, Signal.ROUTED_VECTORSTORE): Phase.GENERATE_QUERIES,
    (Phase.GENERATE_QUERIES, Signal.EXPANDED): Phase.RETRIEVING,
    (Phase.RETRIEVING, Signal.RETRIEVED): Phase.GRADING,
    (Phase.GRADING, Signal.GRADED_RELEVANT): Phase.GENERATING,
    (Phase.GRADING, Signal.GRADED_EMPTY): Phase.WEB_SEARCH,
    (Phase.GENERATING, Signal.ANSWERED): Phase.FINISHED,
    (Phase.WEB_SEARCH, Signal.ANSWERED): Phase.FINISHED,
    (Phase.DIRECT_ANSWER, Signal.ANSWERED): Phase.FINISHED,
}

TERMINAL_STAGES = frozenset({Phase.GENERATING, Phase.WEB_SEARCH, Phase.DIRECT_ANSWER})

_ROUTE_SIGNALS = {
    RouteDecision.DIRECT: Signal.ROUTED_DIRECT,
    RouteDecision.WEB_SEARCH: Signal.ROUTED_WEB_SEARCH,
    RouteDecision.VECTORSTORE: Signal.ROUTED_VECTORSTORE,
}


def transition(phase: Phase, signal: Signal) -> Phase:
    """Return the phase reached from `phase` on `signal`."""
    next_phase = _TRANSITIONS.get((phase, signal))
    if next_phase is None:
        raise InvalidTransitionError(f"No transition from {phase.value} on {signal.value}")
    return next_phase


def route_signal(decision: RouteDecision) -> Signal:
    return _ROUTE_SIGNALS[decision]
