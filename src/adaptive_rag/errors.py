"""Exception hierarchy for the adaptive RAG pipeline."""

from __future__ import annotations

from adaptive_rag.types import Phase, ProgressEvent, RouteDecision


class AdaptiveRagError(Exception):
    """Base class for all package errors."""


class GatewayError(AdaptiveRagError):
    """An inference gateway call did not produce a usable response."""


class TransientParseError(GatewayError):
    """Structured gateway output could not be decoded into its schema."""

    def __init__(self, message: str, *, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class GatewayUnavailableError(GatewayError):
    """The inference backend failed or could not be reached."""


class PipelineError(AdaptiveRagError):
    """A terminal stage failed; the run produced no answer.

    `events` holds the progress stream emitted up to the failure so callers
    can still show diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        phase: Phase,
        events: list[ProgressEvent] | None = None,
        route: RouteDecision | None = None,
    ) -> None:
        super().__init__(message)
        self.phase = phase
        self.events: list[ProgressEvent] = list(events or [])
        self.route = route


class InvalidTransitionError(AdaptiveRagError):
    """The state machine received a signal that is not valid for its phase."""
