"""Generator-based pipeline steps.

A step is a generator that yields `ProgressEvent`s while it works and
returns its result through `StopIteration`. Steps compose with
`yield from`, so the orchestrator forwards every event in order without a
shared callback.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import TypeVar

from adaptive_rag.types import ProgressEvent

T = TypeVar("T")

Step = Generator[ProgressEvent, None, T]


def drain(
    step: Step[T],
    on_progress: Callable[[ProgressEvent], None] | None = None,
) -> tuple[T, list[ProgressEvent]]:
    """Run a step to completion and return `(result, events)`."""

    events: list[ProgressEvent] = []
    while True:
        try:
            event = next(step)
        except StopIteration as stop:
            return stop.value, events
        events.append(event)
        if on_progress is not None:
            on_progress(event)
