"""Inference gateway contract."""

from __future__ import annotations

from typing import Protocol, TypeVar

from pydantic import BaseModel

from adaptive_rag.gateway.schemas import GroundedCompletion

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class InferenceGateway(Protocol):
    """Minimal completion contract used by every pipeline component.

    Implementations raise `TransientParseError` for structured output that
    does not match its schema and `GatewayUnavailableError` when the backend
    fails. Timeouts and retries are the implementation's concern.
    """

    def complete_text(self, prompt: str) -> str:
        """Free-text completion."""

    def complete_structured(self, prompt: str, schema: type[SchemaT]) -> SchemaT:
        """Completion decoded and validated against a pydantic schema."""

    def complete_grounded(self, prompt: str) -> GroundedCompletion:
        """Web-grounded completion with citations."""
