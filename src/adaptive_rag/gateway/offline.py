"""Deterministic gateway used when no inference backend is configured."""

from __future__ import annotations

import re

from adaptive_rag.errors import GatewayUnavailableError, TransientParseError
from adaptive_rag.gateway.base import SchemaT
from adaptive_rag.gateway.schemas import GroundedCompletion

_CONTEXT_SECTION = re.compile(r"Context:\s*(?P<body>.+?)\s*User Query:", flags=re.DOTALL)
_CONTENT_LINE = re.compile(r"^Content:\s*(?P<text>.+)$", flags=re.MULTILINE)


class OfflineGateway:
    """Gateway without LLM dependency.

    Structured completions are never available, so every stage with a safe
    default takes it: routing falls to the local store, expansion keeps the
    original query and grading keeps every retrieved document. Text
    completions answer extractively from the context section of the prompt.
    Web search is unavailable.
    """

    def complete_text(self, prompt: str) -> str:
        match = _CONTEXT_SECTION.search(prompt)
        if match is None:
            return "No inference backend is configured, so only indexed documents can be searched."

        lines = [
            line.group("text").strip()
            for line in _CONTENT_LINE.finditer(match.group("body"))
        ]
        if not lines:
            return "No inference backend is configured and no document content was supplied."
        return "\n".join(f"{idx}. {text}" for idx, text in enumerate(lines, start=1))

    def complete_structured(self, prompt: str, schema: type[SchemaT]) -> SchemaT:
        raise TransientParseError(
            f"Structured output for {schema.__name__} is unavailable offline"
        )

    def complete_grounded(self, prompt: str) -> GroundedCompletion:
        raise GatewayUnavailableError("Web search is unavailable offline")
