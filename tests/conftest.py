from __future__ import annotations

from typing import Any

import pytest
from pydantic import BaseModel

from adaptive_rag.gateway.decoding import decode_structured
from adaptive_rag.gateway.schemas import GroundedCompletion
from adaptive_rag.retrieval.corpus import Corpus, default_corpus


class ScriptedGateway:
    """In-memory gateway returning canned responses and recording every call.

    `structured` maps a schema class to a raw JSON string (decoded strictly),
    a schema instance, or an exception to raise.
    """

    def __init__(
        self,
        *,
        structured: dict[type[BaseModel], Any] | None = None,
        text: Any = "scripted answer",
        grounded: Any = None,
    ) -> None:
        self.structured = structured or {}
        self.text = text
        self.grounded = grounded if grounded is not None else GroundedCompletion(text="web answer")
        self.calls: list[tuple[str, str]] = []

    def complete_text(self, prompt: str) -> str:
        self.calls.append(("text", prompt))
        if isinstance(self.text, Exception):
            raise self.text
        return self.text

    def complete_structured(self, prompt: str, schema: type[BaseModel]) -> Any:
        self.calls.append((schema.__name__, prompt))
        response = self.structured.get(schema, "")
        if isinstance(response, Exception):
            raise response
        if isinstance(response, BaseModel):
            return response
        return decode_structured(response, schema)

    def complete_grounded(self, prompt: str) -> GroundedCompletion:
        self.calls.append(("grounded", prompt))
        if isinstance(self.grounded, Exception):
            raise self.grounded
        return self.grounded

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.calls]


class ExplodingGateway:
    """Fails the test if any gateway method is called."""

    def complete_text(self, prompt: str) -> str:
        raise AssertionError("complete_text must not be called")

    def complete_structured(self, prompt: str, schema: type[BaseModel]) -> Any:
        raise AssertionError("complete_structured must not be called")

    def complete_grounded(self, prompt: str) -> GroundedCompletion:
        raise AssertionError("complete_grounded must not be called")


@pytest.fixture
def scripted_gateway() -> type[ScriptedGateway]:
    return ScriptedGateway


@pytest.fixture
def exploding_gateway() -> ExplodingGateway:
    return ExplodingGateway()


@pytest.fixture
def corpus() -> Corpus:
    return default_corpus()
