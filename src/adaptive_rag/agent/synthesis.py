"""Terminal answer stages: grounded generation, web search and direct answers.

Gateway errors are not handled here. They propagate to the orchestrator,
which turns them into a `PipelineError`.
"""

from __future__ import annotations

from collections.abc import Sequence

from adaptive_rag.gateway.base import InferenceGateway
from adaptive_rag.steps import Step, drain
from adaptive_rag.types import AnswerResult, Document, Phase, ProgressEvent, Source

_GENERATOR_PROMPT = """
You are a helpful AI assistant. Based on the provided context documents, answer the user's query. Be concise and cite the sources you used from the context. If the context does not contain the answer, say so.

Context:
{context}

User Query: "{query}"
""".strip()

_WEB_SEARCH_PROMPT = """
Answer the following user query based on up-to-date information from the web.
Query: {query}
""".strip()

LOCAL_SOURCE_URI = "#"


def build_generator_prompt(query: str, documents: Sequence[Document]) -> str:
    context = "\n\n".join(f"Source: {doc.source}\nContent: {doc.content}" for doc in documents)
    return _GENERATOR_PROMPT.format(context=context, query=query)


class AnswerGenerator:
    """Synthesizes an answer from graded local documents.

    Every supplied document becomes a source; citations are not checked
    against the text the model actually used.
    """

    def __init__(self, gateway: InferenceGateway) -> None:
        self.gateway = gateway

    def generate(self, query: str, documents: Sequence[Document]) -> AnswerResult:
        result, _ = drain(self.run(query, documents))
        return result

    def run(self, query: str, documents: Sequence[Document]) -> Step[AnswerResult]:
        if not documents:
            raise ValueError("AnswerGenerator requires at least one document")

        yield ProgressEvent(Phase.GENERATING, "Synthesizing final answer from documents...")
        answer = self.gateway.complete_text(build_generator_prompt(query, documents))
        yield ProgressEvent(Phase.GENERATING, "Final answer generated.")
        return AnswerResult(
            answer=answer,
            sources=[Source(title=doc.source, uri=LOCAL_SOURCE_URI) for doc in documents],
        )


class WebSearchAnswerer:
    """Answers from a web-grounded completion, citing the grounding sources."""

    def __init__(self, gateway: InferenceGateway) -> None:
        self.gateway = gateway

    def web_search(self, query: str) -> AnswerResult:
        result, _ = drain(self.run(query))
        return result

    def run(self, query: str) -> Step[AnswerResult]:
        yield ProgressEvent(Phase.WEB_SEARCH, f'Performing web search for: "{query}"')
        completion = self.gateway.complete_grounded(_WEB_SEARCH_PROMPT.format(query=query))
        sources = [Source(title=c.title, uri=c.uri) for c in completion.citations]
        yield ProgressEvent(
            Phase.WEB_SEARCH, f"Web search complete. Found {len(sources)} sources."
        )
        return AnswerResult(answer=completion.text, sources=sources)


class DirectAnswerer:
    """Sends the raw query to the model; direct answers never carry sources."""

    def __init__(self, gateway: InferenceGateway) -> None:
        self.gateway = gateway

    def direct_answer(self, query: str) -> AnswerResult:
        result, _ = drain(self.run(query))
        return result

    def run(self, query: str) -> Step[AnswerResult]:
        yield ProgressEvent(Phase.DIRECT_ANSWER, "Generating a direct response...")
        answer = self.gateway.complete_text(query)
        yield ProgressEvent(Phase.DIRECT_ANSWER, "Direct answer generated.")
        return AnswerResult(answer=answer, sources=[])
