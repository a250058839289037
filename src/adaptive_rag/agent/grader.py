"""Relevance grading of retrieved documents."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from adaptive_rag.errors import GatewayError
from adaptive_rag.gateway.base import InferenceGateway
from adaptive_rag.gateway.schemas import GradeResponse
from adaptive_rag.steps import Step, drain
from adaptive_rag.types import Document, Phase, ProgressEvent

logger = logging.getLogger(__name__)

_GRADER_PROMPT = """
Given the user query and the retrieved documents, identify which documents are relevant to answer the query. Return the references (for example "doc2") of the relevant documents.

User Query: "{query}"

Documents:
{documents}
""".strip()


def build_grader_prompt(query: str, documents: Sequence[Document]) -> str:
    blocks = "\n---\n".join(
        f"Reference: {doc.id}\nSource: {doc.source}\nContent: {doc.content}"
        for doc in documents
    )
    return _GRADER_PROMPT.format(query=query, documents=blocks)


def select_relevant(
    documents: Sequence[Document], references: Sequence[str]
) -> list[Document]:
    """Keep documents named by id or by source label, in retrieval order.

    A label shared by several candidates selects all of them.
    """

    wanted = {ref.strip() for ref in references if ref.strip()}
    return [doc for doc in documents if doc.id in wanted or doc.source in wanted]


class RelevanceGrader:
    """Filters retrieval candidates with one structured completion.

    Grading fails open: when the gateway output is unusable every candidate
    is treated as relevant.
    """

    def __init__(self, gateway: InferenceGateway) -> None:
        self.gateway = gateway

    def grade(self, query: str, documents: Sequence[Document]) -> list[Document]:
        relevant, _ = drain(self.run(query, documents))
        return relevant

    def run(self, query: str, documents: Sequence[Document]) -> Step[list[Document]]:
        if not documents:
            yield ProgressEvent(Phase.GRADING, "No documents to grade.")
            return []

        yield ProgressEvent(
            Phase.GRADING, f"Assessing relevance of {len(documents)} documents..."
        )
        try:
            response = self.gateway.complete_structured(
                build_grader_prompt(query, documents), GradeResponse
            )
        except GatewayError as exc:
            logger.warning("Grading failed, keeping all %d documents: %s", len(documents), exc)
            yield ProgressEvent(
                Phase.GRADING, "Error during grading. Assuming all are relevant."
            )
            return list(documents)

        relevant = select_relevant(documents, response.relevant_sources)
        yield ProgressEvent(Phase.GRADING, f"Found {len(relevant)} relevant documents.")
        return relevant
