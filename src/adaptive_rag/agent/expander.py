"""Query expansion for RAG fusion."""

from __future__ import annotations

import logging

from adaptive_rag.config import AgentConfig
from adaptive_rag.errors import GatewayError
from adaptive_rag.gateway.base import InferenceGateway
from adaptive_rag.gateway.schemas import QueryVariantsResponse
from adaptive_rag.steps import Step, drain
from adaptive_rag.types import Phase, ProgressEvent

logger = logging.getLogger(__name__)

_EXPANSION_PROMPT = """
You are an expert at query expansion. Take the following user query and generate {count} different versions of it to improve search retrieval. The queries should be diverse but semantically similar.

Original Query: "{query}"
""".strip()


class QueryExpander:
    """Produces paraphrases of a query; the original always comes first."""

    def __init__(self, gateway: InferenceGateway, config: AgentConfig | None = None) -> None:
        self.gateway = gateway
        self.config = config or AgentConfig()

    def expand(self, query: str) -> list[str]:
        variants, _ = drain(self.run(query))
        return variants

    def run(self, query: str) -> Step[list[str]]:
        yield ProgressEvent(
            Phase.GENERATE_QUERIES, "Generating sub-queries for RAG Fusion..."
        )
        if self.config.num_query_variants == 0:
            yield ProgressEvent(
                Phase.GENERATE_QUERIES, "Query expansion disabled. Using original query."
            )
            return [query]

        prompt = _EXPANSION_PROMPT.format(count=self.config.num_query_variants, query=query)
        try:
            response = self.gateway.complete_structured(prompt, QueryVariantsResponse)
        except GatewayError as exc:
            logger.warning("Query expansion failed, using original query: %s", exc)
            yield ProgressEvent(
                Phase.GENERATE_QUERIES,
                "Could not generate sub-queries. Using original query.",
            )
            return [query]

        extra = [q.strip() for q in response.queries if q.strip()]
        variants = [query, *extra[: self.config.num_query_variants]]
        yield ProgressEvent(
            Phase.GENERATE_QUERIES,
            f"Generated {len(variants)} queries: {', '.join(variants)}",
        )
        return variants
