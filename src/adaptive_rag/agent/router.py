"""Top-level strategy router."""

from __future__ import annotations

import logging

from adaptive_rag.errors import GatewayError
from adaptive_rag.gateway.base import InferenceGateway
from adaptive_rag.gateway.schemas import RouteResponse
from adaptive_rag.steps import Step, drain
from adaptive_rag.types import Phase, ProgressEvent, RouteDecision

logger = logging.getLogger(__name__)

_ROUTER_PROMPT = """
Based on the user query, decide the best path to answer it. The options are:
1) 'web_search': For queries about recent events, news, or specific real-time information.
2) 'vectorstore': For queries about technology topics like React, Tailwind CSS, Gemini API, or general knowledge that might be in a database.
3) 'direct': For simple greetings, conversational questions, or questions that don't require external knowledge.

User query: "{query}"
""".strip()

DEFAULT_ROUTE = RouteDecision.VECTORSTORE


def build_router_prompt(query: str) -> str:
    return _ROUTER_PROMPT.format(query=query)


class QueryRouter:
    """Classifies a query into direct, web search or local retrieval.

    Any gateway failure routes to the local store, the only branch with its
    own grading and web-search fallback.
    """

    def __init__(self, gateway: InferenceGateway) -> None:
        self.gateway = gateway

    def route(self, query: str) -> RouteDecision:
        decision, _ = drain(self.run(query))
        return decision

    def run(self, query: str) -> Step[RouteDecision]:
        yield ProgressEvent(Phase.ROUTING, f'Analyzing query: "{query}"')
        try:
            response = self.gateway.complete_structured(
                build_router_prompt(query), RouteResponse
            )
        except GatewayError as exc:
            logger.warning("Routing failed, defaulting to %s: %s", DEFAULT_ROUTE.value, exc)
            yield ProgressEvent(
                Phase.ROUTING,
                f"Error in routing. Defaulting to {DEFAULT_ROUTE.value}.",
            )
            return DEFAULT_ROUTE

        logger.info("Routed query to %s", response.decision.value)
        yield ProgressEvent(Phase.ROUTING, f"Decision: {response.decision.value}.")
        return response.decision
