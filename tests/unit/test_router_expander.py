import pytest

from adaptive_rag.agent.expander import QueryExpander
from adaptive_rag.agent.router import QueryRouter
from adaptive_rag.config import AgentConfig
from adaptive_rag.errors import GatewayUnavailableError
from adaptive_rag.gateway.schemas import QueryVariantsResponse, RouteResponse
from adaptive_rag.steps import drain
from adaptive_rag.types import Phase, RouteDecision


@pytest.mark.parametrize("decision", ["direct", "web_search", "vectorstore"])
def test_router_returns_gateway_decision(scripted_gateway, decision: str) -> None:
    gateway = scripted_gateway(structured={RouteResponse: f'{{"decision": "{decision}"}}'})

    assert QueryRouter(gateway).route("anything") is RouteDecision(decision)
    assert gateway.kinds() == ["RouteResponse"]


@pytest.mark.parametrize(
    "response",
    ['{"decision": "search the web"}', "garbage", GatewayUnavailableError("down")],
)
def test_router_defaults_to_vectorstore_on_failure(scripted_gateway, response) -> None:
    gateway = scripted_gateway(structured={RouteResponse: response})

    decision, events = drain(QueryRouter(gateway).run("Hello"))

    assert decision is RouteDecision.VECTORSTORE
    assert [event.phase for event in events] == [Phase.ROUTING, Phase.ROUTING]
    assert events[0].message == 'Analyzing query: "Hello"'
    assert events[1].message == "Error in routing. Defaulting to vectorstore."


def test_router_reports_decision(scripted_gateway) -> None:
    gateway = scripted_gateway(structured={RouteResponse: '{"decision": "direct"}'})

    _, events = drain(QueryRouter(gateway).run("Hello"))

    assert events[-1].message == "Decision: direct."


def test_expander_prepends_original_query(scripted_gateway) -> None:
    gateway = scripted_gateway(
        structured={QueryVariantsResponse: '{"queries": ["What are React hooks?", " ", "useState usage"]}'}
    )

    variants = QueryExpander(gateway).expand("How does useState work?")

    assert variants == ["How does useState work?", "What are React hooks?", "useState usage"]


def test_expander_caps_variant_count(scripted_gateway) -> None:
    gateway = scripted_gateway(
        structured={QueryVariantsResponse: '{"queries": ["a", "b", "c", "d", "e"]}'}
    )

    variants = QueryExpander(gateway, AgentConfig(num_query_variants=2)).expand("q")

    assert variants == ["q", "a", "b"]


@pytest.mark.parametrize("query", ["", "How does useState work?"])
def test_expander_degrades_to_original_query(scripted_gateway, query: str) -> None:
    gateway = scripted_gateway(structured={QueryVariantsResponse: "{not json"})

    variants, events = drain(QueryExpander(gateway).run(query))

    assert variants == [query]
    assert events[-1].message == "Could not generate sub-queries. Using original query."


def test_expander_disabled_skips_gateway(exploding_gateway) -> None:
    expander = QueryExpander(exploding_gateway, AgentConfig(num_query_variants=0))

    assert expander.expand("q") == ["q"]
