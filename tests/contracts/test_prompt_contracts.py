from adaptive_rag.agent.grader import build_grader_prompt
from adaptive_rag.agent.router import build_router_prompt
from adaptive_rag.agent.synthesis import build_generator_prompt
from adaptive_rag.retrieval.corpus import default_corpus
from adaptive_rag.types import RouteDecision


def test_router_prompt_defines_every_strategy() -> None:
    prompt = build_router_prompt("Hello")

    for decision in RouteDecision:
        assert f"'{decision.value}'" in prompt
    assert 'User query: "Hello"' in prompt


def test_generator_prompt_requires_concise_cited_answers() -> None:
    corpus = default_corpus()
    prompt = build_generator_prompt("q", [corpus.get("doc1"), corpus.get("doc2")])

    assert "Be concise and cite the sources" in prompt
    assert prompt.count("Source: ReactJS Official Docs") == 2


def test_grader_prompt_distinguishes_documents_sharing_a_label() -> None:
    corpus = default_corpus()
    prompt = build_grader_prompt("q", [corpus.get("doc1"), corpus.get("doc2")])

    assert "Reference: doc1" in prompt
    assert "Reference: doc2" in prompt
