from adaptive_rag.agent.grader import RelevanceGrader, build_grader_prompt, select_relevant
from adaptive_rag.errors import GatewayUnavailableError
from adaptive_rag.gateway.schemas import GradeResponse
from adaptive_rag.steps import drain
from adaptive_rag.types import Phase


def test_empty_input_short_circuits_without_gateway(exploding_gateway) -> None:
    relevant, events = drain(RelevanceGrader(exploding_gateway).run("q", []))

    assert relevant == []
    assert [(e.phase, e.message) for e in events] == [(Phase.GRADING, "No documents to grade.")]


def test_grader_keeps_documents_named_by_id(scripted_gateway, corpus) -> None:
    docs = [corpus.get("doc2"), corpus.get("doc1"), corpus.get("doc3")]
    gateway = scripted_gateway(structured={GradeResponse: '{"relevant_sources": ["doc2"]}'})

    relevant = RelevanceGrader(gateway).grade("How does useState work?", docs)

    assert [doc.id for doc in relevant] == ["doc2"]


def test_shared_label_selects_every_document_carrying_it(corpus) -> None:
    docs = [corpus.get("doc2"), corpus.get("doc1"), corpus.get("doc3")]

    shared = select_relevant(docs, ["ReactJS Official Docs"])
    unique = select_relevant(docs, ["Tailwind CSS Docs"])

    assert [doc.id for doc in shared] == ["doc2", "doc1"]
    assert [doc.id for doc in unique] == ["doc3"]


def test_ids_and_labels_combine_without_duplicates(corpus) -> None:
    docs = [corpus.get("doc2"), corpus.get("doc1"), corpus.get("doc3")]

    relevant = select_relevant(docs, ["doc2", " ReactJS Official Docs ", ""])

    assert [doc.id for doc in relevant] == ["doc2", "doc1"]


def test_grader_preserves_retrieval_order(corpus) -> None:
    docs = [corpus.get("doc3"), corpus.get("doc1")]

    assert [doc.id for doc in select_relevant(docs, ["doc1", "doc3"])] == ["doc3", "doc1"]


def test_grader_fails_open(scripted_gateway, corpus) -> None:
    docs = [corpus.get("doc2"), corpus.get("doc1")]
    for response in ("not json", GatewayUnavailableError("timeout")):
        gateway = scripted_gateway(structured={GradeResponse: response})

        relevant, events = drain(RelevanceGrader(gateway).run("q", docs))

        assert relevant == docs
        assert events[-1].message == "Error during grading. Assuming all are relevant."


def test_grader_may_return_nothing_relevant(scripted_gateway, corpus) -> None:
    gateway = scripted_gateway(structured={GradeResponse: '{"relevant_sources": []}'})

    assert RelevanceGrader(gateway).grade("q", [corpus.get("doc5")]) == []


def test_prompt_lists_reference_source_and_content(corpus) -> None:
    prompt = build_grader_prompt("q", [corpus.get("doc2")])

    assert "Reference: doc2" in prompt
    assert "Source: ReactJS Official Docs" in prompt
    assert "useEffect" in prompt
