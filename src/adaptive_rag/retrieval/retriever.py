"""Lexical retriever over the static corpus."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from adaptive_rag.config import RetrievalConfig
from adaptive_rag.retrieval.corpus import Corpus
from adaptive_rag.retrieval.scoring import lexical_overlap_score, tokenize_variants
from adaptive_rag.steps import Step
from adaptive_rag.types import Document, Phase, ProgressEvent, ScoredDocument

logger = logging.getLogger(__name__)


class LexicalRetriever:
    """Ranks corpus documents by how many distinct query tokens they contain.

    Documents scoring below `min_score` are never returned. Ties keep corpus
    order because Python's sort is stable, which makes the ranking fully
    deterministic for a fixed corpus and variant set.
    """

    def __init__(self, corpus: Corpus, config: RetrievalConfig | None = None) -> None:
        self.corpus = corpus
        self.config = config or RetrievalConfig()

    def score(
        self, variants: Sequence[str], *, top_k: int | None = None
    ) -> list[ScoredDocument]:
        tokens = tokenize_variants(variants)
        if not tokens:
            return []

        eligible = [
            ScoredDocument(document=doc, score=score)
            for doc in self.corpus
            if (score := lexical_overlap_score(doc, tokens)) >= self.config.min_score
        ]
        ranked = sorted(eligible, key=lambda item: item.score, reverse=True)
        limit = top_k or self.config.top_k
        return [
            ScoredDocument(document=item.document, score=item.score, rank=i + 1)
            for i, item in enumerate(ranked[:limit])
        ]

    def retrieve(self, variants: Sequence[str]) -> list[Document]:
        return [item.document for item in self.score(variants)]

    def run(self, variants: Sequence[str]) -> Step[list[Document]]:
        yield ProgressEvent(Phase.RETRIEVING, "Searching local document store...")
        scored = self.score(variants)
        logger.debug(
            "Retrieved %d documents: %s",
            len(scored),
            ", ".join(f"{item.document.id}={item.score}" for item in scored),
        )
        yield ProgressEvent(
            Phase.RETRIEVING,
            f"Found {len(scored)} potentially relevant documents.",
        )
        return [item.document for item in scored]
