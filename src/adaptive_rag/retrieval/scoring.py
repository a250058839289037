"""Lexical overlap scoring used as a stand-in for semantic relevance."""

from __future__ import annotations

import string
from collections.abc import Iterable

from adaptive_rag.types import Document

_STRIP_CHARS = string.punctuation + "“”‘’"


def tokenize_variants(variants: Iterable[str]) -> frozenset[str]:
    """Return the unique case-folded whitespace tokens across all variants.

    Leading and trailing punctuation is stripped so that `"useState?"`
    contributes `"usestate"`; tokens left empty are dropped.
    """

    tokens: set[str] = set()
    for variant in variants:
        for raw in variant.casefold().split():
            token = raw.strip(_STRIP_CHARS)
            if token:
                tokens.add(token)
    return frozenset(tokens)


def lexical_overlap_score(document: Document, tokens: Iterable[str]) -> int:
    """Count distinct tokens contained anywhere in the document content.

    Matching is plain substring containment, so "art" matches "start".
    """

    content = document.content.casefold()
    return sum(1 for token in set(tokens) if token in content)
