"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class RouteDecision(str, Enum):
    """Top-level answering strategy chosen by the router."""

    DIRECT = "direct"
    WEB_SEARCH = "web_search"
    VECTORSTORE = "vectorstore"


class Phase(str, Enum):
    """Pipeline phases reported to progress observers."""

    IDLE = "IDLE"
    ROUTING = "ROUTING"
    GENERATE_QUERIES = "GENERATE_QUERIES"
    RETRIEVING = "RETRIEVING"
    GRADING = "GRADING"
    GENERATING = "GENERATING"
    WEB_SEARCH = "WEB_SEARCH"
    DIRECT_ANSWER = "DIRECT_ANSWER"
    FINISHED = "FINISHED"


@dataclass(frozen=True, slots=True, eq=False)
class Document:
    """A corpus document. Two documents are the same document iff ids match."""

    id: str
    source: str
    content: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(slots=True)
class ScoredDocument:
    """A retrieval candidate with its lexical overlap score."""

    document: Document
    score: int
    rank: int = 0


@dataclass(frozen=True, slots=True)
class Source:
    """A citation attached to an answer."""

    title: str
    uri: str


@dataclass(slots=True)
class AnswerResult:
    """Terminal output of one pipeline run."""

    answer: str
    sources: list[Source] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """Phase-change notification emitted while a query is processed."""

    phase: Phase
    message: str
