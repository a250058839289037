"""Pydantic schemas for structured and grounded gateway responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from adaptive_rag.types import RouteDecision


class RouteResponse(BaseModel):
    decision: RouteDecision = Field(
        description="The chosen path: 'web_search', 'vectorstore', or 'direct'."
    )


class QueryVariantsResponse(BaseModel):
    queries: list[str] = Field(
        description="Alternative phrasings of the user query for retrieval."
    )


class GradeResponse(BaseModel):
    relevant_sources: list[str] = Field(
        default_factory=list,
        description="References of the documents that are relevant to the query.",
    )


class Citation(BaseModel):
    title: str
    uri: str


class GroundedCompletion(BaseModel):
    """Text answer plus the web citations the backend grounded it on."""

    text: str
    citations: list[Citation] = Field(default_factory=list)
