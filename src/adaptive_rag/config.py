"""Configuration models for the adaptive RAG system."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RetrievalConfig(BaseModel):
    """Configures lexical retrieval over the local corpus."""

    top_k: int = Field(default=3, ge=1)
    min_score: int = Field(default=1, ge=1)


class AgentConfig(BaseModel):
    """Configures query expansion and latency targets."""

    num_query_variants: int = Field(default=3, ge=0)
    target_latency_seconds: float = Field(default=8.0, gt=0.0)


class GatewayConfig(BaseModel):
    """Configures the chat model behind the LangChain gateway."""

    model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0)
