"""Adaptive RAG package."""

from .config import AgentConfig, GatewayConfig, RetrievalConfig

__all__ = ["AgentConfig", "GatewayConfig", "RetrievalConfig"]
