"""LangChain-backed inference gateway."""

from __future__ import annotations

import logging
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage

from adaptive_rag.errors import GatewayUnavailableError
from adaptive_rag.gateway.base import SchemaT
from adaptive_rag.gateway.decoding import decode_structured, schema_instructions
from adaptive_rag.gateway.schemas import Citation, GroundedCompletion

logger = logging.getLogger(__name__)


class LangChainGateway:
    """Adapts LangChain chat models to the `InferenceGateway` contract.

    `llm` serves text and structured completions. `grounded_llm` must be a
    runnable with web search enabled (for example a `ChatOpenAI` bound to the
    `web_search_preview` tool, or a Gemini model bound to `google_search`);
    it defaults to `llm`, in which case grounded answers carry no citations.
    """

    def __init__(self, llm: BaseChatModel, *, grounded_llm: Any | None = None) -> None:
        self.llm = llm
        self.grounded_llm = grounded_llm if grounded_llm is not None else llm

    def complete_text(self, prompt: str) -> str:
        return message_text(self._invoke(self.llm, prompt))

    def complete_structured(self, prompt: str, schema: type[SchemaT]) -> SchemaT:
        message = self._invoke(self.llm, f"{prompt}\n\n{schema_instructions(schema)}")
        return decode_structured(message_text(message), schema)

    def complete_grounded(self, prompt: str) -> GroundedCompletion:
        message = self._invoke(self.grounded_llm, prompt)
        return GroundedCompletion(
            text=message_text(message),
            citations=extract_citations(message),
        )

    @staticmethod
    def _invoke(runnable: Any, prompt: str) -> Any:
        try:
            return runnable.invoke([HumanMessage(content=prompt)])
        except Exception as exc:
            logger.warning("Gateway call failed: %s", exc)
            raise GatewayUnavailableError(str(exc)) from exc


def message_text(message: Any) -> str:
    """Flatten the text content of a chat message (string or content blocks)."""

    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type", "text") == "text":
                parts.append(str(item.get("text", "")))
        return "".join(parts).strip()
    return str(content).strip()


def extract_citations(message: Any) -> list[Citation]:
    """Collect web citations from OpenAI annotations or Gemini grounding metadata."""

    citations: list[Citation] = []
    seen: set[str] = set()

    def _add(title: Any, uri: Any) -> None:
        if not uri or str(uri) in seen:
            return
        seen.add(str(uri))
        citations.append(Citation(title=str(title or uri), uri=str(uri)))

    content = getattr(message, "content", None)
    if isinstance(content, list):
        for block in content:
            if not isinstance(block, dict):
                continue
            for annotation in block.get("annotations", None) or []:
                if isinstance(annotation, dict) and annotation.get("type") in {
                    "url_citation",
                    "citation",
                }:
                    _add(annotation.get("title"), annotation.get("url"))

    metadata = getattr(message, "response_metadata", None) or {}
    grounding = metadata.get("grounding_metadata") or {}
    for chunk in grounding.get("grounding_chunks", None) or []:
        web = chunk.get("web") if isinstance(chunk, dict) else None
        if isinstance(web, dict):
            _add(web.get("title"), web.get("uri"))

    return citations
