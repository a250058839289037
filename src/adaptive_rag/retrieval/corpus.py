"""Static, read-only document corpus."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from adaptive_rag.types import Document

_DEFAULT_DOCUMENTS: tuple[Document, ...] = (
    Document(
        id="doc1",
        source="ReactJS Official Docs",
        content=(
            "React is a JavaScript library for building user interfaces. It uses a "
            "component-based architecture, allowing developers to create encapsulated "
            "components that manage their own state. State changes trigger re-renders "
            "of the component and its children."
        ),
    ),
    Document(
        id="doc2",
        source="ReactJS Official Docs",
        content=(
            "Hooks are functions that let you “hook into” React state and "
            "lifecycle features from function components. The most common hooks are "
            "useState for managing local state and useEffect for performing side effects."
        ),
    ),
    Document(
        id="doc3",
        source="Tailwind CSS Docs",
        content=(
            "Tailwind CSS is a utility-first CSS framework for rapidly building custom "
            "user interfaces. It provides low-level utility classes that let you build "
            "completely custom designs without ever leaving your HTML."
        ),
    ),
    Document(
        id="doc4",
        source="Gemini API Docs",
        content=(
            "The Gemini API provides access to Google's latest generation of large "
            "language models. It supports multimodal queries, function calling, and "
            "embedded computations for a wide range of applications."
        ),
    ),
    Document(
        id="doc5",
        source="General Knowledge Base",
        content=(
            "The sky appears blue to the human eye because of a phenomenon called "
            "Rayleigh scattering. Short-wavelength blue light is scattered more "
            "effectively by the tiny molecules of air in Earth's atmosphere than "
            "long-wavelength red light."
        ),
    ),
)


class Corpus:
    """Ordered, immutable document collection shared by all pipeline runs."""

    def __init__(self, documents: Iterable[Document]) -> None:
        docs = tuple(documents)
        seen: set[str] = set()
        for doc in docs:
            if doc.id in seen:
                raise ValueError(f"Duplicate document id in corpus: {doc.id}")
            seen.add(doc.id)
        self._documents = docs

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "Corpus":
        documents: list[Document] = []
        for index, record in enumerate(records):
            try:
                documents.append(
                    Document(
                        id=str(record["id"]),
                        source=str(record["source"]),
                        content=str(record["content"]),
                    )
                )
            except (KeyError, TypeError) as exc:
                raise ValueError(f"Invalid corpus record at index {index}: {exc}") from exc
        return cls(documents)

    @classmethod
    def from_json(cls, path: str | Path) -> "Corpus":
        """Load a corpus from a JSON list of `{id, source, content}` objects."""
        payload: Any = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, list):
            raise ValueError(f"Corpus file must contain a JSON list: {path}")
        return cls.from_records(payload)

    @property
    def documents(self) -> tuple[Document, ...]:
        return self._documents

    def get(self, doc_id: str) -> Document:
        for doc in self._documents:
            if doc.id == doc_id:
                return doc
        raise KeyError(f"Document not found: {doc_id}")

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)


def default_corpus() -> Corpus:
    return Corpus(_DEFAULT_DOCUMENTS)
