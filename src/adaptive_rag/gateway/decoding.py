"""Strict decoding of structured model output."""

from __future__ import annotations

import json
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from adaptive_rag.errors import TransientParseError

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_FENCE = re.compile(r"^```[a-zA-Z0-9_-]*\s*|\s*```$")


def schema_instructions(schema: type[BaseModel]) -> str:
    return (
        "Respond with a single JSON object and nothing else. "
        "It must validate against this JSON schema:\n"
        + json.dumps(schema.model_json_schema(), ensure_ascii=False)
    )


def extract_json_object(raw: str) -> str:
    """Strip code fences and preamble text around the outermost JSON object."""

    text = _FENCE.sub("", raw.strip()).strip()
    if text.startswith("{") and text.endswith("}"):
        return text
    start = text.find("{")
    end = text.rfind("}") + 1
    if start >= 0 and end > start:
        return text[start:end]
    return text


def decode_structured(raw: str, schema: type[SchemaT]) -> SchemaT:
    """Validate `raw` against `schema` or raise `TransientParseError`."""

    if not raw or not raw.strip():
        raise TransientParseError(f"Empty response for {schema.__name__}", raw=raw)
    try:
        return schema.model_validate_json(extract_json_object(raw))
    except ValidationError as exc:
        raise TransientParseError(
            f"Response does not match {schema.__name__}: {exc.error_count()} error(s)",
            raw=raw,
        ) from exc
