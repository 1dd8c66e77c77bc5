"""Stable fingerprints for analysis-relevant résumé content."""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any

from pydantic import BaseModel

# Keys that change without the content changing.
VOLATILE_KEYS = frozenset(
    {
        "uploaded_at",
        "updated_at",
        "created_at",
        "timestamp",
        "file_path",
        "uploadedAt",
        "updatedAt",
        "createdAt",
        "filePath",
    }
)

_WHITESPACE = re.compile(r"[ \t\f\v]+")


def normalize_text(text: str) -> str:
    """Lower-case, collapse whitespace runs and drop blank lines."""
    lines = (_WHITESPACE.sub(" ", line).strip() for line in text.lower().splitlines())
    return "\n".join(line for line in lines if line)


def _normalize_value(value: Any) -> Any:
    if isinstance(value, str):
        return normalize_text(value)
    if isinstance(value, dict):
        return {
            str(k): _normalize_value(v)
            for k, v in value.items()
            if k not in VOLATILE_KEYS and v is not None
        }
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value]
    return value


def normalize_fields(content: Any) -> Any:
    """``content`` with every string normalized and volatile keys removed.

    Pydantic models are dumped to JSON-compatible data first. Anything
    computed from the result depends only on the content hash.
    """
    if isinstance(content, BaseModel):
        content = content.model_dump(mode="json")
    return _normalize_value(content)


def normalize_content(content: Any) -> str:
    """Canonical text form of ``content`` for hashing.

    Strings are normalized directly. Mappings and pydantic models are
    stripped of volatile keys and ``None`` values, then serialized as
    sorted-key JSON.
    """
    normalized = normalize_fields(content)
    if isinstance(normalized, str):
        return normalized
    return json.dumps(normalized, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def compute_content_hash(content: Any) -> str:
    """SHA-256 hex digest of the normalized content."""
    return hashlib.sha256(normalize_content(content).encode("utf-8")).hexdigest()
