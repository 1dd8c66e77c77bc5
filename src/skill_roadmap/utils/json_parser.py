"""Pull a JSON object out of free-form LLM text."""

from __future__ import annotations

import json

from skill_roadmap.errors import LLMResponseError


def extract_json_object(text: str) -> dict:
    """Return the first JSON object found in ``text``.

    Accepts a bare object, an object wrapped in a ```json fence, or an
    object embedded in prose (first ``{`` through its matching ``}``).
    Anything else raises LLMResponseError.
    """
    if not isinstance(text, str):
        raise LLMResponseError(f"Expected text, got {type(text).__name__}")
    text = text.strip()

    candidates = [text, _strip_code_fences(text)]
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    for candidate in candidates:
        block = _first_balanced_object(candidate)
        if block is None:
            continue
        try:
            parsed = json.loads(block)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise LLMResponseError(f"Could not extract a JSON object from: {text[:200]!r}")


def _strip_code_fences(text: str) -> str:
    lines = text.split("\n")
    if lines and lines[0].strip().startswith("```"):
        lines = lines[1:]
    while lines and lines[-1].strip() in ("```", ""):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def _first_balanced_object(text: str) -> str | None:
    """Slice from the first '{' to the brace that closes it, honoring strings."""
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None
