"""Lenient JSON extraction from LLM responses."""

import json
import re
from typing import Any

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

# strict=False lets raw newlines/tabs through inside strings, which models
# emit often enough to matter.
_LENIENT_DECODER = json.JSONDecoder(strict=False)


def _candidates(text: str):
    yield text
    fence = _JSON_FENCE_RE.search(text)
    if fence:
        yield fence.group(1).strip()
    for open_char, close_char in (("{", "}"), ("[", "]")):
        start = text.find(open_char)
        end = text.rfind(close_char)
        if start != -1 and end > start:
            yield text[start:end + 1]


def extract_json(text: str) -> Any:
    """Parse the first JSON document found in ``text``.

    Tries the raw text, then a fenced code block, then the outermost
    object/array boundaries.

    Raises:
        ValueError: If no candidate parses.
    """
    text = (text or "").strip()
    for candidate in _candidates(text):
        try:
            return _LENIENT_DECODER.decode(candidate)
        except json.JSONDecodeError:
            continue
    raise ValueError(f"Failed to parse JSON from LLM response: {text[:200]}...")


def parse_json_object(text: str) -> dict:
    """Parse a JSON object, unwrapping a single-object list if needed."""
    result = extract_json(text)
    if isinstance(result, dict):
        return result
    if isinstance(result, list):
        for item in result:
            if isinstance(item, dict):
                return item
        return {"items": result}
    return {"value": result}


def parse_json_list(text: str, key: str = "items") -> list:
    """Parse a JSON list, also accepting an object wrapping it under ``key``."""
    result = extract_json(text)
    if isinstance(result, list):
        return result
    if isinstance(result, dict):
        value = result.get(key)
        if isinstance(value, list):
            return value
        return [result]
    return [result]


def as_str_list(value: Any) -> list[str]:
    """Coerce a JSON value into a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return [str(value)]


def as_text(value: Any) -> str:
    """Coerce a JSON value into display text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        return "; ".join(as_str_list(value))
    return str(value)
