from __future__ import annotations

import json
import re
from collections.abc import Iterator
from typing import Any

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_JSON_OPENER_RE = re.compile(r"[\[{]")
_DECODER = json.JSONDecoder()


def _chunks(text: str) -> Iterator[str]:
    # fenced blocks first, then the whole reply
    for match in _CODE_FENCE_RE.finditer(text):
        yield match.group(1).strip()
    yield text


def _first_value(chunk: str) -> dict[str, Any] | list[Any] | None:
    for opener in _JSON_OPENER_RE.finditer(chunk):
        try:
            value, _ = _DECODER.raw_decode(chunk, opener.start())
        except json.JSONDecodeError:
            continue
        return value
    return None


def extract_json_payload(raw: str) -> dict[str, Any] | list[Any]:
    """Pull the first JSON object or array out of model output.

    Models sometimes wrap the JSON in code fences or a sentence of prose even
    when asked not to.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError("payload is empty")
    for chunk in _chunks(raw.strip()):
        value = _first_value(chunk)
        if value is not None:
            return value
    raise ValueError("No JSON object or array found in payload")


__all__ = ["extract_json_payload"]
