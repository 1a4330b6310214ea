"""Shared input sanitizers for API models."""

from __future__ import annotations

import math
import re
from typing import Any

NAME_MAX_LENGTH = 120
NOTE_MAX_LENGTH = 2000
TEXT_MAX_LENGTH = 4000
_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


def _squash_whitespace(text: str) -> str:
    return " ".join(text.split())


def normalize_display_name(value: str, *, field: str = "name") -> str:
    if not isinstance(value, str):  # pragma: no cover - Pydantic guards by default
        raise ValueError(f"{field} must be a string")
    cleaned = _squash_whitespace(value.strip())
    if not cleaned:
        raise ValueError(f"{field} cannot be blank")
    if len(cleaned) > NAME_MAX_LENGTH:
        raise ValueError(f"{field} must be <= {NAME_MAX_LENGTH} characters")
    return cleaned


def normalize_note(
    value: str | None, *, field: str = "notes", max_length: int = NOTE_MAX_LENGTH
) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    if len(cleaned) > max_length:
        raise ValueError(f"{field} must be <= {max_length} characters")
    return cleaned


def parse_loose_number(value: Any) -> float | None:
    """Pull the first number out of values like "4.5/5", "25 miles" or 12."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    else:
        match = _NUMBER_PATTERN.search(str(value).replace(",", ""))
        if not match:
            return None
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_loose_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "y", "1"}:
            return True
        if lowered in {"false", "no", "n", "0"}:
            return False
    return None


__all__ = [
    "NAME_MAX_LENGTH",
    "NOTE_MAX_LENGTH",
    "TEXT_MAX_LENGTH",
    "normalize_display_name",
    "normalize_note",
    "parse_loose_bool",
    "parse_loose_number",
]
