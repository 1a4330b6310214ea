"""Name-based duplicate detection for place imports.

The database carries no uniqueness constraint on place names, so this gate is
the only thing keeping an import idempotent. Callers must admit candidates one
at a time and insert each before admitting the next; the gate's running view
of "already present" is only correct under that ordering.
"""

from __future__ import annotations

from collections.abc import Iterable

def name_key(name: str | None) -> str:
    """Trimmed, whitespace-collapsed, case-folded form used for comparison."""
    return " ".join((name or "").split()).casefold()

class DedupGate:
    def __init__(self, existing_names: Iterable[str] = ()) -> None:
        self._seen: set[str] = {key for key in map(name_key, existing_names) if key}

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name_key(name) in self._seen

    def forget(self, name: str) -> None:
        self._seen.discard(name_key(name))

    def admit(self, name: str) -> bool:
        """Record `name` and return True unless it is blank or already present."""
        key = name_key(name)
        if not key or key in self._seen:
            return False
        self._seen.add(key)
        return True


__all__ = ["DedupGate", "name_key"]
