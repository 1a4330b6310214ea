"""Turn raw filter state from the UI into a canonical place query.

The UI sends "no-op" sentinels (empty search, ``category=all``,
``indoorOutdoor=all``, ``maxDistance=100``, ``minRating=0``, unchecked
toggles). They never reach the matcher: `normalize_filters` drops them so an
absent field in `PlaceQuery` is the only way to say "no constraint".
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Literal

from .validators import parse_loose_bool, parse_loose_number

SortKey = Literal["distance", "rating", "newest"]
Setting = Literal["indoor", "outdoor"]

MAX_DISTANCE_CEILING = 100.0
RATING_FLOOR = 0.0
RATING_CEILING = 5.0

_SORT_KEYS: frozenset[str] = frozenset({"distance", "rating", "newest"})
_SETTINGS: frozenset[str] = frozenset({"indoor", "outdoor"})


@dataclass
class PlaceFilters:
    """Filter state exactly as it arrives; every field may be missing or junk."""

    search: Any = None
    category: Any = None
    sort: Any = None
    kid_friendly: Any = None
    wheelchair_accessible: Any = None
    indoor_outdoor: Any = None
    max_distance: Any = None
    min_rating: Any = None
    favorites_only: Any = None


@dataclass(frozen=True)
class PlaceQuery:
    search: str | None = None
    category: str | None = None
    sort: SortKey | None = None
    kid_friendly: bool | None = None
    wheelchair_accessible: bool | None = None
    indoor_outdoor: Setting | None = None
    max_distance: float | None = None
    min_rating: float | None = None
    favorites_only: bool | None = None

    def constraints(self) -> dict[str, Any]:
        """Present filtering constraints; `sort` orders but never filters."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "sort" and getattr(self, f.name) is not None
        }

    def constraint_count(self) -> int:
        return len(self.constraints())

    def is_stricter_than(self, other: PlaceQuery) -> bool:
        """True when every constraint of `other` is present here and at least as tight."""
        mine = self.constraints()
        for key, theirs in other.constraints().items():
            if key not in mine:
                return False
            value = mine[key]
            if key == "max_distance":
                if value > theirs:
                    return False
            elif key == "min_rating":
                if value < theirs:
                    return False
            elif key == "search":
                if theirs.casefold() not in value.casefold():
                    return False
            elif value != theirs:
                return False
        return True


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = " ".join(str(value).split())
    return text or None


def _true_only(value: Any) -> bool | None:
    return True if parse_loose_bool(value) else None


def _enum_value(value: Any, allowed: frozenset[str]) -> str | None:
    text = _clean_text(value)
    if text is None:
        return None
    lowered = text.lower()
    return lowered if lowered in allowed else None


def _max_distance(value: Any) -> float | None:
    number = parse_loose_number(value)
    if number is None or number >= MAX_DISTANCE_CEILING:
        return None
    return max(number, 0.0)


def _min_rating(value: Any) -> float | None:
    number = parse_loose_number(value)
    if number is None:
        return None
    number = min(max(number, RATING_FLOOR), RATING_CEILING)
    if number == RATING_FLOOR:
        return None
    return number


def normalize_filters(raw: PlaceFilters | dict[str, Any] | None) -> PlaceQuery:
    """Build a `PlaceQuery`; never raises, whatever the input looks like."""
    if raw is None:
        return PlaceQuery()
    if isinstance(raw, dict):
        known = {f.name for f in fields(PlaceFilters)}
        raw = PlaceFilters(**{k: v for k, v in raw.items() if k in known})

    category = _clean_text(raw.category)
    if category is not None and category.lower() == "all":
        category = None

    return PlaceQuery(
        search=_clean_text(raw.search),
        category=category.lower() if category else None,
        sort=_enum_value(raw.sort, _SORT_KEYS),  # type: ignore[arg-type]
        kid_friendly=_true_only(raw.kid_friendly),
        wheelchair_accessible=_true_only(raw.wheelchair_accessible),
        indoor_outdoor=_enum_value(raw.indoor_outdoor, _SETTINGS),  # type: ignore[arg-type]
        max_distance=_max_distance(raw.max_distance),
        min_rating=_min_rating(raw.min_rating),
        favorites_only=_true_only(raw.favorites_only),
    )


__all__ = ["PlaceFilters", "PlaceQuery", "normalize_filters"]
