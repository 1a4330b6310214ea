from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol, TypeVar

from .filters import PlaceQuery

NEARBY_THRESHOLD_MINUTES = 20
NEARBY_LIMIT = 4
SEASONAL_LIMIT = 4
WEATHER_PICK_LIMIT = 3

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# Keywords matched against `best_seasons`, keyed by month number (1-12)
SEASON_KEYWORDS: dict[int, tuple[str, ...]] = {
    1: ("winter",),
    2: ("winter",),
    3: ("spring",),
    4: ("spring",),
    5: ("spring",),
    6: ("summer",),
    7: ("summer",),
    8: ("summer",),
    9: ("fall", "autumn"),
    10: ("fall", "autumn"),
    11: ("fall", "autumn"),
    12: ("winter", "holiday"),
}

# WMO weather codes with rain, snow or storms
BAD_WEATHER_CODES = frozenset(
    {51, 53, 55, 56, 57, 61, 63, 65, 66, 67, 71, 73, 75, 77, 80, 81, 82, 85, 86, 95, 96, 99}
)


class PlaceLike(Protocol):
    id: int
    name: str
    category: str
    indoor_outdoor: str | None
    distance_miles: float | None
    drive_time_minutes: int | None
    rating: float | None
    kid_friendly: bool
    wheelchair_accessible: bool
    favorite: bool
    overview: str | None
    best_seasons: str | None


P = TypeVar("P", bound=PlaceLike)


def _fold(value: str | None) -> str:
    return (value or "").casefold()


def _distance_for_bound(place: PlaceLike) -> float | None:
    if place.distance_miles is not None:
        return place.distance_miles
    if place.drive_time_minutes is not None:
        return float(place.drive_time_minutes)
    return None


def place_matches(query: PlaceQuery, place: PlaceLike) -> bool:
    if query.search is not None:
        needle = query.search.casefold()
        if needle not in _fold(place.name) and needle not in _fold(place.overview):
            return False
    if query.category is not None and _fold(place.category) != query.category.casefold():
        return False
    if query.kid_friendly and not place.kid_friendly:
        return False
    if query.wheelchair_accessible and not place.wheelchair_accessible:
        return False
    if query.favorites_only and not place.favorite:
        return False
    if query.indoor_outdoor is not None and place.indoor_outdoor not in (
        query.indoor_outdoor,
        "both",
    ):
        return False
    if query.max_distance is not None:
        distance = _distance_for_bound(place)
        if distance is None or distance > query.max_distance:
            return False
    if query.min_rating is not None:
        if place.rating is None or place.rating < query.min_rating:
            return False
    return True


def _sort_key(sort: str | None):
    if sort == "distance":
        return lambda p: (p.distance_miles is None, p.distance_miles or 0.0, _fold(p.name), p.id)
    if sort == "rating":
        return lambda p: (p.rating is None, -(p.rating or 0.0), _fold(p.name), p.id)
    if sort == "newest":
        return lambda p: (-p.id, _fold(p.name))
    return lambda p: (p.id, _fold(p.name))


def match_places(query: PlaceQuery, places: Iterable[P]) -> list[P]:
    """Places satisfying every present constraint, in the requested order.

    The result is always a subset of `places`; an empty list is a normal answer.
    """
    matched = [place for place in places if place_matches(query, place)]
    matched.sort(key=_sort_key(query.sort))
    return matched


def nearby_places(
    reference: PlaceLike,
    places: Iterable[P],
    *,
    threshold: int = NEARBY_THRESHOLD_MINUTES,
    limit: int = NEARBY_LIMIT,
) -> list[P]:
    """Places with a similar drive time to `reference`.

    This buckets by trip length, not by location: two places 30 minutes from
    home in opposite directions count as "nearby".
    """
    base = reference.drive_time_minutes
    if base is None:
        return []
    candidates = [
        place
        for place in places
        if place.id != reference.id
        and place.drive_time_minutes is not None
        and abs(place.drive_time_minutes - base) <= threshold
    ]
    candidates.sort(key=lambda p: abs(p.drive_time_minutes - base))  # type: ignore[operator]
    return candidates[:limit]


def seasonal_highlights(
    places: Iterable[P], month: int, *, limit: int = SEASONAL_LIMIT
) -> list[P]:
    if month not in SEASON_KEYWORDS:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    keywords = (*SEASON_KEYWORDS[month], MONTH_NAMES[month - 1].lower())
    picked: list[P] = []
    for place in places:
        seasons = _fold(place.best_seasons)
        if not seasons or "year-round" in seasons or "year round" in seasons:
            continue
        if any(keyword in seasons for keyword in keywords):
            picked.append(place)
            if len(picked) >= limit:
                break
    return picked


@dataclass(frozen=True)
class WeatherReading:
    code: int
    temperature_f: float
    precipitation_probability: float = 0.0


def describe_weather(code: int) -> str:
    if code in (0, 1):
        return "Clear"
    if code == 2:
        return "Partly cloudy"
    if code == 3:
        return "Overcast"
    if 45 <= code <= 48:
        return "Foggy"
    if 51 <= code <= 57:
        return "Drizzle"
    if 61 <= code <= 67:
        return "Rain"
    if 71 <= code <= 77:
        return "Snow"
    if 80 <= code <= 82:
        return "Rain showers"
    if 85 <= code <= 86:
        return "Snow showers"
    if 95 <= code <= 99:
        return "Thunderstorm"
    return "Unknown"


def is_good_outdoor_weather(weather: WeatherReading) -> bool:
    if weather.code in BAD_WEATHER_CODES:
        return False
    if weather.precipitation_probability > 50:
        return False
    return 35 <= weather.temperature_f <= 95


def weather_message(weather: WeatherReading, good_for_outdoor: bool) -> str:
    if good_for_outdoor:
        return "Great weather for outdoor adventures!"
    if weather.precipitation_probability > 50:
        return "Rain expected - perfect for indoor fun!"
    if weather.temperature_f < 40:
        return "Bundle up or stay cozy indoors!"
    return "Consider indoor activities today."


def weather_picks(
    places: Sequence[P], weather: WeatherReading, *, limit: int = WEATHER_PICK_LIMIT
) -> tuple[bool, str, list[P]]:
    """Outdoor-or-both places in good weather, indoor-or-both places otherwise."""
    good = is_good_outdoor_weather(weather)
    wanted = "outdoor" if good else "indoor"
    picks = [p for p in places if p.indoor_outdoor in (wanted, "both")][:limit]
    return good, weather_message(weather, good), picks


__all__ = [
    "MONTH_NAMES",
    "NEARBY_LIMIT",
    "NEARBY_THRESHOLD_MINUTES",
    "WeatherReading",
    "describe_weather",
    "is_good_outdoor_weather",
    "match_places",
    "nearby_places",
    "place_matches",
    "seasonal_highlights",
    "weather_message",
    "weather_picks",
]
