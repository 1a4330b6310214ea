"""Validate and normalize place candidates proposed by the extractor.

The extractor is a best-effort vision/LLM model. Whatever it returns is
treated as untrusted: candidates it did not actually find are dropped, bars and
chain restaurants are excluded, loosely typed fields are coerced, and every
surviving candidate is turned into a `PlaceCreate` payload carrying a source
attribution. One broken candidate never sinks the rest of the batch.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import ValidationError as PydanticValidationError

from .contracts import NearbyRestaurant, PlaceCreate
from .errors import ExtractionFailed
from .images import ProviderPhoto, is_valid_provider_ref, to_storage
from .json_utils import extract_json_payload
from .settings import settings
from .validators import parse_loose_bool, parse_loose_number

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Attraction"
DOCUMENT_SOURCE = "Document upload"

CHAIN_RESTAURANTS: tuple[str, ...] = (
    "starbucks",
    "mcdonald's",
    "panera",
    "chick-fil-a",
    "subway",
    "dunkin",
    "burger king",
    "wendy's",
    "taco bell",
    "kfc",
    "chipotle",
    "domino's",
    "pizza hut",
    "applebee's",
    "olive garden",
    "dairy queen",
    "five guys",
    "popeyes",
    "tim hortons",
    "ihop",
)

# Alcohol venues. Short words need word boundaries ("Barnegat", "Pubnico");
# the long ones are safe as plain substrings.
_ALCOHOL_WORDS = re.compile(
    r"\b(?:bars?|pubs?|taprooms?|tap room|taverns?|saloons?|beer garden)\b"
)
_ALCOHOL_SUBSTRINGS: tuple[str, ...] = (
    "winery",
    "wineries",
    "brewery",
    "breweries",
    "brewing",
    "brewpub",
    "distillery",
    "distilleries",
)

# Free-form extractor categories -> place category, first hit wins
_CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("animals", ("zoo", "aquarium", "farm", "wildlife", "safari", "animal")),
    ("theme", ("theme park", "amusement", "water park", "carnival", "rides")),
    ("beach", ("beach", "boardwalk", "shore", "lake front", "lakefront")),
    ("educational", ("museum", "science", "planetarium", "library", "gallery", "sculpture")),
    ("historical", ("historic", "history", "heritage", "battlefield", "landmark", "mansion")),
    ("dining", ("restaurant", "cafe", "café", "bakery", "diner", "food", "eatery", "ice cream")),
    ("exercise", ("fitness", "gym", "climbing", "bike", "cycling", "kayak", "sport")),
    ("adventurous", ("adventure", "zipline", "zip line", "ropes course", "rafting", "trampoline")),
    (
        "nature",
        ("park", "garden", "hike", "hiking", "trail", "nature", "forest", "waterfall", "preserve"),
    ),
    (
        "seasonal",
        ("festival", "seasonal", "orchard", "pumpkin", "pick-your-own", "christmas", "holiday"),
    ),
    ("family", ("family", "kids", "children", "playground", "play space")),
    ("indoor", ("indoor", "arcade", "bowling", "escape room")),
    ("outdoor", ("outdoor",)),
)

_HOURS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:h|hr|hrs|hour|hours)(?![a-z])", re.IGNORECASE)
_MINUTES_RE = re.compile(r"(\d+)\s*(?:m|min|mins|minute|minutes)(?![a-z])", re.IGNORECASE)
_INSTAGRAM_KINDS = ("p", "reel")


@dataclass(frozen=True)
class ExtractionSource:
    """Where a batch of candidates came from."""

    kind: Literal["document", "social"]
    handle: str | None = None
    post_url: str | None = None
    display_url: str | None = None

    @classmethod
    def document(cls) -> ExtractionSource:
        return cls(kind="document")

    @classmethod
    def social(
        cls, handle: str, *, post_url: str | None = None, display_url: str | None = None
    ) -> ExtractionSource:
        return cls(
            kind="social",
            handle=handle.strip().lstrip("@"),
            post_url=normalize_instagram_url(post_url) if post_url else None,
            display_url=display_url,
        )

    def attribution(self) -> str:
        if self.kind == "social" and self.handle:
            return f"Instagram post by @{self.handle}"
        return DOCUMENT_SOURCE


# --- exclusion rules ---
def _fold_for_match(text: str | None) -> str:
    folded = (text or "").casefold().replace("’", "'").replace("'", "")
    return " ".join(folded.replace("-", " ").split())


_CHAIN_KEYS = tuple(_fold_for_match(name) for name in CHAIN_RESTAURANTS)


def exclusion_reason(name: str | None, category: str | None = None) -> str | None:
    """Why a candidate may not be saved, or None when it is allowed.

    Chain names and the long alcohol forms ("winery", "brewery") match as
    case-insensitive substrings of the name or category. The short alcohol
    words ("bar", "pub", "tavern") only match as whole words, so "Barnegat
    Lighthouse" is allowed where a plain substring test would reject it.
    """
    folded_name = _fold_for_match(name)
    for chain in _CHAIN_KEYS:
        if chain in folded_name:
            return "chain_restaurant"
    for text in (folded_name, _fold_for_match(category)):
        if not text:
            continue
        if _ALCOHOL_WORDS.search(text) or any(word in text for word in _ALCOHOL_SUBSTRINGS):
            return "alcohol_venue"
    return None


def is_excluded(name: str | None, category: str | None = None) -> bool:
    return exclusion_reason(name, category) is not None


# --- field coercion ---
def _pick(item: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None and value != "":
            return value
    return None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, list | tuple):
        parts = [_text(part) for part in value]
        joined = "; ".join(part for part in parts if part)
        return joined or None
    if isinstance(value, dict):
        return None
    cleaned = " ".join(str(value).split())
    if not cleaned or cleaned.lower() in {"null", "none", "n/a", "unknown"}:
        return None
    return cleaned


def _rating(value: Any) -> float | None:
    number = parse_loose_number(value)
    if number is None or not 0 <= number <= 5:
        return None
    return round(number, 1)


def _distance(value: Any) -> float | None:
    number = parse_loose_number(value)
    if number is None or number < 0:
        return None
    return number


def _drive_minutes(value: Any) -> int | None:
    """Parse 45, "45 min", "1 hr 15 min" or "1.5 hours" into minutes."""
    if isinstance(value, str):
        hours = _HOURS_RE.search(value)
        minutes = _MINUTES_RE.search(value)
        if hours or minutes:
            total = float(hours.group(1)) * 60 if hours else 0.0
            total += float(minutes.group(1)) if minutes else 0.0
            return int(round(total))
    number = parse_loose_number(value)
    if number is None or number < 0:
        return None
    return int(round(number))


def _confidence(value: Any) -> float | None:
    number = parse_loose_number(value)
    if number is None:
        return None
    # some models answer in percent; anything between 1 and 2 reads as 1.0
    if number >= 2 or (isinstance(value, str) and value.strip().endswith("%")):
        return number / 100
    return min(number, 1.0)


def _image(value: Any) -> str | None:
    """Bare Places photo tokens are stored in marked form so they get proxied."""
    text = _text(value)
    if text and is_valid_provider_ref(text):
        return to_storage(ProviderPhoto(text))
    return text


def _setting(value: Any) -> str | None:
    text = _text(value)
    if text is None:
        return None
    lowered = text.lower()
    return lowered if lowered in {"indoor", "outdoor", "both"} else None


def map_category(*labels: str | None) -> str:
    """Map free-form category labels onto the place category set."""
    for label in labels:
        text = (label or "").casefold()
        if not text:
            continue
        for category, keywords in _CATEGORY_KEYWORDS:
            if any(keyword in text for keyword in keywords):
                return category
    return "general"


def _restaurants(value: Any) -> list[NearbyRestaurant]:
    if not isinstance(value, list):
        return []
    restaurants: list[NearbyRestaurant] = []
    for entry in value:
        if isinstance(entry, str):
            entry = {"name": entry}
        if not isinstance(entry, Mapping):
            continue
        name = _text(entry.get("name"))
        if not name or is_excluded(name):
            continue
        try:
            restaurants.append(
                NearbyRestaurant(
                    name=name,
                    description=_text(entry.get("description")),
                    distance=_text(entry.get("distance")),
                )
            )
        except PydanticValidationError:
            continue
    return restaurants


def _compose_address(item: Mapping[str, Any]) -> str | None:
    address = _text(item.get("address"))
    if address:
        return address
    city = _text(item.get("city"))
    state = _text(item.get("state"))
    if city and state:
        return f"{city}, {state}"
    return None


def _was_found(item: Mapping[str, Any], min_confidence: float) -> bool:
    found = item.get("found")
    if parse_loose_bool(found) is False:
        return False
    confidence = _confidence(item.get("confidence"))
    if confidence is not None and confidence < min_confidence:
        return False
    return True


def normalize_candidate(
    item: Mapping[str, Any],
    source: ExtractionSource,
    *,
    min_confidence: float | None = None,
) -> PlaceCreate | None:
    """Normalize one raw candidate; None means it was dropped on purpose.

    Raises pydantic's ValidationError when the fields cannot form a place.
    """
    floor = settings.EXTRACTION_MIN_CONFIDENCE if min_confidence is None else min_confidence
    if not _was_found(item, floor):
        return None
    name = _text(item.get("name"))
    if not name:
        return None

    raw_category = _text(item.get("category")) or DEFAULT_CATEGORY
    reason = exclusion_reason(name, raw_category)
    if reason:
        logger.info("Excluded extracted candidate %r (%s)", name, reason)
        return None

    subcategory = _text(item.get("subcategory")) or raw_category
    image = _image(_pick(item, "image_url", "imageUrl", "image")) or source.display_url
    payload: dict[str, Any] = {
        "name": name,
        "category": map_category(raw_category, subcategory, name),
        "subcategory": subcategory,
        "indoor_outdoor": _setting(_pick(item, "indoor_outdoor", "indoorOutdoor")),
        "address": _compose_address(item),
        "google_maps_url": _text(_pick(item, "google_maps_url", "googleMapsUrl")),
        "distance_miles": _distance(_pick(item, "distance_miles", "distanceMiles", "distance")),
        "drive_time_minutes": _drive_minutes(
            _pick(item, "drive_time_minutes", "driveTimeMinutes", "drive_time")
        ),
        "rating": _rating(_pick(item, "google_rating", "googleRating", "rating")),
        "kid_friendly": bool(parse_loose_bool(_pick(item, "kid_friendly", "kidFriendly"))),
        "wheelchair_accessible": bool(
            parse_loose_bool(_pick(item, "wheelchair_accessible", "wheelchairAccessible"))
        ),
        "image_url": image,
        "overview": _text(item.get("overview")),
        "key_highlights": _text(_pick(item, "key_highlights", "keyHighlights")),
        "insider_tips": _text(_pick(item, "insider_tips", "insiderTips")),
        "entry_fee": _text(_pick(item, "entry_fee", "entryFee")),
        "best_seasons": _text(_pick(item, "best_seasons", "bestSeasons")),
        "average_visit_duration": _text(
            _pick(item, "average_visit_duration", "averageVisitDuration")
        ),
        "nearby_restaurants": _restaurants(_pick(item, "nearby_restaurants", "nearbyRestaurants")),
        "source": source.attribution(),
    }
    return PlaceCreate(**payload)


def normalize_candidates(
    raw_items: Iterable[Any],
    source: ExtractionSource,
    *,
    min_confidence: float | None = None,
) -> list[PlaceCreate]:
    """Normalize a batch; malformed candidates are logged and skipped."""
    normalized: list[PlaceCreate] = []
    for index, item in enumerate(raw_items):
        if not isinstance(item, Mapping):
            logger.warning("Skipping extracted candidate %s: not an object", index)
            continue
        try:
            candidate = normalize_candidate(item, source, min_confidence=min_confidence)
        except (PydanticValidationError, ValueError, TypeError) as exc:
            logger.warning("Skipping malformed extracted candidate %s: %s", index, exc)
            continue
        if candidate is not None:
            normalized.append(candidate)
    return normalized


def parse_extractor_content(content: str | None) -> list[dict[str, Any]]:
    """Turn the extractor's raw reply into candidate objects.

    `{"places": []}` is a successful empty answer. Anything that cannot be read
    as candidates raises ExtractionFailed instead of passing as "nothing found".
    """
    if content is None or not str(content).strip():
        raise ExtractionFailed("Extractor returned no content")
    try:
        payload = extract_json_payload(str(content))
    except ValueError as exc:
        raise ExtractionFailed("Extractor returned invalid JSON") from exc

    if isinstance(payload, dict):
        if "places" in payload:
            items = payload["places"]
            if isinstance(items, dict):
                items = [items]
        elif "name" in payload or "found" in payload:
            items = [payload]
        else:
            raise ExtractionFailed("Extractor reply has no places")
    else:
        items = payload

    if not isinstance(items, list):
        raise ExtractionFailed("Extractor reply has no places")
    return [item for item in items if isinstance(item, dict)]


# --- Instagram links ---
def normalize_instagram_url(url: str | None) -> str | None:
    """Canonical post/reel URL, or None for anything that is not one."""
    if not url:
        return None
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None
    host = (parsed.hostname or "").lower()
    if parsed.scheme not in ("http", "https") or not (
        host == "instagram.com" or host.endswith(".instagram.com")
    ):
        return None
    parts = [part for part in parsed.path.split("/") if part]
    if len(parts) >= 2 and parts[0] in _INSTAGRAM_KINDS:
        return f"https://www.instagram.com/{parts[0]}/{parts[1]}/"
    return None


def is_instagram_url(url: str | None) -> bool:
    return normalize_instagram_url(url) is not None


__all__ = [
    "CHAIN_RESTAURANTS",
    "DEFAULT_CATEGORY",
    "DOCUMENT_SOURCE",
    "ExtractionSource",
    "exclusion_reason",
    "is_excluded",
    "is_instagram_url",
    "map_category",
    "normalize_candidate",
    "normalize_candidates",
    "normalize_instagram_url",
    "parse_extractor_content",
]
