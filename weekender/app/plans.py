from __future__ import annotations

import secrets
from collections import Counter, defaultdict, deque
from collections.abc import Mapping, Sequence
from typing import TypeVar

from .contracts import PlanStop, WeekendPlan
from .errors import InvalidOrder, NotFoundError

T = TypeVar("T")

DEFAULT_SHARE_CODE_BYTES = 16
SHARED_PATH = "/shared"


def add_place(plan: WeekendPlan, place_id: int, note: str | None = None) -> WeekendPlan:
    """Append a stop. The same place may appear more than once (return visits)."""
    stops = [*plan.places, PlanStop(place_id=place_id, note=note)]
    return plan.model_copy(update={"places": stops})


def remove_place(plan: WeekendPlan, place_id: int) -> WeekendPlan:
    """Drop the first stop for `place_id`; later repeats stay."""
    stops = list(plan.places)
    for index, stop in enumerate(stops):
        if stop.place_id == place_id:
            del stops[index]
            return plan.model_copy(update={"places": stops})
    raise NotFoundError(f"Place {place_id} is not in plan {plan.id}")


def reorder(plan: WeekendPlan, new_order: Sequence[int]) -> WeekendPlan:
    """Rearrange stops to `new_order`, which must use each existing id exactly as often.

    Notes travel with their stops; repeated ids keep their notes in first-in,
    first-out order. `plan` itself is never modified.
    """
    current = [stop.place_id for stop in plan.places]
    if Counter(current) != Counter(new_order):
        raise InvalidOrder("New order must contain exactly the plan's existing places")

    queues: dict[int, deque[PlanStop]] = defaultdict(deque)
    for stop in plan.places:
        queues[stop.place_id].append(stop)
    stops = [queues[place_id].popleft() for place_id in new_order]
    return plan.model_copy(update={"places": stops})


def generate_share_code(nbytes: int = DEFAULT_SHARE_CODE_BYTES) -> str:
    return secrets.token_urlsafe(nbytes)


def ensure_share_code(
    plan: WeekendPlan, nbytes: int = DEFAULT_SHARE_CODE_BYTES
) -> tuple[WeekendPlan, bool]:
    """Return the plan with a share code and whether one had to be minted.

    An existing code is never rotated; links already handed out stay valid.
    """
    if plan.share_code:
        return plan, False
    return plan.model_copy(update={"share_code": generate_share_code(nbytes)}), True


def share_url(base_url: str, share_code: str) -> str:
    return f"{base_url.rstrip('/')}{SHARED_PATH}/{share_code}"


def referenced_places(plan: WeekendPlan, places_by_id: Mapping[int, T]) -> list[T]:
    """Places a plan points at, in itinerary order, each once.

    Ids whose place has been deleted are skipped.
    """
    seen: set[int] = set()
    resolved: list[T] = []
    for stop in plan.places:
        if stop.place_id in seen:
            continue
        seen.add(stop.place_id)
        place = places_by_id.get(stop.place_id)
        if place is not None:
            resolved.append(place)
    return resolved


def place_ids(plan: WeekendPlan) -> list[int]:
    return [stop.place_id for stop in plan.places]


__all__ = [
    "add_place",
    "ensure_share_code",
    "generate_share_code",
    "place_ids",
    "referenced_places",
    "remove_place",
    "reorder",
    "share_url",
]
