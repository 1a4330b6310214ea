from __future__ import annotations

from typing import TypeVar

from fastapi import Request

from .contracts import PlaceFields
from .images import display_url, parse_image_ref
from .settings import settings
from .utils import public_base_url

P = TypeVar("P", bound=PlaceFields)


def resolve_image_url(value: str | None, request: Request | None = None) -> str | None:
    """Stored image value -> URL a client may load; provider tokens go through the proxy."""
    return display_url(
        parse_image_ref(value),
        proxy_path=settings.PHOTO_PROXY_PATH,
        base_url=public_base_url(request),
    )


def place_to_public(place: P, request: Request | None = None) -> P:
    return place.model_copy(update={"image_url": resolve_image_url(place.image_url, request)})


def places_to_public(places: list[P], request: Request | None = None) -> list[P]:
    return [place_to_public(place, request) for place in places]


__all__ = ["place_to_public", "places_to_public", "resolve_image_url"]
