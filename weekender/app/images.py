"""Image references for places.

A stored image is either a direct URL or an opaque provider-photo token
(Google Places `places/<id>/photos/<id>`). Tokens are persisted with a
`googleref:` marker and must never reach a client as a display URL; they are
rewritten into a proxy URL that the server resolves.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote

PROVIDER_MARKER = "googleref:"
_PROVIDER_REF_PATTERN = re.compile(r"^places/[A-Za-z0-9_\-]+/photos/[A-Za-z0-9_\-]+$")


@dataclass(frozen=True, slots=True)
class DirectImage:
    url: str


@dataclass(frozen=True, slots=True)
class ProviderPhoto:
    ref: str


ImageRef = DirectImage | ProviderPhoto


def is_valid_provider_ref(ref: str) -> bool:
    return bool(_PROVIDER_REF_PATTERN.fullmatch(ref or ""))


def parse_image_ref(raw: str | None) -> ImageRef | None:
    if raw is None:
        return None
    value = str(raw).strip()
    if not value:
        return None
    if value.startswith(PROVIDER_MARKER):
        ref = value[len(PROVIDER_MARKER) :].strip()
        return ProviderPhoto(ref) if ref else None
    return DirectImage(value)


def to_storage(ref: ImageRef | None) -> str | None:
    if ref is None:
        return None
    if isinstance(ref, ProviderPhoto):
        return f"{PROVIDER_MARKER}{ref.ref}"
    return ref.url


def display_url(
    ref: ImageRef | None,
    *,
    proxy_path: str = "/photos/proxy",
    base_url: str = "",
    fallback: str | None = None,
) -> str | None:
    """The one place an `ImageRef` becomes something a client may load."""
    match ref:
        case None:
            return fallback
        case ProviderPhoto(ref=token):
            return f"{base_url.rstrip('/')}{proxy_path}?ref={quote(token, safe='')}"
        case DirectImage(url=url):
            return url
    raise TypeError(f"Unsupported image reference: {ref!r}")


__all__ = [
    "DirectImage",
    "ImageRef",
    "PROVIDER_MARKER",
    "ProviderPhoto",
    "display_url",
    "is_valid_provider_ref",
    "parse_image_ref",
    "to_storage",
]
