from __future__ import annotations

import pytest
from weekender.app.contracts import Place
from weekender.app.images import (
    DirectImage,
    ProviderPhoto,
    display_url,
    is_valid_provider_ref,
    parse_image_ref,
    to_storage,
)
from weekender.app.serializers import place_to_public, resolve_image_url

TOKEN = "places/ChIJabc123/photos/AUc7tXyz-_9"


def test_parse_direct_and_provider_refs():
    assert parse_image_ref("https://example.com/a.jpg") == DirectImage("https://example.com/a.jpg")
    assert parse_image_ref(f"googleref:{TOKEN}") == ProviderPhoto(TOKEN)
    assert parse_image_ref("   ") is None
    assert parse_image_ref("googleref:") is None
    assert parse_image_ref(None) is None


def test_storage_form_keeps_the_marker():
    assert to_storage(ProviderPhoto(TOKEN)) == f"googleref:{TOKEN}"
    assert to_storage(DirectImage("https://example.com/a.jpg")) == "https://example.com/a.jpg"
    assert to_storage(None) is None


def test_provider_photo_is_rewritten_to_proxy():
    url = display_url(ProviderPhoto(TOKEN), base_url="https://weekender.test/")
    assert url == (
        "https://weekender.test/photos/proxy?ref=places%2FChIJabc123%2Fphotos%2FAUc7tXyz-_9"
    )
    assert "googleref:" not in url


def test_direct_image_passes_through_and_missing_uses_fallback():
    assert display_url(DirectImage("https://x.test/a.png")) == "https://x.test/a.png"
    assert display_url(None) is None
    assert display_url(None, fallback="https://x.test/default.png") == "https://x.test/default.png"


@pytest.mark.parametrize(
    "ref, valid",
    [
        (TOKEN, True),
        ("places/abc/photos/def", True),
        ("places/abc/photos/../../secrets", False),
        ("https://evil.test/places/a/photos/b", False),
        ("places/abc", False),
        ("", False),
    ],
)
def test_provider_ref_validation(ref, valid):
    assert is_valid_provider_ref(ref) is valid


def test_serializer_never_leaks_provider_tokens():
    place = Place(id=1, name="Sky Zone", image_url=f"googleref:{TOKEN}")
    public = place_to_public(place)
    assert public.image_url.startswith("/photos/proxy?ref=")
    assert place.image_url == f"googleref:{TOKEN}"
    assert resolve_image_url(None) is None
