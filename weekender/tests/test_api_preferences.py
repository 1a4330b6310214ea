"""
Integration tests for the single-user preferences row.
"""

from __future__ import annotations

import asyncio

from weekender.app.contracts import PreferencesUpdate
from weekender.app.filters import normalize_filters
from weekender.app.storage import DB


def test_defaults_before_anything_is_saved(client):
    response = client.get("/preferences")
    assert response.status_code == 200
    body = response.json()
    assert body["id"] is None
    assert body["defaultMaxDistance"] == 100
    assert body["preferredCategories"] == []
    assert body["homeAddress"] is None


def test_default_distance_is_the_no_limit_sentinel(client):
    prefs = client.get("/preferences").json()
    query = normalize_filters({"max_distance": prefs["defaultMaxDistance"]})
    assert query.max_distance is None


def test_first_put_creates_then_updates_in_place(client):
    created = client.put(
        "/preferences",
        json={
            "homeAddress": "  12 Main St, Princeton NJ ",
            "homeLatitude": 40.35,
            "homeLongitude": -74.66,
            "defaultMaxDistance": 45,
            "preferredCategories": ["Nature", "animals", "nature"],
        },
    )
    assert created.status_code == 200, created.text
    body = created.json()
    assert body["id"] is not None
    assert body["homeAddress"] == "12 Main St, Princeton NJ"
    assert body["preferredCategories"] == ["nature", "animals"]

    updated = client.put("/preferences", json={"defaultMaxDistance": 30}).json()
    assert updated["id"] == body["id"]
    assert updated["defaultMaxDistance"] == 30
    # fields left out of the request are kept
    assert updated["homeLatitude"] == 40.35
    assert updated["preferredCategories"] == ["nature", "animals"]

    assert client.get("/preferences").json() == updated


def test_null_leaves_required_fields_alone(client):
    client.put("/preferences", json={"defaultMaxDistance": 20, "preferredCategories": ["beach"]})
    body = client.put(
        "/preferences", json={"defaultMaxDistance": None, "preferredCategories": None}
    ).json()
    assert body["defaultMaxDistance"] == 20
    assert body["preferredCategories"] == ["beach"]


def test_invalid_values_are_400(client):
    response = client.put("/preferences", json={"defaultMaxDistance": 250})
    assert response.status_code == 400
    assert response.json()["field"] == "defaultMaxDistance"

    response = client.put("/preferences", json={"preferredCategories": ["nightlife"]})
    assert response.status_code == 400

    response = client.put("/preferences", json={"homeLatitude": 123})
    assert response.status_code == 400


def test_storage_round_trip_keeps_a_single_row():
    asyncio.run(DB.update_preferences(PreferencesUpdate(default_max_distance=60)))
    asyncio.run(DB.update_preferences(PreferencesUpdate(home_address="Hoboken")))
    prefs = asyncio.run(DB.get_preferences())
    assert prefs.default_max_distance == 60
    assert prefs.home_address == "Hoboken"
