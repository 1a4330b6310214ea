"""
Integration tests for the places API.
Exercises routes, storage and the dedup gate together.
"""

from __future__ import annotations

import httpx
from weekender.app.errors import ExtractionFailed
from weekender.app.extractor_client import (
    OpenAIVisionExtractor,
    ProviderCredential,
    get_extractor,
)
from weekender.app.main import app
from weekender.app.settings import settings


def _create(client, **fields):
    payload = {"name": "Turtle Back Zoo", "category": "animals"}
    payload.update(fields)
    response = client.post("/places", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestPlaceCrud:
    """Create, read, update and delete places."""

    def test_create_and_fetch(self, client):
        created = _create(client, driveTimeMinutes=25, kidFriendly=True, rating=4.5)
        assert created["id"] >= 1
        assert created["kidFriendly"] is True
        assert created["createdAt"]

        response = client.get(f"/places/{created['id']}")
        assert response.status_code == 200
        assert response.json()["name"] == "Turtle Back Zoo"

    def test_missing_place_is_404(self, client):
        response = client.get("/places/999999")
        assert response.status_code == 404
        assert response.json()["message"] == "Place not found"

    def test_invalid_payload_is_400_with_field(self, client):
        response = client.post("/places", json={"name": "   "})
        assert response.status_code == 400
        body = response.json()
        assert body["field"] == "name"
        assert body["message"]

    def test_duplicate_name_is_rejected(self, client):
        _create(client)
        response = client.post("/places", json={"name": "  turtle back ZOO "})
        assert response.status_code == 400
        assert response.json()["field"] == "name"

    def test_partial_update(self, client):
        created = _create(client, rating=4.0)
        response = client.put(f"/places/{created['id']}", json={"favorite": True})
        assert response.status_code == 200
        body = response.json()
        assert body["favorite"] is True
        assert body["rating"] == 4.0
        assert body["name"] == "Turtle Back Zoo"

    def test_update_missing_place_is_404(self, client):
        assert client.put("/places/424242", json={"favorite": True}).status_code == 404

    def test_delete(self, client):
        created = _create(client)
        assert client.delete(f"/places/{created['id']}").status_code == 204
        assert client.get(f"/places/{created['id']}").status_code == 404
        assert client.delete(f"/places/{created['id']}").status_code == 404


class TestPlaceFiltering:
    """GET /places applies normalized filters."""

    def _seed(self, client):
        _create(
            client,
            name="Liberty Science Center",
            category="educational",
            indoorOutdoor="indoor",
            distanceMiles=20,
            rating=4.7,
            kidFriendly=True,
        )
        _create(
            client,
            name="High Point State Park",
            category="nature",
            indoorOutdoor="outdoor",
            distanceMiles=70,
            rating=4.6,
        )
        _create(client, name="Sky Zone", category="family", indoorOutdoor="both", rating=4.1)

    def test_sentinels_return_everything(self, client):
        self._seed(client)
        response = client.get(
            "/places",
            params={
                "category": "all",
                "indoorOutdoor": "all",
                "maxDistance": "100",
                "minRating": "0",
                "search": "",
            },
        )
        assert response.status_code == 200
        assert len(response.json()) == 3

    def test_combined_filters_and_sort(self, client):
        self._seed(client)
        response = client.get(
            "/places", params={"indoorOutdoor": "indoor", "minRating": "4", "sort": "rating"}
        )
        names = [place["name"] for place in response.json()]
        assert names == ["Liberty Science Center", "Sky Zone"]

    def test_junk_filters_do_not_error(self, client):
        self._seed(client)
        response = client.get(
            "/places",
            params={
                "maxDistance": "far",
                "minRating": "lots",
                "sort": "sideways",
                "kidFriendly": "x",
            },
        )
        assert response.status_code == 200
        assert len(response.json()) == 3

    def test_search_and_toggle(self, client):
        self._seed(client)
        response = client.get("/places", params={"search": "science", "kidFriendly": "true"})
        assert [p["name"] for p in response.json()] == ["Liberty Science Center"]

    def test_long_search_is_not_an_error(self, client):
        self._seed(client)
        response = client.get("/places", params={"search": "a" * 500})
        assert response.status_code == 200
        assert response.json() == []

    def test_empty_result_is_ok(self, client):
        self._seed(client)
        response = client.get("/places", params={"category": "beach"})
        assert response.status_code == 200
        assert response.json() == []


class TestSuggestions:
    """Nearby, seasonal and weather picks."""

    def test_nearby_by_drive_time(self, client):
        ref = _create(client, name="Reference", driveTimeMinutes=20)
        for name, minutes in (("Ten", 10), ("Fifteen", 15), ("Thirty Five", 35), ("Far", 200)):
            _create(client, name=name, driveTimeMinutes=minutes)

        response = client.get(f"/places/{ref['id']}/nearby")
        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Fifteen", "Ten", "Thirty Five"]

    def test_nearby_for_missing_place_is_404(self, client):
        assert client.get("/places/31337/nearby").status_code == 404

    def test_seasonal(self, client):
        _create(client, name="Corn Maze", bestSeasons="Fall")
        _create(client, name="Beach Day", category="beach", bestSeasons="Summer")
        response = client.get("/places/seasonal", params={"month": 10})
        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Corn Maze"]

    def test_seasonal_rejects_bad_month(self, client):
        assert client.get("/places/seasonal", params={"month": 13}).status_code == 400

    def test_weather_picks(self, client):
        _create(client, name="Trail", category="nature", indoorOutdoor="outdoor")
        _create(client, name="Museum", category="educational", indoorOutdoor="indoor")
        response = client.get(
            "/places/weather-picks",
            params={"code": 63, "temperature": 55, "precipitation": 90},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["goodForOutdoor"] is False
        assert body["description"] == "Rain"
        assert [p["name"] for p in body["places"]] == ["Museum"]


class TestSampleImport:
    """POST /places/import seeds sample places through the dedup gate."""

    def test_import_is_idempotent(self, client):
        first = client.post("/places/import")
        assert first.status_code == 200
        body = first.json()
        assert body["success"] is True
        assert body["count"] == 5
        assert body["skipped"] == 0

        second = client.post("/places/import").json()
        assert second["count"] == 0
        assert second["skipped"] == 5
        assert len(client.get("/places").json()) == 5


class TestImages:
    """Provider photo tokens never reach the client."""

    def test_provider_token_is_proxied(self, client):
        created = _create(client, imageUrl="googleref:places/abc/photos/def")
        assert created["imageUrl"] == (
            "http://api.testserver/photos/proxy?ref=places%2Fabc%2Fphotos%2Fdef"
        )
        listed = client.get("/places").json()[0]
        assert "googleref:" not in listed["imageUrl"]

    def test_public_base_url_is_used_when_set(self, client):
        settings.PUBLIC_BASE_URL = "https://weekender.example"
        created = _create(client, imageUrl="googleref:places/abc/photos/def")
        assert created["imageUrl"].startswith("https://weekender.example/photos/proxy?ref=")

    def test_direct_image_passes_through(self, client):
        created = _create(client, imageUrl="https://img.example/zoo.jpg")
        assert created["imageUrl"] == "https://img.example/zoo.jpg"

    def test_photo_proxy_without_key_is_503(self, client):
        response = client.get("/photos/proxy", params={"ref": "places/abc/photos/def"})
        assert response.status_code == 503


class TestExtraction:
    """Extraction endpoints with a fake extractor."""

    def test_document_extraction_filters_candidates(self, client, use_extractor):
        fake = use_extractor(
            [
                {"name": "Grounds For Sculpture", "category": "Sculpture Park", "found": True},
                {"name": "Starbucks", "category": "Cafe"},
                {"name": "Unionville Vineyards Winery"},
                {"name": "Ghost", "found": False},
            ]
        )
        response = client.post("/places/extract", json={"imageData": "aGVsbG8="})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [p["name"] for p in body["places"]] == ["Grounds For Sculpture"]
        assert body["places"][0]["source"] == "Document upload"
        assert fake.calls[0][0] == "document"

    def test_extractor_failure_is_reported_not_raised(self, client, use_extractor):
        use_extractor(error=ExtractionFailed("Extractor returned invalid JSON"))
        response = client.post("/places/extract", json={"imageUrl": "https://x.test/a.jpg"})
        assert response.status_code == 200
        body = response.json()
        assert body == {
            "success": False,
            "places": [],
            "message": "Extractor returned invalid JSON",
        }

    def test_malformed_extractor_reply_is_reported(self, client):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"choices": [{"message": "oops"}]})
        )
        extractor = OpenAIVisionExtractor(
            ProviderCredential("sk-test"), base_url="https://llm.test/v1", transport=transport
        )
        app.dependency_overrides[get_extractor] = lambda: extractor
        try:
            response = client.post("/places/extract", json={"imageData": "aGVsbG8="})
        finally:
            app.dependency_overrides.pop(get_extractor, None)
        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "places": [],
            "message": "Extractor reply malformed",
        }

    def test_empty_extraction_is_success(self, client, use_extractor):
        use_extractor([])
        body = client.post("/places/extract", json={"imageData": "aGVsbG8="}).json()
        assert body["success"] is True
        assert body["places"] == []

    def test_missing_image_is_400(self, client, use_extractor):
        use_extractor([])
        assert client.post("/places/extract", json={}).status_code == 400

    def test_social_extraction_attributes_handle(self, client, use_extractor):
        use_extractor([{"name": "Sandy Hook", "category": "Beach", "found": True}])
        response = client.post(
            "/places/extract/social",
            json={
                "caption": "Beach day at Sandy Hook",
                "ownerUsername": "@njweekends",
                "postUrl": "https://www.instagram.com/p/Cabc/",
                "displayUrl": "https://cdn.example/post.jpg",
            },
        )
        assert response.status_code == 200
        place = response.json()["places"][0]
        assert place["source"] == "Instagram post by @njweekends"
        assert place["category"] == "beach"
        assert place["imageUrl"] == "https://cdn.example/post.jpg"

    def test_social_rejects_non_instagram_link(self, client, use_extractor):
        use_extractor([])
        response = client.post(
            "/places/extract/social",
            json={"caption": "x", "ownerUsername": "me", "postUrl": "https://example.com/p/1"},
        )
        assert response.status_code == 400
        assert response.json()["field"] == "postUrl"

    def test_import_candidates_dedups_within_batch(self, client):
        _create(client, name="Sky Zone", category="family")
        response = client.post(
            "/places/extract/import",
            json={
                "places": [
                    {"name": "Grounds For Sculpture", "category": "educational"},
                    {"name": "grounds for sculpture"},
                    {"name": "SKY ZONE"},
                    {"name": "Starbucks"},
                    {"name": ""},
                ]
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["skipped"] == 4

        names = sorted(p["name"] for p in client.get("/places").json())
        assert names == ["Grounds For Sculpture", "Sky Zone"]
        saved = client.get("/places", params={"search": "sculpture"}).json()[0]
        assert saved["source"] == "Document upload"
