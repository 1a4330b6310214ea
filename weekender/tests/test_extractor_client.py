from __future__ import annotations

import asyncio
import json
from datetime import UTC, datetime, timedelta

import httpx
import pytest
from weekender.app.errors import ExtractionFailed
from weekender.app.extractor_client import (
    OpenAIVisionExtractor,
    ProviderCredential,
    SocialPost,
    caption_prompt,
)


def _reply(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _extractor(handler, credential=None, **kwargs):
    return OpenAIVisionExtractor(
        credential or ProviderCredential("sk-test"),
        base_url="https://llm.test/v1",
        model="gpt-4o",
        caption_model="gpt-4o-mini",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_document_extraction_posts_image_and_parses_places():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_reply('{"places": [{"name": "Sky Zone"}]}'))

    result = asyncio.run(_extractor(handler).extract_document("aGVsbG8="))

    assert result == [{"name": "Sky Zone"}]
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    body = seen["body"]
    assert body["model"] == "gpt-4o"
    assert "max_completion_tokens" in body
    image_part = body["messages"][1]["content"][1]
    assert image_part["image_url"]["url"] == "data:image/jpeg;base64,aGVsbG8="


def test_pdf_uses_file_part():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_reply('{"places": []}'))

    result = asyncio.run(_extractor(handler).extract_document("JVBERi0=", "pdf"))

    assert result == []
    part = seen["body"]["messages"][1]["content"][1]
    assert part["type"] == "file"
    assert part["file"]["file_data"] == "data:application/pdf;base64,JVBERi0="


def test_caption_extraction_uses_caption_model():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_reply('{"name": "Grounds For Sculpture", "found": true}'))

    post = SocialPost(caption="Sculpture day!", owner_username="njweekends", hashtags=("#nj",))
    result = asyncio.run(_extractor(handler).extract_caption(post))

    assert result == [{"name": "Grounds For Sculpture", "found": True}]
    assert seen["body"]["model"] == "gpt-4o-mini"
    assert "Sculpture day!" in seen["body"]["messages"][1]["content"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="upstream down"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json=_reply("I can't help with that")),
        httpx.Response(200, json={"choices": [{"message": "oops"}]}),
        httpx.Response(200, json={"choices": ["nope"]}),
        httpx.Response(200, json={"choices": [{"message": {"content": [1, 2]}}]}),
    ],
)
def test_unusable_responses_raise(response):
    extractor = _extractor(lambda request: response)
    with pytest.raises(ExtractionFailed):
        asyncio.run(extractor.extract_document("https://example.com/a.jpg"))


def test_transport_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(ExtractionFailed):
        asyncio.run(_extractor(handler).extract_document("https://example.com/a.jpg"))


def test_missing_or_expired_key_never_calls_out():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=_reply('{"places": []}'))

    no_key = OpenAIVisionExtractor(None, transport=httpx.MockTransport(handler))
    expired = _extractor(
        handler,
        credential=ProviderCredential("sk-old", expires_at=datetime.now(UTC) - timedelta(days=1)),
    )
    for extractor in (no_key, expired):
        with pytest.raises(ExtractionFailed):
            asyncio.run(extractor.extract_document("https://example.com/a.jpg"))
    assert calls == []


def test_credential_expiry_accepts_naive_datetimes():
    credential = ProviderCredential("sk", expires_at=datetime(2020, 1, 1))
    assert credential.is_expired()
    assert not ProviderCredential("sk").is_expired()


def test_caption_prompt_mentions_location_and_rules():
    prompt = caption_prompt(
        SocialPost(caption="Hiking!", owner_username="me", location_name="High Point")
    )
    assert "Tagged Location: High Point" in prompt
    assert "NEVER include chain restaurants" in prompt
