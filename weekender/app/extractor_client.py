"""HTTP client for the vision/caption extractor (OpenAI-compatible API).

Callers hand in a `ProviderCredential` for every call; nothing here caches a
token or a client between requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal, Protocol

import httpx

from .errors import ExtractionFailed
from .extraction import parse_extractor_content
from .settings import settings

logger = logging.getLogger(__name__)

DOCUMENT_SYSTEM_PROMPT = (
    "You are a data extraction assistant. You extract structured data from images of "
    "documents or screenshots about travel destinations. You ONLY return valid JSON."
)

DOCUMENT_PROMPT = (
    "Extract place details from this image/document. Return a JSON object "
    '{"places": [...]} where each place has these fields: name, overview, address, city, '
    "state, category, subcategory, indoor_outdoor (indoor, outdoor or both), key_highlights, "
    "insider_tips, entry_fee, best_seasons, google_rating, distance_miles, "
    "drive_time_minutes, kid_friendly, wheelchair_accessible, nearby_restaurants "
    "(array of {name, description, distance}), average_visit_duration, found, "
    "confidence (0-1). If a field is missing, use null."
)

CAPTION_SYSTEM_PROMPT = (
    "You are a travel assistant that extracts place information from social media posts. "
    "Be precise and only extract real, identifiable places."
)

CAPTION_RULES = (
    "IMPORTANT RULES:\n"
    "- NEVER include bars, wineries, breweries, or any alcohol-related venues\n"
    "- NEVER include chain restaurants (Starbucks, McDonald's, Panera, Chick-fil-A, "
    "Subway, etc.)\n"
    "- Focus on unique local restaurants, attractions, nature spots, and experiences"
)

CAPTION_SCHEMA = (
    "Extract the following as JSON:\n"
    "{\n"
    '  "name": "Place name (required)",\n'
    '  "address": "Full address if mentioned or can be inferred",\n'
    '  "city": "City name",\n'
    '  "state": "State abbreviation",\n'
    '  "category": "Category: Nature/Park, Restaurant, Museum, Attraction, Beach, '
    'Hiking Trail, etc.",\n'
    '  "overview": "2-3 sentence description of why someone would want to visit",\n'
    '  "found": true/false - whether a valid place was found\n'
    "}\n\n"
    "If no specific place can be identified, set found to false."
)

_NEW_STYLE_MODEL_PREFIXES = ("gpt-4o", "gpt-4.1", "gpt-5", "o1", "o3", "o4")


@dataclass(frozen=True)
class ProviderCredential:
    """API token for the extractor plus an optional hard expiry."""

    token: str
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        current = now or datetime.now(UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return current >= expires_at

    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def credential_from_settings() -> ProviderCredential | None:
    if not settings.OPENAI_API_KEY:
        return None
    return ProviderCredential(
        token=settings.OPENAI_API_KEY, expires_at=settings.OPENAI_API_KEY_EXPIRES_AT
    )


@dataclass(frozen=True)
class SocialPost:
    caption: str
    owner_username: str
    location_name: str | None = None
    hashtags: tuple[str, ...] = ()


class PlaceExtractor(Protocol):
    async def extract_document(
        self, image: str, file_type: Literal["image", "pdf"] = "image"
    ) -> list[dict[str, Any]]: ...

    async def extract_caption(self, post: SocialPost) -> list[dict[str, Any]]: ...


def _token_param(model: str) -> str:
    name = model.lower()
    if name.startswith(_NEW_STYLE_MODEL_PREFIXES):
        return "max_completion_tokens"
    return "max_tokens"


def _document_part(image: str, file_type: str) -> dict[str, Any]:
    if file_type == "pdf":
        data = image if image.startswith("data:") else f"data:application/pdf;base64,{image}"
        return {"type": "file", "file": {"filename": "upload.pdf", "file_data": data}}
    if not image.startswith(("http://", "https://", "data:")):
        image = f"data:image/jpeg;base64,{image}"
    return {"type": "image_url", "image_url": {"url": image}}


def caption_prompt(post: SocialPost) -> str:
    lines = [
        "Extract place/destination information from this Instagram post caption. "
        "The user wants to save this as a place to visit.",
        "",
        "Instagram Caption:",
        f'"{post.caption}"',
        "",
    ]
    if post.location_name:
        lines.append(f"Tagged Location: {post.location_name}")
    if post.hashtags:
        lines.append(f"Hashtags: {', '.join(post.hashtags)}")
    lines.extend(["", CAPTION_RULES, "", CAPTION_SCHEMA])
    return "\n".join(lines)


class OpenAIVisionExtractor:
    def __init__(
        self,
        credential: ProviderCredential | None,
        *,
        base_url: str | None = None,
        model: str | None = None,
        caption_model: str | None = None,
        timeout: httpx.Timeout | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.credential = credential
        self.base_url = (base_url or settings.OPENAI_API_BASE).rstrip("/")
        self.model = model or settings.EXTRACTION_MODEL
        self.caption_model = caption_model or settings.EXTRACTION_CAPTION_MODEL
        self.timeout = timeout or httpx.Timeout(
            settings.OPENAI_TIMEOUT_SECONDS, connect=settings.OPENAI_CONNECT_TIMEOUT_SECONDS
        )
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        if self.credential is None:
            raise ExtractionFailed("Extractor API key not configured")
        if self.credential.is_expired():
            raise ExtractionFailed("Extractor API key has expired")
        return {**self.credential.authorization_header(), "Content-Type": "application/json"}

    async def _complete(self, payload: dict[str, Any]) -> str | None:
        headers = self._headers()
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:
            try:
                response = await client.post("/chat/completions", json=payload, headers=headers)
            except httpx.HTTPError as exc:
                logger.warning("Extractor request failed: %s", exc)
                raise ExtractionFailed("Extractor request failed") from exc

        if response.status_code >= 400:
            logger.warning(
                "Extractor error %s: %s", response.status_code, response.text[:200]
            )
            raise ExtractionFailed(f"Extractor error {response.status_code}")
        try:
            body = response.json()
        except ValueError as exc:
            raise ExtractionFailed("Invalid JSON from extractor") from exc

        choices = body.get("choices") if isinstance(body, dict) else None
        if not choices or not isinstance(choices, list):
            raise ExtractionFailed("Extractor returned no choices")
        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            raise ExtractionFailed("Extractor reply malformed")
        content = message.get("content")
        if content is not None and not isinstance(content, str):
            raise ExtractionFailed("Extractor reply malformed")
        return content

    async def extract_document(
        self, image: str, file_type: Literal["image", "pdf"] = "image"
    ) -> list[dict[str, Any]]:
        payload: dict[str, Any] = {
            "model": self.model,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": DOCUMENT_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": DOCUMENT_PROMPT},
                        _document_part(image, file_type),
                    ],
                },
            ],
        }
        payload[_token_param(self.model)] = settings.EXTRACTION_MAX_TOKENS
        return parse_extractor_content(await self._complete(payload))

    async def extract_caption(self, post: SocialPost) -> list[dict[str, Any]]:
        payload: dict[str, Any] = {
            "model": self.caption_model,
            "temperature": 0.3,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": CAPTION_SYSTEM_PROMPT},
                {"role": "user", "content": caption_prompt(post)},
            ],
        }
        return parse_extractor_content(await self._complete(payload))


def get_extractor() -> PlaceExtractor:
    """FastAPI dependency; tests override it with a fake."""
    return OpenAIVisionExtractor(credential_from_settings())


__all__ = [
    "OpenAIVisionExtractor",
    "PlaceExtractor",
    "ProviderCredential",
    "SocialPost",
    "caption_prompt",
    "credential_from_settings",
    "get_extractor",
]
