from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, HTTPException, Response

from ...errors import ValidationError
from ...images import is_valid_provider_ref
from ...logging_config import get_logger
from ...metrics import record_photo_proxy
from ...settings import settings
from ..types import PhotoRef

router = APIRouter(tags=["photos"])
logger = get_logger(__name__)


class PhotoFetcher:
    """Resolves provider photo tokens through the Places media endpoint."""

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str,
        max_width: int,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.max_width = max_width
        self.timeout = timeout
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool((self.api_key or "").strip())

    async def fetch(self, ref: str) -> tuple[bytes, str]:
        params = {"maxWidthPx": self.max_width, "key": self.api_key}
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self.transport, follow_redirects=True
        ) as client:
            response = await client.get(f"{self.base_url}/{ref}/media", params=params)
            response.raise_for_status()
        content_type = response.headers.get("content-type", "image/jpeg")
        return response.content, content_type


def get_photo_fetcher() -> PhotoFetcher:
    return PhotoFetcher(
        settings.GOOGLE_PLACES_API_KEY,
        base_url=settings.GOOGLE_PLACES_MEDIA_BASE,
        max_width=settings.PHOTO_MAX_WIDTH_PX,
    )


@router.get(settings.PHOTO_PROXY_PATH)
async def proxy_photo(ref: PhotoRef, fetcher: PhotoFetcher = Depends(get_photo_fetcher)):
    if not fetcher.enabled:
        record_photo_proxy("disabled")
        raise HTTPException(status_code=503, detail="Photo provider is not configured")
    if not is_valid_provider_ref(ref):
        record_photo_proxy("invalid")
        raise ValidationError("Invalid photo reference", "ref")

    try:
        content, content_type = await fetcher.fetch(ref)
    except httpx.HTTPError as exc:
        record_photo_proxy("error")
        logger.warning("photo_fetch_failed", error=str(exc))
        raise HTTPException(status_code=502, detail="Could not load photo") from exc

    record_photo_proxy("ok")
    return Response(
        content=content,
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )


__all__ = ["router"]
