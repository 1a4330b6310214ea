from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import ValidationError as PydanticValidationError

from ...contracts import (
    ExtractRequest,
    ExtractResponse,
    ImportCandidatesRequest,
    ImportResponse,
    Place,
    PlaceCreate,
    PlaceUpdate,
    SocialPostRequest,
    WeatherPicksResponse,
)
from ...errors import ExtractionFailed, ValidationError
from ...extraction import (
    DOCUMENT_SOURCE,
    ExtractionSource,
    is_excluded,
    is_instagram_url,
    normalize_candidates,
)
from ...extractor_client import PlaceExtractor, SocialPost, get_extractor
from ...filters import PlaceFilters, normalize_filters
from ...logging_config import get_logger
from ...metrics import record_extraction
from ...ranking import (
    WeatherReading,
    describe_weather,
    nearby_places,
    seasonal_highlights,
    weather_picks,
)
from ...seed import sample_places
from ...serializers import place_to_public, places_to_public
from ...settings import settings
from ...storage import DB
from ..types import (
    MonthQuery,
    PlaceId,
    PrecipitationChance,
    SearchQuery,
    TemperatureF,
    WeatherCode,
)

router = APIRouter(tags=["places"])
logger = get_logger(__name__)

# Filter values arrive as raw strings; the normalizer decides what they mean.
RawFilter = Annotated[str | None, Query()]


def place_filters(
    search: SearchQuery = None,
    category: RawFilter = None,
    sort: RawFilter = None,
    kid_friendly: Annotated[str | None, Query(alias="kidFriendly")] = None,
    wheelchair_accessible: Annotated[str | None, Query(alias="wheelchairAccessible")] = None,
    indoor_outdoor: Annotated[str | None, Query(alias="indoorOutdoor")] = None,
    max_distance: Annotated[str | None, Query(alias="maxDistance")] = None,
    min_rating: Annotated[str | None, Query(alias="minRating")] = None,
    favorites_only: Annotated[str | None, Query(alias="favoritesOnly")] = None,
) -> PlaceFilters:
    return PlaceFilters(
        search=search,
        category=category,
        sort=sort,
        kid_friendly=kid_friendly,
        wheelchair_accessible=wheelchair_accessible,
        indoor_outdoor=indoor_outdoor,
        max_distance=max_distance,
        min_rating=min_rating,
        favorites_only=favorites_only,
    )


@router.get("/places", response_model=list[Place])
async def list_places(request: Request, filters: PlaceFilters = Depends(place_filters)):
    places = await DB.list_places(normalize_filters(filters))
    return places_to_public(places, request)


@router.post("/places", response_model=Place, status_code=201)
async def create_place(payload: PlaceCreate, request: Request):
    place = await DB.create_place(payload)
    return place_to_public(place, request)


@router.post("/places/import", response_model=ImportResponse)
async def import_sample_places():
    result = await DB.import_places(sample_places())
    logger.info("sample_import_finished", created=result.count, skipped=result.skipped)
    return ImportResponse(success=True, count=result.count, skipped=result.skipped)


@router.get("/places/seasonal", response_model=list[Place])
async def seasonal_places(request: Request, month: MonthQuery = None):
    places = await DB.list_places()
    picks = seasonal_highlights(places, month or datetime.now().month)
    return places_to_public(picks, request)


@router.get("/places/weather-picks", response_model=WeatherPicksResponse)
async def weather_smart_picks(
    request: Request,
    code: WeatherCode,
    temperature: TemperatureF,
    precipitation: PrecipitationChance = 0,
):
    reading = WeatherReading(
        code=code, temperature_f=temperature, precipitation_probability=precipitation
    )
    good, message, picks = weather_picks(await DB.list_places(), reading)
    return WeatherPicksResponse(
        good_for_outdoor=good,
        description=describe_weather(code),
        message=message,
        places=places_to_public(picks, request),
    )


@router.post("/places/extract", response_model=ExtractResponse)
async def extract_places(
    payload: ExtractRequest,
    request: Request,
    extractor: PlaceExtractor = Depends(get_extractor),
):
    try:
        raw = await extractor.extract_document(payload.image, payload.file_type)
    except ExtractionFailed as exc:
        record_extraction("document", "failed")
        logger.warning("extraction_failed", kind="document", error=exc.message)
        return ExtractResponse(success=False, places=[], message=exc.message)

    places = normalize_candidates(raw, ExtractionSource.document())
    record_extraction("document", "ok", kept=len(places), dropped=len(raw) - len(places))
    logger.info("extraction_finished", kind="document", raw=len(raw), kept=len(places))
    return ExtractResponse(success=True, places=places_to_public(places, request))


@router.post("/places/extract/social", response_model=ExtractResponse)
async def extract_from_social_post(
    payload: SocialPostRequest,
    request: Request,
    extractor: PlaceExtractor = Depends(get_extractor),
):
    if payload.post_url and not is_instagram_url(payload.post_url):
        raise ValidationError("postUrl must be an Instagram post or reel link", "postUrl")
    post = SocialPost(
        caption=payload.caption,
        owner_username=payload.owner_username,
        location_name=payload.location_name,
        hashtags=tuple(payload.hashtags),
    )
    source = ExtractionSource.social(
        payload.owner_username, post_url=payload.post_url, display_url=payload.display_url
    )
    try:
        raw = await extractor.extract_caption(post)
    except ExtractionFailed as exc:
        record_extraction("social", "failed")
        logger.warning("extraction_failed", kind="social", error=exc.message)
        return ExtractResponse(success=False, places=[], message=exc.message)

    places = normalize_candidates(raw, source)
    record_extraction("social", "ok", kept=len(places), dropped=len(raw) - len(places))
    return ExtractResponse(success=True, places=places_to_public(places, request))


@router.post("/places/extract/import", response_model=ImportResponse)
async def import_extracted_places(payload: ImportCandidatesRequest):
    candidates: list[PlaceCreate] = []
    rejected = 0
    for index, item in enumerate(payload.places):
        try:
            candidate = PlaceCreate.model_validate(item)
        except PydanticValidationError as exc:
            rejected += 1
            logger.warning("import_candidate_invalid", index=index, errors=exc.error_count())
            continue
        if is_excluded(candidate.name, candidate.subcategory):
            rejected += 1
            continue
        if not candidate.source:
            candidate = candidate.model_copy(update={"source": DOCUMENT_SOURCE})
        candidates.append(candidate)

    result = await DB.import_places(candidates)
    return ImportResponse(success=True, count=result.count, skipped=result.skipped + rejected)


@router.get("/places/{place_id}", response_model=Place)
async def get_place(place_id: PlaceId, request: Request):
    return place_to_public(await DB.require_place(place_id), request)


@router.get("/places/{place_id}/nearby", response_model=list[Place])
async def get_nearby_places(place_id: PlaceId, request: Request):
    reference = await DB.require_place(place_id)
    picks = nearby_places(
        reference,
        await DB.list_places(),
        threshold=settings.NEARBY_THRESHOLD_MINUTES,
        limit=settings.NEARBY_LIMIT,
    )
    return places_to_public(picks, request)


@router.put("/places/{place_id}", response_model=Place)
async def update_place(place_id: PlaceId, payload: PlaceUpdate, request: Request):
    place = await DB.update_place(place_id, payload)
    return place_to_public(place, request)


@router.delete("/places/{place_id}", status_code=204, response_class=Response)
async def delete_place(place_id: PlaceId):
    await DB.delete_place(place_id)
    return Response(status_code=204)


__all__ = ["router"]
