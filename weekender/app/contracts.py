from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .filters import MAX_DISTANCE_CEILING
from .validators import (
    TEXT_MAX_LENGTH,
    normalize_display_name,
    normalize_note,
)

PlaceCategory = Literal[
    "nature",
    "family",
    "animals",
    "adventurous",
    "exercise",
    "historical",
    "educational",
    "seasonal",
    "dining",
    "indoor",
    "outdoor",
    "theme",
    "beach",
    "general",
]

IndoorOutdoor = Literal["indoor", "outdoor", "both"]
PlanStatus = Literal["draft", "confirmed", "completed"]


class APIModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _lower_enum(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


# --- Places ---
class NearbyRestaurant(APIModel):
    name: str
    description: str | None = None
    distance: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        return normalize_display_name(value)


class PlaceFields(APIModel):
    category: PlaceCategory = "general"
    subcategory: str | None = None
    indoor_outdoor: IndoorOutdoor | None = None
    address: str | None = None
    google_maps_url: str | None = None
    distance_miles: float | None = Field(default=None, ge=0)
    drive_time_minutes: int | None = Field(default=None, ge=0)
    rating: float | None = Field(default=None, ge=0, le=5)
    kid_friendly: bool = False
    wheelchair_accessible: bool = False
    favorite: bool = False
    visited: bool = False
    image_url: str | None = None
    overview: str | None = Field(default=None, max_length=TEXT_MAX_LENGTH)
    key_highlights: str | None = Field(default=None, max_length=TEXT_MAX_LENGTH)
    insider_tips: str | None = Field(default=None, max_length=TEXT_MAX_LENGTH)
    entry_fee: str | None = None
    best_seasons: str | None = None
    average_visit_duration: str | None = None
    user_notes: str | None = None
    nearby_restaurants: list[NearbyRestaurant] = Field(default_factory=list)
    source: str | None = None

    @field_validator("category", "indoor_outdoor", mode="before")
    @classmethod
    def _enums(cls, value: Any) -> Any:
        return _lower_enum(value)

    @field_validator("user_notes")
    @classmethod
    def _user_notes(cls, value: str | None) -> str | None:
        return normalize_note(value, field="userNotes")


class PlaceCreate(PlaceFields):
    name: str

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        return normalize_display_name(value)


_REQUIRED_ON_UPDATE = (
    "name",
    "category",
    "kid_friendly",
    "wheelchair_accessible",
    "favorite",
    "visited",
    "nearby_restaurants",
)


class PlaceUpdate(APIModel):
    """Partial update; only fields present in the request are applied."""

    name: str | None = None
    category: PlaceCategory | None = None
    subcategory: str | None = None
    indoor_outdoor: IndoorOutdoor | None = None
    address: str | None = None
    google_maps_url: str | None = None
    distance_miles: float | None = Field(default=None, ge=0)
    drive_time_minutes: int | None = Field(default=None, ge=0)
    rating: float | None = Field(default=None, ge=0, le=5)
    kid_friendly: bool | None = None
    wheelchair_accessible: bool | None = None
    favorite: bool | None = None
    visited: bool | None = None
    image_url: str | None = None
    overview: str | None = Field(default=None, max_length=TEXT_MAX_LENGTH)
    key_highlights: str | None = Field(default=None, max_length=TEXT_MAX_LENGTH)
    insider_tips: str | None = Field(default=None, max_length=TEXT_MAX_LENGTH)
    entry_fee: str | None = None
    best_seasons: str | None = None
    average_visit_duration: str | None = None
    user_notes: str | None = None
    nearby_restaurants: list[NearbyRestaurant] | None = None
    source: str | None = None

    @field_validator("category", "indoor_outdoor", mode="before")
    @classmethod
    def _enums(cls, value: Any) -> Any:
        return _lower_enum(value)

    @field_validator("name")
    @classmethod
    def _name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return normalize_display_name(value)

    @field_validator("user_notes")
    @classmethod
    def _user_notes(cls, value: str | None) -> str | None:
        return normalize_note(value, field="userNotes")

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        # these map to NOT NULL columns; null means "leave as is"
        for key in _REQUIRED_ON_UPDATE:
            if key in data and data[key] is None:
                data.pop(key)
        return data


class Place(PlaceFields):
    id: int
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


# --- Plans ---
class PlanStop(APIModel):
    place_id: int = Field(ge=1)
    note: str | None = None

    @field_validator("note")
    @classmethod
    def _note(cls, value: str | None) -> str | None:
        return normalize_note(value, field="note")


class WeekendPlanCreate(APIModel):
    title: str | None = None
    places: list[PlanStop] = Field(default_factory=list)
    plan_date: date | None = None
    notes: str | None = None
    status: PlanStatus = "draft"

    @field_validator("title")
    @classmethod
    def _title(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return normalize_display_name(value, field="title")

    @field_validator("notes")
    @classmethod
    def _notes(cls, value: str | None) -> str | None:
        return normalize_note(value)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        return _lower_enum(value)


class WeekendPlanUpdate(WeekendPlanCreate):
    places: list[PlanStop] | None = None  # type: ignore[assignment]
    status: PlanStatus | None = None  # type: ignore[assignment]

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        for key in ("places", "status"):
            if key in data and data[key] is None:
                data.pop(key)
        return data


class WeekendPlan(WeekendPlanCreate):
    id: int
    share_code: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AddStopRequest(APIModel):
    place_id: int = Field(ge=1)
    note: str | None = None

    @field_validator("note")
    @classmethod
    def _note(cls, value: str | None) -> str | None:
        return normalize_note(value, field="note")


class ReorderRequest(APIModel):
    place_ids: list[int]


class ShareResponse(APIModel):
    share_code: str
    share_url: str


class SharedPlanResponse(APIModel):
    plan: WeekendPlan
    places: list[Place]


# --- Preferences ---
class PreferencesUpdate(APIModel):
    """Partial update of the single preferences row."""

    home_address: str | None = None
    home_latitude: float | None = Field(default=None, ge=-90, le=90)
    home_longitude: float | None = Field(default=None, ge=-180, le=180)
    default_max_distance: int | None = Field(default=None, ge=0, le=int(MAX_DISTANCE_CEILING))
    preferred_categories: list[PlaceCategory] | None = None

    @field_validator("home_address")
    @classmethod
    def _home_address(cls, value: str | None) -> str | None:
        return normalize_note(value, field="homeAddress", max_length=512)

    @field_validator("preferred_categories", mode="before")
    @classmethod
    def _categories(cls, value: Any) -> Any:
        if isinstance(value, list):
            return list(dict.fromkeys(_lower_enum(item) for item in value))
        return value

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        for key in ("default_max_distance", "preferred_categories"):
            if key in data and data[key] is None:
                data.pop(key)
        return data


class Preferences(APIModel):
    # no stored row yet means id is None and the defaults apply
    id: int | None = None
    home_address: str | None = None
    home_latitude: float | None = None
    home_longitude: float | None = None
    # the filter ceiling doubles as "no distance limit"
    default_max_distance: int = int(MAX_DISTANCE_CEILING)
    preferred_categories: list[PlaceCategory] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


# --- Import & extraction ---
class ImportResponse(APIModel):
    success: bool = True
    count: int
    skipped: int = 0


class ExtractRequest(APIModel):
    image_data: str | None = None
    image_url: str | None = None
    file_type: Literal["image", "pdf"] = "image"

    @field_validator("file_type", mode="before")
    @classmethod
    def _file_type(cls, value: Any) -> Any:
        return _lower_enum(value)

    @model_validator(mode="after")
    def _require_image(self) -> "ExtractRequest":
        if not (self.image_data or "").strip() and not (self.image_url or "").strip():
            raise ValueError("imageData or imageUrl is required")
        return self

    @property
    def image(self) -> str:
        return (self.image_data or "").strip() or (self.image_url or "").strip()


class SocialPostRequest(APIModel):
    caption: str = Field(min_length=1, max_length=TEXT_MAX_LENGTH)
    owner_username: str = Field(min_length=1, max_length=64)
    post_url: str | None = None
    location_name: str | None = None
    hashtags: list[str] = Field(default_factory=list)
    display_url: str | None = None

    @field_validator("owner_username")
    @classmethod
    def _handle(cls, value: str) -> str:
        cleaned = value.strip().lstrip("@")
        if not cleaned:
            raise ValueError("ownerUsername cannot be blank")
        return cleaned


class ExtractResponse(APIModel):
    success: bool
    places: list[PlaceCreate] = Field(default_factory=list)
    message: str | None = None


class ImportCandidatesRequest(APIModel):
    places: list[dict[str, Any]] = Field(default_factory=list)


class WeatherPicksResponse(APIModel):
    good_for_outdoor: bool
    description: str
    message: str
    places: list[Place]


__all__ = [
    "APIModel",
    "AddStopRequest",
    "ExtractRequest",
    "ExtractResponse",
    "ImportCandidatesRequest",
    "ImportResponse",
    "IndoorOutdoor",
    "NearbyRestaurant",
    "Place",
    "PlaceCategory",
    "PlaceCreate",
    "PlaceFields",
    "PlaceUpdate",
    "PlanStatus",
    "PlanStop",
    "Preferences",
    "PreferencesUpdate",
    "ReorderRequest",
    "ShareResponse",
    "SharedPlanResponse",
    "SocialPostRequest",
    "WeatherPicksResponse",
    "WeekendPlan",
    "WeekendPlanCreate",
    "WeekendPlanUpdate",
]
