from __future__ import annotations

from fastapi import APIRouter

from ...contracts import Preferences, PreferencesUpdate
from ...logging_config import get_logger
from ...storage import DB

router = APIRouter(tags=["preferences"])
logger = get_logger(__name__)


@router.get("/preferences", response_model=Preferences)
async def get_preferences():
    return await DB.get_preferences()


@router.put("/preferences", response_model=Preferences)
async def update_preferences(payload: PreferencesUpdate):
    preferences = await DB.update_preferences(payload)
    logger.info(
        "preferences_updated",
        default_max_distance=preferences.default_max_distance,
        categories=len(preferences.preferred_categories),
    )
    return preferences


__all__ = ["router"]
