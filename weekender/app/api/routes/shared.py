from __future__ import annotations

from fastapi import APIRouter, Request

from ...contracts import SharedPlanResponse
from ...serializers import places_to_public
from ...storage import DB

router = APIRouter(tags=["shared"])


@router.get("/shared/{share_code}", response_model=SharedPlanResponse)
async def view_shared_plan(request: Request, share_code: str):
    """Read-only view of a shared plan with the places it references."""
    plan, places = await DB.resolve_shared(share_code)
    return SharedPlanResponse(plan=plan, places=places_to_public(places, request))


__all__ = ["router"]
