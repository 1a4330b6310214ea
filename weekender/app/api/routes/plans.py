from __future__ import annotations

from fastapi import APIRouter, Request, Response

from ... import plans as composer
from ...contracts import (
    AddStopRequest,
    ReorderRequest,
    ShareResponse,
    WeekendPlan,
    WeekendPlanCreate,
    WeekendPlanUpdate,
)
from ...errors import NotFoundError
from ...logging_config import get_logger
from ...storage import DB
from ...utils import public_base_url
from ..types import PlaceId, PlanId

router = APIRouter(tags=["plans"])
logger = get_logger(__name__)


@router.get("/plans", response_model=list[WeekendPlan])
async def list_plans():
    return await DB.list_plans()


@router.post("/plans", response_model=WeekendPlan, status_code=201)
async def create_plan(payload: WeekendPlanCreate):
    return await DB.create_plan(payload)


@router.get("/plans/{plan_id}", response_model=WeekendPlan)
async def get_plan(plan_id: PlanId):
    plan = await DB.get_plan(plan_id)
    if plan is None:
        raise NotFoundError("Plan not found")
    return plan


@router.put("/plans/{plan_id}", response_model=WeekendPlan)
async def update_plan(plan_id: PlanId, payload: WeekendPlanUpdate):
    return await DB.update_plan(plan_id, payload)


@router.delete("/plans/{plan_id}", status_code=204, response_class=Response)
async def delete_plan(plan_id: PlanId):
    await DB.delete_plan(plan_id)
    return Response(status_code=204)


@router.post("/plans/{plan_id}/places", response_model=WeekendPlan)
async def add_plan_stop(plan_id: PlanId, payload: AddStopRequest):
    return await DB.add_plan_stop(plan_id, payload.place_id, payload.note)


@router.delete("/plans/{plan_id}/places/{place_id}", response_model=WeekendPlan)
async def remove_plan_stop(plan_id: PlanId, place_id: PlaceId):
    return await DB.remove_plan_stop(plan_id, place_id)


@router.put("/plans/{plan_id}/order", response_model=WeekendPlan)
async def reorder_plan(plan_id: PlanId, payload: ReorderRequest):
    return await DB.reorder_plan(plan_id, payload.place_ids)


@router.post("/plans/{plan_id}/share", response_model=ShareResponse)
async def share_plan(plan_id: PlanId, request: Request):
    plan = await DB.share_plan(plan_id)
    code = plan.share_code or ""
    url = composer.share_url(public_base_url(request), code)
    logger.info("plan_shared", plan_id=plan_id)
    return ShareResponse(share_code=code, share_url=url)


__all__ = ["router"]
