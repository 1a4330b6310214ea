from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from . import plans as composer
from .contracts import (
    Place,
    PlaceCreate,
    PlaceUpdate,
    Preferences,
    PreferencesUpdate,
    WeekendPlan,
    WeekendPlanCreate,
    WeekendPlanUpdate,
)
from .db.core import ensure_db_initialized, get_session
from .db.models import PlaceRecord, PlanRecord, PreferencesRecord
from .dedup import DedupGate
from .errors import NotFoundError, ValidationError
from .filters import PlaceQuery
from .metrics import record_place_import, record_plan_shared
from .ranking import match_places
from .settings import settings

logger = logging.getLogger(__name__)

_PLACE_COLUMNS = frozenset(column.name for column in PlaceRecord.__table__.columns) - {
    "id",
    "created_at",
    "updated_at",
}


@dataclass
class ImportResult:
    created: list[Place] = field(default_factory=list)
    skipped: int = 0

    @property
    def count(self) -> int:
        return len(self.created)


def _record_to_place(record: PlaceRecord) -> Place:
    data = record.to_dict()
    data["nearby_restaurants"] = data.get("nearby_restaurants") or []
    return Place.model_validate(data)


def _record_to_plan(record: PlanRecord) -> WeekendPlan:
    data = record.to_dict()
    data["places"] = data.get("places") or []
    return WeekendPlan.model_validate(data)


def _record_to_preferences(record: PreferencesRecord) -> Preferences:
    data = record.to_dict()
    data["preferred_categories"] = data.get("preferred_categories") or []
    return Preferences.model_validate(data)


def _place_columns(data: dict[str, Any]) -> dict[str, Any]:
    values = {key: value for key, value in data.items() if key in _PLACE_COLUMNS}
    if "nearby_restaurants" in values:
        values["nearby_restaurants"] = [
            dict(entry) if isinstance(entry, dict) else entry.model_dump()
            for entry in values["nearby_restaurants"] or []
        ]
    return values


def _stops_json(plan: WeekendPlan) -> list[dict[str, Any]]:
    return [stop.model_dump() for stop in plan.places]


class Database:
    """Places and weekend plans, persisted through SQLAlchemy async sessions."""

    def __init__(self) -> None:
        ensure_db_initialized()

    # -------- places --------
    async def _place_names(self, session, exclude_id: int | None = None) -> list[str]:
        stmt = select(PlaceRecord.name)
        if exclude_id is not None:
            stmt = stmt.where(PlaceRecord.id != exclude_id)
        return list((await session.execute(stmt)).scalars().all())

    async def list_places(self, query: PlaceQuery | None = None) -> list[Place]:
        async with get_session() as session:
            rows = (await session.execute(select(PlaceRecord))).scalars().all()
        places = [_record_to_place(row) for row in rows]
        return match_places(query or PlaceQuery(), places)

    async def get_place(self, place_id: int) -> Place | None:
        async with get_session() as session:
            record = await session.get(PlaceRecord, place_id)
            return _record_to_place(record) if record else None

    async def require_place(self, place_id: int) -> Place:
        place = await self.get_place(place_id)
        if place is None:
            raise NotFoundError("Place not found")
        return place

    async def create_place(self, payload: PlaceCreate) -> Place:
        async with get_session() as session:
            gate = DedupGate(await self._place_names(session))
            if payload.name in gate:
                raise ValidationError(f"A place named '{payload.name}' already exists", "name")
            record = PlaceRecord(**_place_columns(payload.model_dump()))
            session.add(record)
            await session.commit()
            await session.refresh(record)
            logger.info("Created place %s (%s)", record.id, record.name)
            return _record_to_place(record)

    async def update_place(self, place_id: int, payload: PlaceUpdate) -> Place:
        changes = payload.changes()
        async with get_session() as session:
            record = await session.get(PlaceRecord, place_id)
            if not record:
                raise NotFoundError("Place not found")
            new_name = changes.get("name")
            if new_name is not None:
                gate = DedupGate(await self._place_names(session, exclude_id=place_id))
                if new_name in gate:
                    raise ValidationError(f"A place named '{new_name}' already exists", "name")
            for key, value in _place_columns(changes).items():
                setattr(record, key, value)
            await session.commit()
            await session.refresh(record)
            return _record_to_place(record)

    async def delete_place(self, place_id: int) -> None:
        async with get_session() as session:
            record = await session.get(PlaceRecord, place_id)
            if not record:
                raise NotFoundError("Place not found")
            await session.delete(record)
            await session.commit()

    async def import_places(self, candidates: Iterable[PlaceCreate]) -> ImportResult:
        """Insert candidates one at a time behind the dedup gate.

        Each candidate is checked, inserted and committed before the next one is
        looked at, so two copies of the same place in one batch persist once.
        """
        result = ImportResult()
        async with get_session() as session:
            gate = DedupGate(await self._place_names(session))
            logger.debug("Import gate primed with %s existing names", len(gate))
            for candidate in candidates:
                if not gate.admit(candidate.name):
                    result.skipped += 1
                    record_place_import("duplicate")
                    logger.info("Skipping duplicate place %r", candidate.name)
                    continue
                record = PlaceRecord(**_place_columns(candidate.model_dump()))
                session.add(record)
                try:
                    await session.commit()
                except SQLAlchemyError:
                    await session.rollback()
                    gate.forget(candidate.name)
                    result.skipped += 1
                    record_place_import("error")
                    logger.exception("Failed to import place %r", candidate.name)
                    continue
                await session.refresh(record)
                result.created.append(_record_to_place(record))
                record_place_import("created")
        return result

    # -------- plans --------
    async def list_plans(self) -> list[WeekendPlan]:
        async with get_session() as session:
            stmt = select(PlanRecord).order_by(PlanRecord.id)
            rows = (await session.execute(stmt)).scalars().all()
            return [_record_to_plan(row) for row in rows]

    async def get_plan(self, plan_id: int) -> WeekendPlan | None:
        async with get_session() as session:
            record = await session.get(PlanRecord, plan_id)
            return _record_to_plan(record) if record else None

    async def create_plan(self, payload: WeekendPlanCreate) -> WeekendPlan:
        async with get_session() as session:
            record = PlanRecord(
                title=payload.title,
                places=[stop.model_dump() for stop in payload.places],
                plan_date=payload.plan_date,
                notes=payload.notes,
                status=payload.status,
            )
            session.add(record)
            await session.commit()
            await session.refresh(record)
            logger.info("Created plan %s with %s stops", record.id, len(payload.places))
            return _record_to_plan(record)

    async def update_plan(self, plan_id: int, payload: WeekendPlanUpdate) -> WeekendPlan:
        changes = payload.changes()
        async with get_session() as session:
            record = await session.get(PlanRecord, plan_id)
            if not record:
                raise NotFoundError("Plan not found")
            for key, value in changes.items():
                setattr(record, key, value)
            await session.commit()
            await session.refresh(record)
            return _record_to_plan(record)

    async def delete_plan(self, plan_id: int) -> None:
        async with get_session() as session:
            record = await session.get(PlanRecord, plan_id)
            if not record:
                raise NotFoundError("Plan not found")
            await session.delete(record)
            await session.commit()

    async def _mutate_stops(
        self, plan_id: int, change: Callable[[WeekendPlan], WeekendPlan]
    ) -> WeekendPlan:
        async with get_session() as session:
            record = await session.get(PlanRecord, plan_id)
            if not record:
                raise NotFoundError("Plan not found")
            # `change` raises before anything is written
            updated = change(_record_to_plan(record))
            record.places = _stops_json(updated)
            await session.commit()
            await session.refresh(record)
            return _record_to_plan(record)

    async def add_plan_stop(
        self, plan_id: int, place_id: int, note: str | None = None
    ) -> WeekendPlan:
        await self.require_place(place_id)
        return await self._mutate_stops(
            plan_id, lambda plan: composer.add_place(plan, place_id, note)
        )

    async def remove_plan_stop(self, plan_id: int, place_id: int) -> WeekendPlan:
        return await self._mutate_stops(
            plan_id, lambda plan: composer.remove_place(plan, place_id)
        )

    async def reorder_plan(self, plan_id: int, new_order: list[int]) -> WeekendPlan:
        return await self._mutate_stops(plan_id, lambda plan: composer.reorder(plan, new_order))

    async def share_plan(self, plan_id: int) -> WeekendPlan:
        """Give the plan a share code if it has none; an existing code is kept."""
        async with get_session() as session:
            record = await session.get(PlanRecord, plan_id)
            if not record:
                raise NotFoundError("Plan not found")
            plan, minted = composer.ensure_share_code(
                _record_to_plan(record), settings.SHARE_CODE_BYTES
            )
            if not minted:
                record_plan_shared("existing")
                return plan
            # only fills an empty code, so a concurrent share cannot rotate it
            await session.execute(
                update(PlanRecord)
                .where(PlanRecord.id == plan_id, PlanRecord.share_code.is_(None))
                .values(share_code=plan.share_code)
            )
            await session.commit()
            await session.refresh(record)
            stored = _record_to_plan(record)
            record_plan_shared("created" if stored.share_code == plan.share_code else "existing")
            logger.info("Shared plan %s", plan_id)
            return stored

    async def resolve_shared(self, share_code: str) -> tuple[WeekendPlan, list[Place]]:
        if not share_code:
            raise NotFoundError("Shared plan not found")
        async with get_session() as session:
            stmt = select(PlanRecord).where(PlanRecord.share_code == share_code)
            record = (await session.execute(stmt)).scalar_one_or_none()
            if record is None:
                raise NotFoundError("Shared plan not found")
            plan = _record_to_plan(record)
            ids = set(composer.place_ids(plan))
            rows = []
            if ids:
                place_stmt = select(PlaceRecord).where(PlaceRecord.id.in_(ids))
                rows = (await session.execute(place_stmt)).scalars().all()
        by_id = {row.id: _record_to_place(row) for row in rows}
        return plan, composer.referenced_places(plan, by_id)

    # -------- preferences --------
    async def _preferences_record(self, session) -> PreferencesRecord | None:
        stmt = select(PreferencesRecord).order_by(PreferencesRecord.id).limit(1)
        return (await session.execute(stmt)).scalar_one_or_none()

    async def get_preferences(self) -> Preferences:
        """Stored preferences, or the defaults when none were saved yet."""
        async with get_session() as session:
            record = await self._preferences_record(session)
            return _record_to_preferences(record) if record else Preferences()

    async def update_preferences(self, payload: PreferencesUpdate) -> Preferences:
        changes = payload.changes()
        async with get_session() as session:
            record = await self._preferences_record(session)
            if record is None:
                record = PreferencesRecord(**changes)
                session.add(record)
            else:
                for key, value in changes.items():
                    setattr(record, key, value)
            await session.commit()
            await session.refresh(record)
            logger.info("Saved preferences (%s)", ", ".join(sorted(changes)) or "no changes")
            return _record_to_preferences(record)

    # -------- maintenance --------
    async def purge(self) -> None:
        """Remove every plan, place and saved preference; used by tests and local resets."""
        async with get_session() as session:
            await session.execute(delete(PlanRecord))
            await session.execute(delete(PlaceRecord))
            await session.execute(delete(PreferencesRecord))
            await session.commit()


DB = Database()
