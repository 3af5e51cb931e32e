"""Consumption ledger: one record per (target, period, reference date)."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import date

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, NotFoundError
from ..models import (
    AlertTargetType,
    Area,
    ConsumptionPeriod,
    ConsumptionRecord,
    ConsumptionTarget,
    Device,
    Property,
)
from ..schemas import ConsumptionCreate, ConsumptionUpdate
from .ownership import TargetPath, owned_property, resolve_chain
from .tariff import compute_cost, kwh_price_for

log = structlog.get_logger(__name__)

DUPLICATE_PERIOD_MESSAGE = "A record already exists for this period and date"


def _target_filter(target: ConsumptionTarget):
    return getattr(ConsumptionRecord, target.column) == target.id


async def _period_taken(
    session: AsyncSession,
    target: ConsumptionTarget,
    period: ConsumptionPeriod,
    reference_date: date,
) -> bool:
    result = await session.execute(
        select(ConsumptionRecord.id).where(
            _target_filter(target),
            ConsumptionRecord.period == period,
            ConsumptionRecord.reference_date == reference_date,
        )
    )
    return result.first() is not None


async def _target_under_property(
    session: AsyncSession, target: ConsumptionTarget, prop: Property
) -> bool:
    if target.kind is AlertTargetType.PROPERTY:
        return target.id == prop.id
    if target.kind is AlertTargetType.AREA:
        stmt = select(Area.id).where(Area.id == target.id, Area.property_id == prop.id)
    else:
        stmt = (
            select(Device.id)
            .join(Area, Area.id == Device.area_id)
            .where(Device.id == target.id, Area.property_id == prop.id)
        )
    result = await session.execute(stmt)
    return result.first() is not None


async def _record_in_property(
    session: AsyncSession, user_id: str, property_id: str, record_id: str
) -> tuple[Property, ConsumptionRecord]:
    """Load a record by id, provided it hangs somewhere under an owned property.

    Only the property is checked against the caller. A record attached to an
    area or device is accepted as long as that node belongs to the property,
    whichever area or device the caller believes it sits under.
    """

    prop = await owned_property(session, user_id, property_id)
    record = await session.get(ConsumptionRecord, record_id, populate_existing=True)
    if record is None or not await _target_under_property(session, record.target, prop):
        raise NotFoundError("Consumption record not found")
    return prop, record


async def _commit(session: AsyncSession) -> None:
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(DUPLICATE_PERIOD_MESSAGE) from exc


async def create_record(
    session: AsyncSession, user_id: str, path: TargetPath, payload: ConsumptionCreate
) -> ConsumptionRecord:
    chain = await resolve_chain(session, user_id, path)
    target = chain.target
    price = await kwh_price_for(session, chain.prop)

    if await _period_taken(session, target, payload.period, payload.reference_date):
        raise ConflictError(DUPLICATE_PERIOD_MESSAGE)

    record = ConsumptionRecord.for_target(
        target,
        period=payload.period,
        reference_date=payload.reference_date,
        kwh_consumed=payload.kwh_consumed,
        cost_brl=compute_cost(payload.kwh_consumed, price),
        notes=payload.notes,
    )
    session.add(record)
    await _commit(session)
    await session.refresh(record)
    log.info(
        "consumption_created",
        record_id=record.id,
        target_kind=target.kind.value,
        target_id=target.id,
        period=record.period.value,
    )
    return record


async def list_records(
    session: AsyncSession,
    user_id: str,
    path: TargetPath,
    period: ConsumptionPeriod | None = None,
) -> Sequence[ConsumptionRecord]:
    """Records of the deepest node in ``path``, newest reference date first."""

    chain = await resolve_chain(session, user_id, path)
    stmt = select(ConsumptionRecord).where(_target_filter(chain.target))
    if period is not None:
        stmt = stmt.where(ConsumptionRecord.period == period)
    stmt = stmt.order_by(
        ConsumptionRecord.reference_date.desc(), ConsumptionRecord.created_at.desc()
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_record(
    session: AsyncSession, user_id: str, property_id: str, record_id: str
) -> ConsumptionRecord:
    _, record = await _record_in_property(session, user_id, property_id, record_id)
    return record


async def update_record(
    session: AsyncSession,
    user_id: str,
    property_id: str,
    record_id: str,
    payload: ConsumptionUpdate,
) -> ConsumptionRecord:
    """Apply a partial update; cost follows only a new ``kwh_consumed``."""

    prop, record = await _record_in_property(session, user_id, property_id, record_id)
    changes = payload.changes()

    if "kwh_consumed" in changes:
        price = await kwh_price_for(session, prop)
        record.kwh_consumed = changes["kwh_consumed"]
        record.cost_brl = compute_cost(changes["kwh_consumed"], price)
    if "notes" in changes:
        record.notes = changes["notes"]

    await _commit(session)
    await session.refresh(record)
    log.info(
        "consumption_updated",
        record_id=record.id,
        fields=sorted(changes),
        cost_recomputed="kwh_consumed" in changes,
    )
    return record


async def delete_record(
    session: AsyncSession, user_id: str, property_id: str, record_id: str
) -> None:
    _, record = await _record_in_property(session, user_id, property_id, record_id)
    await session.delete(record)
    await session.commit()
    log.info("consumption_deleted", record_id=record_id)
