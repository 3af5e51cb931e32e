"""Areas inside a property."""
from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Area
from ..schemas import AreaCreate, AreaUpdate
from .ownership import TargetPath, owned_property, resolve_chain

log = structlog.get_logger(__name__)


async def _area(session: AsyncSession, user_id: str, property_id: str, area_id: str) -> Area:
    chain = await resolve_chain(session, user_id, TargetPath(property_id, area_id))
    return chain.area


async def create_area(
    session: AsyncSession, user_id: str, property_id: str, payload: AreaCreate
) -> Area:
    prop = await owned_property(session, user_id, property_id)
    area = Area(property_id=prop.id, **payload.model_dump())
    session.add(area)
    await session.commit()
    await session.refresh(area)
    log.info("area_created", area_id=area.id, property_id=prop.id)
    return area


async def get_area(session: AsyncSession, user_id: str, property_id: str, area_id: str) -> Area:
    return await _area(session, user_id, property_id, area_id)


async def list_areas(session: AsyncSession, user_id: str, property_id: str) -> Sequence[Area]:
    prop = await owned_property(session, user_id, property_id)
    result = await session.execute(
        select(Area).where(Area.property_id == prop.id).order_by(Area.name)
    )
    return list(result.scalars().all())


async def update_area(
    session: AsyncSession, user_id: str, property_id: str, area_id: str, payload: AreaUpdate
) -> Area:
    area = await _area(session, user_id, property_id, area_id)
    changes = payload.changes()
    for field, value in changes.items():
        setattr(area, field, value)
    await session.commit()
    await session.refresh(area)
    log.info("area_updated", area_id=area.id, fields=sorted(changes))
    return area


async def delete_area(session: AsyncSession, user_id: str, property_id: str, area_id: str) -> None:
    area = await _area(session, user_id, property_id, area_id)
    await session.delete(area)
    await session.commit()
    log.info("area_deleted", area_id=area_id)
