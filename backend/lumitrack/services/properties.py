"""Properties: the top of each user's hierarchy."""
from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Property
from ..schemas import PropertyCreate, PropertyUpdate
from .distributors import owned_distributor
from .ownership import owned_property

log = structlog.get_logger(__name__)


async def create_property(
    session: AsyncSession, user_id: str, payload: PropertyCreate
) -> Property:
    # A property may only be billed through one of the owner's own distributors.
    await owned_distributor(session, user_id, payload.distributor_id)

    prop = Property(user_id=user_id, **payload.model_dump())
    session.add(prop)
    await session.commit()
    await session.refresh(prop)
    log.info("property_created", property_id=prop.id, user_id=user_id)
    return prop


async def get_property(session: AsyncSession, user_id: str, property_id: str) -> Property:
    return await owned_property(session, user_id, property_id)


async def list_properties(session: AsyncSession, user_id: str) -> Sequence[Property]:
    result = await session.execute(
        select(Property).where(Property.user_id == user_id).order_by(Property.name)
    )
    return list(result.scalars().all())


async def update_property(
    session: AsyncSession, user_id: str, property_id: str, payload: PropertyUpdate
) -> Property:
    prop = await owned_property(session, user_id, property_id)
    changes = payload.changes()
    if "distributor_id" in changes and changes["distributor_id"] != prop.distributor_id:
        await owned_distributor(session, user_id, changes["distributor_id"])

    for field, value in changes.items():
        setattr(prop, field, value)
    await session.commit()
    await session.refresh(prop)
    log.info("property_updated", property_id=prop.id, fields=sorted(changes))
    return prop


async def delete_property(session: AsyncSession, user_id: str, property_id: str) -> None:
    """Remove the property; areas, devices and records go with it."""

    prop = await owned_property(session, user_id, property_id)
    await session.delete(prop)
    await session.commit()
    log.info("property_deleted", property_id=property_id)
