"""Per-user catalogue of distributor tariff contracts."""
from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, ForbiddenError, NotFoundError
from ..models import EnergyDistributor, Property
from ..schemas import DistributorCreate, DistributorUpdate

log = structlog.get_logger(__name__)

DUPLICATE_CNPJ_MESSAGE = "Distributor CNPJ already registered"


async def owned_distributor(
    session: AsyncSession, user_id: str, distributor_id: str
) -> EnergyDistributor:
    distributor = await session.get(
        EnergyDistributor, distributor_id, populate_existing=True
    )
    if distributor is None:
        raise NotFoundError("Distributor not found")
    if distributor.user_id != user_id:
        raise ForbiddenError("Access denied")
    return distributor


async def create_distributor(
    session: AsyncSession, user_id: str, payload: DistributorCreate
) -> EnergyDistributor:
    duplicate = await session.execute(
        select(EnergyDistributor.id).where(
            EnergyDistributor.user_id == user_id,
            EnergyDistributor.cnpj == payload.cnpj,
        )
    )
    if duplicate.first() is not None:
        raise ConflictError(DUPLICATE_CNPJ_MESSAGE)

    distributor = EnergyDistributor(user_id=user_id, **payload.model_dump())
    session.add(distributor)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(DUPLICATE_CNPJ_MESSAGE) from exc
    await session.refresh(distributor)
    log.info("distributor_created", distributor_id=distributor.id, user_id=user_id)
    return distributor


async def list_distributors(session: AsyncSession, user_id: str) -> Sequence[EnergyDistributor]:
    result = await session.execute(
        select(EnergyDistributor)
        .where(EnergyDistributor.user_id == user_id)
        .order_by(EnergyDistributor.name)
    )
    return list(result.scalars().all())


async def update_distributor(
    session: AsyncSession, user_id: str, distributor_id: str, payload: DistributorUpdate
) -> EnergyDistributor:
    """Change tariff fields; existing consumption costs are left as recorded."""

    distributor = await owned_distributor(session, user_id, distributor_id)
    changes = payload.changes()
    for field, value in changes.items():
        setattr(distributor, field, value)
    await session.commit()
    await session.refresh(distributor)
    log.info("distributor_updated", distributor_id=distributor.id, fields=sorted(changes))
    return distributor


async def delete_distributor(session: AsyncSession, user_id: str, distributor_id: str) -> None:
    distributor = await owned_distributor(session, user_id, distributor_id)
    in_use = await session.scalar(
        select(func.count(Property.id)).where(Property.distributor_id == distributor.id)
    )
    if in_use:
        log.info(
            "distributor_delete_blocked",
            distributor_id=distributor.id,
            property_count=in_use,
        )
        raise ConflictError("Distributor is linked to properties and cannot be deleted")

    await session.delete(distributor)
    await session.commit()
    log.info("distributor_deleted", distributor_id=distributor_id)
