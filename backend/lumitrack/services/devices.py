"""Devices inside an area."""
from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Device
from ..schemas import DeviceCreate, DeviceUpdate
from .ownership import TargetPath, resolve_chain

log = structlog.get_logger(__name__)


async def _device(session: AsyncSession, user_id: str, path: TargetPath) -> Device:
    chain = await resolve_chain(session, user_id, path)
    return chain.device


async def create_device(
    session: AsyncSession, user_id: str, property_id: str, area_id: str, payload: DeviceCreate
) -> Device:
    chain = await resolve_chain(session, user_id, TargetPath(property_id, area_id))
    device = Device(area_id=chain.area.id, **payload.model_dump())
    session.add(device)
    await session.commit()
    await session.refresh(device)
    log.info("device_created", device_id=device.id, area_id=chain.area.id)
    return device


async def get_device(session: AsyncSession, user_id: str, path: TargetPath) -> Device:
    return await _device(session, user_id, path)


async def list_devices(
    session: AsyncSession, user_id: str, property_id: str, area_id: str
) -> Sequence[Device]:
    chain = await resolve_chain(session, user_id, TargetPath(property_id, area_id))
    result = await session.execute(
        select(Device).where(Device.area_id == chain.area.id).order_by(Device.name)
    )
    return list(result.scalars().all())


async def update_device(
    session: AsyncSession, user_id: str, path: TargetPath, payload: DeviceUpdate
) -> Device:
    device = await _device(session, user_id, path)
    changes = payload.changes()
    for field, value in changes.items():
        setattr(device, field, value)
    await session.commit()
    await session.refresh(device)
    log.info("device_updated", device_id=device.id, fields=sorted(changes))
    return device


async def delete_device(session: AsyncSession, user_id: str, path: TargetPath) -> None:
    device = await _device(session, user_id, path)
    await session.delete(device)
    await session.commit()
    log.info("device_deleted", device_id=path.device_id)
