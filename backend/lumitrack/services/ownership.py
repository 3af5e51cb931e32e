"""Ownership-chain validation for the property → area → device hierarchy.

Every operation on a nested resource walks the chain again from the
database. Nothing about a previously verified path is remembered, so a
property that changed hands or disappeared between two calls is caught on
the next one.

Failure semantics:

* property missing -> ``NotFoundError``
* property owned by someone else -> ``ForbiddenError``
* area or device missing, or not a child of the claimed parent ->
  ``NotFoundError``. Once the caller has proven they own the property they
  are told a child does not exist under it, never that it is forbidden.

Lookups bypass the identity map (``populate_existing``) so each check reads
current rows even when the session already holds a copy.
"""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ForbiddenError, NotFoundError
from ..models import Area, ConsumptionTarget, Device, Property


@dataclass(frozen=True)
class TargetPath:
    """The ids a caller claims, from the property down to the deepest node."""

    property_id: str
    area_id: str | None = None
    device_id: str | None = None

    def __post_init__(self) -> None:
        if self.device_id is not None and self.area_id is None:
            raise ValueError("a device path needs its area id")


@dataclass(frozen=True)
class ResolvedChain:
    """Entities loaded while validating a ``TargetPath``."""

    prop: Property
    area: Area | None = None
    device: Device | None = None

    @property
    def target(self) -> ConsumptionTarget:
        if self.device is not None:
            return ConsumptionTarget.of_device(self.device.id)
        if self.area is not None:
            return ConsumptionTarget.of_area(self.area.id)
        return ConsumptionTarget.of_property(self.prop.id)


async def owned_property(session: AsyncSession, user_id: str, property_id: str) -> Property:
    prop = await session.get(Property, property_id, populate_existing=True)
    if prop is None:
        raise NotFoundError("Property not found")
    if prop.user_id != user_id:
        raise ForbiddenError("Access denied")
    return prop


async def area_in_property(session: AsyncSession, area_id: str, property_id: str) -> Area:
    area = await session.get(Area, area_id, populate_existing=True)
    if area is None or area.property_id != property_id:
        raise NotFoundError("Area not found")
    return area


async def device_in_area(session: AsyncSession, device_id: str, area_id: str) -> Device:
    device = await session.get(Device, device_id, populate_existing=True)
    if device is None or device.area_id != area_id:
        raise NotFoundError("Device not found")
    return device


async def resolve_chain(session: AsyncSession, user_id: str, path: TargetPath) -> ResolvedChain:
    """Validate ``path`` top-down for ``user_id``; stops at the first broken link."""

    prop = await owned_property(session, user_id, path.property_id)
    if path.area_id is None:
        return ResolvedChain(prop=prop)

    area = await area_in_property(session, path.area_id, prop.id)
    if path.device_id is None:
        return ResolvedChain(prop=prop, area=area)

    device = await device_in_area(session, path.device_id, area.id)
    return ResolvedChain(prop=prop, area=area, device=device)
