"""Property, area and device endpoints.

Every nested route re-validates the full ownership chain through the
services before touching its own row.
"""
from typing import Sequence

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_current_user, get_db_session
from ..models import Area, Device, Property, User
from ..schemas import (
    AreaCreate,
    AreaRead,
    AreaUpdate,
    DeviceCreate,
    DeviceRead,
    DeviceUpdate,
    PropertyCreate,
    PropertyRead,
    PropertyUpdate,
)
from ..services import areas as area_service
from ..services import devices as device_service
from ..services import properties as property_service
from ..services.ownership import TargetPath

router = APIRouter(prefix="/properties", tags=["properties"])


@router.get("", response_model=list[PropertyRead])
async def list_properties(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Property]:
    return await property_service.list_properties(session, current_user.id)


@router.post("", response_model=PropertyRead, status_code=status.HTTP_201_CREATED)
async def create_property(
    payload: PropertyCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Property:
    return await property_service.create_property(session, current_user.id, payload)


@router.get("/{property_id}", response_model=PropertyRead)
async def get_property(
    property_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Property:
    return await property_service.get_property(session, current_user.id, property_id)


@router.put("/{property_id}", response_model=PropertyRead)
async def update_property(
    property_id: str,
    payload: PropertyUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Property:
    return await property_service.update_property(
        session, current_user.id, property_id, payload
    )


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property(
    property_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Response:
    await property_service.delete_property(session, current_user.id, property_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Areas


@router.get("/{property_id}/areas", response_model=list[AreaRead])
async def list_areas(
    property_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Area]:
    return await area_service.list_areas(session, current_user.id, property_id)


@router.post(
    "/{property_id}/areas", response_model=AreaRead, status_code=status.HTTP_201_CREATED
)
async def create_area(
    property_id: str,
    payload: AreaCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Area:
    return await area_service.create_area(session, current_user.id, property_id, payload)


@router.get("/{property_id}/areas/{area_id}", response_model=AreaRead)
async def get_area(
    property_id: str,
    area_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Area:
    return await area_service.get_area(session, current_user.id, property_id, area_id)


@router.put("/{property_id}/areas/{area_id}", response_model=AreaRead)
async def update_area(
    property_id: str,
    area_id: str,
    payload: AreaUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Area:
    return await area_service.update_area(
        session, current_user.id, property_id, area_id, payload
    )


@router.delete("/{property_id}/areas/{area_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_area(
    property_id: str,
    area_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Response:
    await area_service.delete_area(session, current_user.id, property_id, area_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Devices


@router.get("/{property_id}/areas/{area_id}/devices", response_model=list[DeviceRead])
async def list_devices(
    property_id: str,
    area_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Device]:
    return await device_service.list_devices(session, current_user.id, property_id, area_id)


@router.post(
    "/{property_id}/areas/{area_id}/devices",
    response_model=DeviceRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_device(
    property_id: str,
    area_id: str,
    payload: DeviceCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Device:
    return await device_service.create_device(
        session, current_user.id, property_id, area_id, payload
    )


@router.get("/{property_id}/areas/{area_id}/devices/{device_id}", response_model=DeviceRead)
async def get_device(
    property_id: str,
    area_id: str,
    device_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Device:
    path = TargetPath(property_id, area_id, device_id)
    return await device_service.get_device(session, current_user.id, path)


@router.put("/{property_id}/areas/{area_id}/devices/{device_id}", response_model=DeviceRead)
async def update_device(
    property_id: str,
    area_id: str,
    device_id: str,
    payload: DeviceUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Device:
    path = TargetPath(property_id, area_id, device_id)
    return await device_service.update_device(session, current_user.id, path, payload)


@router.delete(
    "/{property_id}/areas/{area_id}/devices/{device_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_device(
    property_id: str,
    area_id: str,
    device_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Response:
    path = TargetPath(property_id, area_id, device_id)
    await device_service.delete_device(session, current_user.id, path)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
