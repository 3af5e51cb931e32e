"""Consumption record endpoints for properties, areas and devices."""
from typing import Optional, Sequence

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_current_user, get_db_session
from ..models import ConsumptionPeriod, ConsumptionRecord, User
from ..schemas import ConsumptionCreate, ConsumptionRead, ConsumptionUpdate
from ..services import consumption as consumption_service
from ..services.ownership import TargetPath

router = APIRouter(prefix="/properties/{property_id}", tags=["consumption"])


@router.get("/consumption", response_model=list[ConsumptionRead])
async def list_property_consumption(
    property_id: str,
    period: Optional[ConsumptionPeriod] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[ConsumptionRecord]:
    return await consumption_service.list_records(
        session, current_user.id, TargetPath(property_id), period
    )


@router.post(
    "/consumption", response_model=ConsumptionRead, status_code=status.HTTP_201_CREATED
)
async def create_property_consumption(
    property_id: str,
    payload: ConsumptionCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> ConsumptionRecord:
    return await consumption_service.create_record(
        session, current_user.id, TargetPath(property_id), payload
    )


@router.get("/areas/{area_id}/consumption", response_model=list[ConsumptionRead])
async def list_area_consumption(
    property_id: str,
    area_id: str,
    period: Optional[ConsumptionPeriod] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[ConsumptionRecord]:
    return await consumption_service.list_records(
        session, current_user.id, TargetPath(property_id, area_id), period
    )


@router.post(
    "/areas/{area_id}/consumption",
    response_model=ConsumptionRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_area_consumption(
    property_id: str,
    area_id: str,
    payload: ConsumptionCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> ConsumptionRecord:
    return await consumption_service.create_record(
        session, current_user.id, TargetPath(property_id, area_id), payload
    )


@router.get(
    "/areas/{area_id}/devices/{device_id}/consumption",
    response_model=list[ConsumptionRead],
)
async def list_device_consumption(
    property_id: str,
    area_id: str,
    device_id: str,
    period: Optional[ConsumptionPeriod] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[ConsumptionRecord]:
    path = TargetPath(property_id, area_id, device_id)
    return await consumption_service.list_records(session, current_user.id, path, period)


@router.post(
    "/areas/{area_id}/devices/{device_id}/consumption",
    response_model=ConsumptionRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_device_consumption(
    property_id: str,
    area_id: str,
    device_id: str,
    payload: ConsumptionCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> ConsumptionRecord:
    path = TargetPath(property_id, area_id, device_id)
    return await consumption_service.create_record(session, current_user.id, path, payload)


# By id: the record's target must sit somewhere under the property in the path.


@router.get("/consumption/{record_id}", response_model=ConsumptionRead)
async def get_consumption(
    property_id: str,
    record_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> ConsumptionRecord:
    return await consumption_service.get_record(
        session, current_user.id, property_id, record_id
    )


@router.put("/consumption/{record_id}", response_model=ConsumptionRead)
async def update_consumption(
    property_id: str,
    record_id: str,
    payload: ConsumptionUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> ConsumptionRecord:
    """Partial update; the cost is recomputed only when kWh changes."""

    return await consumption_service.update_record(
        session, current_user.id, property_id, record_id, payload
    )


@router.delete("/consumption/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_consumption(
    property_id: str,
    record_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Response:
    await consumption_service.delete_record(session, current_user.id, property_id, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
