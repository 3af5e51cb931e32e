"""Energy distributor endpoints, scoped to the authenticated user."""
from typing import Sequence

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_current_user, get_db_session
from ..models import EnergyDistributor, User
from ..schemas import DistributorCreate, DistributorRead, DistributorUpdate
from ..services import distributors as distributor_service

router = APIRouter(prefix="/distributors", tags=["distributors"])


@router.get("", response_model=list[DistributorRead])
async def list_distributors(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[EnergyDistributor]:
    return await distributor_service.list_distributors(session, current_user.id)


@router.post("", response_model=DistributorRead, status_code=status.HTTP_201_CREATED)
async def create_distributor(
    payload: DistributorCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> EnergyDistributor:
    return await distributor_service.create_distributor(session, current_user.id, payload)


@router.get("/{distributor_id}", response_model=DistributorRead)
async def get_distributor(
    distributor_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> EnergyDistributor:
    return await distributor_service.owned_distributor(session, current_user.id, distributor_id)


@router.put("/{distributor_id}", response_model=DistributorRead)
async def update_distributor(
    distributor_id: str,
    payload: DistributorUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> EnergyDistributor:
    return await distributor_service.update_distributor(
        session, current_user.id, distributor_id, payload
    )


@router.delete("/{distributor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_distributor(
    distributor_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Response:
    """Refused with 409 while any property is billed through it."""

    await distributor_service.delete_distributor(session, current_user.id, distributor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
