"""User account endpoints."""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_current_user, get_db_session, require_self
from ..models import User
from ..schemas import UserCreate, UserRead, UserUpdate
from ..services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: UserCreate, session: AsyncSession = Depends(get_db_session)
) -> User:
    """Create an individual (CPF) or company (CNPJ) account."""

    return await user_service.create_user(session, payload)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    require_self(current_user, user_id)
    return await user_service.get_user(session, user_id)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    require_self(current_user, user_id)
    return await user_service.update_user(session, user_id, payload)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Response:
    """Delete the account together with everything it owns."""

    require_self(current_user, user_id)
    await user_service.delete_user(session, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
