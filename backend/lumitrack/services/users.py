"""Identity store: users unique by email and by CPF or CNPJ."""
from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import User, UserType
from ..schemas import CompanyUserCreate, IndividualUserCreate, UserUpdate
from ..security import hash_password

log = structlog.get_logger(__name__)

INDIVIDUAL_FIELDS = frozenset({"first_name", "last_name"})
COMPANY_FIELDS = frozenset({"company_name", "trade_name"})


async def _exists(session: AsyncSession, *criteria) -> bool:
    result = await session.execute(select(User.id).where(*criteria))
    return result.first() is not None


async def create_user(
    session: AsyncSession, payload: IndividualUserCreate | CompanyUserCreate
) -> User:
    if await _exists(session, User.email == payload.email):
        raise ConflictError("Email already registered")

    if isinstance(payload, IndividualUserCreate):
        if await _exists(session, User.cpf == payload.cpf):
            raise ConflictError("CPF already registered")
        user = User(
            email=payload.email,
            user_type=UserType.INDIVIDUAL,
            first_name=payload.first_name,
            last_name=payload.last_name,
            cpf=payload.cpf,
        )
    else:
        if await _exists(session, User.cnpj == payload.cnpj):
            raise ConflictError("CNPJ already registered")
        user = User(
            email=payload.email,
            user_type=UserType.COMPANY,
            company_name=payload.company_name,
            cnpj=payload.cnpj,
            trade_name=payload.trade_name,
        )
    user.password_hash = hash_password(payload.password)

    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("User already registered") from exc
    await session.refresh(user)
    log.info("user_created", user_id=user.id, user_type=user.user_type.value)
    return user


async def get_user(session: AsyncSession, user_id: str) -> User:
    user = await session.get(User, user_id, populate_existing=True)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def find_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def update_user(session: AsyncSession, user_id: str, payload: UserUpdate) -> User:
    """Update contact and name fields of the user's own kind.

    Sending a company field for an individual (or the reverse) is rejected
    rather than silently stored.
    """

    user = await get_user(session, user_id)
    changes = payload.changes()

    foreign = COMPANY_FIELDS if user.user_type is UserType.INDIVIDUAL else INDIVIDUAL_FIELDS
    misplaced = sorted(foreign.intersection(changes))
    if misplaced:
        raise ValidationError(
            f"Fields not allowed for {user.user_type.value} users: {', '.join(misplaced)}"
        )

    if "email" in changes and changes["email"] != user.email:
        if await _exists(session, User.email == changes["email"], User.id != user.id):
            raise ConflictError("Email already registered")

    for field, value in changes.items():
        setattr(user, field, value)

    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("Email already registered") from exc
    await session.refresh(user)
    log.info("user_updated", user_id=user.id, fields=sorted(changes))
    return user


async def delete_user(session: AsyncSession, user_id: str) -> None:
    user = await get_user(session, user_id)
    await session.delete(user)
    await session.commit()
    log.info("user_deleted", user_id=user_id)
