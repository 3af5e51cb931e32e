"""Reusable FastAPI dependencies."""
from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from .clock import Clock, utcnow
from .database import get_session
from .errors import ForbiddenError, UnauthorizedError
from .models import User
from .notifier import MailgunPasswordResetNotifier, PasswordResetNotifier
from .services import auth as auth_service

# Use simple Bearer auth instead of OAuth2 password flow
bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields an AsyncSession."""
    async for session in get_session():
        yield session


def get_clock() -> Clock:
    return utcnow


def get_notifier() -> PasswordResetNotifier:
    return MailgunPasswordResetNotifier()


def bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Raw token from the ``Authorization: Bearer <token>`` header."""

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Not authenticated")
    return credentials.credentials


async def get_current_user(
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> User:
    """Return the user whose ledger-backed token was presented."""

    return await auth_service.authenticate(session, token, clock=clock)


def require_self(user: User, user_id: str) -> None:
    """Raise if the requested user record is not the authenticated user."""
    if user.id != user_id:
        raise ForbiddenError("Access denied")
