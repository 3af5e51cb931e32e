"""Authentication routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from .clock import Clock
from .dependencies import bearer_token, get_clock, get_db_session, get_notifier
from .notifier import PasswordResetNotifier
from .schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    Token,
)
from .services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> Token:
    """Authenticate a user and return a JWT access token."""

    return await auth_service.login(
        session, payload.email, payload.password, payload.channel, clock=clock
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> MessageResponse:
    await auth_service.logout(session, token, clock=clock)
    return MessageResponse(message="Logged out")


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    session: AsyncSession = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
    notifier: PasswordResetNotifier = Depends(get_notifier),
) -> MessageResponse:
    """Same answer for known and unknown emails."""

    message = await auth_service.forgot_password(
        session, payload.email, notifier, clock=clock
    )
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    session: AsyncSession = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> MessageResponse:
    await auth_service.reset_password(
        session, payload.token, payload.new_password, clock=clock
    )
    return MessageResponse(message="Password updated")
