"""Session/token ledger and password-reset flow.

Every issued JWT is stored. A token authenticates only while its ledger row
is unrevoked and, for WEB tokens, unexpired according to the injected clock.
MOBILE tokens never expire and live until logout.
"""
from __future__ import annotations

import uuid
from datetime import timedelta

import jwt
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..clock import Clock, utcnow
from ..config import Settings, get_settings
from ..errors import BadRequestError, UnauthorizedError
from ..models import AuthToken, PasswordReset, TokenChannel, User
from ..notifier import PasswordResetNotifier
from ..schemas import Token, TokenData
from ..security import decode_token, encode_token, hash_password, verify_password
from .users import find_by_email

log = structlog.get_logger(__name__)

FORGOT_PASSWORD_MESSAGE = "If the email is registered, reset instructions have been sent"
INVALID_RESET_MESSAGE = "Invalid or expired reset token"


async def _ledger_entry(session: AsyncSession, token: str) -> AuthToken | None:
    result = await session.execute(
        select(AuthToken)
        .where(AuthToken.token == token)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def login(
    session: AsyncSession,
    email: str,
    password: str,
    channel: TokenChannel,
    clock: Clock = utcnow,
    settings: Settings | None = None,
) -> Token:
    """Verify credentials and record a freshly issued token."""

    settings = settings or get_settings()
    user = await find_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        log.info("login_failed", channel=channel.value)
        raise UnauthorizedError("Invalid credentials")

    now = clock()
    expires_at = None
    if channel is TokenChannel.WEB:
        expires_at = now + timedelta(minutes=settings.web_token_expires_minutes)

    claims = TokenData(
        sub=user.id,
        email=user.email,
        user_type=user.user_type,
        channel=channel,
        jti=str(uuid.uuid4()),
    )
    encoded = encode_token(claims, settings.secret_key, expires_at)
    session.add(
        AuthToken(
            user_id=user.id,
            token=encoded,
            channel=channel,
            expires_at=expires_at,
            created_at=now,
        )
    )
    await session.commit()
    log.info("login_succeeded", user_id=user.id, channel=channel.value)
    return Token(access_token=encoded, channel=channel, expires_at=expires_at)


async def authenticate(
    session: AsyncSession,
    token: str,
    clock: Clock = utcnow,
    settings: Settings | None = None,
) -> User:
    """Return the user behind ``token`` or raise ``UnauthorizedError``."""

    settings = settings or get_settings()
    try:
        claims = decode_token(token, settings.secret_key)
    except (jwt.PyJWTError, ValueError) as exc:
        raise UnauthorizedError("Could not validate credentials") from exc

    entry = await _ledger_entry(session, token)
    if entry is None or not entry.is_active(clock()):
        raise UnauthorizedError("Token expired or revoked")

    user = await session.get(User, claims.sub, populate_existing=True)
    if user is None or user.id != entry.user_id:
        raise UnauthorizedError("Inactive or missing user")
    return user


async def logout(session: AsyncSession, token: str, clock: Clock = utcnow) -> None:
    entry = await _ledger_entry(session, token)
    if entry is None:
        raise UnauthorizedError("Invalid token")
    if entry.revoked_at is not None:
        raise UnauthorizedError("Token already revoked")

    entry.revoked_at = clock()
    await session.commit()
    log.info("logout", user_id=entry.user_id, channel=entry.channel.value)


async def forgot_password(
    session: AsyncSession,
    email: str,
    notifier: PasswordResetNotifier,
    clock: Clock = utcnow,
    settings: Settings | None = None,
) -> str:
    """Start a reset for ``email``; the answer never reveals whether it exists."""

    settings = settings or get_settings()
    user = await find_by_email(session, email)
    if user is None:
        log.info("password_reset_unknown_email")
        return FORGOT_PASSWORD_MESSAGE

    now = clock()
    reset = PasswordReset(
        user_id=user.id,
        token=str(uuid.uuid4()),
        expires_at=now + timedelta(minutes=settings.password_reset_expires_minutes),
        created_at=now,
    )
    session.add(reset)
    await session.commit()
    log.info("password_reset_requested", user_id=user.id)

    await notifier.send(user.email, reset.token)
    return FORGOT_PASSWORD_MESSAGE


async def reset_password(
    session: AsyncSession, token: str, new_password: str, clock: Clock = utcnow
) -> None:
    result = await session.execute(
        select(PasswordReset)
        .where(PasswordReset.token == token)
        .execution_options(populate_existing=True)
    )
    reset = result.scalar_one_or_none()
    now = clock()
    if reset is None or not reset.is_usable(now):
        raise BadRequestError(INVALID_RESET_MESSAGE)

    user = await session.get(User, reset.user_id, populate_existing=True)
    if user is None:
        raise BadRequestError(INVALID_RESET_MESSAGE)

    user.password_hash = hash_password(new_password)
    reset.used_at = now
    await session.commit()
    log.info("password_reset_completed", user_id=user.id)
