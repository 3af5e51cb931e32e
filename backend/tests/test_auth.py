"""Token ledger lifecycle and the password-reset flow."""
import jwt
import pytest
from sqlalchemy import select

from lumitrack.config import get_settings
from lumitrack.errors import BadRequestError, UnauthorizedError
from lumitrack.models import AuthToken, PasswordReset, TokenChannel
from lumitrack.services import auth

from factories import PASSWORD


@pytest.mark.asyncio
async def test_web_token_expires_with_the_clock(session, owner, clock) -> None:
    token = await auth.login(session, owner.email, PASSWORD, TokenChannel.WEB, clock=clock)
    assert token.expires_at == clock.now.replace(minute=15)

    clock.advance(minutes=14, seconds=59)
    assert (await auth.authenticate(session, token.access_token, clock=clock)).id == owner.id

    clock.advance(seconds=1)
    with pytest.raises(UnauthorizedError):
        await auth.authenticate(session, token.access_token, clock=clock)


@pytest.mark.asyncio
async def test_mobile_token_never_expires(session, owner, clock) -> None:
    token = await auth.login(session, owner.email, PASSWORD, TokenChannel.MOBILE, clock=clock)
    assert token.expires_at is None

    claims = jwt.decode(token.access_token, options={"verify_signature": False})
    assert "exp" not in claims
    assert claims["sub"] == owner.id
    assert claims["channel"] == "MOBILE"

    clock.advance(days=3650)
    assert (await auth.authenticate(session, token.access_token, clock=clock)).id == owner.id


@pytest.mark.asyncio
async def test_every_login_issues_a_distinct_ledger_entry(session, owner, clock) -> None:
    first = await auth.login(session, owner.email, PASSWORD, TokenChannel.WEB, clock=clock)
    second = await auth.login(session, owner.email, PASSWORD, TokenChannel.WEB, clock=clock)

    assert first.access_token != second.access_token
    stored = (await session.execute(select(AuthToken))).scalars().all()
    assert len(stored) == 2


@pytest.mark.asyncio
async def test_logout_revokes_once(session, owner, clock) -> None:
    token = await auth.login(session, owner.email, PASSWORD, TokenChannel.MOBILE, clock=clock)

    await auth.logout(session, token.access_token, clock=clock)
    with pytest.raises(UnauthorizedError):
        await auth.authenticate(session, token.access_token, clock=clock)

    with pytest.raises(UnauthorizedError) as excinfo:
        await auth.logout(session, token.access_token, clock=clock)
    assert excinfo.value.message == "Token already revoked"


@pytest.mark.asyncio
async def test_logout_of_unknown_token_is_unauthorized(session, clock) -> None:
    with pytest.raises(UnauthorizedError):
        await auth.logout(session, "not-a-token", clock=clock)


@pytest.mark.asyncio
async def test_forged_or_unrecorded_tokens_are_rejected(session, owner, clock) -> None:
    with pytest.raises(UnauthorizedError):
        await auth.authenticate(session, "garbage", clock=clock)

    forged = jwt.encode(
        {"sub": owner.id, "email": owner.email, "user_type": "INDIVIDUAL", "channel": "MOBILE", "jti": "x"},
        "wrong-secret",
        algorithm="HS256",
    )
    with pytest.raises(UnauthorizedError):
        await auth.authenticate(session, forged, clock=clock)

    # Correctly signed but never issued through login.
    unrecorded = jwt.encode(
        {"sub": owner.id, "email": owner.email, "user_type": "INDIVIDUAL", "channel": "MOBILE", "jti": "y"},
        get_settings().secret_key,
        algorithm="HS256",
    )
    with pytest.raises(UnauthorizedError):
        await auth.authenticate(session, unrecorded, clock=clock)


@pytest.mark.asyncio
async def test_bad_credentials_fail_identically(session, owner, clock) -> None:
    with pytest.raises(UnauthorizedError) as wrong_password:
        await auth.login(session, owner.email, "Wrong1234", TokenChannel.WEB, clock=clock)
    with pytest.raises(UnauthorizedError) as unknown_email:
        await auth.login(session, "nobody@example.com", PASSWORD, TokenChannel.WEB, clock=clock)

    assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"


@pytest.mark.asyncio
async def test_forgot_password_does_not_reveal_accounts(session, owner, clock, notifier) -> None:
    known = await auth.forgot_password(session, owner.email, notifier, clock=clock)
    unknown = await auth.forgot_password(session, "nobody@example.com", notifier, clock=clock)

    assert known == unknown
    assert [email for email, _ in notifier.sent] == [owner.email]
    resets = (await session.execute(select(PasswordReset))).scalars().all()
    assert len(resets) == 1
    assert resets[0].token == notifier.sent[0][1]


@pytest.mark.asyncio
async def test_reset_token_is_single_use(session, owner, clock, notifier) -> None:
    await auth.forgot_password(session, owner.email, notifier, clock=clock)
    reset_token = notifier.sent[0][1]

    await auth.reset_password(session, reset_token, "Another123", clock=clock)
    await auth.login(session, owner.email, "Another123", TokenChannel.WEB, clock=clock)
    with pytest.raises(UnauthorizedError):
        await auth.login(session, owner.email, PASSWORD, TokenChannel.WEB, clock=clock)

    with pytest.raises(BadRequestError):
        await auth.reset_password(session, reset_token, "Third1234", clock=clock)


@pytest.mark.asyncio
async def test_reset_token_expires_after_an_hour(session, owner, clock, notifier) -> None:
    await auth.forgot_password(session, owner.email, notifier, clock=clock)
    reset_token = notifier.sent[0][1]

    clock.advance(minutes=60)
    with pytest.raises(BadRequestError):
        await auth.reset_password(session, reset_token, "Another123", clock=clock)

    with pytest.raises(BadRequestError):
        await auth.reset_password(session, "unknown-token", "Another123", clock=clock)

    # The old password still works.
    await auth.login(session, owner.email, PASSWORD, TokenChannel.WEB, clock=clock)
