"""Issued session tokens and password-reset tokens."""
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDPrimaryKeyMixin
from .enums import TokenChannel
from ..clock import utcnow


class AuthToken(UUIDPrimaryKeyMixin, Base):
    """A JWT handed out at login; WEB tokens expire, MOBILE tokens do not."""

    __tablename__ = "auth_tokens"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    token: Mapped[str] = mapped_column(String, unique=True, index=True)
    channel: Mapped[TokenChannel] = mapped_column(Enum(TokenChannel, name="token_channel"))
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def is_active(self, now: datetime) -> bool:
        if self.revoked_at is not None:
            return False
        return self.expires_at is None or self.expires_at > now


class PasswordReset(UUIDPrimaryKeyMixin, Base):
    """Single-use reset token; consumed by stamping ``used_at``."""

    __tablename__ = "password_resets"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    token: Mapped[str] = mapped_column(String(36), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime)
    used_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def is_usable(self, now: datetime) -> bool:
        return self.used_at is None and self.expires_at > now
