"""Password hashing and JWT encoding helpers."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from .schemas import TokenData

ALGORITHM = "HS256"

# PBKDF2-SHA256 keeps hashing free of native bcrypt backends
password_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return password_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against the stored hash."""
    return password_context.verify(password, password_hash)


def encode_token(claims: TokenData, secret_key: str, expires_at: datetime | None) -> str:
    """Sign ``claims``; an ``exp`` claim is added only when ``expires_at`` is set."""

    payload: Dict[str, Any] = claims.model_dump(mode="json")
    if expires_at is not None:
        payload["exp"] = int(expires_at.replace(tzinfo=timezone.utc).timestamp())
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def decode_token(token: str, secret_key: str) -> TokenData:
    """Verify the signature and return the claims.

    ``exp`` is not enforced here: the token ledger decides expiry against the
    application clock.
    """

    payload: Dict[str, Any] = jwt.decode(
        token,
        secret_key,
        algorithms=[ALGORITHM],
        options={"verify_exp": False},
    )
    return TokenData(**payload)
