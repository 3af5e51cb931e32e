"""User accounts: individuals (CPF) or companies (CNPJ)."""
from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from .enums import UserType


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Root of the ownership tree."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String)
    user_type: Mapped[UserType] = mapped_column(Enum(UserType, name="user_type"))

    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cpf: Mapped[str | None] = mapped_column(String(14), unique=True, nullable=True)

    company_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    cnpj: Mapped[str | None] = mapped_column(String(18), unique=True, nullable=True)
    trade_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
