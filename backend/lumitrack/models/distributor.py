"""Energy distributor tariff contracts."""
from decimal import Decimal

from sqlalchemy import Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, ExactDecimal, TimestampMixin, UUIDPrimaryKeyMixin
from .enums import ElectricalSystem


class EnergyDistributor(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Tariff catalogue entry owned by one user."""

    __tablename__ = "energy_distributors"

    __table_args__ = (
        UniqueConstraint("user_id", "cnpj", name="uq_energy_distributors_user_cnpj"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(200))
    cnpj: Mapped[str] = mapped_column(String(18))
    electrical_system: Mapped[ElectricalSystem] = mapped_column(
        Enum(ElectricalSystem, name="electrical_system")
    )
    working_voltage: Mapped[int] = mapped_column(Integer)
    kwh_price: Mapped[Decimal] = mapped_column(ExactDecimal(10, 6))
    tax_rate: Mapped[Decimal | None] = mapped_column(ExactDecimal(5, 4), nullable=True)
    public_lighting_fee: Mapped[Decimal | None] = mapped_column(ExactDecimal(10, 2), nullable=True)
