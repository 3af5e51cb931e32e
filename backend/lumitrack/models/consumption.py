"""Consumption records and the single-target union they hang from."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    Enum,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, ExactDecimal, TimestampMixin, UUIDPrimaryKeyMixin
from .enums import AlertTargetType, ConsumptionPeriod

TARGET_COLUMNS = {
    AlertTargetType.PROPERTY: "property_id",
    AlertTargetType.AREA: "area_id",
    AlertTargetType.DEVICE: "device_id",
}


@dataclass(frozen=True)
class ConsumptionTarget:
    """Exactly one hierarchy node a record is attached to."""

    kind: AlertTargetType
    id: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("consumption target requires an id")

    @classmethod
    def of_property(cls, property_id: str) -> ConsumptionTarget:
        return cls(AlertTargetType.PROPERTY, property_id)

    @classmethod
    def of_area(cls, area_id: str) -> ConsumptionTarget:
        return cls(AlertTargetType.AREA, area_id)

    @classmethod
    def of_device(cls, device_id: str) -> ConsumptionTarget:
        return cls(AlertTargetType.DEVICE, device_id)

    @property
    def column(self) -> str:
        return TARGET_COLUMNS[self.kind]

    def as_columns(self) -> dict[str, str | None]:
        """Foreign-key assignment with the two unused targets set to None."""

        return {
            column: (self.id if kind is self.kind else None)
            for kind, column in TARGET_COLUMNS.items()
        }


class ConsumptionRecord(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """kWh used by one node over one period bucket, with its derived cost."""

    __tablename__ = "consumption_records"

    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN property_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN area_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN device_id IS NOT NULL THEN 1 ELSE 0 END) = 1",
            name="single_target",
        ),
        # NULLs never collide, so each constraint only bites for its own target kind.
        UniqueConstraint(
            "property_id", "period", "reference_date",
            name="uq_consumption_records_property_period_date",
        ),
        UniqueConstraint(
            "area_id", "period", "reference_date",
            name="uq_consumption_records_area_period_date",
        ),
        UniqueConstraint(
            "device_id", "period", "reference_date",
            name="uq_consumption_records_device_period_date",
        ),
        Index("ix_consumption_records_area_id", "area_id"),
        Index("ix_consumption_records_device_id", "device_id"),
    )

    property_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=True
    )
    area_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("areas.id", ondelete="CASCADE"), nullable=True
    )
    device_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("devices.id", ondelete="CASCADE"), nullable=True
    )
    period: Mapped[ConsumptionPeriod] = mapped_column(
        Enum(ConsumptionPeriod, name="consumption_period")
    )
    reference_date: Mapped[date] = mapped_column(Date)
    kwh_consumed: Mapped[Decimal] = mapped_column(ExactDecimal(14, 4))
    cost_brl: Mapped[Decimal] = mapped_column(ExactDecimal(20, 10))
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    @classmethod
    def for_target(cls, target: ConsumptionTarget, **values) -> ConsumptionRecord:
        return cls(**target.as_columns(), **values)

    @property
    def target(self) -> ConsumptionTarget:
        set_targets = [
            (kind, getattr(self, column))
            for kind, column in TARGET_COLUMNS.items()
            if getattr(self, column) is not None
        ]
        if len(set_targets) != 1:
            raise ValueError(f"record {self.id} has {len(set_targets)} targets")
        kind, target_id = set_targets[0]
        return ConsumptionTarget(kind, target_id)
