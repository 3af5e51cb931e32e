"""Passive storage for device connection settings and alert definitions."""
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, ExactDecimal, TimestampMixin, UUIDPrimaryKeyMixin
from .enums import AlertTargetType


class IoTDeviceConfig(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """At most one per device; no protocol logic lives here."""

    __tablename__ = "iot_device_configs"

    device_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("devices.id", ondelete="CASCADE"), unique=True
    )
    protocol: Mapped[str] = mapped_column(String(50))
    host: Mapped[str | None] = mapped_column(String(255), nullable=True)
    port: Mapped[int | None] = mapped_column(Integer, nullable=True)
    topic: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    extra: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class Alert(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Consumption threshold alert; targets are nulled when the node is removed."""

    __tablename__ = "alerts"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    target_type: Mapped[AlertTargetType] = mapped_column(
        Enum(AlertTargetType, name="alert_target_type")
    )
    property_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True
    )
    area_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("areas.id", ondelete="SET NULL"), nullable=True
    )
    device_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("devices.id", ondelete="SET NULL"), nullable=True
    )
    threshold_kwh: Mapped[Decimal] = mapped_column(ExactDecimal(14, 4))
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    triggered_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    read_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
