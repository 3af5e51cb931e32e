"""SQLAlchemy models exposed by the backend."""
from .auth_token import AuthToken, PasswordReset
from .base import Base
from .consumption import ConsumptionRecord, ConsumptionTarget
from .distributor import EnergyDistributor
from .enums import (
    AlertTargetType,
    ConsumptionPeriod,
    ElectricalSystem,
    TokenChannel,
    UserType,
)
from .iot import Alert, IoTDeviceConfig
from .property import Area, Device, Property
from .user import User

__all__ = [
    "Alert",
    "AlertTargetType",
    "Area",
    "AuthToken",
    "Base",
    "ConsumptionPeriod",
    "ConsumptionRecord",
    "ConsumptionTarget",
    "Device",
    "ElectricalSystem",
    "EnergyDistributor",
    "IoTDeviceConfig",
    "PasswordReset",
    "Property",
    "TokenChannel",
    "User",
]
