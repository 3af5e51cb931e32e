"""Closed value sets shared by models and schemas."""
import enum


class UserType(str, enum.Enum):
    INDIVIDUAL = "INDIVIDUAL"
    COMPANY = "COMPANY"


class TokenChannel(str, enum.Enum):
    WEB = "WEB"
    MOBILE = "MOBILE"


class ElectricalSystem(str, enum.Enum):
    MONOPHASIC = "MONOPHASIC"
    BIPHASIC = "BIPHASIC"
    TRIPHASIC = "TRIPHASIC"


class ConsumptionPeriod(str, enum.Enum):
    DAILY = "DAILY"
    MONTHLY = "MONTHLY"
    ANNUAL = "ANNUAL"


class AlertTargetType(str, enum.Enum):
    PROPERTY = "PROPERTY"
    AREA = "AREA"
    DEVICE = "DEVICE"


# Standard working voltages of the Brazilian grid (residential to medium voltage).
VALID_VOLTAGES = (110, 127, 220, 380, 440, 660, 13800)

# The 26 states plus the Federal District.
VALID_STATE_CODES = (
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO",
    "MA", "MT", "MS", "MG", "PA", "PB", "PR", "PE", "PI",
    "RJ", "RN", "RS", "RO", "RR", "SC", "SP", "SE", "TO",
)
