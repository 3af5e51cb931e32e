"""Pydantic schemas used across the backend API."""
from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from .models.enums import (
    VALID_STATE_CODES,
    VALID_VOLTAGES,
    ConsumptionPeriod,
    ElectricalSystem,
    TokenChannel,
    UserType,
)

CPF_PATTERN = re.compile(r"^\d{3}\.\d{3}\.\d{3}-\d{2}$")
CNPJ_PATTERN = re.compile(r"^\d{2}\.\d{3}\.\d{3}/\d{4}-\d{2}$")
ZIP_CODE_PATTERN = re.compile(r"^\d{5}-\d{3}$")


# ---------------------------------------------------------------------------
# Document and field rules
# ---------------------------------------------------------------------------


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value)


def _is_repeated_digit(digits: str) -> bool:
    return len(set(digits)) == 1


def is_valid_cpf(cpf: str) -> bool:
    """Check both CPF verification digits."""

    digits = _digits(cpf)
    if len(digits) != 11 or _is_repeated_digit(digits):
        return False

    def check_digit(length: int) -> int:
        total = sum(int(d) * (length + 1 - i) for i, d in enumerate(digits[:length]))
        remainder = (total * 10) % 11
        return 0 if remainder == 10 else remainder

    return check_digit(9) == int(digits[9]) and check_digit(10) == int(digits[10])


def is_valid_cnpj(cnpj: str) -> bool:
    """Check both CNPJ verification digits."""

    digits = _digits(cnpj)
    if len(digits) != 14 or _is_repeated_digit(digits):
        return False

    def check_digit(length: int) -> int:
        total = 0
        weight = length - 7
        for d in digits[:length]:
            total += int(d) * weight
            weight -= 1
            if weight < 2:
                weight = 9
        remainder = total % 11
        return 0 if remainder < 2 else 11 - remainder

    return check_digit(12) == int(digits[12]) and check_digit(13) == int(digits[13])


def validate_cpf(value: str) -> str:
    if not CPF_PATTERN.match(value):
        raise ValueError("CPF must use the format 000.000.000-00")
    if not is_valid_cpf(value):
        raise ValueError("Invalid CPF")
    return value


def validate_cnpj(value: str) -> str:
    if not CNPJ_PATTERN.match(value):
        raise ValueError("CNPJ must use the format 00.000.000/0000-00")
    if not is_valid_cnpj(value):
        raise ValueError("Invalid CNPJ")
    return value


def validate_password_strength(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must have at least 8 characters")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain an uppercase letter")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain a lowercase letter")
    if not re.search(r"[0-9]", value):
        raise ValueError("Password must contain a digit")
    return value


def validate_zip_code(value: str | None) -> str | None:
    if value is None:
        return value
    if not ZIP_CODE_PATTERN.match(value):
        raise ValueError("Zip code must use the format 00000-000")
    if _is_repeated_digit(_digits(value)):
        raise ValueError("Invalid zip code")
    return value


def validate_state(value: str | None) -> str | None:
    if value is not None and value not in VALID_STATE_CODES:
        raise ValueError("State must be a valid UF code")
    return value


def validate_voltage(value: int | None) -> int | None:
    if value is not None and value not in VALID_VOLTAGES:
        allowed = ", ".join(str(v) for v in VALID_VOLTAGES)
        raise ValueError(f"Working voltage must be one of: {allowed}")
    return value


class PartialUpdate(BaseModel):
    """Update payload where absent means "unchanged".

    Fields listed in ``not_nullable`` may be omitted but never sent as null.
    """

    not_nullable: ClassVar[tuple[str, ...]] = ()

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> PartialUpdate:
        for name in self.not_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Credentials plus the client channel that decides token expiry."""

    email: EmailStr
    password: str = Field(min_length=1)
    channel: TokenChannel


class Token(BaseModel):
    """JWT response payload."""

    access_token: str
    token_type: str = "bearer"
    channel: TokenChannel
    expires_at: datetime | None = None


class TokenData(BaseModel):
    """Information encoded into JWTs."""

    sub: str
    email: str
    user_type: UserType
    channel: TokenChannel
    jti: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return validate_password_strength(value)


class MessageResponse(BaseModel):
    status: str = "success"
    message: str


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class _UserCreateBase(BaseModel):
    email: EmailStr
    password: str

    model_config = {"extra": "forbid"}

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return validate_password_strength(value)


class IndividualUserCreate(_UserCreateBase):
    user_type: Literal["INDIVIDUAL"]
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    cpf: str

    @field_validator("cpf")
    @classmethod
    def check_cpf(cls, value: str) -> str:
        return validate_cpf(value)


class CompanyUserCreate(_UserCreateBase):
    user_type: Literal["COMPANY"]
    company_name: str = Field(min_length=1, max_length=200)
    cnpj: str
    trade_name: str | None = Field(default=None, max_length=200)

    @field_validator("cnpj")
    @classmethod
    def check_cnpj(cls, value: str) -> str:
        return validate_cnpj(value)


UserCreate = Annotated[
    Union[IndividualUserCreate, CompanyUserCreate],
    Field(discriminator="user_type"),
]


class UserUpdate(PartialUpdate):
    """Identity kind and tax ids are immutable after signup."""

    not_nullable = ("email", "first_name", "last_name", "company_name")

    email: EmailStr | None = None
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    company_name: str | None = Field(default=None, min_length=1, max_length=200)
    trade_name: str | None = Field(default=None, max_length=200)


class UserRead(BaseModel):
    """Public representation of a user."""

    id: str
    email: EmailStr
    user_type: UserType
    first_name: str | None = None
    last_name: str | None = None
    cpf: str | None = None
    company_name: str | None = None
    cnpj: str | None = None
    trade_name: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Distributors
# ---------------------------------------------------------------------------


class DistributorCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    cnpj: str
    electrical_system: ElectricalSystem
    working_voltage: int
    kwh_price: Decimal = Field(gt=0, max_digits=10, decimal_places=6)
    tax_rate: Decimal | None = Field(default=None, ge=0, le=1, decimal_places=4)
    public_lighting_fee: Decimal | None = Field(
        default=None, ge=0, max_digits=10, decimal_places=2
    )

    @field_validator("cnpj")
    @classmethod
    def check_cnpj(cls, value: str) -> str:
        return validate_cnpj(value)

    @field_validator("working_voltage")
    @classmethod
    def check_voltage(cls, value: int | None) -> int | None:
        return validate_voltage(value)


class DistributorUpdate(PartialUpdate):
    """The CNPJ identifies the contract and cannot be changed."""

    not_nullable = ("name", "electrical_system", "working_voltage", "kwh_price")

    name: str | None = Field(default=None, min_length=1, max_length=200)
    electrical_system: ElectricalSystem | None = None
    working_voltage: int | None = None
    kwh_price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=6)
    tax_rate: Decimal | None = Field(default=None, ge=0, le=1, decimal_places=4)
    public_lighting_fee: Decimal | None = Field(
        default=None, ge=0, max_digits=10, decimal_places=2
    )

    @field_validator("working_voltage")
    @classmethod
    def check_voltage(cls, value: int | None) -> int | None:
        return validate_voltage(value)


class DistributorRead(BaseModel):
    id: str
    user_id: str
    name: str
    cnpj: str
    electrical_system: ElectricalSystem
    working_voltage: int
    kwh_price: Decimal
    tax_rate: Decimal | None = None
    public_lighting_fee: Decimal | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Properties, areas, devices
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    distributor_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=200)
    address: str | None = Field(default=None, min_length=1, max_length=500)
    city: str | None = Field(default=None, min_length=1, max_length=100)
    state: str | None = None
    zip_code: str | None = None

    @field_validator("state")
    @classmethod
    def check_state(cls, value: str | None) -> str | None:
        return validate_state(value)

    @field_validator("zip_code")
    @classmethod
    def check_zip_code(cls, value: str | None) -> str | None:
        return validate_zip_code(value)


class PropertyUpdate(PartialUpdate):
    not_nullable = ("distributor_id", "name")

    distributor_id: str | None = Field(default=None, min_length=1)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    address: str | None = Field(default=None, min_length=1, max_length=500)
    city: str | None = Field(default=None, min_length=1, max_length=100)
    state: str | None = None
    zip_code: str | None = None

    @field_validator("state")
    @classmethod
    def check_state(cls, value: str | None) -> str | None:
        return validate_state(value)

    @field_validator("zip_code")
    @classmethod
    def check_zip_code(cls, value: str | None) -> str | None:
        return validate_zip_code(value)


class PropertyRead(BaseModel):
    id: str
    user_id: str
    distributor_id: str
    name: str
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AreaCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=1000)


class AreaUpdate(PartialUpdate):
    not_nullable = ("name",)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=1000)


class AreaRead(BaseModel):
    id: str
    property_id: str
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DeviceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    brand: str | None = Field(default=None, max_length=100)
    model: str | None = Field(default=None, max_length=100)
    power_watts: Decimal | None = Field(default=None, gt=0, decimal_places=2)


class DeviceUpdate(PartialUpdate):
    not_nullable = ("name",)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    brand: str | None = Field(default=None, max_length=100)
    model: str | None = Field(default=None, max_length=100)
    power_watts: Decimal | None = Field(default=None, gt=0, decimal_places=2)


class DeviceRead(BaseModel):
    id: str
    area_id: str
    name: str
    brand: str | None = None
    model: str | None = None
    power_watts: Decimal | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True, "protected_namespaces": ()}


# ---------------------------------------------------------------------------
# Consumption
# ---------------------------------------------------------------------------


class ConsumptionCreate(BaseModel):
    """A reading for one period bucket; the cost is always derived server-side.

    ``reference_date`` anchors the bucket: the day itself for DAILY, the first
    of the month for MONTHLY, the first of the year for ANNUAL. It is stored
    as given.
    """

    period: ConsumptionPeriod
    reference_date: date
    kwh_consumed: Decimal = Field(gt=0, decimal_places=4)
    notes: str | None = Field(default=None, max_length=500)

    model_config = {"extra": "forbid"}


class ConsumptionUpdate(PartialUpdate):
    """Period and reference date identify the record and cannot change."""

    not_nullable = ("kwh_consumed",)

    kwh_consumed: Decimal | None = Field(default=None, gt=0, decimal_places=4)
    notes: str | None = Field(default=None, max_length=500)


class ConsumptionRead(BaseModel):
    id: str
    property_id: str | None = None
    area_id: str | None = None
    device_id: str | None = None
    period: ConsumptionPeriod
    reference_date: date
    kwh_consumed: Decimal
    cost_brl: Decimal
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
