"""Payload builders and test doubles shared by the test modules."""
from datetime import datetime, timedelta
from decimal import Decimal

from lumitrack.models import ElectricalSystem
from lumitrack.schemas import CompanyUserCreate, DistributorCreate, IndividualUserCreate

PASSWORD = "Secret123"
OWNER_CPF = "529.982.247-25"
STRANGER_CPF = "111.444.777-35"
THIRD_CPF = "123.456.789-09"
COMPANY_CNPJ = "11.222.333/0001-81"
DISTRIBUTOR_CNPJ = "12.345.678/0001-95"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send(self, email: str, token: str) -> bool:
        self.sent.append((email, token))
        return True


def individual_payload(email: str, cpf: str, **overrides) -> IndividualUserCreate:
    data = {
        "user_type": "INDIVIDUAL",
        "email": email,
        "password": PASSWORD,
        "first_name": "Ana",
        "last_name": "Souza",
        "cpf": cpf,
    }
    data.update(overrides)
    return IndividualUserCreate(**data)


def company_payload(email: str, cnpj: str, **overrides) -> CompanyUserCreate:
    data = {
        "user_type": "COMPANY",
        "email": email,
        "password": PASSWORD,
        "company_name": "Luz Norte Ltda",
        "cnpj": cnpj,
    }
    data.update(overrides)
    return CompanyUserCreate(**data)


def distributor_payload(**overrides) -> DistributorCreate:
    data = {
        "name": "Enel SP",
        "cnpj": DISTRIBUTOR_CNPJ,
        "electrical_system": ElectricalSystem.BIPHASIC,
        "working_voltage": 220,
        "kwh_price": Decimal("0.75"),
    }
    data.update(overrides)
    return DistributorCreate(**data)
