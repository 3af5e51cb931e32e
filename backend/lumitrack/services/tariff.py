"""Tariff lookup and cost derivation for consumption records."""
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError
from ..models import EnergyDistributor, Property


async def kwh_price_for(session: AsyncSession, prop: Property) -> Decimal:
    """Current kWh price of the distributor billing ``prop``."""

    distributor = await session.get(
        EnergyDistributor, prop.distributor_id, populate_existing=True
    )
    if distributor is None:
        raise NotFoundError("Linked distributor not found")
    return Decimal(distributor.kwh_price)


def compute_cost(kwh_consumed: Decimal, kwh_price: Decimal) -> Decimal:
    # Taxes and the lighting fee are stored on the distributor but never applied here.
    return Decimal(kwh_consumed) * Decimal(kwh_price)
