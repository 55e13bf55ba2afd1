"""
Voluntary carbon market reference prices (USD per tCO2).

Three fixed scenarios give a revenue range; they are reference data and
must not be changed at call time.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class PriceScenario(str, Enum):
    CONSERVATIVE = "conservative"
    REALISTIC = "realistic"
    OPTIMISTIC = "optimistic"


@dataclass(frozen=True)
class CarbonPrice:
    price_per_ton: float
    label: str
    description: str
    market_reference: str


CARBON_MARKET_PRICES: Mapping[PriceScenario, CarbonPrice] = MappingProxyType({
    PriceScenario.CONSERVATIVE: CarbonPrice(
        price_per_ton=5.0,
        label="Conservative",
        description="Floor price of the voluntary market",
        market_reference="Voluntary market - low average",
    ),
    PriceScenario.REALISTIC: CarbonPrice(
        price_per_ton=15.0,
        label="Realistic",
        description="Current average voluntary market price",
        market_reference="Ecosystem Marketplace 2024",
    ),
    PriceScenario.OPTIMISTIC: CarbonPrice(
        price_per_ton=50.0,
        label="Optimistic",
        description="Premium projects with community co-benefits",
        market_reference="Gold Standard - indigenous projects",
    ),
})


def get_price_per_ton(scenario: PriceScenario) -> float:
    return CARBON_MARKET_PRICES[scenario].price_per_ton
