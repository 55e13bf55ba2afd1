"""
Domain service: Carbon credit revenue estimation.

Maps annual CO2 capture through the fixed market price scenarios.
"""
from typing import Optional

from geocarbon.config import settings
from geocarbon.domain.market_prices import CARBON_MARKET_PRICES
from geocarbon.domain.models import RevenueProjection, ScenarioRevenue


def annual_revenue(co2_tons_per_year: float) -> ScenarioRevenue:
    """Revenue per year for each price scenario."""
    return ScenarioRevenue(**{
        scenario.value: round(co2_tons_per_year * price.price_per_ton, 2)
        for scenario, price in CARBON_MARKET_PRICES.items()
    })


def estimate_revenue(co2_tons_per_year: float, years: Optional[int] = None) -> RevenueProjection:
    """
    Estimate annual and multi-year revenue under each price scenario.

    Args:
        co2_tons_per_year: Annual CO2 capture in tons
        years: Crediting period (defaults to the configured project duration)

    Returns:
        RevenueProjection with annual and total figures

    Raises:
        ValueError: If the CO2 figure or the period is negative
    """
    years = settings.default_project_duration_years if years is None else years
    if co2_tons_per_year < 0:
        raise ValueError("co2_tons_per_year must not be negative")
    if years < 0:
        raise ValueError("years must not be negative")

    annual = annual_revenue(co2_tons_per_year)
    total = ScenarioRevenue(**{
        scenario.value: round(co2_tons_per_year * price.price_per_ton * years, 2)
        for scenario, price in CARBON_MARKET_PRICES.items()
    })
    return RevenueProjection(annual=annual, total=total, years=years)
