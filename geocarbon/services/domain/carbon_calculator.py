"""
Domain service: Carbon capture calculation.

Formula:
    CO2 (t/yr) = area (ha) x biomass (tC/ha) x 3.67 x project factor

Biomass is resolved through an ordered chain of tiers:
1. measured biomass supplied with the input
2. regional factor of the satellite-classified forest type
3. regional factor of the administrative department
4. default regional factor

All functions here are pure: identical inputs give identical outputs.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from geocarbon.domain.carbon_factors import (
    CARBON_TO_CO2_RATIO,
    DEFAULT_FOREST_TYPE,
    REGIONAL_FACTORS,
    RegionalFactor,
    get_project_factor,
    get_regional_factor,
    get_regional_factor_by_department,
)
from geocarbon.domain.models import (
    CarbonCalculationInput,
    CarbonCalculationOutput,
    CarbonCreditEstimate,
    CarbonRevenueEstimate,
    ProjectCategory,
    YearlyProjection,
)
from geocarbon.services.domain.revenue_estimator import annual_revenue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BiomassResolution:
    """Biomass figure chosen for a calculation and where it came from."""
    biomass_per_hectare: float
    source: str
    tier: str


BiomassResolver = Callable[[CarbonCalculationInput], Optional[BiomassResolution]]


def _from_regional_factor(factor: RegionalFactor, tier: str) -> BiomassResolution:
    return BiomassResolution(
        biomass_per_hectare=factor.carbon_per_hectare_year,
        source=f"IPCC 2019 factors ({factor.name})",
        tier=tier,
    )


def resolve_measured_biomass(data: CarbonCalculationInput) -> Optional[BiomassResolution]:
    if data.biomass_per_hectare is None:
        return None
    return BiomassResolution(
        biomass_per_hectare=data.biomass_per_hectare,
        source="Measured satellite biomass",
        tier="measured",
    )


def resolve_forest_type_biomass(data: CarbonCalculationInput) -> Optional[BiomassResolution]:
    factor = get_regional_factor(data.forest_type)
    return _from_regional_factor(factor, "forest_type") if factor else None


def resolve_department_biomass(data: CarbonCalculationInput) -> Optional[BiomassResolution]:
    factor = get_regional_factor_by_department(data.department)
    return _from_regional_factor(factor, "department") if factor else None


def resolve_default_biomass(data: CarbonCalculationInput) -> Optional[BiomassResolution]:
    return _from_regional_factor(REGIONAL_FACTORS[DEFAULT_FOREST_TYPE], "default")


BIOMASS_RESOLVERS: Tuple[BiomassResolver, ...] = (
    resolve_measured_biomass,
    resolve_forest_type_biomass,
    resolve_department_biomass,
    resolve_default_biomass,
)


def resolve_biomass(
    data: CarbonCalculationInput,
    resolvers: Tuple[BiomassResolver, ...] = BIOMASS_RESOLVERS,
) -> BiomassResolution:
    """
    Try each biomass resolver in order and return the first hit.

    Args:
        data: Calculation input
        resolvers: Ordered resolver chain

    Returns:
        The first non-empty BiomassResolution
    """
    for resolver in resolvers:
        resolution = resolver(data)
        if resolution is not None:
            return resolution
    raise LookupError("No biomass resolver produced a value")


def calculate_carbon_capture(data: CarbonCalculationInput) -> CarbonCalculationOutput:
    """
    Calculate annual CO2 capture for a project.

    Args:
        data: Area, project category and optional biomass hints

    Returns:
        CarbonCalculationOutput with the figures, a methodology trail and
        annual revenue scenarios
    """
    resolution = resolve_biomass(data)
    biomass = resolution.biomass_per_hectare
    project_factor = get_project_factor(data.project_category)

    co2_per_year = data.area_hectares * biomass * CARBON_TO_CO2_RATIO * project_factor
    total_co2 = co2_per_year * data.duration_years if data.duration_years else None
    logger.debug(
        f"Carbon capture: {data.area_hectares} ha, biomass {biomass:.4f} tC/ha "
        f"({resolution.tier}), factor {project_factor} -> {co2_per_year:.2f} tCO2/yr"
    )

    methodology = " | ".join([
        f"Area: {data.area_hectares:.2f} ha",
        f"Biomass: {biomass:.2f} tC/ha ({resolution.source})",
        f"C->CO2 conversion factor: {CARBON_TO_CO2_RATIO}",
        f"Project factor ({data.project_category.value}): {project_factor}",
        f"Formula: {data.area_hectares:.2f} ha x {biomass:.2f} tC/ha x {CARBON_TO_CO2_RATIO} x {project_factor}",
        f"Result: {co2_per_year:.2f} tCO2/year",
    ])

    # A measured figure is reported verbatim so it can be traced back
    biomass_used = biomass if resolution.tier == "measured" else round(biomass, 2)

    return CarbonCalculationOutput(
        estimated_co2_tons_year=round(co2_per_year, 2),
        total_co2_tons=round(total_co2, 2) if total_co2 is not None else None,
        biomass_used=biomass_used,
        biomass_source=resolution.source,
        biomass_tier=resolution.tier,
        conversion_factor=project_factor,
        co2_conversion_ratio=CARBON_TO_CO2_RATIO,
        area_hectares=data.area_hectares,
        methodology=methodology,
        revenue_estimate=_revenue_estimate(co2_per_year),
    )


def calculate_carbon_capture_by_department(
    area_hectares: float,
    project_category: ProjectCategory,
    department: str,
    duration_years: Optional[int] = None,
) -> CarbonCalculationOutput:
    """
    Calculate carbon capture when only the administrative department is known.

    Unknown departments fall through to the default regional factor.
    """
    return calculate_carbon_capture(
        CarbonCalculationInput(
            area_hectares=area_hectares,
            project_category=project_category,
            department=department,
            duration_years=duration_years,
        )
    )


def project_multi_year(data: CarbonCalculationInput, years: int) -> List[YearlyProjection]:
    """
    Year-by-year projection at a constant annual capture rate.

    Reforestation ramps up over time in practice; this projection does not
    model that.
    """
    if years < 1:
        raise ValueError("years must be at least 1")

    annual_co2 = calculate_carbon_capture(data).estimated_co2_tons_year
    projection = []
    cumulative = 0.0
    for year in range(1, years + 1):
        cumulative += annual_co2
        projection.append(YearlyProjection(
            year=year,
            co2_tons_year=round(annual_co2, 2),
            cumulative_co2_tons=round(cumulative, 2),
            revenue=_revenue_estimate(annual_co2),
        ))
    return projection


def estimate_carbon_credits(
    co2_tons_year: float,
    years: int = 10,
    verification_rate: float = 0.9,
) -> CarbonCreditEstimate:
    """
    Estimate verifiable credits from theoretical capture.

    Args:
        co2_tons_year: Annual CO2 capture
        years: Crediting period
        verification_rate: Share of theoretical capture that gets verified

    Returns:
        Annual and total credit counts
    """
    if not 0 < verification_rate <= 1:
        raise ValueError("verification_rate must be in (0, 1]")

    annual_credits = co2_tons_year * verification_rate
    return CarbonCreditEstimate(
        annual_credits=round(annual_credits, 2),
        total_credits=round(annual_credits * years, 2),
        verification_rate=verification_rate,
    )


def _revenue_estimate(co2_per_year: float) -> CarbonRevenueEstimate:
    annual = annual_revenue(co2_per_year)
    return CarbonRevenueEstimate(
        conservative=annual.conservative,
        realistic=annual.realistic,
        optimistic=annual.optimistic,
        per_year=True,
    )
