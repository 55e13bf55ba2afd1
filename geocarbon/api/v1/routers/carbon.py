"""
API router for carbon accounting endpoints.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Query

from geocarbon.api.v1.models.requests import CarbonProjectionRequest, DepartmentCarbonRequest
from geocarbon.api.v1.models.responses import CarbonProjectionResponse
from geocarbon.domain.models import (
    CarbonCalculationInput,
    CarbonCalculationOutput,
    RevenueProjection,
)
from geocarbon.services.domain import carbon_calculator
from geocarbon.services.domain.revenue_estimator import estimate_revenue


router = APIRouter(
    prefix="/carbon",
    tags=["carbon"],
)


@router.post(
    "/calculate",
    response_model=CarbonCalculationOutput,
    summary="Calculate carbon capture",
    description="""
    Annual CO2 capture for a project area.

    Biomass is taken from the first available source: measured biomass,
    forest type, department, then the default regional factor.
    """,
)
async def calculate_carbon(data: CarbonCalculationInput) -> CarbonCalculationOutput:
    return carbon_calculator.calculate_carbon_capture(data)


@router.post(
    "/by-department",
    response_model=CarbonCalculationOutput,
    summary="Calculate carbon capture from a department",
)
async def calculate_carbon_by_department(request: DepartmentCarbonRequest) -> CarbonCalculationOutput:
    return carbon_calculator.calculate_carbon_capture_by_department(
        area_hectares=request.area_hectares,
        project_category=request.project_category,
        department=request.department,
        duration_years=request.duration_years,
    )


@router.post(
    "/projection",
    response_model=CarbonProjectionResponse,
    summary="Project capture and credits over several years",
)
async def carbon_projection(request: CarbonProjectionRequest) -> CarbonProjectionResponse:
    projections = carbon_calculator.project_multi_year(request.input, request.years)
    credits = carbon_calculator.estimate_carbon_credits(
        projections[0].co2_tons_year,
        years=request.years,
        verification_rate=request.verification_rate,
    )
    return CarbonProjectionResponse(projections=projections, credits=credits)


@router.get(
    "/revenue",
    response_model=RevenueProjection,
    summary="Estimate carbon credit revenue",
)
async def carbon_revenue(
    co2_tons_year: Annotated[float, Query(description="Annual CO2 capture in tons")],
    years: Annotated[Optional[int], Query(description="Crediting period in years")] = None,
) -> RevenueProjection:
    """
    Raises:
        ValueError: On negative inputs (mapped to 400)
    """
    return estimate_revenue(co2_tons_year, years)
