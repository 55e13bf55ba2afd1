"""
API router for end-to-end project estimates.
"""
from fastapi import APIRouter, Request

from geocarbon.api.dependencies import AreaAnalysisServiceDep
from geocarbon.api.rate_limit import PROVIDER_RATE_LIMIT, limiter
from geocarbon.api.v1.models.requests import ProjectEstimateRequest
from geocarbon.domain.models import ProjectEstimate


router = APIRouter(
    prefix="/projects",
    tags=["projects"],
)


@router.post(
    "/estimate",
    response_model=ProjectEstimate,
    summary="Estimate a carbon project",
    description="""
    Analyze a project polygon and chain the result into carbon capture and
    revenue figures. Biomass comes from the forest provider when it reports
    one, otherwise from the detected forest type or the department that
    contains the polygon centroid.
    """,
)
@limiter.limit(PROVIDER_RATE_LIMIT)
async def estimate_project(
    request: Request,
    body: ProjectEstimateRequest,
    analysis_service: AreaAnalysisServiceDep,
) -> ProjectEstimate:
    return await analysis_service.estimate_project(
        body.geometry,
        body.project_category,
        duration_years=body.duration_years,
        options=body.options,
    )
