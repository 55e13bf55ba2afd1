"""
API router for area analysis endpoints.
"""
from fastapi import APIRouter, Request

from geocarbon.api.dependencies import AreaAnalysisServiceDep
from geocarbon.api.rate_limit import PROVIDER_RATE_LIMIT, limiter
from geocarbon.api.v1.models.requests import AreaAnalysisRequest
from geocarbon.domain.models import AreaAnalysisResult


router = APIRouter(
    prefix="/analysis",
    tags=["analysis"],
)


@router.post(
    "/area",
    response_model=AreaAnalysisResult,
    summary="Analyze an area",
    description="""
    Fuse satellite forest data with OpenStreetMap features for a polygon.

    This endpoint:
    1. Validates the polygon (1 - 100,000 ha, inside the national boundary)
    2. Queries the forest provider and the Overpass API concurrently
    3. Estimates tree counts and a conservation priority

    A provider that is down or slow does not fail the request: its section
    falls back to defaults and is listed in `metadata.degraded_branches`.
    """,
    responses={
        400: {"description": "Invalid polygon"},
        429: {"description": "Rate limit exceeded"},
        502: {"description": "A provider returned malformed data"},
    },
)
@limiter.limit(PROVIDER_RATE_LIMIT)
async def analyze_area(
    request: Request,
    body: AreaAnalysisRequest,
    analysis_service: AreaAnalysisServiceDep,
) -> AreaAnalysisResult:
    """
    Analyze the environmental profile of an area.

    Args:
        request: Incoming request (used for rate limiting)
        body: Polygon and analysis options
        analysis_service: Area analysis service (injected dependency)

    Returns:
        AreaAnalysisResult
    """
    # Delegate to service layer (no business logic here)
    return await analysis_service.analyze(body.geometry, body.options)
