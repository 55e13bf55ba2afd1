"""
API router for geometry endpoints.
"""
from fastapi import APIRouter

from geocarbon.api.v1.models.requests import GeometryRequest, SimplifyRequest
from geocarbon.api.v1.models.responses import GeometryValidationResponse, SimplifyResponse
from geocarbon.domain.exceptions import GeometryError
from geocarbon.domain.models import AreaMetrics
from geocarbon.services.domain import geometry_engine


router = APIRouter(
    prefix="/geometry",
    tags=["geometry"],
)


@router.post(
    "/validate",
    response_model=GeometryValidationResponse,
    summary="Validate a polygon",
    description="""
    Check that a polygon can be analyzed.

    Every violation is reported: unclosed rings, too few vertices, location
    outside the national boundary and area outside the accepted range.
    """,
)
async def validate_geometry(request: GeometryRequest) -> GeometryValidationResponse:
    result = geometry_engine.validate(request.geometry)

    try:
        area_hectares = geometry_engine.compute_area(request.geometry)
    except GeometryError:
        area_hectares = None

    return GeometryValidationResponse(
        valid=result.valid,
        errors=result.errors,
        area_hectares=area_hectares,
    )


@router.post(
    "/metrics",
    response_model=AreaMetrics,
    summary="Measure a polygon",
    description="Geodesic area, perimeter, centroid, bounding box and national containment.",
)
async def geometry_metrics(request: GeometryRequest) -> AreaMetrics:
    """
    Raises:
        GeometryError: If the polygon has no positive area (mapped to 400)
    """
    return geometry_engine.compute_area_metrics(request.geometry)


@router.post(
    "/simplify",
    response_model=SimplifyResponse,
    summary="Simplify a polygon",
)
async def simplify_geometry(request: SimplifyRequest) -> SimplifyResponse:
    simplified = geometry_engine.simplify_polygon(request.geometry, request.tolerance)
    return SimplifyResponse(
        geometry=simplified,
        original_vertex_count=_vertex_count(request.geometry),
        simplified_vertex_count=_vertex_count(simplified),
    )


def _vertex_count(polygon) -> int:
    return sum(len(ring) for ring in polygon.rings)
