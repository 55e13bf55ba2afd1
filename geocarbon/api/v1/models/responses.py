"""
API response models using Pydantic.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from geocarbon.domain.models import (
    CarbonCreditEstimate,
    PolygonGeometry,
    YearlyProjection,
)


class GeometryValidationResponse(BaseModel):
    """Response model for the geometry validation endpoint."""
    valid: bool = Field(description="Whether the polygon can be analyzed")
    errors: List[str] = Field(
        default_factory=list,
        description="Every violation found, empty when valid",
    )
    area_hectares: Optional[float] = Field(
        default=None,
        description="Geodesic area when it could be computed",
    )

    class Config:
        json_schema_extra = {
            "example": {
                "valid": False,
                "errors": ["Area too small: 0.5 ha is below the minimum of 1 ha"],
                "area_hectares": 0.5,
            }
        }


class SimplifyResponse(BaseModel):
    geometry: PolygonGeometry
    original_vertex_count: int
    simplified_vertex_count: int


class CarbonProjectionResponse(BaseModel):
    """Year-by-year projection with the matching credit estimate."""
    projections: List[YearlyProjection]
    credits: CarbonCreditEstimate
