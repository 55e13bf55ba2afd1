"""
API request models using Pydantic.
"""
from typing import Optional

from pydantic import BaseModel, Field

from geocarbon.domain.models import (
    AnalysisOptions,
    CarbonCalculationInput,
    PolygonGeometry,
    ProjectCategory,
)

EXAMPLE_POLYGON = {
    "type": "Polygon",
    "coordinates": [[
        [-63.20, -17.80],
        [-63.19, -17.80],
        [-63.19, -17.79],
        [-63.20, -17.79],
        [-63.20, -17.80],
    ]],
}


class GeometryRequest(BaseModel):
    """A GeoJSON polygon to validate or measure."""
    geometry: PolygonGeometry

    class Config:
        json_schema_extra = {"example": {"geometry": EXAMPLE_POLYGON}}


class SimplifyRequest(GeometryRequest):
    tolerance: float = Field(
        default=0.001,
        gt=0,
        le=1,
        description="Simplification tolerance in degrees",
    )


class AreaAnalysisRequest(BaseModel):
    """Polygon plus the analysis branches to run."""
    geometry: PolygonGeometry
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)

    class Config:
        json_schema_extra = {
            "example": {
                "geometry": EXAMPLE_POLYGON,
                "options": {
                    "include_forest": True,
                    "include_community_data": True,
                    "include_tree_detection": True,
                },
            }
        }


class DepartmentCarbonRequest(BaseModel):
    area_hectares: float = Field(gt=0)
    project_category: ProjectCategory
    department: str = Field(description="Department name, e.g. 'Santa Cruz'")
    duration_years: Optional[int] = Field(default=None, ge=1)


class CarbonProjectionRequest(BaseModel):
    """Carbon input plus the projection horizon."""
    input: CarbonCalculationInput
    years: int = Field(default=10, ge=1, le=100)
    verification_rate: float = Field(default=0.9, gt=0, le=1)


class ProjectEstimateRequest(BaseModel):
    geometry: PolygonGeometry
    project_category: ProjectCategory
    duration_years: Optional[int] = Field(default=None, ge=1, le=100)
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)
