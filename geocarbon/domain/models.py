"""
Domain models for area analysis and carbon accounting.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.).
"""
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, Field, model_validator


def _check_position(position: List[float]) -> List[float]:
    lon, lat = position[0], position[1]
    if not -180.0 <= lon <= 180.0:
        raise ValueError(f"Longitude {lon} is outside [-180, 180]")
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"Latitude {lat} is outside [-90, 90]")
    return position


Position = Annotated[
    List[float], Field(min_length=2, max_length=3), AfterValidator(_check_position)
]
ConfidenceLevel = Literal["low", "medium", "high"]


class ForestType(str, Enum):
    """Forest-type classification reported by the satellite provider."""
    AMAZONIA = "AMAZONIA"
    CHIQUITANIA = "CHIQUITANIA"
    YUNGAS = "YUNGAS"
    ALTIPLANO = "ALTIPLANO"
    MIXED = "MIXED"
    UNKNOWN = "UNKNOWN"


class ProjectCategory(str, Enum):
    """Type of carbon project sited on an area."""
    REDD_PLUS = "REDD_PLUS"
    REFORESTATION = "REFORESTATION"
    COMMUNITY_CONSERVATION = "COMMUNITY_CONSERVATION"
    RENEWABLE_ENERGY = "RENEWABLE_ENERGY"
    REGENERATIVE_AGRICULTURE = "REGENERATIVE_AGRICULTURE"


def _nesting_depth(value: Any) -> Optional[int]:
    depth = 0
    while isinstance(value, list):
        if not value:
            return None
        depth += 1
        value = value[0]
    return depth


class PolygonGeometry(BaseModel):
    """
    GeoJSON Polygon or MultiPolygon with (longitude, latitude) positions.

    Rings are expected closed (first == last); the geometry engine reports
    violations instead of rejecting them here so all problems can be shown
    together.
    """
    type: Literal["Polygon", "MultiPolygon"]
    coordinates: Union[
        List[List[Position]],
        List[List[List[Position]]],
    ] = Field(description="Rings of [lon, lat] positions (GeoJSON order)")

    class Config:
        frozen = True

    @model_validator(mode="after")
    def _check_nesting(self) -> "PolygonGeometry":
        expected = 3 if self.type == "Polygon" else 4
        depth = _nesting_depth(self.coordinates)
        if depth is not None and depth != expected:
            raise ValueError(
                f"{self.type} coordinates must be nested {expected} levels deep, got {depth}"
            )
        return self

    @property
    def parts(self) -> List[List[List[List[float]]]]:
        """Polygons as lists of rings; a Polygon has exactly one part."""
        if self.type == "Polygon":
            return [self.coordinates]
        return list(self.coordinates)

    @property
    def exterior_rings(self) -> List[List[List[float]]]:
        return [part[0] for part in self.parts if part]

    @property
    def rings(self) -> List[List[List[float]]]:
        return [ring for part in self.parts for ring in part]

    def to_geojson(self) -> Dict[str, Any]:
        return {"type": self.type, "coordinates": self.coordinates}


class Coordinate(BaseModel):
    """A (longitude, latitude) point."""
    lon: float
    lat: float


class BoundingBox(BaseModel):
    """Axis-aligned bounding box in degrees."""
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.min_lon, self.min_lat, self.max_lon, self.max_lat)


class ValidationResult(BaseModel):
    """Outcome of polygon validation with every violation found."""
    valid: bool
    errors: List[str] = Field(default_factory=list)


class AreaMetrics(BaseModel):
    """Geometric size of a polygon."""
    area_hectares: float = Field(description="Geodesic area in hectares (2 dp)")
    perimeter_km: float = Field(description="Geodesic perimeter in km (2 dp)")
    centroid: Coordinate = Field(description="Unweighted vertex average (approximation)")
    bounding_box: BoundingBox
    within_country: bool


# ============================================================
# Environmental analysis
# ============================================================

class ForestMetrics(BaseModel):
    """Forest cover and biomass figures for an area."""
    total_area_hectares: float
    forest_area_hectares: float = 0.0
    forest_coverage_percent: float = 0.0
    biomass_tons: float = 0.0
    carbon_stock_tons: float = 0.0
    estimated_co2_tons_year: float = 0.0
    biomass_per_hectare: Optional[float] = Field(
        default=None, description="Measured biomass density (tC/ha) when the provider reported one"
    )
    tree_cover_density: Optional[float] = None
    forest_type: Optional[ForestType] = None
    recent_loss_detected: bool = False
    change_percent: float = 0.0


class TreeEstimationDetails(BaseModel):
    """Breakdown of vegetation detections."""
    individual_trees: int = 0
    tree_rows: int = 0
    forest_areas: int = 0
    orchards: int = 0
    raw_features: int = 0
    tree_cover_density: Optional[float] = None


class TreeEstimation(BaseModel):
    """Tree count range for an area."""
    min: int
    max: int
    estimate: int
    confidence: ConfidenceLevel
    method: Literal["osm", "hybrid", "area_default"]
    details: TreeEstimationDetails = Field(default_factory=TreeEstimationDetails)


class WaterwayInfo(BaseModel):
    id: int
    name: Optional[str] = None
    type: Literal["river", "stream", "canal", "other"]
    length_km: Optional[float] = None


class WaterwayData(BaseModel):
    total: int = 0
    rivers: int = 0
    streams: int = 0
    canals: int = 0
    other: int = 0
    total_length_km: float = 0.0
    items: List[WaterwayInfo] = Field(default_factory=list)
    major_waterways: List[WaterwayInfo] = Field(
        default_factory=list, description="Named waterways only"
    )


class BuildingData(BaseModel):
    total: int = 0
    residential: int = 0
    commercial: int = 0
    public: int = 0
    other: int = 0
    density_per_hectare: float = 0.0


class CommunityInfo(BaseModel):
    id: int
    name: Optional[str] = None
    type: Literal["village", "town", "hamlet", "other"]
    population: Optional[int] = Field(default=None, description="Population declared in the source tags")
    estimated_population: int


class CommunityData(BaseModel):
    total: int = 0
    villages: int = 0
    towns: int = 0
    hamlets: int = 0
    other: int = 0
    items: List[CommunityInfo] = Field(default_factory=list)
    declared_population: int = 0
    estimated_population: int = 0


class AnalysisOptions(BaseModel):
    """Which branches of an area analysis to run."""
    include_forest: bool = True
    include_community_data: bool = True
    include_tree_detection: bool = True


class AnalysisSummary(BaseModel):
    is_forested: bool
    is_populated: bool
    has_water_access: bool
    conservation_priority: ConfidenceLevel


class AnalysisMetadata(BaseModel):
    analyzed_at: datetime
    processing_time_seconds: float
    data_sources: Dict[str, str] = Field(description="Data source label per branch")
    degraded_branches: List[str] = Field(default_factory=list)


class AreaAnalysisResult(BaseModel):
    """Fused environmental analysis of a polygon."""
    area: AreaMetrics
    forest: ForestMetrics
    trees: TreeEstimation
    waterways: WaterwayData
    buildings: BuildingData
    communities: CommunityData
    summary: AnalysisSummary
    metadata: AnalysisMetadata


# ============================================================
# Carbon accounting
# ============================================================

class CarbonCalculationInput(BaseModel):
    """Parameters of a carbon capture calculation."""
    area_hectares: float = Field(gt=0, description="Project area in hectares")
    project_category: ProjectCategory
    forest_type: Optional[ForestType] = None
    biomass_per_hectare: Optional[float] = Field(
        default=None, gt=0, description="Directly measured biomass (tC/ha)"
    )
    department: Optional[str] = Field(
        default=None, description="Administrative region used as the last biomass fallback"
    )
    duration_years: Optional[int] = Field(default=None, ge=1)

    class Config:
        frozen = True


class ScenarioRevenue(BaseModel):
    conservative: float
    realistic: float
    optimistic: float


class CarbonRevenueEstimate(ScenarioRevenue):
    currency: Literal["USD"] = "USD"
    per_year: bool = True


class CarbonCalculationOutput(BaseModel):
    estimated_co2_tons_year: float
    total_co2_tons: Optional[float] = None
    biomass_used: float
    biomass_source: str
    biomass_tier: Literal["measured", "forest_type", "department", "default"]
    conversion_factor: float = Field(description="Project-type factor applied")
    co2_conversion_ratio: float
    area_hectares: float
    methodology: str
    revenue_estimate: CarbonRevenueEstimate


class RevenueProjection(BaseModel):
    annual: ScenarioRevenue
    total: ScenarioRevenue
    years: int
    currency: Literal["USD"] = "USD"


class YearlyProjection(BaseModel):
    year: int
    co2_tons_year: float
    cumulative_co2_tons: float
    revenue: CarbonRevenueEstimate


class CarbonCreditEstimate(BaseModel):
    annual_credits: float
    total_credits: float
    verification_rate: float


class ProjectEstimate(BaseModel):
    """Area analysis chained into carbon and revenue figures."""
    analysis: AreaAnalysisResult
    carbon: CarbonCalculationOutput
    revenue: RevenueProjection
