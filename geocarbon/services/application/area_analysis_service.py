"""
Application service: Orchestration layer for area analysis.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Literal, Optional

from geocarbon.config import settings
from geocarbon.domain.exceptions import (
    AnalysisCancelledError,
    ProviderError,
    ValidationError,
)
from geocarbon.domain.models import (
    AnalysisMetadata,
    AnalysisOptions,
    AnalysisSummary,
    AreaAnalysisResult,
    BuildingData,
    CarbonCalculationInput,
    CommunityData,
    ForestMetrics,
    PolygonGeometry,
    ProjectCategory,
    ProjectEstimate,
    TreeEstimation,
    WaterwayData,
)
from geocarbon.domain.national_boundaries import get_department_from_coordinates
from geocarbon.infrastructure.analysis_cache import AnalysisCache, cache_key
from geocarbon.infrastructure.forest_data_client import (
    ForestDataClient,
    ForestProviderResult,
)
from geocarbon.infrastructure.osm_parser import (
    parse_buildings,
    parse_communities,
    parse_vegetation,
    parse_waterways,
)
from geocarbon.infrastructure.overpass_client import OverpassClient
from geocarbon.services.domain import geometry_engine
from geocarbon.services.domain.carbon_calculator import calculate_carbon_capture
from geocarbon.services.domain.revenue_estimator import estimate_revenue
from geocarbon.services.domain.tree_estimation import (
    VegetationDetections,
    default_estimate,
    estimate_from_coverage,
    estimate_from_detections,
)

logger = logging.getLogger(__name__)

# Forest stock figures
AVERAGE_BIOMASS_TONS_PER_HECTARE = 200
CARBON_FRACTION = 0.47
ANNUAL_GROWTH_RATE = 0.02
CO2_CONVERSION_FACTOR = 3.67

FOREST = "forest"
WATERWAYS = "waterways"
BUILDINGS = "buildings"
SETTLEMENTS = "settlements"
VEGETATION = "vegetation"

OSM_SOURCE = "OpenStreetMap (Overpass API)"
SKIPPED_SOURCE = "skipped"

BranchStatus = Literal["ok", "failed", "skipped"]


@dataclass
class BranchResult:
    """Outcome of one provider branch."""
    name: str
    status: BranchStatus
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class AreaAnalysisService:
    """
    Application service for area analysis.

    Fans out to the forest provider and the Overpass API concurrently and
    fuses the results. A failing or slow provider only degrades its own
    branch; the analysis still returns a complete result.
    """

    def __init__(
        self,
        forest_client: ForestDataClient,
        overpass_client: OverpassClient,
        branch_timeout: Optional[float] = None,
        cache: Optional[AnalysisCache] = None,
    ):
        """
        Initialize the service with dependencies.

        Args:
            forest_client: Satellite forest-cover/biomass provider
            overpass_client: OpenStreetMap Overpass provider
            branch_timeout: Per-branch timeout in seconds (defaults to settings)
            cache: Optional result cache
        """
        self.forest_client = forest_client
        self.overpass_client = overpass_client
        self.branch_timeout = (
            settings.provider_timeout_seconds if branch_timeout is None else branch_timeout
        )
        self.cache = cache

    async def analyze(
        self,
        polygon: PolygonGeometry,
        options: Optional[AnalysisOptions] = None,
    ) -> AreaAnalysisResult:
        """
        Analyze the environmental profile of a polygon.

        This method orchestrates:
        1. Validating the polygon against the analysis limits
        2. Running the enabled provider branches concurrently
        3. Fusing branch data (or its defaults) into one result

        Args:
            polygon: Polygon or MultiPolygon to analyze
            options: Which branches to run (all by default)

        Returns:
            AreaAnalysisResult

        Raises:
            ValidationError: If the polygon is rejected (no provider is called)
            ComputationError: If a provider breaks its data contract
            AnalysisCancelledError: If the caller cancels the analysis
        """
        options = options or AnalysisOptions()
        started = time.perf_counter()

        validation = geometry_engine.validate(
            polygon,
            min_area_ha=settings.min_analysis_area_ha,
            max_area_ha=settings.max_analysis_area_ha,
        )
        if not validation.valid:
            raise ValidationError("Invalid polygon", validation.errors)

        key = None
        if self.cache is not None and self.cache.enabled:
            key = cache_key(polygon, options)
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("Area analysis served from cache")
                return cached

        area = geometry_engine.compute_area_metrics(polygon)
        bbox = area.bounding_box.as_tuple()
        logger.info(f"Analyzing area of {area.area_hectares} ha")

        branches = await self._run_branches(
            {
                FOREST: (
                    options.include_forest,
                    lambda: self.forest_client.analyze_forest(polygon),
                ),
                WATERWAYS: (
                    options.include_community_data,
                    lambda: self._waterways(bbox),
                ),
                BUILDINGS: (
                    options.include_community_data,
                    lambda: self._buildings(bbox, area.area_hectares),
                ),
                SETTLEMENTS: (
                    options.include_community_data,
                    lambda: self._communities(bbox),
                ),
                VEGETATION: (
                    options.include_tree_detection,
                    lambda: self._vegetation(bbox),
                ),
            }
        )

        forest_branch = branches[FOREST]
        forest = (
            build_forest_metrics(area.area_hectares, forest_branch.value)
            if forest_branch.ok
            else ForestMetrics(total_area_hectares=area.area_hectares)
        )
        waterways = branches[WATERWAYS].value if branches[WATERWAYS].ok else WaterwayData()
        buildings = branches[BUILDINGS].value if branches[BUILDINGS].ok else BuildingData()
        communities = (
            branches[SETTLEMENTS].value if branches[SETTLEMENTS].ok else CommunityData()
        )
        trees = estimate_trees(
            area.area_hectares,
            branches[VEGETATION],
            forest.forest_coverage_percent if forest_branch.ok else None,
        )

        result = AreaAnalysisResult(
            area=area,
            forest=forest,
            trees=trees,
            waterways=waterways,
            buildings=buildings,
            communities=communities,
            summary=summarize(forest, waterways, buildings, communities),
            metadata=AnalysisMetadata(
                analyzed_at=datetime.now(timezone.utc),
                processing_time_seconds=round(time.perf_counter() - started, 3),
                data_sources=data_source_labels(branches, trees),
                degraded_branches=[
                    name for name, branch in branches.items() if branch.status == "failed"
                ],
            ),
        )

        logger.info(
            f"Area analysis finished in {result.metadata.processing_time_seconds}s "
            f"(degraded: {result.metadata.degraded_branches or 'none'})"
        )
        if key is not None:
            self.cache.set(key, result)
        return result

    async def estimate_project(
        self,
        polygon: PolygonGeometry,
        project_category: ProjectCategory,
        duration_years: Optional[int] = None,
        options: Optional[AnalysisOptions] = None,
    ) -> ProjectEstimate:
        """
        Analyze an area and turn it into carbon and revenue figures.

        Biomass degrades from the measured provider value to the satellite
        forest type and finally to the department containing the centroid.

        Args:
            polygon: Project polygon
            project_category: Carbon project category
            duration_years: Project lifetime (defaults to settings)
            options: Analysis branches to run

        Returns:
            ProjectEstimate with analysis, carbon and revenue sections
        """
        analysis = await self.analyze(polygon, options)
        forest = analysis.forest
        years = duration_years or settings.default_project_duration_years

        biomass = forest.biomass_per_hectare
        centroid = analysis.area.centroid
        carbon = calculate_carbon_capture(
            CarbonCalculationInput(
                area_hectares=analysis.area.area_hectares,
                project_category=project_category,
                forest_type=forest.forest_type,
                biomass_per_hectare=biomass if biomass and biomass > 0 else None,
                department=get_department_from_coordinates(centroid.lon, centroid.lat),
                duration_years=years,
            )
        )
        revenue = estimate_revenue(carbon.estimated_co2_tons_year, years)
        return ProjectEstimate(analysis=analysis, carbon=carbon, revenue=revenue)

    async def _run_branches(
        self,
        branches: Dict[str, tuple],
    ) -> Dict[str, BranchResult]:
        """Run enabled branches concurrently and collect every outcome."""
        results: Dict[str, BranchResult] = {}
        tasks = {}
        for name, (enabled, call) in branches.items():
            if enabled:
                tasks[name] = asyncio.ensure_future(self._run_branch(name, call))
            else:
                results[name] = BranchResult(name=name, status="skipped")

        try:
            outcomes = await asyncio.gather(*tasks.values())
        except asyncio.CancelledError as e:
            _cancel_all(tasks.values())
            logger.info("Area analysis cancelled by caller")
            raise AnalysisCancelledError("Area analysis was cancelled") from e
        except Exception:
            _cancel_all(tasks.values())
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            raise

        results.update(zip(tasks.keys(), outcomes))
        return {name: results[name] for name in branches}

    async def _run_branch(
        self,
        name: str,
        call: Callable[[], Awaitable[Any]],
    ) -> BranchResult:
        try:
            value = await asyncio.wait_for(call(), timeout=self.branch_timeout)
        except ProviderError as e:
            logger.warning(f"Branch '{name}' failed: {e.message}")
            return BranchResult(name=name, status="failed", error=e.message)
        except asyncio.TimeoutError:
            logger.warning(f"Branch '{name}' timed out after {self.branch_timeout}s")
            return BranchResult(
                name=name, status="failed", error=f"timed out after {self.branch_timeout}s"
            )
        return BranchResult(name=name, status="ok", value=value)

    async def _waterways(self, bbox) -> WaterwayData:
        return parse_waterways(await self.overpass_client.fetch_waterways(bbox))

    async def _buildings(self, bbox, area_hectares: float) -> BuildingData:
        return parse_buildings(await self.overpass_client.fetch_buildings(bbox), area_hectares)

    async def _communities(self, bbox) -> CommunityData:
        return parse_communities(await self.overpass_client.fetch_communities(bbox))

    async def _vegetation(self, bbox) -> VegetationDetections:
        return parse_vegetation(await self.overpass_client.fetch_vegetation(bbox))


def _cancel_all(tasks) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()


def build_forest_metrics(area_hectares: float, result: ForestProviderResult) -> ForestMetrics:
    """
    Derive forest stock figures from a provider measurement.

    Stock uses an average dry biomass of 200 t/ha of forest, 47 % of it
    carbon, growing 2 % per year.
    """
    forest_area = area_hectares * result.forest_coverage_percent / 100
    biomass = forest_area * AVERAGE_BIOMASS_TONS_PER_HECTARE
    carbon_stock = biomass * CARBON_FRACTION
    co2_per_year = carbon_stock * ANNUAL_GROWTH_RATE * CO2_CONVERSION_FACTOR
    return ForestMetrics(
        total_area_hectares=area_hectares,
        forest_area_hectares=round(forest_area, 2),
        forest_coverage_percent=round(result.forest_coverage_percent, 2),
        biomass_tons=round(biomass, 2),
        carbon_stock_tons=round(carbon_stock, 2),
        estimated_co2_tons_year=round(co2_per_year, 2),
        biomass_per_hectare=result.biomass_per_hectare,
        tree_cover_density=(
            result.tree_cover_density
            if result.tree_cover_density is not None
            else result.forest_coverage_percent
        ),
        forest_type=result.forest_type,
        recent_loss_detected=result.recent_loss_detected,
        change_percent=result.change_percent,
    )


def estimate_trees(
    area_hectares: float,
    vegetation: BranchResult,
    forest_coverage_percent: Optional[float],
) -> TreeEstimation:
    """Pick the tree estimator the available evidence supports."""
    if not vegetation.ok:
        return default_estimate(area_hectares)
    detections: VegetationDetections = vegetation.value
    if detections.raw_features == 0 and forest_coverage_percent is not None:
        return estimate_from_coverage(area_hectares, forest_coverage_percent)
    return estimate_from_detections(detections)


def summarize(
    forest: ForestMetrics,
    waterways: WaterwayData,
    buildings: BuildingData,
    communities: CommunityData,
) -> AnalysisSummary:
    coverage = forest.forest_coverage_percent

    if coverage > 70 and communities.total < 3:
        priority = "high"
    elif coverage > 40 or (communities.total < 5 and buildings.total < 50):
        priority = "medium"
    else:
        priority = "low"

    return AnalysisSummary(
        is_forested=coverage > 50,
        is_populated=communities.total > 0 or buildings.total > 10,
        has_water_access=waterways.total > 0,
        conservation_priority=priority,
    )


def data_source_labels(
    branches: Dict[str, BranchResult],
    trees: TreeEstimation,
) -> Dict[str, str]:
    labels: Dict[str, str] = {}
    for name, branch in branches.items():
        if branch.status == "skipped":
            labels[name] = SKIPPED_SOURCE
        elif branch.status == "failed":
            labels[name] = "default (provider unavailable)"
        elif name == FOREST:
            labels[name] = branch.value.data_source
        else:
            labels[name] = OSM_SOURCE

    tree_sources = {
        "osm": "OpenStreetMap vegetation features",
        "hybrid": "Estimated from forest density",
        "area_default": "Estimated from area",
    }
    labels["trees"] = tree_sources[trees.method]
    return labels

