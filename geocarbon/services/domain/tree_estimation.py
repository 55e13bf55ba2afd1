"""
Domain service: Tree count estimation.

Three estimators, from most to least evidence:
- OSM detections weighted per detection category
- forest-cover density bands applied to the forested share of the area
- an area-only conservative default
"""
from dataclasses import dataclass

from geocarbon.domain.models import (
    ConfidenceLevel,
    TreeEstimation,
    TreeEstimationDetails,
)

# Detection weights
TREES_PER_TREE_ROW = 35
FOREST_TREES_PER_HECTARE = 400
ORCHARD_TREES_PER_HECTARE = 150
FOREST_TREES_WITHOUT_GEOMETRY = 1000
ORCHARD_TREES_WITHOUT_GEOMETRY = 500

# Area-only default
DEFAULT_TREES_PER_HECTARE = 400
DEFAULT_STOCKING_RATIO = 0.5


@dataclass(frozen=True)
class DensityBand:
    min_per_hectare: int
    max_per_hectare: int


# Upper coverage bound (exclusive) -> trees per hectare
DENSITY_BANDS = (
    (30.0, DensityBand(150, 250)),
    (60.0, DensityBand(250, 400)),
    (80.0, DensityBand(400, 600)),
    (float("inf"), DensityBand(500, 700)),
)


@dataclass
class VegetationDetections:
    """Counts of tagged vegetation features with their weighted tree total."""
    individual_trees: int = 0
    tree_rows: int = 0
    forest_areas: int = 0
    orchards: int = 0
    weighted_trees: int = 0

    @property
    def raw_features(self) -> int:
        return self.individual_trees + self.tree_rows + self.forest_areas + self.orchards


def detection_confidence(raw_features: int) -> ConfidenceLevel:
    if raw_features > 50:
        return "high"
    if raw_features > 10:
        return "medium"
    return "low"


def estimate_from_detections(detections: VegetationDetections) -> TreeEstimation:
    """
    Tree estimate from OSM vegetation detections (+/- 30 %).
    """
    estimate = detections.weighted_trees
    return TreeEstimation(
        min=round(estimate * 0.7),
        max=round(estimate * 1.3),
        estimate=estimate,
        confidence=detection_confidence(detections.raw_features),
        method="osm",
        details=TreeEstimationDetails(
            individual_trees=detections.individual_trees,
            tree_rows=detections.tree_rows,
            forest_areas=detections.forest_areas,
            orchards=detections.orchards,
            raw_features=detections.raw_features,
        ),
    )


def density_band(coverage_percent: float) -> DensityBand:
    for upper_bound, band in DENSITY_BANDS:
        if coverage_percent < upper_bound:
            return band
    return DENSITY_BANDS[-1][1]


def estimate_from_coverage(area_hectares: float, coverage_percent: float) -> TreeEstimation:
    """
    Tree estimate from forest cover density bands.

    Used when the vegetation query succeeded but found nothing while the
    satellite provider reported forest cover.

    Args:
        area_hectares: Total area
        coverage_percent: Forest cover (0-100)

    Returns:
        TreeEstimation with method "hybrid"
    """
    band = density_band(coverage_percent)
    forest_hectares = area_hectares * coverage_percent / 100
    min_trees = round(forest_hectares * band.min_per_hectare)
    max_trees = round(forest_hectares * band.max_per_hectare)
    return TreeEstimation(
        min=min_trees,
        max=max_trees,
        estimate=round((min_trees + max_trees) / 2),
        confidence="low",
        method="hybrid",
        details=TreeEstimationDetails(tree_cover_density=coverage_percent),
    )


def default_estimate(area_hectares: float) -> TreeEstimation:
    """Conservative estimate from area alone (+/- 50 %)."""
    estimate = round(area_hectares * DEFAULT_TREES_PER_HECTARE * DEFAULT_STOCKING_RATIO)
    return TreeEstimation(
        min=round(estimate * 0.5),
        max=round(estimate * 1.5),
        estimate=estimate,
        confidence="low",
        method="area_default",
    )
