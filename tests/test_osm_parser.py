"""
Unit tests for OSM element parsing and tree estimation.
"""
import pytest

from conftest import element, square_polygon
from geocarbon.infrastructure import osm_parser
from geocarbon.services.domain import tree_estimation


# ============================================================
# Waterway Tests
# ============================================================

class TestWaterways:
    """Tests for waterway parsing."""

    def test_counts_by_type(self, waterway_elements):
        data = osm_parser.parse_waterways(waterway_elements + [element(3, {"waterway": "canal"})])

        assert data.total == 3
        assert data.rivers == 1
        assert data.streams == 1
        assert data.canals == 1
        assert data.other == 0

    def test_named_waterways_are_major(self, waterway_elements):
        data = osm_parser.parse_waterways(waterway_elements)

        assert [w.name for w in data.major_waterways] == ["Río Piraí"]

    def test_length_from_geometry(self, waterway_elements):
        data = osm_parser.parse_waterways(waterway_elements)

        assert data.items[0].length_km == pytest.approx(1.5, abs=0.1)
        assert data.total_length_km > 0

    def test_unknown_tag_counted_as_other(self):
        data = osm_parser.parse_waterways([element(4, {"waterway": "ditch"}), element(5, {})])

        assert data.other == 2
        assert data.items[0].type == "other"
        assert data.items[0].length_km is None


# ============================================================
# Building Tests
# ============================================================

class TestBuildings:
    """Tests for building parsing."""

    def test_categories(self, building_elements):
        data = osm_parser.parse_buildings(building_elements, area_hectares=100.0)

        assert data.total == 3
        assert data.residential == 1
        assert data.public == 1
        assert data.other == 1
        assert data.density_per_hectare == 0.03

    def test_building_type_tag_takes_precedence(self):
        data = osm_parser.parse_buildings(
            [element(1, {"building": "yes", "building:type": "retail"})],
            area_hectares=10.0,
        )

        assert data.commercial == 1

    def test_zero_area_has_no_density(self, building_elements):
        data = osm_parser.parse_buildings(building_elements, area_hectares=0.0)

        assert data.density_per_hectare == 0.0


# ============================================================
# Community Tests
# ============================================================

class TestCommunities:
    """Tests for settlement parsing."""

    def test_declared_population_used(self, settlement_elements):
        data = osm_parser.parse_communities(settlement_elements)

        assert data.villages == 1
        assert data.declared_population == 350
        assert data.estimated_population == 350

    def test_population_defaults_by_place(self):
        data = osm_parser.parse_communities([
            element(1, {"place": "town"}, element_type="node"),
            element(2, {"place": "village"}, element_type="node"),
            element(3, {"place": "hamlet"}, element_type="node"),
            element(4, {"place": "isolated_dwelling"}, element_type="node"),
            element(5, {}, element_type="node"),
        ])

        assert data.total == 5
        assert data.other == 2
        assert data.declared_population == 0
        assert data.estimated_population == 5000 + 500 + 100 + 10 + 200

    @pytest.mark.parametrize("raw, expected", [
        ("1200", 1200),
        ("1,200", 1200),
        ("1 200", 1200),
        ("about 300", None),
        ("", None),
        (None, None),
    ])
    def test_parse_population(self, raw, expected):
        assert osm_parser.parse_population(raw) == expected


# ============================================================
# Vegetation and Tree Estimation Tests
# ============================================================

class TestVegetation:
    """Tests for vegetation detections and tree estimators."""

    def test_weighted_detections(self, vegetation_elements):
        detections = osm_parser.parse_vegetation(vegetation_elements)

        assert detections.individual_trees == 2
        assert detections.tree_rows == 1
        assert detections.raw_features == 3
        assert detections.weighted_trees == 2 + 35

    def test_forest_polygon_weighted_by_area(self):
        ring = square_polygon(-63.18, -17.78, side_km=1.0).coordinates[0]
        forest = element(1, {"landuse": "forest"}, [(lon, lat) for lon, lat in ring])

        detections = osm_parser.parse_vegetation([forest])

        assert detections.forest_areas == 1
        assert detections.weighted_trees == pytest.approx(100 * 400, rel=0.01)

    def test_missing_geometry_uses_fallbacks(self):
        detections = osm_parser.parse_vegetation([
            element(1, {"landuse": "forest"}),
            element(2, {"landuse": "orchard"}),
        ])

        assert detections.weighted_trees == 1000 + 500

    def test_osm_estimate_range(self, vegetation_elements):
        estimate = tree_estimation.estimate_from_detections(
            osm_parser.parse_vegetation(vegetation_elements)
        )

        assert estimate.method == "osm"
        assert estimate.estimate == 37
        assert estimate.min == round(37 * 0.7)
        assert estimate.max == round(37 * 1.3)
        assert estimate.confidence == "low"

    @pytest.mark.parametrize("features, confidence", [(5, "low"), (11, "medium"), (51, "high")])
    def test_detection_confidence(self, features, confidence):
        assert tree_estimation.detection_confidence(features) == confidence

    def test_coverage_estimate(self):
        """80 % cover falls in the densest band."""
        estimate = tree_estimation.estimate_from_coverage(100.0, 80.0)

        assert estimate.method == "hybrid"
        assert estimate.min == 80 * 500
        assert estimate.max == 80 * 700
        assert estimate.details.tree_cover_density == 80.0

    def test_default_estimate(self):
        estimate = tree_estimation.default_estimate(100.0)

        assert estimate.method == "area_default"
        assert estimate.estimate == 20000
        assert estimate.min == 10000
        assert estimate.max == 30000
