"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Square polygons of known size inside and outside the country
- Sample Overpass elements
- Mock provider clients
- FastAPI test client
"""
import math

import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from tenacity import wait_none

from geocarbon.main import app
from geocarbon.api.rate_limit import limiter
from geocarbon.domain.models import ForestType, PolygonGeometry
from geocarbon.infrastructure.forest_data_client import (
    ForestDataClient,
    ForestProviderResult,
)
from geocarbon.infrastructure.overpass_client import OverpassClient, OverpassElement
from geocarbon.infrastructure.provider_client import ProviderHTTPClient

# Santa Cruz de la Sierra, lowland forest
SANTA_CRUZ = (-63.18, -17.78)

KM_PER_DEGREE_LAT = 110.574
KM_PER_DEGREE_LON_EQUATOR = 111.320


def square_polygon(center_lon: float, center_lat: float, side_km: float) -> PolygonGeometry:
    """Closed, counter-clockwise square of roughly side_km x side_km."""
    half_lat = side_km / KM_PER_DEGREE_LAT / 2
    half_lon = side_km / (KM_PER_DEGREE_LON_EQUATOR * math.cos(math.radians(center_lat))) / 2
    ring = [
        [center_lon - half_lon, center_lat - half_lat],
        [center_lon + half_lon, center_lat - half_lat],
        [center_lon + half_lon, center_lat + half_lat],
        [center_lon - half_lon, center_lat + half_lat],
        [center_lon - half_lon, center_lat - half_lat],
    ]
    return PolygonGeometry(type="Polygon", coordinates=[ring])


def element(element_id: int, tags: dict, geometry=None, element_type: str = "way") -> OverpassElement:
    return OverpassElement(
        type=element_type,
        id=element_id,
        tags=tags,
        geometry=[{"lon": lon, "lat": lat} for lon, lat in geometry] if geometry else None,
    )


# ============================================================
# Retry Configuration
# ============================================================

@pytest.fixture(autouse=True)
def no_retry_backoff(monkeypatch):
    """Keep the retry count but skip the exponential waits."""
    monkeypatch.setattr(ProviderHTTPClient._make_request.retry, "wait", wait_none())


# ============================================================
# Sample Geometry Fixtures
# ============================================================

@pytest.fixture
def project_polygon() -> PolygonGeometry:
    """About 100 ha near Santa Cruz."""
    return square_polygon(*SANTA_CRUZ, side_km=1.0)


@pytest.fixture
def tiny_polygon() -> PolygonGeometry:
    """About 0.25 ha, below the analysis minimum."""
    return square_polygon(*SANTA_CRUZ, side_km=0.05)


@pytest.fixture
def huge_polygon() -> PolygonGeometry:
    """About 160,000 ha, above the analysis maximum."""
    return square_polygon(*SANTA_CRUZ, side_km=40.0)


@pytest.fixture
def foreign_polygon() -> PolygonGeometry:
    """About 100 ha well outside the national boundary."""
    return square_polygon(2.35, 48.85, side_km=1.0)


# ============================================================
# Sample Provider Data Fixtures
# ============================================================

@pytest.fixture
def forest_result() -> ForestProviderResult:
    return ForestProviderResult(
        forest_coverage_percent=80.0,
        biomass_per_hectare=120.0,
        forest_type=ForestType.AMAZONIA,
        recent_loss_detected=False,
        change_percent=1.5,
        data_source="Hansen Global Forest Change",
    )


@pytest.fixture
def waterway_elements() -> list[OverpassElement]:
    return [
        element(1, {"waterway": "river", "name": "Río Piraí"}, [(-63.185, -17.785), (-63.175, -17.775)]),
        element(2, {"waterway": "stream"}, [(-63.18, -17.78), (-63.179, -17.779)]),
    ]


@pytest.fixture
def building_elements() -> list[OverpassElement]:
    return [
        element(10, {"building": "house"}),
        element(11, {"building": "school"}),
        element(12, {"building": "yes"}),
    ]


@pytest.fixture
def settlement_elements() -> list[OverpassElement]:
    return [
        element(20, {"place": "village", "name": "San Miguel", "population": "350"}, element_type="node"),
    ]


@pytest.fixture
def vegetation_elements() -> list[OverpassElement]:
    return [
        element(30, {"natural": "tree"}, element_type="node"),
        element(31, {"natural": "tree"}, element_type="node"),
        element(32, {"natural": "tree_row"}),
    ]


# ============================================================
# Mock Provider Client Fixtures
# ============================================================

@pytest.fixture
def mock_forest_client(forest_result):
    """Create a mock forest provider client."""
    mock_client = AsyncMock(spec=ForestDataClient)
    mock_client.analyze_forest.return_value = forest_result
    return mock_client


@pytest.fixture
def mock_overpass_client(
    waterway_elements,
    building_elements,
    settlement_elements,
    vegetation_elements,
):
    """Create a mock Overpass client."""
    mock_client = AsyncMock(spec=OverpassClient)
    mock_client.fetch_waterways.return_value = waterway_elements
    mock_client.fetch_buildings.return_value = building_elements
    mock_client.fetch_communities.return_value = settlement_elements
    mock_client.fetch_vegetation.return_value = vegetation_elements
    return mock_client


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    limiter.reset()
    return TestClient(app)
