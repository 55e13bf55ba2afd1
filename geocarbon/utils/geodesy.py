"""
Geodesic measurement utilities.

Areas and lengths are both computed on the WGS84 ellipsoid.
"""
from typing import Sequence

from pyproj import Geod

# WGS84 ellipsoid - standard for GPS and GeoJSON
WGS84 = Geod(ellps="WGS84")

SQUARE_METERS_PER_HECTARE = 10_000
METERS_PER_KILOMETER = 1_000


def path_length_km(points: Sequence[Sequence[float]]) -> float:
    """
    Geodesic length of the path through consecutive (lon, lat) points.

    Args:
        points: Path vertices in GeoJSON order

    Returns:
        Length in kilometers (0 for fewer than two points)
    """
    if len(points) < 2:
        return 0.0
    lons = [point[0] for point in points]
    lats = [point[1] for point in points]
    return WGS84.line_length(lons, lats) / METERS_PER_KILOMETER


def ring_area_m2(ring: Sequence[Sequence[float]]) -> float:
    """
    Unsigned geodesic area enclosed by a ring of (lon, lat) points.

    Winding direction and a repeated closing vertex do not change the result.
    """
    if len(ring) < 3:
        return 0.0
    lons = [point[0] for point in ring]
    lats = [point[1] for point in ring]
    area, _ = WGS84.polygon_area_perimeter(lons, lats)
    return abs(area)


def ring_area_hectares(ring: Sequence[Sequence[float]]) -> float:
    return ring_area_m2(ring) / SQUARE_METERS_PER_HECTARE
