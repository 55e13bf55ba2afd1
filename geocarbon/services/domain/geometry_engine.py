"""
Domain service: Geometry engine for project polygons.

Provides:
- Geodesic area (hectares) and perimeter (km)
- Approximate centroid and bounding box
- National containment checks against a rectangular box
- Validation reporting every violation at once
- Vertex-count simplification
"""
import logging
import math
from typing import List, Optional

import numpy as np
from shapely.geometry import mapping, shape

from geocarbon.config import settings
from geocarbon.domain.exceptions import GeometryError
from geocarbon.domain.models import (
    AreaMetrics,
    BoundingBox,
    Coordinate,
    PolygonGeometry,
    ValidationResult,
)
from geocarbon.domain.national_boundaries import NationalBounds, get_national_bounds
from geocarbon.utils.geodesy import (
    SQUARE_METERS_PER_HECTARE,
    path_length_km,
    ring_area_m2,
)

logger = logging.getLogger(__name__)

MIN_RING_POSITIONS = 4


def compute_area(polygon: PolygonGeometry) -> float:
    """
    Calculate the geodesic area of a polygon in hectares.

    Holes are subtracted from their exterior ring and multipolygon parts
    are summed.

    Args:
        polygon: Polygon or MultiPolygon geometry

    Returns:
        Area in hectares rounded to 2 decimals

    Raises:
        GeometryError: If the polygon encloses no positive, finite area
    """
    total_m2 = 0.0
    for part in polygon.parts:
        if not part:
            continue
        exterior_m2 = ring_area_m2(part[0])
        holes_m2 = sum(ring_area_m2(hole) for hole in part[1:])
        total_m2 += exterior_m2 - holes_m2

    if not math.isfinite(total_m2):
        raise GeometryError("Polygon area could not be computed from its coordinates")
    area_ha = round(total_m2 / SQUARE_METERS_PER_HECTARE, 2)
    if area_ha <= 0:
        raise GeometryError("Polygon is degenerate: area must be greater than 0")
    return area_ha


def compute_perimeter(polygon: PolygonGeometry) -> float:
    """
    Calculate the perimeter of every exterior ring in kilometers.

    Args:
        polygon: Polygon or MultiPolygon geometry

    Returns:
        Sum of geodesic edge lengths, rounded to 2 decimals
    """
    return round(sum(path_length_km(ring) for ring in polygon.exterior_rings), 2)


def compute_centroid(polygon: PolygonGeometry) -> Coordinate:
    """
    Approximate the centroid of a polygon.

    This is the unweighted mean of the first exterior ring's vertices
    (closing duplicate excluded), not the area-weighted centroid. It drifts
    toward densely digitised edges on irregular shapes and is only meant for
    display and nearest-region lookups.

    Raises:
        GeometryError: If the polygon has no vertices
    """
    rings = polygon.exterior_rings
    if not rings or not rings[0]:
        raise GeometryError("Cannot compute centroid of an empty polygon")

    ring = rings[0]
    if len(ring) > 1 and _is_closed(ring):
        ring = ring[:-1]

    vertices = np.array([point[:2] for point in ring], dtype=float)
    lon, lat = vertices.mean(axis=0)
    return Coordinate(lon=round(float(lon), 6), lat=round(float(lat), 6))


def compute_bounding_box(polygon: PolygonGeometry) -> BoundingBox:
    """
    Bounding box of all exterior ring vertices.

    Raises:
        GeometryError: If the polygon has no vertices
    """
    points = [point[:2] for ring in polygon.exterior_rings for point in ring]
    if not points:
        raise GeometryError("Cannot compute bounding box of an empty polygon")

    vertices = np.array(points, dtype=float)
    min_lon, min_lat = vertices.min(axis=0)
    max_lon, max_lat = vertices.max(axis=0)
    return BoundingBox(
        min_lon=float(min_lon),
        min_lat=float(min_lat),
        max_lon=float(max_lon),
        max_lat=float(max_lat),
    )


def is_within_country(
    polygon: PolygonGeometry,
    bounds: Optional[NationalBounds] = None,
) -> bool:
    """
    Check that the polygon's bounding box lies inside the national bounds.

    The national extent is a rectangle, not the real border.
    """
    bounds = bounds or get_national_bounds()
    try:
        bbox = compute_bounding_box(polygon)
    except GeometryError:
        return False
    return bounds.contains_box(*bbox.as_tuple())


def has_vertex_in_country(
    polygon: PolygonGeometry,
    bounds: Optional[NationalBounds] = None,
) -> bool:
    """True if at least one vertex falls inside the national bounds."""
    bounds = bounds or get_national_bounds()
    return any(
        bounds.contains_point(point[0], point[1])
        for ring in polygon.rings
        for point in ring
    )


def validate(
    polygon: PolygonGeometry,
    min_area_ha: Optional[float] = None,
    max_area_ha: Optional[float] = None,
    bounds: Optional[NationalBounds] = None,
) -> ValidationResult:
    """
    Validate a polygon and collect every violation.

    Checks:
    - every ring has at least 4 positions (3 vertices + closing point)
    - every ring is closed
    - at least one vertex is inside the national bounds
    - area is positive, not below min_area_ha and not above max_area_ha

    The area checks only run when the rings are well formed.

    Args:
        polygon: Polygon or MultiPolygon geometry
        min_area_ha: Smallest accepted area (defaults to settings)
        max_area_ha: Largest accepted area (defaults to the sanity ceiling)
        bounds: National bounds (defaults to settings)

    Returns:
        ValidationResult with all errors found
    """
    min_area_ha = settings.min_analysis_area_ha if min_area_ha is None else min_area_ha
    max_area_ha = settings.max_polygon_area_ha if max_area_ha is None else max_area_ha
    errors: List[str] = []

    if not polygon.rings:
        errors.append(f"{polygon.type} coordinates are empty")
        return ValidationResult(valid=False, errors=errors)

    errors.extend(_ring_errors(polygon))
    structurally_valid = not errors

    if not has_vertex_in_country(polygon, bounds):
        errors.append("Polygon must be located within the national boundary")

    if structurally_valid:
        try:
            area_ha = compute_area(polygon)
        except GeometryError as e:
            errors.append(f"Invalid area: {e}")
        else:
            if area_ha < min_area_ha:
                errors.append(
                    f"Area too small: {area_ha} ha is below the minimum of {min_area_ha:g} ha"
                )
            if area_ha > max_area_ha:
                errors.append(
                    f"Area too large: {area_ha} ha exceeds the maximum of {max_area_ha:g} ha"
                )

    if errors:
        logger.debug(f"Polygon failed validation: {errors}")
    return ValidationResult(valid=not errors, errors=errors)


def simplify_polygon(polygon: PolygonGeometry, tolerance: float = 0.001) -> PolygonGeometry:
    """
    Reduce the vertex count of a polygon.

    Uses topology-preserving Douglas-Peucker simplification. The input is
    returned unchanged when simplification would collapse or invalidate it.

    Args:
        polygon: Polygon or MultiPolygon geometry
        tolerance: Simplification tolerance in degrees

    Returns:
        Simplified geometry
    """
    geom = shape(polygon.to_geojson())
    simplified = geom.simplify(tolerance, preserve_topology=True)

    if simplified.is_empty or not simplified.is_valid:
        logger.warning("Simplification collapsed the polygon, keeping the original")
        return polygon

    geojson = mapping(simplified)
    if geojson["type"] not in ("Polygon", "MultiPolygon"):
        return polygon

    return PolygonGeometry(
        type=geojson["type"],
        coordinates=_to_lists(geojson["coordinates"]),
    )


def compute_area_metrics(polygon: PolygonGeometry) -> AreaMetrics:
    """Area, perimeter, centroid, bounding box and containment in one pass."""
    return AreaMetrics(
        area_hectares=compute_area(polygon),
        perimeter_km=compute_perimeter(polygon),
        centroid=compute_centroid(polygon),
        bounding_box=compute_bounding_box(polygon),
        within_country=is_within_country(polygon),
    )


def _is_closed(ring: List[List[float]]) -> bool:
    first, last = ring[0], ring[-1]
    return first[0] == last[0] and first[1] == last[1]


def _ring_errors(polygon: PolygonGeometry) -> List[str]:
    errors = []
    multi = len(polygon.parts) > 1 or polygon.type == "MultiPolygon"

    for part_index, part in enumerate(polygon.parts):
        if not part:
            errors.append(f"Polygon {part_index} has no rings")
            continue
        for ring_index, ring in enumerate(part):
            label = "Outer ring" if ring_index == 0 else f"Hole {ring_index}"
            if multi:
                label = f"Polygon {part_index} {label.lower()}"

            if len(ring) < MIN_RING_POSITIONS:
                errors.append(
                    f"{label} must have at least 4 coordinates (3 vertices + closing point)"
                )
            if ring and not _is_closed(ring):
                errors.append(
                    f"{label} is not closed (first and last coordinates must be the same)"
                )
    return errors


def _to_lists(value):
    if isinstance(value, (list, tuple)):
        return [_to_lists(item) for item in value]
    return value
