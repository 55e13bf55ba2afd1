"""
Parsers turning raw Overpass elements into domain summaries.

Tags are free-form in OSM: unknown or missing values are counted as
"other" rather than rejected.
"""
import re
from typing import List, Optional

from geocarbon.domain.models import (
    BuildingData,
    CommunityData,
    CommunityInfo,
    WaterwayData,
    WaterwayInfo,
)
from geocarbon.infrastructure.overpass_client import OverpassElement
from geocarbon.services.domain.tree_estimation import (
    FOREST_TREES_PER_HECTARE,
    FOREST_TREES_WITHOUT_GEOMETRY,
    ORCHARD_TREES_PER_HECTARE,
    ORCHARD_TREES_WITHOUT_GEOMETRY,
    TREES_PER_TREE_ROW,
    VegetationDetections,
)
from geocarbon.utils.geodesy import path_length_km, ring_area_hectares

WATERWAY_TYPES = ("river", "stream", "canal")

RESIDENTIAL_BUILDINGS = {"house", "residential", "apartments", "dwelling", "detached", "hut"}
COMMERCIAL_BUILDINGS = {"commercial", "retail", "shop", "office", "industrial"}
PUBLIC_BUILDINGS = {"school", "hospital", "public", "government", "church", "civic"}

# Average population used when a settlement has no population tag
DEFAULT_POPULATION = {
    "town": 5000,
    "village": 500,
    "hamlet": 100,
    "isolated_dwelling": 10,
}
DEFAULT_OTHER_POPULATION = 200

_POPULATION_RE = re.compile(r"\d[\d.,\s]*")


def parse_population(value: Optional[str]) -> Optional[int]:
    """
    Parse an OSM population tag.

    Accepts thousands separators ("1,200", "1 200", "1.200"). Returns None
    for anything that does not start with a number.
    """
    if not value:
        return None
    match = _POPULATION_RE.match(value.strip())
    if not match:
        return None
    digits = re.sub(r"[^\d]", "", match.group())
    return int(digits) if digits else None


def parse_waterways(elements: List[OverpassElement]) -> WaterwayData:
    """
    Summarise waterway elements.

    Args:
        elements: Overpass elements tagged with `waterway`

    Returns:
        WaterwayData with per-type counts and total length
    """
    data = WaterwayData()
    total_length = 0.0

    for element in elements:
        tag = element.tags.get("waterway")
        waterway_type = tag if tag in WATERWAY_TYPES else "other"

        length_km = None
        points = element.points
        if len(points) > 1:
            length_km = round(path_length_km(points), 2)
            total_length += length_km

        info = WaterwayInfo(
            id=element.id,
            name=element.tags.get("name"),
            type=waterway_type,
            length_km=length_km,
        )
        data.items.append(info)
        if info.name:
            data.major_waterways.append(info)

        if waterway_type == "river":
            data.rivers += 1
        elif waterway_type == "stream":
            data.streams += 1
        elif waterway_type == "canal":
            data.canals += 1
        else:
            data.other += 1

    data.total = len(elements)
    data.total_length_km = round(total_length, 1)
    return data


def parse_buildings(elements: List[OverpassElement], area_hectares: float) -> BuildingData:
    """
    Summarise building elements.

    Args:
        elements: Overpass elements tagged with `building`
        area_hectares: Analysed area, used for the density figure

    Returns:
        BuildingData
    """
    data = BuildingData(total=len(elements))

    for element in elements:
        building_type = element.tags.get("building:type") or element.tags.get("building")
        if building_type in RESIDENTIAL_BUILDINGS:
            data.residential += 1
        elif building_type in COMMERCIAL_BUILDINGS:
            data.commercial += 1
        elif building_type in PUBLIC_BUILDINGS:
            data.public += 1
        else:
            data.other += 1

    if area_hectares > 0:
        data.density_per_hectare = round(data.total / area_hectares, 4)
    return data


def parse_communities(elements: List[OverpassElement]) -> CommunityData:
    """
    Summarise settlement elements with a population estimate.

    Declared populations are used as-is; settlements without one get the
    average for their place type.
    """
    data = CommunityData(total=len(elements))

    for element in elements:
        place = element.tags.get("place")
        population = parse_population(element.tags.get("population"))
        estimated = (
            population
            if population is not None
            else DEFAULT_POPULATION.get(place, DEFAULT_OTHER_POPULATION)
        )

        if place == "village":
            data.villages += 1
        elif place == "town":
            data.towns += 1
        elif place == "hamlet":
            data.hamlets += 1
        else:
            data.other += 1

        data.items.append(
            CommunityInfo(
                id=element.id,
                name=element.tags.get("name"),
                type=place if place in ("village", "town", "hamlet") else "other",
                population=population,
                estimated_population=estimated,
            )
        )
        if population is not None:
            data.declared_population += population
        data.estimated_population += estimated

    return data


def _area_weighted_trees(element: OverpassElement, per_hectare: int, fallback: int) -> int:
    points = element.points
    if len(points) > 2:
        return round(ring_area_hectares(points) * per_hectare)
    return fallback


def parse_vegetation(elements: List[OverpassElement]) -> VegetationDetections:
    """
    Count tagged vegetation and weight it into a tree total.

    Weights: 1 per tree node, 35 per tree row, 400/ha of forest and
    150/ha of orchard (fixed fallbacks when a polygon has no geometry).
    """
    detections = VegetationDetections()

    for element in elements:
        natural = element.tags.get("natural")
        landuse = element.tags.get("landuse")

        if natural == "tree":
            detections.individual_trees += 1
            detections.weighted_trees += 1
        elif natural == "tree_row":
            detections.tree_rows += 1
            detections.weighted_trees += TREES_PER_TREE_ROW
        elif landuse == "forest":
            detections.forest_areas += 1
            detections.weighted_trees += _area_weighted_trees(
                element, FOREST_TREES_PER_HECTARE, FOREST_TREES_WITHOUT_GEOMETRY
            )
        elif landuse == "orchard":
            detections.orchards += 1
            detections.weighted_trees += _area_weighted_trees(
                element, ORCHARD_TREES_PER_HECTARE, ORCHARD_TREES_WITHOUT_GEOMETRY
            )

    return detections
