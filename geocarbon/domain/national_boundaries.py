"""
National boundary reference data.

The national extent is a rectangular bounding box read from settings; it is
not a precise border. Department capitals back a nearest-capital lookup that
stands in for proper administrative polygons.
"""
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from geocarbon.config import settings


@dataclass(frozen=True)
class NationalBounds:
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def contains_point(self, lon: float, lat: float) -> bool:
        return (
            self.min_lat <= lat <= self.max_lat
            and self.min_lon <= lon <= self.max_lon
        )

    def contains_box(self, min_lon: float, min_lat: float, max_lon: float, max_lat: float) -> bool:
        return (
            min_lon >= self.min_lon
            and min_lat >= self.min_lat
            and max_lon <= self.max_lon
            and max_lat <= self.max_lat
        )


def get_national_bounds() -> NationalBounds:
    """National bounding box from configuration."""
    return NationalBounds(
        min_lon=settings.national_min_lon,
        min_lat=settings.national_min_lat,
        max_lon=settings.national_max_lon,
        max_lat=settings.national_max_lat,
    )


@dataclass(frozen=True)
class DepartmentCapital:
    name: str
    capital: str
    latitude: float
    longitude: float


DEPARTMENT_CAPITALS: Mapping[str, DepartmentCapital] = MappingProxyType({
    "La Paz": DepartmentCapital("La Paz", "La Paz", -16.5, -68.15),
    "Santa Cruz": DepartmentCapital("Santa Cruz", "Santa Cruz de la Sierra", -17.78, -63.18),
    "Cochabamba": DepartmentCapital("Cochabamba", "Cochabamba", -17.39, -66.16),
    "Potosí": DepartmentCapital("Potosí", "Potosí", -19.58, -65.75),
    "Oruro": DepartmentCapital("Oruro", "Oruro", -17.98, -67.13),
    "Chuquisaca": DepartmentCapital("Chuquisaca", "Sucre", -19.03, -65.26),
    "Tarija": DepartmentCapital("Tarija", "Tarija", -21.53, -64.73),
    "Beni": DepartmentCapital("Beni", "Trinidad", -14.83, -64.90),
    "Pando": DepartmentCapital("Pando", "Cobija", -11.03, -68.76),
})


def get_department_from_coordinates(lon: float, lat: float) -> Optional[str]:
    """
    Approximate the department containing a point.

    Uses the nearest department capital in plain degree space, so results
    near departmental borders are unreliable.

    Args:
        lon: Longitude in degrees
        lat: Latitude in degrees

    Returns:
        Department name, or None if the point is outside the national bounds
    """
    if not get_national_bounds().contains_point(lon, lat):
        return None

    return min(
        DEPARTMENT_CAPITALS.values(),
        key=lambda d: math.hypot(d.latitude - lat, d.longitude - lon),
    ).name
