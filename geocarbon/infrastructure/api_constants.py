"""
Provider endpoint constants and query templates.

This module contains the external provider endpoint paths and the Overpass QL
templates. Centralizing these values makes it easy to swap out endpoints or
adjust tag filters.
"""
from typing import Tuple


# Satellite forest provider endpoints
class ForestAPIEndpoints:
    """Forest-cover/biomass provider endpoint paths."""

    FOREST_BASE = "/forest"
    ANALYZE = f"{FOREST_BASE}/analyze"


# Overpass QL statement bodies, evaluated inside the global bbox
class OverpassQueries:
    """Overpass QL templates for each feature family."""

    WATERWAYS = """
      way["waterway"~"^(river|stream|canal)$"];
      relation["waterway"~"^(river|stream)$"];
    """

    BUILDINGS = """
      way["building"];
      relation["building"];
    """

    SETTLEMENTS = """
      node["place"~"^(village|town|hamlet|isolated_dwelling)$"];
      way["place"~"^(village|town|hamlet)$"];
      relation["place"~"^(village|town)$"];
    """

    VEGETATION = """
      node["natural"="tree"];
      way["natural"="tree_row"];
      way["landuse"="forest"];
      way["landuse"="orchard"];
    """

    @classmethod
    def build(
        cls,
        statements: str,
        bbox: Tuple[float, float, float, float],
        timeout: int,
    ) -> str:
        """
        Wrap statements in a JSON query restricted to a bounding box.

        Args:
            statements: Union body (one of the class templates)
            bbox: (min_lon, min_lat, max_lon, max_lat)
            timeout: Server-side timeout in seconds

        Returns:
            Overpass QL query text
        """
        min_lon, min_lat, max_lon, max_lat = bbox
        # Overpass orders bbox as south,west,north,east
        return (
            f"[out:json][timeout:{timeout}]"
            f"[bbox:{min_lat},{min_lon},{max_lat},{max_lon}];\n"
            f"({statements});\n"
            f"out geom;"
        )


# API Configuration Constants
class APIConstants:
    """General provider configuration constants."""

    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"
    USER_AGENT = "geocarbon/1.0 (land carbon estimation)"

    # Timeouts (in seconds)
    DEFAULT_TIMEOUT = 30.0
    LONG_TIMEOUT = 60.0
