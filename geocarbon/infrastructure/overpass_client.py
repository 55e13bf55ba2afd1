"""
Infrastructure layer: OpenStreetMap Overpass API adapter.

API documentation: https://wiki.openstreetmap.org/wiki/Overpass_API
"""
import logging
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from geocarbon.config import Settings, settings as default_settings
from geocarbon.domain.exceptions import ComputationError
from geocarbon.infrastructure.api_constants import APIConstants, OverpassQueries
from geocarbon.infrastructure.provider_client import ProviderHTTPClient

logger = logging.getLogger(__name__)

BBox = Tuple[float, float, float, float]


class OverpassPoint(BaseModel):
    lat: float
    lon: float


class OverpassElement(BaseModel):
    """A tagged OSM element as returned with `out geom`."""
    type: Literal["node", "way", "relation", "area"]
    id: int
    lat: Optional[float] = None
    lon: Optional[float] = None
    tags: Dict[str, str] = Field(default_factory=dict)
    geometry: Optional[List[Optional[OverpassPoint]]] = None

    @property
    def points(self) -> List[Tuple[float, float]]:
        """Geometry as (lon, lat) tuples, skipping unresolved vertices."""
        return [(p.lon, p.lat) for p in (self.geometry or []) if p is not None]


class OverpassResponse(BaseModel):
    """Response body from the Overpass interpreter."""
    version: Optional[float] = None
    generator: Optional[str] = None
    elements: List[OverpassElement]


class OverpassClient(ProviderHTTPClient):
    """
    Client for the Overpass API.

    Every query is restricted to the bounding box of the analysed polygon.
    """

    provider_name = "overpass"

    def __init__(self, config: Optional[Settings] = None):
        """Initialize the client with configuration."""
        config = config or default_settings
        super().__init__(timeout=APIConstants.LONG_TIMEOUT)
        self.api_url = config.overpass_api_url
        self.query_timeout = config.overpass_query_timeout

    async def execute_query(self, query: str) -> List[OverpassElement]:
        """
        Execute an Overpass QL query.

        Args:
            query: Overpass QL text

        Returns:
            List of OverpassElement

        Raises:
            ProviderError: If the interpreter is unreachable or fails
            ComputationError: If the body does not match the element contract
        """
        data = await self._request("POST", self.api_url, data={"data": query})
        try:
            response = OverpassResponse.model_validate(data)
        except PydanticValidationError as e:
            raise ComputationError(f"Overpass returned malformed elements: {e}") from e
        return response.elements

    async def _fetch(self, statements: str, bbox: BBox, family: str) -> List[OverpassElement]:
        query = OverpassQueries.build(statements, bbox, self.query_timeout)
        elements = await self.execute_query(query)
        logger.debug(f"Overpass {family}: {len(elements)} elements")
        return elements

    async def fetch_waterways(self, bbox: BBox) -> List[OverpassElement]:
        """Rivers, streams and canals inside a bounding box."""
        return await self._fetch(OverpassQueries.WATERWAYS, bbox, "waterways")

    async def fetch_buildings(self, bbox: BBox) -> List[OverpassElement]:
        """Buildings inside a bounding box."""
        return await self._fetch(OverpassQueries.BUILDINGS, bbox, "buildings")

    async def fetch_communities(self, bbox: BBox) -> List[OverpassElement]:
        """Villages, towns, hamlets and isolated dwellings inside a bounding box."""
        return await self._fetch(OverpassQueries.SETTLEMENTS, bbox, "settlements")

    async def fetch_vegetation(self, bbox: BBox) -> List[OverpassElement]:
        """Tagged trees, tree rows, forests and orchards inside a bounding box."""
        return await self._fetch(OverpassQueries.VEGETATION, bbox, "vegetation")
