"""
Infrastructure layer: Satellite forest-cover/biomass provider adapter.
"""
import logging
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from geocarbon.config import Settings, settings as default_settings
from geocarbon.domain.exceptions import ComputationError
from geocarbon.domain.models import ForestType, PolygonGeometry
from geocarbon.infrastructure.api_constants import ForestAPIEndpoints
from geocarbon.infrastructure.provider_client import ProviderHTTPClient

logger = logging.getLogger(__name__)


class ForestProviderResult(BaseModel):
    """Forest measurement returned by the satellite provider."""
    forest_coverage_percent: float = Field(alias="forestCoveragePercent", ge=0, le=100)
    biomass_per_hectare: Optional[float] = Field(
        default=None,
        alias="biomassPerHectare",
        ge=0,
        description="Biomass carbon density in tC/ha",
    )
    forest_type: ForestType = Field(default=ForestType.UNKNOWN, alias="forestType")
    recent_loss_detected: bool = Field(default=False, alias="recentLossDetected")
    change_percent: float = Field(default=0.0, alias="changePercent", ge=0, le=100)
    tree_cover_density: Optional[float] = Field(default=None, alias="treeCoverDensity")
    confidence: Optional[float] = Field(default=None, ge=0, le=100)
    data_source: str = Field(default="Satellite forest provider", alias="dataSource")

    class Config:
        populate_by_name = True

    @field_validator("forest_type", mode="before")
    @classmethod
    def _unknown_forest_type(cls, value: Any) -> Any:
        if isinstance(value, str) and value.upper() in ForestType.__members__:
            return value.upper()
        if isinstance(value, ForestType):
            return value
        return ForestType.UNKNOWN


class ForestDataClient(ProviderHTTPClient):
    """
    Client for the satellite forest-cover/biomass provider.

    Created once per process and injected into the analysis service.
    """

    provider_name = "forest"

    def __init__(self, config: Optional[Settings] = None):
        """Initialize the client with configuration."""
        config = config or default_settings
        headers = {}
        if config.forest_api_key:
            headers["Authorization"] = f"Bearer {config.forest_api_key}"
        super().__init__(
            base_url=config.forest_api_base_url,
            headers=headers,
            timeout=config.provider_timeout_seconds,
        )

    async def analyze_forest(self, polygon: PolygonGeometry) -> ForestProviderResult:
        """
        Measure forest cover and biomass inside a polygon.

        Args:
            polygon: Validated polygon

        Returns:
            ForestProviderResult

        Raises:
            ProviderError: If the provider is unreachable or fails
            ComputationError: If the response breaks the provider contract
        """
        data = await self._request(
            "POST",
            ForestAPIEndpoints.ANALYZE,
            json={"geometry": polygon.to_geojson()},
        )

        # Some deployments wrap the payload as {"success": ..., "data": {...}}
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]

        if not isinstance(data, dict):
            raise ComputationError("Forest provider returned a non-object payload")

        try:
            result = ForestProviderResult.model_validate(data)
        except PydanticValidationError as e:
            raise ComputationError(f"Forest provider returned malformed data: {e}") from e

        logger.debug(
            f"Forest provider: coverage={result.forest_coverage_percent:.1f}%, "
            f"type={result.forest_type.value}"
        )
        return result
