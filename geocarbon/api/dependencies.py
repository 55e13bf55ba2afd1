"""
Dependency injection for FastAPI.
"""
from typing import Annotated, Optional

from fastapi import Depends, Request

from geocarbon.config import settings
from geocarbon.infrastructure.analysis_cache import AnalysisCache
from geocarbon.infrastructure.forest_data_client import ForestDataClient
from geocarbon.infrastructure.overpass_client import OverpassClient
from geocarbon.services.application.area_analysis_service import AreaAnalysisService


def get_forest_client(request: Request) -> ForestDataClient:
    """
    Forest provider client created in the application lifespan.

    Returns:
        ForestDataClient instance
    """
    return request.app.state.forest_client


def get_overpass_client(request: Request) -> OverpassClient:
    """
    Overpass client created in the application lifespan.

    Returns:
        OverpassClient instance
    """
    return request.app.state.overpass_client


def get_analysis_cache(request: Request) -> Optional[AnalysisCache]:
    return getattr(request.app.state, "analysis_cache", None)


def get_area_analysis_service(
    forest_client: Annotated[ForestDataClient, Depends(get_forest_client)],
    overpass_client: Annotated[OverpassClient, Depends(get_overpass_client)],
    cache: Annotated[Optional[AnalysisCache], Depends(get_analysis_cache)],
) -> AreaAnalysisService:
    """
    Dependency factory for AreaAnalysisService.

    Args:
        forest_client: Forest provider client (injected)
        overpass_client: Overpass client (injected)
        cache: Result cache (injected)

    Returns:
        AreaAnalysisService instance
    """
    return AreaAnalysisService(
        forest_client=forest_client,
        overpass_client=overpass_client,
        branch_timeout=settings.provider_timeout_seconds,
        cache=cache,
    )


# Type aliases for cleaner route signatures
AreaAnalysisServiceDep = Annotated[AreaAnalysisService, Depends(get_area_analysis_service)]
