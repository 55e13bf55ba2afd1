"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from geocarbon.api.rate_limit import limiter
from geocarbon.api.v1.routers import analysis, carbon, geometry, projects
from geocarbon.config import settings
from geocarbon.infrastructure.analysis_cache import AnalysisCache
from geocarbon.infrastructure.forest_data_client import ForestDataClient
from geocarbon.infrastructure.overpass_client import OverpassClient
from geocarbon.middleware.error_handler import ErrorHandlerMiddleware

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Creates the provider clients once per process and closes them on shutdown.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Forest provider: {settings.forest_api_base_url}")
    logger.info(f"Overpass endpoint: {settings.overpass_api_url}")
    logger.info(f"Branch timeout: {settings.provider_timeout_seconds}s, "
                f"analysis cache TTL: {settings.analysis_cache_ttl_seconds}s")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    app.state.forest_client = ForestDataClient(settings)
    app.state.overpass_client = OverpassClient(settings)
    app.state.analysis_cache = AnalysisCache(settings.analysis_cache_ttl_seconds)

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await app.state.forest_client.close()
    await app.state.overpass_client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    description="""
    Land Carbon Estimation API

    This API turns a land polygon into an environmental profile and carbon
    credit figures.

    ## Features

    - **Geometry**: Geodesic area, perimeter, centroid and validation against
      the national boundary
    - **Area Analysis**: Satellite forest cover fused with OpenStreetMap
      waterways, buildings, settlements and vegetation, queried concurrently
    - **Graceful Degradation**: A failing or slow provider only degrades its own
      section of the result
    - **Carbon Accounting**: Tiered biomass resolution (measured, forest type,
      department, default) and project-type factors
    - **Revenue**: Conservative, realistic and optimistic market scenarios
    - **Rate Limiting**: Protects the external providers from abuse
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(geometry.router, prefix="/api/v1")
app.include_router(analysis.router, prefix="/api/v1")
app.include_router(carbon.router, prefix="/api/v1")
app.include_router(projects.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
