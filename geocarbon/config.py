"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Satellite forest/biomass provider
    forest_api_base_url: str = Field(
        default="https://forest-api.example.com",
        description="Base URL for the satellite forest-cover/biomass provider"
    )
    forest_api_key: str = Field(
        default="",
        description="API key for the forest provider"
    )

    # Crowd-sourced geodata provider (OpenStreetMap Overpass)
    overpass_api_url: str = Field(
        default="https://overpass-api.de/api/interpreter",
        description="Overpass API interpreter endpoint"
    )
    overpass_query_timeout: int = Field(
        default=60,
        description="Server-side timeout embedded in Overpass QL queries (seconds)"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for provider calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=2,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Fan-out
    provider_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout applied to each provider branch of an area analysis"
    )

    # National bounding box (Bolivia)
    national_min_lon: float = Field(default=-69.6, description="Western national bound")
    national_min_lat: float = Field(default=-23.0, description="Southern national bound")
    national_max_lon: float = Field(default=-57.5, description="Eastern national bound")
    national_max_lat: float = Field(default=-10.0, description="Northern national bound")

    # Area limits (hectares)
    min_analysis_area_ha: float = Field(
        default=1.0,
        description="Smallest polygon accepted for validation and analysis"
    )
    max_analysis_area_ha: float = Field(
        default=100_000.0,
        description="Largest polygon accepted for environmental analysis"
    )
    max_polygon_area_ha: float = Field(
        default=10_000_000.0,
        description="Sanity ceiling for any polygon (larger than the country)"
    )

    # Carbon projections
    default_project_duration_years: int = Field(
        default=30,
        description="Project duration used when none is supplied"
    )

    # Analysis cache
    analysis_cache_ttl_seconds: int = Field(
        default=0,
        description="TTL for cached area analyses (0 disables caching)"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=30,
        description="Maximum area analyses per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="GeoCarbon Area Estimation API",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
