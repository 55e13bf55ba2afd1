"""
Domain exceptions.

Propagation policy:
- ValidationError and ComputationError always reach the caller.
- ProviderError is recovered by the area analysis orchestrator and only
  shows up as a degraded branch.
- AnalysisCancelledError marks an analysis abandoned by its caller.
"""
import asyncio
from typing import List, Optional


class GeoCarbonError(Exception):
    """Base class for service errors."""
    pass


class GeometryError(GeoCarbonError, ValueError):
    """Raised when a polygon is degenerate (e.g. non-positive area)."""
    pass


class ValidationError(GeoCarbonError, ValueError):
    """Raised when a polygon is rejected before any analysis work."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors) if errors else [message]


class ProviderError(GeoCarbonError):
    """A single upstream data source is unreachable, failing or timed out."""

    def __init__(self, message: str, provider: str = "unknown", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code


class ComputationError(GeoCarbonError):
    """An internal invariant was violated, e.g. a provider broke its contract."""
    pass


class AnalysisCancelledError(asyncio.CancelledError):
    """The caller abandoned an in-flight area analysis."""
    pass
