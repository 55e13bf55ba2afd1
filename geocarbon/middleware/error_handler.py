"""
Global error handling middleware.
"""
import logging
from typing import Callable

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from geocarbon.domain.exceptions import (
    AnalysisCancelledError,
    ComputationError,
    ProviderError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Non-standard "client closed request" status
HTTP_499_CLIENT_CLOSED_REQUEST = 499


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Catches unhandled exceptions and returns consistent error responses.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        """
        Process the request and handle any exceptions.

        Args:
            request: The incoming request
            call_next: The next middleware or route handler

        Returns:
            Response object
        """
        extra = {"path": request.url.path, "method": request.method}

        try:
            response = await call_next(request)
            return response

        except ValidationError as e:
            logger.warning(f"Polygon rejected: {e.errors}", extra=extra)
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={
                    "error": "Invalid polygon",
                    "detail": e.message,
                    "errors": e.errors,
                }
            )

        except ProviderError as e:
            logger.error(
                f"Provider error: {e.message}",
                extra={**extra, "provider": e.provider, "status_code": e.status_code},
            )
            return JSONResponse(
                status_code=status.HTTP_502_BAD_GATEWAY,
                content={
                    "error": "External provider error",
                    "detail": e.message,
                }
            )

        except ComputationError as e:
            logger.error(f"Computation error: {str(e)}", extra=extra)
            return JSONResponse(
                status_code=status.HTTP_502_BAD_GATEWAY,
                content={
                    "error": "Provider contract violation",
                    "detail": str(e),
                }
            )

        except ValueError as e:
            logger.warning(f"Validation error: {str(e)}", extra=extra)
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={
                    "error": "Invalid request",
                    "detail": str(e),
                }
            )

        except AnalysisCancelledError:
            logger.info("Request cancelled by client", extra=extra)
            return JSONResponse(
                status_code=HTTP_499_CLIENT_CLOSED_REQUEST,
                content={
                    "error": "Request cancelled",
                    "detail": "The analysis was cancelled before it completed",
                }
            )

        except Exception as e:
            logger.exception(f"Unhandled exception: {str(e)}", extra=extra)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal server error",
                    "detail": "An unexpected error occurred",
                }
            )
