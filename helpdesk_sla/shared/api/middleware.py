"""
Shared API Middleware
======================

Request tracing, access logging and the JSON error contract of the API.

Error bodies always carry ``detail`` and ``correlation_id`` so a caller can
quote the id when reporting a problem.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from helpdesk_sla.core import ApplicationException, ValidationException
from helpdesk_sla.shared.infrastructure.logging import correlation_id_var, get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or "unknown"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with a correlation id.

    The caller's ``X-Correlation-ID`` is reused when sent, otherwise a UUID4
    is generated. The id is echoed back on the response and exposed to log
    records for the duration of the request.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        token = correlation_id_var.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """One access log line per request, with its latency."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        context = {
            "correlation_id": _correlation_id(request),
            "method": request.method,
            "path": request.url.path,
        }

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={**context, "error": str(e), "response_time_ms": _elapsed_ms(started)}
            )
            raise

        logger.info(
            "Request completed",
            extra={
                **context,
                "status_code": response.status_code,
                "response_time_ms": _elapsed_ms(started),
            }
        )
        return response


async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """
    Turn a domain error into a JSON response.

    ValidationException (bad timestamps, unknown statuses) maps to 422;
    every other ApplicationException maps to 400.
    """
    correlation_id = _correlation_id(request)
    error_type = type(exc).__name__

    logger.warning(
        "Request rejected",
        extra={
            "correlation_id": correlation_id,
            "path": request.url.path,
            "error_type": error_type,
            "error_message": exc.message,
        }
    )

    return JSONResponse(
        status_code=422 if isinstance(exc, ValidationException) else 400,
        content={
            "detail": exc.message,
            "error_type": error_type,
            "details": exc.details,
            "correlation_id": correlation_id,
        }
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort 500 handler; the exception text is only shown in development."""
    correlation_id = _correlation_id(request)

    logger.exception(
        "Unhandled exception",
        extra={
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "error_type": type(exc).__name__,
        }
    )

    settings = getattr(request.app.state, "settings", None)
    show_error = getattr(settings, "environment", None) == "development"

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "correlation_id": correlation_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "debug_info": str(exc) if show_error else None,
        }
    )
