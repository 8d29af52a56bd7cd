"""Exception handlers mapping failures onto the response envelope."""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tourdesk.app.errors import OverlappingRatesError, TourDeskError
from tourdesk.app.models.common import ErrorResponse
from tourdesk.app.utils.metrics import PrometheusPricingMetrics

logger = logging.getLogger(__name__)

_metrics = PrometheusPricingMetrics()


def error_response(
    status_code: int,
    error: str,
    details: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a failure envelope response; details are omitted when empty."""
    body = ErrorResponse(error=error, details=details or [])
    content = body.model_dump(mode="json", exclude={"details"} if not body.details else None)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _field_path(loc: tuple[Any, ...]) -> str:
    # Drop the "body"/"query"/"path" prefix FastAPI adds
    parts = loc[1:] if len(loc) > 1 else loc
    return ".".join(str(part) for part in parts)


def _rate_category(request: Request) -> str:
    segments = request.url.path.strip("/").split("/")
    if len(segments) > 1 and segments[0] == "rates":
        return segments[1]
    return "tour"


async def handle_domain_error(request: Request, exc: TourDeskError) -> JSONResponse:
    if isinstance(exc, OverlappingRatesError):
        _metrics.inc_rate_conflict(category=_rate_category(request), source="request")

    log = logger.warning if exc.status_code < 500 else logger.error
    log(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message, exc.details)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": _field_path(tuple(error.get("loc", ()))), "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    return error_response(400, "Validation failed", details)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope handlers on an application."""
    app.add_exception_handler(TourDeskError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
