from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ipgeo.logger import logger

INVALID_IP_MESSAGE = "The supplied IP address is not a valid IPv4 or IPv6 address."


def _error_response(status_code: int, code: str, message: str, request: Request) -> JSONResponse:
    # Same body shape as the provider errors raised from /info.
    detail: dict[str, Any] = {
        "code": code,
        "message": message,
        "provider": request.query_params.get("provider"),
    }
    return JSONResponse(status_code=status_code, content={"detail": detail})


def _is_ip_error(exc: ValidationError) -> bool:
    """True when any failure is located at the `ip` field, request-level or model-level."""
    return any(error["loc"] and error["loc"][-1] == "ip" for error in exc.errors())


async def pydantic_validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Turn a rejected /info query into a 400 without echoing pydantic internals."""
    logger.info(
        f"Rejected request parameters path={request.url.path} method={request.method} "
        f"errors={exc.error_count()}"
    )
    if _is_ip_error(exc):
        return _error_response(status.HTTP_400_BAD_REQUEST, "invalid_ip", INVALID_IP_MESSAGE, request)
    return _error_response(status.HTTP_400_BAD_REQUEST, "invalid_request", "Invalid request parameters", request)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        f"Unhandled exception while processing request: {type(exc).__name__} "
        f"path={request.url.path} method={request.method}"
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred while processing the request.",
        request,
    )
