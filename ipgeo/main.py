import json
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ipgeo.config import load_settings
from ipgeo.errors import (
    ConfigurationMissingError,
    InvalidIpError,
    IpProviderError,
    ParseFailureError,
    TransportFailureError,
    TransportTimeoutError,
    UpstreamRejectedError,
)
from ipgeo.exception_handlers import (
    pydantic_validation_exception_handler,
    unhandled_exception_handler,
)
from ipgeo.factory import ProviderRegistry
from ipgeo.logger import logger
from ipgeo.models.common import IPInfo
from ipgeo.models.request_models import InfoRequest
from ipgeo.models.response_models import ErrorResponse, HealthResponse
from ipgeo.orchestrator import LookupOrchestrator


class PrettyJSONResponse(JSONResponse):
    """JSON response indented for humans reading it in a browser or terminal."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")


settings = load_settings()
registry = ProviderRegistry.from_settings(settings)

app = FastAPI(
    title="IP Geolocation Service",
    version="0.1.0",
    description="Looks up an IP address with one or more geolocation providers and returns a unified record.",
)
logger.info(f"Started IP Geolocation Service providers={','.join(registry.names)} default={registry.default}")


def get_orchestrator() -> LookupOrchestrator:
    """Dependency to provide a LookupOrchestrator bound to the startup registry."""
    return LookupOrchestrator(registry, settings)


# (exception type, HTTP status, error code); first match wins, so subclasses come first.
PROVIDER_ERROR_STATUSES: list[tuple[type[IpProviderError], int, str]] = [
    (TransportTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT, "upstream_timeout"),
    (TransportFailureError, status.HTTP_502_BAD_GATEWAY, "upstream_unreachable"),
    (ConfigurationMissingError, status.HTTP_503_SERVICE_UNAVAILABLE, "provider_not_configured"),
    (UpstreamRejectedError, status.HTTP_502_BAD_GATEWAY, "upstream_rejected"),
    (ParseFailureError, status.HTTP_502_BAD_GATEWAY, "upstream_parse_error"),
]

# Register global exception handlers using the shared handlers module.
app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="ok")


@app.get(
    "/info",
    response_model=IPInfo,
    response_class=PrettyJSONResponse,
    status_code=status.HTTP_200_OK,
    tags=["ip"],
    summary="Look up geolocation information for an IP address.",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
        status.HTTP_504_GATEWAY_TIMEOUT: {"model": ErrorResponse},
    },
)
async def info(
    request: Request,
    query: Annotated[InfoRequest, Depends()],
    orchestrator: Annotated[LookupOrchestrator, Depends(get_orchestrator)],
) -> IPInfo:
    """Look up geolocation information for either a specific IP or the caller's IP.

    - If `query.ip` is provided, that IP is used.
    - Otherwise, the client's IP is taken from the connection (`request.client.host`).
    - `query.provider` selects the upstream provider; unknown or missing names use
      the default provider. Several comma-separated names (or `all`) merge the
      answers of those providers.
    """
    client_host = request.client.host if request.client else None
    x_forwarded_for = request.headers.get("x-forwarded-for")
    logger.info(
        "Performing IP info lookup "
        f"path={request.url.path} method={request.method} ip={query.ip} "
        f"client_ip={client_host} x_forwarded_for={x_forwarded_for} provider={query.provider}"
    )

    try:
        return await orchestrator.handle(query.ip, query.provider, client_host)
    except InvalidIpError as exc:
        logger.error(
            "Unable to determine IP for lookup "
            f"path={request.url.path} method={request.method} client_ip={client_host} error={exc}"
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "invalid_ip",
                "message": str(exc),
                "provider": query.provider,
            },
        ) from exc
    except IpProviderError as exc:
        status_code, code = _provider_error_status(exc)
        logger.error(
            "IP provider error during lookup "
            f"path={request.url.path} method={request.method} ip={query.ip} provider={exc.provider} "
            f"code={code} error={exc}"
        )
        raise HTTPException(
            status_code=status_code,
            detail={
                "code": code,
                "message": str(exc),
                "provider": exc.provider or query.provider,
            },
        ) from exc


def _provider_error_status(exc: IpProviderError) -> tuple[int, str]:
    for error_type, status_code, code in PROVIDER_ERROR_STATUSES:
        if isinstance(exc, error_type):
            return status_code, code
    return status.HTTP_502_BAD_GATEWAY, "upstream_error"
