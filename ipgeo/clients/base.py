from abc import ABC, abstractmethod
from http import HTTPStatus
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ipgeo.errors import ParseFailureError, TransportFailureError, TransportTimeoutError, UpstreamRejectedError
from ipgeo.logger import logger
from ipgeo.models.common import IPInfo

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class BaseIPInfoClient(ABC):
    """Abstract base for all IP geolocation clients.

    Concrete implementations build the provider-specific URL, decode the
    provider-native body and hand it to a normalizer so that callers only
    ever see the unified IPInfo shape.
    """

    name: str = ""

    def __init__(self, base_url: str, timeout_seconds: float = 5.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    @abstractmethod
    async def fetch_ip_info(self, ip: str) -> IPInfo:
        """Look up geolocation information for an explicit IP address."""
        raise NotImplementedError

    async def _fetch(self, url: str, params: dict[str, Any], payload_model: type[PayloadT]) -> PayloadT:
        """Perform a single GET and decode the body into the provider-native model.

        `url` and `params` may carry credentials, so neither is ever put into
        an exception message or a log line.
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                response = await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(
                f"Request to {self.name} timed out after {self._timeout_seconds}s ({type(exc).__name__}).",
                provider=self.name,
            ) from exc
        except httpx.RequestError as exc:
            raise TransportFailureError(
                f"Request to {self.name} failed ({type(exc).__name__}).",
                provider=self.name,
            ) from exc

        self._handle_http_errors(response)

        data = self._parse_json(response)
        try:
            return payload_model.model_validate(data)
        except ValidationError as exc:
            raise self._parse_failure(
                f"{self.name} response does not match the expected shape "
                f"({exc.error_count()} validation errors).",
                response.text,
            ) from exc

    def _handle_http_errors(self, response: httpx.Response) -> None:
        """Any non-2xx status means the provider refused the lookup."""
        status_code = int(response.status_code)
        if HTTPStatus.OK <= status_code < HTTPStatus.MULTIPLE_CHOICES:
            return

        if status_code == HTTPStatus.TOO_MANY_REQUESTS:
            message = f"{self.name} rate limit or quota exceeded (HTTP 429)."
        elif status_code in (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN):
            message = f"{self.name} rejected the credential (HTTP {status_code})."
        else:
            message = f"{self.name} returned HTTP {status_code}."

        logger.warning(f"Upstream rejected lookup provider={self.name} status_code={status_code}")
        raise UpstreamRejectedError(message, provider=self.name, status_code=status_code)

    def _parse_json(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise self._parse_failure(f"Failed to decode {self.name} response as JSON: {exc}", response.text) from exc

        if not isinstance(data, dict):
            raise self._parse_failure(
                f"Expected a JSON object from {self.name}, got {type(data).__name__}.", response.text
            )
        return data

    def _parse_failure(self, message: str, body: str) -> ParseFailureError:
        logger.error(f"Malformed provider response provider={self.name} error={message} body={body!r}")
        return ParseFailureError(message, provider=self.name, body=body)
