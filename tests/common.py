from collections.abc import Callable
from typing import Any

import httpx

from ipgeo.clients.base import BaseIPInfoClient
from ipgeo.models.common import IPInfo


class MockResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = {} if payload is None else payload
        self.text = text

    def json(self) -> Any:
        return self._payload


class BadJsonResponse(MockResponse):
    def json(self) -> Any:
        raise ValueError("not json")


class MockAsyncClient:
    """Minimal async context-manager mock for httpx.AsyncClient.

    Every GET is recorded in `calls` as (url, params).
    """

    def __init__(self, response: MockResponse, calls: list[tuple[str, dict[str, Any] | None]] | None = None) -> None:
        self._response = response
        self.calls = calls if calls is not None else []

    async def __aenter__(self) -> "MockAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str, params: dict[str, Any] | None = None) -> MockResponse:
        self.calls.append((url, params))
        return self._response


class FailingAsyncClient:
    """Async client whose GET raises the given httpx error to simulate network failure.

    The target URL is provided at construction time, so tests for different providers
    can reuse this implementation with different base URLs.
    """

    def __init__(self, url: str, error_cls: type[httpx.RequestError] = httpx.ConnectError) -> None:
        self._url = url
        self._error_cls = error_cls

    async def __aenter__(self) -> "FailingAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str, params: dict[str, Any] | None = None) -> MockResponse:
        request = httpx.Request("GET", self._url, params=params)
        raise self._error_cls("Network failure", request=request)


def make_fake_async_client(
    response: MockResponse,
    calls: list[tuple[str, dict[str, Any] | None]] | None = None,
) -> Callable[..., MockAsyncClient]:
    """Factory for a fake httpx.AsyncClient returning a fixed response.

    This avoids repeating the same stub definition in every test.
    """

    def _fake_client(*args: Any, **kwargs: Any) -> MockAsyncClient:
        return MockAsyncClient(response, calls)

    return _fake_client


def make_failing_async_client(
    url: str, error_cls: type[httpx.RequestError] = httpx.ConnectError
) -> Callable[..., FailingAsyncClient]:
    def _fake_client(*args: Any, **kwargs: Any) -> FailingAsyncClient:
        return FailingAsyncClient(url, error_cls)

    return _fake_client


class StaticClient(BaseIPInfoClient):
    """Provider client test double returning a fixed record or raising a fixed error."""

    def __init__(self, name: str, result: IPInfo | None = None, error: Exception | None = None) -> None:
        super().__init__(base_url=f"https://{name}.test")
        self.name = name
        self._result = result
        self._error = error
        self.looked_up: list[str] = []

    async def fetch_ip_info(self, ip: str) -> IPInfo:
        self.looked_up.append(ip)
        if self._error is not None:
            raise self._error
        return self._result or IPInfo(ip=ip)


# ipinfo.io answer for 8.8.8.8 on a plan that includes the asn, company and privacy objects.
# Like the live API it carries only the ISO country code.
GOOGLE_DNS_PAYLOAD: dict[str, Any] = {
    "ip": "8.8.8.8",
    "hostname": "dns.google",
    "city": "Mountain View",
    "region": "California",
    "country": "US",
    "loc": "37.4056,-122.0775",
    "org": "AS15169 Google LLC",
    "postal": "94043",
    "timezone": "America/Los_Angeles",
    "asn": {"asn": "AS15169", "name": "Google LLC", "domain": "google.com", "route": "8.8.8.0/24", "type": "hosting"},
    "company": {"name": "Google LLC", "domain": "google.com", "type": "hosting"},
    "privacy": {"vpn": False, "proxy": False, "tor": False, "relay": False, "hosting": True, "service": ""},
}

# ip-api.com answer for 1.1.1.1 with the fields selected by IPAPI_FIELDS.
CLOUDFLARE_PAYLOAD: dict[str, Any] = {
    "status": "success",
    "query": "1.1.1.1",
    "country": "Australia",
    "countryCode": "AU",
    "region": "QLD",
    "regionName": "Queensland",
    "city": "South Brisbane",
    "district": "",
    "zip": "4101",
    "lat": -27.4766,
    "lon": 153.0166,
    "timezone": "Australia/Brisbane",
    "isp": "Cloudflare, Inc",
    "org": "APNIC and Cloudflare DNS Resolver project",
    "as": "AS13335 Cloudflare, Inc.",
    "asname": "CLOUDFLARENET",
    "mobile": False,
    "proxy": False,
    "hosting": True,
}
