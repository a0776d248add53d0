import pytest
from pydantic import SecretStr

from ipgeo.clients.ip_api_com_client import IpApiCom
from ipgeo.clients.ipinfo_client import IpInfoIo
from ipgeo.config import Settings
from ipgeo.factory import ProviderRegistry
from tests.common import StaticClient


@pytest.fixture
def registry() -> ProviderRegistry:
    return ProviderRegistry.from_settings(Settings(ipinfo_token=SecretStr("tok"), default_provider="ipinfo"))


def test_from_settings_registers_providers_in_order(registry: ProviderRegistry) -> None:
    assert registry.names == ["ipinfo", "ipapi"]
    assert registry.default == "ipinfo"


@pytest.mark.parametrize(("name", "expected"), [("ipinfo", IpInfoIo), ("ipapi", IpApiCom), (" IPAPI ", IpApiCom)])
def test_resolve_known_names(registry: ProviderRegistry, name: str, expected: type) -> None:
    assert isinstance(registry.resolve(name), expected)


@pytest.mark.parametrize("name", [None, "", "   ", "maxmind", "ip-api.com"])
def test_resolve_unknown_or_empty_falls_back_to_default(registry: ProviderRegistry, name: str | None) -> None:
    assert registry.resolve(name) is registry.resolve("ipinfo")


def test_resolve_returns_the_same_client_every_time(registry: ProviderRegistry) -> None:
    assert registry.resolve("ipapi") is registry.resolve("ipapi")


def test_default_provider_comes_from_settings() -> None:
    registry = ProviderRegistry.from_settings(Settings(default_provider="IPAPI"))

    assert isinstance(registry.resolve("unknown"), IpApiCom)


def test_unregistered_default_uses_first_provider() -> None:
    first, second = StaticClient("alpha"), StaticClient("beta")
    registry = ProviderRegistry({"alpha": first, "beta": second}, default="gamma")

    assert registry.default == "alpha"
    assert registry.resolve("") is first


def test_empty_registry_is_rejected() -> None:
    with pytest.raises(ValueError):
        ProviderRegistry({}, default="ipinfo")


def test_resolve_many_keeps_priority_order_and_drops_duplicates(registry: ProviderRegistry) -> None:
    clients = registry.resolve_many(["ipapi", "ipinfo", "ipapi", "unknown"])

    assert [client.name for client in clients] == ["ipapi", "ipinfo"]


def test_resolve_many_all_uses_registry_order(registry: ProviderRegistry) -> None:
    assert [client.name for client in registry.resolve_many(["all"])] == ["ipinfo", "ipapi"]
    assert [client.name for client in registry.resolve_many(["ipapi", "all"])] == ["ipapi", "ipinfo"]
