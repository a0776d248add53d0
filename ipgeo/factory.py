from collections.abc import Iterable, Mapping

from ipgeo.clients.base import BaseIPInfoClient
from ipgeo.clients.ip_api_com_client import IpApiCom
from ipgeo.clients.ipinfo_client import IpInfoIo
from ipgeo.config import Settings
from ipgeo.logger import logger

ALL_PROVIDERS = "all"


class ProviderRegistry:
    """Name -> provider client lookup.

    Built once at startup and never mutated, so concurrent requests can
    resolve providers without locking. Unknown or empty names resolve to the
    default provider instead of raising.
    """

    def __init__(self, clients: Mapping[str, BaseIPInfoClient], default: str) -> None:
        if not clients:
            raise ValueError("ProviderRegistry needs at least one provider client")
        self._clients: dict[str, BaseIPInfoClient] = {_key(name): client for name, client in clients.items()}
        default_key = _key(default)
        if default_key not in self._clients:
            first = next(iter(self._clients))
            logger.warning(f"Default provider is not registered default={default} fallback={first}")
            default_key = first
        self._default = default_key

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderRegistry":
        clients: dict[str, BaseIPInfoClient] = {
            IpInfoIo.name: IpInfoIo(
                token=settings.ipinfo_token,
                base_url=settings.ipinfo_base_url,
                timeout_seconds=settings.timeout_seconds,
            ),
            IpApiCom.name: IpApiCom(
                base_url=settings.ipapi_base_url,
                timeout_seconds=settings.timeout_seconds,
            ),
        }
        return cls(clients, default=settings.default_provider)

    @property
    def names(self) -> list[str]:
        return list(self._clients)

    @property
    def default(self) -> str:
        return self._default

    def resolve(self, name: str | None) -> BaseIPInfoClient:
        key = _key(name)
        client = self._clients.get(key)
        if client is None:
            if key:
                logger.debug(f"Unknown provider requested, using default provider={name} default={self._default}")
            client = self._clients[self._default]
        return client

    def resolve_many(self, names: Iterable[str | None]) -> list[BaseIPInfoClient]:
        """Resolve several names in priority order, dropping duplicates.

        `all` expands to every provider in registry order.
        """
        resolved: list[BaseIPInfoClient] = []
        for name in names:
            if _key(name) == ALL_PROVIDERS:
                candidates = list(self._clients.values())
            else:
                candidates = [self.resolve(name)]
            for client in candidates:
                if client not in resolved:
                    resolved.append(client)
        return resolved


def _key(name: str | None) -> str:
    return (name or "").strip().lower()
