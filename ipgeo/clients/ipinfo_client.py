from pydantic import SecretStr

from ipgeo.clients.base import BaseIPInfoClient
from ipgeo.errors import ConfigurationMissingError, UpstreamRejectedError
from ipgeo.logger import logger
from ipgeo.models.common import IPInfo
from ipgeo.models.provider_models import IpinfoIoPayload
from ipgeo.normalizers import normalize_ipinfo


class IpInfoIo(BaseIPInfoClient):
    """Client for the https://ipinfo.io JSON API.

    Every request carries the access token as the `token` query parameter.
    Without a configured token the lookup is rejected locally, before any
    network call is made.
    """

    name = "ipinfo"

    def __init__(
        self,
        token: SecretStr | None = None,
        base_url: str = "https://ipinfo.io",
        timeout_seconds: float = 5.0,
    ) -> None:
        super().__init__(base_url, timeout_seconds)
        self._token = token

    async def fetch_ip_info(self, ip: str) -> IPInfo:
        if self._token is None:
            raise ConfigurationMissingError(
                "ipinfo access token is not configured (IPINFO_TOKEN).",
                provider=self.name,
            )

        logger.debug(f"Fetching ip info provider={self.name} ip={ip}")
        payload = await self._fetch(
            f"{self._base_url}/{ip}/json",
            params={"token": self._token.get_secret_value()},
            payload_model=IpinfoIoPayload,
        )
        if payload.bogon:
            # Non-routable addresses come back as {"ip": ..., "bogon": true}.
            logger.warning(f"Upstream rejected lookup provider={self.name} ip={ip} reason=bogon")
            raise UpstreamRejectedError(f"ipinfo has no data for {ip}: bogon address.", provider=self.name)
        return normalize_ipinfo(payload)
