from ipgeo.clients.base import BaseIPInfoClient
from ipgeo.errors import UpstreamRejectedError
from ipgeo.logger import logger
from ipgeo.models.common import IPInfo
from ipgeo.models.provider_models import IPAPI_FIELDS, IpApiComPayload
from ipgeo.normalizers import normalize_ipapi


class IpApiCom(BaseIPInfoClient):
    """Client for the http://ip-api.com JSON API.

    The free endpoint needs no credential. The `fields` bitmask limits the
    response to the fields the normalizer maps.
    """

    name = "ipapi"

    def __init__(self, base_url: str = "http://ip-api.com", timeout_seconds: float = 5.0) -> None:
        super().__init__(base_url, timeout_seconds)

    async def fetch_ip_info(self, ip: str) -> IPInfo:
        logger.debug(f"Fetching ip info provider={self.name} ip={ip}")
        payload = await self._fetch(
            f"{self._base_url}/json/{ip}",
            params={"fields": int(IPAPI_FIELDS)},
            payload_model=IpApiComPayload,
        )
        self._handle_provider_status(payload)
        return normalize_ipapi(payload)

    def _handle_provider_status(self, payload: IpApiComPayload) -> None:
        """ip-api.com answers HTTP 200 with `status: "fail"` for private ranges, bad queries and quota errors."""
        status_value = (payload.status or "").lower()
        if status_value != "fail":
            return

        message = payload.message or "Unknown error from ip-api.com"
        logger.warning(f"Upstream rejected lookup provider={self.name} message={message}")
        raise UpstreamRejectedError(f"ipapi rejected the lookup: {message}", provider=self.name)
