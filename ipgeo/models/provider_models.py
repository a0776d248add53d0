"""Provider-native response shapes.

These models exist only between a provider client and its normalizer. They
validate the structure of the upstream body; anything that fails validation
is a parse failure, anything merely missing stays None and is defaulted by
the normalizer.
"""

from enum import IntFlag

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ProviderPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class IpinfoAsn(_ProviderPayload):
    asn: str | None = None
    name: str | None = None
    domain: str | None = None
    route: str | None = None
    type: str | None = None


class IpinfoCompany(_ProviderPayload):
    name: str | None = None
    domain: str | None = None
    type: str | None = None


class IpinfoPrivacy(_ProviderPayload):
    vpn: bool | None = None
    proxy: bool | None = None
    tor: bool | None = None
    relay: bool | None = None
    hosting: bool | None = None
    service: str | None = None


class IpinfoCarrier(_ProviderPayload):
    name: str | None = None
    mcc: str | None = None
    mnc: str | None = None


class IpinfoIoPayload(_ProviderPayload):
    """Body of `GET https://ipinfo.io/<ip>/json`.

    The free tier only returns the flat fields; `asn`, `company`, `privacy`
    and `carrier` appear on paid plans.
    """

    ip: str | None = None
    hostname: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    country_name: str | None = None
    loc: str | None = None
    org: str | None = None
    postal: str | None = None
    timezone: str | None = None
    bogon: bool | None = None
    asn: IpinfoAsn | None = None
    company: IpinfoCompany | None = None
    privacy: IpinfoPrivacy | None = None
    carrier: IpinfoCarrier | None = None

    @field_validator("loc")
    @classmethod
    def _validate_loc(cls, value: str | None) -> str | None:
        """`loc` must be "<lat>,<lon>" when present."""
        if value is None or not value.strip():
            return None
        parts = value.split(",")
        if len(parts) != 2:
            raise ValueError(f"loc must be '<lat>,<lon>', got {value!r}")
        for part in parts:
            float(part)  # raises ValueError for non-numeric parts
        return value.strip()

    @property
    def coordinates(self) -> tuple[float, float] | None:
        if self.loc is None:
            return None
        lat, lon = self.loc.split(",")
        return float(lat), float(lon)


class IpApiField(IntFlag):
    """ip-api.com response field bits, see https://ip-api.com/docs/api:json."""

    country = 1
    countryCode = 2
    region = 4
    regionName = 8
    city = 16
    zip = 32
    lat = 64
    lon = 128
    timezone = 256
    isp = 512
    org = 1024
    as_ = 2048
    query = 8192
    status = 16384
    message = 32768
    mobile = 65536
    proxy = 131072
    district = 524288
    asname = 4194304
    hosting = 16777216


IPAPI_FIELDS = (
    IpApiField.status
    | IpApiField.message
    | IpApiField.query
    | IpApiField.country
    | IpApiField.countryCode
    | IpApiField.region
    | IpApiField.regionName
    | IpApiField.city
    | IpApiField.district
    | IpApiField.zip
    | IpApiField.lat
    | IpApiField.lon
    | IpApiField.timezone
    | IpApiField.isp
    | IpApiField.org
    | IpApiField.as_
    | IpApiField.asname
    | IpApiField.mobile
    | IpApiField.proxy
    | IpApiField.hosting
)


class IpApiComPayload(_ProviderPayload):
    """Body of `GET http://ip-api.com/json/<ip>?fields=<IPAPI_FIELDS>`."""

    status: str | None = None
    message: str | None = None
    query: str | None = None
    country: str | None = None
    countryCode: str | None = None
    region: str | None = None
    regionName: str | None = None
    city: str | None = None
    district: str | None = None
    zip: str | None = None
    lat: float | None = None
    lon: float | None = None
    timezone: str | None = None
    isp: str | None = None
    org: str | None = None
    as_: str | None = Field(default=None, alias="as")
    asname: str | None = None
    mobile: bool | None = None
    proxy: bool | None = None
    hosting: bool | None = None
