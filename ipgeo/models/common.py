from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)


def _coerce_coordinate(value: Any, bounds: tuple[float, float]) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        coordinate = float(value)
    except (TypeError, ValueError):
        return 0.0
    low, high = bounds
    if not low <= coordinate <= high:
        return 0.0
    return coordinate


class LocationInfo(BaseModel):
    """Where an IP address is located.

    Text fields default to an empty string and coordinates to 0.0 when the
    provider does not supply them.
    """

    model_config = ConfigDict(frozen=True)

    city: str = ""
    district: str = ""
    region: str = ""
    country: str = ""
    timezone: str = ""
    lat: float = 0.0
    lon: float = 0.0

    @field_validator("city", "district", "region", "country", "timezone", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("lat", mode="before")
    @classmethod
    def _coerce_lat(cls, value: Any) -> float:
        """Accept strings or numbers; missing, invalid or out-of-range values become 0.0.

        Precision is preserved as supplied by the provider.
        """
        return _coerce_coordinate(value, LATITUDE_RANGE)

    @field_validator("lon", mode="before")
    @classmethod
    def _coerce_lon(cls, value: Any) -> float:
        return _coerce_coordinate(value, LONGITUDE_RANGE)


class IspInfo(BaseModel):
    """Network operator descriptors.

    `as` is a reserved word in Python, so the attribute is `as_` while the
    serialized field name stays `as`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    asname: str = ""
    as_: str = Field(default="", alias="as")
    isp: str = ""

    @field_validator("name", "asname", "as_", "isp", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)


class PrivacyInfo(BaseModel):
    """Anonymity and network-type flags.

    A flag a provider does not report is False: "unknown" is treated as benign.
    """

    model_config = ConfigDict(frozen=True)

    vpn: bool = False
    proxy: bool = False
    tor: bool = False
    hosting: bool = False
    mobile: bool = False

    @field_validator("vpn", "proxy", "tor", "hosting", "mobile", mode="before")
    @classmethod
    def _none_to_false(cls, value: Any) -> Any:
        return False if value is None else value


class IPInfo(BaseModel):
    """Unified lookup result returned to callers regardless of which provider answered."""

    model_config = ConfigDict(frozen=True)

    ip: str = ""
    location: LocationInfo = Field(default_factory=LocationInfo)
    isp: IspInfo = Field(default_factory=IspInfo)
    privacy: PrivacyInfo = Field(default_factory=PrivacyInfo)

    @field_validator("ip", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)
