"""Map provider-native payloads onto the unified IPInfo model.

Normalizers are pure and total: given a payload that passed decoding they
always return an IPInfo, filling anything the provider did not supply with
the model defaults.
"""

import re

import pycountry

from ipgeo.models.common import IPInfo, IspInfo, LocationInfo, PrivacyInfo
from ipgeo.models.provider_models import IpApiComPayload, IpinfoIoPayload

_ASN_PREFIX = re.compile(r"^AS\d+\s+")


def _strip_asn(org: str | None) -> str | None:
    """'AS15169 Google LLC' -> 'Google LLC'."""
    if not org:
        return None
    return _ASN_PREFIX.sub("", org, count=1)


def _country_name(code: str | None) -> str | None:
    """'US' -> 'United States'; codes pycountry does not know (e.g. 'XK') are kept as-is."""
    if not code:
        return code
    try:
        country = pycountry.countries.get(alpha_2=code)
    except LookupError:
        country = None
    return country.name if country else code


def normalize_ipinfo(payload: IpinfoIoPayload) -> IPInfo:
    lat, lon = payload.coordinates or (None, None)
    organisation = _strip_asn(payload.org)
    privacy = payload.privacy
    asn = payload.asn

    hosting = bool(privacy and privacy.hosting) or bool(asn and asn.type == "hosting")

    return IPInfo(
        ip=payload.ip,
        location=LocationInfo(
            city=payload.city,
            region=payload.region,
            # The JSON API only reports the ISO code.
            country=payload.country_name or _country_name(payload.country),
            timezone=payload.timezone,
            lat=lat,
            lon=lon,
        ),
        isp=IspInfo(
            name=(payload.company.name if payload.company else None) or organisation,
            asname=asn.name if asn else None,
            as_=payload.org,
            isp=organisation,
        ),
        privacy=PrivacyInfo(
            vpn=privacy.vpn if privacy else None,
            proxy=privacy.proxy if privacy else None,
            tor=privacy.tor if privacy else None,
            hosting=hosting,
            mobile=payload.carrier is not None,
        ),
    )


def normalize_ipapi(payload: IpApiComPayload) -> IPInfo:
    # ip-api.com has no VPN or Tor signal; those flags stay False.
    return IPInfo(
        ip=payload.query,
        location=LocationInfo(
            city=payload.city,
            district=payload.district,
            region=payload.regionName or payload.region,
            country=payload.country,
            timezone=payload.timezone,
            lat=payload.lat,
            lon=payload.lon,
        ),
        isp=IspInfo(
            name=payload.org,
            asname=payload.asname,
            as_=payload.as_,
            isp=payload.isp,
        ),
        privacy=PrivacyInfo(
            proxy=payload.proxy,
            hosting=payload.hosting,
            mobile=payload.mobile,
        ),
    )
