import asyncio
from collections.abc import Sequence
from ipaddress import ip_address
from typing import Any

from pydantic import BaseModel

from ipgeo.clients.base import BaseIPInfoClient
from ipgeo.config import Settings
from ipgeo.errors import InvalidIpError, IpProviderError, TransportTimeoutError
from ipgeo.factory import ALL_PROVIDERS, ProviderRegistry
from ipgeo.logger import logger
from ipgeo.models.common import IPInfo


def strip_port(address: str) -> str:
    """Remove a port suffix from a transport-level address.

    '203.0.113.7:54321' -> '203.0.113.7', '[2001:db8::1]:443' -> '2001:db8::1'.
    A bare IPv6 address is returned unchanged.
    """
    address = address.strip()
    if address.startswith("["):
        host, _, _ = address[1:].partition("]")
        return host
    if address.count(":") == 1:
        return address.split(":", 1)[0]
    return address


def resolve_target_ip(ip: str | None, caller_address: str | None) -> str:
    """Pick the IP to look up: the explicit one, else the caller's own address."""
    if ip and ip.strip():
        return ip.strip()

    host = strip_port(caller_address or "")
    try:
        ip_address(host)
    except ValueError as exc:
        raise InvalidIpError(
            f"No ip parameter given and the caller address {caller_address!r} is not an IP address."
        ) from exc
    return host


def _first_set(values: Sequence[Any], default: Any) -> Any:
    return next((value for value in values if value != default), default)


def _merge_section(sections: Sequence[BaseModel]) -> BaseModel:
    model_cls = type(sections[0])
    merged = {
        field_name: _first_set([getattr(section, field_name) for section in sections], field.default)
        for field_name, field in model_cls.model_fields.items()
    }
    return model_cls(**merged)


def merge_ip_info(records: Sequence[IPInfo]) -> IPInfo:
    """Combine several lookups field by field.

    `records` must be in priority order; for every field the first non-default
    value wins. Coordinates are taken as a pair from the first record that has any.
    """
    if not records:
        raise ValueError("merge_ip_info needs at least one record")

    locations = [record.location for record in records]
    location = _merge_section(locations)
    located = next((loc for loc in locations if (loc.lat, loc.lon) != (0.0, 0.0)), None)
    if located is not None:
        location = location.model_copy(update={"lat": located.lat, "lon": located.lon})

    return IPInfo(
        ip=_first_set([record.ip for record in records], ""),
        location=location,
        isp=_merge_section([record.isp for record in records]),
        privacy=_merge_section([record.privacy for record in records]),
    )


class LookupOrchestrator:
    """Turns an inbound lookup into provider calls.

    A single provider name is the normal path: one call, errors propagate
    unchanged. A comma-separated list of names, or `all`, queries every
    selected provider concurrently and merges whatever succeeded.
    """

    def __init__(self, registry: ProviderRegistry, settings: Settings) -> None:
        self._registry = registry
        self._merge_deadline_seconds = settings.merge_deadline_seconds

    async def handle(self, ip: str | None, provider_name: str | None, caller_address: str | None) -> IPInfo:
        target_ip = resolve_target_ip(ip, caller_address)
        names = [name.strip() for name in (provider_name or "").split(",") if name.strip()]

        if len(names) > 1 or (names and names[0].lower() == ALL_PROVIDERS):
            clients = self._registry.resolve_many(names)
            if len(clients) > 1:
                return await self._merge_lookup(target_ip, clients)
            client = clients[0]
        else:
            client = self._registry.resolve(names[0] if names else None)

        logger.info(f"Looking up ip={target_ip} provider={client.name}")
        return await client.fetch_ip_info(target_ip)

    async def _merge_lookup(self, ip: str, clients: list[BaseIPInfoClient]) -> IPInfo:
        provider_names = [client.name for client in clients]
        logger.info(f"Looking up ip={ip} providers={','.join(provider_names)} mode=merge")

        tasks = [asyncio.create_task(client.fetch_ip_info(ip)) for client in clients]
        try:
            _, pending = await asyncio.wait(tasks, timeout=self._merge_deadline_seconds)
        finally:
            # Runs on cancellation of the request too, so no provider call outlives it.
            unfinished = [task for task in tasks if not task.done()]
            for task in unfinished:
                task.cancel()
            if unfinished:
                await asyncio.gather(*unfinished, return_exceptions=True)

        records: list[IPInfo] = []
        errors: list[BaseException] = []
        for client, task in zip(clients, tasks):
            if task in pending:
                error: BaseException | None = TransportTimeoutError(
                    f"{client.name} did not answer within the {self._merge_deadline_seconds}s merge deadline.",
                    provider=client.name,
                )
            else:
                error = task.exception()

            if error is None:
                records.append(task.result())
                continue

            # One provider failing never fails the merge while another one answered.
            logger.warning(
                f"Provider failed during merge ip={ip} provider={client.name} error={error!r}",
                exc_info=None if isinstance(error, IpProviderError) else error,
            )
            errors.append(error)

        if not records:
            raise errors[0]

        logger.info(f"Merged lookup ip={ip} answered={len(records)}/{len(clients)}")
        return merge_ip_info(records)
