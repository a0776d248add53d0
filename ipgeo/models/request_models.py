from ipaddress import ip_address

from pydantic import BaseModel, Field, field_validator


class InfoRequest(BaseModel):
    """Query parameters of the /info endpoint.

    If `ip` is provided, the service looks up that explicit IP address.
    If `ip` is omitted or blank, the calling client's address is used.

    `provider` selects the upstream provider by name. Unknown or missing
    names fall back to the default provider. A comma-separated list (or
    `all`) queries several providers and merges their answers.
    """

    ip: str | None = Field(
        default=None,
        description="IPv4 or IPv6 address to look up. If omitted, the client's IP is used.",
        examples=["8.8.8.8", "2001:4860:4860::8888"],
    )
    provider: str | None = Field(
        default=None,
        description="Provider name, comma-separated provider names, or 'all'. Defaults to the configured provider.",
        examples=["ipinfo", "ipapi", "ipinfo,ipapi", "all"],
    )

    @field_validator("ip", mode="before")
    @classmethod
    def _validate_ip(cls, value: str | None) -> str | None:
        """Validate that ip is either empty/None or a valid IP address (IPv4 or IPv6).

        - None or blank string -> treated as None (client IP lookup, no error).
        - Non-blank -> must be a valid IP literal, otherwise a validation error
          is raised and the endpoint handler is never invoked.
        """
        if value is None:
            return None

        value_str = str(value).strip()
        if not value_str:
            return None

        try:
            ip_address(value_str)
        except ValueError as exc:
            raise ValueError("ip must be a valid IPv4 or IPv6 address") from exc

        return value_str

    @field_validator("provider", mode="before")
    @classmethod
    def _blank_provider_is_none(cls, value: str | None) -> str | None:
        if value is None or not str(value).strip():
            return None
        return str(value).strip()
