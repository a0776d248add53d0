import os
from collections.abc import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from ipgeo.logger import logger


class Settings(BaseModel):
    """Process configuration, read once at startup and passed to the components that need it."""

    model_config = ConfigDict(frozen=True)

    ipinfo_token: SecretStr | None = None
    ipinfo_base_url: str = "https://ipinfo.io"
    ipapi_base_url: str = "http://ip-api.com"
    timeout_seconds: float = Field(default=5.0, gt=0)
    merge_deadline_seconds: float = Field(default=8.0, gt=0)
    default_provider: str = "ipinfo"
    host: str = "127.0.0.1"
    port: int = 8000

    @field_validator("ipinfo_token", mode="before")
    @classmethod
    def _blank_token_is_none(cls, value: str | None) -> str | None:
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    @field_validator("default_provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        return str(value).strip().lower()


# Environment variable -> Settings field.
ENV_VARS: dict[str, str] = {
    "IPINFO_TOKEN": "ipinfo_token",
    "IPINFO_BASE_URL": "ipinfo_base_url",
    "IPAPI_BASE_URL": "ipapi_base_url",
    "IPGEO_TIMEOUT_SECONDS": "timeout_seconds",
    "IPGEO_MERGE_DEADLINE_SECONDS": "merge_deadline_seconds",
    "IPGEO_DEFAULT_PROVIDER": "default_provider",
    "IPGEO_HOST": "host",
    "IPGEO_PORT": "port",
}


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment.

    When `environ` is omitted, variables from an optional `.env` file are loaded
    into the process environment first (existing variables win).
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    values = {field: environ[var] for var, field in ENV_VARS.items() if var in environ}
    settings = Settings(**values)

    if settings.ipinfo_token is None:
        logger.warning("IPINFO_TOKEN is not set; lookups against ipinfo will be rejected")
    logger.info(
        "Loaded settings "
        f"default_provider={settings.default_provider} timeout_seconds={settings.timeout_seconds} "
        f"merge_deadline_seconds={settings.merge_deadline_seconds}"
    )
    return settings
