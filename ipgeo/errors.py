class AppError(Exception):
    """Base application error for the IP geolocation service."""


class InvalidIpError(AppError):
    """Raised when no usable IP address can be determined for a lookup."""


class IpProviderError(AppError):
    """Base error for IP geolocation provider failures."""

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class TransportFailureError(IpProviderError):
    """Raised when the provider could not be reached (network, DNS, connection reset)."""


class TransportTimeoutError(TransportFailureError):
    """Raised when the provider did not answer within the configured timeout."""


class UpstreamRejectedError(IpProviderError):
    """Raised when the provider answered but refused the lookup (non-2xx, quota, bad credential)."""

    def __init__(self, message: str, provider: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message, provider)
        self.status_code = status_code


class ConfigurationMissingError(UpstreamRejectedError):
    """Raised when a provider that needs a credential has none configured."""


class ParseFailureError(IpProviderError):
    """Raised when the provider response does not match its documented shape.

    The raw body is kept on the exception for diagnostics and is never sent to callers.
    """

    def __init__(self, message: str, provider: str | None = None, body: str = "") -> None:
        super().__init__(message, provider)
        self.body = body
