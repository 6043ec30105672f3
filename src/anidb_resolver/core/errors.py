"""Custom exceptions for the AniDB resolver.

Network failures (``httpx.HTTPError``) and cancellation are not
wrapped: they propagate to the caller unchanged so the host can decide when to
retry the whole resolution.
"""

from typing import Any


class AniDBResolverError(Exception):
    """Base exception for all AniDB resolver errors."""

    pass


class ConfigurationError(AniDBResolverError):
    """Raised when an environment setting holds an invalid value.

    Attributes:
        setting: Name of the offending environment variable
        value: The raw value that failed to parse
    """

    def __init__(self, setting: str, value: str, expected: str) -> None:
        self.setting = setting
        self.value = value
        super().__init__(f"Invalid value {value!r} for {setting}: expected {expected}")


class ProviderError(AniDBResolverError):
    """Base error for provider-related failures."""

    pass


class ProviderUnavailable(ProviderError):
    """AniDB answered with an ``<error>`` document instead of anime data.

    Bans and client registration problems arrive with a 200 status, so they
    are detected by content. The body is never cached.
    """

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} refused the request: {reason}")

    def to_dict(self) -> dict[str, Any]:
        """Error payload printed by the CLI."""
        return {
            "error": "provider_unavailable",
            "provider": self.provider,
            "reason": self.reason,
        }
