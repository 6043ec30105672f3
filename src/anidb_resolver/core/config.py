"""Environment-driven settings for the AniDB resolver."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from anidb_resolver.core import constants
from anidb_resolver.core.errors import ConfigurationError
from anidb_resolver.metadata.models import TitlePreference

__all__ = ["Settings", "resolve_data_path"]

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def resolve_data_path(data_path: str | Path | None = None) -> Path:
    """Resolve the root directory for cached provider data.

    Args:
        data_path: Optional explicit directory. When omitted, resolves to
            `ANIDB_RESOLVER_DATA_PATH` or `./.cache`.
    """

    chosen: str | Path | None = data_path
    env_path = os.getenv("ANIDB_RESOLVER_DATA_PATH")
    if chosen is None and env_path:
        chosen = env_path
    if chosen is None:
        chosen = Path(".cache")
    return Path(chosen).expanduser()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(name, raw, "a number of seconds") from exc
    if value < 0:
        raise ConfigurationError(name, raw, "a non-negative number of seconds")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(name, raw, "an integer") from exc
    if value < 0:
        raise ConfigurationError(name, raw, "a non-negative integer")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(name, raw, "a boolean (true/false)")


def _env_preference(name: str, default: TitlePreference) -> TitlePreference:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return TitlePreference(raw.strip().lower())
    except ValueError as exc:
        choices = ", ".join(p.value for p in TitlePreference)
        raise ConfigurationError(name, raw, f"one of {choices}") from exc


@dataclass
class Settings:
    """Resolver configuration.

    Attributes:
        data_path: Root under which `anidb/series/{aid}/` directories live
        client_name: AniDB registered client name
        client_version: AniDB registered client version
        title_preference: Which title the parser picks as display name
        allow_automatic_updates: Whether the staleness oracle may request refreshes
        stale_days: Age after which a cached document is re-fetched
        min_request_interval: Minimum spacing between AniDB requests
        avg_request_interval: Target average spacing between AniDB requests
        rate_limit_window: Sliding window bounding request bursts
        request_timeout: HTTP timeout for a single request
    """

    data_path: Path = field(default_factory=resolve_data_path)
    client_name: str = constants.DEFAULT_CLIENT_NAME
    client_version: str = constants.DEFAULT_CLIENT_VERSION
    title_preference: TitlePreference = TitlePreference.LOCALIZED
    allow_automatic_updates: bool = True
    stale_days: int = constants.DEFAULT_STALE_DAYS
    min_request_interval: float = constants.MIN_REQUEST_INTERVAL
    avg_request_interval: float = constants.AVG_REQUEST_INTERVAL
    rate_limit_window: float = constants.RATE_LIMIT_WINDOW
    request_timeout: float = constants.PROVIDER_TIMEOUT

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from `ANIDB_*` environment variables.

        Raises:
            ConfigurationError: If a variable is set to an unparsable value
        """
        min_interval = _env_float(
            "ANIDB_MIN_REQUEST_INTERVAL", constants.MIN_REQUEST_INTERVAL
        )
        avg_interval = _env_float(
            "ANIDB_AVG_REQUEST_INTERVAL", max(constants.AVG_REQUEST_INTERVAL, min_interval)
        )
        if avg_interval < min_interval:
            raise ConfigurationError(
                "ANIDB_AVG_REQUEST_INTERVAL",
                str(avg_interval),
                f"at least ANIDB_MIN_REQUEST_INTERVAL ({min_interval})",
            )

        return cls(
            data_path=resolve_data_path(),
            client_name=os.getenv("ANIDB_CLIENT_NAME") or constants.DEFAULT_CLIENT_NAME,
            client_version=os.getenv("ANIDB_CLIENT_VERSION")
            or constants.DEFAULT_CLIENT_VERSION,
            title_preference=_env_preference(
                "ANIDB_TITLE_PREFERENCE", TitlePreference.LOCALIZED
            ),
            allow_automatic_updates=_env_bool("ANIDB_AUTO_UPDATES", True),
            stale_days=_env_int("ANIDB_STALE_DAYS", constants.DEFAULT_STALE_DAYS),
            min_request_interval=min_interval,
            avg_request_interval=avg_interval,
            rate_limit_window=_env_float(
                "ANIDB_RATE_WINDOW", constants.RATE_LIMIT_WINDOW
            ),
            request_timeout=_env_float(
                "ANIDB_REQUEST_TIMEOUT", constants.PROVIDER_TIMEOUT
            ),
        )
