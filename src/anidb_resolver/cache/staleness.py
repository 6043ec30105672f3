"""Host refresh scheduling based on cached file timestamps."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import structlog

from anidb_resolver.cache.paths import series_data_dir

__all__ = ["StalenessOracle"]

logger = structlog.get_logger(__name__)


class StalenessOracle:
    """Tells the host whether cached data changed since its last refresh.

    Unlike ``SeriesCache``, a missing directory means "refresh": the host has
    an id but nothing was ever cached for it.
    """

    def __init__(self, data_root: Path, allow_automatic_updates: bool = True) -> None:
        self.data_root = data_root
        self.allow_automatic_updates = allow_automatic_updates

    def needs_refresh(self, series_id: str | None, last_refreshed: datetime) -> bool:
        """Return True if any top-level cached ``*.xml`` is newer than ``last_refreshed``.

        Args:
            series_id: AniDB id of the series, if known
            last_refreshed: When the host last refreshed this series; naive
                values are taken as UTC
        """
        if not self.allow_automatic_updates:
            return False
        if not series_id:
            return False

        try:
            directory = series_data_dir(self.data_root, series_id)
        except ValueError:
            logger.debug("anidb.staleness.invalid_id", aid=series_id)
            return False
        if not directory.is_dir():
            logger.debug("anidb.staleness.missing_directory", aid=series_id)
            return True

        modified: list[float] = []
        for path in directory.glob("*.xml"):
            try:
                modified.append(path.stat().st_mtime)
            except FileNotFoundError:
                # removed by a concurrent refresh
                continue
        if not modified:
            return False

        if last_refreshed.tzinfo is None:
            last_refreshed = last_refreshed.replace(tzinfo=UTC)
        newest = datetime.fromtimestamp(max(modified), tz=UTC)
        return newest > last_refreshed
