"""On-disk cache of raw AniDB anime documents."""

from __future__ import annotations

import os
import time
from datetime import timedelta
from pathlib import Path
from typing import Protocol

import structlog
from anyio import to_thread

from anidb_resolver.cache.files import delete_xml_files, staging_path, write_atomic
from anidb_resolver.cache.locks import KeyedLock
from anidb_resolver.cache.paths import series_data_dir, series_data_path
from anidb_resolver.core.constants import DEFAULT_STALE_DAYS
from anidb_resolver.metadata.artifacts import ArtifactSplitter
from anidb_resolver.metadata.rate_limit import RateLimiter

__all__ = ["DocumentFetcher", "SeriesCache"]

logger = structlog.get_logger(__name__)


class DocumentFetcher(Protocol):
    """Anything that can download one raw series document."""

    async def fetch_series_document(self, anime_id: str) -> bytes: ...


class SeriesCache:
    """Keeps ``anidb/series/{aid}/series.xml`` no older than the staleness window.

    Refreshes of the same aid are serialized by a keyed lock so concurrent
    resolutions never download twice or interleave writes; different aids only
    contend on the shared rate limiter.
    """

    def __init__(
        self,
        data_root: Path,
        fetcher: DocumentFetcher,
        rate_limiter: RateLimiter,
        splitter: ArtifactSplitter | None = None,
        stale_after: timedelta = timedelta(days=DEFAULT_STALE_DAYS),
    ) -> None:
        """Initialize the cache.

        Args:
            data_root: Root directory of cached provider data
            fetcher: Downloads raw documents (normally ``AniDBProvider``)
            rate_limiter: The process-wide AniDB rate limiter
            splitter: Produces episode and cast files after each download
            stale_after: Maximum age of a cached document
        """
        self.data_root = data_root
        self.stale_after = stale_after
        self._fetcher = fetcher
        self._rate_limiter = rate_limiter
        self._splitter = splitter or ArtifactSplitter()
        self._locks = KeyedLock()
        self._downloads = 0

    @property
    def downloads(self) -> int:
        """Number of documents downloaded by this cache instance."""
        return self._downloads

    def series_data_path(self, series_id: str) -> Path:
        return series_data_path(self.data_root, series_id)

    def is_fresh(self, series_id: str) -> bool:
        """True when the cached document exists and is within the staleness window."""
        path = self.series_data_path(series_id)
        try:
            modified = path.stat().st_mtime
        except FileNotFoundError:
            return False
        return time.time() - modified <= self.stale_after.total_seconds()

    async def ensure_fresh(self, series_id: str) -> Path:
        """Return the path of an up-to-date raw document, downloading if needed.

        Raises:
            httpx.HTTPError: If a required download fails
            ProviderUnavailable: If AniDB answered with an error document
        """
        path = self.series_data_path(series_id)
        log = logger.bind(aid=series_id)

        if self.is_fresh(series_id):
            log.debug("anidb.cache.hit", path=str(path))
            return path

        async with self._locks.hold(series_id):
            # Another caller may have refreshed while we waited for the lock
            if self.is_fresh(series_id):
                log.debug("anidb.cache.hit_after_wait", path=str(path))
                return path

            log.info("anidb.cache.refresh", exists=path.exists())
            await self._rate_limiter.wait()
            body = await self._fetcher.fetch_series_document(series_id)
            self._downloads += 1
            await to_thread.run_sync(self._store, series_id, body)

        return path

    def _store(self, series_id: str, body: bytes) -> None:
        directory = series_data_dir(self.data_root, series_id)
        path = self.series_data_path(series_id)
        # series.xml only becomes fresh once its artifacts exist
        staging = staging_path(path)

        removed = delete_xml_files(directory, keep=path)
        write_atomic(staging, body)
        try:
            self._splitter.split(staging)
            os.replace(staging, path)
        except BaseException:
            staging.unlink(missing_ok=True)
            logger.warning("anidb.cache.split_failed", aid=series_id)
            raise
        logger.info(
            "anidb.cache.stored", aid=series_id, size=len(body), removed=removed
        )
