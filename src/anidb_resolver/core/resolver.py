"""Series resolution: identify the AniDB id, refresh the cache, parse.

The resolver owns no global state. ``SeriesResolver.from_settings`` is the one
place where the shared rate limiter, the HTTP provider and the cache are
created; hosts that resolve many series concurrently should build a single
resolver and reuse it.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Protocol

import structlog
from anyio.lowlevel import checkpoint

from anidb_resolver.cache.series_cache import SeriesCache
from anidb_resolver.core.config import Settings
from anidb_resolver.core.constants import PROVIDER_ANIDB
from anidb_resolver.metadata.models import SeriesRecord
from anidb_resolver.metadata.parser import SeriesParser
from anidb_resolver.metadata.providers.anidb import AniDBProvider
from anidb_resolver.metadata.rate_limit import RateLimiter

__all__ = [
    "SeriesItem",
    "SeriesResolver",
    "StaticTitleMatcher",
    "TitleMatcher",
    "comparable_name",
]

logger = structlog.get_logger(__name__)

_NON_ALNUM = re.compile(r"[^0-9a-z]+")


def comparable_name(name: str) -> str:
    """Lowercase, accent-free, alphanumeric-only form of a title."""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", stripped.lower())


class TitleMatcher(Protocol):
    """Maps free-text series names to AniDB ids (fuzzy matching lives elsewhere)."""

    async def find_series(self, name: str) -> str | None: ...


class StaticTitleMatcher:
    """Matcher backed by a fixed name -> aid table, compared by comparable name."""

    def __init__(self, titles: dict[str, str] | None = None) -> None:
        self._titles = {comparable_name(k): v for k, v in (titles or {}).items()}

    async def find_series(self, name: str) -> str | None:
        return self._titles.get(comparable_name(name))


@dataclass
class SeriesItem:
    """The host's view of a series folder.

    Attributes:
        name: Current display name in the host library
        path: Series folder; its last component is tried first for matching
        provider_ids: Ids the host already knows, keyed by provider name
        overview: Current description in the host library
        preferred_language: Metadata language for title selection
    """

    name: str
    path: Path | None = None
    provider_ids: dict[str, str] = field(default_factory=dict)
    overview: str | None = None
    preferred_language: str | None = None

    @property
    def folder_name(self) -> str | None:
        return self.path.name if self.path is not None else None


class SeriesResolver:
    """Resolves a SeriesItem to a SeriesRecord from AniDB."""

    def __init__(
        self,
        cache: SeriesCache,
        parser: SeriesParser,
        matcher: TitleMatcher | None = None,
        provider: AniDBProvider | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            cache: Series document cache
            parser: Series document parser
            matcher: Title matcher used when no AniDB id is known
            provider: HTTP provider owned by this resolver, closed by ``aclose``
        """
        self.cache = cache
        self.parser = parser
        self.matcher = matcher or StaticTitleMatcher()
        self._provider = provider

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        matcher: TitleMatcher | None = None,
        provider: AniDBProvider | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> SeriesResolver:
        """Wire a resolver and its shared collaborators from settings."""
        limiter = rate_limiter or RateLimiter(
            min_interval=settings.min_request_interval,
            avg_interval=settings.avg_request_interval,
            max_window=settings.rate_limit_window,
        )
        fetcher = provider or AniDBProvider(
            client_name=settings.client_name,
            client_version=settings.client_version,
            timeout=settings.request_timeout,
        )
        cache = SeriesCache(
            data_root=settings.data_path,
            fetcher=fetcher,
            rate_limiter=limiter,
            stale_after=timedelta(days=settings.stale_days),
        )
        parser = SeriesParser(title_preference=settings.title_preference)
        return cls(
            cache=cache,
            parser=parser,
            matcher=matcher,
            provider=fetcher if provider is None else None,
        )

    async def aclose(self) -> None:
        """Close the HTTP provider if this resolver created it."""
        if self._provider is not None:
            await self._provider.aclose()

    async def __aenter__(self) -> SeriesResolver:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def identify(self, item: SeriesItem) -> str | None:
        """Find the AniDB id for ``item``, matching by folder then by name.

        When the folder name matched and differs from the item's name, the
        host most likely matched a sequel; its name and overview are reset.
        """
        aid = item.provider_ids.get(PROVIDER_ANIDB)
        if aid:
            return aid

        folder_name = item.folder_name
        if folder_name:
            aid = await self.matcher.find_series(folder_name)

        if not aid:
            return await self.matcher.find_series(item.name) or None

        if folder_name and self._comparable(folder_name) != self._comparable(item.name):
            logger.info(
                "anidb.resolve.folder_name_mismatch",
                folder=folder_name,
                name=item.name,
                aid=aid,
            )
            item.overview = None
            item.name = folder_name
        return aid

    def _comparable(self, name: str) -> str:
        custom = getattr(self.matcher, "comparable_name", None)
        if callable(custom):
            return str(custom(name))
        return comparable_name(name)

    async def find_series_info(self, item: SeriesItem) -> SeriesRecord:
        """Resolve metadata for ``item``.

        Returns an empty record when no AniDB id can be found.

        Raises:
            httpx.HTTPError: If a required download fails
            ProviderUnavailable: If AniDB answered with an error document
        """
        await checkpoint()

        aid = await self.identify(item)
        record = SeriesRecord()
        if not aid:
            logger.debug("anidb.resolve.unidentified", name=item.name)
            return record

        record.provider_ids[PROVIDER_ANIDB] = aid
        logger.debug("anidb.resolve.identified", name=item.name, aid=aid)

        document_path = await self.cache.ensure_fresh(aid)
        return self.parser.parse(document_path, item.preferred_language, record=record)
