"""AniDB HTTP API document fetcher.

AniDB specifics:
- Registered client name and version REQUIRED on every request
- VERY STRICT rate limits: callers must wait on the shared RateLimiter first
- XML-based API: http://api.anidb.net:9001/httpapi
- Anime details: ?request=anime&aid={anime_id}&client={client}
  &clientver={ver}&protover=1
- Response bodies are gzip-compressed
- Errors (bans, unknown client) come back as ``<error>`` documents
"""

import gzip
from typing import Any

import httpx
import structlog

from anidb_resolver.core.constants import (
    DEFAULT_CLIENT_NAME,
    DEFAULT_CLIENT_VERSION,
    PROVIDER_TIMEOUT,
    SERIES_QUERY_URL,
)
from anidb_resolver.core.errors import ProviderUnavailable

__all__ = ["AniDBProvider"]

logger = structlog.get_logger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"


class AniDBProvider:
    """Downloads raw anime documents from AniDB.

    No retries happen here: network errors and cancellation propagate to the
    caller unchanged, and pacing is the shared RateLimiter's job.
    """

    def __init__(
        self,
        client_name: str = DEFAULT_CLIENT_NAME,
        client_version: str = DEFAULT_CLIENT_VERSION,
        timeout: float = PROVIDER_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize AniDB provider.

        Args:
            client_name: AniDB registered client name
            client_version: AniDB registered client version
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client (closed by the caller)
        """
        self.provider_name = "AniDB"
        self.client_name = client_name
        self.client_version = client_version
        self._owns_client = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    def __repr__(self) -> str:
        return f"AniDBProvider(client={self.client_name!r}, version={self.client_version!r})"

    def series_url(self, anime_id: str) -> str:
        """Build the query URL for one anime."""
        return SERIES_QUERY_URL.format(
            client=self.client_name, version=self.client_version, aid=anime_id
        )

    async def fetch_series_document(self, anime_id: str) -> bytes:
        """Download and decompress the anime document for ``anime_id``.

        Returns:
            Raw XML bytes

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
            ProviderUnavailable: If AniDB answered with an ``<error>`` document
        """
        log = logger.bind(aid=anime_id)
        log.info("anidb.fetch.start")

        response = await self._client.get(
            self.series_url(anime_id), headers={"Accept-Encoding": "gzip"}
        )
        response.raise_for_status()

        body = response.content
        # httpx may already have decoded Content-Encoding: gzip
        if body[:2] == _GZIP_MAGIC:
            body = gzip.decompress(body)

        self._raise_for_error_document(body)
        log.info("anidb.fetch.done", size=len(body))
        return body

    def _raise_for_error_document(self, body: bytes) -> None:
        head = body[:512].lstrip()
        if head.startswith(b"<?xml"):
            head = head[head.find(b"?>") + 2 :].lstrip()
        if not head.startswith(b"<error"):
            return

        reason = head.split(b">", 1)[-1].split(b"<", 1)[0].decode("utf-8", "replace")
        reason = reason.strip() or "unknown error"
        logger.warning("anidb.fetch.error_document", reason=reason)
        raise ProviderUnavailable("anidb", reason)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AniDBProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit - close client."""
        await self.aclose()
