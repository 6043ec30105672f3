"""Metadata providers.

Rate limiting: every request must first wait on the shared RateLimiter.
"""

from anidb_resolver.metadata.providers.anidb import AniDBProvider

__all__ = ["AniDBProvider"]
