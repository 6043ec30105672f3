"""Resolve AniDB series metadata with rate-limited, on-disk caching."""

from anidb_resolver.core.resolver import SeriesItem, SeriesResolver
from anidb_resolver.metadata.models import PersonRecord, SeriesRecord, TitlePreference

__all__ = [
    "PersonRecord",
    "SeriesItem",
    "SeriesRecord",
    "SeriesResolver",
    "TitlePreference",
]

__version__ = "0.1.0"
