"""Core constants for the AniDB resolver.

This module collects the AniDB-specific values the resolver depends on:
- HTTP API endpoint and client identity defaults
- Cache layout and staleness policy
- Lookup tables observed in AniDB ``anime`` documents
"""

# ============================================================================
# HTTP API
# ============================================================================

#: Query template for a single anime document
SERIES_QUERY_URL: str = (
    "http://api.anidb.net:9001/httpapi"
    "?request=anime&client={client}&clientver={version}&protover=1&aid={aid}"
)

#: Registered client name sent with every request
DEFAULT_CLIENT_NAME: str = "anidbresolver"

#: Registered client version sent with every request
DEFAULT_CLIENT_VERSION: str = "1"

#: Base URL for performer pictures referenced by ``picture`` attributes
IMAGE_BASE_URL: str = "http://img7.anidb.net/pics/anime/"

#: Timeout for provider API calls in seconds
PROVIDER_TIMEOUT: float = 30.0

# ============================================================================
# Rate limiting
# ============================================================================

#: AniDB bans clients that request more than once every 2 seconds; stay above.
MIN_REQUEST_INTERVAL: float = 3.0

#: Target average spacing between requests (seconds)
AVG_REQUEST_INTERVAL: float = 5.0

#: Sliding window used to bound bursts (seconds)
RATE_LIMIT_WINDOW: float = 300.0

# ============================================================================
# Cache layout
# ============================================================================

#: Directory names below the data root: {root}/anidb/series/{aid}/
CACHE_PROVIDER_DIR: str = "anidb"
CACHE_SERIES_DIR: str = "series"

#: Raw series document file name
SERIES_DATA_FILE: str = "series.xml"

#: Aggregated cast file name
CAST_DATA_FILE: str = "cast.xml"

#: Per-episode file name template
EPISODE_FILE_TEMPLATE: str = "episode-{number}.xml"

#: Days after which a cached series document is re-fetched
DEFAULT_STALE_DAYS: int = 7

# ============================================================================
# Document vocabulary
# ============================================================================

#: Provider keys used in ``SeriesRecord.provider_ids``
PROVIDER_ANIDB: str = "AniDB"
PROVIDER_MYANIMELIST: str = "MyAnimeList"

#: Attribute name ElementTree uses for ``xml:lang``
XML_LANG_ATTRIBUTE: str = "{http://www.w3.org/XML/1998/namespace}lang"

#: Title types, most to least authoritative
TITLE_TYPE_PRIMARY: str = "main"
TITLE_TYPE_OFFICIAL: str = "official"
TITLE_TYPE_ALTERNATE: str = "synonym"

#: Language tags with a dedicated role in title selection
LANGUAGE_JAPANESE: str = "ja"
LANGUAGE_ROMANIZED: str = "x-jat"

#: ``resource`` type codes mapped to cross-reference provider keys
RESOURCE_TYPE_PROVIDERS: dict[str, str] = {
    "2": PROVIDER_MYANIMELIST,
}

#: Creator type that names the animation studio rather than a person
STUDIO_CREATOR_TYPE: str = "Animation Work"

#: Normalized person types
PERSON_TYPE_ACTOR: str = "Actor"
PERSON_TYPE_DIRECTOR: str = "Director"
PERSON_TYPE_COMPOSER: str = "Composer"

#: Creator ``type`` attribute values mapped to normalized person types
CREATOR_TYPE_MAPPINGS: dict[str, str] = {
    "Direction": PERSON_TYPE_DIRECTOR,
    "Music": PERSON_TYPE_COMPOSER,
    "Chief Animation Direction": "Chief Animation Director",
}
