"""Tests for end-to-end series resolution."""

from pathlib import Path

import anyio
import pytest

from anidb_resolver.cache.series_cache import SeriesCache
from anidb_resolver.core.config import Settings
from anidb_resolver.core.resolver import (
    SeriesItem,
    SeriesResolver,
    StaticTitleMatcher,
    comparable_name,
)
from anidb_resolver.metadata.models import TitlePreference
from anidb_resolver.metadata.parser import SeriesParser
from anidb_resolver.metadata.providers.anidb import AniDBProvider
from anidb_resolver.metadata.rate_limit import RateLimiter


class RecordingMatcher(StaticTitleMatcher):
    def __init__(self, titles: dict[str, str]) -> None:
        super().__init__(titles)
        self.queries: list[str] = []

    async def find_series(self, name: str) -> str | None:
        self.queries.append(name)
        return await super().find_series(name)


@pytest.fixture
def make_resolver(tmp_path: Path, fake_fetcher):
    def factory(matcher=None) -> SeriesResolver:
        limiter = RateLimiter(min_interval=0.0, avg_interval=0.0, max_window=1.0)
        cache = SeriesCache(tmp_path, fake_fetcher, limiter)
        return SeriesResolver(cache, SeriesParser(), matcher=matcher)

    return factory


@pytest.mark.asyncio
async def test_known_id_is_resolved(make_resolver, fake_fetcher) -> None:
    resolver = make_resolver()
    item = SeriesItem(
        name="My Hero Academia",
        provider_ids={"AniDB": "11123"},
        preferred_language="en",
    )

    record = await resolver.find_series_info(item)

    assert fake_fetcher.calls == ["11123"]
    assert record.name == "My Hero Academia"
    assert record.provider_ids == {"AniDB": "11123", "MyAnimeList": "31964"}
    assert record.studios == ["Bones"]


@pytest.mark.asyncio
async def test_repeated_resolution_is_idempotent(make_resolver, fake_fetcher) -> None:
    resolver = make_resolver()
    item = SeriesItem(name="x", provider_ids={"AniDB": "11123"}, preferred_language="en")

    first = await resolver.find_series_info(item)
    second = await resolver.find_series_info(item)

    assert first.model_dump_json() == second.model_dump_json()
    assert fake_fetcher.calls == ["11123"]


@pytest.mark.asyncio
async def test_folder_name_match_resets_sequel_data(make_resolver) -> None:
    matcher = RecordingMatcher({"Boku no Hero Academia": "11123"})
    resolver = make_resolver(matcher)
    item = SeriesItem(
        name="My Hero Academia Season 2",
        path=Path("/library/anime/Boku no Hero Academia"),
        overview="Sequel overview from another provider",
    )

    record = await resolver.find_series_info(item)

    assert matcher.queries == ["Boku no Hero Academia"]
    assert item.name == "Boku no Hero Academia"
    assert item.overview is None
    assert record.provider_ids["AniDB"] == "11123"


@pytest.mark.asyncio
async def test_folder_name_equal_to_item_name_keeps_item(make_resolver) -> None:
    matcher = StaticTitleMatcher({"Boku no Hero Academia": "11123"})
    resolver = make_resolver(matcher)
    item = SeriesItem(
        name="boku no hero academia!",
        path=Path("/library/Boku no Hero Academia"),
        overview="Keep me",
    )

    await resolver.find_series_info(item)

    assert item.overview == "Keep me"
    assert item.name == "boku no hero academia!"


@pytest.mark.asyncio
async def test_falls_back_to_item_name(make_resolver) -> None:
    matcher = RecordingMatcher({"My Hero Academia": "11123"})
    resolver = make_resolver(matcher)
    item = SeriesItem(name="My Hero Academia", path=Path("/library/mha"), overview="x")

    record = await resolver.find_series_info(item)

    assert matcher.queries == ["mha", "My Hero Academia"]
    assert record.provider_ids["AniDB"] == "11123"
    assert item.overview == "x"


@pytest.mark.asyncio
async def test_unmatched_series_returns_empty_record(make_resolver, fake_fetcher) -> None:
    resolver = make_resolver(StaticTitleMatcher())

    record = await resolver.find_series_info(SeriesItem(name="Unknown Show"))

    assert record.provider_ids == {}
    assert record.name is None
    assert fake_fetcher.calls == []


@pytest.mark.asyncio
async def test_cancelled_before_start_does_nothing(make_resolver, fake_fetcher) -> None:
    resolver = make_resolver()
    item = SeriesItem(name="x", provider_ids={"AniDB": "11123"})

    with anyio.CancelScope() as scope:
        scope.cancel()
        await resolver.find_series_info(item)

    assert scope.cancelled_caught
    assert fake_fetcher.calls == []


@pytest.mark.asyncio
async def test_from_settings_wires_collaborators(tmp_path: Path) -> None:
    settings = Settings(data_path=tmp_path, title_preference=TitlePreference.ROMAJI)
    provider = AniDBProvider(client_name="tester")

    async with SeriesResolver.from_settings(settings, provider=provider) as resolver:
        assert resolver.cache.data_root == tmp_path
        assert resolver.parser.title_preference is TitlePreference.ROMAJI

    # Injected providers stay open for their owner
    assert not provider._client.is_closed
    await provider.aclose()


def test_comparable_name() -> None:
    assert comparable_name("Boku no Hero Academia!") == "bokunoheroacademia"
    assert comparable_name("Pokémon") == "pokemon"
