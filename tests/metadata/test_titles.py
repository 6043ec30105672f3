"""Tests for display title selection."""

import pytest

from anidb_resolver.metadata.models import TitleCandidate, TitlePreference
from anidb_resolver.metadata.titles import select_title


def _title(language: str | None, title_type: str | None, text: str) -> TitleCandidate:
    return TitleCandidate(language=language, type=title_type, text=text)


@pytest.fixture
def candidates() -> list[TitleCandidate]:
    return [
        _title("x-jat", "main", "Shingeki no Kyojin"),
        _title("en", "synonym", "AoT"),
        _title("en", "official", "Attack on Titan"),
        _title("ja", "official", "進撃の巨人"),
        _title("de", "official", "Attack on Titan (DE)"),
    ]


def test_localized_prefers_main_in_requested_language() -> None:
    titles = [
        _title("en", "synonym", "alt"),
        _title("en", "main", "primary"),
        _title("ja", "main", "japanese"),
    ]

    selected = select_title(titles, TitlePreference.LOCALIZED, "en")

    assert selected == titles[1]


def test_localized_falls_back_official_then_synonym(candidates) -> None:
    assert select_title(candidates, TitlePreference.LOCALIZED, "en").text == "Attack on Titan"

    only_synonym = [candidates[0], candidates[1]]
    assert select_title(only_synonym, TitlePreference.LOCALIZED, "en").text == "AoT"


def test_localized_unknown_language_uses_romanized_main(candidates) -> None:
    selected = select_title(candidates, TitlePreference.LOCALIZED, "fr")
    assert selected.text == "Shingeki no Kyojin"


def test_localized_without_language_uses_romanized_main(candidates) -> None:
    selected = select_title(candidates, TitlePreference.LOCALIZED, None)
    assert selected.text == "Shingeki no Kyojin"


def test_japanese_preference(candidates) -> None:
    selected = select_title(candidates, TitlePreference.JAPANESE, "en")
    assert selected.text == "進撃の巨人"


def test_japanese_preference_falls_back_when_missing() -> None:
    titles = [_title("en", "official", "English"), _title("x-jat", "main", "Romaji")]
    selected = select_title(titles, TitlePreference.JAPANESE, "en")
    assert selected.text == "Romaji"


def test_romaji_ignores_requested_language(candidates) -> None:
    selected = select_title(candidates, TitlePreference.ROMAJI, "en")
    assert selected.text == "Shingeki no Kyojin"


def test_romaji_single_romanized_candidate() -> None:
    titles = [_title("x-jat", "main", "Example")]
    assert select_title(titles, TitlePreference.ROMAJI, "en").text == "Example"


def test_any_main_title_when_no_romanized_main() -> None:
    titles = [_title("en", "synonym", "Alt"), _title("zh", "main", "Main")]
    assert select_title(titles, TitlePreference.ROMAJI, None).text == "Main"


def test_first_candidate_is_last_resort() -> None:
    titles = [_title("en", "synonym", "First"), _title("fr", "synonym", "Second")]
    assert select_title(titles, TitlePreference.ROMAJI, None).text == "First"


def test_empty_candidates_returns_none() -> None:
    assert select_title([], TitlePreference.LOCALIZED, "en") is None


def test_selection_is_deterministic(candidates) -> None:
    results = {
        select_title(candidates, preference, "en")
        for preference in TitlePreference
        for _ in range(5)
    }
    assert len(results) == 3
