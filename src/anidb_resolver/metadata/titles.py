"""Display title selection over AniDB title candidates.

AniDB lists every known title of a series with a language tag and a type
(``main``, ``official``, ``synonym``, ...). Selection walks a fixed precedence
list and returns the first candidate that matches, in document order, so the
result is stable across runs for the same document.
"""

from collections.abc import Sequence

from anidb_resolver.core.constants import (
    LANGUAGE_JAPANESE,
    LANGUAGE_ROMANIZED,
    TITLE_TYPE_ALTERNATE,
    TITLE_TYPE_OFFICIAL,
    TITLE_TYPE_PRIMARY,
)
from anidb_resolver.metadata.models import TitleCandidate, TitlePreference

__all__ = ["select_title"]

_TYPE_PRECEDENCE = (TITLE_TYPE_PRIMARY, TITLE_TYPE_OFFICIAL, TITLE_TYPE_ALTERNATE)


def _first(
    candidates: Sequence[TitleCandidate],
    language: str | None = None,
    title_type: str | None = None,
) -> TitleCandidate | None:
    for candidate in candidates:
        if language is not None and candidate.language != language:
            continue
        if title_type is not None and candidate.type != title_type:
            continue
        return candidate
    return None


def _in_language(
    candidates: Sequence[TitleCandidate], language: str
) -> TitleCandidate | None:
    for title_type in _TYPE_PRECEDENCE:
        match = _first(candidates, language=language, title_type=title_type)
        if match is not None:
            return match
    return None


def select_title(
    candidates: Sequence[TitleCandidate],
    preference: TitlePreference,
    language: str | None,
) -> TitleCandidate | None:
    """Pick the display title for a series.

    Args:
        candidates: Titles in document order
        preference: Configured title policy
        language: Requested metadata language (e.g. ``en``)

    Returns:
        The selected candidate, or None when there are no candidates at all
    """
    if preference is TitlePreference.LOCALIZED and language:
        localized = _in_language(candidates, language)
        if localized is not None:
            return localized

    if preference is TitlePreference.JAPANESE:
        japanese = _in_language(candidates, LANGUAGE_JAPANESE)
        if japanese is not None:
            return japanese

    # Romanized main title, then any main title, then whatever comes first
    return (
        _first(candidates, language=LANGUAGE_ROMANIZED, title_type=TITLE_TYPE_PRIMARY)
        or _first(candidates, title_type=TITLE_TYPE_PRIMARY)
        or _first(candidates)
    )
