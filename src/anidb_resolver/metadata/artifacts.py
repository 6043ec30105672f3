"""Derived cache files split out of a freshly downloaded anime document.

Produces, next to ``series.xml``:
- ``episode-{epno}.xml`` for every episode with a usable ``epno``
- ``cast.xml`` aggregating performers and non-studio creators

The episode-level provider reads these files instead of re-parsing the whole
series document.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from anidb_resolver.cache.files import write_atomic
from anidb_resolver.cache.paths import cast_data_path, episode_data_path
from anidb_resolver.core.constants import IMAGE_BASE_URL, STUDIO_CREATOR_TYPE
from anidb_resolver.metadata.models import CastEntry, CastList

__all__ = ["ArtifactSplitter", "SplitResult"]

logger = structlog.get_logger(__name__)

_CAPTURED = frozenset({"episode", "characters", "creators"})


@dataclass
class SplitResult:
    """Summary of one split run.

    Attributes:
        episodes: Episode numbers written, in document order
        skipped_episodes: Episodes without a usable number
        cast_count: Entries written to ``cast.xml``
    """

    episodes: list[str] = field(default_factory=list)
    skipped_episodes: int = 0
    cast_count: int = 0


def _text(element: ET.Element | None) -> str | None:
    if element is None or element.text is None:
        return None
    value = element.text.strip()
    return value or None


def episode_number(episode: ET.Element) -> str | None:
    """Return the episode's declared ``epno`` if it is a usable file name part."""
    for epno in episode.findall("epno"):
        value = _text(epno)
        if value is None:
            continue
        if value in (".", "..") or Path(value).name != value:
            return None
        return value
    return None


def cast_from_characters(characters: ET.Element) -> list[CastEntry]:
    """Performer entries (with their character as role) from a ``characters`` section."""
    entries: list[CastEntry] = []
    for character in characters.iter("character"):
        performer = character.find("seiyuu")
        name = _text(performer)
        if performer is None or name is None:
            continue

        picture = performer.get("picture")
        entries.append(
            CastEntry(
                name=name,
                id=performer.get("id") or None,
                image=f"{IMAGE_BASE_URL}{picture}" if picture else None,
                role=_text(character.find("name")),
            )
        )
    return entries


def cast_from_creators(creators: ET.Element) -> list[CastEntry]:
    """Creator entries from a ``creators`` section, minus the studio."""
    entries: list[CastEntry] = []
    for creator in creators.iter("name"):
        if creator.get("type") == STUDIO_CREATOR_TYPE:
            continue
        name = _text(creator)
        if name is None:
            continue
        entries.append(CastEntry(name=name, id=creator.get("id") or None))
    return entries


class ArtifactSplitter:
    """Writes per-episode files and the consolidated cast file."""

    def split(self, document_path: Path) -> SplitResult:
        """Split ``document_path`` into artifacts in the same directory.

        Malformed XML stops the pass early; artifacts found before the error
        are still written.
        """
        series_dir = document_path.parent
        result = SplitResult()
        cast = CastList()
        log = logger.bind(series_dir=str(series_dir))

        capturing: ET.Element | None = None
        try:
            for event, elem in ET.iterparse(document_path, events=("start", "end")):
                if event == "start":
                    if capturing is None and elem.tag in _CAPTURED:
                        capturing = elem
                    continue

                if capturing is None:
                    elem.clear()
                    continue
                if elem is not capturing:
                    continue

                if elem.tag == "episode":
                    self._save_episode(series_dir, elem, result)
                elif elem.tag == "characters":
                    cast.cast.extend(cast_from_characters(elem))
                else:
                    cast.cast.extend(cast_from_creators(elem))
                elem.clear()
                capturing = None
        except ET.ParseError as exc:
            log.warning("anidb.split.malformed_document", error=str(exc))

        write_atomic(cast_data_path(series_dir), cast.to_xml())
        result.cast_count = len(cast.cast)
        log.info(
            "anidb.split.done",
            episodes=len(result.episodes),
            skipped=result.skipped_episodes,
            cast=result.cast_count,
        )
        return result

    def _save_episode(
        self, series_dir: Path, episode: ET.Element, result: SplitResult
    ) -> None:
        number = episode_number(episode)
        if number is None:
            result.skipped_episodes += 1
            return

        episode.tail = None
        data = ET.tostring(episode, encoding="utf-8", xml_declaration=True)
        try:
            write_atomic(episode_data_path(series_dir, number), data)
        except OSError as exc:
            # e.g. an epno too long for a file name
            logger.warning(
                "anidb.split.episode_write_failed",
                series_dir=str(series_dir),
                epno=number[:64],
                error=str(exc),
            )
            result.skipped_episodes += 1
            return
        result.episodes.append(number)
