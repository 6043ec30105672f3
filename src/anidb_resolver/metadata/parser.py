"""Streaming extraction of a SeriesRecord from a cached AniDB anime document.

The document is read once with ``iterparse``. Each recognized section is
handed to its handler as a complete subtree and then discarded; everything
else is walked through (so recognized elements nested in unknown wrappers are
still found) and dropped. Parsing is tolerant: a field that fails to parse is
left unset, an incomplete entry is skipped, and a truncated document yields
whatever was read before the error.
"""

import re
import xml.etree.ElementTree as ET
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import structlog

from anidb_resolver.core.constants import (
    CREATOR_TYPE_MAPPINGS,
    PERSON_TYPE_ACTOR,
    RESOURCE_TYPE_PROVIDERS,
    STUDIO_CREATOR_TYPE,
    XML_LANG_ATTRIBUTE,
)
from anidb_resolver.metadata.models import (
    PersonRecord,
    SeriesRecord,
    TitleCandidate,
    TitlePreference,
)
from anidb_resolver.metadata.names import normalize_person_name
from anidb_resolver.metadata.titles import select_title

__all__ = ["SeriesParser", "parse_date", "strip_links"]

logger = structlog.get_logger(__name__)

#: AniDB embeds links as "http://anidb.net/ch123 [Display Name]"
_LINK_PATTERN = re.compile(r"https?://[^\s\[\]]+ \[(?P<name>[^\]]*)\]")
_DECIMAL_PATTERN = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_MAX_RATING = 10.0

_Handler = Callable[[SeriesRecord, ET.Element, str | None], None]


def strip_links(text: str) -> str:
    """Replace embedded AniDB links with their display names."""
    return _LINK_PATTERN.sub(r"\g<name>", text)


def parse_date(text: str | None) -> datetime | None:
    """Parse an AniDB date (``YYYY-MM-DD``, ``YYYY-MM`` or ISO 8601) as UTC.

    Returns None for blank or unparsable input. Naive values are taken as UTC.
    """
    if text is None or not text.strip():
        return None

    value = text.strip()
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        try:
            parsed = datetime.strptime(value, "%Y-%m")
        except ValueError:
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _parse_rating(text: str | None) -> float | None:
    if text is None or not _DECIMAL_PATTERN.fullmatch(text.strip()):
        return None
    rating = float(text.strip())
    if rating > _MAX_RATING:
        return None
    return rating


def _parse_count(text: str | None) -> int | None:
    if text is None:
        return None
    try:
        count = int(text.strip().replace(",", ""))
    except ValueError:
        return None
    return count if count >= 0 else None


def _element_text(element: ET.Element | None) -> str:
    if element is None:
        return ""
    return "".join(element.itertext()).strip()


class SeriesParser:
    """Builds a SeriesRecord from ``series.xml``."""

    def __init__(self, title_preference: TitlePreference = TitlePreference.LOCALIZED):
        self.title_preference = title_preference
        self._handlers: dict[str, _Handler] = {
            "startdate": self._parse_start_date,
            "enddate": self._parse_end_date,
            "titles": self._parse_titles,
            "creators": self._parse_creators,
            "description": self._parse_description,
            "ratings": self._parse_ratings,
            "resources": self._parse_resources,
            "characters": self._parse_characters,
            # Tags and categories are not mapped; recognizing them keeps their
            # nested descriptions from being taken as the series description.
            "tags": self._skip,
            "categories": self._skip,
        }

    def parse(
        self,
        document_path: Path,
        preferred_language: str | None = None,
        record: SeriesRecord | None = None,
    ) -> SeriesRecord:
        """Parse a cached anime document.

        Args:
            document_path: Path to ``series.xml``
            preferred_language: Metadata language used for title selection
            record: Optional record to populate in place

        Returns:
            The populated record
        """
        record = record if record is not None else SeriesRecord()

        active: ET.Element | None = None
        try:
            for event, elem in ET.iterparse(document_path, events=("start", "end")):
                if event == "start":
                    if active is None and elem.tag in self._handlers:
                        active = elem
                    continue

                if active is None:
                    elem.clear()
                elif elem is active:
                    self._handlers[elem.tag](record, elem, preferred_language)
                    elem.clear()
                    active = None
        except ET.ParseError as exc:
            logger.warning(
                "anidb.parse.malformed_document",
                path=str(document_path),
                error=str(exc),
            )

        return record

    def _parse_start_date(
        self, record: SeriesRecord, elem: ET.Element, language: str | None
    ) -> None:
        parsed = parse_date(elem.text)
        if parsed is not None:
            record.start_date = parsed

    def _parse_end_date(
        self, record: SeriesRecord, elem: ET.Element, language: str | None
    ) -> None:
        parsed = parse_date(elem.text)
        if parsed is not None:
            record.end_date = parsed

    def _parse_titles(
        self, record: SeriesRecord, elem: ET.Element, language: str | None
    ) -> None:
        candidates = [
            TitleCandidate(
                language=title.get(XML_LANG_ATTRIBUTE),
                type=title.get("type"),
                text=_element_text(title),
            )
            for title in elem.iter("title")
        ]

        selected = select_title(candidates, self.title_preference, language)
        if selected is not None and selected.text:
            record.name = selected.text

    def _parse_creators(
        self, record: SeriesRecord, elem: ET.Element, language: str | None
    ) -> None:
        for creator in elem.iter("name"):
            name = _element_text(creator)
            creator_type = creator.get("type")
            if not name or not creator_type:
                continue

            if creator_type == STUDIO_CREATOR_TYPE:
                record.add_studio(name)
            else:
                record.people.append(
                    PersonRecord(
                        name=normalize_person_name(name),
                        type=CREATOR_TYPE_MAPPINGS.get(creator_type, creator_type),
                    )
                )

    def _parse_description(
        self, record: SeriesRecord, elem: ET.Element, language: str | None
    ) -> None:
        if record.description:
            return
        text = strip_links(_element_text(elem))
        if text:
            record.description = text

    def _parse_ratings(
        self, record: SeriesRecord, elem: ET.Element, language: str | None
    ) -> None:
        for permanent in elem.iter("permanent"):
            count = _parse_count(permanent.get("count"))
            if count is not None:
                record.vote_count = count

            rating = _parse_rating(permanent.text)
            if rating is not None:
                record.community_rating = rating

    def _parse_resources(
        self, record: SeriesRecord, elem: ET.Element, language: str | None
    ) -> None:
        for resource in elem.iter("resource"):
            provider = RESOURCE_TYPE_PROVIDERS.get(resource.get("type", ""))
            if provider is None or provider in record.provider_ids:
                continue

            for identifier in resource.iter("identifier"):
                value = _element_text(identifier)
                if value:
                    record.provider_ids[provider] = value
                    break

    def _parse_characters(
        self, record: SeriesRecord, elem: ET.Element, language: str | None
    ) -> None:
        for character in elem.iter("character"):
            role = _element_text(character.find("name"))
            performer = _element_text(character.find("seiyuu"))
            if not role or not performer:
                continue

            record.people.append(
                PersonRecord(
                    name=normalize_person_name(performer),
                    type=PERSON_TYPE_ACTOR,
                    role=role,
                )
            )

    def _skip(self, record: SeriesRecord, elem: ET.Element, language: str | None) -> None:
        return None
