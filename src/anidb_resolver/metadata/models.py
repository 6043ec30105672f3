"""Pydantic models for resolved series metadata.

These models define the data produced by the resolver:
- SeriesRecord: Everything parsed from one AniDB anime document
- PersonRecord: A creator or cast member attached to a series
- TitleCandidate: One entry of the document's title list
- CastList/CastEntry: The consolidated cast cache written next to the document

Fields that could not be parsed stay ``None`` so that a host merging the record
never overwrites known data with a falsely empty value.
"""

import xml.etree.ElementTree as ET
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_serializer

#: Element names of a serialized cast entry, paired with model attributes
_CAST_FIELDS = (("Name", "name"), ("Id", "id"), ("Image", "image"), ("Role", "role"))


class TitlePreference(str, Enum):
    """Display title policy.

    Attributes:
        LOCALIZED: Prefer a title in the requested metadata language
        JAPANESE: Prefer the Japanese-script title
        ROMAJI: Use the romanized main title
    """

    LOCALIZED = "localized"
    JAPANESE = "japanese"
    ROMAJI = "romaji"


class TitleCandidate(BaseModel):
    """One (language, type, text) triple from a ``titles`` section."""

    language: str | None = None
    type: str | None = None
    text: str

    model_config = {"frozen": True}


class PersonRecord(BaseModel):
    """A person credited on the series.

    Attributes:
        name: Display name, word order already normalized
        type: Normalized role category (Director, Composer, Actor, ...)
        role: Character name, set for cast entries only
    """

    name: str
    type: str
    role: str | None = None


class SeriesRecord(BaseModel):
    """Typed metadata for one series."""

    name: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    description: str | None = None
    community_rating: float | None = Field(default=None, ge=0.0, le=10.0)
    vote_count: int | None = Field(default=None, ge=0)
    studios: list[str] = Field(default_factory=list)
    people: list[PersonRecord] = Field(default_factory=list)
    provider_ids: dict[str, str] = Field(default_factory=dict)

    def add_studio(self, studio: str) -> None:
        """Add a studio name unless it is already present."""
        if studio not in self.studios:
            self.studios.append(studio)

    @field_serializer("start_date", "end_date")
    def serialize_date(self, value: datetime | None) -> str | None:
        """Serialize dates as ISO 8601 strings."""
        return value.isoformat() if value is not None else None


class CastEntry(BaseModel):
    """One person in the consolidated cast cache."""

    name: str
    id: str | None = None
    image: str | None = None
    role: str | None = None


class CastList(BaseModel):
    """Consolidated cast cache, serialized to ``cast.xml``."""

    cast: list[CastEntry] = Field(default_factory=list)

    def to_xml(self) -> bytes:
        """Serialize to a stable XML document (UTF-8, with declaration)."""
        root = ET.Element("CastList")
        container = ET.SubElement(root, "Cast")
        for entry in self.cast:
            person = ET.SubElement(container, "Person")
            for tag, attr in _CAST_FIELDS:
                value = getattr(entry, attr)
                if value is not None:
                    ET.SubElement(person, tag).text = value
        ET.indent(root)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)

    @classmethod
    def from_xml(cls, data: bytes | str) -> "CastList":
        """Load a cast list previously written by :meth:`to_xml`."""
        root = ET.fromstring(data)
        entries: list[CastEntry] = []
        for person in root.iter("Person"):
            values = {attr: person.findtext(tag) for tag, attr in _CAST_FIELDS}
            if values["name"]:
                entries.append(CastEntry(**values))
        return cls(cast=entries)
