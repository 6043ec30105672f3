"""Tests for resolver data models."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from anidb_resolver.metadata.models import (
    CastEntry,
    CastList,
    PersonRecord,
    SeriesRecord,
    TitlePreference,
)


def test_series_record_defaults_are_empty() -> None:
    record = SeriesRecord()

    assert record.name is None
    assert record.studios == []
    assert record.people == []
    assert record.provider_ids == {}


def test_add_studio_ignores_duplicates() -> None:
    record = SeriesRecord()
    record.add_studio("Bones")
    record.add_studio("Madhouse")
    record.add_studio("Bones")

    assert record.studios == ["Bones", "Madhouse"]


def test_rating_must_be_within_scale() -> None:
    with pytest.raises(ValidationError):
        SeriesRecord(community_rating=11.0)
    with pytest.raises(ValidationError):
        SeriesRecord(vote_count=-1)


def test_dates_serialize_as_iso() -> None:
    record = SeriesRecord(start_date=datetime(2016, 4, 3, tzinfo=UTC))

    dumped = record.model_dump(mode="json")

    assert dumped["start_date"] == "2016-04-03T00:00:00+00:00"
    assert dumped["end_date"] is None


def test_person_record_role_is_optional() -> None:
    person = PersonRecord(name="Kenji Nagasaki", type="Director")
    assert person.role is None


def test_title_preference_values() -> None:
    assert TitlePreference("romaji") is TitlePreference.ROMAJI
    assert TitlePreference.LOCALIZED == "localized"


def test_cast_list_xml_layout() -> None:
    cast = CastList(
        cast=[
            CastEntry(name="Yamashita Daiki", id="26045", image="x.jpg", role="Midoriya"),
            CastEntry(name="Bones", id=None, image=None, role="Animation Work"),
        ]
    )

    data = cast.to_xml()

    assert data.startswith(b"<?xml")
    assert b"<CastList>" in data
    assert b"<Name>Yamashita Daiki</Name>" in data
    assert b"<Role>Midoriya</Role>" in data
    # Missing values produce no element
    assert data.count(b"<Id>") == 1


def test_cast_list_reads_written_document() -> None:
    original = CastList(cast=[CastEntry(name="Hayashi Yuuki", id="1", image=None, role="Music")])

    loaded = CastList.from_xml(original.to_xml())

    assert loaded == original


def test_cast_list_skips_nameless_people() -> None:
    xml = "<CastList><Cast><Person><Id>3</Id></Person></Cast></CastList>"
    assert CastList.from_xml(xml).cast == []
