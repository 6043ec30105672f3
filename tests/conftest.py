"""Pytest configuration and fixtures for the AniDB resolver tests."""

import gzip
from pathlib import Path

import pytest
import structlog

SAMPLE_ANIME_XML = """<?xml version="1.0" encoding="UTF-8"?>
<anime id="11123" restricted="false">
  <type>TV Series</type>
  <episodecount>2</episodecount>
  <startdate>2016-04-03</startdate>
  <enddate>2016-06-26</enddate>
  <titles>
    <title xml:lang="x-jat" type="main">Boku no Hero Academia</title>
    <title xml:lang="en" type="synonym">BNHA</title>
    <title xml:lang="en" type="official">My Hero Academia</title>
    <title xml:lang="ja" type="official">僕のヒーローアカデミア</title>
  </titles>
  <creators>
    <name id="4303" type="Direction">Nagasaki Kenji</name>
    <name id="8851" type="Music">Hayashi Yuuki</name>
    <name id="1200" type="Original Work">Horikoshi Kouhei</name>
    <name id="7" type="Animation Work">Bones</name>
  </creators>
  <description>Based on the manga by http://anidb.net/cr1200 [Horikoshi Kouhei].</description>
  <ratings>
    <permanent count="8127">8.15</permanent>
    <temporary count="8203">8.17</temporary>
  </ratings>
  <resources>
    <resource type="1">
      <externalentity><identifier>11123</identifier></externalentity>
    </resource>
    <resource type="2">
      <externalentity><identifier>31964</identifier></externalentity>
      <externalentity><identifier>99999</identifier></externalentity>
    </resource>
  </resources>
  <tags>
    <tag id="36" weight="600">
      <name>superpowers</name>
      <description>Tag description must not become the series description.</description>
    </tag>
  </tags>
  <characters>
    <character id="1" type="main character in">
      <name>Midoriya Izuku</name>
      <description>Character description.</description>
      <seiyuu id="500" picture="123.jpg">Yamashita Daiki</seiyuu>
    </character>
    <character id="2" type="secondary cast in">
      <name>Bakugou Katsuki</name>
      <seiyuu id="501">Okamoto Nobuhiko</seiyuu>
    </character>
    <character id="3" type="appears in">
      <name>Nameless Extra</name>
    </character>
  </characters>
  <episodes>
    <episode id="1001" update="2016-04-04">
      <epno type="1">1</epno>
      <length>25</length>
      <title xml:lang="en">Izuku Midoriya: Origin</title>
    </episode>
    <episode id="1002" update="2016-04-11">
      <epno type="1">2</epno>
      <length>25</length>
      <title xml:lang="en">What It Takes to Be a Hero</title>
    </episode>
    <episode id="1003">
      <length>25</length>
    </episode>
  </episodes>
</anime>
"""


def write_document(directory: Path, xml: str = SAMPLE_ANIME_XML) -> Path:
    """Write an anime document as ``series.xml`` in ``directory``."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "series.xml"
    path.write_text(xml, encoding="utf-8")
    return path


class FakeFetcher:
    """Document fetcher that counts calls and returns gzip-free XML bytes."""

    def __init__(self, xml: str = SAMPLE_ANIME_XML) -> None:
        self.xml = xml
        self.calls: list[str] = []

    async def fetch_series_document(self, anime_id: str) -> bytes:
        self.calls.append(anime_id)
        return self.xml.encode("utf-8")


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo global logging configuration made by CLI tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def sample_xml() -> str:
    return SAMPLE_ANIME_XML


@pytest.fixture
def sample_gzip() -> bytes:
    return gzip.compress(SAMPLE_ANIME_XML.encode("utf-8"))


@pytest.fixture
def sample_document(tmp_path: Path) -> Path:
    return write_document(tmp_path / "anidb" / "series" / "11123")


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def fetcher_factory() -> type[FakeFetcher]:
    return FakeFetcher


@pytest.fixture
def document_writer():
    return write_document
