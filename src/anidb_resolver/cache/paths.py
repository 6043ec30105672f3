"""Helpers for resolving on-disk cache locations.

Layout below the data root::

    anidb/series/{aid}/series.xml
    anidb/series/{aid}/episode-{number}.xml
    anidb/series/{aid}/cast.xml
"""

from __future__ import annotations

from pathlib import Path

from anidb_resolver.core.constants import (
    CACHE_PROVIDER_DIR,
    CACHE_SERIES_DIR,
    CAST_DATA_FILE,
    EPISODE_FILE_TEMPLATE,
    SERIES_DATA_FILE,
)

__all__ = [
    "cast_data_path",
    "episode_data_path",
    "series_data_dir",
    "series_data_path",
]


def series_data_dir(data_root: Path, series_id: str) -> Path:
    """Directory holding every cached file for one series.

    Raises:
        ValueError: If ``series_id`` is not a single path component
    """
    if not series_id or series_id in (".", "..") or Path(series_id).name != series_id:
        raise ValueError(f"Invalid series identifier: {series_id!r}")
    return data_root / CACHE_PROVIDER_DIR / CACHE_SERIES_DIR / series_id


def series_data_path(data_root: Path, series_id: str) -> Path:
    return series_data_dir(data_root, series_id) / SERIES_DATA_FILE


def cast_data_path(series_dir: Path) -> Path:
    return series_dir / CAST_DATA_FILE


def episode_data_path(series_dir: Path, number: str) -> Path:
    return series_dir / EPISODE_FILE_TEMPLATE.format(number=number)
