"""Filesystem helpers for the series cache."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

__all__ = ["delete_xml_files", "staging_path", "write_atomic"]


def write_atomic(destination: Path, data: bytes) -> None:
    """Replace ``destination`` with ``data`` so readers never see a partial file."""

    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.replace(tmp_name, destination)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def delete_xml_files(directory: Path, keep: Path | None = None) -> int:
    """Delete every ``*.xml`` file below ``directory`` except ``keep``.

    A missing directory is not an error.

    Returns:
        Number of files deleted
    """

    if not directory.is_dir():
        return 0

    deleted = 0
    for path in list(directory.rglob("*.xml")):
        if keep is not None and path == keep:
            continue
        path.unlink(missing_ok=True)
        deleted += 1
    return deleted


def staging_path(destination: Path) -> Path:
    """Hidden sibling of ``destination`` that ``*.xml`` globs do not match."""
    return destination.with_name(f".{destination.name}.partial")
