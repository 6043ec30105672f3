"""CLI entrypoints for the AniDB resolver."""

from anidb_resolver.cli.series import app as series_app

__all__ = ["series_app"]
