"""CLI commands for resolving series and inspecting the cache."""

from __future__ import annotations

import asyncio
import importlib
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import structlog
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from anidb_resolver.cache.staleness import StalenessOracle
from anidb_resolver.core.config import Settings
from anidb_resolver.core.constants import PROVIDER_ANIDB
from anidb_resolver.core.errors import ConfigurationError, ProviderUnavailable
from anidb_resolver.core.resolver import SeriesItem, SeriesResolver
from anidb_resolver.metadata.models import SeriesRecord

app: TyperType = typer.Typer(help="Resolve AniDB series metadata.")

NameArgument = Annotated[str, typer.Argument(help="Series name as shown in the library.")]
PathOption = Annotated[
    Path | None,
    typer.Option("--path", help="Series folder; its name is used for matching."),
]
AidOption = Annotated[
    str | None,
    typer.Option("--aid", help="Known AniDB anime id."),
]
LanguageOption = Annotated[
    str | None,
    typer.Option("--language", help="Preferred metadata language (e.g. en)."),
]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", help="Emit JSON instead of a table."),
]
AidArgument = Annotated[str, typer.Argument(help="AniDB anime id.")]
SinceOption = Annotated[
    datetime,
    typer.Option("--since", help="Last refresh time of the host item (ISO 8601)."),
]
VerboseFlag = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log cache and network activity."),
]


def _configure_logging(verbose: bool) -> None:
    # stdout carries command output only
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


@app.callback()
def main(verbose: VerboseFlag = False) -> None:
    """Resolve AniDB series metadata."""
    _configure_logging(verbose)


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigurationError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc


def _render(record: SeriesRecord, console: Console) -> None:
    table = Table(title=record.name or "(untitled)", show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("ids", ", ".join(f"{k}={v}" for k, v in record.provider_ids.items()))
    table.add_row("aired", f"{record.start_date or '?'} - {record.end_date or '?'}")
    if record.community_rating is not None:
        votes = record.vote_count or 0
        table.add_row("rating", f"{record.community_rating} ({votes} votes)")
    table.add_row("studios", ", ".join(record.studios))
    table.add_row("people", str(len(record.people)))
    table.add_row("description", record.description or "")
    console.print(table)


async def _resolve(settings: Settings, item: SeriesItem) -> SeriesRecord:
    async with SeriesResolver.from_settings(settings) as resolver:
        return await resolver.find_series_info(item)


def resolve(
    name: NameArgument,
    path: PathOption = None,
    aid: AidOption = None,
    language: LanguageOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Resolve one series and print its metadata."""

    settings = _load_settings()
    item = SeriesItem(
        name=name,
        path=path,
        provider_ids={PROVIDER_ANIDB: aid} if aid else {},
        preferred_language=language,
    )

    try:
        record = asyncio.run(_resolve(settings, item))
    except ProviderUnavailable as exc:
        typer.secho(json.dumps(exc.to_dict()), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    if json_output:
        typer.echo(record.model_dump_json(indent=2))
        return
    _render(record, Console())


def needs_refresh(aid: AidArgument, since: SinceOption) -> None:
    """Print whether cached data for AID changed since --since."""

    settings = _load_settings()
    oracle = StalenessOracle(settings.data_path, settings.allow_automatic_updates)
    typer.echo("true" if oracle.needs_refresh(aid, since) else "false")


app.command("resolve")(resolve)
app.command("needs-refresh")(needs_refresh)
