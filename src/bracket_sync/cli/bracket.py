from __future__ import annotations

import asyncio
from typing import NoReturn

import typer

from bracket_sync.cli.common import (
    engine_scope,
    format_detail,
    format_tournament,
    format_update,
    resolve_settings,
)
from bracket_sync.service.messages import (
    BracketLoaded,
    BracketUpdated,
    GameDetailLoaded,
    LoadBracket,
    Request,
    Response,
)
from bracket_sync.service.refresher import PeriodicRefresher


def _message(response: Response) -> str:
    message = getattr(response, "message", None) or getattr(response, "reason", None)
    return f"{type(response).__name__}: {message or response}"


def _fail(response: Response) -> NoReturn:
    typer.echo(_message(response), err=True)
    raise typer.Exit(code=1)


def bracket_cmd(
    bracket_json: str | None = typer.Option(
        None, "--bracket-json", help="Local snapshot to use before any network source."
    ),
    year: int | None = typer.Option(None, "--year", help="Tournament year (e.g. 2026)."),
) -> None:
    """Load the bracket through the source chain and print it."""

    async def run() -> Response:
        async with engine_scope(resolve_settings(bracket_json=bracket_json, year=year)) as engine:
            return await engine.load_bracket()

    response = asyncio.run(run())
    if not isinstance(response, BracketLoaded):
        _fail(response)

    for line in format_tournament(response.tournament):
        typer.echo(line)


def refresh_cmd(
    bracket_json: str | None = typer.Option(
        None, "--bracket-json", help="Local snapshot to use before any network source."
    ),
    year: int | None = typer.Option(None, "--year", help="Tournament year (e.g. 2026)."),
) -> None:
    """Load the bracket, run one live score refresh, and summarize what changed."""

    async def run() -> tuple[Response, Response | None]:
        async with engine_scope(resolve_settings(bracket_json=bracket_json, year=year)) as engine:
            loaded = await engine.load_bracket()
            if not isinstance(loaded, BracketLoaded):
                return loaded, None
            return loaded, await engine.refresh_scores()

    loaded, refreshed = asyncio.run(run())
    if refreshed is None:
        _fail(loaded)

    if not isinstance(refreshed, BracketUpdated):
        _fail(refreshed)

    typer.echo(format_update(refreshed))
    for warning in refreshed.warnings:
        typer.echo(f"warning: {warning}", err=True)


def watch_cmd(
    bracket_json: str | None = typer.Option(
        None, "--bracket-json", help="Local snapshot to use before any network source."
    ),
    year: int | None = typer.Option(None, "--year", help="Tournament year (e.g. 2026)."),
    ticks: int | None = typer.Option(
        None, "--ticks", min=1, help="Stop after this many refreshes (default: run until Ctrl-C)."
    ),
) -> None:
    """Load the bracket, then refresh live scores every REFRESH_INTERVAL_S seconds."""

    cfg = resolve_settings(bracket_json=bracket_json, year=year)

    async def run() -> None:
        requests: asyncio.Queue[Request | None] = asyncio.Queue()
        responses: asyncio.Queue[Response] = asyncio.Queue()

        async with engine_scope(cfg) as engine:
            worker = asyncio.create_task(engine.run(requests, responses))
            await requests.put(LoadBracket())
            refresher = PeriodicRefresher(requests=requests, interval_s=cfg.refresh_interval_s)
            ticker = asyncio.create_task(refresher.run(ticks=ticks))

            remaining = None if ticks is None else ticks + 1
            try:
                while remaining is None or remaining > 0:
                    response = await responses.get()
                    if remaining is not None:
                        remaining -= 1
                    if isinstance(response, BracketLoaded):
                        typer.echo(f"Loaded {response.tournament.name} via {response.source.value}")
                    elif isinstance(response, BracketUpdated):
                        typer.echo(format_update(response))
                    else:
                        typer.echo(_message(response), err=True)
            finally:
                ticker.cancel()
                await requests.put(None)
                await worker

    asyncio.run(run())


def detail_cmd(
    live_id: str = typer.Argument(..., help="Live provider event id."),
    bracket_id: str = typer.Option("", "--bracket-id", help="Bracket game id, for messages."),
) -> None:
    """Fetch box score and play-by-play for a live event."""

    async def run() -> Response:
        async with engine_scope(resolve_settings()) as engine:
            return await engine.load_game_detail(bracket_id or live_id, live_id)

    response = asyncio.run(run())
    if not isinstance(response, GameDetailLoaded):
        _fail(response)

    for line in format_detail(response.detail):
        typer.echo(line)
