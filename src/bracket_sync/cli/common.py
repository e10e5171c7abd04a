from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from bracket_sync.core.config import Settings, settings
from bracket_sync.core.logging import configure_logging
from bracket_sync.domain.models import Game, GameDetail, Tournament
from bracket_sync.service.engine import BracketSyncEngine
from bracket_sync.service.messages import BracketUpdated


def resolve_settings(*, bracket_json: str | None = None, year: int | None = None) -> Settings:
    update: dict[str, object] = {}
    if bracket_json:
        update["bracket_json"] = bracket_json
    if year:
        update["tournament_year"] = year
    return settings.model_copy(update=update) if update else settings


@asynccontextmanager
async def engine_scope(cfg: Settings) -> AsyncIterator[BracketSyncEngine]:
    """
    Engine for a single CLI command.
    Ensures the underlying HTTP clients are closed.
    """
    configure_logging(cfg.log_level)
    engine = BracketSyncEngine.from_settings(cfg)
    try:
        yield engine
    finally:
        await engine.aclose()


def format_game(game: Game) -> str:
    def side(index: int) -> str:
        seed = game.top if index == 0 else game.bottom
        prefix = f"({seed.seed}) " if seed.seed else ""
        score = f" {game.score[index]}" if game.score is not None else ""
        return f"{prefix}{seed.display_name}{score}"

    live = f"live={game.live_id}" if game.live_id else "unbridged"
    return f"[{game.id}] {side(0)} vs {side(1)}  {game.status.value}  {live}"


def format_tournament(tournament: Tournament) -> list[str]:
    lines = [f"{tournament.name} ({tournament.year}) via {tournament.source.value}"]
    for region in tournament.regions:
        lines.append(f"{region.label}:")
        for r in region.rounds:
            lines.append(f"  {r.label}:")
            for game_id in r.game_ids:
                lines.append(f"    {format_game(tournament.games[game_id])}")
    return lines


def format_detail(detail: GameDetail) -> list[str]:
    lines = [f"Game {detail.live_id}: {len(detail.plays)} plays"]
    for box in (detail.home_box, detail.away_box):
        name = box.team.name if box.team is not None else "Unknown"
        lines.append(f"{name}: {box.totals.points} pts")
        for p in sorted(box.players, key=lambda p: p.points, reverse=True)[:5]:
            lines.append(f"  {p.name}: {p.points} pts {p.rebounds} reb {p.assists} ast")
    return lines


def format_update(update: BracketUpdated) -> str:
    return " ".join(
        [
            f"Refreshed #{update.stamp}:",
            f"bridged={update.bridged}",
            f"changed={len(update.changed)}",
            f"advanced={len(update.advanced)}",
            f"dropped={len(update.dropped)}",
            f"warnings={len(update.warnings)}",
        ]
    )
