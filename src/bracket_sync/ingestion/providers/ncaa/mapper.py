from __future__ import annotations

from collections import defaultdict
from typing import Any

from bracket_sync.domain.enums import GameStatus, Slot, SourceKind
from bracket_sync.domain.models import (
    Game,
    Region,
    Team,
    TeamSeed,
    Tournament,
)
from bracket_sync.ingestion.providers.base.errors import MalformedPayload
from bracket_sync.ingestion.providers.base.types import Json

ApiItem = dict[str, Any]

# sectionId of the National segment (Final Four + Championship).
FINAL_SECTION_ID = 6
FINAL_SECTION_TITLE = "National"
CANONICAL_REGION_ORDER = ("East", "West", "South", "Midwest")

_GAME_STATES = {
    "L": GameStatus.IN_PROGRESS,
    "F": GameStatus.FINAL,
}


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _as_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def map_team(item: Any) -> TeamSeed:
    if not isinstance(item, dict):
        return TeamSeed.tba()

    seed = _as_int(item.get("seed")) or 0
    team_id = _as_str(item.get("teamId"))
    if team_id is None:
        return TeamSeed(seed=seed, team=None, placeholder=_as_str(item.get("description")) or "TBA")

    name = _as_str(item.get("name")) or ""
    return TeamSeed(
        seed=seed,
        team=Team(id=team_id, name=name, short_name=_as_str(item.get("shortName")) or name),
        placeholder=None,
    )


def map_game(item: ApiItem) -> Game:
    position_id = _as_int(item.get("bracketPositionId"))
    if position_id is None:
        raise MalformedPayload(
            "topology game is missing bracketPositionId",
            context={"game": {k: item.get(k) for k in ("contestId", "sectionId")}},
        )

    teams = item.get("teams")
    if not isinstance(teams, list):
        teams = []

    winner: Slot | None = None
    for slot, team in zip((Slot.TOP, Slot.BOTTOM), teams):
        if isinstance(team, dict) and team.get("winner") is True and _as_str(team.get("teamId")):
            winner = slot
            break

    victor = _as_int(item.get("victorBracketPositionId"))
    game_state = item.get("gameState")

    return Game(
        id=str(position_id),
        source=SourceKind.TOPOLOGY,
        position_id=position_id,
        top=map_team(teams[0]) if len(teams) > 0 else TeamSeed.tba(),
        bottom=map_team(teams[1]) if len(teams) > 1 else TeamSeed.tba(),
        status=_GAME_STATES.get(game_state, GameStatus.SCHEDULED)
        if isinstance(game_state, str)
        else GameStatus.SCHEDULED,
        advances_to_id=str(victor) if victor is not None else None,
        winner=winner,
    )


def _region_titles(regions: Any) -> dict[int, str]:
    titles: dict[int, str] = {}
    if not isinstance(regions, list):
        return titles
    for r in regions:
        if not isinstance(r, dict):
            continue
        section_id = _as_int(r.get("sectionId"))
        if section_id is None:
            continue
        titles[section_id] = _as_str(r.get("title")) or ""
    return titles


def _ordered_section_ids(section_ids: list[int], titles: dict[int, str]) -> list[int]:
    """Canonical East/West/South/Midwest order when every title is known, else by sectionId."""

    by_title = {titles.get(sid, ""): sid for sid in section_ids}
    named = [by_title[name] for name in CANONICAL_REGION_ORDER if name in by_title]
    if len(named) == len(section_ids):
        return named
    return sorted(section_ids)


def map_championship(champ: ApiItem, *, year: int | None = None) -> Tournament:
    games = champ.get("games")
    if not isinstance(games, list):
        raise MalformedPayload("topology championship has no games list")

    champ_year = _as_int(champ.get("year")) or year or 0
    tournament = Tournament(
        id=f"ncaa-{champ_year}",
        name=_as_str(champ.get("title")) or "NCAA Tournament",
        year=champ_year,
        source=SourceKind.TOPOLOGY,
    )

    sections: dict[int, list[Game]] = defaultdict(list)
    for item in games:
        if not isinstance(item, dict):
            raise MalformedPayload("topology game entry is not an object")
        section_id = _as_int(item.get("sectionId"))
        if section_id is None:
            raise MalformedPayload(
                "topology game is missing sectionId",
                context={"bracketPositionId": item.get("bracketPositionId")},
            )
        sections[section_id].append(map_game(item))

    titles = _region_titles(champ.get("regions"))
    regular = [sid for sid in sections if sid != FINAL_SECTION_ID]

    ordered: list[tuple[int, Region]] = [
        (sid, Region(key=str(sid), title=titles.get(sid, "")))
        for sid in _ordered_section_ids(regular, titles)
    ]
    if FINAL_SECTION_ID in sections:
        ordered.append(
            (
                FINAL_SECTION_ID,
                Region(key=str(FINAL_SECTION_ID), title=FINAL_SECTION_TITLE, is_final=True),
            )
        )

    for sid, region in ordered:
        tournament.regions.append(region)
        for game in sorted(sections[sid], key=lambda g: g.position_id or 0):
            try:
                tournament.add_game(region, game.round_number or 0, game)
            except ValueError as e:
                raise MalformedPayload(str(e), context={"sectionId": sid}) from e

    return tournament


def map_bracket_payload(payload: Json, *, year: int | None = None) -> Tournament:
    """Map a topology provider bracket document into a Tournament.

    Only the first championship is used. Missing labels, team names and seeds
    degrade to placeholders; a missing games list or position id is malformed.
    """

    championships = payload.get("championships")
    if not isinstance(championships, list) or not championships:
        raise MalformedPayload("topology payload has no championships")

    champ = championships[0]
    if not isinstance(champ, dict):
        raise MalformedPayload("topology championship is not an object")

    return map_championship(champ, year=year)
