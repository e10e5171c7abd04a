from __future__ import annotations

from typing import Any

import pytest

from bracket_sync.domain.enums import GameStatus, Slot, SourceKind
from bracket_sync.ingestion.providers.base.errors import MalformedPayload
from bracket_sync.ingestion.providers.ncaa.mapper import map_bracket_payload


def _team(team_id: str, name: str, seed: int, *, winner: bool = False) -> dict[str, Any]:
    return {"teamId": team_id, "name": name, "shortName": name, "seed": seed, "winner": winner}


def _game(
    position_id: int,
    section_id: int,
    *,
    teams: list[dict[str, Any]] | None = None,
    victor: int | None = None,
    state: str = "P",
) -> dict[str, Any]:
    return {
        "contestId": 1000 + position_id,
        "bracketPositionId": position_id,
        "sectionId": section_id,
        "victorBracketPositionId": victor,
        "gameState": state,
        "teams": teams or [],
    }


def _payload(
    games: list[dict[str, Any]], regions: list[dict[str, Any]] | None = None
) -> dict[str, Any]:
    return {
        "championships": [
            {
                "title": "2026 DI Men's Basketball Championship",
                "year": 2026,
                "games": games,
                "regions": regions or [],
            }
        ]
    }


def test_round_number_is_position_id_divided_by_100() -> None:
    games = [_game(pid, 1) for pid in range(100, 800)]
    tournament = map_bracket_payload(_payload(games))

    assert len(tournament.games) == 700
    region = tournament.regions[0]
    for r in region.rounds:
        for game_id in r.game_ids:
            assert int(game_id) // 100 == r.number
            assert tournament.games[game_id].round_number == r.number
    assert [r.number for r in region.rounds] == [1, 2, 3, 4, 5, 6, 7]


def test_empty_region_titles_fall_back_to_section_labels() -> None:
    games = [_game(201 + sid, sid) for sid in (1, 2, 3, 4)] + [_game(601, 6)]
    regions = [{"sectionId": sid, "title": ""} for sid in (1, 2, 3, 4)]

    tournament = map_bracket_payload(_payload(games, regions))

    assert [r.label for r in tournament.regions] == [
        "Region 1",
        "Region 2",
        "Region 3",
        "Region 4",
        "National",
    ]
    assert tournament.final is tournament.regions[-1]
    assert tournament.final.is_final


def test_populated_region_titles_are_used_in_canonical_order() -> None:
    games = [_game(201 + sid, sid) for sid in (1, 2, 3, 4)] + [_game(601, 6), _game(701, 6)]
    regions = [
        {"sectionId": 1, "title": "South"},
        {"sectionId": 2, "title": "East"},
        {"sectionId": 3, "title": "Midwest"},
        {"sectionId": 4, "title": "West"},
    ]

    tournament = map_bracket_payload(_payload(games, regions))

    assert [r.label for r in tournament.regions] == ["East", "West", "South", "Midwest", "National"]
    final = tournament.regions[-1]
    assert [r.label for r in final.rounds] == ["Final Four", "Championship"]


def test_unknown_titles_keep_section_order() -> None:
    games = [_game(201 + sid, sid) for sid in (3, 1, 2)]
    regions = [
        {"sectionId": 1, "title": "Atlantic"},
        {"sectionId": 2, "title": "East"},
        {"sectionId": 3, "title": "Pacific"},
    ]

    tournament = map_bracket_payload(_payload(games, regions))

    assert [r.label for r in tournament.regions] == ["Atlantic", "East", "Pacific"]


def test_unseeded_slots_are_placeholders() -> None:
    games = [
        _game(
            301,
            1,
            teams=[{"seed": 1, "description": "Winner of 201"}],
            victor=401,
        )
    ]

    tournament = map_bracket_payload(_payload(games))
    game = tournament.games["301"]

    assert game.source is SourceKind.TOPOLOGY
    assert game.live_id is None
    assert game.status is GameStatus.SCHEDULED
    assert not game.top.is_resolved
    assert game.top.display_name == "Winner of 201"
    assert game.bottom.display_name == "TBA"
    assert game.advances_to_id == "401"


def test_completed_game_maps_teams_winner_and_state() -> None:
    games = [
        _game(
            201,
            1,
            teams=[_team("11", "Duke", 1, winner=True), _team("22", "Mount St. Mary's", 16)],
            victor=301,
            state="F",
        ),
        _game(
            202,
            1,
            teams=[_team("33", "Baylor", 8), _team("44", "Mississippi St.", 9)],
            state="L",
        ),
    ]

    tournament = map_bracket_payload(_payload(games))
    final = tournament.games["201"]
    live = tournament.games["202"]

    assert tournament.id == "ncaa-2026"
    assert tournament.year == 2026
    assert final.status is GameStatus.FINAL
    assert final.winner is Slot.TOP
    assert final.winning_team is not None
    assert final.winning_team.name == "Duke"
    assert final.top.seed == 1
    assert live.status is GameStatus.IN_PROGRESS
    assert live.winner is None


def test_missing_games_list_is_malformed() -> None:
    with pytest.raises(MalformedPayload):
        map_bracket_payload({"championships": [{"title": "x"}]})


def test_missing_championships_is_malformed() -> None:
    with pytest.raises(MalformedPayload):
        map_bracket_payload({})


def test_missing_position_id_is_malformed() -> None:
    game = _game(201, 1)
    del game["bracketPositionId"]

    with pytest.raises(MalformedPayload) as exc:
        map_bracket_payload(_payload([game]))

    assert "bracketPositionId" in str(exc.value)


def test_duplicate_position_id_is_malformed() -> None:
    with pytest.raises(MalformedPayload):
        map_bracket_payload(_payload([_game(201, 1), _game(201, 2)]))


def test_numeric_team_ids_are_real_teams() -> None:
    top = {"teamId": 11, "name": "Duke", "shortName": "Duke", "seed": 1, "winner": True}
    bottom = {"teamId": 22, "name": "Mount St. Mary's", "seed": 16, "winner": False}
    tournament = map_bracket_payload(_payload([_game(201, 1, teams=[top, bottom], state="F")]))

    game = tournament.games["201"]
    assert game.top.team is not None
    assert game.top.team.id == "11"
    assert game.bottom.team is not None
    assert game.bottom.team.short_name == "Mount St. Mary's"
    assert game.winner is Slot.TOP
