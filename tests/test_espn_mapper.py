from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from bracket_sync.domain.enums import GameStatus, Slot, SourceKind
from bracket_sync.ingestion.providers.base.errors import MalformedPayload
from bracket_sync.ingestion.providers.espn.mapper import (
    map_scoreboard_payload,
    map_summary_payload,
    map_tournaments_payload,
    parse_status,
    select_tournament_entry,
)


def _competitor(
    team_id: str, name: str, side: str, *, score: str | None = None, winner: bool = False
) -> dict[str, Any]:
    item: dict[str, Any] = {
        "id": team_id,
        "homeAway": side,
        "team": {
            "id": team_id,
            "displayName": name,
            "shortDisplayName": name.split(" ")[0],
            "abbreviation": name[:4].upper(),
        },
        "curatedRank": {"current": 3},
        "winner": winner,
    }
    if score is not None:
        item["score"] = score
    return item


def _event(event_id: str | None, *, status: str = "STATUS_IN_PROGRESS") -> dict[str, Any]:
    event: dict[str, Any] = {
        "date": "2026-03-20T16:15Z",
        "status": {"type": {"name": status}, "period": 2, "displayClock": "7:42"},
        "competitions": [
            {
                "competitors": [
                    _competitor("150", "Duke Blue Devils", "away", score="51"),
                    _competitor("2", "Auburn Tigers", "home", score="48"),
                ]
            }
        ],
        "venue": {"address": {"city": "Providence", "state": "RI"}},
    }
    if event_id is not None:
        event["id"] = event_id
    return event


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("STATUS_SCHEDULED", GameStatus.SCHEDULED),
        ("STATUS_IN_PROGRESS", GameStatus.IN_PROGRESS),
        ("STATUS_HALFTIME", GameStatus.IN_PROGRESS),
        ("STATUS_FINAL", GameStatus.FINAL),
        ("STATUS_FINAL_OT", GameStatus.FINAL),
        ("STATUS_POSTPONED", GameStatus.POSTPONED),
        ("STATUS_SOMETHING_NEW", GameStatus.SCHEDULED),
        (None, GameStatus.SCHEDULED),
    ],
)
def test_parse_status(name: str | None, expected: GameStatus) -> None:
    assert parse_status(name) is expected


def test_scoreboard_maps_home_team_to_top_slot() -> None:
    games = map_scoreboard_payload({"events": [_event("401"), _event(None)]})

    assert len(games) == 1
    game = games[0]
    assert game.id == "401"
    assert game.live_id == "401"
    assert game.source is SourceKind.LIVE
    assert game.top.team is not None and game.top.team.name == "Auburn Tigers"
    assert game.bottom.team is not None and game.bottom.team.name == "Duke Blue Devils"
    assert game.score == (48, 51)
    assert game.status is GameStatus.IN_PROGRESS
    assert game.period == 2
    assert game.clock == "7:42"
    assert game.location == "Providence, RI"
    assert game.start_time == datetime(2026, 3, 20, 16, 15, tzinfo=UTC)


def test_scoreboard_without_events_list_is_malformed() -> None:
    with pytest.raises(MalformedPayload):
        map_scoreboard_payload({"leagues": []})


def test_empty_scoreboard_is_not_an_error() -> None:
    assert map_scoreboard_payload({"events": []}) == []


def _matchup(
    matchup_id: str, note: str, home: str, away: str, *, winner: str | None = None
) -> dict[str, Any]:
    return {
        "id": matchup_id,
        "note": note,
        "competitors": [
            _competitor(f"{matchup_id}h", home, "home", score="70", winner=winner == "home"),
            _competitor(f"{matchup_id}a", away, "away", score="60", winner=winner == "away"),
        ],
    }


def _tournaments(*entries: dict[str, Any]) -> dict[str, Any]:
    return {"tournaments": list(entries)}


NCAA_ENTRY: dict[str, Any] = {
    "id": "22",
    "name": "NCAA Men's Basketball Championship",
    "bracket": {
        "rounds": [
            {
                "number": 5,
                "matchups": [
                    _matchup("501", "MIDWEST", "Houston", "Tennessee", winner="home"),
                    _matchup("502", "SOUTH", "Auburn", "Michigan St", winner="home"),
                ],
            },
            {
                "number": 6,
                "games": [_matchup("601", "FINAL FOUR", "Auburn", "Florida")],
            },
        ]
    },
}


def test_select_entry_skips_nit_and_bracketless_entries() -> None:
    nit = {**NCAA_ENTRY, "id": "nit", "name": "NIT Championship"}
    empty = {"id": "x", "name": "NCAA Tournament", "bracket": {"rounds": []}}

    assert select_tournament_entry([empty, nit, NCAA_ENTRY], 2026)["id"] == "22"
    assert select_tournament_entry([empty, nit], 2026)["id"] == "nit"

    with pytest.raises(MalformedPayload):
        select_tournament_entry([empty], 2026)
    with pytest.raises(MalformedPayload):
        select_tournament_entry([], 2026)


def test_tournaments_payload_groups_by_note_with_final_four_last() -> None:
    tournament = map_tournaments_payload(_tournaments(NCAA_ENTRY), year=2026)

    assert tournament.id == "22"
    assert tournament.year == 2026
    assert [r.label for r in tournament.regions] == ["South", "Midwest", "National"]
    assert tournament.regions[-1].is_final

    elite_eight = tournament.games["501"]
    assert elite_eight.round_number is None
    assert elite_eight.is_bridged
    assert elite_eight.live_id == "501"
    assert elite_eight.status is GameStatus.FINAL
    assert elite_eight.winner is Slot.TOP

    national = tournament.regions[-1]
    assert [r.number for r in national.rounds] == [6]
    assert national.rounds[0].game_ids == ["601"]


def test_tournaments_payload_without_list_is_malformed() -> None:
    with pytest.raises(MalformedPayload):
        map_tournaments_payload({"items": []}, year=2026)


def test_summary_maps_plays_and_box_scores() -> None:
    payload = {
        "plays": [
            {
                "period": {"number": 1},
                "clock": {"displayValue": "19:41"},
                "text": "Johni Broome made Layup.",
                "homeScore": 2,
                "awayScore": "0",
            }
        ],
        "boxscore": {
            "players": [
                {
                    "team": {"id": "2", "displayName": "Auburn Tigers"},
                    "statistics": [
                        {
                            "name": "athletes",
                            "keys": ["MIN", "FG", "3PT", "REB", "AST", "PTS"],
                            "totals": ["200", "28-60", "7-20", "38", "14", "78"],
                            "athletes": [
                                {
                                    "athlete": {"displayName": "Johni Broome"},
                                    "stats": ["34", "9-15", "0-1", "12", "3", "21"],
                                }
                            ],
                        }
                    ],
                },
                {"team": {"id": "130", "displayName": "Michigan Wolverines"}, "statistics": []},
            ]
        },
    }

    detail = map_summary_payload("401745961", payload)

    assert detail.live_id == "401745961"
    assert len(detail.plays) == 1
    assert detail.plays[0].period == 1
    assert detail.plays[0].clock == "19:41"
    assert detail.plays[0].away_score == 0

    broome = detail.home_box.players[0]
    assert broome.name == "Johni Broome"
    assert (broome.points, broome.rebounds, broome.assists) == (21, 12, 3)
    assert broome.fg == "9-15"
    assert detail.home_box.totals.points == 78
    assert detail.away_box.team is not None
    assert detail.away_box.team.name == "Michigan Wolverines"
    assert detail.away_box.players == []


def test_summary_without_boxscore_still_maps() -> None:
    detail = map_summary_payload("1", {})

    assert detail.plays == []
    assert detail.home_box.team is None
