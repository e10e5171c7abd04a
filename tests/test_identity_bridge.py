from __future__ import annotations

import pytest

from bracket_sync.domain.enums import SourceKind
from bracket_sync.domain.models import Game, Region, Team, TeamSeed, Tournament
from bracket_sync.sync.bridge import bridge, same_matchup


def _seed(name: str, seed: int = 0) -> TeamSeed:
    return TeamSeed(seed=seed, team=Team(id=name, name=name, short_name=name))


def _topology(*pairs: tuple[str, str, str, str | None]) -> Tournament:
    """(region, position id, top, bottom); a None bottom is an unseeded slot."""
    t = Tournament(id="ncaa-2026", name="NCAA Tournament", year=2026, source=SourceKind.TOPOLOGY)
    regions: dict[str, Region] = {}
    for region_key, pid, top, bottom in pairs:
        region = regions.get(region_key)
        if region is None:
            region = regions[region_key] = Region(key=region_key, title=region_key)
            t.regions.append(region)
        game = Game(
            id=pid,
            source=SourceKind.TOPOLOGY,
            position_id=int(pid),
            top=_seed(top),
            bottom=_seed(bottom) if bottom is not None else TeamSeed.tba(),
        )
        t.add_game(region, int(pid) // 100, game)
    return t


def _live(event_id: str, top: str, bottom: str) -> Game:
    return Game(
        id=event_id,
        source=SourceKind.LIVE,
        live_id=event_id,
        top=_seed(top),
        bottom=_seed(bottom),
    )


def test_names_match_ignoring_case_punctuation_and_order() -> None:
    t = _topology(
        ("East", "201", "Duke", "Mount St. Mary's"),
        ("East", "202", "St. John's", "Omaha"),
    )

    linked = bridge(t, [_live("e1", "st johns", "OMAHA"), _live("e2", "Mount St Marys", "DUKE")])

    assert linked == 2
    assert t.games["201"].live_id == "e2"
    assert t.games["202"].live_id == "e1"


def test_alias_names_are_not_matched() -> None:
    t = _topology(("West", "203", "Connecticut", "Oklahoma"))

    assert bridge(t, [_live("e3", "UConn", "Oklahoma")]) == 0
    assert t.games["203"].live_id is None


def test_short_name_matches_when_full_names_differ() -> None:
    t = _topology(("West", "204", "Florida", "Norfolk St."))
    live = Game(
        id="e4",
        source=SourceKind.LIVE,
        live_id="e4",
        top=TeamSeed(team=Team(id="57", name="Florida Gators", short_name="Florida")),
        bottom=TeamSeed(
            team=Team(id="2450", name="Norfolk State Spartans", short_name="Norfolk St")
        ),
    )

    assert bridge(t, [live]) == 1
    assert t.games["204"].live_id == "e4"


def test_bridge_is_idempotent() -> None:
    t = _topology(("East", "201", "Duke", "Baylor"))
    live = [_live("e1", "Duke", "Baylor")]

    assert bridge(t, live) == 1
    assert bridge(t, live) == 0
    assert t.games["201"].live_id == "e1"


def test_existing_link_is_never_revisited() -> None:
    t = _topology(("East", "201", "Duke", "Baylor"))
    bridge(t, [_live("e1", "Duke", "Baylor")])

    assert bridge(t, [_live("e9", "Duke", "Baylor")]) == 0
    assert t.games["201"].live_id == "e1"


def test_first_game_in_bracket_order_wins_a_tie() -> None:
    t = _topology(
        ("East", "201", "Duke", "Baylor"),
        ("West", "211", "Duke", "Baylor"),
    )

    assert bridge(t, [_live("e1", "Baylor", "Duke")]) == 1
    assert t.games["201"].live_id == "e1"
    assert t.games["211"].live_id is None


def test_unseeded_slots_never_match() -> None:
    t = _topology(("East", "301", "Duke", None))

    assert bridge(t, [_live("e1", "Duke", "TBA")]) == 0
    assert not same_matchup(t.games["301"], _live("e1", "Duke", "TBA"))


def test_bridge_to_refuses_a_second_link() -> None:
    game = Game(id="201", source=SourceKind.TOPOLOGY)
    game.bridge_to("e1")

    with pytest.raises(ValueError):
        game.bridge_to("e2")
