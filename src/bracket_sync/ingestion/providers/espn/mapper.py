from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from bracket_sync.core.dates import parse_optional_iso
from bracket_sync.core.text import to_title_case
from bracket_sync.domain.enums import GameStatus, RoundKind, Slot, SourceKind
from bracket_sync.domain.models import (
    BoxScore,
    Game,
    GameDetail,
    Play,
    PlayerLine,
    Region,
    Team,
    TeamSeed,
    Tournament,
)
from bracket_sync.ingestion.providers.base.errors import MalformedPayload
from bracket_sync.ingestion.providers.base.types import Json

ApiItem = dict[str, Any]

FINAL_REGION = "National"
DEFAULT_REGION = "Region"
REGION_ORDER = ("East", "West", "South", "Midwest", FINAL_REGION, DEFAULT_REGION)

_IN_PROGRESS = {"STATUS_IN_PROGRESS", "STATUS_HALFTIME"}
_FINAL = {"STATUS_FINAL", "STATUS_FINAL_OT"}
_POSTPONED = {"STATUS_POSTPONED", "STATUS_CANCELLED", "STATUS_SUSPENDED"}


def parse_status(name: str | None) -> GameStatus:
    if name in _IN_PROGRESS:
        return GameStatus.IN_PROGRESS
    if name in _FINAL:
        return GameStatus.FINAL
    if name in _POSTPONED:
        return GameStatus.POSTPONED
    return GameStatus.SCHEDULED


def _dict(value: Any) -> ApiItem:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list[ApiItem]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def _str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def _int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def map_team(item: ApiItem) -> Team:
    name = _str(item.get("displayName")) or ""
    return Team(
        id=_str(item.get("id")) or "",
        name=name,
        short_name=_str(item.get("shortDisplayName")) or name,
        abbrev=_str(item.get("abbreviation")) or "",
        color=_str(item.get("color")),
    )


def map_competitor(item: ApiItem | None) -> TeamSeed:
    if item is None:
        return TeamSeed.tba()

    seed = _int(_dict(item.get("curatedRank")).get("current")) or 0
    team_item = item.get("team")
    team = map_team(team_item) if isinstance(team_item, dict) else None
    placeholder = _str(item.get("placeholder"))
    if team is None:
        placeholder = placeholder or "TBA"
    return TeamSeed(seed=seed, team=team, placeholder=placeholder)


def split_competitors(
    competitors: list[ApiItem],
) -> tuple[ApiItem | None, ApiItem | None]:
    """Home is the top slot and away the bottom, falling back to list order."""

    top = next((c for c in competitors if c.get("homeAway") == "home"), None)
    if top is None and competitors:
        top = competitors[0]
    bottom = next((c for c in competitors if c.get("homeAway") == "away"), None)
    if bottom is None and len(competitors) > 1:
        bottom = competitors[1]
    return top, bottom


def _score(top: ApiItem | None, bottom: ApiItem | None) -> tuple[int, int] | None:
    if top is None or bottom is None:
        return None
    t = _int(top.get("score"))
    b = _int(bottom.get("score"))
    if t is None or b is None:
        return None
    return t, b


def _winner(top: ApiItem | None, bottom: ApiItem | None) -> Slot | None:
    if top is not None and top.get("winner") is True:
        return Slot.TOP
    if bottom is not None and bottom.get("winner") is True:
        return Slot.BOTTOM
    return None


def _location(venue: ApiItem) -> str | None:
    full_name = _str(venue.get("fullName"))
    if full_name:
        return full_name
    address = _dict(venue.get("address"))
    city = _str(venue.get("city")) or _str(address.get("city"))
    state = _str(venue.get("state")) or _str(address.get("state"))
    if city and state:
        return f"{city}, {state}"
    return None


def map_event(event: ApiItem, *, source: SourceKind = SourceKind.LIVE) -> Game:
    """Map a live-provider event. The event id is both `id` and `live_id`."""

    event_id = _str(event.get("id"))
    if event_id is None:
        raise MalformedPayload("live event is missing id", context={"name": event.get("name")})

    status = _dict(event.get("status"))
    status_type = _dict(status.get("type"))

    competitors = [
        c
        for competition in _list(event.get("competitions"))
        for c in _list(competition.get("competitors"))
    ]
    top, bottom = split_competitors(competitors)
    top_seed = map_competitor(top)
    bottom_seed = map_competitor(bottom)

    # A score only counts when both sides are real teams.
    score = _score(top, bottom) if top_seed.team and bottom_seed.team else None

    return Game(
        id=event_id,
        source=source,
        live_id=event_id,
        top=top_seed,
        bottom=bottom_seed,
        status=parse_status(_str(status_type.get("name"))),
        score=score,
        winner=_winner(top, bottom),
        period=_int(status.get("period")),
        clock=_str(status.get("displayClock")),
        start_time=parse_optional_iso(event.get("date")),
        location=_location(_dict(event.get("venue"))),
    )


def map_matchup(matchup: ApiItem, *, source: SourceKind = SourceKind.LIVE) -> Game:
    """Matchups either embed a full event or carry competitors directly."""

    event = matchup.get("event")
    if isinstance(event, dict):
        if _str(event.get("id")) is None and _str(matchup.get("id")) is not None:
            event = {**event, "id": matchup.get("id")}
        return map_event(event, source=source)

    matchup_id = _str(matchup.get("id"))
    if matchup_id is None:
        raise MalformedPayload("bracket matchup is missing id", context={"note": matchup.get("note")})

    top, bottom = split_competitors(_list(matchup.get("competitors")))
    score = _score(top, bottom)

    return Game(
        id=matchup_id,
        source=source,
        live_id=matchup_id,
        top=map_competitor(top),
        bottom=map_competitor(bottom),
        status=GameStatus.FINAL if score is not None else GameStatus.SCHEDULED,
        score=score,
        winner=_winner(top, bottom),
    )


def _round_matchups(espn_round: ApiItem) -> Iterator[ApiItem]:
    # Some responses nest games under "games" instead of "matchups".
    yield from _list(espn_round.get("matchups"))
    yield from _list(espn_round.get("games"))


def _has_bracket(entry: ApiItem) -> bool:
    return bool(_list(_dict(entry.get("bracket")).get("rounds")))


def _is_ncaa_name(entry: ApiItem) -> bool:
    n = (_str(entry.get("name")) or "").lower()
    return (
        any(word in n for word in ("ncaa", "march", "championship", "tournament"))
        and "nit" not in n
        and "invitational" not in n
    )


def select_tournament_entry(entries: list[ApiItem], year: int) -> ApiItem:
    if not entries:
        raise MalformedPayload(f"no tournaments returned for year {year}")

    for entry in entries:
        if _has_bracket(entry) and _is_ncaa_name(entry):
            return entry
    for entry in entries:
        if _has_bracket(entry):
            return entry

    raise MalformedPayload(f"NCAA tournament bracket not found for year {year}")


def map_tournament_entry(
    entry: ApiItem, *, year: int, source: SourceKind = SourceKind.LIVE
) -> Tournament:
    tournament = Tournament(
        id=_str(entry.get("id")) or f"espn-{year}",
        name=_str(entry.get("name")) or "NCAA Tournament",
        year=year,
        source=source,
    )

    # region name -> [(round number, game)] in payload order
    grouped: dict[str, list[tuple[int, Game]]] = {}
    for espn_round in _list(_dict(entry.get("bracket")).get("rounds")):
        number = _int(espn_round.get("number")) or RoundKind.FIRST.value
        final_four = RoundKind.from_number(number).is_final_four
        for matchup in _round_matchups(espn_round):
            if final_four:
                region_name = FINAL_REGION
            else:
                region_name = to_title_case(_str(matchup.get("note")) or "") or DEFAULT_REGION
            grouped.setdefault(region_name, []).append((number, map_matchup(matchup, source=source)))

    names = [n for n in REGION_ORDER if n in grouped]
    names += [n for n in grouped if n not in REGION_ORDER]

    for name in names:
        region = Region(key=name.lower(), title=name, is_final=name == FINAL_REGION)
        tournament.regions.append(region)
        for number, game in grouped[name]:
            try:
                tournament.add_game(region, number, game)
            except ValueError as e:
                raise MalformedPayload(str(e), context={"region": name}) from e

    return tournament


def map_tournaments_payload(
    payload: Json, *, year: int, source: SourceKind = SourceKind.LIVE
) -> Tournament:
    """Map the live provider's `tournaments` listing into a Tournament."""

    entries = payload.get("tournaments")
    if not isinstance(entries, list):
        raise MalformedPayload("live bracket payload has no tournaments list", context={"year": year})

    entry = select_tournament_entry(_list(entries), year)
    return map_tournament_entry(entry, year=year, source=source)


def map_scoreboard_payload(payload: Json) -> list[Game]:
    """Map a scoreboard into live-provider Games. Events without an id are skipped."""

    events = payload.get("events")
    if not isinstance(events, list):
        raise MalformedPayload("scoreboard payload has no events list")

    games: list[Game] = []
    for event in _list(events):
        if _str(event.get("id")) is None:
            continue
        games.append(map_event(event))
    return games


# ---------------------------------------------------------------------------
# Game summary
# ---------------------------------------------------------------------------


def _stat(stats: list[Any], keys: list[Any], key: str) -> str:
    try:
        idx = keys.index(key)
    except ValueError:
        return ""
    if idx >= len(stats) or not isinstance(stats[idx], str):
        return ""
    return stats[idx]


def parse_player_stats(name: str, stats: list[Any], keys: list[Any]) -> PlayerLine:
    return PlayerLine(
        name=name,
        points=_int(_stat(stats, keys, "PTS")) or 0,
        rebounds=_int(_stat(stats, keys, "REB")) or 0,
        assists=_int(_stat(stats, keys, "AST")) or 0,
        minutes=_stat(stats, keys, "MIN"),
        fg=_stat(stats, keys, "FG"),
        fg3=_stat(stats, keys, "3PT"),
    )


def build_box_score(team_block: ApiItem) -> BoxScore:
    team_item = team_block.get("team")
    team = map_team(team_item) if isinstance(team_item, dict) else None

    category = next(
        (s for s in _list(team_block.get("statistics")) if s.get("name") == "athletes"),
        None,
    )
    if category is None:
        return BoxScore(team=team)

    keys = category.get("keys") if isinstance(category.get("keys"), list) else []
    totals = category.get("totals") if isinstance(category.get("totals"), list) else []

    players: list[PlayerLine] = []
    for athlete_stats in _list(category.get("athletes")):
        name = _str(_dict(athlete_stats.get("athlete")).get("displayName")) or ""
        stats = athlete_stats.get("stats")
        players.append(parse_player_stats(name, stats if isinstance(stats, list) else [], keys))

    return BoxScore(team=team, players=players, totals=parse_player_stats("TOTALS", totals, keys))


def map_summary_payload(live_id: str, payload: Json) -> GameDetail:
    plays = [
        Play(
            period=_int(_dict(p.get("period")).get("number")) or 0,
            clock=_str(_dict(p.get("clock")).get("displayValue")) or "",
            description=_str(p.get("text")) or "",
            home_score=_int(p.get("homeScore")) or 0,
            away_score=_int(p.get("awayScore")) or 0,
        )
        for p in _list(payload.get("plays"))
    ]

    detail = GameDetail(live_id=live_id, plays=plays)
    blocks = _list(_dict(payload.get("boxscore")).get("players"))
    if blocks:
        detail.home_box = build_box_score(blocks[0])
    if len(blocks) > 1:
        detail.away_box = build_box_score(blocks[1])
    return detail
