from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime

from bracket_sync.core.text import normalize_team_name
from bracket_sync.domain.enums import GameStatus, RoundKind, Slot, SourceKind

POSITIONS_PER_ROUND = 100
TBA = "TBA"


def round_number_for_position(position_id: int) -> int:
    """Round 1 holds position ids 100-199, round 2 holds 200-299, and so on."""
    return position_id // POSITIONS_PER_ROUND


@dataclass
class Team:
    id: str
    name: str
    short_name: str = ""
    abbrev: str = ""
    color: str | None = None

    def name_keys(self) -> set[str]:
        keys = {normalize_team_name(self.name), normalize_team_name(self.short_name)}
        keys.discard("")
        return keys


@dataclass
class TeamSeed:
    """One side of a matchup: a resolved team, or a placeholder before seeding."""

    seed: int = 0
    team: Team | None = None
    placeholder: str | None = None

    @classmethod
    def tba(cls, label: str | None = None) -> TeamSeed:
        return cls(seed=0, team=None, placeholder=label or TBA)

    @property
    def is_resolved(self) -> bool:
        return self.team is not None and bool(self.team.name_keys())

    @property
    def display_name(self) -> str:
        if self.team is not None:
            return self.team.short_name or self.team.name or TBA
        return self.placeholder or TBA

    def name_keys(self) -> set[str]:
        if self.team is None:
            return set()
        return self.team.name_keys()

    def is_same_team(self, team: Team) -> bool:
        return bool(self.name_keys() & team.name_keys())


@dataclass
class Game:
    """Unit of bracket topology.

    `id` is only unique within the source that produced it: a bracket position
    id for the topology provider, an event id for the live provider.
    `live_id` is the live provider's event id, set at most once.
    """

    id: str
    source: SourceKind
    top: TeamSeed = field(default_factory=TeamSeed.tba)
    bottom: TeamSeed = field(default_factory=TeamSeed.tba)
    status: GameStatus = GameStatus.SCHEDULED
    position_id: int | None = None
    live_id: str | None = None
    advances_to_id: str | None = None
    score: tuple[int, int] | None = None
    winner: Slot | None = None
    period: int | None = None
    clock: str | None = None
    start_time: datetime | None = None
    location: str | None = None

    @property
    def round_number(self) -> int | None:
        if self.position_id is None:
            return None
        return round_number_for_position(self.position_id)

    @property
    def is_bridged(self) -> bool:
        return self.live_id is not None

    def slot(self, slot: Slot) -> TeamSeed:
        return self.top if slot is Slot.TOP else self.bottom

    def set_slot(self, slot: Slot, value: TeamSeed) -> None:
        if slot is Slot.TOP:
            self.top = value
        else:
            self.bottom = value

    def slot_of(self, team: Team) -> Slot | None:
        for slot in (Slot.TOP, Slot.BOTTOM):
            if self.slot(slot).is_same_team(team):
                return slot
        return None

    @property
    def winning_team(self) -> Team | None:
        if self.winner is None:
            return None
        return self.slot(self.winner).team

    def bridge_to(self, live_id: str) -> None:
        if self.live_id is not None:
            raise ValueError(f"game {self.id} is already bridged to {self.live_id}")
        self.live_id = live_id


@dataclass
class Round:
    number: int
    game_ids: list[str] = field(default_factory=list)

    @property
    def kind(self) -> RoundKind:
        return RoundKind.from_number(self.number)

    @property
    def label(self) -> str:
        return self.kind.label


@dataclass
class Region:
    key: str
    title: str = ""
    is_final: bool = False
    rounds: list[Round] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.title or f"Region {self.key}"

    def round(self, number: int) -> Round:
        """Return the round with `number`, creating it in sorted position if missing."""
        for r in self.rounds:
            if r.number == number:
                return r
        created = Round(number=number)
        self.rounds.append(created)
        self.rounds.sort(key=lambda r: r.number)
        return created


@dataclass
class Tournament:
    """Bracket topology plus live state.

    Games are stored once, keyed by `Game.id`; regions and rounds hold ids only,
    so a single game can be found and mutated without touching its ancestors.
    """

    id: str
    name: str
    year: int
    source: SourceKind
    regions: list[Region] = field(default_factory=list)
    games: dict[str, Game] = field(default_factory=dict)
    stamp: int = 0

    def add_game(self, region: Region, round_number: int, game: Game) -> None:
        if game.id in self.games:
            raise ValueError(f"duplicate game id {game.id!r}")
        self.games[game.id] = game
        region.round(round_number).game_ids.append(game.id)

    @property
    def final(self) -> Region | None:
        for region in self.regions:
            if region.is_final:
                return region
        return None

    @property
    def is_renderable(self) -> bool:
        return bool(self.regions) and bool(self.games)

    def iter_games(self) -> Iterator[Game]:
        """Games in region, then round, then bracket order."""
        for region in self.regions:
            for r in region.rounds:
                for game_id in r.game_ids:
                    yield self.games[game_id]

    def game(self, game_id: str) -> Game | None:
        return self.games.get(game_id)

    def feeders(self, game_id: str) -> list[Game]:
        """Games whose winner advances into `game_id`, in bracket position order."""
        found = [g for g in self.games.values() if g.advances_to_id == game_id]
        found.sort(key=lambda g: (g.position_id is None, g.position_id or 0, g.id))
        return found


@dataclass
class Play:
    period: int = 0
    clock: str = ""
    description: str = ""
    home_score: int = 0
    away_score: int = 0


@dataclass
class PlayerLine:
    name: str = ""
    points: int = 0
    rebounds: int = 0
    assists: int = 0
    minutes: str = ""
    fg: str = ""
    fg3: str = ""


@dataclass
class BoxScore:
    team: Team | None = None
    players: list[PlayerLine] = field(default_factory=list)
    totals: PlayerLine = field(default_factory=PlayerLine)


@dataclass
class GameDetail:
    """Box score and play-by-play, keyed by the live provider's event id."""

    live_id: str
    plays: list[Play] = field(default_factory=list)
    home_box: BoxScore = field(default_factory=BoxScore)
    away_box: BoxScore = field(default_factory=BoxScore)
