from bracket_sync.domain.enums import GameStatus, RoundKind, Slot, SourceKind
from bracket_sync.domain.models import (
    BoxScore,
    Game,
    GameDetail,
    Play,
    PlayerLine,
    Region,
    Round,
    Team,
    TeamSeed,
    Tournament,
    round_number_for_position,
)

__all__ = [
    "BoxScore",
    "Game",
    "GameDetail",
    "GameStatus",
    "Play",
    "PlayerLine",
    "Region",
    "Round",
    "RoundKind",
    "Slot",
    "SourceKind",
    "Team",
    "TeamSeed",
    "Tournament",
    "round_number_for_position",
]
