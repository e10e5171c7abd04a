from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from bracket_sync.domain.enums import SourceKind
from bracket_sync.domain.models import GameDetail, Tournament


class EngineState(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"
    REFRESHING = "refreshing"


# ---------------------------------------------------------------------------
# Requests (UI / scheduler -> engine)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadBracket:
    pass


@dataclass(frozen=True)
class RefreshScores:
    pass


@dataclass(frozen=True)
class LoadGameDetail:
    bracket_id: str
    live_id: str | None = None


Request = LoadBracket | RefreshScores | LoadGameDetail


# ---------------------------------------------------------------------------
# Responses (engine -> UI / scheduler)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BracketLoaded:
    tournament: Tournament
    source: SourceKind


@dataclass(frozen=True)
class BracketUpdated:
    """Result of a refresh: only the games that changed, by `Game.id`."""

    stamp: int
    bridged: int = 0
    changed: list[str] = field(default_factory=list)
    advanced: list[str] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ScoresUnavailable:
    """Soft failure: the live source could not be reached; the bracket is unchanged."""

    message: str


@dataclass(frozen=True)
class RefreshDiscarded:
    """A refresh whose result no longer applies (superseded or computed against an old bracket)."""

    reason: str


@dataclass(frozen=True)
class GameDetailLoaded:
    bracket_id: str
    detail: GameDetail


@dataclass(frozen=True)
class DetailUnavailable:
    """Soft result: no detail yet (unbridged game) or the detail fetch failed."""

    bracket_id: str
    message: str
    live_id: str | None = None


@dataclass(frozen=True)
class Busy:
    """The request was rejected because a conflicting one is still in flight."""

    request: Request


@dataclass(frozen=True)
class Error:
    message: str
    errors: dict[str, str] = field(default_factory=dict)


Response = (
    BracketLoaded
    | BracketUpdated
    | ScoresUnavailable
    | RefreshDiscarded
    | GameDetailLoaded
    | DetailUnavailable
    | Busy
    | Error
)
