from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from bracket_sync.domain.enums import GameStatus, Slot
from bracket_sync.domain.models import Game, Team, TeamSeed, Tournament
from bracket_sync.sync.errors import AdvancementConflict, StaleUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameUpdate:
    """Changed live state for one game, keyed by the live provider's event id.

    `score` and `winner` are oriented to this update's own top/bottom teams,
    which need not match the bracket's slot order.
    """

    live_id: str
    status: GameStatus
    top: Team | None = None
    bottom: Team | None = None
    score: tuple[int, int] | None = None
    winner: Slot | None = None
    period: int | None = None
    clock: str | None = None

    @classmethod
    def from_live_game(cls, game: Game) -> GameUpdate:
        return cls(
            live_id=game.live_id or game.id,
            status=game.status,
            top=game.top.team,
            bottom=game.bottom.team,
            score=game.score,
            winner=game.winner,
            period=game.period,
            clock=game.clock,
        )


@dataclass
class MergeResult:
    changed: list[str] = field(default_factory=list)
    advanced: list[str] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)


def _is_flipped(game: Game, update: GameUpdate) -> bool:
    """True when the update lists the bracket's bottom team first."""
    if update.top is None:
        return False
    return not game.top.is_same_team(update.top) and game.bottom.is_same_team(update.top)


def _feed_slot(tournament: Tournament, game: Game, downstream: Game) -> Slot | None:
    feeders = tournament.feeders(downstream.id)
    if len(feeders) != 2:
        return None
    return Slot.TOP if feeders[0].id == game.id else Slot.BOTTOM


def advance_winner(tournament: Tournament, game: Game, winner: Slot) -> str | None:
    """Place the winner of `game` into its downstream game.

    Only a placeholder slot is ever filled. Returns a conflict description,
    without mutating anything, when the slot already holds a different team
    or the other team of `game` has already been advanced.
    """

    team = game.slot(winner).team
    if team is None or game.advances_to_id is None:
        return None

    downstream = tournament.game(game.advances_to_id)
    if downstream is None:
        logger.debug("game %s advances to unknown game %s", game.id, game.advances_to_id)
        return None

    if downstream.slot_of(team) is not None:
        return None

    loser = game.slot(winner.other).team
    if loser is not None and downstream.slot_of(loser) is not None:
        return (
            f"winner {team.name} of game {game.id} conflicts with {loser.name} "
            f"already advanced to game {downstream.id}"
        )

    slot = _feed_slot(tournament, game, downstream)
    if slot is None:
        slot = next(
            (s for s in (Slot.TOP, Slot.BOTTOM) if not downstream.slot(s).is_resolved), None
        )

    if slot is None or downstream.slot(slot).is_resolved:
        occupant = downstream.slot(slot or Slot.TOP).display_name
        return (
            f"winner {team.name} of game {game.id} conflicts with {occupant} "
            f"already in game {downstream.id}"
        )

    downstream.set_slot(slot, TeamSeed(seed=game.slot(winner).seed, team=team))
    return None


def _winner_conflict(game: Game, winner: Slot) -> str | None:
    if game.winner is None or game.winner is winner:
        return None
    return (
        f"game {game.id} already won by {game.slot(game.winner).display_name}, "
        f"update names {game.slot(winner).display_name}"
    )


def _apply_one(
    tournament: Tournament, game: Game, update: GameUpdate, result: MergeResult
) -> None:
    flipped = _is_flipped(game, update)
    score = update.score
    winner = update.winner
    if flipped:
        if score is not None:
            score = (score[1], score[0])
        if winner is not None:
            winner = winner.other

    before = (game.status, game.score, game.winner, game.period, game.clock)

    # A conflicting entry leaves the game and its downstream game untouched.
    if winner is not None:
        conflict = _winner_conflict(game, winner)
        downstream = tournament.game(game.advances_to_id) if game.advances_to_id else None
        slots = (downstream.top, downstream.bottom) if downstream is not None else None

        if conflict is None:
            conflict = advance_winner(tournament, game, winner)
        if conflict is not None:
            logger.warning("advancement conflict: %s", conflict)
            result.conflicts.append(conflict)
            return

        game.winner = winner
        if downstream is not None and slots is not None and (
            downstream.top is not slots[0] or downstream.bottom is not slots[1]
        ):
            result.advanced.append(downstream.id)

    game.status = update.status
    if score is not None:
        game.score = score
    if update.period is not None:
        game.period = update.period
    if update.clock is not None:
        game.clock = update.clock

    if (game.status, game.score, game.winner, game.period, game.clock) != before:
        result.changed.append(game.id)


def apply_update(
    tournament: Tournament,
    updates: Iterable[GameUpdate],
    *,
    stamp: int | None = None,
) -> MergeResult:
    """Fold a partial live update into `tournament` in place.

    Entries are located by bridge identifier; entries for games that are not
    bridged yet are dropped. Region and round grouping is never touched.

    Raises StaleUpdate (before touching anything) when `stamp` no longer matches
    the tournament, and AdvancementConflict after applying every other entry
    when some winner could not be advanced.
    """

    if stamp is not None and stamp != tournament.stamp:
        raise StaleUpdate(stamp, tournament.stamp)

    by_live_id = {g.live_id: g for g in tournament.games.values() if g.live_id is not None}
    result = MergeResult()

    for update in updates:
        game = by_live_id.get(update.live_id)
        if game is None:
            logger.debug("dropping update for unbridged live event %s", update.live_id)
            result.dropped.append(update.live_id)
            continue
        _apply_one(tournament, game, update, result)

    if result.conflicts:
        raise AdvancementConflict(list(result.conflicts), result)
    return result
