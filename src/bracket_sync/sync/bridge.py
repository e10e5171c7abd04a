from __future__ import annotations

import logging
from collections.abc import Iterable

from bracket_sync.domain.models import Game, Tournament

logger = logging.getLogger(__name__)


def same_matchup(game: Game, other: Game) -> bool:
    """True when both games pair the same two teams, in either order.

    Each side matches on any of its normalized names (full or short), so
    "St. John's" meets "st johns" but "UConn" never meets "Connecticut".
    """
    a, b = game.top.name_keys(), game.bottom.name_keys()
    x, y = other.top.name_keys(), other.bottom.name_keys()
    if not (a and b and x and y):
        return False
    return bool((a & x and b & y) or (a & y and b & x))


def find_unbridged_match(tournament: Tournament, live: Game) -> Game | None:
    # First match in region/round order wins.
    for game in tournament.iter_games():
        if game.live_id is None and same_matchup(game, live):
            return game
    return None


def bridge(tournament: Tournament, live_games: Iterable[Game]) -> int:
    """Link topology games to live-provider event ids; returns how many were newly linked.

    A link is made once and never revisited. Live games that match nothing are
    skipped, which is the normal state before the field is seeded.
    """

    linked_ids = {g.live_id for g in tournament.games.values() if g.live_id is not None}
    linked = 0

    for live in live_games:
        live_id = live.live_id or live.id
        if live_id in linked_ids:
            continue

        target = find_unbridged_match(tournament, live)
        if target is None:
            logger.debug(
                "no bracket game for live event %s (%s vs %s)",
                live_id,
                live.top.display_name,
                live.bottom.display_name,
            )
            continue

        target.bridge_to(live_id)
        linked_ids.add(live_id)
        linked += 1
        logger.info("bridged bracket game %s to live event %s", target.id, live_id)

    return linked
