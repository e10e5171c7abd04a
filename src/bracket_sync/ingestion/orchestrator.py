from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from bracket_sync.core.config import Settings
from bracket_sync.core.dates import candidate_tournament_years, season_tournament_year
from bracket_sync.domain.models import Tournament
from bracket_sync.ingestion.providers.base.errors import MalformedPayload, ProviderError
from bracket_sync.ingestion.providers.base.types import BracketSource
from bracket_sync.ingestion.providers.espn.client import EspnClient
from bracket_sync.ingestion.providers.espn.source import EspnBracketSource
from bracket_sync.ingestion.providers.ncaa.client import NcaaClient
from bracket_sync.ingestion.providers.ncaa.source import NcaaBracketSource
from bracket_sync.ingestion.providers.snapshot.source import (
    EMBEDDED_SNAPSHOT_YEAR,
    EmbeddedSnapshotSource,
    LocalOverrideSource,
)
from bracket_sync.sync.errors import AllSourcesFailed

logger = logging.getLogger(__name__)


def build_sources(
    cfg: Settings,
    *,
    ncaa: NcaaClient,
    espn: EspnClient,
    now: datetime | None = None,
) -> list[BracketSource]:
    """
    Fetch chain in priority order:
        local override (when configured) -> topology provider
        -> live provider bracket -> embedded snapshot
    """
    now = now or datetime.now(tz=UTC)
    year = cfg.tournament_year or season_tournament_year(now)

    sources: list[BracketSource] = []
    if cfg.bracket_json:
        sources.append(LocalOverrideSource(path=cfg.bracket_json, default_year=year))
    sources.append(NcaaBracketSource(client=ncaa, year=year))
    sources.append(
        EspnBracketSource(
            client=espn,
            years=candidate_tournament_years(year, snapshot_year=EMBEDDED_SNAPSHOT_YEAR),
        )
    )
    sources.append(EmbeddedSnapshotSource())
    return sources


async def fetch_tournament(
    sources: Sequence[BracketSource],
    *,
    attempt_timeout_s: float | None = None,
) -> Tournament:
    """Return the first structurally valid Tournament from `sources`, tried in order.

    Transport failures, timeouts, and mapping errors mean "this source is
    unavailable" and fall through to the next one. Raises AllSourcesFailed,
    carrying every per-source error, only when the whole chain is exhausted.
    """

    errors: dict[str, BaseException] = {}
    for source in sources:
        try:
            if attempt_timeout_s is None:
                tournament = await source.fetch_tournament()
            else:
                tournament = await asyncio.wait_for(
                    source.fetch_tournament(), timeout=attempt_timeout_s
                )
            if not tournament.is_renderable:
                raise MalformedPayload(
                    "bracket has no regions or no games",
                    context={"regions": len(tournament.regions), "games": len(tournament.games)},
                )
        except (ProviderError, TimeoutError) as e:
            logger.warning(
                "bracket source %s unavailable: %s", source.name, str(e) or type(e).__name__
            )
            errors[source.name] = e
            continue

        logger.info(
            "loaded bracket %s from %s: %d regions, %d games",
            tournament.id,
            source.name,
            len(tournament.regions),
            len(tournament.games),
        )
        return tournament

    raise AllSourcesFailed(errors)
