from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from bracket_sync.domain.models import Tournament
from bracket_sync.ingestion.providers.base.errors import MalformedPayload, ProviderError
from bracket_sync.ingestion.providers.espn.client import EspnClient
from bracket_sync.ingestion.providers.espn.mapper import map_tournaments_payload

logger = logging.getLogger(__name__)


@dataclass
class EspnBracketSource:
    """Live provider's own bracket endpoint, tried for each candidate year in order."""

    client: EspnClient
    years: Sequence[int]
    name: str = "espn"

    async def fetch_tournament(self) -> Tournament:
        last_error: ProviderError | None = None
        for year in self.years:
            try:
                payload = await self.client.get_tournaments(year)
                return map_tournaments_payload(payload, year=year)
            except ProviderError as e:
                logger.debug("live bracket unavailable for %s: %s", year, e)
                last_error = e

        if last_error is None:
            raise MalformedPayload("no candidate years to query")
        raise last_error
