from __future__ import annotations

import logging
from dataclasses import dataclass

from bracket_sync.domain.models import Tournament
from bracket_sync.ingestion.providers.ncaa.client import NcaaClient
from bracket_sync.ingestion.providers.ncaa.mapper import map_bracket_payload

logger = logging.getLogger(__name__)


@dataclass
class NcaaBracketSource:
    client: NcaaClient
    year: int
    name: str = "ncaa"

    async def fetch_tournament(self) -> Tournament:
        logger.debug("fetching topology bracket for %s", self.year)
        payload = await self.client.get_bracket(self.year)
        return map_bracket_payload(payload)
