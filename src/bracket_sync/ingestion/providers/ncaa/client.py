from __future__ import annotations

from dataclasses import dataclass

from bracket_sync.ingestion.providers.base.client import BaseHttpClient
from bracket_sync.ingestion.providers.base.types import Json

BRACKET_PATH = "/brackets/basketball-men/d1/{year}"


@dataclass
class NcaaClient:
    """Topology provider: one bracket document per tournament year."""

    http: BaseHttpClient

    async def get_bracket(self, year: int) -> Json:
        return await self.http.get_json(BRACKET_PATH.format(year=year))
