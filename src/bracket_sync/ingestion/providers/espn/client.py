from __future__ import annotations

from dataclasses import dataclass

from bracket_sync.domain.models import Game, GameDetail
from bracket_sync.ingestion.providers.base.client import BaseHttpClient
from bracket_sync.ingestion.providers.base.types import Json
from bracket_sync.ingestion.providers.espn.mapper import (
    map_scoreboard_payload,
    map_summary_payload,
)

# groups=100 restricts the scoreboard to tournament games.
TOURNAMENT_GROUP = "100"


@dataclass
class EspnClient:
    """Live provider: bracket fallback, scoreboard, and per-game summary.

    The bracket listing lives under the v2 API root; scoreboard and summary
    under the site v2 root.
    """

    site: BaseHttpClient
    v2: BaseHttpClient

    async def get_tournaments(self, year: int) -> Json:
        return await self.v2.get_json("/tournaments", params={"limit": 25, "year": year})

    async def get_scoreboard(self) -> Json:
        return await self.site.get_json(
            "/scoreboard", params={"groups": TOURNAMENT_GROUP, "limit": 50}
        )

    async def get_summary(self, event_id: str) -> Json:
        return await self.site.get_json("/summary", params={"event": event_id})

    async def fetch_scoreboard(self) -> list[Game]:
        return map_scoreboard_payload(await self.get_scoreboard())

    async def fetch_game_detail(self, live_id: str) -> GameDetail:
        return map_summary_payload(live_id, await self.get_summary(live_id))

    async def aclose(self) -> None:
        await self.site.aclose()
        await self.v2.aclose()
