from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from bracket_sync.service.messages import RefreshScores

logger = logging.getLogger(__name__)


@dataclass
class PeriodicRefresher:
    """Puts RefreshScores on the engine's request queue at a fixed interval.

    Only scores are refreshed; the bracket itself is loaded once on startup.
    The first tick is skipped so startup loading is not triggered twice.
    """

    requests: asyncio.Queue[Any]
    interval_s: float = 30.0

    _sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    async def run(self, *, ticks: int | None = None) -> None:
        sent = 0
        while ticks is None or sent < ticks:
            await self._sleep(self.interval_s)
            await self.requests.put(RefreshScores())
            sent += 1
            logger.debug("scheduled score refresh #%d", sent)
