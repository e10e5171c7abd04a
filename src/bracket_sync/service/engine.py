from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from typing import Any, Protocol

from bracket_sync.core.config import Settings
from bracket_sync.domain.models import Game, GameDetail, Tournament
from bracket_sync.ingestion.orchestrator import build_sources, fetch_tournament
from bracket_sync.ingestion.providers.base.client import BaseHttpClient
from bracket_sync.ingestion.providers.base.errors import ProviderError
from bracket_sync.ingestion.providers.base.types import BracketSource
from bracket_sync.ingestion.providers.espn.client import EspnClient
from bracket_sync.ingestion.providers.ncaa.client import NcaaClient
from bracket_sync.service.messages import (
    BracketLoaded,
    BracketUpdated,
    Busy,
    DetailUnavailable,
    EngineState,
    Error,
    GameDetailLoaded,
    LoadBracket,
    LoadGameDetail,
    RefreshDiscarded,
    RefreshScores,
    Request,
    Response,
    ScoresUnavailable,
)
from bracket_sync.sync.bridge import bridge
from bracket_sync.sync.errors import AdvancementConflict, AllSourcesFailed, StaleUpdate
from bracket_sync.sync.merge import GameUpdate, apply_update

logger = logging.getLogger(__name__)

DETAIL_NOT_YET_AVAILABLE = (
    "Game detail not yet available: this game has not been matched to live data. "
    "Check back once the field is seeded."
)


class LiveScores(Protocol):
    async def fetch_scoreboard(self) -> list[Game]:
        ...

    async def fetch_game_detail(self, live_id: str) -> GameDetail:
        ...


class BracketSyncEngine:
    """Sole owner of the Tournament.

    Loads and refreshes are serialized: a load while another load is in flight
    is rejected as Busy, a refresh while anything is in flight is rejected as
    Busy, and a load supersedes an in-flight refresh, whose result is then
    discarded. Every Tournament gets a fresh stamp; refresh results computed
    against an older stamp are never merged.
    """

    def __init__(
        self,
        *,
        sources: Sequence[BracketSource],
        live: LiveScores,
        attempt_timeout_s: float | None = None,
        on_close: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._sources = list(sources)
        self._live = live
        self._attempt_timeout_s = attempt_timeout_s
        self._on_close = on_close

        self._tournament: Tournament | None = None
        self._stamp = 0
        self._state = EngineState.IDLE
        self._inflight: tuple[type[Request], asyncio.Future[Any]] | None = None
        self._handlers: set[asyncio.Task[Response]] = set()

    @classmethod
    def from_settings(cls, cfg: Settings, *, now: datetime | None = None) -> BracketSyncEngine:
        def http(base_url: str, provider: str) -> BaseHttpClient:
            return BaseHttpClient(
                base_url=base_url,
                provider=provider,
                timeout_s=cfg.request_timeout_s,
                connect_timeout_s=cfg.connect_timeout_s,
                headers=cfg.http_headers(),
            )

        ncaa_http = http(cfg.ncaa_api_base_url, "ncaa")
        espn = EspnClient(
            site=http(cfg.espn_site_base_url, "espn"), v2=http(cfg.espn_v2_base_url, "espn")
        )

        async def close() -> None:
            await ncaa_http.aclose()
            await espn.aclose()

        return cls(
            sources=build_sources(cfg, ncaa=NcaaClient(http=ncaa_http), espn=espn, now=now),
            live=espn,
            attempt_timeout_s=cfg.source_timeout_s,
            on_close=close,
        )

    async def aclose(self) -> None:
        for task in list(self._handlers):
            task.cancel()
        if self._on_close is not None:
            await self._on_close()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def tournament(self) -> Tournament | None:
        return self._tournament

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def accepting_refresh(self) -> bool:
        return self._tournament is not None and self._inflight is None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def handle(self, request: Request) -> Response:
        if isinstance(request, LoadBracket):
            return await self.load_bracket()
        if isinstance(request, RefreshScores):
            return await self.refresh_scores()
        if isinstance(request, LoadGameDetail):
            return await self.load_game_detail(request.bracket_id, request.live_id)
        raise TypeError(f"unsupported request: {request!r}")

    async def load_bracket(self) -> Response:
        if self._inflight is not None:
            kind, running = self._inflight
            if kind is LoadBracket:
                logger.info("bracket load already in progress; rejecting")
                return Busy(request=LoadBracket())
            logger.info("bracket load supersedes in-flight score refresh")
            running.cancel()

        task = asyncio.ensure_future(
            fetch_tournament(self._sources, attempt_timeout_s=self._attempt_timeout_s)
        )
        self._inflight = (LoadBracket, task)
        self._state = EngineState.FETCHING

        try:
            tournament = await task
        except AllSourcesFailed as e:
            logger.error("bracket load failed: %s", e)
            return Error(
                message=str(e),
                errors={name: str(err) or type(err).__name__ for name, err in e.errors.items()},
            )
        finally:
            if self._inflight is not None and self._inflight[1] is task:
                self._inflight = None
            if self._state is EngineState.FETCHING:
                self._state = EngineState.READY if self._tournament else EngineState.IDLE

        self._stamp += 1
        tournament.stamp = self._stamp
        self._tournament = tournament
        self._state = EngineState.READY
        return BracketLoaded(tournament=tournament, source=tournament.source)

    async def refresh_scores(self) -> Response:
        if self._inflight is not None:
            logger.info("refresh rejected: %s in progress", self._inflight[0].__name__)
            return Busy(request=RefreshScores())

        tournament = self._tournament
        if tournament is None:
            return ScoresUnavailable(message="no bracket loaded yet")

        stamp = tournament.stamp
        task = asyncio.ensure_future(self._live.fetch_scoreboard())
        self._inflight = (RefreshScores, task)
        self._state = EngineState.REFRESHING

        owner = True
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            owner = self._inflight is not None and self._inflight[1] is task
            if owner:
                self._inflight = None
                self._state = EngineState.READY

        if not owner or task.cancelled():
            logger.info("score refresh superseded by bracket load; discarding")
            return RefreshDiscarded(reason="superseded by a bracket load")

        exc = task.exception()
        if isinstance(exc, ProviderError):
            logger.warning("live scores unavailable: %s", exc)
            return ScoresUnavailable(message=str(exc))
        if exc is not None:
            raise exc

        return self._merge(task.result(), stamp=stamp)

    def _merge(self, live_games: list[Game], *, stamp: int) -> Response:
        tournament = self._tournament
        if tournament is None or tournament.stamp != stamp:
            return RefreshDiscarded(reason="computed against a replaced bracket")

        bridged = bridge(tournament, live_games)
        updates = [GameUpdate.from_live_game(g) for g in live_games]
        warnings: list[str] = []
        try:
            result = apply_update(tournament, updates, stamp=stamp)
        except StaleUpdate as e:
            return RefreshDiscarded(reason=str(e))
        except AdvancementConflict as e:
            result = e.result
            warnings = list(e.conflicts)

        logger.info(
            "refresh: %d live games, %d bridged, %d changed, %d dropped",
            len(live_games),
            bridged,
            len(result.changed),
            len(result.dropped),
        )
        return BracketUpdated(
            stamp=stamp,
            bridged=bridged,
            changed=result.changed,
            advanced=result.advanced,
            dropped=result.dropped,
            warnings=warnings,
        )

    async def load_game_detail(self, bracket_id: str, live_id: str | None = None) -> Response:
        if not live_id:
            logger.debug("no live id for bracket game %s; detail not yet available", bracket_id)
            return DetailUnavailable(bracket_id=bracket_id, message=DETAIL_NOT_YET_AVAILABLE)

        try:
            detail = await self._live.fetch_game_detail(live_id)
        except ProviderError as e:
            logger.warning("game detail for %s unavailable: %s", live_id, e)
            return DetailUnavailable(bracket_id=bracket_id, message=str(e), live_id=live_id)
        return GameDetailLoaded(bracket_id=bracket_id, detail=detail)

    # ------------------------------------------------------------------
    # Queue worker
    # ------------------------------------------------------------------

    async def run(
        self,
        requests: asyncio.Queue[Request | None],
        responses: asyncio.Queue[Response],
    ) -> None:
        """Consume requests until a None sentinel, posting each response as it completes.

        Each request runs as its own task so that a bracket load can supersede
        an in-flight refresh.
        """
        while True:
            request = await requests.get()
            if request is None:
                break
            task = asyncio.ensure_future(self.handle(request))
            self._handlers.add(task)
            task.add_done_callback(lambda t: self._deliver(t, responses))

        if self._handlers:
            await asyncio.wait(set(self._handlers))

    def _deliver(self, task: asyncio.Task[Response], responses: asyncio.Queue[Response]) -> None:
        self._handlers.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("request handler failed", exc_info=exc)
            responses.put_nowait(Error(message=str(exc) or type(exc).__name__))
            return
        responses.put_nowait(task.result())
