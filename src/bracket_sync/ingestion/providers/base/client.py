from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from .errors import ProviderRateLimited, ProviderRequestError
from .types import Json

logger = logging.getLogger(__name__)


@dataclass
class BaseHttpClient:
    """
    Async JSON-over-HTTP client shared by the bracket providers.

    - One pooled httpx.AsyncClient per provider root.
    - Every failure (connect, timeout, non-2xx, non-JSON body, non-object body)
      surfaces as ProviderRequestError tagged with `provider`, so the fetch chain
      can treat the whole source as unavailable and move on.
    - Provider clients wrap this and add endpoint methods.
    """

    base_url: str
    provider: str = "http"
    timeout_s: float = 10.0
    connect_timeout_s: float = 5.0
    headers: Mapping[str, str] = field(default_factory=dict)

    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self.base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(self.timeout_s, connect=self.connect_timeout_s),
            headers=dict(self.headers),
            transport=self.transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> BaseHttpClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def get_json(self, path: str, *, params: Mapping[str, Any] | None = None) -> Json:
        """GET `path` below the base url and return the decoded JSON object."""

        logger.debug("%s: GET %s params=%s", self.provider, path, params)
        try:
            resp = await self._client.get(path.lstrip("/"), params=params)
        except httpx.TimeoutException as e:
            raise ProviderRequestError(f"{self.provider}: timed out on {path}") from e
        except httpx.TransportError as e:
            raise ProviderRequestError(
                f"{self.provider}: {type(e).__name__} on {path}: {e}"
            ) from e

        if resp.status_code == 429:
            retry_after = resp.headers.get("Retry-After")
            hint = f", retry after {retry_after}s" if retry_after else ""
            raise ProviderRateLimited(f"{self.provider}: rate limited (HTTP 429{hint})")

        if not resp.is_success:
            raise ProviderRequestError(
                f"{self.provider}: HTTP {resp.status_code} for {resp.request.url}"
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderRequestError(f"{self.provider}: {path} did not return JSON") from e

        if not isinstance(data, dict):
            raise ProviderRequestError(
                f"{self.provider}: {path} returned {type(data).__name__}, expected an object"
            )
        return data
