from __future__ import annotations

from dataclasses import dataclass


class ProviderError(RuntimeError):
    """A bracket source could not produce data; the fetch chain moves on to the next one."""


class ProviderRequestError(ProviderError):
    """Transport failure: connect/timeout, non-2xx, undecodable body, unreadable local file."""


class ProviderRateLimited(ProviderRequestError):
    """HTTP 429 from a provider."""


@dataclass(frozen=True)
class ProviderMappingError(ProviderError):
    """A payload arrived but could not be mapped onto the bracket model."""
    message: str
    context: dict[str, object] | None = None

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return f"{self.message} | context={self.context}"


@dataclass(frozen=True)
class MalformedPayload(ProviderMappingError):
    """A structurally required field (game list, game identifiers) is absent or unusable."""
