from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from bracket_sync.domain.models import Tournament

Json = dict[str, Any]


class BracketSource(Protocol):
    """
    One entry in the ordered fetch chain.

    A source performs its own request + map cycle and either returns a
    Tournament or raises a ProviderError (transport or mapping).
    """

    name: str

    async def fetch_tournament(self) -> Tournament:
        ...
