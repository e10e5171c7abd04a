from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from bracket_sync.core.dates import infer_year_from_path
from bracket_sync.domain.enums import SourceKind
from bracket_sync.domain.models import Tournament
from bracket_sync.ingestion.providers.base.errors import MalformedPayload, ProviderRequestError
from bracket_sync.ingestion.providers.snapshot.mapper import (
    map_snapshot_payload,
    parse_snapshot_text,
)

logger = logging.getLogger(__name__)

EMBEDDED_SNAPSHOT_YEAR = 2025
EMBEDDED_SNAPSHOT_FILE = "2025_bracket.json"


@dataclass
class LocalOverrideSource:
    """Pre-fetched snapshot named by the environment, consulted before any network source."""

    path: str
    default_year: int
    name: str = "local_override"

    async def fetch_tournament(self) -> Tournament:
        try:
            raw = Path(self.path).read_bytes()
        except OSError as e:
            raise ProviderRequestError(f"could not read {self.path}: {e}") from e
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedPayload(
                f"override is not valid UTF-8: {e}", context={"origin": self.path}
            ) from e

        year = infer_year_from_path(self.path) or self.default_year
        logger.info("using local bracket override %s (year %s)", self.path, year)
        payload = parse_snapshot_text(text, origin=self.path)
        return map_snapshot_payload(payload, year=year, source=SourceKind.LOCAL_OVERRIDE)


@dataclass
class EmbeddedSnapshotSource:
    """Snapshot bundled with the package; the last resort when every network source fails."""

    name: str = "embedded_snapshot"
    filename: str = EMBEDDED_SNAPSHOT_FILE
    year: int = EMBEDDED_SNAPSHOT_YEAR

    async def fetch_tournament(self) -> Tournament:
        try:
            text = (resources.files("bracket_sync") / "data" / self.filename).read_text(
                encoding="utf-8"
            )
        except OSError as e:
            raise ProviderRequestError(f"embedded snapshot {self.filename} unreadable: {e}") from e

        payload = parse_snapshot_text(text, origin=self.filename)
        return map_snapshot_payload(payload, year=self.year, source=SourceKind.EMBEDDED_SNAPSHOT)
