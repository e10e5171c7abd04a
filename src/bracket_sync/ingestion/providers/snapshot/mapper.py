from __future__ import annotations

import json

from bracket_sync.domain.enums import SourceKind
from bracket_sync.domain.models import Tournament
from bracket_sync.ingestion.providers.base.errors import MalformedPayload
from bracket_sync.ingestion.providers.base.types import Json
from bracket_sync.ingestion.providers.espn.mapper import (
    map_tournament_entry,
    map_tournaments_payload,
)


def parse_snapshot_text(text: str, *, origin: str) -> Json:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedPayload(f"invalid snapshot json: {e}", context={"origin": origin}) from e
    if not isinstance(data, dict):
        raise MalformedPayload("snapshot is not a JSON object", context={"origin": origin})
    return data


def map_snapshot_payload(payload: Json, *, year: int, source: SourceKind) -> Tournament:
    """Map a snapshot stored in the live provider's schema.

    Accepts either the full `tournaments` listing or a single tournament entry
    (an object with a `bracket`). Games come out bridged to their own event ids.
    """

    if "tournaments" in payload:
        return map_tournaments_payload(payload, year=year, source=source)
    if isinstance(payload.get("bracket"), dict):
        return map_tournament_entry(payload, year=year, source=source)
    raise MalformedPayload("snapshot has neither tournaments nor bracket", context={"year": year})
