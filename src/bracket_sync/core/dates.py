from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any

_digits_re = re.compile(r"\d+")


def season_tournament_year(now: datetime) -> int:
    """Championship year for the season in progress at `now`.

    The season straddles New Year, so November and December belong to the
    following year's tournament.
    """
    if now.month >= 11:
        return now.year + 1
    return now.year


def candidate_tournament_years(season_year: int, *, snapshot_year: int) -> list[int]:
    """Season year first, then nearest neighbours, always including `snapshot_year`."""

    years = {season_year, season_year - 1, season_year + 1, snapshot_year}
    return sorted(years, key=lambda y: (abs(y - season_year), y))


def infer_year_from_path(path: str) -> int | None:
    for token in _digits_re.findall(path):
        if len(token) != 4:
            continue
        year = int(token)
        if 2000 <= year <= 2100:
            return year
        return None
    return None


def parse_optional_iso(value: Any) -> datetime | None:
    """Best-effort ISO-8601 parse; returns None instead of raising on bad input."""

    if not isinstance(value, str) or not value.strip():
        return None
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(v)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
