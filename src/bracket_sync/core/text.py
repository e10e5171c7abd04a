from __future__ import annotations

import re

_non_alnum_re = re.compile(r"[^a-z0-9]")


def normalize_team_name(value: str) -> str:
    """Normalize a team name for matching across providers.

    Lowercases and drops every non-alphanumeric character, so "St. John's"
    and "st johns" both become "stjohns". No alias table is consulted:
    "UConn" and "Connecticut" stay distinct.
    """

    return _non_alnum_re.sub("", value.strip().lower())


def to_title_case(value: str) -> str:
    if not value:
        return ""
    return value[:1].upper() + value[1:].lower()
