from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import pandas as pd

from core.aggregate import aggregate_suspensions, flatten_groups


ALL = "all"

YEAR_RANGE_OPTIONS = [ALL, "2010-2014", "2000-2009", "1990-1999", "1980-1989"]

# bucket -> (min games, max games) inclusive; None means unbounded.
LENGTH_BUCKETS = {
    "short": (1, 4),
    "medium": (5, 10),
    "long": (11, None),
}
LENGTH_BUCKET_LABELS = {
    ALL: "All Lengths",
    "short": "Short (1-4 games)",
    "medium": "Medium (5-10 games)",
    "long": "Long (10+ games)",
}

_YEAR_RANGE = re.compile(r"^\s*(\d{4})\s*-\s*(\d{4})\s*$")


@dataclass(frozen=True)
class SuspensionFilters:
    year_range: str = ALL
    length_bucket: str = ALL
    team: str = ALL


def parse_year_range(value: object) -> Optional[Tuple[int, int]]:
    """Parse "YYYY-YYYY" into inclusive bounds. "all" or anything unparseable -> None."""
    if value is None:
        return None
    s = str(value).strip()
    if not s or s.lower() == ALL:
        return None
    match = _YEAR_RANGE.match(s)
    if not match:
        return None
    start, end = int(match.group(1)), int(match.group(2))
    return (start, end) if start <= end else (end, start)


def normalize_filters(raw: dict, *, available_teams: Optional[Iterable[str]] = None) -> SuspensionFilters:
    raw = raw or {}

    year_bounds = parse_year_range(raw.get("year_range"))
    year_range = f"{year_bounds[0]}-{year_bounds[1]}" if year_bounds else ALL

    length_bucket = str(raw.get("length_bucket") or ALL).strip().lower()
    if length_bucket not in LENGTH_BUCKETS:
        length_bucket = ALL

    team = str(raw.get("team") or ALL).strip()
    if team.lower() == ALL:
        team = ALL
    elif available_teams is not None and team not in set(available_teams):
        team = ALL

    return SuspensionFilters(year_range=year_range, length_bucket=length_bucket, team=team)


def length_bucket_mask(games: pd.Series, bucket: str) -> pd.Series:
    if bucket not in LENGTH_BUCKETS:
        return pd.Series(True, index=games.index)
    lo, hi = LENGTH_BUCKETS[bucket]
    mask = games >= lo
    if hi is not None:
        mask &= games <= hi
    return mask


def filter_players(players: pd.DataFrame, filters: SuspensionFilters) -> pd.DataFrame:
    """Year and team filters at player level."""
    out = players
    bounds = parse_year_range(filters.year_range)
    if bounds is not None and not out.empty:
        years = pd.to_numeric(out["year"], errors="coerce")
        out = out[years.between(bounds[0], bounds[1]).fillna(False).astype(bool)]
    if filters.team != ALL and not out.empty:
        out = out[out["team"] == filters.team]
    return out


def apply_filters(groups: pd.DataFrame, filters: SuspensionFilters) -> pd.DataFrame:
    """Filter aggregated groups and recompute their counts and shares.

    Year and team select players inside each group; groups left without
    players disappear. ``count`` and ``percentage`` are recomputed over the
    surviving players before the length bucket narrows the view, so shares
    stay relative to the year/team population of each subcategory.
    """
    players = filter_players(flatten_groups(groups), filters)
    regrouped = aggregate_suspensions(players)
    if regrouped.empty or filters.length_bucket == ALL:
        return regrouped
    mask = length_bucket_mask(regrouped["games"], filters.length_bucket)
    return regrouped[mask].reset_index(drop=True)
