from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from core.classify import INDEFINITE_GAMES, SUBCATEGORY_ORDER, SUSPENSION_COLUMNS


GROUP_KEYS = ["category", "sub_category", "games"]
GROUP_COLUMNS = GROUP_KEYS + ["count", "percentage", "players"]


def _empty_groups() -> pd.DataFrame:
    return pd.DataFrame(columns=GROUP_COLUMNS)


def _text(value: Any) -> Any:
    if value is None or pd.isna(value):
        return None
    return value


def _player_record(row: Dict[str, Any]) -> Dict[str, Any]:
    year = _text(row.get("year"))
    return {
        "name": _text(row.get("name")),
        "team": _text(row.get("team")),
        "games": int(row["games"]),
        "category": row.get("category"),
        "sub_category": row.get("sub_category"),
        "description": _text(row.get("description")),
        "year": None if year is None else int(year),
        "source": _text(row.get("source")),
    }


def aggregate_suspensions(suspensions: pd.DataFrame) -> pd.DataFrame:
    """Group cleaned suspensions by category, subcategory and games.

    Each output row is one non-empty group with its size (``count``), its share
    of the (category, sub_category) total (``percentage``) and the player
    records behind it (``players``, in input order). Groups come out in
    first-appearance order of their keys.
    """
    if suspensions is None or suspensions.empty:
        return _empty_groups()

    df = suspensions.copy()
    df["games"] = df["games"].astype(int)
    records = df.reindex(columns=SUSPENSION_COLUMNS).to_dict(orient="records")
    df["_player"] = [_player_record(r) for r in records]

    grouped = (
        df.groupby(GROUP_KEYS, sort=False)
        .agg(count=("_player", "size"), players=("_player", list))
        .reset_index()
    )
    subtotal = grouped.groupby(["category", "sub_category"], sort=False)["count"].transform("sum")
    grouped["percentage"] = grouped["count"] / subtotal
    grouped["count"] = grouped["count"].astype(int)
    return grouped[GROUP_COLUMNS].reset_index(drop=True)


def flatten_groups(groups: pd.DataFrame) -> pd.DataFrame:
    """One row per player, carrying the keys of the group it came from."""
    if groups is None or groups.empty:
        return pd.DataFrame(columns=SUSPENSION_COLUMNS)
    rows: List[Dict[str, Any]] = []
    for group in groups.itertuples(index=False):
        for player in group.players:
            row = dict(player)
            row["category"] = group.category
            row["sub_category"] = group.sub_category
            row["games"] = int(group.games)
            rows.append(row)
    if not rows:
        return pd.DataFrame(columns=SUSPENSION_COLUMNS)
    out = pd.DataFrame(rows).reindex(columns=SUSPENSION_COLUMNS)
    out["year"] = pd.to_numeric(out["year"], errors="coerce").astype("Int64")
    return out


def summarize_subcategories(groups: pd.DataFrame) -> pd.DataFrame:
    cols = [
        "category",
        "sub_category",
        "suspensions",
        "distinct_lengths",
        "median_games",
        "max_games",
        "indefinite",
    ]
    if groups is None or groups.empty:
        return pd.DataFrame(columns=cols)

    def _summary(g: pd.DataFrame) -> Dict[str, Any]:
        finite = g[g["games"] < INDEFINITE_GAMES]
        expanded = finite["games"].repeat(finite["count"])
        return {
            "suspensions": int(g["count"].sum()),
            "distinct_lengths": int(g["games"].nunique()),
            "median_games": float(expanded.median()) if not expanded.empty else None,
            "max_games": int(finite["games"].max()) if not finite.empty else None,
            "indefinite": int(g.loc[g["games"] >= INDEFINITE_GAMES, "count"].sum()),
        }

    rows = []
    for (category, sub_category), g in groups.groupby(["category", "sub_category"], sort=False):
        row = _summary(g)
        row.update({"category": category, "sub_category": sub_category})
        rows.append(row)
    out = pd.DataFrame(rows, columns=cols)
    order = {name: i for i, name in enumerate(SUBCATEGORY_ORDER)}
    out["_order"] = out["sub_category"].map(order).fillna(len(order))
    return out.sort_values("_order", kind="stable").drop(columns="_order").reset_index(drop=True)
