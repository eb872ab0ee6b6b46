from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from core.aggregate import summarize_subcategories
from core.charts import build_group_bubbles, build_suspension_scatter, format_games, to_vega_spec
from core.classify import CONDUCT_VIOLATIONS, DRUG_VIOLATIONS, INDEFINITE_GAMES
from core.filters import SuspensionFilters


def _as_int(value: Any) -> Optional[int]:
    if value is None or pd.isna(value):
        return None
    try:
        return int(value)
    except Exception:
        return None


def groups_to_records(groups: pd.DataFrame) -> List[Dict[str, Any]]:
    if groups is None or groups.empty:
        return []
    out = []
    for row in groups.to_dict(orient="records"):
        row["games"] = int(row["games"])
        row["count"] = int(row["count"])
        row["percentage"] = float(row["percentage"])
        row["games_label"] = format_games(row["games"])
        out.append(row)
    return out


def compute_overview(filters: SuspensionFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    groups: pd.DataFrame = ctx.get("filtered_groups", pd.DataFrame())
    players: pd.DataFrame = ctx.get("filtered_suspensions", pd.DataFrame())

    if groups.empty:
        return {
            "filters": asdict(filters),
            "kpis": {"suspensions": 0, "groups": 0, "drug_violations": 0, "conduct_violations": 0, "indefinite": 0, "teams": 0},
            "groups": [],
            "summary": [],
            "charts": {},
        }

    by_category = groups.groupby("category")["count"].sum()
    kpis = {
        "suspensions": int(groups["count"].sum()),
        "groups": int(len(groups)),
        "drug_violations": int(by_category.get(DRUG_VIOLATIONS, 0)),
        "conduct_violations": int(by_category.get(CONDUCT_VIOLATIONS, 0)),
        "indefinite": int(groups.loc[groups["games"] >= INDEFINITE_GAMES, "count"].sum()),
        "teams": int(players["team"].replace("", pd.NA).dropna().nunique()) if not players.empty else 0,
    }

    summary = summarize_subcategories(groups)
    charts = {
        "suspension_scatter": to_vega_spec(build_suspension_scatter(groups)),
        "group_bubbles": to_vega_spec(build_group_bubbles(groups)),
    }
    return {
        "filters": asdict(filters),
        "kpis": kpis,
        "groups": groups_to_records(groups),
        "summary": summary.to_dict(orient="records"),
        "charts": charts,
    }


def compute_group_detail(ctx: Dict[str, Any], sub_category: str, games: Any) -> Dict[str, Any]:
    """Detail panel for a single (subcategory, games) group of the filtered view."""
    groups: pd.DataFrame = ctx.get("filtered_groups", pd.DataFrame())
    games_value = _as_int(games)
    payload: Dict[str, Any] = {
        "sub_category": sub_category,
        "games": games_value,
        "games_label": format_games(games_value),
        "category": None,
        "count": 0,
        "percentage": None,
        "players": [],
    }
    if groups.empty or games_value is None:
        return payload

    match = groups[(groups["sub_category"] == sub_category) & (groups["games"] == games_value)]
    if match.empty:
        return payload

    row = match.iloc[0]
    players = sorted(
        row["players"],
        key=lambda p: (p.get("year") is None, p.get("year") or 0, str(p.get("name") or "")),
    )
    payload.update(
        {
            "category": row["category"],
            "count": int(row["count"]),
            "percentage": float(row["percentage"]),
            "players": [{**p, "games_label": format_games(p.get("games"))} for p in players],
        }
    )
    return payload
