from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.filters import SuspensionFilters


def compute_debug(filters: SuspensionFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    raw: pd.DataFrame = ctx.get("raw", pd.DataFrame())
    suspensions: pd.DataFrame = ctx.get("suspensions", pd.DataFrame())
    rejected: pd.DataFrame = ctx.get("rejected", pd.DataFrame())
    groups: pd.DataFrame = ctx.get("groups", pd.DataFrame())
    filtered_groups: pd.DataFrame = ctx.get("filtered_groups", pd.DataFrame())

    payload = {
        "filters": asdict(filters),
        "file": ctx.get("file"),
        "row_counts": {
            "raw_rows": int(len(raw)),
            "suspension_rows": int(len(suspensions)),
            "rejected_rows": int(len(rejected)),
            "groups": int(len(groups)),
            "filtered_groups": int(len(filtered_groups)),
        },
        "rejected_by_reason": {},
        "unrecognized_categories": [],
        "invalid_games_values": [],
        "year_coverage": {},
        "missing_year_rows": 0,
    }

    if not rejected.empty and "reject_reason" in rejected.columns:
        payload["rejected_by_reason"] = {str(k): int(v) for k, v in rejected["reject_reason"].value_counts().items()}
        unrecognized = rejected[rejected["reject_reason"] == "unrecognized_category"]
        if not unrecognized.empty:
            top = unrecognized["category"].astype(str).value_counts().head(20)
            payload["unrecognized_categories"] = [{"category": k, "count": int(v)} for k, v in top.items()]
        invalid = rejected[rejected["reject_reason"] == "invalid_games"]
        if not invalid.empty:
            payload["invalid_games_values"] = sorted(invalid["games"].astype(str).unique().tolist())

    if not suspensions.empty and "year" in suspensions.columns:
        years = pd.to_numeric(suspensions["year"], errors="coerce")
        payload["missing_year_rows"] = int(years.isna().sum())
        if years.notna().any():
            payload["year_coverage"] = {
                "min": int(years.min()),
                "max": int(years.max()),
                "distinct": int(years.nunique()),
            }
    return payload
