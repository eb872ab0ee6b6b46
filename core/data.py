from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from core.aggregate import aggregate_suspensions, flatten_groups
from core.classify import RAW_COLUMNS, classify_records
from core.filters import SuspensionFilters, apply_filters, normalize_filters


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1]
SOURCE_FILENAME = "NFL Suspensions Data.csv"
SOURCE_ENV_VAR = "NFL_SUSPENSIONS_CSV"

REQUIRED_COLUMNS = ["games", "category"]


def get_source_file() -> Path:
    override = os.environ.get(SOURCE_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return DATA_DIR / SOURCE_FILENAME


def file_signature(path: Path) -> Tuple[str, float]:
    return str(path.resolve()), path.stat().st_mtime


def load_raw_records(path: Path) -> pd.DataFrame:
    """Read the suspensions CSV with every column as text."""
    if not path.exists():
        raise FileNotFoundError(f"Suspensions file not found: {path}")
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path.name} is missing required column(s): {', '.join(missing)}")
    for col in RAW_COLUMNS:
        if col not in df.columns:
            df[col] = ""
        df[col] = df[col].astype(str).str.strip()
    return df[RAW_COLUMNS]


def collect_teams(suspensions: pd.DataFrame) -> List[str]:
    if suspensions.empty or "team" not in suspensions.columns:
        return []
    teams = suspensions["team"].dropna().astype(str).str.strip()
    return sorted(t for t in teams.unique() if t)


def collect_years(suspensions: pd.DataFrame) -> List[int]:
    if suspensions.empty or "year" not in suspensions.columns:
        return []
    years = pd.to_numeric(suspensions["year"], errors="coerce").dropna().astype(int)
    return sorted(years.unique().tolist())


# ---------------- Public API (Streamlit parity + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_suspension_data_cached(file_sig: Tuple[str, float]) -> Dict[str, object]:
    path = Path(file_sig[0])
    raw = load_raw_records(path)
    suspensions, rejected = classify_records(raw)
    groups = aggregate_suspensions(suspensions)
    logger.info("Loaded %s: %d rows, %d suspensions, %d groups", path.name, len(raw), len(suspensions), len(groups))
    return {
        "file": path.name,
        "raw": raw,
        "suspensions": suspensions,
        "rejected": rejected,
        "groups": groups,
        "teams": collect_teams(suspensions),
        "years": collect_years(suspensions),
    }


def load_suspension_data(path: Optional[Path] = None) -> Dict[str, object]:
    """Load, classify and aggregate the suspensions file once per file version."""
    path = path or get_source_file()
    if not path.exists():
        raise FileNotFoundError(f"Suspensions file not found: {path} (place {SOURCE_FILENAME} in {DATA_DIR} or set {SOURCE_ENV_VAR})")
    return _load_suspension_data_cached(file_signature(path))


def clear_cache() -> None:
    _load_suspension_data_cached.cache_clear()


def prepare_context(filters: dict | SuspensionFilters, data_ctx: Dict[str, object]) -> Dict[str, object]:
    groups: pd.DataFrame = data_ctx.get("groups", pd.DataFrame())
    teams = data_ctx.get("teams")
    filt = filters if isinstance(filters, SuspensionFilters) else normalize_filters(filters, available_teams=teams)

    filtered_groups = apply_filters(groups, filt)
    return {
        **data_ctx,
        "filters": filt,
        "filtered_groups": filtered_groups,
        "filtered_suspensions": flatten_groups(filtered_groups),
    }
