from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)

DRUG_VIOLATIONS = "Drug Violations"
CONDUCT_VIOLATIONS = "Conduct Violations"

PEDS = "PEDs"
PEDS_REPEATED = "PEDs, more than once"
SUBSTANCE_ABUSE = "Substance abuse"
SUBSTANCE_ABUSE_REPEATED = "Substance abuse, more than once"
IN_GAME_VIOLENCE = "In-game violence"
PERSONAL_CONDUCT = "Personal conduct"

# Display order along the offense axis.
SUBCATEGORY_ORDER = [
    PEDS,
    PEDS_REPEATED,
    SUBSTANCE_ABUSE,
    SUBSTANCE_ABUSE_REPEATED,
    IN_GAME_VIOLENCE,
    PERSONAL_CONDUCT,
]

# Longest finite ban in the dataset is 36 games.
INDEFINITE_GAMES = 40
INDEFINITE_TOKEN = "Indef."

REPEATED_MARKER = "repeated"

RAW_COLUMNS = ["name", "team", "games", "category", "desc", "year", "source"]
SUSPENSION_COLUMNS = ["name", "team", "games", "category", "sub_category", "description", "year", "source"]

_DIGITS = re.compile(r"[0-9]+")


def classify_category(text: object) -> Optional[Tuple[str, str]]:
    """Map a raw category string to (category, sub_category); None if unrecognized."""
    if text is None or pd.isna(text):
        return None
    s = str(text)
    repeated = REPEATED_MARKER in s
    if "PEDs" in s:
        return DRUG_VIOLATIONS, PEDS_REPEATED if repeated else PEDS
    if "Substance abuse" in s:
        return DRUG_VIOLATIONS, SUBSTANCE_ABUSE_REPEATED if repeated else SUBSTANCE_ABUSE
    if "In-game violence" in s:
        return CONDUCT_VIOLATIONS, IN_GAME_VIOLENCE
    if "Personal conduct" in s:
        return CONDUCT_VIOLATIONS, PERSONAL_CONDUCT
    return None


def parse_games(value: object) -> Optional[int]:
    """Parse a suspension length. "Indef." -> 40, digits -> int, anything else -> None."""
    if value is None or pd.isna(value):
        return None
    s = str(value).strip()
    if s == INDEFINITE_TOKEN:
        return INDEFINITE_GAMES
    if not _DIGITS.fullmatch(s):
        return None
    return int(s)


def classify_records(raw: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split raw rows into cleaned suspensions and rejected rows.

    The cleaned frame carries SUSPENSION_COLUMNS with ``games`` as int and
    ``year`` as nullable Int64. Rejected rows keep their raw columns plus a
    ``reject_reason`` column.
    """
    raw = raw.reset_index(drop=True)
    for col in RAW_COLUMNS:
        if col not in raw.columns:
            raw[col] = np.nan

    if raw.empty:
        raw["reject_reason"] = pd.Series(dtype=object)
        return pd.DataFrame(columns=SUSPENSION_COLUMNS), raw

    text = raw["category"].fillna("").astype(str)

    def _has(token: str) -> np.ndarray:
        return text.str.contains(token, regex=False).to_numpy(dtype=bool)

    repeated = _has(REPEATED_MARKER)
    is_peds = _has("PEDs")
    is_substance = _has("Substance abuse")
    is_violence = _has("In-game violence")
    is_conduct = _has("Personal conduct")

    # np.select takes the first matching condition, which gives the rule priority.
    conditions = [is_peds, is_substance, is_violence, is_conduct]
    category = np.select(
        conditions,
        [DRUG_VIOLATIONS, DRUG_VIOLATIONS, CONDUCT_VIOLATIONS, CONDUCT_VIOLATIONS],
        default="",
    )
    sub_category = np.select(
        conditions,
        [
            np.where(repeated, PEDS_REPEATED, PEDS),
            np.where(repeated, SUBSTANCE_ABUSE_REPEATED, SUBSTANCE_ABUSE),
            IN_GAME_VIOLENCE,
            PERSONAL_CONDUCT,
        ],
        default="",
    )
    games = raw["games"].apply(parse_games)

    unrecognized = pd.Series(category == "", index=raw.index)
    invalid_games = games.isna() & ~unrecognized

    dropped = (unrecognized | invalid_games).to_numpy()
    rejected = raw[dropped].copy()
    rejected["reject_reason"] = np.where(unrecognized.to_numpy()[dropped], "unrecognized_category", "invalid_games")

    keep = ~(unrecognized | invalid_games)
    cleaned = pd.DataFrame(
        {
            "name": raw.loc[keep, "name"],
            "team": raw.loc[keep, "team"],
            "games": games[keep].astype(int),
            "category": category[keep.to_numpy()],
            "sub_category": sub_category[keep.to_numpy()],
            "description": raw.loc[keep, "desc"],
            "year": pd.to_numeric(raw.loc[keep, "year"], errors="coerce").astype("Int64"),
            "source": raw.loc[keep, "source"],
        },
        columns=SUSPENSION_COLUMNS,
    ).reset_index(drop=True)

    if not rejected.empty:
        logger.info(
            "Dropped %d of %d rows (%d unrecognized category, %d invalid games)",
            len(rejected),
            len(raw),
            int(unrecognized.sum()),
            int(invalid_games.sum()),
        )
    return cleaned, rejected.reset_index(drop=True)
