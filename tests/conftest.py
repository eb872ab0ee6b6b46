"""Shared fixtures built around a small suspensions CSV.

The sample file holds 11 rows: 9 classifiable suspensions, one unrecognized
category ("Gambling") and one malformed games value ("TBD").
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from core.aggregate import aggregate_suspensions
from core.classify import classify_records
from core.data import clear_cache, load_raw_records, load_suspension_data

SAMPLE_CSV = Path(__file__).parent / "sample_data" / "suspensions_sample.csv"


@pytest.fixture
def sample_csv() -> Path:
    return SAMPLE_CSV


@pytest.fixture
def raw_df(sample_csv) -> pd.DataFrame:
    return load_raw_records(sample_csv)


@pytest.fixture
def suspensions_df(raw_df) -> pd.DataFrame:
    cleaned, _ = classify_records(raw_df)
    return cleaned


@pytest.fixture
def groups_df(suspensions_df) -> pd.DataFrame:
    return aggregate_suspensions(suspensions_df)


@pytest.fixture
def data_ctx(sample_csv):
    clear_cache()
    yield load_suspension_data(sample_csv)
    clear_cache()


@pytest.fixture
def example_groups() -> pd.DataFrame:
    # Two 4-game PED bans and one indefinite repeat PED ban.
    raw = pd.DataFrame(
        [
            {"name": "A", "team": "X", "games": "4", "category": "PEDs violation", "year": "2012"},
            {"name": "B", "team": "Y", "games": "4", "category": "PEDs violation", "year": "2013"},
            {"name": "C", "team": "X", "games": "Indef.", "category": "PEDs violation, repeated", "year": "2014"},
        ]
    )
    cleaned, _ = classify_records(raw)
    return aggregate_suspensions(cleaned)
